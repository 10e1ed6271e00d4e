"""Pure mutation helpers over a sequence of lexicon entries.

Every function takes the current entries and returns a new tuple; the input
is never modified, so the previous value can be compared against the result
for dirty checking.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from pls_editor.exceptions import IndexOutOfRangeError
from pls_editor.models import NEW_ENTRY_LABEL, LexiconEntry

Entries = tuple[LexiconEntry, ...]


def _check_index(index: int, size: int, what: str) -> None:
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < size:
        raise IndexOutOfRangeError(
            f"{what} index {index!r} out of range (0..{size - 1})"
            if size else f"{what} index {index!r} out of range (empty)"
        )


def _get_entry(entries: Sequence[LexiconEntry], entry_index: int) -> LexiconEntry:
    _check_index(entry_index, len(entries), "Entry")
    return entries[entry_index]


def _replace_at(
    entries: Sequence[LexiconEntry], index: int, entry: LexiconEntry
) -> Entries:
    return (*entries[:index], entry, *entries[index + 1:])


def new_entry() -> LexiconEntry:
    """Return the placeholder entry used for new lexicons and added entries."""
    return LexiconEntry(graphemes=(NEW_ENTRY_LABEL,), alias="", phoneme="")


def add_entry(entries: Sequence[LexiconEntry]) -> tuple[Entries, int]:
    """Append a placeholder entry; return the new entries and its index."""
    return (*entries, new_entry()), len(entries)


def delete_entry(entries: Sequence[LexiconEntry], index: int) -> Entries:
    """Remove the entry at ``index``."""
    _check_index(index, len(entries), "Entry")
    return (*entries[:index], *entries[index + 1:])


def set_grapheme(
    entries: Sequence[LexiconEntry],
    entry_index: int,
    grapheme_index: int,
    value: str,
) -> Entries:
    """Replace one grapheme of one entry."""
    entry = _get_entry(entries, entry_index)
    _check_index(grapheme_index, len(entry.graphemes), "Grapheme")
    graphemes = list(entry.graphemes)
    graphemes[grapheme_index] = value
    return _replace_at(
        entries, entry_index, replace(entry, graphemes=tuple(graphemes))
    )


def add_grapheme(entries: Sequence[LexiconEntry], entry_index: int) -> Entries:
    """Append an empty grapheme slot to an entry."""
    entry = _get_entry(entries, entry_index)
    return _replace_at(
        entries, entry_index, replace(entry, graphemes=(*entry.graphemes, ""))
    )


def remove_grapheme(
    entries: Sequence[LexiconEntry], entry_index: int, grapheme_index: int
) -> Entries:
    """Remove one grapheme from an entry.

    No minimum is enforced here: removing the last grapheme leaves an entry
    with an empty ``graphemes`` tuple. :class:`~pls_editor.session.EditSession`
    guards the primary grapheme.
    """
    entry = _get_entry(entries, entry_index)
    _check_index(grapheme_index, len(entry.graphemes), "Grapheme")
    graphemes = (
        *entry.graphemes[:grapheme_index],
        *entry.graphemes[grapheme_index + 1:],
    )
    return _replace_at(entries, entry_index, replace(entry, graphemes=graphemes))


def set_alias(
    entries: Sequence[LexiconEntry], entry_index: int, value: str | None
) -> Entries:
    entry = _get_entry(entries, entry_index)
    return _replace_at(entries, entry_index, replace(entry, alias=value or ""))


def set_phoneme(
    entries: Sequence[LexiconEntry], entry_index: int, value: str | None
) -> Entries:
    entry = _get_entry(entries, entry_index)
    return _replace_at(entries, entry_index, replace(entry, phoneme=value or ""))


def duplicate_all(entries: Sequence[LexiconEntry]) -> Entries:
    """Copy every entry into new objects with their own grapheme tuples."""
    return tuple(
        LexiconEntry(
            graphemes=tuple(g for g in e.graphemes),
            alias=e.alias,
            phoneme=e.phoneme,
        )
        for e in entries
    )


def filter_entries(
    entries: Sequence[LexiconEntry], query: str | None
) -> list[tuple[int, LexiconEntry]]:
    """Case-insensitive search over graphemes, alias and phoneme.

    Returns ``(original_index, entry)`` pairs; a blank query matches all.
    """
    indexed = list(enumerate(entries))
    if not query or not query.strip():
        return indexed
    q = query.lower()
    return [
        (idx, e) for idx, e in indexed
        if any(q in g.lower() for g in e.graphemes)
        or q in e.alias.lower()
        or q in e.phoneme.lower()
    ]
