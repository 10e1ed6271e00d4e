"""EditSession: load/edit/save protocol over one lexicon file."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from pls_editor import codec
from pls_editor import lexicon as _lex
from pls_editor.exceptions import (
    CodecError,
    IndexOutOfRangeError,
    InvalidNameError,
    LoadError,
    NoFileLoadedError,
    NoSelectionError,
    ValidationError,
)
from pls_editor.models import (
    DEFAULT_LANGUAGE,
    XML_CONTENT_TYPE,
    LexiconEntry,
    SessionState,
)
from pls_editor.storage import StorageGateway

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]

_VALID_NAME = re.compile(r"[A-Za-z0-9_-]+\.xml")
_XML_SUFFIX = re.compile(r"\.xml$", re.IGNORECASE)


def normalize_file_name(name: str) -> str:
    """Trim ``name`` and append ``.xml`` if missing.

    Raises:
        InvalidNameError: The result isn't letters, digits, ``-`` or ``_``
            followed by ``.xml``.
    """
    final = (name or "").strip()
    if not final:
        raise InvalidNameError("Please enter a lexicon name")
    if not final.lower().endswith(".xml"):
        final += ".xml"
    if not _VALID_NAME.fullmatch(final):
        raise InvalidNameError(
            f"Invalid lexicon name {name!r}: use only letters, numbers, "
            "hyphens, and underscores"
        )
    return final


def duplicate_name(file_name: str) -> str:
    """``my-lex.xml`` -> ``duplicate-of-my-lex.xml``."""
    return f"duplicate-of-{_XML_SUFFIX.sub('', file_name)}.xml"


class EditSession:
    """Working state for one lexicon: entries, saved snapshot, selection.

    Every state-changing method returns the new :class:`SessionState` and
    passes it to listeners registered with :meth:`subscribe`. Failed
    operations leave the state untouched.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        *,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> None:
        self._gateway = gateway
        self._default_language = default_language or DEFAULT_LANGUAGE
        self._file_name = ""
        self._language = self._default_language
        self._entries: tuple[LexiconEntry, ...] = ()
        self._saved_entries: tuple[LexiconEntry, ...] = ()
        self._selected_index: int | None = None
        self._known_files: list[str] = []
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def current_file_name(self) -> str:
        return self._file_name

    @property
    def language(self) -> str:
        return self._language

    @property
    def entries(self) -> tuple[LexiconEntry, ...]:
        return self._entries

    @property
    def saved_entries(self) -> tuple[LexiconEntry, ...]:
        return self._saved_entries

    @property
    def selected_index(self) -> int | None:
        return self._selected_index

    @property
    def selected_entry(self) -> LexiconEntry | None:
        if self._selected_index is None:
            return None
        return self._entries[self._selected_index]

    @property
    def is_loaded(self) -> bool:
        return bool(self._file_name)

    @property
    def is_dirty(self) -> bool:
        """True iff the working entries differ from the last saved ones."""
        return self._entries != self._saved_entries

    @property
    def known_files(self) -> list[str]:
        return list(self._known_files)

    def snapshot(self) -> SessionState:
        return SessionState(
            file_name=self._file_name,
            language=self._language,
            entries=self._entries,
            selected_index=self._selected_index,
            is_dirty=self.is_dirty,
        )

    # ------------------------------------------------------------------
    # Change listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> SessionState:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
        return state

    # ------------------------------------------------------------------
    # File operations
    # ------------------------------------------------------------------

    def refresh_files(self) -> list[str]:
        """Replace the known file list with the gateway's listing."""
        self._known_files = list(self._gateway.list())
        logger.debug(f"Listed {len(self._known_files)} blob(s)")
        return self.known_files

    def _record_file(self, name: str) -> None:
        if name not in self._known_files:
            self._known_files.insert(0, name)

    def open(self, file_name: str) -> SessionState:
        """Fetch and decode ``file_name``; the session starts clean.

        Storage errors propagate unchanged. Decode failures raise
        :class:`LoadError`.
        """
        text = self._gateway.get(file_name)
        try:
            lexicon = codec.decode(text)
        except CodecError as e:
            logger.warning(f"Failed to load {file_name!r}: {e}")
            raise LoadError(f"Failed to parse {file_name!r}: {e}") from e

        self._file_name = file_name
        self._language = lexicon.language
        self._entries = lexicon.entries
        self._saved_entries = lexicon.entries
        self._selected_index = 0 if lexicon.entries else None
        logger.info(f"Opened {file_name!r} ({len(lexicon.entries)} entries)")
        return self._changed()

    def create_new(self, name: str, language: str | None = None) -> SessionState:
        """Start an unsaved lexicon holding one placeholder entry."""
        file_name = normalize_file_name(name)
        entries, _ = _lex.add_entry(())

        self._file_name = file_name
        self._language = language or self._default_language
        self._entries = entries
        self._saved_entries = ()
        self._selected_index = 0
        self._record_file(file_name)
        logger.info(f"Created new lexicon {file_name!r} ({self._language})")
        return self._changed()

    def duplicate(self) -> SessionState:
        """Copy the current entries into an unsaved ``duplicate-of-`` file."""
        self._require_file()
        file_name = duplicate_name(self._file_name)

        self._entries = _lex.duplicate_all(self._entries)
        self._saved_entries = ()
        self._file_name = file_name
        self._selected_index = 0 if self._entries else None
        self._record_file(file_name)
        logger.info(f"Duplicated lexicon as {file_name!r}")
        return self._changed()

    def to_xml(self) -> str:
        """Encode the working entries."""
        return codec.encode(self._language, self._entries)

    def save(self) -> SessionState:
        """Encode and upload the working entries; the session becomes clean.

        On any failure the saved snapshot is unchanged and the error
        propagates. Callers must not run two saves at once.
        """
        self._require_file()
        entries = self._entries
        text = codec.encode(self._language, entries)
        self._gateway.put(self._file_name, text, content_type=XML_CONTENT_TYPE)

        self._saved_entries = _lex.duplicate_all(entries)
        logger.info(f"Saved {self._file_name!r} ({len(entries)} entries)")
        return self._changed()

    def export(self, destination: str | Path) -> Path:
        """Write the encoded working entries to a local file."""
        self._require_file()
        path = Path(destination)
        path.write_text(self.to_xml(), encoding="utf-8")
        logger.info(f"Exported {self._file_name!r} to {path}")
        return path

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, index: int) -> SessionState:
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < len(self._entries)
        ):
            raise IndexOutOfRangeError(
                f"Cannot select entry {index!r}: {len(self._entries)} entries"
            )
        self._selected_index = index
        return self._changed()

    def select_none(self) -> SessionState:
        self._selected_index = None
        return self._changed()

    def filter(self, query: str | None) -> list[tuple[int, LexiconEntry]]:
        """Search the working entries; see :func:`lexicon.filter_entries`."""
        return _lex.filter_entries(self._entries, query)

    # ------------------------------------------------------------------
    # Entry mutations
    # ------------------------------------------------------------------

    def _require_file(self) -> None:
        if not self._file_name:
            raise NoFileLoadedError("No file loaded")

    def _target(self, entry_index: int | None) -> int:
        self._require_file()
        if entry_index is not None:
            return entry_index
        if self._selected_index is None:
            raise NoSelectionError("No entry selected")
        return self._selected_index

    def _apply(self, entries: tuple[LexiconEntry, ...]) -> SessionState:
        self._entries = entries
        return self._changed()

    def add_entry(self) -> SessionState:
        """Append a placeholder entry and select it."""
        self._require_file()
        entries, index = _lex.add_entry(self._entries)
        self._entries = entries
        self._selected_index = index
        logger.debug(f"Added entry #{index}")
        return self._changed()

    def delete_entry(self, entry_index: int | None = None) -> SessionState:
        """Delete an entry (default: the selected one); clears selection."""
        index = self._target(entry_index)
        entries = _lex.delete_entry(self._entries, index)
        self._entries = entries
        self._selected_index = None
        logger.debug(f"Deleted entry #{index}")
        return self._changed()

    def set_grapheme(
        self, grapheme_index: int, value: str, entry_index: int | None = None
    ) -> SessionState:
        index = self._target(entry_index)
        return self._apply(
            _lex.set_grapheme(self._entries, index, grapheme_index, value)
        )

    def add_grapheme(self, entry_index: int | None = None) -> SessionState:
        index = self._target(entry_index)
        return self._apply(_lex.add_grapheme(self._entries, index))

    def remove_grapheme(
        self, grapheme_index: int, entry_index: int | None = None
    ) -> SessionState:
        """Remove a grapheme variant. The primary grapheme (index 0) stays."""
        index = self._target(entry_index)
        if grapheme_index == 0:
            raise ValidationError("Cannot remove the primary grapheme")
        return self._apply(
            _lex.remove_grapheme(self._entries, index, grapheme_index)
        )

    def set_alias(
        self, value: str | None, entry_index: int | None = None
    ) -> SessionState:
        index = self._target(entry_index)
        return self._apply(_lex.set_alias(self._entries, index, value))

    def set_phoneme(
        self, value: str | None, entry_index: int | None = None
    ) -> SessionState:
        index = self._target(entry_index)
        return self._apply(_lex.set_phoneme(self._entries, index, value))
