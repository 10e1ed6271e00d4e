"""Domain model dataclasses and constants for pls-editor."""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_LANGUAGE = "en-US"

NEW_ENTRY_LABEL = "*** NEW ENTRY ***"

XML_CONTENT_TYPE = "application/xml"

# Language tags offered when creating a lexicon, in display order
SUPPORTED_LANGUAGES: dict[str, str] = {
    "en-US": "English (United States)",
    "en-GB": "English (United Kingdom)",
    "en-CA": "English (Canada)",
    "en-AU": "English (Australia)",
    "en-NZ": "English (New Zealand)",
    "en-IN": "English (India)",
    "en-IE": "English (Ireland)",
    "zh-CN": "Chinese (Mandarin, Simplified)",
    "fr-CA": "French (Canada)",
    "fr-FR": "French (France)",
    "de-DE": "German (Germany)",
    "ja-JP": "Japanese (Japan)",
    "pt-BR": "Portuguese (Brazil)",
    "es-MX": "Spanish (Mexico)",
    "es-ES": "Spanish (Spain)",
}


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class LexiconEntry:
    """A lexeme: written forms plus optional alias and IPA phoneme.

    An empty ``alias`` or ``phoneme`` means the field is absent; the codec
    omits it from the XML.
    """

    graphemes: tuple[str, ...]
    alias: str = ""
    phoneme: str = ""

    @property
    def label(self) -> str:
        """The first grapheme, used as the entry's display label."""
        return self.graphemes[0] if self.graphemes else ""


@dataclass(frozen=True, slots=True)
class Lexicon:
    """A pronunciation lexicon: language tag and ordered entries."""

    language: str = DEFAULT_LANGUAGE
    entries: tuple[LexiconEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class SessionState:
    """Snapshot of an edit session, handed to callers and listeners."""

    file_name: str
    language: str
    entries: tuple[LexiconEntry, ...]
    selected_index: int | None
    is_dirty: bool
