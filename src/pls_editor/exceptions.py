"""Custom exception hierarchy for pls-editor."""


class PlsEditorError(Exception):
    """Base exception for all pls-editor errors."""


class CodecError(PlsEditorError):
    """XML could not be decoded into, or encoded from, a lexicon."""


class MalformedXmlError(CodecError):
    """Input is not well-formed XML."""


class MissingLexiconRootError(CodecError):
    """Document root is not a <lexicon> element."""


class EncodeError(CodecError):
    """Entries could not be serialized to XML."""


class IndexOutOfRangeError(PlsEditorError, IndexError):
    """Entry, grapheme or selection index is out of range."""


class ValidationError(PlsEditorError):
    """Invalid input (e.g., removing the primary grapheme)."""


class InvalidNameError(ValidationError):
    """Lexicon file name doesn't match the allowed pattern."""


class NoFileLoadedError(PlsEditorError):
    """Operation needs an open lexicon file."""


class NoSelectionError(PlsEditorError):
    """Operation defaults to the selected entry but nothing is selected."""


class LoadError(PlsEditorError):
    """A blob was fetched but could not be loaded as a lexicon."""


class StorageError(PlsEditorError):
    """Base for object-store failures."""


class UnauthorizedError(StorageError):
    """No credential configured, or the store rejected it."""


class NotFoundError(StorageError):
    """Named blob doesn't exist."""


class TransportError(StorageError):
    """Any other failure talking to the store."""


class ConfigError(PlsEditorError):
    """Configuration file is missing fields or has the wrong shape."""

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        super().__init__(message)
