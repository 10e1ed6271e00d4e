__version__ = "0.1.0"

from .models import (
    LexiconEntry as LexiconEntry,
    Lexicon as Lexicon,
    SessionState as SessionState,
    DEFAULT_LANGUAGE as DEFAULT_LANGUAGE,
    NEW_ENTRY_LABEL as NEW_ENTRY_LABEL,
    SUPPORTED_LANGUAGES as SUPPORTED_LANGUAGES,
)

from .exceptions import (
    PlsEditorError as PlsEditorError,
    CodecError as CodecError,
    MalformedXmlError as MalformedXmlError,
    MissingLexiconRootError as MissingLexiconRootError,
    EncodeError as EncodeError,
    IndexOutOfRangeError as IndexOutOfRangeError,
    ValidationError as ValidationError,
    InvalidNameError as InvalidNameError,
    NoFileLoadedError as NoFileLoadedError,
    NoSelectionError as NoSelectionError,
    LoadError as LoadError,
    StorageError as StorageError,
    UnauthorizedError as UnauthorizedError,
    NotFoundError as NotFoundError,
    TransportError as TransportError,
    ConfigError as ConfigError,
)

from .codec import (
    decode as decode,
    encode as encode,
    encode_lexicon as encode_lexicon,
)

from .storage import (
    StorageCredential as StorageCredential,
    StorageGateway as StorageGateway,
    InMemoryStorageGateway as InMemoryStorageGateway,
    DirectoryStorageGateway as DirectoryStorageGateway,
    S3StorageGateway as S3StorageGateway,
)

from .session import EditSession as EditSession

# Pure entry helpers - import as submodule
from . import lexicon

__all__ = [
    "lexicon",
    # Models
    "LexiconEntry",
    "Lexicon",
    "SessionState",
    # Constants
    "DEFAULT_LANGUAGE",
    "NEW_ENTRY_LABEL",
    "SUPPORTED_LANGUAGES",
    # Codec
    "decode",
    "encode",
    "encode_lexicon",
    # Storage
    "StorageCredential",
    "StorageGateway",
    "InMemoryStorageGateway",
    "DirectoryStorageGateway",
    "S3StorageGateway",
    # Session
    "EditSession",
    # Exceptions
    "PlsEditorError",
    "CodecError",
    "MalformedXmlError",
    "MissingLexiconRootError",
    "EncodeError",
    "IndexOutOfRangeError",
    "ValidationError",
    "InvalidNameError",
    "NoFileLoadedError",
    "NoSelectionError",
    "LoadError",
    "StorageError",
    "UnauthorizedError",
    "NotFoundError",
    "TransportError",
    "ConfigError",
]
