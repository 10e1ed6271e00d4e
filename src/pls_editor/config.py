"""
YAML configuration for pls-editor.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError
from .models import DEFAULT_LANGUAGE
from .storage import (
    DirectoryStorageGateway,
    InMemoryStorageGateway,
    S3StorageGateway,
    StorageCredential,
    StorageGateway,
)

ENV_ACCESS_KEY_ID = "PLS_EDITOR_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "PLS_EDITOR_SECRET_ACCESS_KEY"

BACKENDS = ("s3", "directory", "memory")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StorageConfig:
    """Where lexicon blobs live."""
    backend: str = "directory"
    bucket: Optional[str] = None
    prefix: str = ""
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    path: Optional[Path] = None


@dataclass
class Config:
    """Parsed pls-editor configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    credential: Optional[StorageCredential] = None
    default_language: str = DEFAULT_LANGUAGE
    log_level: str = "WARNING"
    source_path: Optional[Path] = None


def load_config(
    source: Union[str, Path, Dict[str, Any], None] = None,
    *,
    environ: Optional[Dict[str, str]] = None,
) -> Config:
    """Load configuration from a YAML file, YAML string, or dictionary.

    Args:
        source: Path to YAML file, YAML string, parsed dictionary, or None
            for defaults
        environ: Environment mapping for credential overrides
            (defaults to ``os.environ``)

    Returns:
        Config object

    Raises:
        ConfigError: If the YAML cannot be parsed or has the wrong shape
        FileNotFoundError: If the file does not exist
    """
    source_path: Optional[Path] = None

    if source is None:
        data: Dict[str, Any] = {}
    elif isinstance(source, dict):
        data = source
    elif isinstance(source, Path) or (isinstance(source, str) and _is_file_path(source)):
        source_path = Path(source)
        if not source_path.exists():
            raise FileNotFoundError(f"File not found: {source_path}")
        with open(source_path, "r", encoding="utf-8") as f:
            data = _load_yaml(f)
    else:
        data = _load_yaml(source)

    env = os.environ if environ is None else environ
    return _parse_config(data, source_path, env)


def _is_file_path(s: str) -> bool:
    """Check if a string looks like a file path."""
    if "\n" in s:
        return False
    if "/" in s or "\\" in s:
        return True
    return s.endswith((".yaml", ".yml"))


def _load_yaml(stream: Any) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        line_num = mark.line + 1 if mark else None
        raise ConfigError(f"Invalid YAML: {e}", line=line_num) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _optional_str(section: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Field '{where}.{key}' must be a string")
    return value


def _parse_config(
    data: Dict[str, Any],
    source_path: Optional[Path],
    environ: Any,
) -> Config:
    storage_data = data.get("storage", {}) or {}
    if not isinstance(storage_data, dict):
        raise ConfigError("Field 'storage' must be a mapping")

    backend = storage_data.get("backend", "directory")
    if backend not in BACKENDS:
        raise ConfigError(
            f"Unknown storage backend {backend!r} (expected one of {', '.join(BACKENDS)})"
        )

    path = _optional_str(storage_data, "path", "storage")
    storage = StorageConfig(
        backend=backend,
        bucket=_optional_str(storage_data, "bucket", "storage"),
        prefix=_optional_str(storage_data, "prefix", "storage") or "",
        region=_optional_str(storage_data, "region", "storage"),
        endpoint_url=_optional_str(storage_data, "endpoint_url", "storage"),
        path=Path(path) if path else None,
    )

    # Relative directory paths are relative to the config file
    if storage.path is not None and source_path is not None and not storage.path.is_absolute():
        storage.path = source_path.parent / storage.path

    if backend == "s3" and not storage.bucket:
        raise ConfigError("Field 'storage.bucket' is required for the s3 backend")
    if backend == "directory" and storage.path is None:
        storage.path = Path("lexicons")

    cred_data = data.get("credentials", {}) or {}
    if not isinstance(cred_data, dict):
        raise ConfigError("Field 'credentials' must be a mapping")
    key_id = environ.get(ENV_ACCESS_KEY_ID) or _optional_str(
        cred_data, "access_key_id", "credentials"
    )
    secret = environ.get(ENV_SECRET_ACCESS_KEY) or _optional_str(
        cred_data, "secret_access_key", "credentials"
    )
    credential = None
    if key_id and secret:
        credential = StorageCredential(access_key_id=key_id, secret_access_key=secret)
    elif key_id or secret:
        raise ConfigError(
            "Credentials need both 'access_key_id' and 'secret_access_key'"
        )

    default_language = data.get("default_language", DEFAULT_LANGUAGE)
    if not isinstance(default_language, str) or not default_language:
        raise ConfigError("Field 'default_language' must be a non-empty string")

    log_level = str(data.get("log_level", "WARNING")).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"Unknown log_level {log_level!r}")

    return Config(
        storage=storage,
        credential=credential,
        default_language=default_language,
        log_level=log_level,
        source_path=source_path,
    )


def build_gateway(config: Config) -> StorageGateway:
    """Create the storage gateway described by ``config``."""
    storage = config.storage
    if storage.backend == "s3":
        return S3StorageGateway(
            storage.bucket,
            config.credential,
            prefix=storage.prefix,
            region=storage.region,
            endpoint_url=storage.endpoint_url,
        )
    if storage.backend == "memory":
        return InMemoryStorageGateway()
    return DirectoryStorageGateway(storage.path)


def configure_logging(config: Config, *, verbose: bool = False) -> None:
    """Set up root logging from the config level (DEBUG when verbose)."""
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
