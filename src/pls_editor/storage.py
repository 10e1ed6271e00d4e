"""Storage gateways: list/get/put of named lexicon blobs.

The edit session only talks to the :class:`StorageGateway` interface.
Credentials are explicit :class:`StorageCredential` objects handed to the
gateway that needs them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pls_editor.exceptions import (
    NotFoundError,
    StorageError,
    TransportError,
    UnauthorizedError,
)
from pls_editor.models import XML_CONTENT_TYPE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StorageCredential:
    """Access key pair for an object store."""

    access_key_id: str
    secret_access_key: str = field(repr=False)


class StorageGateway(ABC):
    """List, fetch and overwrite named text blobs in one container."""

    @abstractmethod
    def list(self) -> list[str]:
        """Return blob names in the container."""

    @abstractmethod
    def get(self, name: str) -> str:
        """Return the text of blob ``name``."""

    @abstractmethod
    def put(
        self, name: str, text: str, content_type: str = XML_CONTENT_TYPE
    ) -> None:
        """Create or replace blob ``name`` with ``text``."""


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryStorageGateway(StorageGateway):
    """Dict-backed gateway for tests and embedding."""

    def __init__(self, blobs: dict[str, str] | None = None) -> None:
        self.blobs: dict[str, str] = dict(blobs or {})
        self.content_types: dict[str, str] = {}

    def list(self) -> list[str]:
        return sorted(self.blobs)

    def get(self, name: str) -> str:
        try:
            return self.blobs[name]
        except KeyError:
            raise NotFoundError(f"Blob not found: {name!r}") from None

    def put(
        self, name: str, text: str, content_type: str = XML_CONTENT_TYPE
    ) -> None:
        self.blobs[name] = text
        self.content_types[name] = content_type


# ---------------------------------------------------------------------------
# Local directory
# ---------------------------------------------------------------------------

class DirectoryStorageGateway(StorageGateway):
    """Blobs stored as UTF-8 files directly inside one directory."""

    def __init__(self, root: str | Path, *, create: bool = True) -> None:
        self.root = Path(root)
        if create:
            self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path | None:
        """Resolve ``name`` inside the root; None if it would escape it."""
        if not name or name in (".", "..") or any(c in name for c in "/\\\x00"):
            return None
        return self.root / name

    def list(self) -> list[str]:
        try:
            return sorted(p.name for p in self.root.iterdir() if p.is_file())
        except OSError as e:
            raise TransportError(f"Failed to list {self.root}: {e}") from e

    def get(self, name: str) -> str:
        path = self._path(name)
        if path is None or not path.is_file():
            raise NotFoundError(f"Blob not found: {name!r}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TransportError(f"Failed to read {path}: {e}") from e

    def put(
        self, name: str, text: str, content_type: str = XML_CONTENT_TYPE
    ) -> None:
        path = self._path(name)
        if path is None:
            raise TransportError(f"Invalid blob name: {name!r}")
        try:
            path.write_text(text, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to write {path}: {e}") from e


# ---------------------------------------------------------------------------
# S3
# ---------------------------------------------------------------------------

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_UNAUTHORIZED_CODES = frozenset({
    "401",
    "403",
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
})

# Connection-level failures worth another attempt
_TRANSIENT_ERRORS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)

_retry_transient = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(_TRANSIENT_ERRORS),
    reraise=True,
)


def _translate_client_error(e: ClientError, name: str | None) -> StorageError:
    error = e.response.get("Error", {})
    code = str(error.get("Code", ""))
    status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    target = f" {name!r}" if name else ""

    if code in _NOT_FOUND_CODES or status == 404:
        return NotFoundError(f"Blob not found:{target}")
    if code in _UNAUTHORIZED_CODES or status in (401, 403):
        return UnauthorizedError(f"Storage rejected credential ({code or status})")
    return TransportError(f"S3 error{target}: {code} {error.get('Message', '')}".rstrip())


class S3StorageGateway(StorageGateway):
    """Gateway over one S3 bucket, optionally under a key prefix.

    ``client`` may be supplied to reuse an existing boto3 client; otherwise
    one is created on first use from ``credential``.
    """

    def __init__(
        self,
        bucket: str,
        credential: StorageCredential | None,
        *,
        prefix: str = "",
        region: str | None = None,
        endpoint_url: str | None = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self.endpoint_url = endpoint_url
        self._credential = credential
        self._client = client

    def _s3(self) -> Any:
        if self._credential is None:
            raise UnauthorizedError("No storage credential configured")
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                aws_access_key_id=self._credential.access_key_id,
                aws_secret_access_key=self._credential.secret_access_key,
            )
        return self._client

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def list(self) -> list[str]:
        s3 = self._s3()
        try:
            keys = self._list_keys(s3)
        except ClientError as e:
            raise _translate_client_error(e, None) from e
        except BotoCoreError as e:
            raise TransportError(f"Failed to list bucket {self.bucket!r}: {e}") from e
        return [k[len(self.prefix):] for k in keys]

    def get(self, name: str) -> str:
        s3 = self._s3()
        try:
            data = self._get_object(s3, self._key(name))
        except ClientError as e:
            raise _translate_client_error(e, name) from e
        except BotoCoreError as e:
            raise TransportError(f"Failed to download {name!r}: {e}") from e
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransportError(f"Blob {name!r} is not UTF-8 text: {e}") from e

    def put(
        self, name: str, text: str, content_type: str = XML_CONTENT_TYPE
    ) -> None:
        s3 = self._s3()
        try:
            self._put_object(s3, self._key(name), text.encode("utf-8"), content_type)
        except ClientError as e:
            raise _translate_client_error(e, name) from e
        except BotoCoreError as e:
            raise TransportError(f"Failed to upload {name!r}: {e}") from e
        logger.info(f"Uploaded {name!r} to s3://{self.bucket}/{self._key(name)}")

    # --- boto3 calls (retried on connection failures) ---

    @_retry_transient
    def _list_keys(self, s3: Any) -> list[str]:
        paginator = s3.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=self.bucket, Prefix=self.prefix):
            for obj in page.get("Contents", []):
                keys.append(obj["Key"])
        return keys

    @_retry_transient
    def _get_object(self, s3: Any, key: str) -> bytes:
        response = s3.get_object(Bucket=self.bucket, Key=key)
        return response["Body"].read()

    @_retry_transient
    def _put_object(
        self, s3: Any, key: str, data: bytes, content_type: str
    ) -> None:
        s3.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )
