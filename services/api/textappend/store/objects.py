"""Object store backends holding the shared text resource.

The store owns ``last_modified_at``: it is assigned on every write and never
supplied by callers. An absent object is reported as ``None``, distinct from
an empty one. Any other failure is raised as StoreError.
"""

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError

from textappend.exceptions import StoreError

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# S3 reports a missing object differently for HEAD and GET.
_S3_MISSING_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def utc_now() -> datetime:
    """Return the current UTC time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata of an existing object."""

    key: str
    last_modified_at: datetime
    size: int


@runtime_checkable
class ObjectStore(Protocol):
    """Read, write and metadata-probe operations on whole objects."""

    def probe_metadata(self, key: str) -> ObjectMetadata | None:
        """Return metadata without transferring content, or None if absent."""
        ...

    def read_all(self, key: str) -> bytes | None:
        """Return the full content, or None if absent."""
        ...

    def write_all(self, key: str, data: bytes) -> datetime | None:
        """Replace the whole object; return the store-assigned timestamp if known."""
        ...


class InMemoryObjectStore:
    """In-memory store for tests and single-process runs.

    Timestamps strictly increase per key even when the clock stalls.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._objects: dict[str, tuple[bytes, datetime]] = {}
        self.write_count = 0

    def probe_metadata(self, key: str) -> ObjectMetadata | None:
        with self._lock:
            entry = self._objects.get(key)
        if entry is None:
            return None
        data, modified = entry
        return ObjectMetadata(key=key, last_modified_at=modified, size=len(data))

    def read_all(self, key: str) -> bytes | None:
        with self._lock:
            entry = self._objects.get(key)
        return None if entry is None else entry[0]

    def write_all(self, key: str, data: bytes) -> datetime:
        with self._lock:
            modified = self._clock()
            previous = self._objects.get(key)
            if previous is not None and modified <= previous[1]:
                modified = previous[1] + timedelta(microseconds=1)
            self._objects[key] = (bytes(data), modified)
            self.write_count += 1
        return modified


class LocalFileObjectStore:
    """One file per key under a root directory.

    Modification times come from the filesystem (``st_mtime_ns``) and writes
    replace the file atomically, so readers never see a partial object.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def _path(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise StoreError(f"Key escapes store root: {key}")
        return path

    def probe_metadata(self, key: str) -> ObjectMetadata | None:
        path = self._path(key)
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"stat {path} failed: {e}") from e
        return ObjectMetadata(
            key=key,
            last_modified_at=_EPOCH + timedelta(microseconds=stat.st_mtime_ns // 1000),
            size=stat.st_size,
        )

    def read_all(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"read {path} failed: {e}") from e

    def write_all(self, key: str, data: bytes) -> datetime | None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StoreError(f"write {path} failed: {e}") from e
        metadata = self.probe_metadata(key)
        return metadata.last_modified_at if metadata else None


class S3ObjectStore:
    """Shared resource kept as a single S3 object."""

    def __init__(self, client: Any, bucket: str) -> None:
        """Create a store over ``bucket``.

        Args:
            client: A boto3 S3 client (configured with timeouts, single attempt).
            bucket: Bucket holding the resource.
        """
        self._client = client
        self._bucket = bucket

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        return error.response.get("Error", {}).get("Code") in _S3_MISSING_CODES

    def probe_metadata(self, key: str) -> ObjectMetadata | None:
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise StoreError(f"S3 head_object {self._bucket}/{key} failed: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"S3 head_object {self._bucket}/{key} failed: {e}") from e
        return ObjectMetadata(
            key=key,
            last_modified_at=response["LastModified"],
            size=int(response.get("ContentLength", 0)),
        )

    def read_all(self, key: str) -> bytes | None:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise StoreError(f"S3 get_object {self._bucket}/{key} failed: {e}") from e
        except BotoCoreError as e:
            raise StoreError(f"S3 get_object {self._bucket}/{key} failed: {e}") from e

    def write_all(self, key: str, data: bytes) -> datetime | None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType="text/plain",
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"S3 put_object {self._bucket}/{key} failed: {e}") from e

        # The write already landed; a failed follow-up probe only loses the timestamp.
        try:
            metadata = self.probe_metadata(key)
        except StoreError as e:
            logger.warning("Post-write probe failed, timestamp unknown: %s", e)
            return None
        return metadata.last_modified_at if metadata else None
