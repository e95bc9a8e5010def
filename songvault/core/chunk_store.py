"""Chunked object storage on the local filesystem.

Layout under the store root:

    .staging/<object_id>/          in-progress writes, never read
    <sha256(name)>/manifest.json   file record (StoredObject)
    <sha256(name)>/00000000.chunk  chunk 0, then 1, 2, ...

A write fills a private staging directory and publishes it with a single
os.rename into the object's final directory. Readers only look at final
directories, so an object is either fully present or absent. Published
directories are never modified afterwards.
"""
import hashlib
import json
import logging
import os
import shutil
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, Optional

from songvault.config import CHUNK_SIZE
from songvault.core.errors import (
    DuplicateObjectError,
    NotFoundError,
    StorageReadError,
    StorageWriteError,
)
from songvault.models.stored_object import StoredObject

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
STAGING_DIR_NAME = ".staging"


def _chunk_file_name(n: int) -> str:
    return f"{n:08d}.chunk"


def _write_file(path: Path, data: bytes) -> None:
    """Write and fsync so the bytes are on disk before we move on."""
    with open(path, "wb") as f:
        f.write(data)
        f.flush()
        os.fsync(f.fileno())


def rechunk(pieces: Iterable[bytes], chunk_size: int) -> Iterator[bytes]:
    """Re-cut pieces of any size into chunk_size chunks; the last one may be shorter."""
    buf = bytearray()
    for piece in pieces:
        if not piece:
            continue
        buf += piece
        while len(buf) >= chunk_size:
            yield bytes(buf[:chunk_size])
            del buf[:chunk_size]
    if buf:
        yield bytes(buf)


class ObjectReader:
    """Forward-only reader over one published object; one chunk in memory at a time."""

    def __init__(self, directory: Path, record: StoredObject) -> None:
        self.record = record
        self._dir = directory
        self._next_chunk = 0
        self._closed = False

    @property
    def content_type(self) -> Optional[str]:
        return self.record.content_type

    @property
    def closed(self) -> bool:
        return self._closed

    def _expected_size(self, n: int) -> int:
        if n < self.record.chunk_count - 1:
            return self.record.chunk_size
        return self.record.length - self.record.chunk_size * n

    def read_chunk(self) -> Optional[bytes]:
        """Return the next chunk, or None once the object (or the reader) is exhausted."""
        if self._closed or self._next_chunk >= self.record.chunk_count:
            return None
        n = self._next_chunk
        path = self._dir / _chunk_file_name(n)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageReadError(
                f"Chunk {n} of {self.record.name!r} could not be read: {e}"
            ) from e
        if len(data) != self._expected_size(n):
            raise StorageReadError(
                f"Chunk {n} of {self.record.name!r} is {len(data)} bytes, "
                f"expected {self._expected_size(n)}"
            )
        self._next_chunk += 1
        return data

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read_chunk()
            if chunk is None:
                return
            yield chunk

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "ObjectReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ChunkStore:
    """Stores named binary objects as ordered fixed-size chunks plus a file record."""

    def __init__(self, root: Path, chunk_size: int = CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.root = Path(root)
        self.chunk_size = chunk_size
        self._staging = self.root / STAGING_DIR_NAME

    def open(self) -> None:
        """Create directories and drop staging leftovers of interrupted writes."""
        self._staging.mkdir(parents=True, exist_ok=True)
        stale = list(self._staging.iterdir())
        for path in stale:
            shutil.rmtree(path, ignore_errors=True)
        if stale:
            logger.warning("Discarded %d incomplete write(s) in %s", len(stale), self._staging)
        logger.info("Chunk store opened at %s (chunk size %d)", self.root, self.chunk_size)

    def close(self) -> None:
        logger.info("Chunk store closed at %s", self.root)

    def _object_dir(self, name: str) -> Path:
        return self.root / hashlib.sha256(name.encode("utf-8")).hexdigest()

    def _discard(self, staging: Path) -> None:
        shutil.rmtree(staging, ignore_errors=True)

    def exists(self, name: str) -> bool:
        return (self._object_dir(name) / MANIFEST_NAME).is_file()

    def find(self, name: str) -> Optional[StoredObject]:
        """Return the file record of a published object, or None."""
        path = self._object_dir(name) / MANIFEST_NAME
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise StorageReadError(f"File record of {name!r} could not be read: {e}") from e
        try:
            return StoredObject.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageReadError(f"File record of {name!r} is malformed: {e}") from e

    def open_read(self, name: str) -> ObjectReader:
        record = self.find(name)
        if record is None:
            raise NotFoundError(f"File not found: {name}")
        return ObjectReader(self._object_dir(name), record)

    def write(
        self,
        name: str,
        content_type: Optional[str],
        stream: Iterable[bytes],
    ) -> StoredObject:
        """Consume stream into chunks and publish it under name.

        Raises DuplicateObjectError if name is taken (also when a concurrent
        writer publishes first), StorageWriteError on I/O failure. Nothing is
        visible to readers unless this returns.
        """
        final_dir = self._object_dir(name)
        if self.exists(name):
            raise DuplicateObjectError(f"File already exists: {name}")

        object_id = uuid.uuid4().hex
        staging = self._staging / object_id
        try:
            staging.mkdir(parents=True)
            length = 0
            count = 0
            for chunk in rechunk(stream, self.chunk_size):
                _write_file(staging / _chunk_file_name(count), chunk)
                count += 1
                length += len(chunk)
            record = StoredObject(
                name=name,
                object_id=object_id,
                content_type=content_type or None,
                length=length,
                chunk_size=self.chunk_size,
                chunk_count=count,
                upload_date=datetime.now(timezone.utc).isoformat(),
            )
            _write_file(
                staging / MANIFEST_NAME,
                json.dumps(record.to_dict(), indent=2).encode("utf-8"),
            )
        except OSError as e:
            self._discard(staging)
            logger.error("Chunked write of %r failed: %s", name, e)
            raise StorageWriteError(f"File upload failed: {e}") from e
        except BaseException:
            self._discard(staging)
            raise

        try:
            os.rename(staging, final_dir)
        except OSError as e:
            self._discard(staging)
            if self.exists(name):
                raise DuplicateObjectError(f"File already exists: {name}") from e
            logger.error("Publishing %r failed: %s", name, e)
            raise StorageWriteError(f"File upload failed: {e}") from e

        logger.info("Stored %r: %d bytes in %d chunk(s)", name, record.length, record.chunk_count)
        return record
