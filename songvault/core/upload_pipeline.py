"""Upload: validate input, write chunks, then register metadata."""
import itertools
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from songvault.core.chunk_store import ChunkStore
from songvault.core.errors import (
    DuplicateObjectError,
    IndexWriteError,
    StorageWriteError,
    ValidationError,
)
from songvault.core.metadata_index import MetadataIndex
from songvault.models.song import SongMetadata, normalize_artist
from songvault.models.stored_object import StoredObject

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "artist", "album", "language")


class UploadPipeline:
    """Writes an uploaded stream to the chunk store and indexes it once stored.

    allow_empty decides whether a 0-byte payload is stored or rejected.
    """

    def __init__(
        self,
        chunk_store: ChunkStore,
        index: MetadataIndex,
        allow_empty: bool = False,
    ) -> None:
        self._store = chunk_store
        self._index = index
        self.allow_empty = allow_empty

    def upload(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        stream: Optional[Iterable[bytes]],
        *,
        title: Optional[str],
        artist: Optional[str],
        album: Optional[str],
        language: Optional[str],
    ) -> StoredObject:
        if stream is None or not (filename or "").strip():
            raise ValidationError("No file uploaded.")
        fields = {"title": title, "artist": artist, "album": album, "language": language}
        missing = [k for k in REQUIRED_FIELDS if not (fields[k] or "").strip()]
        if missing:
            raise ValidationError(
                f"All metadata fields are required (missing: {', '.join(missing)})."
            )
        artist = normalize_artist(artist)
        if not artist:
            raise ValidationError("All metadata fields are required (missing: artist).")
        if self._store.exists(filename):
            raise DuplicateObjectError(f"File already exists: {filename}")

        # Peek so an empty payload is rejected before anything is written
        pieces = iter(stream)
        first = b""
        try:
            for piece in pieces:
                if piece:
                    first = piece
                    break
        except OSError as e:
            raise StorageWriteError(f"File upload failed: {e}") from e
        if not first and not self.allow_empty:
            raise ValidationError("Uploaded file is empty.")

        stored = self._store.write(filename, content_type, itertools.chain([first], pieces))

        record = SongMetadata(
            filename=filename,
            title=title.strip(),
            artist=artist,
            album=album.strip(),
            language=language.strip(),
            upload_date=datetime.now(timezone.utc).isoformat(),
        )
        try:
            self._index.register(record)
        except IndexWriteError:
            logger.error(
                "Object %r stored but metadata not indexed; it will not appear in queries",
                filename,
            )
            raise
        logger.info("Uploaded %r (%s by %s)", filename, record.title, record.artist)
        return stored
