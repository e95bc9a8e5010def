"""Streaming playback and read-side queries over the store and index."""
import logging
from collections import Counter
from typing import Iterator, List, Tuple

from songvault.config import DEFAULT_CONTENT_TYPE, RELAY_UNIT
from songvault.core.chunk_store import ChunkStore, ObjectReader
from songvault.core.errors import NotFoundError, StorageReadError
from songvault.core.metadata_index import MetadataIndex
from songvault.models.song import ArtistCount, SongMetadata, split_artists

logger = logging.getLogger(__name__)


def relay(reader: ObjectReader, unit: int = RELAY_UNIT) -> Iterator[bytes]:
    """Yield the reader's bytes in pieces of at most unit bytes.

    Pull-driven: the next chunk is read only after the consumer has taken the
    previous piece, so at most one chunk is held regardless of consumer speed.
    The reader is closed when the relay finishes, fails, or is closed early.
    """
    sent = 0
    try:
        while True:
            chunk = reader.read_chunk()
            if chunk is None:
                break
            view = memoryview(chunk)
            for start in range(0, len(view), unit):
                piece = bytes(view[start:start + unit])
                yield piece
                sent += len(piece)
    except StorageReadError as e:
        logger.error("Stream of %r aborted after %d bytes: %s", reader.record.name, sent, e)
        raise
    finally:
        reader.close()


class StreamingRetrieval:
    """Opens stored objects for playback and answers metadata queries."""

    def __init__(
        self,
        chunk_store: ChunkStore,
        index: MetadataIndex,
        relay_unit: int = RELAY_UNIT,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        self._store = chunk_store
        self._index = index
        self.relay_unit = relay_unit
        self.default_content_type = default_content_type

    def stream_by_name(self, name: str) -> Tuple[str, int, Iterator[bytes]]:
        """Return (content_type, length, byte iterator) for a stored object."""
        reader = self._store.open_read(name)
        logger.info("Serving file: %s", name)
        content_type = reader.content_type or self.default_content_type
        return content_type, reader.record.length, relay(reader, self.relay_unit)

    def songs_by_language(self, language: str) -> List[SongMetadata]:
        songs = self._index.query_by_language(language)
        if not songs:
            raise NotFoundError(f"No songs found for language: {language}.")
        return songs

    def songs_by_artist(self, artist: str) -> List[SongMetadata]:
        songs = self._index.query_by_artist(artist)
        if not songs:
            raise NotFoundError(f"No songs found for artist: {artist}.")
        return songs

    def aggregate_by_artist(self) -> List[ArtistCount]:
        counts: Counter = Counter()
        for record in self._index.all():
            counts.update(split_artists(record.artist))
        return [ArtistCount(name, counts[name]) for name in sorted(counts)]
