"""Persist and query song metadata (JSON)."""
import json
import logging
import os
import threading
from pathlib import Path
from typing import List

from songvault.core.errors import IndexWriteError, StorageReadError
from songvault.models.song import SongMetadata, normalize_artist

logger = logging.getLogger(__name__)


def _record_from_dict(item: dict) -> SongMetadata:
    return SongMetadata(
        filename=item["filename"],
        title=item["title"],
        artist=item["artist"],
        album=item["album"],
        language=item["language"],
        upload_date=item["upload_date"],
    )


def load_records(path: Path) -> List[SongMetadata]:
    """Load all song records from disk; skip malformed entries.

    An index file that exists but cannot be parsed raises StorageReadError
    rather than starting empty, which would overwrite it on the next save.
    """
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Could not read song index %s: %s", path, e)
        raise StorageReadError(f"Song index {path} could not be read: {e}") from e
    if not isinstance(data, dict):
        raise StorageReadError(f"Song index {path} is not a JSON object")
    out = []
    for item in data.get("songs", []):
        try:
            out.append(_record_from_dict(item))
        except (KeyError, TypeError):
            logger.warning("Skipping malformed song record: %r", item)
            continue
    return out


def save_records(path: Path, records: List[SongMetadata]) -> None:
    """Save all song records; readers of the file never see a half-written index."""
    data = {"songs": [r.to_dict() for r in records]}
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(tmp, path)


class MetadataIndex:
    """SongMetadata records keyed by filename, queryable by language and artist.

    Filenames are not unique at this layer; register() appends whatever it is given.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._records: List[SongMetadata] = []
        self._lock = threading.Lock()

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._records = load_records(self.path)
        logger.info("Song index opened at %s (%d records)", self.path, len(self._records))

    def close(self) -> None:
        logger.info("Song index closed at %s", self.path)

    def register(self, record: SongMetadata) -> None:
        with self._lock:
            records = self._records + [record]
            try:
                save_records(self.path, records)
            except OSError as e:
                raise IndexWriteError(
                    f"Error saving song metadata: {e}", filename=record.filename
                ) from e
            self._records = records

    def all(self) -> List[SongMetadata]:
        return list(self._records)

    def query_by_language(self, language: str) -> List[SongMetadata]:
        return [r for r in self._records if r.language == language]

    def query_by_artist(self, artist: str) -> List[SongMetadata]:
        """Exact match on the stored artist string ("A, B" does not match "A").

        The query is normalized the same way uploads are, so "A,B" finds "A, B".
        """
        artist = normalize_artist(artist)
        return [r for r in self._records if r.artist == artist]
