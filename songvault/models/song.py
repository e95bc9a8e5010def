"""Song metadata records and artist aggregates."""
from dataclasses import dataclass
from typing import List

ARTIST_DELIMITER = ","


def split_artists(artist: str) -> List[str]:
    """Split a comma-joined artist string into trimmed, non-empty names."""
    return [name.strip() for name in artist.split(ARTIST_DELIMITER) if name.strip()]


def join_artists(names: List[str]) -> str:
    return f"{ARTIST_DELIMITER} ".join(names)


def normalize_artist(artist: str) -> str:
    """'A ,B,, C' -> 'A, B, C'."""
    return join_artists(split_artists(artist))


@dataclass(frozen=True)
class SongMetadata:
    """Index record for one stored song file."""
    filename: str
    title: str
    artist: str  # comma-joined, e.g. "A, B"
    album: str
    language: str
    upload_date: str

    @property
    def artists(self) -> List[str]:
        return split_artists(self.artist)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "language": self.language,
            "upload_date": self.upload_date,
        }


@dataclass(frozen=True)
class ArtistCount:
    """Number of songs credited to one artist name."""
    artist_name: str
    song_count: int

    def to_dict(self) -> dict:
        return {"artistName": self.artist_name, "songCount": self.song_count}
