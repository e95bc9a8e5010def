"""Data models for stored objects, song metadata, and users."""
from songvault.models.song import ArtistCount, SongMetadata
from songvault.models.stored_object import StoredObject
from songvault.models.user import User

__all__ = [
    "ArtistCount",
    "SongMetadata",
    "StoredObject",
    "User",
]
