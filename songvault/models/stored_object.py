"""File record of a chunked binary object."""
from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class StoredObject:
    """Published object: name, content type and chunk layout."""
    name: str
    object_id: str
    content_type: Optional[str]
    length: int
    chunk_size: int
    chunk_count: int
    upload_date: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "StoredObject":
        return cls(
            name=data["name"],
            object_id=data["object_id"],
            content_type=data.get("content_type"),
            length=int(data["length"]),
            chunk_size=int(data["chunk_size"]),
            chunk_count=int(data["chunk_count"]),
            upload_date=data["upload_date"],
        )
