"""Multipart upload of a song file with its metadata."""
from typing import BinaryIO, Iterator, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from songvault.api.security import require_token
from songvault.api.state import AppState, get_state

router = APIRouter()


def _iter_upload(f: BinaryIO, size: int) -> Iterator[bytes]:
    while True:
        buf = f.read(size)
        if not buf:
            break
        yield buf


@router.post("/upload")
def upload_song(
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    album: Optional[str] = Form(None),
    language: Optional[str] = Form(None),
    state: AppState = Depends(get_state),
    claims: dict = Depends(require_token),
):
    """Store the file in chunks, then index its metadata."""
    filename = file.filename if file else None
    content_type = file.content_type if file else None
    stream = _iter_upload(file.file, state.chunk_store.chunk_size) if file else None
    stored = state.uploads.upload(
        filename,
        content_type,
        stream,
        title=title,
        artist=artist,
        album=album,
        language=language,
    )
    return {
        "message": "File uploaded successfully.",
        "filename": stored.name,
        "length": stored.length,
        "content_type": stored.content_type,
    }
