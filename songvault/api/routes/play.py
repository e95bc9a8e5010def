"""Stream a stored song file."""
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from songvault.api.security import require_token
from songvault.api.state import AppState, get_state

router = APIRouter()


@router.get("/play/{filename}")
def play(
    filename: str,
    state: AppState = Depends(get_state),
    claims: dict = Depends(require_token),
):
    """Relay the file chunk by chunk; 404 if no complete file has that name."""
    content_type, length, body = state.retrieval.stream_by_name(filename)
    return StreamingResponse(
        body,
        media_type=content_type,
        headers={
            "Accept-Ranges": "bytes",
            "Content-Length": str(length),
        },
    )
