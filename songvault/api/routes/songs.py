"""Metadata queries: by language, by artist, and artist song counts."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from songvault.api.security import require_token
from songvault.api.state import AppState, get_state

router = APIRouter()


@router.get("/songs/{language}")
def list_songs_by_language(
    language: str,
    state: AppState = Depends(get_state),
    claims: dict = Depends(require_token),
):
    """List songs whose language matches exactly; 404 when there are none."""
    return [s.to_dict() for s in state.retrieval.songs_by_language(language)]


@router.get("/songs")
def list_songs_by_artist(
    artist: Optional[str] = None,
    state: AppState = Depends(get_state),
    claims: dict = Depends(require_token),
):
    """List songs whose artist field matches exactly."""
    if not artist:
        raise HTTPException(status_code=400, detail="Artist parameter is required.")
    return [s.to_dict() for s in state.retrieval.songs_by_artist(artist)]


@router.get("/top-artists")
def top_artists(state: AppState = Depends(get_state)):
    """Every credited artist with its song count, sorted by name."""
    return [a.to_dict() for a in state.retrieval.aggregate_by_artist()]


@router.get("/artist/{artist_name}/songs")
def artist_songs(artist_name: str, state: AppState = Depends(get_state)):
    return [s.to_dict() for s in state.retrieval.songs_by_artist(artist_name)]
