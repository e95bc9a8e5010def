"""FastAPI app, CORS, error mapping, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)

from songvault.api.state import AppState, get_state
from songvault.config import JWT_SECRET, WEB_ORIGIN
from songvault.core.errors import (
    DuplicateObjectError,
    IndexWriteError,
    InvalidCredentialsError,
    NotFoundError,
    SongVaultError,
    TokenInvalidError,
    TokenMissingError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)

# Import routes after state to avoid circular imports
from songvault.api.routes import auth, play, songs, upload

__all__ = ["app", "AppState", "get_state"]

logger = logging.getLogger(__name__)

# First match wins; anything else (storage and index failures) is a 500
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (InvalidCredentialsError, 400),
    (UserExistsError, 400),
    (TokenMissingError, 401),
    (TokenInvalidError, 403),
    (NotFoundError, 404),
    (UserNotFoundError, 404),
    (DuplicateObjectError, 409),
)


def status_for(exc: SongVaultError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    if JWT_SECRET == "change-me":
        logger.warning("SONGVAULT_JWT_SECRET is not set; using an insecure default")
    state = get_state()
    state.open()

    yield

    state.close()


app = FastAPI(
    title="SongVault API",
    description="Chunked song storage with metadata search and streaming playback",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[WEB_ORIGIN],
    allow_credentials=WEB_ORIGIN != "*",
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SongVaultError)
async def songvault_error_handler(request: Request, exc: SongVaultError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    content = {
        "detail": exc.message,
        "error": type(exc).__name__,
        "object_stored": exc.object_stored,
    }
    if isinstance(exc, IndexWriteError):
        content["filename"] = exc.filename
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=content, headers=headers)


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(upload.router, tags=["upload"])
app.include_router(songs.router, tags=["songs"])
app.include_router(play.router, tags=["play"])
