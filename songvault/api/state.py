"""Shared application state (injected into routes)."""
import logging
from pathlib import Path
from typing import Optional

from songvault.config import (
    ALLOW_EMPTY_UPLOADS,
    CHUNK_SIZE,
    DATA_DIR,
    DEFAULT_CONTENT_TYPE,
    JWT_SECRET,
    OBJECTS_DIR_NAME,
    RELAY_UNIT,
    SONGS_INDEX_NAME,
    USERS_FILE_NAME,
    ensure_data_dir,
)
from songvault.core.auth import AccountService, TokenService
from songvault.core.chunk_store import ChunkStore
from songvault.core.metadata_index import MetadataIndex
from songvault.core.streaming import StreamingRetrieval
from songvault.core.upload_pipeline import UploadPipeline
from songvault.core.user_store import UserStore

logger = logging.getLogger(__name__)


class AppState:
    """Owns the long-lived store and index handles; components get references at construction."""

    def __init__(
        self,
        data_dir: Path = DATA_DIR,
        *,
        chunk_size: int = CHUNK_SIZE,
        relay_unit: int = RELAY_UNIT,
        allow_empty_uploads: bool = ALLOW_EMPTY_UPLOADS,
        jwt_secret: str = JWT_SECRET,
        token_service: Optional[TokenService] = None,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.chunk_store = ChunkStore(self.data_dir / OBJECTS_DIR_NAME, chunk_size=chunk_size)
        self.index = MetadataIndex(self.data_dir / SONGS_INDEX_NAME)
        self.users = UserStore(self.data_dir / USERS_FILE_NAME)
        self.tokens = token_service or TokenService(secret=jwt_secret)
        self.accounts = AccountService(self.users, self.tokens)
        self.uploads = UploadPipeline(
            self.chunk_store, self.index, allow_empty=allow_empty_uploads
        )
        self.retrieval = StreamingRetrieval(
            self.chunk_store,
            self.index,
            relay_unit=relay_unit,
            default_content_type=DEFAULT_CONTENT_TYPE,
        )
        self._opened = False

    @property
    def opened(self) -> bool:
        return self._opened

    def open(self) -> None:
        if self._opened:
            return
        ensure_data_dir(self.data_dir)
        self.chunk_store.open()
        self.index.open()
        self.users.open()
        self._opened = True
        logger.info("Data directory: %s", self.data_dir)

    def close(self) -> None:
        if not self._opened:
            return
        self.users.close()
        self.index.close()
        self.chunk_store.close()
        self._opened = False


_state = AppState()


def get_state() -> AppState:
    return _state
