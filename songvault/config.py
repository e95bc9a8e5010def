"""Configuration: env, data paths, chunking, auth secrets."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of songvault package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SONGVAULT_JWT_SECRET etc. are set
load_dotenv(BASE_DIR / ".env")
DATA_DIR = Path(os.getenv("SONGVAULT_DATA_DIR", str(BASE_DIR / "data")))
OBJECTS_DIR_NAME = "objects"
SONGS_INDEX_NAME = "songs.json"
USERS_FILE_NAME = "users.json"

# API
API_HOST = os.getenv("SONGVAULT_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("SONGVAULT_API_PORT", "3000"))
API_RELOAD = os.getenv("SONGVAULT_API_RELOAD", "0").lower() in ("1", "true", "yes")
# CORS origin for the web client; "*" allows any
WEB_ORIGIN = os.getenv("SONGVAULT_WEB_ORIGIN", "*")

# Storage: 255 KiB chunks (GridFS default)
CHUNK_SIZE = int(os.getenv("SONGVAULT_CHUNK_SIZE", str(255 * 1024)))
# Largest unit handed to the HTTP response per iteration during playback
RELAY_UNIT = int(os.getenv("SONGVAULT_RELAY_UNIT", str(64 * 1024)))
ALLOW_EMPTY_UPLOADS = os.getenv("SONGVAULT_ALLOW_EMPTY_UPLOADS", "0").lower() in ("1", "true", "yes")
DEFAULT_CONTENT_TYPE = os.getenv("SONGVAULT_DEFAULT_CONTENT_TYPE", "audio/mpeg")

# Auth (HS256 bearer tokens)
JWT_SECRET = os.getenv("SONGVAULT_JWT_SECRET", "change-me")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_SEC = int(os.getenv("SONGVAULT_JWT_EXPIRES_SEC", "3600"))
BCRYPT_ROUNDS = int(os.getenv("SONGVAULT_BCRYPT_ROUNDS", "10"))


def ensure_data_dir(data_dir: Path = DATA_DIR) -> None:
    data_dir.mkdir(parents=True, exist_ok=True)
