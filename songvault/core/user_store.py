"""Persist and load user accounts (JSON)."""
import json
import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from songvault.core.errors import StorageReadError, StorageWriteError, UserExistsError
from songvault.models.user import User

logger = logging.getLogger(__name__)


def load_users(path: Path) -> List[User]:
    """Load all users from disk."""
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.error("Could not read users file %s: %s", path, e)
        raise StorageReadError(f"Users file {path} could not be read: {e}") from e
    if not isinstance(data, dict):
        raise StorageReadError(f"Users file {path} is not a JSON object")
    out = []
    for item in data.get("users", []):
        try:
            out.append(
                User(
                    user_id=item["user_id"],
                    fullname=item["fullname"],
                    email=item["email"],
                    username=item["username"],
                    password_hash=item["password_hash"],
                    created_at=item["created_at"],
                )
            )
        except (KeyError, TypeError):
            continue
    return out


def save_users(path: Path, users: List[User]) -> None:
    data = {
        "users": [
            {
                "user_id": u.user_id,
                "fullname": u.fullname,
                "email": u.email,
                "username": u.username,
                "password_hash": u.password_hash,
                "created_at": u.created_at,
            }
            for u in users
        ]
    }
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(tmp, path)


class UserStore:
    """Account storage; username and email are unique."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._users: List[User] = []
        self._lock = threading.Lock()

    def open(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._users = load_users(self.path)

    def close(self) -> None:
        pass

    def get_by_username(self, username: str) -> Optional[User]:
        for u in self._users:
            if u.username == username:
                return u
        return None

    def add(self, fullname: str, email: str, username: str, password_hash: str) -> User:
        with self._lock:
            for u in self._users:
                if u.username == username or u.email == email:
                    raise UserExistsError("Username or email already exists.")
            user = User(
                user_id=str(uuid.uuid4()),
                fullname=fullname,
                email=email,
                username=username,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
            users = self._users + [user]
            try:
                save_users(self.path, users)
            except OSError as e:
                logger.error("Saving users file %s failed: %s", self.path, e)
                raise StorageWriteError(f"Error saving user account: {e}") from e
            self._users = users
        logger.info("Registered user %s", username)
        return user
