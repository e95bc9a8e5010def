"""Password hashing (bcrypt) and bearer tokens (PyJWT)."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from songvault.config import BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_EXPIRES_SEC, JWT_SECRET
from songvault.core.errors import (
    InvalidCredentialsError,
    TokenInvalidError,
    TokenMissingError,
    UserNotFoundError,
    ValidationError,
)
from songvault.core.user_store import UserStore
from songvault.models.user import User

logger = logging.getLogger(__name__)


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("ascii")


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))


class TokenService:
    """Issues and verifies signed tokens carrying user id, username and expiry."""

    def __init__(
        self,
        secret: str = JWT_SECRET,
        expires_sec: int = JWT_EXPIRES_SEC,
        algorithm: str = JWT_ALGORITHM,
    ) -> None:
        self._secret = secret
        self.expires_sec = expires_sec
        self.algorithm = algorithm

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": user.user_id,
            "username": user.username,
            "iat": now,
            "exp": now + timedelta(seconds=self.expires_sec),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> dict:
        """Return the token's claims; missing and invalid/expired tokens raise different errors."""
        if not token:
            raise TokenMissingError("Access denied. Token missing.")
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            logger.warning("Token error: %s", e)
            raise TokenInvalidError("Invalid token.") from e


class AccountService:
    """Registration and login on top of the user store."""

    def __init__(self, users: UserStore, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    def register(self, fullname: str, email: str, username: str, password: str) -> User:
        if not all((fullname, email, username, password)):
            raise ValidationError("All fields are required.")
        return self._users.add(fullname, email, username, hash_password(password))

    def login(self, username: str, password: str) -> str:
        user = self._users.get_by_username(username)
        if user is None:
            raise UserNotFoundError("User not found.")
        if not check_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid credentials.")
        return self._tokens.issue(user)
