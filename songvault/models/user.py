"""User account record."""
from dataclasses import dataclass


@dataclass
class User:
    """Stored account; password_hash is a bcrypt hash."""
    user_id: str
    fullname: str
    email: str
    username: str
    password_hash: str
    created_at: str
