from datetime import datetime, timedelta, timezone

import pytest

from songvault.core.auth import AccountService, TokenService, check_password, hash_password
from songvault.core.errors import (
    InvalidCredentialsError,
    StorageReadError,
    TokenInvalidError,
    TokenMissingError,
    UserExistsError,
    UserNotFoundError,
    ValidationError,
)
from songvault.core.user_store import UserStore
from songvault.models.user import User

USER = User("u-1", "Test User", "t@example.com", "tester", "unused", "2024-01-01T00:00:00+00:00")


@pytest.fixture
def accounts(tmp_path):
    users = UserStore(tmp_path / "users.json")
    users.open()
    return AccountService(users, TokenService(secret="s3cret"))


def test_password_hash_round_trip():
    hashed = hash_password("hunter2", rounds=4)
    assert hashed != "hunter2"
    assert check_password("hunter2", hashed)
    assert not check_password("hunter3", hashed)


def test_token_carries_user_claims():
    tokens = TokenService(secret="s3cret")
    claims = tokens.verify(tokens.issue(USER))
    assert claims["sub"] == "u-1"
    assert claims["username"] == "tester"


def test_missing_and_invalid_tokens_raise_different_errors():
    tokens = TokenService(secret="s3cret")
    with pytest.raises(TokenMissingError):
        tokens.verify(None)
    with pytest.raises(TokenMissingError):
        tokens.verify("")
    with pytest.raises(TokenInvalidError):
        tokens.verify("not-a-jwt")
    with pytest.raises(TokenInvalidError):
        tokens.verify(TokenService(secret="other").issue(USER))


def test_expired_token_is_invalid():
    tokens = TokenService(secret="s3cret", expires_sec=60)
    token = tokens.issue(USER, now=datetime.now(timezone.utc) - timedelta(hours=2))
    with pytest.raises(TokenInvalidError):
        tokens.verify(token)


def test_register_and_login(accounts):
    accounts.register("Test User", "t@example.com", "tester", "pw")
    token = accounts.login("tester", "pw")
    assert token


def test_register_requires_all_fields(accounts):
    with pytest.raises(ValidationError):
        accounts.register("Test User", "", "tester", "pw")


def test_register_rejects_taken_username_or_email(accounts):
    accounts.register("Test User", "t@example.com", "tester", "pw")
    with pytest.raises(UserExistsError):
        accounts.register("Other", "o@example.com", "tester", "pw")
    with pytest.raises(UserExistsError):
        accounts.register("Other", "t@example.com", "other", "pw")


def test_login_failures(accounts):
    accounts.register("Test User", "t@example.com", "tester", "pw")
    with pytest.raises(UserNotFoundError):
        accounts.login("nobody", "pw")
    with pytest.raises(InvalidCredentialsError):
        accounts.login("tester", "wrong")


def test_users_persist_across_reopen(tmp_path):
    path = tmp_path / "users.json"
    first = UserStore(path)
    first.open()
    first.add("Test User", "t@example.com", "tester", "hash")

    second = UserStore(path)
    second.open()
    assert second.get_by_username("tester").email == "t@example.com"


def test_unreadable_users_file_refuses_to_open(tmp_path):
    path = tmp_path / "users.json"
    path.write_text('{"users": [')
    with pytest.raises(StorageReadError):
        UserStore(path).open()
    assert path.read_text() == '{"users": ['
