"""Error taxonomy for storage, index, upload, and auth failures."""


class SongVaultError(Exception):
    """Base error. object_stored tells the caller whether an upload left an object behind."""

    object_stored = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(SongVaultError):
    """Missing or unusable client input; nothing was written."""


class NotFoundError(SongVaultError):
    """Requested object or records do not exist."""


class DuplicateObjectError(SongVaultError):
    """An object with this name is already stored."""


class StorageWriteError(SongVaultError):
    """Chunked write failed; the partial object was discarded."""


class StorageReadError(SongVaultError):
    """Stored object could not be read back."""


class IndexWriteError(SongVaultError):
    """Metadata could not be persisted after the object write succeeded."""

    object_stored = True

    def __init__(self, message: str, filename: str = "") -> None:
        super().__init__(message)
        self.filename = filename


class AuthError(SongVaultError):
    """Base for credential and token failures."""


class TokenMissingError(AuthError):
    pass


class TokenInvalidError(AuthError):
    """Bad signature, malformed, or expired token."""


class InvalidCredentialsError(AuthError):
    pass


class UserNotFoundError(AuthError):
    pass


class UserExistsError(AuthError):
    pass
