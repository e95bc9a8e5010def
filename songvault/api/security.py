"""Bearer-token gate for protected routes."""
from typing import Optional

from fastapi import Depends, Header

from songvault.api.state import AppState, get_state
from songvault.core.errors import TokenInvalidError


def require_token(
    authorization: Optional[str] = Header(None),
    state: AppState = Depends(get_state),
) -> dict:
    """Return token claims.

    No header (or "Bearer" with nothing after it) raises TokenMissingError (401);
    any other scheme, a bad signature, or an expired token raises TokenInvalidError (403).
    """
    if not authorization:
        return state.tokens.verify(None)
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise TokenInvalidError("Invalid token.")
    return state.tokens.verify(token.strip())
