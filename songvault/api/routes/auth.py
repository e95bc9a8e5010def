"""Account registration and login (token issuance)."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from songvault.api.state import AppState, get_state

router = APIRouter()


class RegisterBody(BaseModel):
    fullname: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class LoginBody(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
def register(body: RegisterBody, state: AppState = Depends(get_state)):
    """Create an account. Username and email must be unused."""
    state.accounts.register(body.fullname, body.email, body.username, body.password)
    return {"message": "User registered successfully."}


@router.post("/login")
def login(body: LoginBody, state: AppState = Depends(get_state)):
    """Exchange username and password for a bearer token."""
    token = state.accounts.login(body.username or "", body.password or "")
    return {"message": "Login successful.", "token": token}
