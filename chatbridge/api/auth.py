"""Registration, login and identity endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from chatbridge.api.deps import CurrentUser
from chatbridge.api.schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from chatbridge.core.config import load_settings
from chatbridge.core.exceptions import AuthenticationError
from chatbridge.core.security import create_access_token
from chatbridge.storage import users
from chatbridge.storage.models import User

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _auth_response(user: User) -> AuthResponse:
    settings = load_settings()
    token = create_access_token(
        int(user.id), str(user.username), settings.jwt_secret, settings.jwt_expires_minutes
    )
    return AuthResponse(user=UserOut.model_validate(user), token=token)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(payload: RegisterRequest) -> AuthResponse:
    user = users.create_user(payload.username, payload.email, payload.password)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest) -> AuthResponse:
    user = users.authenticate(payload.username, payload.password)
    if user is None:
        raise AuthenticationError()
    return _auth_response(user)


@router.get("/me", response_model=UserOut)
def me(user: CurrentUser) -> User:
    return user
