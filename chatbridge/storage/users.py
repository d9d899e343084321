"""Storage helpers for registered users."""

from __future__ import annotations

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError

from chatbridge.core.exceptions import UserExistsError
from chatbridge.core.security import hash_password, verify_password

from .database import session_scope
from .models import User


def create_user(username: str, email: str, password: str) -> User:
    """Register a new user; username and email must both be unused."""
    with session_scope() as session:
        existing = session.scalar(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing is not None:
            raise UserExistsError()
        user = User(username=username, email=email, password_hash=hash_password(password))
        session.add(user)
        try:
            session.flush()
        except IntegrityError as exc:
            raise UserExistsError() from exc
        return user


def get_user(user_id: int) -> User | None:
    with session_scope() as session:
        return session.get(User, user_id)


def authenticate(username: str, password: str) -> User | None:
    """Return the user when ``password`` matches, else ``None``."""
    with session_scope() as session:
        user = session.scalar(select(User).where(User.username == username))
    if user is None or not verify_password(password, str(user.password_hash)):
        return None
    return user


__all__ = ["authenticate", "create_user", "get_user"]
