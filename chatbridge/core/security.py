"""Credential encryption, password hashing and access tokens."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from chatbridge.core.exceptions import AuthenticationError, ConfigurationError

_KDF_SALT = b"chatbridge.credentials"
_KDF_ITERATIONS = 390_000
_JWT_ALGORITHM = "HS256"


def _fernet_key(secret: str) -> bytes:
    """Use ``secret`` as a Fernet key when it is one, else derive a key from it."""
    try:
        if len(base64.urlsafe_b64decode(secret.encode("ascii"))) == 32:
            return secret.encode("ascii")
    except (binascii.Error, ValueError, UnicodeEncodeError):
        pass

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class CredentialCipher:
    """Reversible authenticated encryption for stored provider credentials."""

    def __init__(self, secret: str | None) -> None:
        if not secret:
            raise ConfigurationError("ENCRYPTION_KEY is not set")
        self._fernet = Fernet(_fernet_key(secret))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken as exc:
            raise ConfigurationError(
                "Stored credential could not be decrypted with the configured ENCRYPTION_KEY"
            ) from exc


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_access_token(
    user_id: int,
    username: str,
    secret: str | None,
    expires_minutes: int,
) -> str:
    """Sign a bearer token identifying ``user_id``."""
    if not secret:
        raise ConfigurationError("JWT_SECRET is not set")
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "username": username,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALGORITHM)


def decode_access_token(token: str, secret: str | None) -> dict[str, Any]:
    if not secret:
        raise ConfigurationError("JWT_SECRET is not set")
    try:
        payload = jwt.decode(token, secret, algorithms=[_JWT_ALGORITHM])
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Invalid or expired token") from exc
    if not str(payload.get("sub", "")).isdigit():
        raise AuthenticationError("Invalid or expired token")
    return payload


__all__ = [
    "CredentialCipher",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
