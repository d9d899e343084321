"""Storage helpers for per-user provider credentials."""

from __future__ import annotations

import logging
from typing import cast

from sqlalchemy import select

from chatbridge.core.exceptions import MissingCredentialError
from chatbridge.core.security import CredentialCipher

from .database import session_scope
from .models import Credential

logger = logging.getLogger("chatbridge.credentials")


class CredentialStore:
    """Encrypted API credentials, always scoped to the owning user."""

    def __init__(self, cipher: CredentialCipher) -> None:
        self._cipher = cipher

    def create(self, user_id: int, provider: str, key_name: str, api_key: str) -> Credential:
        credential = Credential(
            user_id=user_id,
            provider=provider,
            key_name=key_name,
            encrypted_key=self._cipher.encrypt(api_key),
        )
        with session_scope() as session:
            session.add(credential)
            session.flush()
        logger.info(
            "Credential stored",
            extra={
                "event": "credential_created",
                "user_id": user_id,
                "provider": provider,
                "credential_id": credential.id,
            },
        )
        return credential

    def list(self, user_id: int) -> list[Credential]:
        with session_scope() as session:
            rows = session.scalars(
                select(Credential)
                .where(Credential.user_id == user_id)
                .order_by(Credential.created_at, Credential.id)
            ).all()
            return cast(list[Credential], list(rows))

    def get(self, user_id: int, credential_id: int) -> Credential | None:
        with session_scope() as session:
            return session.scalar(
                select(Credential).where(
                    Credential.id == credential_id, Credential.user_id == user_id
                )
            )

    def update(
        self,
        user_id: int,
        credential_id: int,
        *,
        key_name: str | None = None,
        api_key: str | None = None,
        is_active: bool | None = None,
    ) -> Credential | None:
        """Rename, rotate or toggle a credential; ``None`` when it is not the caller's."""
        with session_scope() as session:
            credential = session.scalar(
                select(Credential).where(
                    Credential.id == credential_id, Credential.user_id == user_id
                )
            )
            if credential is None:
                return None
            if key_name:
                credential.key_name = key_name
            if api_key:
                credential.encrypted_key = self._cipher.encrypt(api_key)
            if is_active is not None:
                credential.is_active = is_active
            return credential

    def delete(self, user_id: int, credential_id: int) -> bool:
        with session_scope() as session:
            credential = session.scalar(
                select(Credential).where(
                    Credential.id == credential_id, Credential.user_id == user_id
                )
            )
            if not credential:
                return False
            session.delete(credential)
            return True

    def resolve_api_key(self, user_id: int, provider: str) -> str:
        """Return the decrypted secret of the newest active credential for ``provider``."""
        with session_scope() as session:
            encrypted = session.scalar(
                select(Credential.encrypted_key)
                .where(
                    Credential.user_id == user_id,
                    Credential.provider == provider,
                    Credential.is_active.is_(True),
                )
                .order_by(Credential.created_at.desc(), Credential.id.desc())
                .limit(1)
            )
        if encrypted is None:
            raise MissingCredentialError(provider)
        return self._cipher.decrypt(cast(str, encrypted))


__all__ = ["CredentialStore"]
