from __future__ import annotations

import os
from contextlib import contextmanager

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-secret")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("LOG_FILE", "")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from chatbridge.storage import conversations, credentials, users  # noqa: E402
from chatbridge.storage.database import Base  # noqa: E402
from chatbridge.storage import models  # noqa: E402,F401
from chatbridge.telemetry import events  # noqa: E402

_STORE_MODULES = (users, credentials, conversations, events)


@pytest.fixture
def in_memory_db(monkeypatch):
    """Point every store module at one isolated in-memory database."""

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )
    Base.metadata.create_all(engine)

    @contextmanager
    def session_scope():
        session = TestingSession()
        try:
            yield session
            session.commit()
        except Exception:  # pragma: no cover - defensive
            session.rollback()
            raise
        finally:
            session.close()

    for module in _STORE_MODULES:
        monkeypatch.setattr(module, "session_scope", session_scope)

    yield session_scope

    engine.dispose()
