"""Per-user activity events recorded alongside chat operations."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from chatbridge.logging import get_request_id
from chatbridge.storage.database import session_scope
from chatbridge.storage.models import ActivityEvent

logger = logging.getLogger("chatbridge.events")

_EVENTS_ENABLED = os.getenv("EVENTS_ENABLED", "true").lower() in {"1", "true", "yes"}


_RETENTION_DAYS = 7


def _current_retention_cutoff() -> datetime:
    """Return the UTC timestamp cutoff for events to retain."""
    now_utc = datetime.now(timezone.utc)
    start_of_today = datetime(now_utc.year, now_utc.month, now_utc.day, tzinfo=timezone.utc)
    return start_of_today - timedelta(days=_RETENTION_DAYS - 1)


def _prune_old_events(session) -> None:
    """Remove events older than the retention window."""
    cutoff = _current_retention_cutoff()
    session.execute(delete(ActivityEvent).where(ActivityEvent.ts < cutoff))


def record_event(
    kind: str,
    level: str,
    *,
    user_id: int | None = None,
    message: str | None = None,
    request_id: str | None = None,
    meta: Dict[str, Any] | None = None,
    **fields: Any,
) -> None:
    """Persist an event; failures are logged and never reach the caller."""
    if not _EVENTS_ENABLED:
        return

    event = ActivityEvent(
        ts=datetime.now(timezone.utc),
        level=level.upper(),
        kind=kind,
        request_id=request_id or get_request_id(),
        user_id=user_id,
        provider=fields.get("provider"),
        model=fields.get("model"),
        conversation_id=fields.get("conversation_id"),
        message=message[:512] if message else None,
        meta=json.dumps(meta, ensure_ascii=True) if meta else None,
    )

    try:
        with session_scope() as session:
            session.add(event)
            _prune_old_events(session)
    except Exception:
        logger.exception(
            "Failed to record event", extra={"event": "event_persist_error", "kind": kind}
        )


def list_recent_events(user_id: int, limit: int = 50) -> List[Dict[str, Any]]:
    """Return the user's recent events ordered newest first."""
    if not _EVENTS_ENABLED:
        return []

    cutoff = _current_retention_cutoff()

    with session_scope() as session:
        _prune_old_events(session)

        stmt = (
            select(ActivityEvent)
            .where(ActivityEvent.user_id == user_id)
            .where(ActivityEvent.ts >= cutoff)
            .order_by(ActivityEvent.ts.desc(), ActivityEvent.id.desc())
            .limit(limit)
        )
        rows = session.scalars(stmt).all()

    events: List[Dict[str, Any]] = []
    for row in rows:
        meta_value: Optional[Dict[str, Any] | str | None]
        if row.meta:
            try:
                meta_value = json.loads(row.meta)
            except json.JSONDecodeError:
                meta_value = row.meta
        else:
            meta_value = None

        events.append(
            {
                "id": row.id,
                "timestamp": row.ts.isoformat() if row.ts else None,
                "level": row.level,
                "kind": row.kind,
                "request_id": row.request_id,
                "provider": row.provider,
                "model": row.model,
                "conversation_id": row.conversation_id,
                "message": row.message,
                "meta": meta_value,
            }
        )
    return events


__all__ = ["list_recent_events", "record_event"]
