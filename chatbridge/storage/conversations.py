"""Storage helpers for conversations and their ordered messages."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, cast

from sqlalchemy import select, update

from .database import session_scope
from .models import Conversation, Message


def create_conversation(user_id: int, title: str, provider: str, model: str) -> Conversation:
    conversation = Conversation(user_id=user_id, title=title, provider=provider, model=model)
    with session_scope() as session:
        session.add(conversation)
        session.flush()
    return conversation


def list_conversations(user_id: int) -> list[Conversation]:
    """Return the user's conversations, most recently active first."""
    with session_scope() as session:
        rows = session.scalars(
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        ).all()
        return cast(list[Conversation], list(rows))


def get_conversation(user_id: int, conversation_id: int) -> Conversation | None:
    """Return the conversation only when ``user_id`` owns it."""
    with session_scope() as session:
        return session.scalar(
            select(Conversation).where(
                Conversation.id == conversation_id, Conversation.user_id == user_id
            )
        )


def update_conversation(
    user_id: int, conversation_id: int, *, title: str | None = None
) -> Conversation | None:
    with session_scope() as session:
        conversation = session.scalar(
            select(Conversation).where(
                Conversation.id == conversation_id, Conversation.user_id == user_id
            )
        )
        if conversation is None:
            return None
        if title:
            conversation.title = title
        conversation.updated_at = datetime.now(timezone.utc)
        return conversation


def delete_conversation(user_id: int, conversation_id: int) -> bool:
    """Delete the conversation and, through the cascade, its messages."""
    with session_scope() as session:
        conversation = session.scalar(
            select(Conversation).where(
                Conversation.id == conversation_id, Conversation.user_id == user_id
            )
        )
        if conversation is None:
            return False
        session.delete(conversation)
        return True


def append_message(
    conversation_id: int,
    role: str,
    content: str,
    metadata: dict[str, Any] | None = None,
    created_at: datetime | None = None,
) -> Message:
    message = Message(
        conversation_id=conversation_id,
        role=role,
        content=content,
        meta=metadata,
        created_at=created_at or datetime.now(timezone.utc),
    )
    with session_scope() as session:
        session.add(message)
        session.flush()
    return message


def list_messages(conversation_id: int) -> list[Message]:
    """Return the canonical history: ``created_at`` ascending, ties broken by id."""
    with session_scope() as session:
        rows = session.scalars(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        ).all()
        return cast(list[Message], list(rows))


def touch_conversation(conversation_id: int) -> None:
    with session_scope() as session:
        session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=datetime.now(timezone.utc))
        )


__all__ = [
    "append_message",
    "create_conversation",
    "delete_conversation",
    "get_conversation",
    "list_conversations",
    "list_messages",
    "touch_conversation",
    "update_conversation",
]
