"""Send-message orchestration: persist the user turn, generate, persist the reply."""

from __future__ import annotations

import asyncio
import logging
import weakref
from dataclasses import dataclass
from typing import Any

from chatbridge.core.exceptions import (
    MissingCredentialError,
    NotFoundError,
    ProviderError,
    ProviderHttpError,
    UnknownProviderError,
)
from chatbridge.providers.base import ChatMessage
from chatbridge.router.registry import ProviderRegistry
from chatbridge.storage import conversations
from chatbridge.storage.credentials import CredentialStore
from chatbridge.storage.models import Message
from chatbridge.telemetry.events import record_event

logger = logging.getLogger("chatbridge.orchestrator")

DIAGNOSTIC_PREFIX = "Error generating response"


@dataclass
class SendMessageResult:
    user_message: Message
    assistant_message: Message


class ConversationOrchestrator:
    """Runs one "send message" operation end to end.

    The user's message is stored as soon as ownership is confirmed. Provider
    failures never fail the operation; they become a diagnostic assistant
    message instead. A missing credential is raised to the caller after the
    user message has been stored.
    """

    def __init__(self, registry: ProviderRegistry, credential_store: CredentialStore) -> None:
        self._registry = registry
        self._credentials = credential_store
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, conversation_id: int) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    async def send_message(
        self,
        user_id: int,
        conversation_id: int,
        content: str,
        provider_id: str,
        model: str,
    ) -> SendMessageResult:
        conversation = conversations.get_conversation(user_id, conversation_id)
        if conversation is None:
            raise NotFoundError("conversation")

        async with self._lock_for(conversation_id):
            turn_metadata = {"provider": provider_id, "model": model}
            user_message = conversations.append_message(
                conversation_id, "user", content, metadata=turn_metadata
            )
            try:
                try:
                    api_key = self._credentials.resolve_api_key(user_id, provider_id)
                except MissingCredentialError as exc:
                    logger.info(
                        "No credential for provider",
                        extra={
                            "event": "credential_missing",
                            "provider": provider_id,
                            "conversation_id": conversation_id,
                        },
                    )
                    record_event(
                        "credential_missing",
                        "WARNING",
                        user_id=user_id,
                        provider=provider_id,
                        model=model,
                        conversation_id=conversation_id,
                        message=exc.message,
                    )
                    raise

                history = [
                    ChatMessage(role=message.role, content=message.content)
                    for message in conversations.list_messages(conversation_id)
                ]
                assistant_message = await self._generate_reply(
                    user_id, conversation_id, history, provider_id, model, api_key
                )
            finally:
                conversations.touch_conversation(conversation_id)

        return SendMessageResult(user_message=user_message, assistant_message=assistant_message)

    async def _generate_reply(
        self,
        user_id: int,
        conversation_id: int,
        history: list[ChatMessage],
        provider_id: str,
        model: str,
        api_key: str,
    ) -> Message:
        metadata: dict[str, Any] = {"provider": provider_id, "model": model}
        try:
            text = await self._registry.generate(provider_id, history, model, api_key)
        except (ProviderError, UnknownProviderError) as exc:
            error: dict[str, Any] = {"type": getattr(exc, "error_type", "unknown_provider")}
            if isinstance(exc, ProviderHttpError):
                error["status_code"] = exc.status_code
            metadata["error"] = error
            logger.warning(
                "Generation failed",
                extra={
                    "event": "generation_failed",
                    "provider": provider_id,
                    "model": model,
                    "conversation_id": conversation_id,
                    "error_type": error["type"],
                    "error_message": exc.message,
                },
            )
            record_event(
                "generation_failed",
                "WARNING",
                user_id=user_id,
                provider=provider_id,
                model=model,
                conversation_id=conversation_id,
                message=exc.message,
                meta=error,
            )
            return conversations.append_message(
                conversation_id,
                "assistant",
                f"{DIAGNOSTIC_PREFIX}: {exc.message}",
                metadata=metadata,
            )

        logger.info(
            "Generation succeeded",
            extra={
                "event": "generation_succeeded",
                "provider": provider_id,
                "model": model,
                "conversation_id": conversation_id,
            },
        )
        return conversations.append_message(conversation_id, "assistant", text, metadata=metadata)


__all__ = ["ConversationOrchestrator", "SendMessageResult"]
