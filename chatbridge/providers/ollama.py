"""Adapter for a self-hosted Ollama server."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from chatbridge.core.exceptions import ProviderTimeoutError

from .base import NO_RESPONSE_TEXT, ChatMessage, ProviderAdapter
from .utils import first_text

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant. Answer the user's latest message directly and "
    "concisely, using the earlier conversation as context."
)


class OllamaProvider(ProviderAdapter):
    """Talks to ``{server}/api/chat``.

    The stored credential is the server's base URL rather than a secret, so no
    auth header is sent. Local inference can stall, so the whole call is
    bounded by the configured timeout.
    """

    kind = "ollama"

    async def generate(self, history: Sequence[ChatMessage], model: str, credential: str) -> str:
        base_url = (credential.strip() or self._base_url).rstrip("/")
        payload = self._build_payload(history, model)
        headers = {"Content-Type": "application/json"}
        timeout = self._config.timeout

        try:
            data = await asyncio.wait_for(
                self._post_json(f"{base_url}{self._path}", payload, headers, timeout=timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError(self.provider_id, timeout) from exc

        return first_text(data, "message", "content") or NO_RESPONSE_TEXT

    def _build_payload(self, history: Sequence[ChatMessage], model: str) -> dict[str, Any]:
        messages = [{"role": "system", "content": SYSTEM_INSTRUCTION}]
        messages.extend({"role": message.role, "content": message.content} for message in history)
        return {
            "model": model,
            "messages": messages,
            "stream": False,
            "think": False,
        }
