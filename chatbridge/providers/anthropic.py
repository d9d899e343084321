"""Anthropic Messages API adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .base import NO_RESPONSE_TEXT, ChatMessage, ProviderAdapter
from .utils import first_text

ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1000


class AnthropicProvider(ProviderAdapter):
    kind = "anthropic"

    async def generate(self, history: Sequence[ChatMessage], model: str, credential: str) -> str:
        payload = self._build_payload(history, model)
        headers = {
            "x-api-key": credential,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }
        data = await self._post_json(
            f"{self._base_url}{self._path}", payload, headers, timeout=self._config.timeout
        )
        return first_text(data, "content", 0, "text") or NO_RESPONSE_TEXT

    def _build_payload(self, history: Sequence[ChatMessage], model: str) -> dict[str, Any]:
        # The Messages API only accepts user/assistant turns; system text is a top-level field.
        system_parts = [message.content for message in history if message.role == "system"]
        payload: dict[str, Any] = {
            "model": model,
            "max_tokens": self._config.max_tokens or DEFAULT_MAX_TOKENS,
            "messages": [
                {"role": message.role, "content": message.content}
                for message in history
                if message.role != "system"
            ],
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        if self._config.temperature is not None:
            payload["temperature"] = self._config.temperature
        return payload
