"""OpenAI-compatible chat completions adapter (OpenAI, OpenRouter)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .base import NO_RESPONSE_TEXT, ChatMessage, ProviderAdapter
from .utils import first_text


class OpenAICompatibleProvider(ProviderAdapter):
    kind = "openai"

    async def generate(self, history: Sequence[ChatMessage], model: str, credential: str) -> str:
        payload = self._build_payload(history, model)
        headers = {
            "Authorization": f"Bearer {credential}",
            "Content-Type": "application/json",
        }
        data = await self._post_json(
            f"{self._base_url}{self._path}", payload, headers, timeout=self._config.timeout
        )
        return first_text(data, "choices", 0, "message", "content") or NO_RESPONSE_TEXT

    def _build_payload(self, history: Sequence[ChatMessage], model: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [{"role": message.role, "content": message.content} for message in history],
        }
        if self._config.max_tokens is not None:
            payload["max_tokens"] = self._config.max_tokens
        if self._config.temperature is not None:
            payload["temperature"] = self._config.temperature
        return payload
