"""Provider adapter interfaces."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Literal

import httpx
from pydantic import BaseModel

from chatbridge.core.config import ProviderModel
from chatbridge.core.exceptions import (
    ProviderHttpError,
    ProviderRequestError,
    ProviderResponseError,
    ProviderTimeoutError,
)

from .utils import extract_error_body

logger = logging.getLogger("chatbridge.providers")

NO_RESPONSE_TEXT = "No response generated"


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ProviderAdapter:
    """Abstract provider adapter.

    Subclasses translate a generic message history into one outbound
    completion request and pull the generated text back out of the reply.
    """

    kind: str

    def __init__(self, config: ProviderModel) -> None:
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._path = config.chat_path

    @property
    def provider_id(self) -> str:
        return self._config.id

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ProviderModel:
        return self._config

    async def generate(self, history: Sequence[ChatMessage], model: str, credential: str) -> str:
        raise NotImplementedError

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        timeout: float,
    ) -> Any:
        """Send exactly one POST and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise ProviderTimeoutError(self.provider_id, timeout) from exc
        except httpx.RequestError as exc:
            raise ProviderRequestError(
                self.provider_id, message=f"{self.name} request failed: {exc}"
            ) from exc
        except httpx.InvalidURL as exc:
            # Ollama's URL comes from the user's stored credential.
            raise ProviderRequestError(
                self.provider_id, message=f"{self.name} URL is invalid: {exc}"
            ) from exc

        if response.is_error:
            logger.warning(
                "Provider returned an error status",
                extra={
                    "event": "provider_http_error",
                    "provider": self.provider_id,
                    "status_code": response.status_code,
                    "response_body": extract_error_body(response),
                },
            )
            raise ProviderHttpError(
                self.provider_id,
                response.status_code,
                response.reason_phrase,
                provider_name=self.name,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderResponseError(
                self.provider_id, message=f"{self.name} returned a non-JSON response"
            ) from exc
