"""Provider registration and dispatch."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from chatbridge.core.config import AppConfig, ProviderModel, load_config
from chatbridge.core.exceptions import ConfigurationError, UnknownProviderError
from chatbridge.providers.anthropic import AnthropicProvider
from chatbridge.providers.base import ChatMessage, ProviderAdapter
from chatbridge.providers.ollama import OllamaProvider
from chatbridge.providers.openai_compat import OpenAICompatibleProvider

logger = logging.getLogger("chatbridge.router")


class ProviderRegistry:
    """Fixed set of provider adapters keyed by provider id."""

    _adapter_map: dict[str, type[ProviderAdapter]] = {
        "openai": OpenAICompatibleProvider,
        "anthropic": AnthropicProvider,
        "ollama": OllamaProvider,
    }

    def __init__(self, config: AppConfig | None = None) -> None:
        self._adapters: dict[str, ProviderAdapter] = {}
        for provider in (config or load_config()).providers:
            self.register(self._build_adapter(provider))

    def _build_adapter(self, provider: ProviderModel) -> ProviderAdapter:
        adapter_cls = self._adapter_map.get(provider.kind)
        if adapter_cls is None:
            raise ConfigurationError(
                f"Provider '{provider.id}' uses unsupported kind '{provider.kind}'"
            )
        return adapter_cls(provider)

    def register(self, adapter: ProviderAdapter) -> None:
        self._adapters[adapter.provider_id] = adapter

    def get(self, provider_id: str) -> ProviderAdapter | None:
        return self._adapters.get(provider_id)

    def list(self) -> list[ProviderAdapter]:
        return list(self._adapters.values())

    async def generate(
        self,
        provider_id: str,
        history: Sequence[ChatMessage],
        model: str,
        credential: str,
    ) -> str:
        """Dispatch to the adapter for ``provider_id``; adapter errors propagate unchanged."""
        adapter = self.get(provider_id)
        if adapter is None:
            raise UnknownProviderError(provider_id)
        logger.info(
            "Dispatching generation",
            extra={
                "event": "provider_dispatch",
                "provider": provider_id,
                "model": model,
                "history_length": len(history),
            },
        )
        return await adapter.generate(history, model, credential)


registry = ProviderRegistry()
