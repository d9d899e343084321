import asyncio

import pytest

from chatbridge.core.config import ProviderModel
from chatbridge.core.exceptions import ProviderRequestError, ProviderTimeoutError
from chatbridge.providers.base import ChatMessage
from chatbridge.providers.ollama import SYSTEM_INSTRUCTION, OllamaProvider


class FakeResponse:
    def __init__(self, status_code: int, payload: dict | None = None) -> None:
        self.status_code = status_code
        self._payload = payload or {}

    def json(self) -> dict:
        return self._payload

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def reason_phrase(self) -> str:
        return "OK"


def _stub_async_client(response, recorder, delay: float = 0.0):
    class _DummyAsyncClient:
        def __init__(self, *args, **kwargs) -> None:
            self.timeout = kwargs.get("timeout")

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def post(self, url, json=None, headers=None):
            recorder["url"] = url
            recorder["json"] = json
            recorder["headers"] = headers
            if delay:
                await asyncio.sleep(delay)
            return response

    return _DummyAsyncClient


def _provider_model(timeout: float = 300) -> ProviderModel:
    return ProviderModel(
        id="ollama",
        name="Ollama",
        kind="ollama",
        base_url="http://localhost:11434",
        chat_path="/api/chat",
        timeout=timeout,
    )


@pytest.mark.asyncio
async def test_ollama_adapter_uses_credential_as_base_url(monkeypatch):
    adapter = OllamaProvider(_provider_model())
    recorder: dict = {}
    fake_http = FakeResponse(200, {"message": {"role": "assistant", "content": "pong"}})
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient", _stub_async_client(fake_http, recorder)
    )

    history = [ChatMessage(role="user", content="ping")]
    text = await adapter.generate(history, "llama3.1", "http://gpu-box:11434/")

    assert text == "pong"
    assert recorder["url"] == "http://gpu-box:11434/api/chat"
    assert "Authorization" not in recorder["headers"]
    assert recorder["json"]["stream"] is False
    assert recorder["json"]["think"] is False
    assert recorder["json"]["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert recorder["json"]["messages"][1:] == [{"role": "user", "content": "ping"}]


@pytest.mark.asyncio
async def test_ollama_adapter_blank_credential_falls_back_to_config(monkeypatch):
    adapter = OllamaProvider(_provider_model())
    recorder: dict = {}
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(FakeResponse(200, {"message": {"content": "ok"}}), recorder),
    )

    await adapter.generate([ChatMessage(role="user", content="hi")], "llama3.1", "   ")

    assert recorder["url"] == "http://localhost:11434/api/chat"


@pytest.mark.asyncio
async def test_ollama_adapter_hard_timeout(monkeypatch):
    adapter = OllamaProvider(_provider_model(timeout=0.05))
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(FakeResponse(200, {"message": {"content": "late"}}), {}, delay=1.0),
    )

    with pytest.raises(ProviderTimeoutError) as excinfo:
        await adapter.generate([ChatMessage(role="user", content="hi")], "llama3.1", "")

    assert "timed out" in excinfo.value.message


@pytest.mark.asyncio
async def test_ollama_adapter_malformed_server_url():
    adapter = OllamaProvider(_provider_model())

    with pytest.raises(ProviderRequestError) as excinfo:
        await adapter.generate([ChatMessage(role="user", content="hi")], "llama3.1", "http://[::1")

    assert excinfo.value.error_type == "network"
    assert "URL is invalid" in excinfo.value.message
