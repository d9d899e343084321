from http import HTTPStatus

import httpx
import pytest

from chatbridge.core.config import ProviderModel
from chatbridge.core.exceptions import (
    ProviderHttpError,
    ProviderRequestError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from chatbridge.providers.base import NO_RESPONSE_TEXT, ChatMessage
from chatbridge.providers.openai_compat import OpenAICompatibleProvider

MAX_TOKENS = 1000
TEMPERATURE = 0.7


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload

    @property
    def is_error(self) -> bool:
        return self.status_code >= HTTPStatus.BAD_REQUEST

    @property
    def reason_phrase(self) -> str:
        return HTTPStatus(self.status_code).phrase

    @property
    def text(self) -> str:
        return self._text or ""


def _stub_async_client(response, recorder):
    class _DummyAsyncClient:
        def __init__(self, *args, **kwargs) -> None:
            recorder["timeout"] = kwargs.get("timeout")

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def post(self, url, json=None, headers=None):
            recorder["url"] = url
            recorder["json"] = json
            recorder["headers"] = headers
            recorder["calls"] = recorder.get("calls", 0) + 1
            if isinstance(response, Exception):
                raise response
            return response

    return _DummyAsyncClient


@pytest.fixture
def provider_model() -> ProviderModel:
    return ProviderModel(
        id="openai",
        name="OpenAI",
        kind="openai",
        base_url="https://api.openai.com/v1/",
        chat_path="/chat/completions",
        timeout=45,
        max_tokens=MAX_TOKENS,
        temperature=TEMPERATURE,
    )


@pytest.fixture
def history() -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content="Be brief."),
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello!"),
        ChatMessage(role="user", content="How are you?"),
    ]


@pytest.mark.asyncio
async def test_openai_adapter_success(monkeypatch, provider_model, history):
    adapter = OpenAICompatibleProvider(provider_model)
    recorder: dict = {}
    fake_http = FakeResponse(
        HTTPStatus.OK,
        {
            "id": "chatcmpl-123",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "hi"}}],
        },
    )
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient", _stub_async_client(fake_http, recorder)
    )

    text = await adapter.generate(history, "gpt-4", "sk-test")

    assert text == "hi"
    assert recorder["calls"] == 1
    assert recorder["url"] == "https://api.openai.com/v1/chat/completions"
    assert recorder["headers"]["Authorization"] == "Bearer sk-test"
    assert recorder["timeout"] == 45
    assert recorder["json"]["model"] == "gpt-4"
    assert recorder["json"]["max_tokens"] == MAX_TOKENS
    assert recorder["json"]["temperature"] == TEMPERATURE
    assert [m["role"] for m in recorder["json"]["messages"]] == [
        "system",
        "user",
        "assistant",
        "user",
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"choices": []},
        {"choices": [{"message": {"content": ""}}]},
        {"choices": [{"message": {"content": None}}]},
        {"object": "chat.completion"},
        ["not", "an", "object"],
    ],
)
async def test_openai_adapter_falls_back_when_text_missing(
    monkeypatch, provider_model, history, payload
):
    adapter = OpenAICompatibleProvider(provider_model)
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(FakeResponse(HTTPStatus.OK, payload), {}),
    )

    assert await adapter.generate(history, "gpt-4", "sk-test") == NO_RESPONSE_TEXT


@pytest.mark.asyncio
async def test_openai_adapter_http_error_carries_status(monkeypatch, provider_model, history):
    adapter = OpenAICompatibleProvider(provider_model)
    recorder: dict = {}
    fake_http = FakeResponse(HTTPStatus.UNAUTHORIZED, {"error": {"message": "bad key"}})
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient", _stub_async_client(fake_http, recorder)
    )

    with pytest.raises(ProviderHttpError) as excinfo:
        await adapter.generate(history, "gpt-4", "sk-wrong")

    assert excinfo.value.status_code == HTTPStatus.UNAUTHORIZED
    assert excinfo.value.status_text == "Unauthorized"
    assert str(excinfo.value) == "OpenAI API error: 401 Unauthorized"
    assert recorder["calls"] == 1


@pytest.mark.asyncio
async def test_openai_adapter_timeout(monkeypatch, provider_model, history):
    adapter = OpenAICompatibleProvider(provider_model)
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(httpx.ReadTimeout("timed out"), {}),
    )

    with pytest.raises(ProviderTimeoutError):
        await adapter.generate(history, "gpt-4", "sk-test")


@pytest.mark.asyncio
async def test_openai_adapter_network_failure(monkeypatch, provider_model, history):
    adapter = OpenAICompatibleProvider(provider_model)
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(httpx.ConnectError("connection refused"), {}),
    )

    with pytest.raises(ProviderRequestError) as excinfo:
        await adapter.generate(history, "gpt-4", "sk-test")

    assert "connection refused" in excinfo.value.message


@pytest.mark.asyncio
async def test_openai_adapter_non_json_body(monkeypatch, provider_model, history):
    adapter = OpenAICompatibleProvider(provider_model)
    monkeypatch.setattr(
        "chatbridge.providers.base.httpx.AsyncClient",
        _stub_async_client(FakeResponse(HTTPStatus.OK, None, text="<html>"), {}),
    )

    with pytest.raises(ProviderResponseError):
        await adapter.generate(history, "gpt-4", "sk-test")
