"""Tests for the OpenAI-backed transport."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from openai.types.chat import ChatCompletion

from outlinewriter.config import Settings
from outlinewriter.llm.client import AsyncLLMClient, ChatMessage
from outlinewriter.prompts import BATCH_OUTPUT_SCHEMA, BATCH_SCHEMA_NAME

MESSAGES = [ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="write")]


def _completion(choices: list[dict[str, Any]]) -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o-mini",
            "choices": choices,
            "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
        }
    )


def _answer(content: str | None) -> dict[str, Any]:
    return {
        "index": 0,
        "finish_reason": "stop",
        "message": {"role": "assistant", "content": content},
    }


@pytest.fixture
def captured() -> dict[str, Any]:
    return {}


def _client(
    settings: Settings, monkeypatch: pytest.MonkeyPatch, captured: dict[str, Any], reply: ChatCompletion
) -> AsyncLLMClient:
    client = AsyncLLMClient(settings)

    async def fake_create(**kwargs: Any) -> ChatCompletion:
        captured.update(kwargs)
        return reply

    monkeypatch.setattr(client._client.chat.completions, "create", fake_create)
    return client


def test_missing_api_key_is_a_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    """It should refuse to build the transport without an API key and name the variable."""

    monkeypatch.delenv("OUTLINEWRITER_OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="OUTLINEWRITER_OPENAI_API_KEY"):
        AsyncLLMClient(Settings(openai_api_key=None))


def test_sdk_client_uses_hard_timeout_and_no_retries() -> None:
    """It should pass the configured timeout to the SDK and disable its retries."""

    client = AsyncLLMClient(Settings(openai_api_key="sk-test", openai_timeout_s=42.0))
    assert client._client.timeout == 42.0
    assert client._client.max_retries == 0


def test_free_text_request_has_no_response_format(
    settings: Settings, monkeypatch: pytest.MonkeyPatch, captured: dict[str, Any]
) -> None:
    """It should send plain chat messages with model, temperature and timeout."""

    client = _client(settings, monkeypatch, captured, _completion([_answer("Some prose.")]))
    text = asyncio.run(client.complete(MESSAGES))

    assert text == "Some prose."
    assert "response_format" not in captured
    assert captured["model"] == settings.openai_model
    assert captured["temperature"] == settings.openai_temperature
    assert captured["timeout"] == settings.openai_timeout_s
    assert captured["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "write"},
    ]


def test_schema_request_uses_strict_json_schema(
    settings: Settings, monkeypatch: pytest.MonkeyPatch, captured: dict[str, Any]
) -> None:
    """It should request strict JSON-schema output under the given schema name."""

    client = _client(settings, monkeypatch, captured, _completion([_answer('{"results": []}')]))
    raw = asyncio.run(
        client.complete(MESSAGES, response_schema=BATCH_OUTPUT_SCHEMA, schema_name=BATCH_SCHEMA_NAME)
    )

    assert raw == '{"results": []}'
    assert captured["response_format"] == {
        "type": "json_schema",
        "json_schema": {"name": BATCH_SCHEMA_NAME, "schema": BATCH_OUTPUT_SCHEMA, "strict": True},
    }


@pytest.mark.parametrize("choices", [[], [_answer(None)]])
def test_missing_choice_or_content_returns_empty_text(
    settings: Settings, monkeypatch: pytest.MonkeyPatch, captured: dict[str, Any], choices: list[dict[str, Any]]
) -> None:
    """It should return an empty string when the service sends no choice or no content."""

    client = _client(settings, monkeypatch, captured, _completion(choices))
    assert asyncio.run(client.complete(MESSAGES)) == ""
