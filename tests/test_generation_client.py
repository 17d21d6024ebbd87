"""Tests for the generation client and batch-response parsing."""

from __future__ import annotations

import asyncio

import pytest
from openai import OpenAIError

from outlinewriter.llm.generation import (
    GenerationClient,
    GenerationFailure,
    SchemaViolation,
    TransportFailure,
    parse_batch_response,
)
from outlinewriter.prompts import BATCH_OUTPUT_SCHEMA, BATCH_SCHEMA_NAME, ESSAY_WRITER_SYSTEM_PROMPT

from conftest import FakeService


def test_parse_batch_response_accepts_plain_and_fenced_json() -> None:
    """It should parse plain JSON and JSON wrapped in a code fence."""

    raw = '{"results": [{"id": "a", "content": "A"}, {"id": "b", "content": "B"}]}'
    assert [(i.id, i.content) for i in parse_batch_response(raw)] == [("a", "A"), ("b", "B")]

    fenced = "```json\n" + raw + "\n```"
    assert [i.id for i in parse_batch_response(fenced)] == ["a", "b"]


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "not json at all",
        '{"items": []}',
        '{"results": [{"id": "a"}]}',
        '{"results": "nope"}',
    ],
)
def test_parse_batch_response_rejects_malformed_output(raw: str) -> None:
    """It should raise a schema violation that keeps the raw text."""

    with pytest.raises(SchemaViolation) as exc_info:
        parse_batch_response(raw)
    assert exc_info.value.raw == raw


def test_generate_one_sends_system_and_user_messages() -> None:
    """It should send the system prompt and the user prompt and strip the reply."""

    seen: list = []

    class Recorder(FakeService):
        async def complete(self, messages, **kwargs):  # type: ignore[override]
            seen.extend(messages)
            return "  Some prose.  "

    client = GenerationClient(Recorder())
    text = asyncio.run(client.generate_one("write it"))

    assert text == "Some prose."
    assert [m.role for m in seen] == ["system", "user"]
    assert seen[0].content == ESSAY_WRITER_SYSTEM_PROMPT
    assert seen[1].content == "write it"


def test_generate_one_rejects_empty_output() -> None:
    """It should treat a blank reply as a generation failure."""

    client = GenerationClient(FakeService(lambda prompt, schema: "   "))
    with pytest.raises(GenerationFailure):
        asyncio.run(client.generate_one("write it"))


def test_generate_batch_passes_schema_and_parses_results() -> None:
    """It should pass the batch schema by name and return parsed items."""

    service = FakeService()
    client = GenerationClient(service)
    items = asyncio.run(client.generate_batch("- [ID: x1] Idea: \"a\"\n- [ID: x2] Idea: \"b\"", BATCH_OUTPUT_SCHEMA))

    assert [i.id for i in items] == ["x1", "x2"]
    assert service.calls[0]["schema"] == BATCH_OUTPUT_SCHEMA
    assert service.calls[0]["schema_name"] == BATCH_SCHEMA_NAME


def test_generate_batch_raises_schema_violation_on_garbage() -> None:
    """It should raise a schema violation for a non-JSON reply."""

    client = GenerationClient(FakeService(lambda prompt, schema: "Sorry, I cannot help."))
    with pytest.raises(SchemaViolation):
        asyncio.run(client.generate_batch("prompt", BATCH_OUTPUT_SCHEMA))


@pytest.mark.parametrize("error", [OpenAIError("service unavailable"), ConnectionError("reset by peer")])
def test_transport_errors_become_generation_failures(error: Exception) -> None:
    """It should wrap SDK and network errors in a generation failure."""

    def boom(prompt, schema):
        raise error

    client = GenerationClient(FakeService(boom))
    with pytest.raises(TransportFailure) as exc_info:
        asyncio.run(client.generate_one("prompt"))
    assert str(error) in str(exc_info.value)

    with pytest.raises(GenerationFailure):
        asyncio.run(client.generate_batch("prompt", BATCH_OUTPUT_SCHEMA))
