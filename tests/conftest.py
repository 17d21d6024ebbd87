"""Shared fixtures: a scripted stand-in for the text-generation service."""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from outlinewriter.config import Settings
from outlinewriter.llm.client import ChatMessage
from outlinewriter.llm.generation import GenerationClient
from outlinewriter.orchestrator.runner import Orchestrator

_ID_RE = re.compile(r"\[ID: (?P<id>[^\]]+)\]")

Handler = Callable[[str, "Mapping[str, Any] | None"], str]


def ids_in_prompt(prompt: str) -> list[str]:
    return [m.group("id") for m in _ID_RE.finditer(prompt)]


def batch_json(ids: Sequence[str], template: str = "text for {id}") -> str:
    return json.dumps({"results": [{"id": i, "content": template.format(id=i)} for i in ids]})


class FakeService:
    """Records prompts; answers every batch id (or a single text) unless a handler is set."""

    def __init__(self, handler: Handler | None = None) -> None:
        self.handler = handler
        self.calls: list[dict[str, Any]] = []

    @property
    def prompts(self) -> list[str]:
        return [c["prompt"] for c in self.calls]

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        response_schema: Mapping[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        prompt = messages[-1].content
        self.calls.append({"prompt": prompt, "schema": response_schema, "schema_name": schema_name})
        if self.handler is not None:
            return self.handler(prompt, response_schema)
        if response_schema is not None:
            return batch_json(ids_in_prompt(prompt))
        return f"single text #{len(self.calls)}"


class HangingService(FakeService):
    """Blocks the first ``hang_calls`` calls until they are cancelled; later calls answer normally."""

    def __init__(self, hang_calls: int = 1) -> None:
        super().__init__()
        self.hang_calls = hang_calls
        self.hanging = False

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        response_schema: Mapping[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        if self.hang_calls > 0:
            self.hang_calls -= 1
            self.hanging = True
            await asyncio.sleep(3600)
        return await super().complete(messages, response_schema=response_schema, schema_name=schema_name)


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="sk-test", batch_delay_s=0.0, batch_size=5)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def orchestrator(service: FakeService, settings: Settings) -> Orchestrator:
    return Orchestrator(GenerationClient(service), settings)
