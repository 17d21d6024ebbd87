"""OpenAI-compatible async LLM transport.

This wraps the `openai` Python SDK's async client and provides a minimal chat-completions
interface, with optional JSON-schema structured output.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, Protocol

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from outlinewriter.config import Settings
from outlinewriter.logging import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


class TextGenerationService(Protocol):
    """The remote text-generation endpoint, as seen by the generation client."""

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        response_schema: Mapping[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        """Return the assistant text (raw JSON text when a schema is given)."""


class AsyncLLMClient:
    """Chat Completions client.

    Requests are never retried here (``max_retries=0``); a failed call surfaces to the
    orchestrator, which exposes retry to the user.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        if not settings.openai_api_key:
            raise ValueError(
                "Missing OUTLINEWRITER_OPENAI_API_KEY. "
                "Set it in environment variables or a .env file."
            )

        self._client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
            timeout=settings.openai_timeout_s,
        )

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        response_schema: Mapping[str, Any] | None = None,
        schema_name: str = "response",
    ) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages.
            response_schema: JSON schema for structured output, or None for free text.
            schema_name: Name reported to the service for the schema.

        Returns:
            Assistant message content ("" when the service returned none).
        """

        kwargs: dict[str, Any] = {
            "model": self._settings.openai_model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": self._settings.openai_temperature,
            "timeout": self._settings.openai_timeout_s,
        }
        if response_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": dict(response_schema), "strict": True},
            }

        start_time = time.monotonic()
        resp: ChatCompletion = await self._client.chat.completions.create(**kwargs)
        latency = time.monotonic() - start_time

        logger.debug(
            "LLM completion returned",
            extra={
                "model": self._settings.openai_model,
                "latency_ms": latency * 1000,
                "tokens": resp.usage.total_tokens if resp.usage else None,
                "structured": response_schema is not None,
            },
        )

        if not resp.choices:
            return ""
        choice = resp.choices[0]
        if not choice.message or choice.message.content is None:
            return ""
        return choice.message.content
