"""Generation client: one remote call per point or per batch.

The client never touches the outline model; it returns data or raises a
:class:`GenerationError`. Retrying is the caller's decision.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from openai import OpenAIError
from pydantic import BaseModel, ValidationError

from outlinewriter.llm.client import ChatMessage, TextGenerationService
from outlinewriter.logging import get_logger
from outlinewriter.prompts import BATCH_SCHEMA_NAME, ESSAY_WRITER_SYSTEM_PROMPT

logger = get_logger(__name__)


class GenerationError(RuntimeError):
    """A unit of work (point or batch) did not complete."""


class GenerationFailure(GenerationError):
    """The service was unreachable, timed out, errored, or returned nothing."""


TransportFailure = GenerationFailure


class SchemaViolation(GenerationError):
    """A structured response was present but malformed or incomplete."""

    def __init__(self, message: str, *, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class BatchItem(BaseModel):
    id: str
    content: str


class BatchResponse(BaseModel):
    results: list[BatchItem]


_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(?P<body>.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def _shorten(s: str, limit: int = 300) -> str:
    s = s.replace("\n", " ")
    return (s[:limit] + "…") if len(s) > limit else s


def parse_batch_response(raw: str) -> list[BatchItem]:
    """Parse the service's structured text into ``{id, content}`` items.

    Raises:
        SchemaViolation: Not JSON, or not shaped as ``{"results": [{"id", "content"}]}``.
    """

    text = (raw or "").strip()
    m = _FENCE_RE.match(text)
    if m:
        # Some OpenAI-compatible backends fence JSON even in structured mode.
        text = m.group("body").strip()
    if not text:
        raise SchemaViolation("batch response was empty", raw=raw)
    try:
        return BatchResponse.model_validate_json(text).results
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        raise SchemaViolation(
            f"batch response does not match schema at {where}: {first.get('msg', 'invalid')}",
            raw=raw,
        ) from exc


class GenerationClient:
    """Wraps the text-generation service for single-point and batch modes."""

    def __init__(self, service: TextGenerationService) -> None:
        self._service = service

    async def _call(self, prompt: str, *, schema: Mapping[str, Any] | None) -> str:
        messages = [
            ChatMessage(role="system", content=ESSAY_WRITER_SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompt),
        ]
        logger.debug("Sending prompt", extra={"prompt_chars": len(prompt), "structured": schema is not None})
        try:
            if schema is None:
                return await self._service.complete(messages)
            return await self._service.complete(messages, response_schema=schema, schema_name=BATCH_SCHEMA_NAME)
        except GenerationError:
            raise
        except (OpenAIError, OSError) as exc:
            raise GenerationFailure(str(exc) or type(exc).__name__) from exc

    async def generate_one(self, prompt: str) -> str:
        """Generate prose for one point.

        Raises:
            GenerationFailure: Transport/service error or empty output.
        """

        text = (await self._call(prompt, schema=None)).strip()
        if not text:
            raise GenerationFailure("the generation service returned no text")
        return text

    async def generate_batch(self, prompt: str, schema: Mapping[str, Any]) -> list[BatchItem]:
        """Generate prose for a group of points.

        Raises:
            GenerationFailure: Transport/service error.
            SchemaViolation: Response could not be parsed as the declared schema.
        """

        raw = await self._call(prompt, schema=schema)
        try:
            return parse_batch_response(raw)
        except SchemaViolation:
            logger.warning("Malformed batch response", extra={"raw": _shorten(raw or "")})
            raise
