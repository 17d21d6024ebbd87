"""LLM transport and generation client."""

from __future__ import annotations

from outlinewriter.llm.client import AsyncLLMClient, ChatMessage, TextGenerationService
from outlinewriter.llm.generation import (
    BatchItem,
    GenerationClient,
    GenerationError,
    GenerationFailure,
    SchemaViolation,
    TransportFailure,
    parse_batch_response,
)

__all__ = [
    "AsyncLLMClient",
    "BatchItem",
    "ChatMessage",
    "GenerationClient",
    "GenerationError",
    "GenerationFailure",
    "SchemaViolation",
    "TextGenerationService",
    "TransportFailure",
    "parse_batch_response",
]
