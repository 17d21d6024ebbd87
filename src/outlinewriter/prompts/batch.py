"""Prompt and output schema for generating a group of consecutive outline points."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from outlinewriter.models.config import GenerationConfig
from outlinewriter.models.outline import OutlinePoint
from outlinewriter.prompts.common import (
    PREVIOUS_CONTENT_TAIL_CHARS,
    batch_length_instruction,
    ending_instruction,
    look_ahead_line,
    previous_content_block,
)

BATCH_SCHEMA_NAME = "outline_batch_results"

# {"results": [{"id": ..., "content": ...}, ...]}; strict-mode compatible.
BATCH_OUTPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "results": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "content": {"type": "string"},
                },
                "required": ["id", "content"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["results"],
    "additionalProperties": False,
}


def format_batch_items(points: Sequence[OutlinePoint]) -> str:
    return "\n".join(f'- [ID: {p.id}] Idea: "{p.text}" (Level: {p.level})' for p in points)


def build_batch_prompt(
    points: Sequence[OutlinePoint],
    full_outline: str,
    accumulated: str,
    look_ahead_outside_batch: list[str],
    config: GenerationConfig,
    is_last_batch: bool,
    *,
    tail_chars: int = PREVIOUS_CONTENT_TAIL_CHARS,
) -> tuple[str, dict[str, Any]]:
    """Render the batch instructions and the structured-output schema.

    Returns:
        ``(prompt_text, output_schema)``.
    """

    if not points:
        raise ValueError("a batch needs at least one point")

    prompt = (
        "You are writing a long and detailed essay. Below is a group of consecutive outline "
        "points that must each be turned into prose.\n\n"
        "1. FULL ESSAY OUTLINE (reference only):\n"
        f"{full_outline}\n\n"
        "2. PREVIOUSLY WRITTEN CONTENT (context for flow, do not rewrite it):\n"
        f"{previous_content_block(accumulated, tail_chars=tail_chars, placeholder='[Introduction]')}\n\n"
        "3. TASK: write content for EACH item in the list below, one output entry per ID.\n"
        "LIST TO WRITE:\n"
        f"{format_batch_items(points)}\n\n"
        "4. CONTENT TO WRITE LATER (DO NOT WRITE OR PREEMPT THIS):\n"
        f"{look_ahead_line(look_ahead_outside_batch)}\n\n"
        "REQUIREMENTS:\n"
        f"- Output language: {config.language}.\n"
        f"- Tone: {config.tone_descriptor}.\n"
        f"- {batch_length_instruction(config.detail_level)}\n"
        "- Level 0 items (titles): write a short, evocative introduction (3-5 sentences).\n"
        "- Flow: each item's paragraph must lead naturally into the next item's paragraph.\n"
        f"- {ending_instruction(is_last_batch, batch=True)}\n\n"
        "OUTPUT FORMAT:\n"
        'Return JSON only: {"results": [{"id": "<ID>", "content": "<text>"}]}. Every ID in the '
        "list must have exactly one entry, using the ID verbatim. Content must be plain prose, "
        "no markdown."
    )
    return prompt, BATCH_OUTPUT_SCHEMA
