"""Prompt for generating one outline point."""

from __future__ import annotations

from outlinewriter.models.config import GenerationConfig
from outlinewriter.models.outline import OutlinePoint
from outlinewriter.prompts.common import (
    PREVIOUS_CONTENT_TAIL_CHARS,
    ending_instruction,
    look_ahead_line,
    previous_content_block,
    single_length_instruction,
)

INTRO_ROLE = (
    "This is the MAIN TITLE. Task: write a short introductory paragraph (3-4 sentences) that "
    "evokes the topic, creates curiosity and transitions smoothly to the detailed points below."
)
ARGUMENT_ROLE = (
    "This is a DETAILED ARGUMENT. Task: analyze this one point deeply and dissect it from "
    "several angles."
)


def build_single_prompt(
    point: OutlinePoint,
    full_outline: str,
    accumulated: str,
    look_ahead: list[str],
    config: GenerationConfig,
    is_last_point: bool,
    *,
    tail_chars: int = PREVIOUS_CONTENT_TAIL_CHARS,
) -> str:
    """Render the instructions for writing ``point``.

    The result depends only on the arguments, so it must be rebuilt for every call to pick
    up content committed (or edited) since the previous one.
    """

    role = INTRO_ROLE if point.level == 0 else ARGUMENT_ROLE
    return (
        "You are writing a long-form essay, one section at a time, in order.\n\n"
        "FULL OUTLINE (reference only):\n"
        f"{full_outline}\n\n"
        "PREVIOUSLY WRITTEN CONTENT (context only, do not rewrite or continue it verbatim):\n"
        f"{previous_content_block(accumulated, tail_chars=tail_chars, placeholder='[None yet]')}\n\n"
        f'CURRENT TASK: write the section for "{point.text}"\n'
        f"ROLE OF THIS SECTION: {role}\n\n"
        f"AVOID REPETITION: these points come next and will be written later, do not cover "
        f"or preempt them: {look_ahead_line(look_ahead)}\n"
        f"OUTPUT LANGUAGE: {config.language}.\n"
        f"TONE: {config.tone_descriptor}.\n"
        f"REQUIRED LENGTH: {single_length_instruction(config.detail_level)}\n"
        f"{ending_instruction(is_last_point, batch=False)}\n\n"
        "Return only the prose of this section, as plain text without headings or markdown."
    )
