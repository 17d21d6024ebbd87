"""Instruction fragments shared by the single-point and batch prompts."""

from __future__ import annotations

from outlinewriter.config import DetailLevel

ESSAY_WRITER_SYSTEM_PROMPT = (
    "You are a professional essayist expanding an outline into a long-form essay, one part at a "
    "time. Write continuous prose that follows on from the text already written. "
    "Never repeat what was already said and never answer outline points you were told to skip."
)

PREVIOUS_CONTENT_TAIL_CHARS = 2000

_SINGLE_LENGTH: dict[str, str] = {
    "brief": "Concise (50-80 words), go straight to the point.",
    "standard": "Medium (100-150 words). Analyze fully, in concise sentences.",
    "detailed": (
        "VERY LONG AND DETAILED (150-250 words). Write a full-bodied paragraph. Expand the idea to "
        "the maximum with real-world examples, data (reasonable assumptions), comparisons, or "
        "counter-arguments. Do not write skimpily."
    ),
}

_BATCH_LENGTH: dict[str, str] = {
    "brief": "LEVEL: Concise. Each item about 50-80 words.",
    "standard": "LEVEL: Medium. Each item about 100-150 words, fully fleshed out.",
    "detailed": (
        "LEVEL: VERY LONG & IN-DEPTH. Each sub-item (level > 0) must be a large paragraph of "
        "150-250 words. Dig deep: give reasoning, evidence, illustrative examples and contrasts. "
        "Do not be afraid to write long."
    ),
}


def single_length_instruction(detail_level: DetailLevel) -> str:
    return _SINGLE_LENGTH.get(detail_level, _SINGLE_LENGTH["standard"])


def batch_length_instruction(detail_level: DetailLevel) -> str:
    return _BATCH_LENGTH.get(detail_level, _BATCH_LENGTH["standard"])


def previous_content_block(accumulated: str, *, tail_chars: int, placeholder: str) -> str:
    """Trailing slice of the accumulated text, fenced so it is not mistaken for the task."""

    body = accumulated[-tail_chars:] if accumulated and tail_chars > 0 else ""
    return '"""\n' + (body or placeholder) + '\n"""'


def look_ahead_line(look_ahead: list[str]) -> str:
    if not look_ahead:
        return "[nothing, this is the end of the outline]"
    return '"' + "; ".join(look_ahead) + '..."'


def ending_instruction(is_last: bool, *, batch: bool) -> str:
    if is_last:
        if batch:
            return (
                "This batch ends the essay. The last item must close with a complete, meaningful "
                "conclusion; earlier items must not conclude."
            )
        return "This is the final part. Write a complete and profound conclusion."
    return (
        "The essay is not finished. DO NOT write any concluding or summarizing sentence "
        "(such as 'In conclusion' or 'To sum up')."
    )
