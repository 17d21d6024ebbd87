from __future__ import annotations

from outlinewriter.prompts.batch import BATCH_OUTPUT_SCHEMA, BATCH_SCHEMA_NAME, build_batch_prompt
from outlinewriter.prompts.common import ESSAY_WRITER_SYSTEM_PROMPT
from outlinewriter.prompts.single import build_single_prompt

__all__ = [
    "BATCH_OUTPUT_SCHEMA",
    "BATCH_SCHEMA_NAME",
    "ESSAY_WRITER_SYSTEM_PROMPT",
    "build_batch_prompt",
    "build_single_prompt",
]
