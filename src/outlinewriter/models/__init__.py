"""Pydantic models used across the project."""

from __future__ import annotations

from outlinewriter.models.config import (
    LANGUAGE_OPTIONS,
    TONE_PRESETS,
    GenerationConfig,
    TonePreset,
    UserConfigViolation,
)
from outlinewriter.models.outline import (
    SAMPLE_OUTLINE,
    InvalidTransition,
    OutlinePoint,
    PointState,
    compose_document,
    find_index,
    progress,
)

__all__ = [
    "LANGUAGE_OPTIONS",
    "SAMPLE_OUTLINE",
    "TONE_PRESETS",
    "GenerationConfig",
    "InvalidTransition",
    "OutlinePoint",
    "PointState",
    "TonePreset",
    "UserConfigViolation",
    "compose_document",
    "find_index",
    "progress",
]
