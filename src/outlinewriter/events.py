"""Event model published by the orchestrator.

Every change the orchestrator makes to the outline model or the configuration is announced
as a :class:`RunEvent`, so a UI can re-render from the events (the HTTP API streams them as
Server-Sent Events). Events are not persisted.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """High-level event categories."""

    SYSTEM = "system"
    POINT = "point"
    BATCH = "batch"
    ERROR = "error"


class ContentType(str, Enum):
    """Semantic types within event streams."""

    OUTLINE_LOADED = "outline_loaded"
    CONFIG_UPDATED = "config_updated"
    CONTENT_EDITED = "content_edited"

    POINT_GENERATING = "point_generating"
    POINT_DONE = "point_done"
    POINT_FAILED = "point_failed"

    BATCH_START = "batch_start"
    BATCH_DONE = "batch_done"
    BATCH_FAILED = "batch_failed"

    RUN_STOPPED = "run_stopped"
    RUN_DONE = "run_done"


class RunEvent(BaseModel):
    """A single event."""

    run_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    event_type: EventType
    content_type: ContentType

    data: str | dict | list | None = None
    metadata: dict[str, str | int | float | bool | None] = Field(default_factory=dict)


EventListener = Callable[[RunEvent], None]
