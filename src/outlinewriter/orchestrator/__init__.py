"""Generation orchestration: context assembly, run state and the orchestrator itself."""

from __future__ import annotations

from outlinewriter.orchestrator.context import accumulated_text, look_ahead_points
from outlinewriter.orchestrator.runner import Orchestrator
from outlinewriter.orchestrator.state import RunSummary, SessionState

__all__ = [
    "Orchestrator",
    "RunSummary",
    "SessionState",
    "accumulated_text",
    "look_ahead_points",
]
