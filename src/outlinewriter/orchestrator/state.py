from __future__ import annotations

from dataclasses import dataclass, field

from outlinewriter.models.config import GenerationConfig
from outlinewriter.models.outline import OutlinePoint


@dataclass
class SessionState:
    """Everything the orchestrator owns for one browser session."""

    config: GenerationConfig
    raw_outline: str = ""
    points: list[OutlinePoint] = field(default_factory=list)
    is_generating: bool = False
    stop_requested: bool = False


@dataclass
class RunSummary:
    """Outcome of one ``generate_all`` run."""

    run_id: str
    targeted: int = 0
    batches_sent: int = 0
    done: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    stopped: bool = False
    halt_reason: str | None = None

    @property
    def halted(self) -> bool:
        return self.halt_reason is not None

    def as_dict(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "targeted": self.targeted,
            "batches_sent": self.batches_sent,
            "done": list(self.done),
            "failed": list(self.failed),
            "stopped": self.stopped,
            "halt_reason": self.halt_reason,
        }
