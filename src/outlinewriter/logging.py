"""Logging utilities.

Every record carries the id of the generation run it belongs to and the unit of work in
progress (``batch 2/4``, ``point <id>``), so interleaved API requests stay readable.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from collections.abc import Iterator

from rich.logging import RichHandler


_run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("outlinewriter_run_id", default="-")
_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("outlinewriter_step", default="-")

_FORMAT = "%(asctime)s %(levelname)s run=%(run_id)s step=%(step)s %(name)s: %(message)s"


class _RunContextFilter(logging.Filter):
    """Inject run context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = _run_id_var.get()  # type: ignore[attr-defined]
        record.step = _step_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def run_context(*, run_id: str, step: str | None = None) -> Iterator[None]:
    """Bind a generation run id (and optionally a step) for the duration of the block."""

    token_run = _run_id_var.set(run_id)
    token_step = _step_var.set(step or _step_var.get())
    try:
        yield
    finally:
        _run_id_var.reset(token_run)
        _step_var.reset(token_step)


@contextlib.contextmanager
def step_context(step: str) -> Iterator[None]:
    """Bind the current unit of work inside a run."""

    token = _step_var.set(step)
    try:
        yield
    finally:
        _step_var.reset(token)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(level)

    existing = [h for h in root.handlers if isinstance(h, RichHandler)]
    if existing:
        # Called again by a second app factory / CLI invocation in the same process.
        for h in existing:
            if not any(isinstance(f, _RunContextFilter) for f in h.filters):
                h.addFilter(_RunContextFilter())
            h.setFormatter(formatter)
        return

    handler = RichHandler(rich_tracebacks=True, show_time=False, show_level=True, markup=False)
    handler.addFilter(_RunContextFilter())
    handler.setFormatter(formatter)
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)
