"""Generation orchestrator.

Drives single-point and whole-document generation against the outline model:

- at most one generation call is in flight at a time (callers must not overlap
  ``generate_single`` / ``generate_all``; ``is_generating`` tells them when not to);
- batches run strictly in outline order, each seeing the prose committed by earlier
  batches of the same run;
- ``stop()`` is cooperative: it is honored between batches, never mid-call;
- cancelling the awaiting task fails the points of the in-flight call, so no point is
  left GENERATING.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from outlinewriter.config import Settings
from outlinewriter.events import ContentType, EventListener, EventType, RunEvent
from outlinewriter.llm.client import AsyncLLMClient
from outlinewriter.llm.generation import GenerationClient, GenerationError
from outlinewriter.logging import get_logger, run_context, step_context
from outlinewriter.models.config import GenerationConfig, UserConfigViolation
from outlinewriter.models.outline import OutlinePoint, PointState, find_index
from outlinewriter.orchestrator.context import accumulated_text, look_ahead_points
from outlinewriter.orchestrator.state import RunSummary, SessionState
from outlinewriter.prompts import build_batch_prompt, build_single_prompt
from outlinewriter.utils.ids import format_run_id, run_counter
from outlinewriter.utils.outline_parser import parse_outline

logger = get_logger(__name__)

UNKNOWN_ERROR = "Unknown error"
MISSING_RESULT_ERROR = "No result was returned for this point."
EMPTY_RESULT_ERROR = "The generation service returned empty content for this point."
CANCELLED_ERROR = "Generation was cancelled."


class Orchestrator:
    """Owns the outline model, the generation config and the stop flag of one session."""

    def __init__(
        self,
        client: GenerationClient,
        settings: Settings,
        *,
        config: GenerationConfig | None = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self.state = SessionState(config=config or GenerationConfig.from_settings(settings))
        self._listeners: list[EventListener] = []
        self._runs = run_counter()
        self._run_id = "-"
        self._seq = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "Orchestrator":
        return cls(GenerationClient(AsyncLLMClient(settings)), settings)

    # ---------------- read access ----------------
    @property
    def points(self) -> list[OutlinePoint]:
        return self.state.points

    @property
    def config(self) -> GenerationConfig:
        return self.state.config

    @property
    def is_generating(self) -> bool:
        return self.state.is_generating

    def get_point(self, point_id: str) -> OutlinePoint | None:
        idx = find_index(self.state.points, point_id)
        return self.state.points[idx] if idx != -1 else None

    # ---------------- events ----------------
    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(
        self,
        event_type: EventType,
        content_type: ContentType,
        data: str | dict | list | None = None,
        *,
        metadata: dict[str, str | int | float | bool | None] | None = None,
    ) -> RunEvent:
        self._seq += 1
        ev = RunEvent(
            run_id=self._run_id,
            seq=self._seq,
            event_type=event_type,
            content_type=content_type,
            data=data,
            metadata=metadata or {},
        )
        for listener in list(self._listeners):
            listener(ev)
        return ev

    def _emit_point(self, point: OutlinePoint) -> None:
        content_type = {
            PointState.GENERATING: ContentType.POINT_GENERATING,
            PointState.DONE: ContentType.POINT_DONE,
            PointState.FAILED: ContentType.POINT_FAILED,
        }.get(point.state)
        if content_type is None:
            return
        self._emit(EventType.POINT, content_type, point.model_dump(mode="json"))

    def _next_run_id(self) -> str:
        self._run_id = format_run_id(next(self._runs))
        return self._run_id

    # ---------------- user edits ----------------
    def process_outline(self, raw_text: str) -> list[OutlinePoint]:
        """Replace the whole outline model with a freshly parsed one."""

        points = parse_outline(raw_text)
        self.state.raw_outline = raw_text
        self.state.points = points
        logger.info("Outline loaded", extra={"point_count": len(points)})
        self._emit(EventType.SYSTEM, ContentType.OUTLINE_LOADED, {"point_count": len(points)})
        return points

    def update_point_content(self, point_id: str, text: str) -> bool:
        """Manual edit of a point's prose. Status is left untouched."""

        point = self.get_point(point_id)
        if point is None:
            return False
        point.content = text
        self._emit(EventType.POINT, ContentType.CONTENT_EDITED, point.model_dump(mode="json"))
        return True

    def _change_config(self, mutate: Callable[[GenerationConfig], Any], description: str) -> bool:
        candidate = self.state.config.model_copy(deep=True)
        try:
            result = mutate(candidate)
        except UserConfigViolation as exc:
            logger.info("Config change rejected", extra={"change": description, "reason": str(exc)})
            return False
        self.state.config = result if isinstance(result, GenerationConfig) else candidate
        self._emit(EventType.SYSTEM, ContentType.CONFIG_UPDATED, self.state.config.model_dump(mode="json"))
        return True

    def update_config(self, key: str, value: Any) -> bool:
        """Set one config field. Invalid changes are rejected and leave the config as it was."""

        return self._change_config(lambda c: c.with_field(key, value), f"set {key}")

    def toggle_tone(self, tone: str) -> bool:
        return self._change_config(lambda c: c.toggle_tone(tone), f"toggle tone {tone!r}")

    def deselect_tone(self, tone: str) -> bool:
        return self._change_config(lambda c: c.deselect_tone(tone), f"deselect tone {tone!r}")

    def add_custom_tone(self, tone: str) -> bool:
        return self._change_config(lambda c: c.add_custom_tone(tone), f"add custom tone {tone!r}")

    def remove_custom_tone(self, tone: str) -> bool:
        return self._change_config(lambda c: c.remove_custom_tone(tone), f"remove custom tone {tone!r}")

    # ---------------- cancellation ----------------
    def stop(self) -> bool:
        """Ask the running generation to stop before its next unit of work.

        An in-flight call is not aborted; its result is still committed. Returns False when
        nothing is running (the request is dropped so it cannot leak into a later run).
        """

        if not self.state.is_generating:
            return False
        self.state.stop_requested = True
        logger.info("Stop requested")
        return True

    # ---------------- single point ----------------
    async def generate_single(self, point_id: str) -> OutlinePoint | None:
        """Generate (or regenerate) one point, regardless of its neighbours' state.

        Returns the point, or None when it does not exist or a stop was pending.
        """

        if self.state.stop_requested:
            logger.info("Single generation skipped: stop pending", extra={"point_id": point_id})
            self.state.stop_requested = False
            return None

        points = self.state.points
        idx = find_index(points, point_id)
        if idx == -1:
            return None
        point = points[idx]

        run_id = self._next_run_id()
        self.state.is_generating = True
        try:
            with run_context(run_id=run_id, step=f"point {point_id}"):
                point.mark_generating()
                self._emit_point(point)
                try:
                    prompt = build_single_prompt(
                        point,
                        self.state.raw_outline,
                        accumulated_text(point_id, points),
                        look_ahead_points(point_id, points, self._settings.look_ahead_count),
                        self.state.config,
                        idx == len(points) - 1,
                        tail_chars=self._settings.context_tail_chars,
                    )
                    text = await self._client.generate_one(prompt)
                except GenerationError as exc:
                    point.mark_failed(str(exc) or UNKNOWN_ERROR)
                    logger.warning("Point generation failed", extra={"point_id": point_id, "error": str(exc)})
                except asyncio.CancelledError:
                    point.mark_failed(CANCELLED_ERROR)
                    logger.warning("Point generation cancelled", extra={"point_id": point_id})
                    self._emit_point(point)
                    raise
                except Exception as exc:
                    point.mark_failed(str(exc) or UNKNOWN_ERROR)
                    self._emit_point(point)
                    raise
                else:
                    point.mark_done(text)
                    logger.info("Point generated", extra={"point_id": point_id, "chars": len(text)})
                self._emit_point(point)
        finally:
            self.state.is_generating = False
            self.state.stop_requested = False
        return point

    # ---------------- whole document ----------------
    async def generate_all(self) -> RunSummary:
        """Generate every point that is not DONE, in fixed-size batches, in outline order.

        A failed batch marks its points FAILED and halts the run; later batches keep their
        state and are picked up by the next call.
        """

        run_id = self._next_run_id()
        summary = RunSummary(run_id=run_id)
        self.state.stop_requested = False
        self.state.is_generating = True
        try:
            with run_context(run_id=run_id):
                # Working copy: later batches must see prose committed by earlier ones.
                working = [p.model_copy() for p in self.state.points]
                targets = [(i, p) for i, p in enumerate(working) if p.state != PointState.DONE]
                summary.targeted = len(targets)
                if not targets:
                    logger.info("Nothing to generate")
                    self._emit(EventType.SYSTEM, ContentType.RUN_DONE, summary.as_dict())
                    return summary

                size = self._settings.batch_size
                groups = [targets[i : i + size] for i in range(0, len(targets), size)]
                logger.info("Run started", extra={"targeted": len(targets), "batches": len(groups)})

                for n, group in enumerate(groups, start=1):
                    if self.state.stop_requested:
                        summary.stopped = True
                        logger.info("Run stopped", extra={"batches_sent": summary.batches_sent})
                        self._emit(EventType.SYSTEM, ContentType.RUN_STOPPED, summary.as_dict())
                        break

                    is_last_batch = n == len(groups) and group[-1][0] == len(working) - 1
                    with step_context(f"batch {n}/{len(groups)}"):
                        ok = await self._run_batch(group, working, is_last_batch, summary)
                    if not ok:
                        break

                    if n < len(groups) and self._settings.batch_delay_s > 0:
                        await asyncio.sleep(self._settings.batch_delay_s)

                self._emit(EventType.SYSTEM, ContentType.RUN_DONE, summary.as_dict())
        finally:
            self.state.is_generating = False
            self.state.stop_requested = False
        return summary

    def _both(self, working: Sequence[OutlinePoint], point_id: str) -> list[OutlinePoint]:
        """The working-copy point and, if still present, the live one."""

        out: list[OutlinePoint] = []
        idx = find_index(working, point_id)
        if idx != -1:
            out.append(working[idx])
        live = self.get_point(point_id)
        if live is not None:
            out.append(live)
        return out

    def _fail(self, working: Sequence[OutlinePoint], point_id: str, message: str, summary: RunSummary) -> None:
        """Fail the copies of ``point_id`` that were marked GENERATING; untouched copies keep their state."""

        marked = [p for p in self._both(working, point_id) if p.state == PointState.GENERATING]
        if not marked:
            return
        for p in marked:
            p.mark_failed(message)
        summary.failed.append(point_id)
        live = self.get_point(point_id)
        if live is not None:
            self._emit_point(live)

    async def _run_batch(
        self,
        group: list[tuple[int, OutlinePoint]],
        working: list[OutlinePoint],
        is_last_batch: bool,
        summary: RunSummary,
    ) -> bool:
        """Generate one batch; returns False when the run must halt."""

        batch_points = [p for _, p in group]
        ids = [p.id for p in batch_points]

        try:
            for pid in ids:
                for p in self._both(working, pid):
                    p.mark_generating()
                live = self.get_point(pid)
                if live is not None:
                    self._emit_point(live)
            self._emit(EventType.BATCH, ContentType.BATCH_START, {"ids": ids})

            accumulated = accumulated_text(batch_points[0].id, working)
            look_ahead = look_ahead_points(batch_points[-1].id, working, self._settings.look_ahead_count)
            prompt, schema = build_batch_prompt(
                batch_points,
                self.state.raw_outline,
                accumulated,
                look_ahead,
                self.state.config,
                is_last_batch,
                tail_chars=self._settings.context_tail_chars,
            )

            summary.batches_sent += 1
            results = await self._client.generate_batch(prompt, schema)
        except GenerationError as exc:
            message = str(exc) or UNKNOWN_ERROR
            logger.warning("Batch generation failed; halting run", extra={"ids": ids, "error": message})
            for pid in ids:
                self._fail(working, pid, message, summary)
            summary.halt_reason = message
            self._emit(EventType.ERROR, ContentType.BATCH_FAILED, {"ids": ids, "error": message})
            return False
        except asyncio.CancelledError:
            logger.warning("Batch generation cancelled", extra={"ids": ids})
            for pid in ids:
                self._fail(working, pid, CANCELLED_ERROR, summary)
            raise
        except Exception as exc:
            for pid in ids:
                self._fail(working, pid, str(exc) or UNKNOWN_ERROR, summary)
            raise

        by_id: dict[str, str] = {}
        for item in results:
            if item.id not in ids:
                logger.warning("Batch returned an unknown id", extra={"point_id": item.id})
            elif item.id in by_id:
                logger.warning("Batch returned a duplicate id", extra={"point_id": item.id})
            else:
                by_id[item.id] = item.content

        missing: list[str] = []
        for pid in ids:
            content = by_id.get(pid)
            if content is None or not content.strip():
                missing.append(pid)
                self._fail(working, pid, MISSING_RESULT_ERROR if content is None else EMPTY_RESULT_ERROR, summary)
                continue
            # Last writer wins: a manual edit made while the call was in flight is replaced.
            for p in self._both(working, pid):
                p.mark_done(content)
            summary.done.append(pid)
            live = self.get_point(pid)
            if live is not None:
                self._emit_point(live)

        if missing:
            logger.warning("Batch response omitted points", extra={"ids": missing})
        logger.info("Batch committed", extra={"done": len(ids) - len(missing), "missing": len(missing)})
        self._emit(EventType.BATCH, ContentType.BATCH_DONE, {"ids": ids, "missing": missing})
        return True
