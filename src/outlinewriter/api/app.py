"""FastAPI app exposing the writing session, with SSE streaming of generation runs.

State lives in process memory: one app instance serves one writing session.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from outlinewriter import __version__
from outlinewriter.config import Settings, load_settings
from outlinewriter.events import RunEvent
from outlinewriter.llm.client import AsyncLLMClient, TextGenerationService
from outlinewriter.llm.generation import GenerationClient
from outlinewriter.logging import configure_logging, get_logger
from outlinewriter.models.config import LANGUAGE_OPTIONS, TONE_PRESETS, GenerationConfig
from outlinewriter.models.outline import SAMPLE_OUTLINE, OutlinePoint, compose_document, progress
from outlinewriter.orchestrator.runner import Orchestrator


class OutlineRequest(BaseModel):
    """Raw outline text to parse."""

    text: str


class ContentUpdate(BaseModel):
    content: str


class ConfigUpdate(BaseModel):
    key: str
    value: Any


class ToneRequest(BaseModel):
    tone: str


class PointsResponse(BaseModel):
    points: list[OutlinePoint]
    progress: int
    is_generating: bool


def create_app(*, settings: Settings | None = None, service: TextGenerationService | None = None) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Settings; loaded from the environment when omitted.
        service: Text-generation backend; an OpenAI client is built from settings when omitted.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    backend = service if service is not None else AsyncLLMClient(settings)
    orchestrator = Orchestrator(GenerationClient(backend), settings)

    app = FastAPI(title="OutlineWriter", version=__version__)
    app.state.orchestrator = orchestrator
    app.state.run_task = None

    def busy() -> bool:
        task: asyncio.Task | None = app.state.run_task
        return orchestrator.is_generating or (task is not None and not task.done())

    def ensure_idle() -> None:
        if busy():
            raise HTTPException(status_code=409, detail="a generation is already running")

    def log_run_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("Streamed run was cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Streamed run failed", exc_info=exc)

    def points_payload() -> PointsResponse:
        return PointsResponse(
            points=orchestrator.points,
            progress=progress(orchestrator.points),
            is_generating=busy(),
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/sample")
    def sample() -> dict[str, str]:
        return {"text": SAMPLE_OUTLINE}

    @app.post("/outline")
    async def process_outline(req: OutlineRequest) -> PointsResponse:
        ensure_idle()
        orchestrator.process_outline(req.text)
        return points_payload()

    @app.get("/points")
    async def list_points() -> PointsResponse:
        return points_payload()

    @app.put("/points/{point_id}/content")
    async def update_point_content(point_id: str, req: ContentUpdate) -> OutlinePoint:
        point = orchestrator.get_point(point_id)
        if point is None:
            raise HTTPException(status_code=404, detail="point not found")
        orchestrator.update_point_content(point_id, req.content)
        return point

    @app.post("/points/{point_id}/generate")
    async def generate_single(point_id: str) -> OutlinePoint:
        ensure_idle()
        if orchestrator.get_point(point_id) is None:
            raise HTTPException(status_code=404, detail="point not found")
        logger.info("API single generation requested", extra={"point_id": point_id})
        point = await orchestrator.generate_single(point_id)
        if point is None:
            raise HTTPException(status_code=409, detail="generation was stopped")
        return point

    @app.post("/runs")
    async def run_all() -> dict[str, Any]:
        ensure_idle()
        logger.info("API run requested", extra={"point_count": len(orchestrator.points)})
        summary = await orchestrator.generate_all()
        return summary.as_dict()

    @app.post("/runs/stream")
    async def runs_stream() -> StreamingResponse:
        ensure_idle()
        logger.info("API streamed run requested", extra={"point_count": len(orchestrator.points)})

        queue: asyncio.Queue[RunEvent | None] = asyncio.Queue()
        unsubscribe = orchestrator.subscribe(queue.put_nowait)

        async def run() -> None:
            try:
                await orchestrator.generate_all()
            finally:
                unsubscribe()
                queue.put_nowait(None)

        task = asyncio.create_task(run())
        task.add_done_callback(log_run_failure)
        app.state.run_task = task

        async def gen() -> AsyncGenerator[bytes, None]:
            while True:
                ev = await queue.get()
                if ev is None:
                    break
                payload = json.dumps(ev.model_dump(mode="json"), ensure_ascii=False)
                yield f"data: {payload}\n\n".encode("utf-8")

        return StreamingResponse(gen(), media_type="text/event-stream")

    @app.post("/runs/stop")
    async def stop() -> dict[str, bool]:
        return {"stopping": orchestrator.stop()}

    @app.get("/config")
    async def get_config() -> dict[str, Any]:
        return {
            "config": orchestrator.config.model_dump(mode="json"),
            "available_tones": orchestrator.config.available_tones,
            "tone_presets": [p.model_dump() for p in TONE_PRESETS],
            "languages": list(LANGUAGE_OPTIONS),
        }

    @app.patch("/config")
    async def update_config(req: ConfigUpdate) -> GenerationConfig:
        if not orchestrator.update_config(req.key, req.value):
            raise HTTPException(status_code=422, detail=f"config change rejected: {req.key}")
        return orchestrator.config

    @app.post("/config/tones/toggle")
    async def toggle_tone(req: ToneRequest) -> GenerationConfig:
        if not orchestrator.toggle_tone(req.tone):
            raise HTTPException(status_code=422, detail="at least one tone must stay selected")
        return orchestrator.config

    @app.post("/config/custom-tones")
    async def add_custom_tone(req: ToneRequest) -> GenerationConfig:
        if not orchestrator.add_custom_tone(req.tone):
            raise HTTPException(status_code=422, detail="tone must not be empty")
        return orchestrator.config

    @app.delete("/config/custom-tones/{tone}")
    async def remove_custom_tone(tone: str) -> GenerationConfig:
        if not orchestrator.remove_custom_tone(tone):
            raise HTTPException(status_code=422, detail="cannot delete the only selected tone")
        return orchestrator.config

    @app.get("/document")
    async def document() -> dict[str, Any]:
        return {"text": compose_document(orchestrator.points), "progress": progress(orchestrator.points)}

    return app
