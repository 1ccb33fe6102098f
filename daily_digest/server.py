"""FastAPI surface for manual runs and inspection.

Endpoints:
- GET /run-now: run the pipeline synchronously
- GET /health: liveness probe
- GET /processed: snapshot of stored links
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from .core.errors import RunInProgressError
from .runner import DigestPipeline
from .scheduler import DailyScheduler


def create_app(pipeline: DigestPipeline, scheduler: DailyScheduler | None = None) -> FastAPI:
    logger = pipeline.logger

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if scheduler is not None:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler is not None:
                await scheduler.stop()
            await pipeline.aclose()

    app = FastAPI(title="Daily Digest", lifespan=lifespan)

    @app.get("/run-now")
    async def run_now():
        try:
            result = await pipeline.run_once(trigger="manual")
        except RunInProgressError as exc:
            return JSONResponse(status_code=409, content={"success": False, "error": str(exc)})
        except Exception as exc:  # noqa: BLE001
            logger.error("Manual run failed: %s", exc, extra={"event": "manual_run_failed"})
            return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
        return {
            "success": True,
            "message": "Digest processing completed",
            "status": result.status,
            "fetched": result.fetched,
            "new": result.new,
            "published": result.published,
        }

    @app.get("/health")
    async def health():
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/processed")
    async def processed():
        links = await pipeline.processed_links()
        return {"count": len(links), "articles": links}

    return app


def serve(app: FastAPI, host: str, port: int, log_level: str = "info") -> None:
    logging.getLogger("daily_digest").info("Daily digest service listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())
