"""Health endpoint for uptime monitors.

Serves `GET /health` from a small FastAPI app. `HealthServer` runs it with
uvicorn as a task on the bot's event loop.
"""

import asyncio
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)


def create_health_app() -> FastAPI:
    """Build the FastAPI app exposing GET /health."""
    app = FastAPI(
        title="Sister Botina",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    return app


class HealthServer:
    """Runs the health app with uvicorn alongside the bot."""

    def __init__(self, host: str = "0.0.0.0", port: int = 3000) -> None:
        self.host = host
        self.port = port
        config = uvicorn.Config(
            create_health_app(),
            host=host,
            port=port,
            log_level="warning",
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._task: asyncio.Task[None] | None = None

    @property
    def started(self) -> bool:
        return self._server.started

    async def start(self) -> None:
        """Start serving in a background task."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._server.serve())
        logger.info("Health check server running on port %s", self.port)

    async def stop(self) -> None:
        """Ask uvicorn to exit and wait for it."""
        if self._task is None:
            return
        self._server.should_exit = True
        await self._task
        self._task = None
