"""
Keep-alive web server.
Gives hosting platforms something to ping.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from guildbot import __version__
from guildbot.bot.config import Config
from guildbot.utils.logger import get_logger

logger = get_logger("KeepAlive")

_bot_status = {
    "status": "starting",
    "started_at": time.time(),
    "discord_connected": False,
    "commands": 0,
}

_server_task: Optional[asyncio.Task] = None


def update_bot_status(**kwargs) -> None:
    """Update bot status for health endpoint."""
    _bot_status.update(kwargs)


def get_bot_status() -> dict:
    return dict(_bot_status)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Keep-alive server starting...")
    yield
    logger.info("Keep-alive server shutting down...")


app = FastAPI(
    title="guildbot",
    description="Discord bot keep-alive server",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    return {
        "name": "guildbot",
        "version": __version__,
        "status": _bot_status.get("status", "unknown"),
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    connected = bool(_bot_status.get("discord_connected"))
    status = "healthy" if connected else "degraded"

    return JSONResponse(
        status_code=200 if connected else 503,
        content={
            "status": status,
            "discord": "connected" if connected else "disconnected",
            "commands": _bot_status.get("commands", 0),
            "uptime": round(time.time() - _bot_status["started_at"]),
        },
    )


@app.get("/ping")
async def ping():
    return {"pong": True}


async def start_server(config: Config) -> None:
    """Start the keep-alive server."""
    import uvicorn

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.HOST,
            port=config.PORT,
            log_level="warning",
            access_log=False,
        )
    )

    logger.info(f"Keep-alive server listening on port {config.PORT}")
    await server.serve()


async def run_server(config: Config) -> asyncio.Task:
    """Run server in background task."""
    global _server_task
    _server_task = asyncio.create_task(start_server(config))
    return _server_task
