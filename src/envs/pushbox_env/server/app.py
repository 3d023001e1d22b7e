# Copyright (c) Meta Platforms, Inc. and affiliates.
# All rights reserved.
#
# This source code is licensed under the BSD-style license found in the
# LICENSE file in the root directory of this source tree.

"""
FastAPI application for the Pushbox Environment.

This module creates an HTTP server that exposes a PushboxEnvironment over
HTTP endpoints. All requests share one environment, which serializes them.

Usage:
    # Development (with auto-reload):
    uvicorn envs.pushbox_env.server.app:create_app --factory --reload --host 0.0.0.0 --port 8000

    # Or run directly:
    python -m envs.pushbox_env.server.app

Configuration is read from PUSHBOX_* environment variables (see config.py).
"""

import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from ..errors import LevelNotFoundError, PushboxError
from ..models import PushboxAction
from .config import ServerConfig
from .pushbox_environment import PushboxEnvironment

logger = logging.getLogger(__name__)


class StepRequest(BaseModel):
    direction: Literal["up", "right", "down", "left"]


def configure_logging(log_dir: str | Path) -> None:
    """Log to ``<log_dir>/pushbox_server.log`` and to the console."""
    os.makedirs(log_dir, exist_ok=True)
    log_file = Path(log_dir) / "pushbox_server.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()  # Keep logging to console as well
        ]
    )


def create_app(
    env: Optional[PushboxEnvironment] = None,
    config: Optional[ServerConfig] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        env: Environment to serve (built from config if not provided)
        config: Settings used when env is not provided (read from the
            environment variables by default)

    Returns:
        FastAPI application instance
    """
    if env is None:
        config = config or ServerConfig.from_env()
        configure_logging(config.log_dir)
        env = PushboxEnvironment(
            config.level_dir,
            level=config.start_level,
            output_dir=config.output_dir,
            replay_speed=config.replay_speed,
        )

    app = FastAPI(title="Pushbox Environment", version="0.1.0")
    app.state.env = env

    @app.exception_handler(PushboxError)
    async def pushbox_error_handler(request, exc: PushboxError):
        status_code = 404 if isinstance(exc, LevelNotFoundError) else 400
        logger.warning(f"{request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={"error": str(exc), "error_type": type(exc).__name__},
        )

    @app.on_event("startup")
    async def startup_event():
        logger.info("Pushbox server starting up.")

    @app.on_event("shutdown")
    def shutdown_event():
        env.stop_replay()
        logger.info("Pushbox server shutting down.")

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.post("/reset")
    def reset():
        return asdict(env.reset())

    @app.post("/step")
    def step(request: StepRequest):
        return asdict(env.step(PushboxAction(direction=request.direction)))

    @app.post("/undo")
    def undo():
        return asdict(env.undo())

    @app.post("/redo")
    def redo():
        return asdict(env.redo())

    @app.get("/state")
    def state():
        return {
            "episode_id": env.state.episode_id,
            "step_count": env.state.step_count,
            "level": env.level_number,
            "max_level": env.max_level,
        }

    @app.get("/render", response_class=PlainTextResponse)
    def render():
        return env.render()

    @app.post("/level/next")
    def next_level():
        return asdict(env.next_level())

    @app.post("/level/previous")
    def previous_level():
        return asdict(env.previous_level())

    @app.post("/level/{number}")
    def load_level(number: int):
        return asdict(env.load_level(number))

    @app.post("/replay/start")
    def start_replay():
        return asdict(env.start_replay())

    @app.post("/replay/pause")
    def pause_replay():
        return asdict(env.toggle_replay_pause())

    @app.post("/replay/stop")
    def stop_replay():
        return asdict(env.stop_replay())

    @app.post("/replay/faster")
    def replay_faster():
        env.replay_faster()
        return {"replay_speed": env.replay_speed}

    @app.post("/replay/slower")
    def replay_slower():
        env.replay_slower()
        return {"replay_speed": env.replay_speed}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
