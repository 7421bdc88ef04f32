"""
Module 09D - FastAPI Application

Local control surface of a running station.

Usage:
    app = create_app(tasker, metrics)
    server_thread = start_control_api(app, host="127.0.0.1", port=8787)
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from api.errors import (
    APIError,
    api_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from api.routes import health, metrics, on_demand
from core.metrics import RetrievalMetrics
from station.tasker import Tasker

logger = logging.getLogger(__name__)


# Configure logging: respects SPARK_LOG_LEVEL
def _resolve_log_level() -> int:
    """Resolve log level from env var, defaulting to INFO."""
    raw = os.getenv("SPARK_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(
    tasker: Optional[Tasker] = None,
    metrics_counter: Optional[RetrievalMetrics] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    from spark_cli import __version__

    app = FastAPI(
        title="Spark Station Control API",
        description="""
Local control API of a retrieval-checker station.

## Endpoints

- **GET /health** - Health check
- **POST /on-demand** - Queue a check ahead of the round's tasks
- **GET /metrics** - Retrieval counters of the current round
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
    )
    app.state.tasker = tasker
    app.state.metrics = metrics_counter

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(on_demand.router)
    app.include_router(metrics.router)

    return app


def start_control_api(app: FastAPI, host: str, port: int) -> threading.Thread:
    """Serve `app` with uvicorn on a daemon thread."""
    import uvicorn

    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="control-api", daemon=True)
    thread.start()
    logger.info("Control API listening on http://%s:%d", host, port)
    return thread
