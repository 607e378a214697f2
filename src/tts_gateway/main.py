"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance for the
gateway. It sets up logging, routing, and the limiter sweep lifecycle.

Usage:
    # Run with uvicorn
    uvicorn tts_gateway.main:app --host 0.0.0.0 --port 8000

    # Or use the module directly
    python -m uvicorn tts_gateway.main:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from tts_gateway import __version__
from tts_gateway.api.dependencies import start_limiters, stop_limiters
from tts_gateway.api.routes import router
from tts_gateway.core.logging import configure_logging, get_logger, info

_LOG = get_logger("tts-gateway.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the limiter sweeps for the lifetime of the application."""
    start_limiters()
    info(_LOG, "startup", version=__version__)
    try:
        yield
    finally:
        stop_limiters()
        info(_LOG, "shutdown")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory function:
        1. Configures structured logging (reads TTS_GW_LOG_LEVEL)
        2. Creates a FastAPI instance with the service title
        3. Registers the gateway router
        4. Starts limiter sweeps on startup and stops them on shutdown

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    configure_logging()

    app = FastAPI(title="tts-gateway", version=__version__, lifespan=lifespan)
    app.include_router(router)

    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
