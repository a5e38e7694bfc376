# src/ascend/api_server/main.py
"""
FastAPI application serving the goal-record store over HTTP.

The store is created at startup from the tracker configuration (or passed
to :func:`create_app` directly) and attached to ``app.state``. Outside
production (``ASCEND_ENV`` unset or not ``production``) an empty in-memory
store is seeded with demo records.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..exceptions import ConfigError
from ..storage import GoalRecordStore, InMemoryGoalStore, create_store
from .routes import router as goals_router
from .seed import demo_goals

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3001


def _default_store() -> GoalRecordStore:
    """Store named by the configuration; the http backend would point at ourselves."""
    from ..config import load_config

    config = load_config()
    if config.store.backend == "http":
        raise ConfigError("The record-store server cannot use the 'http' store backend.")
    return create_store(config.store)


def create_app(store: Optional[GoalRecordStore] = None, seed_demo: Optional[bool] = None) -> FastAPI:
    """
    Build the application.

    Args:
        store: Store to serve; created from configuration at startup when None.
        seed_demo: Seed demo records into an empty in-memory store.
            Defaults to True unless ``ASCEND_ENV=production``.
    """
    if seed_demo is None:
        seed_demo = os.environ.get("ASCEND_ENV", "development") != "production"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Goal store server starting up...")
        try:
            app.state.store = store if store is not None else _default_store()
        except ConfigError as e:
            logger.critical("Goal store configuration failed: %s", e)
            app.state.store = None
            logger.warning("Server will start but the goal store will be unavailable")

        current = app.state.store
        if seed_demo and isinstance(current, InMemoryGoalStore) and not await current.list_goals():
            await current.replace_all(demo_goals())
            logger.info("Seeded demo goals")

        logger.info("Goal store server startup complete")
        yield

        logger.info("Goal store server shutting down...")
        close = getattr(app.state.store, "close", None)
        if close is not None:
            try:
                await close()
            except Exception as e:
                logger.error("Error closing goal store: %s", e)
        logger.info("Goal store server shutdown complete")

    app = FastAPI(
        title="Ascend goal store",
        description="Ordered goal-record store for the Ascend goal tracker",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )
    app.include_router(goals_router, prefix="/api/goals", tags=["goals"])

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint for monitoring."""
        current = getattr(app.state, "store", None)
        return {
            "status": "healthy" if current is not None else "degraded",
            "store": type(current).__name__ if current is not None else None,
            "version": __version__,
        }

    return app


def run() -> None:
    """Console entry point: serve with uvicorn on ``PORT`` (default 3001)."""
    import uvicorn

    from ..logging_config import configure_logging

    configure_logging(app_name="ascend-server")
    uvicorn.run(create_app(), host=os.environ.get("HOST", "0.0.0.0"), port=int(os.environ.get("PORT", DEFAULT_PORT)))
