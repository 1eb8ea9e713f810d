"""FastAPI application factory and main entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

import config
import logging_config
from api import router as api_router
from api.errors import register_exception_handlers
from db import close_db, init_db

# Setup logging
logging_config.setup_logging(config.settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    await init_db()
    yield
    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Noteful API",
        description="User registration service for Noteful",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router.api_router, prefix=config.settings.API_PREFIX)
    return app


app = create_app()
