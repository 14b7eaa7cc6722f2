import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.auth import auth_middleware
from src.api.core.middleware.logging import logging_middleware
from src.api.core.middleware.security import (
    PayloadSizeMiddleware,
    SecurityHeadersMiddleware,
)
from src.api.router import api_router
from src.database.connection import AsyncSessionLocal
from src.redis.client import close_redis_pool
from src.utils.logger import setup_logging
from src.utils.settings.app import AppSettings

app_settings = AppSettings()
is_production = app_settings.is_production


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = setup_logging(is_production, app_settings.LOG_LEVEL)
    app_settings.validate_prod()
    logger.info("Starting PharmaStock API...")

    # Tests swap in their own factory before startup
    if getattr(app.state, "session_factory", None) is None:
        app.state.session_factory = AsyncSessionLocal
    logger.info("Database session factory added to app state")

    yield

    logger.info("Shutting down PharmaStock API...")
    await close_redis_pool()


app = FastAPI(
    title="PharmaStock API",
    description="Staff role change workflow and notifications for pharmacy teams",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    # Security: Disable docs in production
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)
app.state.session_factory = None

# Register global exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)
app.add_middleware(PayloadSizeMiddleware, max_request_size=app_settings.MAX_REQUEST_SIZE)
app.middleware("http")(auth_middleware)
app.middleware("http")(logging_middleware)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
