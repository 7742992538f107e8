"""Transaction Capture API - FastAPI entry point.

Hosts the ingress endpoints that device SMS/notification listeners call.
CORS origins come from config and errors are RFC 7807 problem details.
"""

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.core.config import Settings, settings
from apps.api.core.errors import register_error_handlers
from apps.api.core.logging import setup_logging
from apps.api.domains.capture.router import router as capture_router
from apps.api.routers import health

logger = structlog.get_logger()

config = settings or Settings.model_construct()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup/shutdown hooks."""
    setup_logging(
        log_level=config.LOG_LEVEL or "INFO",
        json_output=config.ENVIRONMENT == "production",
    )
    logger.info(
        "app_starting",
        version=config.APP_VERSION,
        ledger_backend=config.LEDGER_BACKEND,
        diagnostics=config.ENABLE_DIAGNOSTICS,
    )
    yield
    logger.info("app_stopping")


app = FastAPI(
    title="Transaction Capture API",
    description="Turns bank SMS and notifications into ledger transactions.",
    version=config.APP_VERSION or "0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.allowed_origins if config.ALLOWED_ORIGINS else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(capture_router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")
