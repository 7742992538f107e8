"""Health check router - liveness + readiness.

Readiness reads the bank-account roster from the configured ledger with a
2s timeout. A ledger without accounts is reported as degraded: every
captured transaction would fail with NoAccountsAvailable.
"""

import asyncio
import structlog
from fastapi import APIRouter

from apps.api.core.errors import ServiceUnavailableError
from apps.api.domains.capture.service import get_pipeline

router = APIRouter(tags=["health"])
logger = structlog.get_logger()

LEDGER_TIMEOUT_SECONDS = 2


@router.get("/health")
async def health_liveness():
    """Liveness probe - returns 200 if the API process is running."""
    return {"status": "healthy", "service": "api"}


@router.get("/health/ready")
async def health_readiness():
    """Readiness probe - checks the ledger and the pipeline state."""
    status = {
        "status": "healthy",
        "services": {
            "api": "up",
            "ledger": "unknown",
        },
        "pipeline": "unknown",
    }

    try:
        pipeline = get_pipeline()
    except ServiceUnavailableError as e:
        status["services"]["ledger"] = "unconfigured"
        status["status"] = "degraded"
        logger.warning("ledger_health_unconfigured", error=e.detail)
        return status

    status["pipeline"] = pipeline.state.value
    try:
        accounts = await asyncio.wait_for(
            pipeline.store.get_bank_accounts(),
            timeout=LEDGER_TIMEOUT_SECONDS,
        )
        if accounts:
            status["services"]["ledger"] = "up"
        else:
            status["services"]["ledger"] = "no_accounts"
            status["status"] = "degraded"
    except asyncio.TimeoutError:
        status["services"]["ledger"] = "timeout"
        status["status"] = "degraded"
        logger.warning("ledger_health_timeout", timeout_s=LEDGER_TIMEOUT_SECONDS)
    except Exception as e:
        status["services"]["ledger"] = "down"
        status["status"] = "degraded"
        logger.warning("ledger_health_failed", error=str(e))

    return status
