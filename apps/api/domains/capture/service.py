"""Capture service - pipeline singleton and ledger backend selection.

One NotificationPipeline serves the whole process. Its busy flag is the
only concurrency control, so a second pipeline per request would defeat
the drop-on-busy policy.
"""

import threading
from typing import Optional

import structlog

from apps.api.core.config import Settings, settings as app_settings
from apps.api.core.errors import ServiceUnavailableError
from packages.transaction_capture.adapters import NotificationListener, SmsListener
from packages.transaction_capture.pipeline import NotificationPipeline, PipelineResult
from packages.transaction_capture.store import InMemoryLedgerStore, SupabaseLedgerStore

logger = structlog.get_logger()

_pipeline: Optional[NotificationPipeline] = None
_pipeline_lock = threading.Lock()


def build_store(config: Settings):
    if config.LEDGER_BACKEND == "supabase":
        return SupabaseLedgerStore.from_settings(config)
    return InMemoryLedgerStore()


def build_pipeline(config: Settings) -> NotificationPipeline:
    store = build_store(config)
    logger.info("capture_pipeline_initialized", backend=config.LEDGER_BACKEND)
    return NotificationPipeline(store, default_category_id=config.DEFAULT_CATEGORY_ID)


def get_pipeline() -> NotificationPipeline:
    """Get or create the process-wide pipeline."""
    global _pipeline
    if _pipeline is None:
        with _pipeline_lock:
            if _pipeline is None:
                if app_settings is None:
                    raise ServiceUnavailableError("Capture service is not configured")
                try:
                    _pipeline = build_pipeline(app_settings)
                except RuntimeError as e:
                    logger.error("capture_pipeline_init_failed", error=str(e))
                    raise ServiceUnavailableError("Ledger backend is not configured") from e
    return _pipeline


def reset_pipeline() -> None:
    global _pipeline
    with _pipeline_lock:
        _pipeline = None


def result_payload(result: PipelineResult) -> dict:
    """Flatten a PipelineResult into the capture response shape."""
    transaction = result.transaction
    record = result.record or {}
    return {
        "persisted": result.persisted,
        "status": result.outcome.value,
        "message": result.message,
        "error": type(result.error).__name__ if result.error else None,
        "transaction": transaction.to_dict() if transaction else None,
        "transaction_id": record.get("id"),
        "category_id": record.get("category_id"),
        "bank_account_id": record.get("bank_account_id"),
    }


async def capture_sms(pipeline: NotificationPipeline, body: str, sender: str) -> dict:
    result = await SmsListener(pipeline).handle(body, sender)
    return result_payload(result)


async def capture_notification(pipeline: NotificationPipeline, title, body, data) -> dict:
    result = await NotificationListener(pipeline).handle(title, body, data)
    return result_payload(result)


async def capture_event(pipeline: NotificationPipeline, payload: dict) -> dict:
    result = await pipeline.process_event(payload)
    return result_payload(result)
