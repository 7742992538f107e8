"""Capture router - ingress endpoints for device listeners.

A rejected or dropped event is not an HTTP error: the ingress contract is
boolean, so every processed event answers 200 with ``persisted`` set.
"""

import structlog
from fastapi import APIRouter, Depends

from apps.api.core.config import Settings, get_settings
from apps.api.core.errors import NotFoundError
from apps.api.domains.capture.schemas import (
    CaptureResponse,
    EventIn,
    NotificationIn,
    PipelineStatusOut,
    SelfTestIn,
    SmsIn,
)
from apps.api.domains.capture.service import (
    capture_event,
    capture_notification,
    capture_sms,
    get_pipeline,
    result_payload,
)
from packages.transaction_capture.pipeline import NotificationPipeline

router = APIRouter(prefix="/capture", tags=["capture"])
logger = structlog.get_logger()


@router.post("/sms", response_model=CaptureResponse)
async def capture_sms_endpoint(
    request: SmsIn,
    pipeline: NotificationPipeline = Depends(get_pipeline),
):
    """Capture a bank SMS. Non-transaction texts are ignored."""
    return await capture_sms(pipeline, request.body, request.sender)


@router.post("/notification", response_model=CaptureResponse)
async def capture_notification_endpoint(
    request: NotificationIn,
    pipeline: NotificationPipeline = Depends(get_pipeline),
):
    """Capture a system notification (title + body + data)."""
    return await capture_notification(pipeline, request.title, request.body, request.data)


@router.post("/event", response_model=CaptureResponse)
async def capture_event_endpoint(
    request: EventIn,
    pipeline: NotificationPipeline = Depends(get_pipeline),
):
    """Capture a raw event: direct transaction, message, or deep link."""
    payload = request.model_dump(exclude_none=True)
    return await capture_event(pipeline, payload)


@router.get("/status", response_model=PipelineStatusOut)
async def pipeline_status(pipeline: NotificationPipeline = Depends(get_pipeline)):
    last = pipeline.last_result
    return {
        "state": pipeline.state.value,
        "last_outcome": last.outcome.value if last else None,
    }


@router.post("/diagnostics/test", response_model=CaptureResponse)
async def run_self_test(
    request: SelfTestIn | None = None,
    settings: Settings = Depends(get_settings),
    pipeline: NotificationPipeline = Depends(get_pipeline),
):
    """Push a synthetic event through the pipeline. Disabled unless ENABLE_DIAGNOSTICS."""
    if not settings.ENABLE_DIAGNOSTICS:
        raise NotFoundError("Diagnostics are disabled")

    payload = None
    if request is not None:
        fields = request.model_dump(exclude_none=True)
        if fields:
            payload = {"test": True, **fields}

    result = await pipeline.run_self_test(payload)
    logger.info("self_test_finished", outcome=result.outcome.value)
    return result_payload(result)
