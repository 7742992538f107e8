"""Ingress adapters for SMS and system notifications.

Both listeners apply a cheap keyword pre-filter and hand matching text to
the pipeline. The filter is advisory only; the pipeline stays correct
without it. Adapters only ever build text payloads, never synthetic test
events.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import structlog

from .events import Source
from .pipeline import NotificationPipeline, Outcome, PipelineResult

logger = structlog.get_logger()

SMS_KEYWORDS: Tuple[str, ...] = (
    # debit
    "debited", "spent", "paid", "purchase", "purchased", "transaction",
    "withdrawn", "withdrawal", "payment", "charged", "billed",
    # credit
    "credited", "received", "deposited", "deposit", "refund",
    # amounts
    "inr", "rs.", "amount", "bal", "balance",
    # banks
    "hdfc", "icici", "sbi", "axis", "kotak", "yes bank", "pnb",
    "bank of baroda", "canara bank", "union bank", "upi",
)

NOTIFICATION_KEYWORDS: Tuple[str, ...] = (
    "debited", "credited", "transaction", "payment", "spent", "received",
    "inr", "rs.", "amount", "balance", "upi", "bank", "card",
)


def _has_keyword(text: str, keywords: Tuple[str, ...]) -> bool:
    lower = (text or "").lower()
    return any(keyword in lower for keyword in keywords)


def is_transaction_sms(body: str) -> bool:
    return _has_keyword(body, SMS_KEYWORDS)


def is_transaction_notification(title: Optional[str], body: Optional[str]) -> bool:
    return _has_keyword(f"{title or ''} {body or ''}", NOTIFICATION_KEYWORDS)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class SmsListener:
    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    async def handle(self, body: str, sender: str = "Unknown") -> PipelineResult:
        if not is_transaction_sms(body):
            logger.debug("sms_ignored", sender=sender)
            return PipelineResult(Outcome.IGNORED, message="Not a transaction message")

        logger.info("sms_received", sender=sender)
        payload = {
            "message": body,
            "sender": sender,
            "source": Source.SMS,
            "timestamp": _timestamp(),
        }
        return await self.pipeline.process_event(payload)


class NotificationListener:
    def __init__(self, pipeline: NotificationPipeline):
        self.pipeline = pipeline

    async def handle(
        self, title: Optional[str], body: Optional[str], data: Optional[Dict[str, Any]] = None
    ) -> PipelineResult:
        if not is_transaction_notification(title, body):
            logger.debug("notification_ignored", title=title)
            return PipelineResult(Outcome.IGNORED, message="Not a transaction notification")

        logger.info("notification_received", title=title)
        payload = {
            "title": title,
            "body": body,
            "data": dict(data or {}),
            "message": body,
            "source": Source.NOTIFICATION,
            "timestamp": _timestamp(),
        }
        return await self.pipeline.process_event(payload)
