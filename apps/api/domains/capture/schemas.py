"""Pydantic schemas for the capture domain."""

from pydantic import BaseModel, Field
from typing import Any, Optional


class SmsIn(BaseModel):
    """An SMS forwarded by the device listener."""

    body: str = Field(..., min_length=1)
    sender: str = "Unknown"


class NotificationIn(BaseModel):
    """A system notification forwarded by the device listener."""

    title: Optional[str] = None
    body: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)


class DirectTransactionIn(BaseModel):
    amount: float | str
    description: str
    category: Optional[str] = None
    date: Optional[str] = None
    type: Optional[str] = None
    merchant: Optional[str] = None
    bank: Optional[str] = None


class EventIn(BaseModel):
    """A raw event in one of the admissible shapes.

    Synthetic test events are not accepted here; they go through the
    diagnostics endpoint.
    """

    transaction: Optional[DirectTransactionIn] = None
    message: Optional[str] = None
    body: Optional[str] = None
    sender: Optional[str] = None
    url: Optional[str] = None
    amount: Optional[float | str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    type: Optional[str] = None
    merchant: Optional[str] = None

    model_config = {"extra": "ignore"}


class SelfTestIn(BaseModel):
    message: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    type: Optional[str] = None
    merchant: Optional[str] = None
    category: Optional[str] = None


class ParsedTransactionOut(BaseModel):
    amount: float
    description: str
    type: str
    merchant: Optional[str] = None
    bank: Optional[str] = None
    balance: Optional[float] = None
    date: Optional[str] = None
    category: Optional[str] = None


class CaptureResponse(BaseModel):
    """Outcome of one capture attempt. ``persisted`` is the boolean contract."""

    persisted: bool
    status: str  # persisted | rejected | failed | dropped | ignored
    message: Optional[str] = None
    error: Optional[str] = None
    transaction: Optional[ParsedTransactionOut] = None
    transaction_id: Optional[str] = None
    category_id: Optional[str] = None
    bank_account_id: Optional[str] = None


class PipelineStatusOut(BaseModel):
    state: str
    last_outcome: Optional[str] = None
