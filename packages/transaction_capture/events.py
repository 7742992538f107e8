"""Raw event shapes accepted by the pipeline.

An incoming payload is a plain mapping; its shape is decided by which
discriminating field is present, checked in this order:

    transaction -> DirectTransaction
    message/body -> TextMessage
    url -> DeepLink
    test -> SyntheticTest
    amount + description at top level -> DirectTransaction (flat push payload)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from .errors import UnrecognizedShape


class Source:
    SMS = "sms"
    NOTIFICATION = "notification"
    DEEPLINK = "deeplink"
    DIRECT = "direct"
    TEST = "test"


@dataclass(frozen=True)
class DirectTransaction:
    amount: Any
    description: Any
    category: Optional[str] = None
    date: Any = None
    type: Optional[str] = None
    merchant: Optional[str] = None
    bank: Optional[str] = None
    source: str = Source.DIRECT


@dataclass(frozen=True)
class TextMessage:
    body: str
    sender: Optional[str] = None
    source: str = Source.NOTIFICATION


@dataclass(frozen=True)
class DeepLink:
    url: str
    source: str = Source.DEEPLINK


@dataclass(frozen=True)
class SyntheticTest:
    fields: Dict[str, Any] = field(default_factory=dict)
    source: str = Source.TEST


RawEvent = Union[DirectTransaction, TextMessage, DeepLink, SyntheticTest]

_DIRECT_FIELDS = ("amount", "description", "category", "date", "type", "merchant", "bank")


def _direct_from(data: Mapping[str, Any], source: str) -> DirectTransaction:
    return DirectTransaction(source=source, **{key: data.get(key) for key in _DIRECT_FIELDS})


def _source_hint(payload: Mapping[str, Any], default: str) -> str:
    hint = payload.get("source")
    return hint if hint in (Source.SMS, Source.NOTIFICATION) else default


def classify_event(payload: Any) -> RawEvent:
    """Turn a raw payload into exactly one RawEvent shape.

    Raises UnrecognizedShape when no discriminating field is present.
    Events that are already typed pass through unchanged.
    """
    if isinstance(payload, (DirectTransaction, TextMessage, DeepLink, SyntheticTest)):
        return payload
    if not isinstance(payload, Mapping):
        raise UnrecognizedShape(keys=[])

    transaction = payload.get("transaction")
    if transaction:
        if not isinstance(transaction, Mapping):
            raise UnrecognizedShape(keys=list(payload.keys()))
        return _direct_from(transaction, Source.DIRECT)

    body = payload.get("message") or payload.get("body")
    if body:
        return TextMessage(
            body=str(body),
            sender=payload.get("sender"),
            source=_source_hint(payload, Source.NOTIFICATION),
        )

    if payload.get("url"):
        return DeepLink(url=str(payload["url"]))

    if payload.get("test"):
        return SyntheticTest(fields={k: v for k, v in payload.items() if k != "test"})

    if payload.get("amount") and payload.get("description"):
        return _direct_from(payload, _source_hint(payload, Source.NOTIFICATION))

    raise UnrecognizedShape(keys=list(payload.keys()))
