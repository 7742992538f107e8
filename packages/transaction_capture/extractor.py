"""
Transaction Extractor - turns any admissible RawEvent into a ParsedTransaction.

Text goes through the bank cascade (most specific gate first, UPI last)
and then the generic fallback. Structured shapes are validated rather
than matched. ``extract`` never raises: every failure is logged and
returned as None.
"""

from dataclasses import replace
from datetime import date
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import parse_qs, urlsplit

import structlog

from .bank_matchers import BANK_MATCHERS, BankMatcher, match_bank_formats
from .errors import UnrecognizedShape
from .events import DeepLink, DirectTransaction, RawEvent, SyntheticTest, TextMessage, classify_event
from .fallback import GENERIC_FALLBACK, GenericFallbackMatcher
from .models import ParsedTransaction, TransactionType
from .normalize import parse_amount

logger = structlog.get_logger()

SYNTHETIC_DEFAULTS = {
    "amount": -100,
    "description": "Test Transaction from Notification",
    "merchant": "Test Merchant",
    "category": "shopping",
    "type": TransactionType.EXPENSE.value,
}


def parse_message(
    text: str,
    matchers: Tuple[BankMatcher, ...] = BANK_MATCHERS,
    fallback: GenericFallbackMatcher = GENERIC_FALLBACK,
) -> Tuple[Optional[ParsedTransaction], Optional[str]]:
    """Run the full text cascade. Returns ``(transaction, strategy_name)``."""
    if not text or not isinstance(text, str):
        return None, None
    parsed, name = match_bank_formats(text, matchers)
    if parsed is not None:
        return parsed, name
    parsed = fallback.match(text)
    if parsed is not None:
        return parsed, fallback.name
    return None, None


def _parse_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


class TransactionExtractor:
    """Dispatches each RawEvent shape to its extraction strategy."""

    def __init__(
        self,
        matchers: Tuple[BankMatcher, ...] = BANK_MATCHERS,
        fallback: GenericFallbackMatcher = GENERIC_FALLBACK,
        today: Callable[[], date] = date.today,
    ):
        self.matchers = matchers
        self.fallback = fallback
        self.today = today
        self._strategies: Dict[type, Callable[..., Optional[ParsedTransaction]]] = {
            DirectTransaction: self._from_direct,
            TextMessage: self._from_message,
            DeepLink: self._from_deep_link,
            SyntheticTest: self._from_synthetic,
        }

    def extract(self, event) -> Optional[ParsedTransaction]:
        """Extract a transaction from a RawEvent (or a raw payload mapping)."""
        try:
            event = classify_event(event)
        except UnrecognizedShape as exc:
            logger.warning("event_unrecognized", keys=exc.keys)
            return None

        strategy = self._strategies[type(event)]
        try:
            return strategy(event)
        except Exception:
            logger.exception("extraction_failed", shape=type(event).__name__)
            return None

    # -- strategies -------------------------------------------------------

    def _from_message(self, event: TextMessage) -> Optional[ParsedTransaction]:
        parsed, strategy = parse_message(event.body, self.matchers, self.fallback)
        if parsed is None:
            logger.info("message_unmatched", sender=event.sender, length=len(event.body))
            return None
        logger.info(
            "matcher_matched",
            strategy=strategy,
            amount=str(parsed.amount),
            type=parsed.type.value,
            merchant=parsed.merchant,
        )
        return replace(parsed, date=self.today())

    def _from_direct(self, event: DirectTransaction) -> Optional[ParsedTransaction]:
        amount = parse_amount(event.amount)
        description = event.description.strip() if isinstance(event.description, str) else ""
        if not amount or not description:
            logger.warning(
                "direct_transaction_invalid",
                has_amount=bool(amount),
                has_description=bool(description),
            )
            return None

        when = _parse_date(event.date)
        if event.date and when is None:
            logger.warning("direct_transaction_bad_date", date=str(event.date))

        return ParsedTransaction(
            amount=amount,
            description=description,
            type=TransactionType.coerce(event.type),
            merchant=event.merchant or None,
            bank=event.bank or None,
            date=when or self.today(),
            category=event.category or None,
        )

    def _from_deep_link(self, event: DeepLink) -> Optional[ParsedTransaction]:
        params = parse_qs(urlsplit(event.url).query)

        def param(name: str) -> Optional[str]:
            values = params.get(name)
            return values[0] if values else None

        amount = parse_amount(param("amount"))
        description = (param("description") or "").strip()
        if not amount or not description:
            logger.warning("deep_link_missing_params", url=event.url)
            return None

        return ParsedTransaction(
            amount=amount,
            description=description,
            type=TransactionType.coerce(param("type")),
            merchant=param("merchant") or None,
            date=self.today(),
        )

    def _from_synthetic(self, event: SyntheticTest) -> ParsedTransaction:
        fields = {**SYNTHETIC_DEFAULTS, **{k: v for k, v in event.fields.items() if v}}
        amount = parse_amount(fields["amount"]) or parse_amount(SYNTHETIC_DEFAULTS["amount"])
        transaction = ParsedTransaction(
            amount=amount,
            description=str(fields["description"]),
            type=TransactionType.coerce(fields["type"]),
            merchant=str(fields["merchant"]),
            date=self.today(),
            category=str(fields["category"]),
        )
        logger.info("synthetic_transaction_created", amount=str(transaction.amount))
        return transaction
