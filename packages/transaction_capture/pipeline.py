"""
Notification Processing Pipeline.

Single entry point per incoming event:

    Idle -> Processing -> {Persisted, Rejected, Failed} -> Idle

At most one event is in flight. An event that arrives while another is
being processed is dropped, not queued: the busy flag is a plain bool
that is checked and claimed with no await in between, and released in a
``finally`` on every exit path.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

import structlog

from .category_mapper import detect_bank_account, map_transaction
from .constants import DEFAULT_EXPENSE_CATEGORY_ID, resolve_category_alias
from .errors import CaptureError, NoAccountsAvailable, NoTransactionData, PersistenceFailure, UnrecognizedShape
from .events import RawEvent, TextMessage, classify_event
from .extractor import TransactionExtractor
from .models import BankAccount, CanonicalTransaction, ParsedTransaction, Person, PersonType
from .notifier import FAILURE_MESSAGE, LogNotifier, Notifier, success_message
from .store import LedgerStore

logger = structlog.get_logger()

SELF_TEST_PAYLOAD = {
    "test": True,
    "message": "INR 500.00 spent on Starbucks Coffee on 2024-01-15. Your current balance is INR 15,000.00",
    "amount": -500,
    "description": "Starbucks Coffee",
    "type": "expense",
    "merchant": "Starbucks",
}


class PipelineState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


class Outcome(str, Enum):
    PERSISTED = "persisted"
    REJECTED = "rejected"
    FAILED = "failed"
    DROPPED = "dropped"  # pipeline was busy
    IGNORED = "ignored"  # filtered out before reaching the pipeline


@dataclass
class PipelineResult:
    outcome: Outcome
    transaction: Optional[ParsedTransaction] = None
    record: Optional[Dict[str, Any]] = None
    error: Optional[CaptureError] = None
    message: Optional[str] = None

    @property
    def persisted(self) -> bool:
        return self.outcome is Outcome.PERSISTED


def resolve_person(persons: Sequence[Person], person_type: Optional[PersonType]) -> Optional[Person]:
    """Pick the household member a mapped transaction belongs to.

    Falls back to the first person of the roster; None only when the
    roster is empty.
    """
    if not persons:
        return None

    def first(predicate) -> Optional[Person]:
        return next((p for p in persons if predicate(p)), None)

    def name(p: Person) -> str:
        return (p.name or "").lower()

    if person_type is PersonType.DAD_BUSINESS:
        found = first(lambda p: "dad" in name(p)) or first(lambda p: p.role == "business_owner")
    elif person_type is PersonType.MOM:
        found = first(lambda p: "mom" in name(p))
    else:
        # user and shared both book against the primary user
        found = first(lambda p: "sadik" in name(p)) or first(lambda p: p.role == "family_member")
    return found or persons[0]


class NotificationPipeline:
    """Extract, map and persist one event at a time."""

    def __init__(
        self,
        store: LedgerStore,
        extractor: Optional[TransactionExtractor] = None,
        notifier: Optional[Notifier] = None,
        default_category_id: str = DEFAULT_EXPENSE_CATEGORY_ID,
    ):
        self.store = store
        self.extractor = extractor or TransactionExtractor()
        self.notifier = notifier or LogNotifier()
        self.default_category_id = default_category_id
        self._busy = False
        self.last_result: Optional[PipelineResult] = None

    @property
    def state(self) -> PipelineState:
        return PipelineState.PROCESSING if self._busy else PipelineState.IDLE

    @contextmanager
    def _busy_guard(self):
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    async def process(self, payload: Any) -> bool:
        """Process one event; True only if a transaction was persisted."""
        result = await self.process_event(payload)
        return result.persisted

    async def process_event(self, payload: Any) -> PipelineResult:
        if self._busy:
            logger.warning("pipeline_busy")
            return PipelineResult(Outcome.DROPPED, message="Already processing another event")

        with self._busy_guard():
            result = await self._run(payload)
        self.last_result = result
        logger.debug("pipeline_finished", outcome=result.outcome.value)
        return result

    async def run_self_test(self, payload: Optional[Dict[str, Any]] = None) -> PipelineResult:
        """Push a known-good event through the whole pipeline."""
        logger.info("self_test_started")
        return await self.process_event(payload or dict(SELF_TEST_PAYLOAD))

    # -- stages -----------------------------------------------------------

    async def _run(self, payload: Any) -> PipelineResult:
        try:
            event = classify_event(payload)
        except UnrecognizedShape as exc:
            logger.warning("event_unrecognized", keys=exc.keys)
            return PipelineResult(Outcome.REJECTED, error=exc, message=exc.detail)

        transaction = self.extractor.extract(event)
        if transaction is None:
            error = NoTransactionData()
            logger.info("event_rejected", shape=type(event).__name__, source=event.source)
            return PipelineResult(Outcome.REJECTED, error=error, message=error.detail)

        try:
            record = await self._persist(event, transaction)
        except CaptureError as exc:
            return self._failed(transaction, exc)
        except Exception as exc:
            logger.exception("transaction_unexpected_error")
            failure = PersistenceFailure("Unexpected error while booking the transaction")
            failure.__cause__ = exc
            return self._failed(transaction, failure)

        message = success_message(transaction)
        self.notifier.success(message)
        return PipelineResult(Outcome.PERSISTED, transaction=transaction, record=record, message=message)

    def _failed(self, transaction: ParsedTransaction, error: CaptureError) -> PipelineResult:
        logger.error("transaction_failed", error_type=type(error).__name__, detail=str(error))
        self.notifier.error(FAILURE_MESSAGE)
        return PipelineResult(Outcome.FAILED, transaction=transaction, error=error, message=str(error))

    async def _load_roster(self):
        try:
            accounts = await self.store.get_bank_accounts()
            persons = await self.store.get_persons()
        except Exception as exc:
            raise PersistenceFailure("Failed to load accounts from the ledger") from exc
        accounts = [BankAccount.from_record(a) if isinstance(a, Mapping) else a for a in accounts or []]
        persons = [Person.from_record(p) if isinstance(p, Mapping) else p for p in persons or []]
        return accounts, persons

    async def _persist(self, event: RawEvent, transaction: ParsedTransaction) -> Dict[str, Any]:
        accounts, persons = await self._load_roster()
        if not accounts:
            raise NoAccountsAvailable()

        raw_text = event.body if isinstance(event, TextMessage) else ""
        account_id = detect_bank_account(raw_text, accounts)
        account = next((a for a in accounts if a.id == account_id), accounts[0])

        mapping = map_transaction(
            transaction.description,
            transaction.merchant or "",
            abs(transaction.amount),
            transaction.type,
        )
        category_id = resolve_category_alias(transaction.category) or mapping.category_id or self.default_category_id
        person = resolve_person(persons, mapping.person_type)

        canonical = CanonicalTransaction(
            bank_account_id=account.id,
            category_id=category_id,
            person_id=person.id if person else None,
            transaction_date=transaction.date or self.extractor.today(),
            amount=transaction.amount,
            type=transaction.type,
            description=mapping.description,
            merchant=transaction.merchant or "",
            source=event.source,
        )
        record = canonical.to_record()
        try:
            stored = await self.store.create_transaction(record)
        except Exception as exc:
            raise PersistenceFailure() from exc

        logger.info(
            "transaction_persisted",
            amount=record["amount"],
            category_id=category_id,
            bank_account=account.bank_name,
            detected_account=account_id is not None,
            person=person.name if person else None,
            source=event.source,
        )
        return stored if isinstance(stored, dict) else record

