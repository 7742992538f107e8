"""Tests for the NotificationPipeline state machine and busy guard."""

import asyncio

import pytest

from packages.transaction_capture.constants import CategoryId
from packages.transaction_capture.errors import (
    NoAccountsAvailable,
    NoTransactionData,
    PersistenceFailure,
    UnrecognizedShape,
)
from packages.transaction_capture.models import Person, PersonType
from packages.transaction_capture.notifier import FAILURE_MESSAGE, RecordingNotifier
from packages.transaction_capture.pipeline import (
    NotificationPipeline,
    Outcome,
    PipelineState,
    resolve_person,
)
from packages.transaction_capture.samples import SAMPLE_DEEP_LINK, SAMPLE_MESSAGES
from packages.transaction_capture.store import DEFAULT_PERSONS, InMemoryLedgerStore

BARODA_SADIK = "e552f887-12c7-40b9-84b8-8f5de56b49f6"
SBI_ABBU = "73f5a80e-060f-4b85-93c4-90b99b99433e"
SADIK = "11111111-1111-1111-1111-111111111111"
DAD = "22222222-2222-2222-2222-222222222222"


class BlockingStore(InMemoryLedgerStore):
    """Holds create_transaction open until released."""

    def __init__(self):
        super().__init__()
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.create_calls = 0

    async def create_transaction(self, record):
        self.create_calls += 1
        self.entered.set()
        await self.release.wait()
        return await super().create_transaction(record)


class RejectingStore(InMemoryLedgerStore):
    async def create_transaction(self, record):
        raise RuntimeError("insert violates foreign key constraint")


class RecordRowStore(InMemoryLedgerStore):
    """Returns roster rows as plain mappings, the way a REST client does."""

    async def get_bank_accounts(self):
        return [{"id": a.id, "bank_name": a.bank_name} for a in await super().get_bank_accounts()]

    async def get_persons(self):
        return [{"id": p.id, "name": p.name, "role": p.role} for p in await super().get_persons()]


class MalformedRosterStore(InMemoryLedgerStore):
    async def get_bank_accounts(self):
        return [object()]


class FlakyRosterStore(InMemoryLedgerStore):
    def __init__(self):
        super().__init__()
        self.failures = 1

    async def get_bank_accounts(self):
        if self.failures:
            self.failures -= 1
            raise ConnectionError("ledger offline")
        return await super().get_bank_accounts()


@pytest.fixture
def store():
    return InMemoryLedgerStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def pipeline(store, notifier):
    return NotificationPipeline(store, notifier=notifier)


class TestPersisted:
    @pytest.mark.asyncio
    async def test_sbi_message_books_against_sbi_account(self, pipeline, store, notifier):
        assert await pipeline.process({"message": SAMPLE_MESSAGES["sbi"]}) is True

        record = store.transactions[0]
        assert record["bank_account_id"] == SBI_ABBU
        assert record["amount"] == -750.0
        assert record["type"] == "expense"
        assert record["category_id"] == CategoryId.SHOPPING
        assert record["person_id"] == SADIK
        assert record["source"] == "notification"
        assert record["is_verified"] is True
        assert record["is_recurring"] is False
        assert notifier.last == ("success", "Expense of ₹750.00 added successfully!")

    @pytest.mark.asyncio
    async def test_bob_message_books_against_baroda(self, pipeline, store):
        result = await pipeline.process_event({"message": SAMPLE_MESSAGES["bank_of_baroda"]})
        assert result.outcome is Outcome.PERSISTED
        assert result.record["bank_account_id"] == BARODA_SADIK
        assert result.record["description"] == "UPI Payment to paytmqr1axzf3q17z@paytm"

    @pytest.mark.asyncio
    async def test_undetected_bank_uses_first_account(self, pipeline, store):
        await pipeline.process({"message": SAMPLE_MESSAGES["card_spend"]})
        # accounts come back ordered by bank_name, Baroda first
        assert store.transactions[0]["bank_account_id"] == BARODA_SADIK

    @pytest.mark.asyncio
    async def test_grocery_transfer_is_categorized(self, pipeline, store):
        await pipeline.process({"message": SAMPLE_MESSAGES["sbi_upi"]})
        record = store.transactions[0]
        assert record["category_id"] == CategoryId.GROCERIES
        assert record["description"] == "Groceries"
        assert record["merchant"] == "MAHENDRA BALASO"

    @pytest.mark.asyncio
    async def test_deep_link_income(self, pipeline, store, notifier):
        assert await pipeline.process({"url": SAMPLE_DEEP_LINK}) is True
        record = store.transactions[0]
        assert record["amount"] == 100.0
        assert record["type"] == "income"
        assert record["category_id"] == CategoryId.OTHER_INCOME
        assert record["source"] == "deeplink"
        assert notifier.last == ("success", "Income of ₹100.00 added successfully!")

    @pytest.mark.asyncio
    async def test_explicit_category_alias_wins(self, pipeline, store):
        payload = {"transaction": {"amount": 120, "description": "Lunch", "category": "food"}}
        assert await pipeline.process(payload) is True
        assert store.transactions[0]["category_id"] == CategoryId.DINING
        assert store.transactions[0]["source"] == "direct"

    @pytest.mark.asyncio
    async def test_business_expense_attributed_to_dad(self, pipeline, store):
        payload = {"transaction": {"amount": 900, "description": "Welding material"}}
        await pipeline.process(payload)
        assert store.transactions[0]["person_id"] == DAD

    @pytest.mark.asyncio
    async def test_empty_person_roster_leaves_person_null(self, notifier):
        store = InMemoryLedgerStore(persons=[])
        pipeline = NotificationPipeline(store, notifier=notifier)
        assert await pipeline.process({"message": SAMPLE_MESSAGES["upi"]}) is True
        assert store.transactions[0]["person_id"] is None

    @pytest.mark.asyncio
    async def test_roster_rows_as_mappings(self, notifier):
        store = RecordRowStore()
        pipeline = NotificationPipeline(store, notifier=notifier)
        assert await pipeline.process({"message": SAMPLE_MESSAGES["sbi"]}) is True
        record = store.transactions[0]
        assert record["bank_account_id"] == SBI_ABBU
        assert record["person_id"] == SADIK

    @pytest.mark.asyncio
    async def test_synthetic_event(self, pipeline, store):
        assert await pipeline.process({"test": True}) is True
        record = store.transactions[0]
        assert record["amount"] == -100.0
        assert record["source"] == "test"
        assert record["category_id"] == CategoryId.SHOPPING

    @pytest.mark.asyncio
    async def test_self_test(self, pipeline, store):
        result = await pipeline.run_self_test()
        assert result.persisted
        assert result.transaction.merchant == "Starbucks Coffee"
        assert len(store.transactions) == 1


class TestRejected:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), "NaN"])
    async def test_non_finite_amount_is_not_persisted(self, pipeline, store, amount):
        payload = {"transaction": {"amount": amount, "description": "Lunch"}}
        assert await pipeline.process(payload) is False
        assert store.transactions == []

    @pytest.mark.asyncio
    async def test_plain_text_is_not_persisted(self, pipeline, store, notifier):
        result = await pipeline.process_event({"message": SAMPLE_MESSAGES["not_a_transaction"]})
        assert result.persisted is False
        assert result.outcome is Outcome.REJECTED
        assert isinstance(result.error, NoTransactionData)
        assert store.transactions == []
        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_unrecognized_shape(self, pipeline, store):
        result = await pipeline.process_event({"foo": "bar"})
        assert result.outcome is Outcome.REJECTED
        assert isinstance(result.error, UnrecognizedShape)
        assert await pipeline.process({"foo": "bar"}) is False


class TestFailed:
    @pytest.mark.asyncio
    async def test_no_accounts(self, notifier):
        store = InMemoryLedgerStore(bank_accounts=[])
        pipeline = NotificationPipeline(store, notifier=notifier)

        result = await pipeline.process_event({"message": SAMPLE_MESSAGES["sbi"]})

        assert result.persisted is False
        assert result.outcome is Outcome.FAILED
        assert isinstance(result.error, NoAccountsAvailable)
        assert store.transactions == []
        assert notifier.last == ("error", FAILURE_MESSAGE)

    @pytest.mark.asyncio
    async def test_create_failure_is_wrapped(self, notifier):
        pipeline = NotificationPipeline(RejectingStore(), notifier=notifier)

        result = await pipeline.process_event({"message": SAMPLE_MESSAGES["upi"]})

        assert result.outcome is Outcome.FAILED
        assert isinstance(result.error, PersistenceFailure)
        assert isinstance(result.error.__cause__, RuntimeError)
        assert pipeline.state is PipelineState.IDLE
        assert notifier.last == ("error", FAILURE_MESSAGE)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_as_failure(self, notifier):
        pipeline = NotificationPipeline(MalformedRosterStore(), notifier=notifier)

        result = await pipeline.process_event({"transaction": {"amount": 80, "description": "Lunch"}})

        assert result.outcome is Outcome.FAILED
        assert isinstance(result.error, PersistenceFailure)
        assert isinstance(result.error.__cause__, AttributeError)
        assert pipeline.state is PipelineState.IDLE
        assert notifier.last == ("error", FAILURE_MESSAGE)
        assert await pipeline.process({"transaction": {"amount": 80, "description": "Lunch"}}) is False

    @pytest.mark.asyncio
    async def test_guard_released_after_failure(self, notifier):
        store = FlakyRosterStore()
        pipeline = NotificationPipeline(store, notifier=notifier)

        first = await pipeline.process_event({"message": SAMPLE_MESSAGES["upi"]})
        second = await pipeline.process_event({"message": SAMPLE_MESSAGES["upi"]})

        assert first.outcome is Outcome.FAILED
        assert isinstance(first.error, PersistenceFailure)
        assert second.outcome is Outcome.PERSISTED


class TestBusyGuard:
    @pytest.mark.asyncio
    async def test_concurrent_event_is_dropped(self, notifier):
        store = BlockingStore()
        pipeline = NotificationPipeline(store, notifier=notifier)

        first = asyncio.create_task(pipeline.process({"message": SAMPLE_MESSAGES["sbi"]}))
        await store.entered.wait()
        assert pipeline.state is PipelineState.PROCESSING

        dropped = await pipeline.process_event({"message": SAMPLE_MESSAGES["upi"]})
        assert dropped.outcome is Outcome.DROPPED
        assert dropped.persisted is False
        assert store.create_calls == 1

        store.release.set()
        assert await first is True
        assert pipeline.state is PipelineState.IDLE
        assert len(store.transactions) == 1

    @pytest.mark.asyncio
    async def test_events_after_completion_are_processed(self, pipeline, store):
        assert await pipeline.process({"message": SAMPLE_MESSAGES["sbi"]}) is True
        assert await pipeline.process({"message": SAMPLE_MESSAGES["upi"]}) is True
        assert len(store.transactions) == 2


class TestResolvePerson:
    @pytest.mark.parametrize(
        "person_type, name",
        [
            (PersonType.USER, "Sadik Shaikh"),
            (PersonType.SHARED, "Sadik Shaikh"),
            (PersonType.MOM, "Mom"),
            (PersonType.DAD_BUSINESS, "Dad"),
            (None, "Sadik Shaikh"),
        ],
    )
    def test_default_roster(self, person_type, name):
        assert resolve_person(DEFAULT_PERSONS, person_type).name == name

    def test_falls_back_to_first_person(self):
        roster = [Person("p1", "Alex"), Person("p2", "Sam")]
        assert resolve_person(roster, PersonType.MOM).id == "p1"

    def test_business_owner_role(self):
        roster = [Person("p1", "Alex", "family_member"), Person("p2", "Rafiq", "business_owner")]
        assert resolve_person(roster, PersonType.DAD_BUSINESS).id == "p2"

    def test_empty_roster(self):
        assert resolve_person([], PersonType.USER) is None
