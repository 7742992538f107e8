"""Tests for the TransactionExtractor dispatch and its four strategies."""

from datetime import date
from decimal import Decimal

import pytest

from packages.transaction_capture.bank_matchers import BankMatcher
from packages.transaction_capture.extractor import TransactionExtractor, parse_message
from packages.transaction_capture.models import TransactionType
from packages.transaction_capture.samples import SAMPLE_DEEP_LINK, SAMPLE_MESSAGES

TODAY = date(2024, 1, 20)


@pytest.fixture
def extractor():
    return TransactionExtractor(today=lambda: TODAY)


class TestMessages:
    def test_spend_scenario(self, extractor):
        parsed = extractor.extract({"message": SAMPLE_MESSAGES["card_spend"]})
        assert parsed.amount == Decimal("-500")
        assert parsed.type is TransactionType.EXPENSE
        assert parsed.merchant == "Starbucks"
        assert parsed.balance == Decimal("15000")
        assert parsed.date == TODAY

    def test_received_scenario(self, extractor):
        text = "You have received INR 2000.00 from John Doe. Your account balance is now INR 17,000.00"
        parsed = extractor.extract({"message": text})
        assert parsed.amount == Decimal("2000")
        assert parsed.type is TransactionType.INCOME

    def test_plain_text_is_rejected(self, extractor):
        assert extractor.extract({"message": SAMPLE_MESSAGES["not_a_transaction"]}) is None

    def test_bank_matcher_runs_before_fallback(self):
        parsed, strategy = parse_message(SAMPLE_MESSAGES["sbi"])
        assert strategy == "sbi"
        assert parsed.bank == "SBI"

        parsed, strategy = parse_message(SAMPLE_MESSAGES["card_spend"])
        assert strategy == "generic"

    def test_extraction_is_idempotent(self, extractor):
        for text in SAMPLE_MESSAGES.values():
            assert extractor.extract({"message": text}) == extractor.extract({"message": text})

    @pytest.mark.parametrize("name", sorted(SAMPLE_MESSAGES))
    def test_sign_follows_type(self, extractor, name):
        parsed = extractor.extract({"message": SAMPLE_MESSAGES[name]})
        if parsed is None:
            return
        if parsed.type is TransactionType.INCOME:
            assert parsed.amount > 0
        else:
            assert parsed.amount < 0


class TestDeepLinks:
    def test_deep_link_scenario(self, extractor):
        parsed = extractor.extract({"url": SAMPLE_DEEP_LINK})
        assert parsed.amount == Decimal("100")
        assert parsed.type is TransactionType.INCOME
        assert parsed.merchant == "TestCo"
        assert parsed.description == "Test Payment"

    def test_missing_type_means_expense(self, extractor):
        parsed = extractor.extract({"url": "myapp://transaction?amount=45.5&description=Chai"})
        assert parsed.amount == Decimal("-45.5")
        assert parsed.merchant is None

    @pytest.mark.parametrize(
        "url",
        [
            "myapp://transaction?amount=100",
            "myapp://transaction?description=Coffee",
            "myapp://transaction?amount=abc&description=Coffee",
            "not a url at all",
        ],
    )
    def test_incomplete_links_are_rejected(self, extractor, url):
        assert extractor.extract({"url": url}) is None


class TestDirectTransactions:
    def test_defaults(self, extractor):
        parsed = extractor.extract({"transaction": {"amount": "250", "description": "Lunch"}})
        assert parsed.amount == Decimal("-250")
        assert parsed.type is TransactionType.EXPENSE
        assert parsed.date == TODAY

    def test_explicit_fields(self, extractor):
        parsed = extractor.extract(
            {
                "transaction": {
                    "amount": 1500,
                    "description": "Refund",
                    "type": "income",
                    "date": "2024-01-05",
                    "category": "shopping",
                    "merchant": "Flipkart",
                }
            }
        )
        assert parsed.amount == Decimal("1500")
        assert parsed.type is TransactionType.INCOME
        assert parsed.date == date(2024, 1, 5)
        assert parsed.category == "shopping"
        assert parsed.merchant == "Flipkart"

    def test_embedded_sign_is_ignored(self, extractor):
        parsed = extractor.extract({"transaction": {"amount": -80, "description": "Cashback", "type": "income"}})
        assert parsed.amount == Decimal("80")

    def test_unparseable_date_uses_today(self, extractor):
        parsed = extractor.extract({"transaction": {"amount": 5, "description": "x", "date": "yesterday"}})
        assert parsed.date == TODAY

    @pytest.mark.parametrize(
        "transaction",
        [
            {"amount": 10},
            {"description": "Lunch"},
            {"amount": 0, "description": "Lunch"},
            {"amount": "abc", "description": "Lunch"},
            {"amount": 10, "description": "   "},
        ],
    )
    def test_invalid_direct_transactions(self, extractor, transaction):
        assert extractor.extract({"transaction": transaction}) is None

    @pytest.mark.parametrize("amount", [float("nan"), float("inf"), -float("inf"), "NaN", "Infinity"])
    def test_non_finite_amounts_are_rejected(self, extractor, amount):
        payload = {"transaction": {"amount": amount, "description": "Lunch", "type": "income"}}
        assert extractor.extract(payload) is None

    def test_non_finite_synthetic_amount_uses_default(self, extractor):
        parsed = extractor.extract({"test": True, "amount": float("nan")})
        assert parsed.amount == Decimal("-100")

    def test_flat_push_payload(self, extractor):
        parsed = extractor.extract({"amount": 99, "description": "Metro card"})
        assert parsed.amount == Decimal("-99")


class TestSyntheticTest:
    def test_defaults(self, extractor):
        parsed = extractor.extract({"test": True})
        assert parsed.amount == Decimal("-100")
        assert parsed.description == "Test Transaction from Notification"
        assert parsed.merchant == "Test Merchant"
        assert parsed.category == "shopping"
        assert parsed.type is TransactionType.EXPENSE

    def test_overrides(self, extractor):
        parsed = extractor.extract({"test": True, "amount": 40, "type": "income", "description": "Ping"})
        assert parsed.amount == Decimal("40")
        assert parsed.description == "Ping"


def test_unrecognized_payload_returns_none(extractor):
    assert extractor.extract({"foo": "bar"}) is None


def test_matcher_errors_never_escape():
    def exploding_gate(lower):
        raise RuntimeError("boom")

    broken = BankMatcher(name="broken", bank="Broken", gate=exploding_gate, alternatives=())
    extractor = TransactionExtractor(matchers=(broken,))
    assert extractor.extract({"message": SAMPLE_MESSAGES["sbi"]}) is None
