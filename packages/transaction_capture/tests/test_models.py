from datetime import date
from decimal import Decimal

import pytest

from packages.transaction_capture.models import (
    CanonicalTransaction,
    ParsedTransaction,
    TransactionType,
)


@pytest.mark.parametrize(
    "amount, type_, expected",
    [
        (Decimal("250"), "expense", Decimal("-250")),
        (Decimal("-250"), "expense", Decimal("-250")),
        (Decimal("-250"), "income", Decimal("250")),
        (Decimal("250"), TransactionType.INCOME, Decimal("250")),
        (Decimal("250"), "transfer", Decimal("-250")),
    ],
)
def test_sign_follows_type(amount, type_, expected):
    parsed = ParsedTransaction(amount=amount, description="x", type=type_)
    assert parsed.amount == expected
    assert parsed.type is (TransactionType.INCOME if expected > 0 else TransactionType.EXPENSE)


def test_zero_amount_is_refused():
    with pytest.raises(ValueError):
        ParsedTransaction(amount=Decimal("0.00"), description="x")


@pytest.mark.parametrize("amount", [Decimal("NaN"), Decimal("Infinity"), float("nan"), float("-inf")])
def test_non_finite_amount_is_refused(amount):
    with pytest.raises(ValueError):
        ParsedTransaction(amount=amount, description="x", type="income")


def test_to_dict_is_json_safe():
    parsed = ParsedTransaction(
        amount=Decimal("1200.50"),
        description="Refund",
        type="income",
        balance=Decimal("900"),
        date=date(2024, 1, 15),
    )
    assert parsed.to_dict() == {
        "amount": 1200.5,
        "description": "Refund",
        "type": "income",
        "merchant": None,
        "bank": None,
        "balance": 900.0,
        "date": "2024-01-15",
        "category": None,
    }


def test_canonical_record_shape():
    record = CanonicalTransaction(
        bank_account_id="a1",
        category_id="c1",
        person_id=None,
        transaction_date=date(2024, 1, 15),
        amount=Decimal("-750.00"),
        type=TransactionType.EXPENSE,
        description="SBI Bank Transaction",
        source="sms",
    ).to_record()

    assert record["amount"] == -750.0
    assert record["type"] == "expense"
    assert record["transaction_date"] == "2024-01-15"
    assert record["person_id"] is None
    assert record["is_verified"] is True
    assert record["is_investment"] is False
    assert record["source"] == "sms"
