"""Transaction records passed between the capture stages."""

from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class TransactionType(str, Enum):
    """Direction of money relative to the account holder."""

    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def coerce(cls, value: Any) -> "TransactionType":
        """Anything that is not explicitly ``income`` books as an expense."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.INCOME.value:
            return cls.INCOME
        return cls.EXPENSE


class PersonType(str, Enum):
    """Who a mapped transaction is attributed to."""

    USER = "user"
    SHARED = "shared"
    MOM = "mom"
    DAD_BUSINESS = "dad_business"


@dataclass(frozen=True)
class ParsedTransaction:
    """Intermediate transaction produced by the extractor.

    The sign of ``amount`` always follows ``type``: expenses are negative,
    income is positive, whatever sign the source text carried.
    """

    amount: Decimal
    description: str
    type: TransactionType = TransactionType.EXPENSE
    merchant: Optional[str] = None
    bank: Optional[str] = None
    balance: Optional[Decimal] = None
    date: Optional[date] = None
    category: Optional[str] = None  # explicit category name from a structured payload

    def __post_init__(self):
        amount = Decimal(self.amount)
        if not amount.is_finite():
            raise ValueError("Transaction amount must be a finite number")
        if amount == 0:
            raise ValueError("Transaction amount must be non-zero")
        kind = TransactionType.coerce(self.type)
        signed = abs(amount) if kind is TransactionType.INCOME else -abs(amount)
        object.__setattr__(self, "amount", signed)
        object.__setattr__(self, "type", kind)

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": float(self.amount),
            "description": self.description,
            "type": self.type.value,
            "merchant": self.merchant,
            "bank": self.bank,
            "balance": float(self.balance) if self.balance is not None else None,
            "date": self.date.isoformat() if self.date else None,
            "category": self.category,
        }


@dataclass(frozen=True)
class CategoryMapping:
    """Result of the category cascade."""

    category_id: str
    description: str
    person_type: Optional[PersonType] = None


def _from_record(cls, record: Dict[str, Any]):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in record.items() if k in known})


@dataclass
class BankAccount:
    id: str
    bank_name: str
    account_number: str = ""
    account_type: str = ""
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BankAccount":
        return _from_record(cls, record)


@dataclass
class Person:
    id: str
    name: str
    role: str = ""
    is_active: bool = True

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Person":
        return _from_record(cls, record)


@dataclass
class Category:
    id: str
    name: str
    type: str = "expense"

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Category":
        return _from_record(cls, record)


@dataclass
class CanonicalTransaction:
    """Storage-schema shaped record handed to the ledger's create call."""

    bank_account_id: str
    category_id: str
    person_id: Optional[str]
    transaction_date: date
    amount: Decimal
    type: TransactionType
    description: str
    merchant: str = ""
    is_recurring: bool = False
    is_investment: bool = False
    is_verified: bool = True
    source: str = "notification"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_record(self) -> Dict[str, Any]:
        """Convert to a JSON-safe row for the ledger."""
        record = {
            "bank_account_id": self.bank_account_id,
            "category_id": self.category_id,
            "person_id": self.person_id,
            "transaction_date": self.transaction_date.isoformat(),
            "amount": float(self.amount),
            "type": self.type.value,
            "description": self.description,
            "merchant": self.merchant,
            "is_recurring": self.is_recurring,
            "is_investment": self.is_investment,
            "is_verified": self.is_verified,
            "source": self.source,
        }
        record.update(self.extra)
        return record
