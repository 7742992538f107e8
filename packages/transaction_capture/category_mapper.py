"""
Category Mapper - keyword cascade from (description, merchant) to a ledger category.

The cascade is an ordered tuple of rules over the lower-cased
``description + " " + merchant`` string. The first rule whose keywords
occur wins and rewrites the description through its own label table.
Both directions end in a default rule, so ``map_transaction`` is total.

Bank-account detection is a separate pass over the raw message and never
influences the category choice.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

from .constants import DEFAULT_EXPENSE_CATEGORY_ID, DEFAULT_INCOME_CATEGORY_ID, CategoryId
from .models import BankAccount, CategoryMapping, PersonType, TransactionType

Labels = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class CategoryRule:
    """One branch of the cascade.

    ``labels`` is checked in order against the combined text; the first
    fragment found picks the normalized description, else ``fallback_label``.
    A ``fallback_label`` of None keeps the original description, and a
    ``suffix`` is appended to it.
    """

    name: str
    keywords: Tuple[str, ...]
    category_id: str
    person_type: PersonType
    labels: Labels = ()
    fallback_label: Optional[str] = None
    suffix: str = ""
    # fragment -> category id overrides inside a branch
    category_overrides: Tuple[Tuple[str, str], ...] = ()

    def matches(self, combined: str) -> bool:
        return any(keyword in combined for keyword in self.keywords)

    def apply(self, description: str, combined: str) -> CategoryMapping:
        label = next((text for fragment, text in self.labels if fragment in combined), None)
        if label is None:
            label = self.fallback_label if self.fallback_label is not None else f"{description}{self.suffix}"
        category_id = next(
            (cid for fragment, cid in self.category_overrides if fragment in combined),
            self.category_id,
        )
        return CategoryMapping(category_id=category_id, description=label, person_type=self.person_type)


# Counterparties whose transfers are freelance income.
FREELANCE_CLIENTS: Tuple[str, ...] = (
    "aliabbas",
    "shehnaz",
    "ayesha",
    "parveen",
    "zain",
    "faiza",
    "nilofar",
    "sana",
    "wasi",
)

GROCERY_MERCHANTS: Tuple[str, ...] = ("johirul", "hariom", "prakash", "jugesh", "mahendra")
GROCERY_ITEMS: Tuple[str, ...] = (
    "milk",
    "dahi",
    "paneer",
    "eggs",
    "nimbu",
    "aloo",
    "banana",
    "chicken",
    "misri",
    "dosa",
    "food",
)

INCOME_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        name="freelance",
        keywords=FREELANCE_CLIENTS,
        category_id=CategoryId.FREELANCE,
        person_type=PersonType.USER,
        suffix=" | Sadik Payment",
    ),
    CategoryRule(
        name="salary",
        keywords=("bee logical soft",),
        category_id=CategoryId.SALARY,
        person_type=PersonType.USER,
        fallback_label="Salary from BEE LOGICAL SOFT",
    ),
    CategoryRule(
        name="business_income",
        keywords=("business", "fabrication"),
        category_id=CategoryId.BUSINESS_INCOME,
        person_type=PersonType.DAD_BUSINESS,
        suffix=" | Abbu Payment",
    ),
)

EXPENSE_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        name="atm",
        keywords=("atm cash", "atm withdrawal"),
        category_id=CategoryId.SHOPPING,
        person_type=PersonType.SHARED,
        labels=(("satya", "ATM Withdrawal - Satyam ATM"), ("kashish", "ATM Withdrawal - Kashish ATM")),
        fallback_label="ATM Withdrawal",
    ),
    CategoryRule(
        name="groceries",
        keywords=GROCERY_MERCHANTS + GROCERY_ITEMS,
        category_id=CategoryId.GROCERIES,
        person_type=PersonType.SHARED,
        labels=(
            ("dahi", "Groceries - Dahi"),
            ("milk", "Groceries - Milk"),
            ("misri", "Groceries - Misri"),
            ("chicken", "Groceries - Chicken"),
            ("nimbu", "Groceries - Nimbu"),
            ("paneer", "Groceries - Paneer"),
            ("eggs", "Groceries - Eggs"),
            ("aloo", "Groceries - Aloo"),
            ("banana", "Groceries - Banana"),
            ("dosa", "Dining - Dosa"),
        ),
        fallback_label="Groceries",
    ),
    CategoryRule(
        name="dining",
        keywords=("kabab", "hotel", "food", "restaurant", "dining", "cafe"),
        category_id=CategoryId.DINING,
        person_type=PersonType.USER,
        labels=(
            ("kabab", "Dining - Kabab"),
            ("hotel", "Dining - Hotel"),
            ("food", "Dining - Food"),
            ("dosa", "Dining - Dosa"),
        ),
        fallback_label="Dining",
    ),
    CategoryRule(
        name="transportation",
        keywords=("cab", "auto", "rickshaw", "ride", "transport", "fuel"),
        category_id=CategoryId.TRANSPORTATION,
        person_type=PersonType.SHARED,
        labels=(
            ("cab", "Transportation - Cab"),
            ("auto", "Transportation - Auto"),
            ("rick", "Transportation - Rickshaw"),
        ),
        fallback_label="Transportation",
    ),
    CategoryRule(
        name="utilities",
        keywords=("wifi", "electric", "water", "gas", "bill"),
        category_id=CategoryId.UTILITIES,
        person_type=PersonType.SHARED,
        labels=(
            ("wifi", "WiFi Bill"),
            ("electric", "Utilities - Electricity"),
            ("water", "Utilities - Water"),
            ("gas", "Utilities - Gas"),
        ),
        fallback_label="Utilities",
    ),
    CategoryRule(
        name="personal_care",
        keywords=("salon", "parlor", "beauty", "care"),
        category_id=CategoryId.PERSONAL_CARE,
        person_type=PersonType.MOM,
        labels=(("salon", "Personal Care - Salon"), ("parlor", "Personal Care - Parlor")),
        fallback_label="Personal Care",
    ),
    CategoryRule(
        name="entertainment",
        keywords=("movie", "netflix", "cinema", "entertainment", "ott"),
        category_id=CategoryId.ENTERTAINMENT,
        person_type=PersonType.USER,
        labels=(
            ("movie", "Entertainment - Movie"),
            ("netflix", "Entertainment - Netflix"),
            ("cinema", "Entertainment - Cinema"),
        ),
        fallback_label="Entertainment",
    ),
    CategoryRule(
        name="medical",
        keywords=("medical", "wellness", "medicine", "pharmacy", "clinic", "care"),
        category_id=CategoryId.HEALTHCARE,
        person_type=PersonType.SHARED,
        labels=(
            ("wellness", "Medical - Wellness"),
            ("medic", "Medical - Medicine"),
            ("pharma", "Medical - Pharmacy"),
            ("care", "Medical - Care"),
        ),
        fallback_label="Medical",
    ),
    CategoryRule(
        name="education",
        keywords=("xerox", "stationery", "book", "education"),
        category_id=CategoryId.EDUCATION,
        person_type=PersonType.SHARED,
        labels=(("xerox", "Education - Xerox"), ("stationery", "Education - Stationery")),
        fallback_label="Education",
    ),
    CategoryRule(
        name="business_expense",
        keywords=("business", "material", "fabrication", "maintenance", "equipment"),
        category_id=CategoryId.BUSINESS_MATERIALS,
        person_type=PersonType.DAD_BUSINESS,
        labels=(("material", "Business Materials"), ("maintenance", "Business Maintenance")),
        fallback_label="Business Expense",
        category_overrides=(
            ("material", CategoryId.BUSINESS_MATERIALS),
            ("maintenance", CategoryId.BUSINESS_MAINTENANCE),
        ),
    ),
)

DEFAULT_INCOME_RULE = CategoryRule(
    name="other_income",
    keywords=(),
    category_id=DEFAULT_INCOME_CATEGORY_ID,
    person_type=PersonType.USER,
)
DEFAULT_EXPENSE_RULE = CategoryRule(
    name="shopping",
    keywords=(),
    category_id=DEFAULT_EXPENSE_CATEGORY_ID,
    person_type=PersonType.USER,
)


def _text(value) -> str:
    return value if isinstance(value, str) else ""


def select_rule(description: str, merchant: str, type: Union[TransactionType, str]) -> CategoryRule:
    """Return the cascade branch that fires for this transaction."""
    combined = f"{_text(description)} {_text(merchant)}".lower()
    if TransactionType.coerce(type) is TransactionType.INCOME:
        rules, default = INCOME_RULES, DEFAULT_INCOME_RULE
    else:
        rules, default = EXPENSE_RULES, DEFAULT_EXPENSE_RULE
    return next((rule for rule in rules if rule.matches(combined)), default)


def map_transaction(
    description: str,
    merchant: Optional[str],
    amount: Union[Decimal, float, int, None],
    type: Union[TransactionType, str],
) -> CategoryMapping:
    """Map a transaction onto a category and a normalized description.

    Never raises: ``None``/non-string inputs are treated as empty text and
    unknown ``type`` values book as expenses. ``amount`` does not take part
    in the decision.
    """
    description = _text(description)
    combined = f"{description} {_text(merchant)}".lower()
    rule = select_rule(description, _text(merchant), type)
    return rule.apply(description, combined)


# ---------------------------------------------------------------------------
# Bank account detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountRule:
    """Message gate plus the account-name fragments that identify the bank."""

    bank: str
    detect: Callable[[str], bool]
    account_fragments: Tuple[str, ...]


def _mentions_bob(lower: str) -> bool:
    return "bob" in lower or "baroda" in lower or ("dr. from a/c" in lower and "cr. to" in lower)


def _mentions_sbi(lower: str) -> bool:
    return "sbi" in lower or "state bank" in lower or "dear upi user a/c" in lower


ACCOUNT_RULES: Tuple[AccountRule, ...] = (
    AccountRule("Bank of Baroda", _mentions_bob, ("baroda", "bob")),
    AccountRule("SBI", _mentions_sbi, ("sbi", "state bank")),
    AccountRule("HDFC", lambda lower: "hdfc" in lower, ("hdfc",)),
    AccountRule("ICICI", lambda lower: "icici" in lower, ("icici",)),
    AccountRule("Axis", lambda lower: "axis" in lower, ("axis",)),
)


def _bank_name(account) -> str:
    if isinstance(account, BankAccount):
        return account.bank_name or ""
    if isinstance(account, dict):
        return account.get("bank_name") or ""
    return getattr(account, "bank_name", "") or ""


def _account_id(account) -> Optional[str]:
    if isinstance(account, dict):
        return account.get("id")
    return getattr(account, "id", None)


def detect_bank_account(message: str, accounts: Sequence) -> Optional[str]:
    """Return the id of the account the message was sent for, or None.

    The first bank whose message gate fires decides; if the user has no
    account at that bank the result is None rather than another bank's
    account.
    """
    lower = _text(message).lower()
    if not lower:
        return None
    for rule in ACCOUNT_RULES:
        if not rule.detect(lower):
            continue
        for account in accounts or ():
            name = _bank_name(account).lower()
            if any(fragment in name for fragment in rule.account_fragments):
                return _account_id(account)
        return None
    return None


def map_transaction_with_bank(
    description: str,
    merchant: Optional[str],
    amount,
    type: Union[TransactionType, str],
    message: str,
    accounts: Sequence,
) -> Dict[str, object]:
    """Run the category cascade and the account detection as two passes."""
    return {
        "mapping": map_transaction(description, merchant, amount, type),
        "bank_account_id": detect_bank_account(message, accounts),
    }
