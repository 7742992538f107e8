"""
Bank Format Matchers - one grammar per bank / payment rail.

Each matcher is a cheap gate plus an ordered tuple of regex alternatives.
The gate decides whether the bank's template can apply at all; only then
are the alternatives tried, most specific first. Every alternative fixes
the direction of the money, so a matcher never guesses the sign from
keywords.

Matchers are pure: no logging, no state, and malformed input gives None.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .models import ParsedTransaction, TransactionType
from .normalize import (
    AMOUNT,
    CURRENCY,
    describe_detail,
    extract_merchant,
    find_balance,
    parse_amount,
    trim_counterparty,
)

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME

_AVL_BAL = r"(?:Avl|Avail|Available)\s+Bal"
_AVL_BAL_PATTERN = re.compile(_AVL_BAL, re.IGNORECASE)


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class Alternative:
    """One regex form of a bank template.

    Named groups: ``amount`` (required), ``counterparty`` (already a
    recipient/sender), ``detail`` (free text the merchant is mined from),
    ``balance`` and ``date_token``.
    """

    pattern: re.Pattern
    direction: TransactionType = EXPENSE
    default_description: str = "Bank Transaction"
    template: Optional[str] = None  # e.g. "UPI Payment to {counterparty}"


@dataclass(frozen=True)
class BankMatcher:
    name: str
    bank: str
    gate: Callable[[str], bool]
    alternatives: Tuple[Alternative, ...]

    def match(self, text: str) -> Optional[ParsedTransaction]:
        if not text or not isinstance(text, str):
            return None
        if not self.gate(text.lower()):
            return None
        for alternative in self.alternatives:
            found = alternative.pattern.search(text)
            if not found:
                continue
            parsed = build_transaction(found, alternative, text, self.bank)
            if parsed is not None:
                return parsed
        return None


def build_transaction(
    found: re.Match, alternative: Alternative, text: str, bank: Optional[str]
) -> Optional[ParsedTransaction]:
    """Turn a regex hit into a sign-correct ParsedTransaction."""
    groups = found.groupdict()
    amount = parse_amount(groups.get("amount"))
    if amount is None or amount == 0:
        return None

    detail = groups.get("detail")
    if groups.get("counterparty"):
        counterparty = trim_counterparty(groups["counterparty"])
    else:
        counterparty = extract_merchant(detail)

    if alternative.template and counterparty:
        description = alternative.template.format(
            counterparty=counterparty,
            date_token=groups.get("date_token") or "",
        ).strip()
    elif detail:
        description = describe_detail(detail, alternative.default_description)
    else:
        description = counterparty or alternative.default_description

    balance = parse_amount(groups.get("balance")) if groups.get("balance") else find_balance(text)

    return ParsedTransaction(
        amount=amount,
        description=description,
        type=alternative.direction,
        merchant=counterparty,
        bank=bank,
        balance=balance,
    )


# ---------------------------------------------------------------------------
# Gates
# ---------------------------------------------------------------------------


def _bob_gate(lower: str) -> bool:
    template = "dr. from a/c" in lower and "cr. to" in lower
    return template or "baroda" in lower or bool(re.search(r"\bbob\b", lower))


def _sbi_gate(lower: str) -> bool:
    return "dear upi user a/c" in lower or "state bank" in lower or bool(re.search(r"\bsbi\b", lower))


def _hdfc_gate(lower: str) -> bool:
    return "hdfc" in lower or ("spent" in lower and bool(_AVL_BAL_PATTERN.search(lower)))


def _icici_gate(lower: str) -> bool:
    return "icici" in lower or ("a/c" in lower and "is debited" in lower)


def _axis_gate(lower: str) -> bool:
    return "axis" in lower


def _upi_gate(lower: str) -> bool:
    # The SBI UPI template is owned by the SBI matcher.
    if "dear upi user" in lower:
        return False
    return "upi" in lower or "trf to" in lower


# ---------------------------------------------------------------------------
# Matchers, most specific gate first
# ---------------------------------------------------------------------------

BANK_OF_BARODA = BankMatcher(
    name="bank_of_baroda",
    bank="Bank of Baroda",
    gate=_bob_gate,
    alternatives=(
        # Rs.10.00 Dr. from A/C XXXXXX6313 and Cr. to paytmqr1axzf3q17z@paytm. Ref:...
        Alternative(
            _compile(
                r"Rs\.?\s*(?P<amount>[\d,]+\.\d{2})\s+Dr\.\s+from\s+A/C\s+\w+\s+and\s+Cr\.\s+to\s+(?P<counterparty>[^.\n]+)"
            ),
            template="UPI Payment to {counterparty}",
        ),
    ),
)

SBI = BankMatcher(
    name="sbi",
    bank="SBI",
    gate=_sbi_gate,
    alternatives=(
        # Dear UPI user A/C X5986 debited by 47.0 on date 03Nov25 trf to MAHENDRA BALASO Refno 5307...
        Alternative(
            _compile(
                r"debited\s+by\s+(?P<amount>[\d,]+\.\d{1,2})\s+on\s+date\s+(?P<date_token>\w+)\s+trf\s+to\s+(?P<counterparty>[^.]+)"
            ),
            template="Transfer to {counterparty} on {date_token}",
        ),
        # Your SBI A/C XX1234 debited by INR 750.00 on 15-JAN-2024. Avl Bal INR 12,450.00
        Alternative(
            _compile(
                r"debited\s+by\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+on\s+(?P<detail>[^.]+?)\.?\s*"
                + _AVL_BAL + r"\s+" + CURRENCY + r"\s*(?P<balance>" + AMOUNT + r")"
            ),
            default_description="SBI Bank Transaction",
        ),
        Alternative(
            _compile(
                r"debited\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+on\s+(?P<detail>[^.]+?)\.?\s*Bal\s+"
                + CURRENCY + r"\s*(?P<balance>" + AMOUNT + r")"
            ),
            default_description="SBI Bank Transaction",
        ),
    ),
)

HDFC = BankMatcher(
    name="hdfc",
    bank="HDFC",
    gate=_hdfc_gate,
    alternatives=(
        # INR 500.00 spent on HDFC Bank Card XX1234 at SWIGGY on 2024-01-15. Avl bal INR 12,345.67
        Alternative(
            _compile(
                CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+spent\s+(?:on|at|for)\s+(?P<detail>[^.]+?)\.?\s*"
                + _AVL_BAL + r"\s+" + CURRENCY + r"\s*(?P<balance>" + AMOUNT + r")"
            ),
            default_description="HDFC Bank Transaction",
        ),
        Alternative(
            _compile(CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+spent\s+(?:on|at|for)\s+(?P<detail>[^.]+)"),
            default_description="HDFC Bank Transaction",
        ),
    ),
)

ICICI = BankMatcher(
    name="icici",
    bank="ICICI",
    gate=_icici_gate,
    alternatives=(
        # Your a/c XX1234 is debited INR 1,000.00 on 15-Jan-24 towards AMAZON. Avl Bal INR 9,000.00
        Alternative(
            _compile(
                r"debited\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+(?:on|at)\s+(?P<detail>[^.]+?)\.?\s*"
                + _AVL_BAL + r"\s+" + CURRENCY + r"\s*(?P<balance>" + AMOUNT + r")"
            ),
            default_description="ICICI Bank Transaction",
        ),
        Alternative(
            _compile(r"debited\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+(?:on|at)\s+(?P<detail>[^.]+)"),
            default_description="ICICI Bank Transaction",
        ),
        Alternative(
            _compile(CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+has\s+been\s+debited"),
            default_description="ICICI Bank Transaction",
        ),
    ),
)

AXIS = BankMatcher(
    name="axis",
    bank="Axis",
    gate=_axis_gate,
    alternatives=(
        Alternative(
            _compile(CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+has\s+been\s+debited"),
            default_description="Axis Bank Transaction",
        ),
        Alternative(
            _compile(r"debited\s+(?:with\s+)?" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")"),
            default_description="Axis Bank Transaction",
        ),
    ),
)

UPI = BankMatcher(
    name="upi",
    bank="UPI",
    gate=_upi_gate,
    alternatives=(
        # INR 300.00 paid to Amazon India via UPI. Ref No 789012
        Alternative(
            _compile(CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+paid\s+to\s+(?P<counterparty>[^.]+?)\.?\s+(?:via\s+)?UPI"),
            template="UPI Payment to {counterparty}",
        ),
        # INR 1,200.00 received from Priya Sharma. UPI Ref 4123
        Alternative(
            _compile(
                CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+received\s+from\s+(?P<counterparty>[^.]+?)\.?\s+(?:via\s+)?UPI"
            ),
            direction=INCOME,
            template="UPI Payment from {counterparty}",
        ),
        Alternative(
            _compile(r"UPI\s+transaction\s+of\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")"),
            default_description="UPI Transaction",
        ),
        Alternative(
            _compile(CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s*(?:paid|sent)\s*to\s*(?P<counterparty>[^.]+)"),
            template="UPI Payment to {counterparty}",
        ),
        Alternative(
            _compile(
                r"debited\s+by\s+" + CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")\s+on\s+date\s+\w+\s+trf\s+to\s+(?P<counterparty>[^.]+)"
            ),
            template="UPI Payment to {counterparty}",
        ),
    ),
)

BANK_MATCHERS: Tuple[BankMatcher, ...] = (BANK_OF_BARODA, SBI, HDFC, ICICI, AXIS, UPI)


def match_bank_formats(
    text: str, matchers: Tuple[BankMatcher, ...] = BANK_MATCHERS
) -> Tuple[Optional[ParsedTransaction], Optional[str]]:
    """Run the bank cascade; returns ``(transaction, matcher_name)``."""
    for matcher in matchers:
        parsed = matcher.match(text)
        if parsed is not None:
            return parsed, matcher.name
    return None, None
