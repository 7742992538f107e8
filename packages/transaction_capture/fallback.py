"""
Generic Fallback Matcher.

Applied only after every bank matcher has declined. The patterns are
broader than the bank grammars, so direction comes from keyword families
instead of the pattern: debit words win over credit words, and a message
with neither is booked as an expense. A false debit is preferred over a
false credit so balances are never silently inflated.
"""

import re
from typing import Optional, Tuple

from .bank_matchers import Alternative, build_transaction
from .models import ParsedTransaction, TransactionType
from .normalize import AMOUNT, CURRENCY

EXPENSE_KEYWORDS: Tuple[str, ...] = ("spent", "debited", "paid", "purchase")
INCOME_KEYWORDS: Tuple[str, ...] = ("received", "credited", "deposit")

_AMT = CURRENCY + r"\s*(?P<amount>" + AMOUNT + r")"

FALLBACK_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        _AMT + r"\s+(?:spent|debited|paid|dr\.?)\s+(?:on|at|with|for|to)\s+(?P<detail>[^.\n]+)",
        r"(?:spent|debited|paid)\s+" + _AMT + r"\s+(?:on|at|with|for|to)\s+(?P<detail>[^.\n]+)",
        r"received\s+" + _AMT + r"\s+from\s+(?P<counterparty>[^.\n]+)",
        _AMT + r"\s+(?:has\s+been\s+)?credited\s+(?:from|by)\s+(?P<counterparty>[^.\n]+)",
        _AMT + r"\s+has\s+been\s+credited",
        r"debited\s+by\s+" + _AMT + r"(?:\s+on\s+(?P<detail>[^.\n]+))?",
        r"payment\s+of\s+" + _AMT + r"\s+to\s+(?P<counterparty>[^.\n]+)",
        _AMT + r"\s*(?:paid|sent)\s+to\s+(?P<counterparty>[^.\n]+)",
        _AMT + r"\s+(?:deposited|credited)\b",
    )
)


def infer_direction(text: str) -> TransactionType:
    """Expense keywords are checked first; no keyword at all means expense."""
    lower = (text or "").lower()
    if any(keyword in lower for keyword in EXPENSE_KEYWORDS):
        return TransactionType.EXPENSE
    if any(keyword in lower for keyword in INCOME_KEYWORDS):
        return TransactionType.INCOME
    return TransactionType.EXPENSE


class GenericFallbackMatcher:
    """Heuristic matcher for messages no bank grammar recognizes."""

    name = "generic"

    def __init__(self, patterns: Tuple[re.Pattern, ...] = FALLBACK_PATTERNS):
        self.patterns = patterns

    def match(self, text: str) -> Optional[ParsedTransaction]:
        if not text or not isinstance(text, str):
            return None

        direction = infer_direction(text)
        for pattern in self.patterns:
            found = pattern.search(text)
            if not found:
                continue
            alternative = Alternative(pattern=pattern, direction=direction)
            parsed = build_transaction(found, alternative, text, bank=None)
            if parsed is not None:
                return parsed
        return None


GENERIC_FALLBACK = GenericFallbackMatcher()
