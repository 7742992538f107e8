"""Shared text normalization for bank message grammars.

Amounts are parsed as ``Decimal`` with thousands separators stripped.
Counterparty strings are cut at the first reference/balance terminator.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

CURRENCY = r"(?:INR|Rs\.?|₹)"
AMOUNT = r"[\d,]*\d(?:\.\d+)?"

BALANCE_PATTERN = re.compile(
    r"bal(?:ance)?\s*(?:is\s+)?(?:now\s+)?[:\-]?\s*" + CURRENCY + r"\s*(" + AMOUNT + r")",
    re.IGNORECASE,
)

# Anything from the first terminator onwards is reference/balance noise.
TERMINATOR_PATTERN = re.compile(
    r"\s*(?:"
    r"\b(?:UPI\s+)?Ref(?:\s*no)?(?![a-z])"
    r"|\bAvl\s*Bal"
    r"|\bAvail(?:able)?\s+Bal"
    r"|\bBal\s*:"
    r"|\bIf\s+not\s+u\b"
    r"|\bvia\s+UPI\b"
    r").*$",
    re.IGNORECASE | re.DOTALL,
)

MONTH_NAME = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
DATE_TOKEN = r"(?:\d{1,4}[-/ ]?(?:\d{1,2}|" + MONTH_NAME + r")[-/ ]?\d{2,4})"
DATE_ONLY_PATTERN = re.compile(r"(?:on\s+)?(?:date\s+)?" + DATE_TOKEN + r"(?:\s+\d{1,2}:\d{2}(?::\d{2})?)?", re.IGNORECASE)
DATE_SUFFIX_PATTERN = re.compile(
    r"\s+on\s+(?:date\s+)?" + DATE_TOKEN + r"(?:\s+\d{1,2}:\d{2}(?::\d{2})?)?\s*$",
    re.IGNORECASE,
)

MERCHANT_LEAD_PATTERN = re.compile(r"\b(?:at|towards|to|with|for|from)\s+(.+)", re.IGNORECASE | re.DOTALL)


def parse_amount(raw) -> Optional[Decimal]:
    """Parse ``"1,234.50"`` style amounts. Returns None when unparseable."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        value = _decimal_from_text(str(raw))
    if value is None or not value.is_finite():
        return None
    return value


def _decimal_from_text(raw: str) -> Optional[Decimal]:
    text = re.sub(r"[₹,\s]", "", raw)
    text = re.sub(r"^(?:INR|Rs\.?)", "", text, flags=re.IGNORECASE)
    if not text:
        return None
    try:
        return Decimal(text)
    except InvalidOperation:
        return None


def find_balance(text: str) -> Optional[Decimal]:
    """Return the running balance quoted anywhere in ``text``."""
    match = BALANCE_PATTERN.search(text or "")
    if not match:
        return None
    return parse_amount(match.group(1))


def is_date_only(text: str) -> bool:
    return bool(DATE_ONLY_PATTERN.fullmatch((text or "").strip()))


def trim_counterparty(raw: Optional[str]) -> Optional[str]:
    """Strip reference numbers, balance suffixes and trailing dates."""
    if not raw:
        return None
    cleaned = TERMINATOR_PATTERN.sub("", raw)
    cleaned = DATE_SUFFIX_PATTERN.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" .,:;-\t\n")
    if not cleaned or is_date_only(cleaned):
        return None
    return cleaned


def extract_merchant(detail: Optional[str]) -> Optional[str]:
    """Best-effort merchant from the free text that follows a verb.

    ``"HDFC Bank Card XX1234 at SWIGGY on 2024-01-15"`` -> ``"SWIGGY"``
    ``"Starbucks on 2024-01-15"`` -> ``"Starbucks"``
    """
    if not detail:
        return None
    lead = MERCHANT_LEAD_PATTERN.search(detail)
    candidate = lead.group(1) if lead else detail
    candidate = re.sub(r"^(?:on|at)\s+", "", candidate.strip(), flags=re.IGNORECASE)
    return trim_counterparty(candidate)


def describe_detail(detail: Optional[str], default: str) -> str:
    """Use the captured detail phrase as a description unless it is just a date."""
    if not detail:
        return default
    cleaned = TERMINATOR_PATTERN.sub("", detail)
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" .,:;-")
    if not cleaned or is_date_only(cleaned):
        return default
    return cleaned
