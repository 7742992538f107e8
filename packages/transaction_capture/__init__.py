"""
Transaction Capture

Turns bank SMS, notification text, deep links and structured payloads
into categorized ledger transactions.
"""

__version__ = "0.1.0"

from .category_mapper import detect_bank_account, map_transaction, map_transaction_with_bank
from .errors import CaptureError, NoAccountsAvailable, NoTransactionData, PersistenceFailure, UnrecognizedShape
from .extractor import TransactionExtractor, parse_message
from .models import CanonicalTransaction, CategoryMapping, ParsedTransaction, TransactionType
from .pipeline import NotificationPipeline, Outcome, PipelineResult, PipelineState
from .store import InMemoryLedgerStore, LedgerStore, SupabaseLedgerStore

__all__ = [
    "CanonicalTransaction",
    "CaptureError",
    "CategoryMapping",
    "InMemoryLedgerStore",
    "LedgerStore",
    "NoAccountsAvailable",
    "NoTransactionData",
    "NotificationPipeline",
    "Outcome",
    "ParsedTransaction",
    "PersistenceFailure",
    "PipelineResult",
    "PipelineState",
    "SupabaseLedgerStore",
    "TransactionExtractor",
    "TransactionType",
    "UnrecognizedShape",
    "detect_bank_account",
    "map_transaction",
    "map_transaction_with_bank",
    "parse_message",
]
