"""User-visible result signals.

The pipeline reports each outcome once through a Notifier. On a server
there is no toast to show, so ``LogNotifier`` writes the message to the
structured log; ``RecordingNotifier`` keeps them for inspection.
"""

from typing import List, Protocol, Tuple

import structlog

from .models import ParsedTransaction

logger = structlog.get_logger()

FAILURE_MESSAGE = "Failed to add transaction from notification"


def success_message(transaction: ParsedTransaction) -> str:
    kind = "Income" if transaction.is_income else "Expense"
    return f"{kind} of ₹{abs(transaction.amount):.2f} added successfully!"


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    def success(self, message: str) -> None:
        logger.info("user_notified", outcome="success", message=message)

    def error(self, message: str) -> None:
        logger.warning("user_notified", outcome="error", message=message)


class RecordingNotifier:
    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def last(self):
        return self.messages[-1] if self.messages else None
