"""Error taxonomy for transaction capture.

Only storage-layer failures escape to the pipeline's top level. Matchers,
the fallback and the category mapper downgrade their own problems to
``None`` or a default result.
"""


class CaptureError(Exception):
    """Base error for the capture pipeline."""


class NoTransactionData(CaptureError):
    """The event was recognized but no transaction could be extracted."""

    def __init__(self, detail: str = "No transaction data found in event"):
        super().__init__(detail)
        self.detail = detail


class UnrecognizedShape(NoTransactionData):
    """The event matched none of the admissible input shapes."""

    def __init__(self, keys=()):
        self.keys = sorted(str(k) for k in keys)
        super().__init__(f"Unrecognized event shape (keys: {', '.join(self.keys) or 'none'})")


class NoAccountsAvailable(CaptureError):
    """The ledger has no bank accounts to book the transaction against."""

    def __init__(self, detail: str = "No bank accounts available. Please add a bank account first."):
        super().__init__(detail)
        self.detail = detail


class PersistenceFailure(CaptureError):
    """The ledger rejected the create call."""

    def __init__(self, detail: str = "Failed to add transaction to the ledger"):
        super().__init__(detail)
        self.detail = detail
