from __future__ import annotations


class IdentityRequiredError(PermissionError):
    """Raised when a data operation runs without an authenticated identity."""


class RecordNotFoundError(LookupError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}:{record_id} not found")
        self.collection = collection
        self.record_id = record_id


class InvoiceNumberConflictError(ValueError):
    def __init__(self, invoice_number: str | None, reason: str = "invoice_number_taken"):
        super().__init__(f"{reason}: {invoice_number}")
        self.invoice_number = invoice_number
        self.reason = reason


class DuplicateSubmitError(RuntimeError):
    """Raised when the same per-row action is submitted while one is still in flight."""

    def __init__(self, busy_key: str):
        super().__init__(f"action already in flight: {busy_key}")
        self.busy_key = busy_key
