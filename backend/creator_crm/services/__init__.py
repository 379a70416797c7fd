from creator_crm.services.errors import (
    DuplicateSubmitError,
    IdentityRequiredError,
    InvoiceNumberConflictError,
    RecordNotFoundError,
)
from creator_crm.services.invoice_numbering import next_invoice_number
from creator_crm.services.session_scope import SessionScope

__all__ = [
    "DuplicateSubmitError",
    "IdentityRequiredError",
    "InvoiceNumberConflictError",
    "RecordNotFoundError",
    "SessionScope",
    "next_invoice_number",
]
