from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.invoices import (
    InvoiceCreate,
    InvoiceRead,
    InvoiceUpdate,
    NextInvoiceNumber,
)
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/invoices", tags=["invoices"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[InvoiceRead])
def list_invoices(scope: SessionScope = _SCOPE_DEP):
    return scope.invoices.fetch()


@router.get("/next-number", response_model=NextInvoiceNumber)
def next_invoice_number(scope: SessionScope = _SCOPE_DEP):
    """Preview only: nothing is reserved until the invoice is created."""
    return NextInvoiceNumber(invoice_number=scope.next_invoice_number())


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(invoice_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.get_invoice(invoice_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")


@router.post("", response_model=InvoiceRead, status_code=201)
def create_invoice(payload: InvoiceCreate, scope: SessionScope = _SCOPE_DEP):
    # Number conflicts surface as 409 through the app-level handler.
    return scope.create_invoice(payload.model_dump(exclude_none=True)).record


@router.patch("/{invoice_id}", response_model=InvoiceRead)
def update_invoice(invoice_id: str, payload: InvoiceUpdate, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.update_invoice(invoice_id, payload.model_dump(exclude_unset=True)).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")


@router.delete("/{invoice_id}", status_code=204)
def delete_invoice(invoice_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_invoice(invoice_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return Response(status_code=204)
