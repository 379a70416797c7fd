from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from creator_crm.api.deps import get_session_scope
from creator_crm.schemas.brand_deals import BrandDealCreate, BrandDealRead, BrandDealUpdate
from creator_crm.schemas.invoices import InvoiceRead
from creator_crm.services.errors import RecordNotFoundError
from creator_crm.services.session_scope import SessionScope

router = APIRouter(prefix="/brand-deals", tags=["brand-deals"])

_SCOPE_DEP = Depends(get_session_scope)


@router.get("", response_model=list[BrandDealRead])
def list_brand_deals(scope: SessionScope = _SCOPE_DEP):
    return scope.brand_deals.fetch()


@router.get("/{deal_id}", response_model=BrandDealRead)
def get_brand_deal(deal_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.brand_deals.get(deal_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Brand deal not found")


@router.get("/{deal_id}/invoice", response_model=Optional[InvoiceRead])
def get_brand_deal_invoice(deal_id: str, scope: SessionScope = _SCOPE_DEP):
    """Invoice materialized from this deal, if any."""
    try:
        scope.brand_deals.get(deal_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Brand deal not found")
    return scope.materialized_invoice(deal_id)


@router.post("", response_model=BrandDealRead, status_code=201)
def create_brand_deal(payload: BrandDealCreate, scope: SessionScope = _SCOPE_DEP):
    return scope.create_brand_deal(payload.model_dump()).record


@router.patch("/{deal_id}", response_model=BrandDealRead)
def update_brand_deal(deal_id: str, payload: BrandDealUpdate, scope: SessionScope = _SCOPE_DEP):
    try:
        return scope.update_brand_deal(deal_id, payload.model_dump(exclude_unset=True)).record
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Brand deal not found")


@router.delete("/{deal_id}", status_code=204)
def delete_brand_deal(deal_id: str, scope: SessionScope = _SCOPE_DEP):
    try:
        scope.delete_brand_deal(deal_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Brand deal not found")
    return Response(status_code=204)
