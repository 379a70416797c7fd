from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.models.domain import InvoiceStatus
from creator_crm.schemas.common import reject_null


class LineItem(BaseModel):
    service: Optional[str] = None
    description: Optional[str] = None
    quantity: float = Field(1.0, ge=0)
    rate: float = Field(0.0, ge=0)
    # Recomputed as quantity * rate on every write; any supplied value is ignored.
    amount: float = 0.0


class InvoiceRead(BaseModel):
    id: str
    user_id: str
    invoice_number: str
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = None

    client_name: Optional[str] = None
    client_company: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    client_contact: Optional[str] = None
    po_number: Optional[str] = None

    creator_name: Optional[str] = None
    creator_email: Optional[str] = None
    creator_phone: Optional[str] = None
    creator_address: Optional[str] = None
    creator_business_name: Optional[str] = None
    creator_tax_id: Optional[str] = None
    creator_website: Optional[str] = None
    creator_instagram: Optional[str] = None
    creator_youtube: Optional[str] = None
    show_business_name: bool = True
    show_contact_info: bool = True
    show_tax_id: bool = True

    line_items: Optional[List[LineItem]] = None
    subtotal: float
    discount_rate: float
    discount_amount: float
    tax_rate: float
    tax_amount: float
    total: float
    amount: float

    payment_terms: Optional[str] = None
    payment_methods: Optional[List[str]] = None
    notes: Optional[str] = None

    status: InvoiceStatus
    sent_date: Optional[date] = None
    paid_date: Optional[date] = None
    source_brand_deal_id: Optional[str] = None
    project_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class _InvoiceFields(BaseModel):
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    currency: Optional[str] = Field(None, max_length=8)

    client_name: Optional[str] = None
    client_company: Optional[str] = None
    client_email: Optional[str] = None
    client_address: Optional[str] = None
    client_contact: Optional[str] = None
    po_number: Optional[str] = None

    creator_name: Optional[str] = None
    creator_email: Optional[str] = None
    creator_phone: Optional[str] = None
    creator_address: Optional[str] = None
    creator_business_name: Optional[str] = None
    creator_tax_id: Optional[str] = None
    creator_website: Optional[str] = None
    creator_instagram: Optional[str] = None
    creator_youtube: Optional[str] = None

    discount_rate: Optional[float] = Field(None, ge=0, le=100)
    tax_rate: Optional[float] = Field(None, ge=0, le=100)

    payment_terms: Optional[str] = None
    payment_methods: Optional[List[str]] = None
    notes: Optional[str] = None

    class Config:
        use_enum_values = True


class InvoiceCreate(_InvoiceFields):
    # Allocated from the INV-### sequence when omitted.
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=64)
    line_items: List[LineItem] = Field(default_factory=list)
    amount: float = Field(0.0, ge=0)
    show_business_name: bool = True
    show_contact_info: bool = True
    show_tax_id: bool = True
    status: InvoiceStatus = InvoiceStatus.draft
    source_brand_deal_id: Optional[str] = None
    project_id: Optional[str] = None


class InvoiceUpdate(_InvoiceFields):
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=64)
    line_items: Optional[List[LineItem]] = None
    amount: Optional[float] = Field(None, ge=0)
    show_business_name: Optional[bool] = None
    show_contact_info: Optional[bool] = None
    show_tax_id: Optional[bool] = None
    status: Optional[InvoiceStatus] = None
    sent_date: Optional[date] = None
    paid_date: Optional[date] = None
    project_id: Optional[str] = None

    @field_validator(
        "invoice_number",
        "amount",
        "status",
        "show_business_name",
        "show_contact_info",
        "show_tax_id",
        "discount_rate",
        "tax_rate",
        mode="before",
    )
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)

class NextInvoiceNumber(BaseModel):
    invoice_number: str
