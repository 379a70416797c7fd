from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.models.domain import BrandDealStatus
from creator_crm.schemas.common import reject_null


class BrandDealRead(BaseModel):
    id: str
    user_id: str
    brand_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    deliverables: Optional[str] = None
    fee: float
    status: BrandDealStatus
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class BrandDealCreate(BaseModel):
    brand_name: str = Field(..., min_length=1, max_length=255)
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    deliverables: Optional[str] = None
    fee: float = Field(0.0, ge=0)
    status: BrandDealStatus = BrandDealStatus.negotiation
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    class Config:
        use_enum_values = True


class BrandDealUpdate(BaseModel):
    brand_name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    deliverables: Optional[str] = None
    fee: Optional[float] = Field(None, ge=0)
    status: Optional[BrandDealStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("brand_name", "fee", "status", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)

    class Config:
        use_enum_values = True
