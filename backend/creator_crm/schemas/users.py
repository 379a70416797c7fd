from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.schemas.common import reject_null


class UserProfileRead(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    currency: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None  # Plain str: local/test domains are not always valid emails
    phone: Optional[str] = None
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=8)

    @field_validator("currency", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)


class UserSettingsRead(BaseModel):
    id: str
    user_id: str
    notifications_enabled: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserSettingsUpdate(BaseModel):
    notifications_enabled: Optional[bool] = None

    @field_validator("notifications_enabled", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)
