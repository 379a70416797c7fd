from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.models.domain import ContentPlatform, ContentPostStatus
from creator_crm.schemas.common import reject_null


class ContentPostRead(BaseModel):
    id: str
    user_id: str
    project_id: Optional[str] = None
    brand_deal_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    platform: ContentPlatform
    status: ContentPostStatus
    scheduled_date: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class ContentPostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    platform: ContentPlatform
    status: ContentPostStatus = ContentPostStatus.draft
    scheduled_date: Optional[datetime] = None
    project_id: Optional[str] = None
    brand_deal_id: Optional[str] = None

    class Config:
        use_enum_values = True


class ContentPostBatchCreate(BaseModel):
    """One post per selected platform, sharing everything else."""

    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    platforms: List[ContentPlatform] = Field(..., min_length=1)
    status: ContentPostStatus = ContentPostStatus.draft
    scheduled_date: Optional[datetime] = None
    project_id: Optional[str] = None
    brand_deal_id: Optional[str] = None

    class Config:
        use_enum_values = True


class ContentPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    platform: Optional[ContentPlatform] = None
    status: Optional[ContentPostStatus] = None
    scheduled_date: Optional[datetime] = None
    project_id: Optional[str] = None
    brand_deal_id: Optional[str] = None

    @field_validator("title", "platform", "status", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)

    class Config:
        use_enum_values = True
