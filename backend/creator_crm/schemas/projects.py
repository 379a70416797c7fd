from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.models.domain import ProjectStatus
from creator_crm.schemas.common import reject_null


class ProjectRead(BaseModel):
    id: str
    user_id: str
    project_name: str
    brand_name: Optional[str] = None
    description: Optional[str] = None
    amount: float
    status: ProjectStatus
    due_date: Optional[date] = None
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class ProjectCreate(BaseModel):
    project_name: str = Field(..., min_length=1, max_length=255)
    brand_name: Optional[str] = None
    description: Optional[str] = None
    amount: float = Field(0.0, ge=0)
    status: ProjectStatus = ProjectStatus.idea
    due_date: Optional[date] = None

    class Config:
        use_enum_values = True


class ProjectUpdate(BaseModel):
    project_name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand_name: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None
    due_date: Optional[date] = None

    @field_validator("project_name", "amount", "status", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)

    class Config:
        use_enum_values = True
