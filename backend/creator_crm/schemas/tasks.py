from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from creator_crm.schemas.common import reject_null


class TaskRead(BaseModel):
    id: str
    user_id: str
    text: str
    completed: bool
    created_at: datetime

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    text: str = Field(..., min_length=1)
    completed: bool = False


class TaskUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1)
    completed: Optional[bool] = None

    @field_validator("text", "completed", mode="before")
    @classmethod
    def required_columns_not_null(cls, value, info):
        return reject_null(value, info)
