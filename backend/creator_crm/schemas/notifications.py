from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from creator_crm.models.domain import NotificationType, RelatedType


class NotificationRead(BaseModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool
    related_id: Optional[str] = None
    related_type: Optional[RelatedType] = None
    created_at: datetime

    class Config:
        from_attributes = True
        use_enum_values = True


class UnreadCount(BaseModel):
    unread: int
