from typing import List

from pydantic import BaseModel

from creator_crm.schemas.brand_deals import BrandDealRead
from creator_crm.schemas.content_posts import ContentPostRead
from creator_crm.schemas.invoices import InvoiceRead
from creator_crm.schemas.notifications import NotificationRead
from creator_crm.schemas.projects import ProjectRead
from creator_crm.schemas.tasks import TaskRead
from creator_crm.schemas.users import UserProfileRead, UserSettingsRead


class SessionSnapshot(BaseModel):
    projects: List[ProjectRead]
    invoices: List[InvoiceRead]
    brand_deals: List[BrandDealRead]
    content_posts: List[ContentPostRead]
    tasks: List[TaskRead]
    notifications: List[NotificationRead]
    profile: UserProfileRead
    settings: UserSettingsRead
