from creator_crm.models.domain import (  # noqa: F401
    BILLABLE_BRAND_DEAL_STATUSES,
    BrandDeal,
    BrandDealStatus,
    ContentPlatform,
    ContentPost,
    ContentPostStatus,
    Invoice,
    InvoiceStatus,
    Notification,
    NotificationType,
    Project,
    ProjectStatus,
    RelatedType,
    Task,
    new_record_id,
    utc_now,
)
from creator_crm.models.user import UserProfile, UserSettings  # noqa: F401
