import uuid
from datetime import date, datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from creator_crm.database import Base


def new_record_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProjectStatus(str, PyEnum):
    idea = "idea"
    negotiation = "negotiation"
    in_progress = "in-progress"
    submitted = "submitted"
    paid = "paid"


class BrandDealStatus(str, PyEnum):
    negotiation = "negotiation"
    confirmed = "confirmed"
    in_review = "in_review"
    approved = "approved"
    posted = "posted"
    completed = "completed"
    cancelled = "cancelled"


# Statuses meaning the deliverables are done and the deal can be billed.
BILLABLE_BRAND_DEAL_STATUSES = frozenset({BrandDealStatus.posted, BrandDealStatus.completed})


class InvoiceStatus(str, PyEnum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    overdue = "overdue"


class ContentPlatform(str, PyEnum):
    newsletter = "newsletter"
    x = "x"
    pinterest = "pinterest"
    tiktok = "tiktok"
    instagram = "instagram"
    youtube = "youtube"
    linkedin = "linkedin"
    blog = "blog"


class ContentPostStatus(str, PyEnum):
    draft = "draft"
    scheduled = "scheduled"
    published = "published"


class NotificationType(str, PyEnum):
    invoice_created = "invoice_created"
    invoice_sent = "invoice_sent"
    invoice_paid = "invoice_paid"
    invoice_overdue = "invoice_overdue"
    invoice_deleted = "invoice_deleted"
    brand_deal_updated = "brand_deal_updated"
    content_scheduled = "content_scheduled"
    content_published = "content_published"
    content_updated = "content_updated"
    project_updated = "project_updated"


class RelatedType(str, PyEnum):
    invoice = "invoice"
    brand_deal = "brand_deal"
    content_post = "content_post"
    project = "project"


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand_name: Mapped[str | None] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ProjectStatus.idea.value
    )
    due_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_projects_amount_non_negative"),
        Index("ix_projects_user_created", "user_id", "created_at"),
    )


class BrandDeal(Base):
    __tablename__ = "brand_deals"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    brand_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String(255))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    contact_phone: Mapped[str | None] = mapped_column(String(64))
    deliverables: Mapped[str | None] = mapped_column(Text)
    fee: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=BrandDealStatus.negotiation.value
    )
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        CheckConstraint("fee >= 0", name="ck_brand_deals_fee_non_negative"),
        Index("ix_brand_deals_user_created", "user_id", "created_at"),
    )


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False)
    issue_date: Mapped[date | None] = mapped_column(Date)
    due_date: Mapped[date | None] = mapped_column(Date)
    currency: Mapped[str | None] = mapped_column(String(8))

    # Client
    client_name: Mapped[str | None] = mapped_column(String(255))
    client_company: Mapped[str | None] = mapped_column(String(255))
    client_email: Mapped[str | None] = mapped_column(String(255))
    client_address: Mapped[str | None] = mapped_column(Text)
    client_contact: Mapped[str | None] = mapped_column(String(255))
    po_number: Mapped[str | None] = mapped_column(String(64))

    # Creator (mirrors the user profile)
    creator_name: Mapped[str | None] = mapped_column(String(255))
    creator_email: Mapped[str | None] = mapped_column(String(255))
    creator_phone: Mapped[str | None] = mapped_column(String(64))
    creator_address: Mapped[str | None] = mapped_column(Text)
    creator_business_name: Mapped[str | None] = mapped_column(String(255))
    creator_tax_id: Mapped[str | None] = mapped_column(String(64))
    creator_website: Mapped[str | None] = mapped_column(String(255))
    creator_instagram: Mapped[str | None] = mapped_column(String(255))
    creator_youtube: Mapped[str | None] = mapped_column(String(255))
    show_business_name: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_contact_info: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    show_tax_id: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Amounts
    line_items: Mapped[list[dict] | None] = mapped_column(JSON)
    subtotal: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    discount_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    discount_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tax_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    tax_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # Payment & terms
    payment_terms: Mapped[str | None] = mapped_column(String(32))
    payment_methods: Mapped[list[str] | None] = mapped_column(JSON)
    notes: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=InvoiceStatus.draft.value
    )
    sent_date: Mapped[date | None] = mapped_column(Date)
    paid_date: Mapped[date | None] = mapped_column(Date)

    # Weak link to the brand deal this invoice was materialized from (no FK, no cascade).
    source_brand_deal_id: Mapped[str | None] = mapped_column(String(32), index=True)
    # Weak link to the project this invoice bills; paid status is mirrored across it.
    project_id: Mapped[str | None] = mapped_column(String(32), index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_invoice_number"),
        UniqueConstraint(
            "user_id", "source_brand_deal_id", name="uq_invoices_user_source_brand_deal"
        ),
        Index("ix_invoices_user_created", "user_id", "created_at"),
    )


class ContentPost(Base):
    __tablename__ = "content_posts"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_id: Mapped[str | None] = mapped_column(String(32), index=True)
    brand_deal_id: Mapped[str | None] = mapped_column(String(32), index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ContentPostStatus.draft.value
    )
    scheduled_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_content_posts_user_created", "user_id", "created_at"),)


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_tasks_user_created", "user_id", "created_at"),)


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_record_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    related_id: Mapped[str | None] = mapped_column(String(32))
    related_type: Mapped[str | None] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_notifications_user_created", "user_id", "created_at"),)
