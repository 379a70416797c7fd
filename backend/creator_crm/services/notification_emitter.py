from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from creator_crm import models
from creator_crm.schemas.brand_deals import BrandDealRead
from creator_crm.schemas.content_posts import ContentPostRead
from creator_crm.schemas.invoices import InvoiceRead
from creator_crm.schemas.notifications import NotificationRead
from creator_crm.schemas.projects import ProjectRead
from creator_crm.services.remote_store import CollectionStore, MutationResult, SingletonStore

logger = logging.getLogger("creator_crm.notifications")

NotificationType = models.NotificationType
RelatedType = models.RelatedType


@dataclass(frozen=True)
class NotificationDraft:
    type: NotificationType
    title: str
    message: str
    related_id: str | None
    related_type: RelatedType | None

    def as_record(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "read": False,
            "related_id": self.related_id,
            "related_type": self.related_type.value if self.related_type else None,
        }


def _status_value(value: Any) -> str | None:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


def _client_label(invoice: InvoiceRead) -> str:
    return invoice.client_name or invoice.client_company or "client"


def _format_schedule(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%b %d, %Y")


def _platform_label(post: ContentPostRead) -> str:
    platform = _status_value(post.platform) or ""
    return {"x": "X", "tiktok": "TikTok", "youtube": "YouTube", "linkedin": "LinkedIn"}.get(
        platform, platform.capitalize()
    )


def invoice_created_draft(invoice: InvoiceRead) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.invoice_created,
        title="Invoice Created",
        message=(
            f"Invoice {invoice.invoice_number} for {_client_label(invoice)} has been created."
        ),
        related_id=invoice.id,
        related_type=RelatedType.invoice,
    )


def invoice_status_draft(invoice: InvoiceRead) -> NotificationDraft | None:
    status = _status_value(invoice.status)
    number = invoice.invoice_number
    client = _client_label(invoice)
    if status == models.InvoiceStatus.sent.value:
        kind, title = NotificationType.invoice_sent, "Invoice Sent"
        message = f"Invoice {number} has been sent to {client}."
    elif status == models.InvoiceStatus.paid.value:
        kind, title = NotificationType.invoice_paid, "Payment Received"
        message = f"Invoice {number} has been paid by {client}."
    elif status == models.InvoiceStatus.overdue.value:
        kind, title = NotificationType.invoice_overdue, "Invoice Overdue"
        message = f"Invoice {number} is now overdue."
    else:
        # Back to draft is not an event worth notifying.
        return None
    return NotificationDraft(
        type=kind,
        title=title,
        message=message,
        related_id=invoice.id,
        related_type=RelatedType.invoice,
    )


def invoice_deleted_draft(invoice: InvoiceRead) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.invoice_deleted,
        title="Invoice Deleted",
        message=f"Invoice {invoice.invoice_number} has been deleted.",
        related_id=invoice.id,
        related_type=RelatedType.invoice,
    )


def brand_deal_created_draft(deal: BrandDealRead) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.brand_deal_updated,
        title="New Brand Deal",
        message=f"New brand deal with {deal.brand_name} has been created.",
        related_id=deal.id,
        related_type=RelatedType.brand_deal,
    )


def brand_deal_status_draft(deal: BrandDealRead) -> NotificationDraft:
    status = _status_value(deal.status)
    brand = deal.brand_name
    if status == models.BrandDealStatus.confirmed.value:
        title, message = "Brand Deal Confirmed", f"Your brand deal with {brand} is confirmed."
    elif status == models.BrandDealStatus.completed.value:
        title, message = "Brand Deal Completed", f"Brand deal with {brand} has been completed."
    elif status == models.BrandDealStatus.cancelled.value:
        title, message = "Brand Deal Cancelled", f"Brand deal with {brand} has been cancelled."
    else:
        label = (status or "").replace("_", " ")
        title, message = "Brand Deal Updated", f"Brand deal with {brand} is now {label}."
    return NotificationDraft(
        type=NotificationType.brand_deal_updated,
        title=title,
        message=message,
        related_id=deal.id,
        related_type=RelatedType.brand_deal,
    )


def content_post_created_draft(post: ContentPostRead) -> NotificationDraft:
    when = _format_schedule(post.scheduled_date)
    platform = _platform_label(post)
    if when:
        kind, title = NotificationType.content_scheduled, "Content Scheduled"
        message = f'"{post.title}" has been scheduled for {platform} on {when}.'
    else:
        kind, title = NotificationType.content_updated, "Content Created"
        message = f'New {platform} post "{post.title}" has been created.'
    return NotificationDraft(
        type=kind,
        title=title,
        message=message,
        related_id=post.id,
        related_type=RelatedType.content_post,
    )


def content_post_status_draft(post: ContentPostRead) -> NotificationDraft:
    status = _status_value(post.status)
    platform = _platform_label(post)
    if status == models.ContentPostStatus.scheduled.value:
        kind, title = NotificationType.content_scheduled, "Content Scheduled"
        when = _format_schedule(post.scheduled_date)
        suffix = f" on {when}" if when else ""
        message = f'"{post.title}" is scheduled for {platform}{suffix}.'
    elif status == models.ContentPostStatus.published.value:
        kind, title = NotificationType.content_published, "Content Published"
        message = f'"{post.title}" has been published on {platform}.'
    else:
        kind, title = NotificationType.content_updated, "Content Updated"
        message = f'"{post.title}" has been moved back to {status}.'
    return NotificationDraft(
        type=kind,
        title=title,
        message=message,
        related_id=post.id,
        related_type=RelatedType.content_post,
    )


def project_status_draft(project: ProjectRead) -> NotificationDraft:
    return NotificationDraft(
        type=NotificationType.project_updated,
        title="Project Updated",
        message=f"{project.project_name} status changed to {_status_value(project.status)}.",
        related_id=project.id,
        related_type=RelatedType.project,
    )


def status_changed(previous: Any, current: Any) -> bool:
    return _status_value(getattr(previous, "status", None)) != _status_value(
        getattr(current, "status", None)
    )


class NotificationEmitter:
    """Best-effort side channel from state transitions to Notification rows.

    Emission runs after the originating mutation has committed. Any failure here
    (settings lookup, insert, refetch) is logged and swallowed so the caller's
    result never depends on it.
    """

    def __init__(
        self,
        notifications: CollectionStore[models.Notification, NotificationRead],
        settings_store: SingletonStore,
    ):
        self.notifications = notifications
        self.settings_store = settings_store

    def enabled(self) -> bool:
        return bool(self.settings_store.get_or_create().notifications_enabled)

    def emit(
        self, draft: NotificationDraft | None
    ) -> Optional[MutationResult[NotificationRead]]:
        if draft is None:
            return None
        try:
            if not self.enabled():
                logger.debug(
                    "notification_suppressed",
                    extra={"type": draft.type.value, "related_id": draft.related_id},
                )
                return None
            return self.notifications.create(draft.as_record())
        except Exception as exc:
            try:
                self.notifications.db.rollback()
            except Exception:
                pass
            logger.warning(
                "notification_emit_failed",
                extra={
                    "type": draft.type.value,
                    "related_id": draft.related_id,
                    "user_id": self.notifications.user_id,
                    "error": str(exc),
                },
            )
            return None

    # Transitions

    def invoice_created(self, invoice: InvoiceRead):
        return self.emit(invoice_created_draft(invoice))

    def invoice_updated(self, previous: InvoiceRead, current: InvoiceRead):
        if not status_changed(previous, current):
            return None
        return self.emit(invoice_status_draft(current))

    def invoice_deleted(self, invoice: InvoiceRead):
        return self.emit(invoice_deleted_draft(invoice))

    def brand_deal_created(self, deal: BrandDealRead):
        return self.emit(brand_deal_created_draft(deal))

    def brand_deal_updated(self, previous: BrandDealRead, current: BrandDealRead):
        if not status_changed(previous, current):
            return None
        return self.emit(brand_deal_status_draft(current))

    def content_post_created(self, post: ContentPostRead):
        return self.emit(content_post_created_draft(post))

    def content_post_updated(self, previous: ContentPostRead, current: ContentPostRead):
        if not status_changed(previous, current):
            return None
        return self.emit(content_post_status_draft(current))

    def project_updated(self, previous: ProjectRead, current: ProjectRead):
        if not status_changed(previous, current):
            return None
        return self.emit(project_status_draft(current))
