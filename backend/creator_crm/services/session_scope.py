from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from creator_crm import models
from creator_crm.config import Settings, settings as default_settings
from creator_crm.schemas.brand_deals import BrandDealRead
from creator_crm.schemas.content_posts import ContentPostRead
from creator_crm.schemas.invoices import InvoiceRead
from creator_crm.schemas.notifications import NotificationRead
from creator_crm.schemas.projects import ProjectRead
from creator_crm.schemas.tasks import TaskRead
from creator_crm.schemas.users import UserProfileRead, UserSettingsRead
from creator_crm.services.cross_entity_sync import (
    CrossEntitySync,
    backfill_creator_fields,
    became_paid,
    should_materialize,
)
from creator_crm.services.errors import DuplicateSubmitError, InvoiceNumberConflictError
from creator_crm.services.invoice_numbering import (
    existing_invoice_numbers,
    generate_invoice_number,
)
from creator_crm.services.invoice_totals import apply_totals
from creator_crm.services.notification_emitter import NotificationEmitter
from creator_crm.services.remote_store import CollectionStore, MutationResult, SingletonStore

logger = logging.getLogger("creator_crm.session")

COLLECTIONS = ("projects", "invoices", "brand_deals", "content_posts", "tasks", "notifications")


class BusyKeys:
    """In-flight `{id}-{action}` keys, per identity.

    Shared across scopes in one process so two requests for the same row and
    action cannot overlap.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._keys: set[tuple[str, str]] = set()

    def is_busy(self, user_id: str, key: str) -> bool:
        with self._lock:
            return (user_id, key) in self._keys

    @contextmanager
    def hold(self, user_id: str, key: str) -> Iterator[str]:
        with self._lock:
            if (user_id, key) in self._keys:
                raise DuplicateSubmitError(key)
            self._keys.add((user_id, key))
        try:
            yield key
        finally:
            with self._lock:
                self._keys.discard((user_id, key))


busy_keys = BusyKeys()


def busy_key(record_id: str, action: str) -> str:
    return f"{record_id}-{action}"


def _status_value(value: Any) -> str | None:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


class SessionScope:
    """Everything one authenticated identity can do, plus its read replica.

    Each action runs sequentially: mutation, then notification, then derived
    state. Only the mutation can fail the action.
    """

    def __init__(
        self,
        db: Session,
        *,
        user_id: str | None,
        app_settings: Settings | None = None,
        busy: BusyKeys | None = None,
    ):
        cfg = app_settings or default_settings
        self.db = db
        self.settings = cfg
        self.busy = busy or busy_keys

        self.projects = CollectionStore(
            db, user_id=user_id, model=models.Project, read_schema=ProjectRead, name="projects"
        )
        self.user_id = self.projects.user_id
        self.invoices = CollectionStore(
            db, user_id=user_id, model=models.Invoice, read_schema=InvoiceRead, name="invoices"
        )
        self.brand_deals = CollectionStore(
            db,
            user_id=user_id,
            model=models.BrandDeal,
            read_schema=BrandDealRead,
            name="brand_deals",
        )
        self.content_posts = CollectionStore(
            db,
            user_id=user_id,
            model=models.ContentPost,
            read_schema=ContentPostRead,
            name="content_posts",
        )
        self.tasks = CollectionStore(
            db,
            user_id=user_id,
            model=models.Task,
            read_schema=TaskRead,
            name="tasks",
            limit=cfg.task_history_limit,
        )
        self.notifications = CollectionStore(
            db,
            user_id=user_id,
            model=models.Notification,
            read_schema=NotificationRead,
            name="notifications",
            limit=cfg.notification_history_limit,
        )
        self.profile = SingletonStore(
            db,
            user_id=user_id,
            model=models.UserProfile,
            read_schema=UserProfileRead,
            name="user_profile",
        )
        self.user_settings = SingletonStore(
            db,
            user_id=user_id,
            model=models.UserSettings,
            read_schema=UserSettingsRead,
            name="user_settings",
        )

        self.emitter = NotificationEmitter(self.notifications, self.user_settings)
        self.sync = CrossEntitySync(
            self.invoices,
            create_invoice=lambda values: self.create_invoice(values).record,
            default_due_days=cfg.invoice_default_due_days,
            profile_sync_scope=cfg.profile_sync_scope,
            projects=self.projects,
        )

        self.closed = False
        self.replica: dict[str, Any] = {}

    # Replica

    def _publish(self, collection: str, snapshot: Any) -> None:
        if self.closed:
            logger.debug(
                "late_mutation_not_published",
                extra={"collection": collection, "user_id": self.user_id},
            )
            return
        self.replica[collection] = snapshot

    def _publish_result(self, collection: str, result: MutationResult | None) -> None:
        if result is not None:
            self._publish(collection, result.snapshot)

    def load_all(self) -> dict[str, Any]:
        for name in COLLECTIONS:
            self._publish(name, getattr(self, name).fetch())
        self._publish("profile", self.profile.get_or_create())
        self._publish("settings", self.user_settings.get_or_create())
        logger.info("session_loaded", extra={"user_id": self.user_id})
        return self.snapshot()

    def snapshot(self) -> dict[str, Any]:
        return dict(self.replica)

    def close(self) -> None:
        self.closed = True
        self.replica = {}
        logger.info("session_closed", extra={"user_id": self.user_id})

    @contextmanager
    def _busy(self, record_id: str, action: str) -> Iterator[str]:
        with self.busy.hold(self.user_id, busy_key(record_id, action)) as key:
            yield key

    def is_busy(self, record_id: str, action: str) -> bool:
        return self.busy.is_busy(self.user_id, busy_key(record_id, action))

    def _notified(self, result: MutationResult | None) -> None:
        self._publish_result("notifications", result)

    # Projects

    def create_project(self, data: Mapping[str, Any]) -> MutationResult[ProjectRead]:
        result = self.projects.create(data)
        self._publish("projects", result.snapshot)
        return result

    def update_project(
        self, project_id: str, changes: Mapping[str, Any]
    ) -> MutationResult[ProjectRead]:
        with self._busy(project_id, "update"):
            previous = self.projects.get(project_id)
            result = self.projects.update(project_id, changes)
            self._publish("projects", result.snapshot)
            self._notified(self.emitter.project_updated(previous, result.record))
            self._mirror_project_paid(previous, result.record)
            return result

    def delete_project(self, project_id: str) -> MutationResult[ProjectRead]:
        with self._busy(project_id, "delete"):
            result = self.projects.delete(project_id)
            self._publish("projects", result.snapshot)
            return result

    def _mirror_project_paid(self, previous: ProjectRead | None, project: ProjectRead) -> None:
        if not became_paid(previous, project, models.ProjectStatus.paid.value):
            return
        if self.sync.mirror_project_paid(project):
            self._publish("invoices", self.invoices.fetch())

    # Invoices

    def next_invoice_number(self) -> str:
        return generate_invoice_number(self.db, user_id=self.user_id).formatted

    def _invoice_number_taken(self, number: str) -> bool:
        return number in existing_invoice_numbers(self.db, user_id=self.user_id)

    def _insert_invoice(self, values: dict[str, Any]) -> MutationResult[InvoiceRead]:
        """Insert with a number allocated at insert time.

        A generated number that loses a race is regenerated (bounded retries); a
        caller-supplied number that collides is rejected. Violations of any other
        constraint propagate unchanged.
        """

        explicit = values.get("invoice_number")
        attempts = 1 if explicit else max(1, int(self.settings.invoice_number_max_retries))

        for _ in range(attempts):
            if not explicit:
                values["invoice_number"] = self.next_invoice_number()
            try:
                return self.invoices.create(values)
            except IntegrityError:
                # The store already rolled back.
                number = values["invoice_number"]
                if not self._invoice_number_taken(number):
                    raise
                if explicit:
                    raise InvoiceNumberConflictError(number)
                logger.info("invoice_number_retry", extra={"invoice_number": number})

        raise InvoiceNumberConflictError(
            values.get("invoice_number"), reason="invoice_number_allocation_exhausted"
        )

    def create_invoice(self, data: Mapping[str, Any]) -> MutationResult[InvoiceRead]:
        values = dict(data)
        backfill_creator_fields(values, self.profile.get_or_create())
        apply_totals(values)

        status = _status_value(values.get("status")) or models.InvoiceStatus.draft.value
        values["status"] = status
        if status == models.InvoiceStatus.sent.value and not values.get("sent_date"):
            values["sent_date"] = date.today()
        if status == models.InvoiceStatus.paid.value and not values.get("paid_date"):
            values["paid_date"] = date.today()

        result = self._insert_invoice(values)
        self._publish("invoices", result.snapshot)
        self._notified(self.emitter.invoice_created(result.record))
        self._mirror_invoice_paid(None, result.record)
        return result

    def update_invoice(
        self, invoice_id: str, changes: Mapping[str, Any]
    ) -> MutationResult[InvoiceRead]:
        with self._busy(invoice_id, "update"):
            previous = self.invoices.get(invoice_id)
            values = apply_totals(dict(changes), current=previous.model_dump())

            status = _status_value(values.get("status"))
            if status and status != _status_value(previous.status):
                if status == models.InvoiceStatus.sent.value and not values.get("sent_date"):
                    values["sent_date"] = date.today()
                if status == models.InvoiceStatus.paid.value and not values.get("paid_date"):
                    values["paid_date"] = date.today()

            number = values.get("invoice_number")
            try:
                result = self.invoices.update(invoice_id, values)
            except IntegrityError:
                if number and number != previous.invoice_number and self._invoice_number_taken(
                    number
                ):
                    raise InvoiceNumberConflictError(number)
                raise

            self._publish("invoices", result.snapshot)
            self._notified(self.emitter.invoice_updated(previous, result.record))
            self._mirror_invoice_paid(previous, result.record)
            return result

    def delete_invoice(self, invoice_id: str) -> MutationResult[InvoiceRead]:
        with self._busy(invoice_id, "delete"):
            result = self.invoices.delete(invoice_id)
            self._publish("invoices", result.snapshot)
            self._notified(self.emitter.invoice_deleted(result.record))
            return result

    def _mirror_invoice_paid(self, previous: InvoiceRead | None, invoice: InvoiceRead) -> None:
        if not became_paid(previous, invoice, models.InvoiceStatus.paid.value):
            return
        if self.sync.mirror_invoice_paid(invoice) is not None:
            self._publish("projects", self.projects.fetch())

    # Brand deals

    def _materialize(self, previous: BrandDealRead | None, deal: BrandDealRead) -> None:
        if not should_materialize(previous, deal):
            return
        outcome = self.sync.materialize_invoice(deal)
        if outcome is not None and not outcome.created:
            self._publish("invoices", self.invoices.fetch())

    def create_brand_deal(self, data: Mapping[str, Any]) -> MutationResult[BrandDealRead]:
        result = self.brand_deals.create(data)
        self._publish("brand_deals", result.snapshot)
        self._notified(self.emitter.brand_deal_created(result.record))
        self._materialize(None, result.record)
        return result

    def update_brand_deal(
        self, deal_id: str, changes: Mapping[str, Any]
    ) -> MutationResult[BrandDealRead]:
        with self._busy(deal_id, "update"):
            previous = self.brand_deals.get(deal_id)
            result = self.brand_deals.update(deal_id, changes)
            self._publish("brand_deals", result.snapshot)
            self._notified(self.emitter.brand_deal_updated(previous, result.record))
            self._materialize(previous, result.record)
            return result

    def delete_brand_deal(self, deal_id: str) -> MutationResult[BrandDealRead]:
        # Materialized invoices stay; source_brand_deal_id is a weak link.
        with self._busy(deal_id, "delete"):
            result = self.brand_deals.delete(deal_id)
            self._publish("brand_deals", result.snapshot)
            return result

    # Content posts

    def create_content_post(self, data: Mapping[str, Any]) -> MutationResult[ContentPostRead]:
        result = self.content_posts.create(data)
        self._publish("content_posts", result.snapshot)
        self._notified(self.emitter.content_post_created(result.record))
        return result

    def create_content_posts(
        self, data: Mapping[str, Any], platforms: list[Any]
    ) -> list[ContentPostRead]:
        """One post per platform; duplicates in `platforms` are collapsed."""

        created: list[ContentPostRead] = []
        seen: set[str] = set()
        for platform in platforms:
            value = _status_value(platform)
            if value in seen:
                continue
            seen.add(value)
            result = self.create_content_post({**data, "platform": value})
            created.append(result.record)
        return created

    def update_content_post(
        self, post_id: str, changes: Mapping[str, Any]
    ) -> MutationResult[ContentPostRead]:
        with self._busy(post_id, "update"):
            previous = self.content_posts.get(post_id)
            result = self.content_posts.update(post_id, changes)
            self._publish("content_posts", result.snapshot)
            self._notified(self.emitter.content_post_updated(previous, result.record))
            return result

    def delete_content_post(self, post_id: str) -> MutationResult[ContentPostRead]:
        with self._busy(post_id, "delete"):
            result = self.content_posts.delete(post_id)
            self._publish("content_posts", result.snapshot)
            return result

    # Tasks

    def create_task(self, data: Mapping[str, Any]) -> MutationResult[TaskRead]:
        result = self.tasks.create(data)
        self._publish("tasks", result.snapshot)
        return result

    def update_task(self, task_id: str, changes: Mapping[str, Any]) -> MutationResult[TaskRead]:
        with self._busy(task_id, "update"):
            result = self.tasks.update(task_id, changes)
            self._publish("tasks", result.snapshot)
            return result

    def delete_task(self, task_id: str) -> MutationResult[TaskRead]:
        with self._busy(task_id, "delete"):
            result = self.tasks.delete(task_id)
            self._publish("tasks", result.snapshot)
            return result

    # Notification inbox

    def mark_notification_read(self, notification_id: str) -> MutationResult[NotificationRead]:
        result = self.notifications.update(notification_id, {"read": True})
        self._publish("notifications", result.snapshot)
        return result

    def mark_all_notifications_read(self) -> list[NotificationRead]:
        _, snapshot = self.notifications.update_where({"read": True}, read=False)
        self._publish("notifications", snapshot)
        return snapshot

    def delete_notification(self, notification_id: str) -> MutationResult[NotificationRead]:
        result = self.notifications.delete(notification_id)
        self._publish("notifications", result.snapshot)
        return result

    def clear_notifications(self) -> list[NotificationRead]:
        result = self.notifications.delete_all()
        self._publish("notifications", result.snapshot)
        return result.snapshot

    def unread_notification_count(self) -> int:
        # Counted remotely so notifications beyond the history cap are included.
        return self.notifications.count(read=False)

    # Profile & settings

    def get_profile(self) -> UserProfileRead:
        return self.profile.get_or_create()

    def update_profile(self, changes: Mapping[str, Any]) -> UserProfileRead:
        previous = self.profile.get_or_create()
        current = self.profile.update(changes)
        self._publish("profile", current)
        if self.sync.fan_out_profile(previous, current):
            self._publish("invoices", self.invoices.fetch())
        return current

    def get_settings(self) -> UserSettingsRead:
        return self.user_settings.get_or_create()

    def update_settings(self, changes: Mapping[str, Any]) -> UserSettingsRead:
        current = self.user_settings.update(changes)
        self._publish("settings", current)
        return current

    def get_invoice(self, invoice_id: str) -> InvoiceRead:
        return self.invoices.get(invoice_id)

    def materialized_invoice(self, deal_id: str) -> Optional[InvoiceRead]:
        return self.sync.materialized_invoice_for(deal_id)
