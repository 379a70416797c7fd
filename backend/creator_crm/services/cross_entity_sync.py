from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.exc import IntegrityError

from creator_crm import models
from creator_crm.schemas.brand_deals import BrandDealRead
from creator_crm.schemas.invoices import InvoiceRead
from creator_crm.schemas.projects import ProjectRead
from creator_crm.schemas.users import UserProfileRead
from creator_crm.services.remote_store import CollectionStore

logger = logging.getLogger("creator_crm.sync")

# Profile edits rewritten into existing invoices (profile field -> invoice field).
PROFILE_FAN_OUT_FIELDS: dict[str, str] = {
    "business_name": "creator_business_name",
    "phone": "creator_phone",
    "business_address": "creator_address",
    "website": "creator_website",
    "currency": "currency",
}

# Creator fields filled from the profile when a new invoice leaves them unset
# (invoice field -> profile field).
INVOICE_BACKFILL_FIELDS: dict[str, str] = {
    "creator_name": "full_name",
    "creator_email": "email",
    "creator_phone": "phone",
    "creator_address": "business_address",
    "creator_business_name": "business_name",
    "creator_tax_id": "tax_id",
    "creator_website": "website",
    "creator_instagram": "instagram",
    "creator_youtube": "youtube",
    "currency": "currency",
}

MATERIALIZED_SERVICE_LABEL = "Brand Partnership"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _status_value(value: Any) -> str | None:
    if value is None:
        return None
    return value.value if hasattr(value, "value") else str(value)


def backfill_creator_fields(
    values: dict[str, Any], profile: UserProfileRead | None
) -> dict[str, Any]:
    """Fill-if-absent: never overwrites a creator field the caller supplied."""

    if profile is None:
        return values
    for invoice_field, profile_field in INVOICE_BACKFILL_FIELDS.items():
        if not _is_blank(values.get(invoice_field)):
            continue
        profile_value = getattr(profile, profile_field, None)
        if not _is_blank(profile_value):
            values[invoice_field] = profile_value
    return values


def profile_fan_out_changes(
    previous: UserProfileRead | None, current: UserProfileRead
) -> dict[str, Any]:
    """Invoice field -> new value for every fan-out field the edit changed."""

    changes: dict[str, Any] = {}
    for profile_field, invoice_field in PROFILE_FAN_OUT_FIELDS.items():
        before = getattr(previous, profile_field, None) if previous is not None else None
        after = getattr(current, profile_field, None)
        if before != after:
            changes[invoice_field] = after
    return changes


def _contact_line(name: str | None, phone: str | None) -> str | None:
    parts = [p.strip() for p in (name, phone) if not _is_blank(p)]
    return ", ".join(parts) or None


def became_paid(previous: Any, current: Any, paid_value: str) -> bool:
    status = _status_value(current.status)
    if status != paid_value:
        return False
    return previous is None or _status_value(previous.status) != status


def should_materialize(previous: BrandDealRead | None, current: BrandDealRead) -> bool:
    status = _status_value(current.status)
    if status not in {s.value for s in models.BILLABLE_BRAND_DEAL_STATUSES}:
        return False
    if not current.fee or float(current.fee) <= 0:
        return False
    if previous is not None and _status_value(previous.status) == status:
        return False
    return True


@dataclass(frozen=True)
class MaterializationResult:
    invoice: InvoiceRead
    created: bool


class CrossEntitySync:
    """Derived-state rules between records of one identity.

    - brand deal -> invoice materialization (at most one invoice per deal,
      linked through `source_brand_deal_id`)
    - profile -> invoice fan-out (always-overwrite)
    - project <-> invoice paid mirroring through `Invoice.project_id`
    """

    def __init__(
        self,
        invoices: CollectionStore[models.Invoice, InvoiceRead],
        *,
        create_invoice: Callable[[dict[str, Any]], InvoiceRead],
        default_due_days: int = 30,
        profile_sync_scope: str = "all",
        projects: Optional[CollectionStore[models.Project, ProjectRead]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.invoices = invoices
        self.projects = projects
        self.create_invoice = create_invoice
        self.default_due_days = default_due_days
        self.profile_sync_scope = profile_sync_scope
        self.today = today

    def materialized_invoice_for(self, deal_id: str) -> Optional[InvoiceRead]:
        found = self.invoices.find(source_brand_deal_id=str(deal_id))
        return found[0] if found else None

    def invoice_values_for_deal(self, deal: BrandDealRead) -> dict[str, Any]:
        issue_date = self.today()
        due_date = deal.end_date or (issue_date + timedelta(days=self.default_due_days))
        fee = float(deal.fee)
        return {
            "client_name": deal.brand_name,
            "client_company": deal.brand_name,
            "client_contact": _contact_line(deal.contact_name, deal.contact_phone),
            "client_email": deal.contact_email,
            "issue_date": issue_date,
            "due_date": due_date,
            "status": models.InvoiceStatus.draft.value,
            "amount": fee,
            "line_items": [
                {
                    "service": MATERIALIZED_SERVICE_LABEL,
                    "description": deal.deliverables or f"{deal.brand_name} partnership",
                    "quantity": 1,
                    "rate": fee,
                }
            ],
            "source_brand_deal_id": deal.id,
        }

    def materialize_invoice(self, deal: BrandDealRead) -> Optional[MaterializationResult]:
        """Ensure exactly one draft invoice exists for a billable deal.

        Best-effort: failures are logged and reported as None so the brand
        deal update that triggered this stays successful.
        """

        try:
            existing = self.materialized_invoice_for(deal.id)
            if existing is not None:
                logger.info(
                    "invoice_already_materialized",
                    extra={"brand_deal_id": deal.id, "invoice_id": existing.id},
                )
                return MaterializationResult(invoice=existing, created=False)

            try:
                invoice = self.create_invoice(self.invoice_values_for_deal(deal))
            except IntegrityError:
                # A concurrent materialization won the (user_id, source_brand_deal_id) race.
                existing = self.materialized_invoice_for(deal.id)
                if existing is None:
                    raise
                return MaterializationResult(invoice=existing, created=False)

            logger.info(
                "invoice_materialized",
                extra={
                    "brand_deal_id": deal.id,
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.invoice_number,
                },
            )
            return MaterializationResult(invoice=invoice, created=True)
        except Exception as exc:
            logger.warning(
                "invoice_materialization_failed",
                extra={"brand_deal_id": deal.id, "error": str(exc)},
            )
            return None

    def fan_out_profile(
        self, previous: UserProfileRead | None, current: UserProfileRead
    ) -> Optional[int]:
        """Overwrite creator fields on existing invoices with the new profile values.

        Returns the number of invoices rewritten, or None when the fan-out failed.
        """

        changes = profile_fan_out_changes(previous, current)
        if not changes:
            return 0

        filters: Mapping[str, Any] = {}
        if self.profile_sync_scope == "unsent":
            filters = {"status": models.InvoiceStatus.draft.value}

        try:
            count, _ = self.invoices.update_where(changes, **filters)
        except Exception as exc:
            logger.warning(
                "profile_fan_out_failed",
                extra={"fields": sorted(changes), "error": str(exc)},
            )
            return None

        logger.info("profile_fan_out", extra={"fields": sorted(changes), "invoices": count})
        return count

    def mirror_project_paid(self, project: ProjectRead) -> Optional[int]:
        """Mark every unpaid invoice linked to a paid project as paid.

        Returns the number of invoices marked, or None when the mirror failed.
        """

        paid = models.InvoiceStatus.paid.value
        try:
            linked = self.invoices.find(project_id=str(project.id))
            unpaid = [i for i in linked if _status_value(i.status) != paid]
            for invoice in unpaid:
                self.invoices.update(
                    invoice.id, {"status": paid, "paid_date": invoice.paid_date or self.today()}
                )
        except Exception as exc:
            logger.warning(
                "project_paid_mirror_failed",
                extra={"project_id": project.id, "error": str(exc)},
            )
            return None

        if unpaid:
            logger.info(
                "project_paid_mirrored",
                extra={"project_id": project.id, "invoices": [i.id for i in unpaid]},
            )
        return len(unpaid)

    def mirror_invoice_paid(self, invoice: InvoiceRead) -> Optional[ProjectRead]:
        """Mark the invoice's linked project as paid.

        Returns the project when it was changed; None when there is nothing to
        change or the mirror failed.
        """

        if not invoice.project_id or self.projects is None:
            return None

        paid = models.ProjectStatus.paid.value
        try:
            found = self.projects.find(id=str(invoice.project_id))
            if not found or _status_value(found[0].status) == paid:
                return None
            project = self.projects.update(found[0].id, {"status": paid}).record
        except Exception as exc:
            logger.warning(
                "invoice_paid_mirror_failed",
                extra={
                    "invoice_id": invoice.id,
                    "project_id": invoice.project_id,
                    "error": str(exc),
                },
            )
            return None

        logger.info(
            "invoice_paid_mirrored", extra={"invoice_id": invoice.id, "project_id": project.id}
        )
        return project
