from datetime import date, timedelta

from creator_crm.config import settings
from creator_crm.schemas.users import UserProfileRead
from creator_crm.services.cross_entity_sync import (
    backfill_creator_fields,
    profile_fan_out_changes,
)


def _acme_deal(scope, **overrides):
    data = {
        "brand_name": "Acme",
        "contact_name": "Jane Doe",
        "contact_email": "jane@acme.test",
        "deliverables": "1 reel + 3 stories",
        "fee": 500,
        "status": "negotiation",
    }
    data.update(overrides)
    return scope.create_brand_deal(data).record


def test_completed_deal_materializes_one_draft_invoice(make_scope):
    scope = make_scope()
    deal = _acme_deal(scope)
    assert scope.invoices.fetch() == []

    scope.update_brand_deal(deal.id, {"status": "completed"})

    invoices = scope.invoices.fetch()
    assert len(invoices) == 1
    invoice = invoices[0]
    assert invoice.status == "draft"
    assert invoice.amount == 500
    assert invoice.client_name == "Acme"
    assert invoice.client_contact == "Jane Doe"
    assert invoice.client_email == "jane@acme.test"
    assert invoice.source_brand_deal_id == deal.id
    assert invoice.invoice_number == "INV-001"
    assert len(invoice.line_items) == 1
    assert invoice.line_items[0].description == "1 reel + 3 stories"
    assert invoice.due_date == date.today() + timedelta(days=30)


def test_contact_phone_is_carried_onto_the_invoice(make_scope):
    scope = make_scope()
    deal = _acme_deal(scope, contact_phone="555-0142")
    scope.update_brand_deal(deal.id, {"status": "completed"})

    assert scope.materialized_invoice(deal.id).client_contact == "Jane Doe, 555-0142"


def test_deals_with_same_brand_and_fee_each_get_an_invoice(make_scope):
    scope = make_scope()
    first = _acme_deal(scope)
    second = _acme_deal(scope)

    scope.update_brand_deal(first.id, {"status": "completed"})
    scope.update_brand_deal(second.id, {"status": "completed"})

    invoices = scope.invoices.fetch()
    assert len(invoices) == 2
    assert {i.source_brand_deal_id for i in invoices} == {first.id, second.id}
    assert {i.invoice_number for i in invoices} == {"INV-001", "INV-002"}


def test_unrelated_invoice_with_matching_values_does_not_block(make_scope):
    scope = make_scope()
    manual = scope.create_invoice({"client_name": "Acme", "amount": 500}).record
    assert manual.amount == 500

    deal = _acme_deal(scope)
    scope.update_brand_deal(deal.id, {"status": "completed"})

    materialized = scope.materialized_invoice(deal.id)
    assert materialized is not None
    assert materialized.id != manual.id
    assert len(scope.invoices.fetch()) == 2
    assert scope.invoices.get(manual.id).source_brand_deal_id is None


def test_repeated_billable_transitions_do_not_duplicate(make_scope):
    scope = make_scope()
    deal = _acme_deal(scope)

    scope.update_brand_deal(deal.id, {"status": "posted"})
    scope.update_brand_deal(deal.id, {"status": "completed"})
    scope.update_brand_deal(deal.id, {"status": "completed", "fee": 600})

    assert len(scope.invoices.fetch()) == 1


def test_due_date_follows_deal_end_date(make_scope):
    scope = make_scope()
    end = date(2026, 12, 31)
    deal = _acme_deal(scope, end_date=end)
    scope.update_brand_deal(deal.id, {"status": "posted"})
    assert scope.invoices.fetch()[0].due_date == end


def test_zero_fee_or_non_billable_status_does_not_materialize(make_scope):
    scope = make_scope()
    free = _acme_deal(scope, fee=0)
    scope.update_brand_deal(free.id, {"status": "completed"})

    paid = _acme_deal(scope, brand_name="Globex")
    scope.update_brand_deal(paid.id, {"status": "confirmed"})

    assert scope.invoices.fetch() == []


def test_deal_created_already_completed_materializes(make_scope):
    scope = make_scope()
    deal = _acme_deal(scope, status="completed")
    invoices = scope.invoices.fetch()
    assert [i.source_brand_deal_id for i in invoices] == [deal.id]


def test_materialization_failure_keeps_deal_update(make_scope, monkeypatch):
    scope = make_scope()
    deal = _acme_deal(scope)

    def boom(_values):
        raise RuntimeError("invoice backend down")

    monkeypatch.setattr(scope.sync, "create_invoice", boom)

    updated = scope.update_brand_deal(deal.id, {"status": "completed"}).record
    assert updated.status == "completed"
    assert scope.invoices.fetch() == []


def test_profile_edit_fans_out_to_every_invoice(make_scope):
    scope = make_scope()
    draft = scope.create_invoice({"client_name": "Acme"}).record
    sent = scope.create_invoice({"client_name": "Globex", "status": "sent"}).record

    scope.update_profile({"business_name": "Studio North", "website": "https://north.test"})

    for invoice_id in (draft.id, sent.id):
        invoice = scope.invoices.get(invoice_id)
        assert invoice.creator_business_name == "Studio North"
        assert invoice.creator_website == "https://north.test"


def test_fan_out_only_touches_changed_fields(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme", "creator_phone": "555-0100"}).record

    scope.update_profile({"business_name": "Studio North"})

    refreshed = scope.invoices.get(invoice.id)
    assert refreshed.creator_phone == "555-0100"
    assert refreshed.creator_business_name == "Studio North"


def test_fan_out_unsent_scope_skips_sent_invoices(make_scope):
    scope = make_scope(app_settings=settings.model_copy(update={"profile_sync_scope": "unsent"}))
    draft = scope.create_invoice({"client_name": "Acme"}).record
    sent = scope.create_invoice({"client_name": "Globex", "status": "sent"}).record

    scope.update_profile({"phone": "555-0199"})

    assert scope.invoices.get(draft.id).creator_phone == "555-0199"
    assert scope.invoices.get(sent.id).creator_phone is None


def test_backfill_fills_only_absent_creator_fields(make_scope):
    scope = make_scope()
    scope.update_profile(
        {"full_name": "Sam Creator", "email": "sam@creator.test", "business_name": "Sam Studio"}
    )

    invoice = scope.create_invoice(
        {"client_name": "Acme", "creator_business_name": "Custom Name"}
    ).record

    assert invoice.creator_business_name == "Custom Name"
    assert invoice.creator_name == "Sam Creator"
    assert invoice.creator_email == "sam@creator.test"
    assert invoice.currency == "USD"


def _profile(**fields):
    base = {
        "id": "p1",
        "user_id": "creator-1",
        "currency": "USD",
        "created_at": "2026-01-01T00:00:00",
        "updated_at": "2026-01-01T00:00:00",
    }
    base.update(fields)
    return UserProfileRead.model_validate(base)


def test_backfill_treats_blank_strings_as_absent():
    values = backfill_creator_fields({"creator_name": "  "}, _profile(full_name="Sam"))
    assert values["creator_name"] == "Sam"


def test_fan_out_changes_map_profile_to_invoice_fields():
    before = _profile(business_name="Old", phone="1")
    after = _profile(business_name="New", phone="1", business_address="1 Main St")
    assert profile_fan_out_changes(before, after) == {
        "creator_business_name": "New",
        "creator_address": "1 Main St",
    }


def test_project_paid_marks_linked_invoices_paid(make_scope):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch", "brand_name": "Acme"}).record
    linked = scope.create_invoice({"client_name": "Acme", "project_id": project.id}).record
    same_brand = scope.create_invoice({"client_name": "Acme"}).record

    scope.update_project(project.id, {"status": "paid"})

    refreshed = scope.invoices.get(linked.id)
    assert refreshed.status == "paid"
    assert refreshed.paid_date == date.today()
    assert scope.invoices.get(same_brand.id).status == "draft"
    assert [i.status for i in scope.replica["invoices"] if i.id == linked.id] == ["paid"]


def test_project_paid_keeps_existing_paid_date(make_scope):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch"}).record
    earlier = date(2026, 1, 15)
    invoice = scope.create_invoice(
        {"client_name": "Acme", "project_id": project.id, "status": "sent", "paid_date": earlier}
    ).record

    scope.update_project(project.id, {"status": "paid"})

    refreshed = scope.invoices.get(invoice.id)
    assert refreshed.status == "paid"
    assert refreshed.paid_date == earlier


def test_invoice_paid_marks_linked_project_paid(make_scope):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch", "status": "submitted"}).record
    other = scope.create_project({"project_name": "Other", "brand_name": "Acme"}).record
    invoice = scope.create_invoice({"client_name": "Acme", "project_id": project.id}).record

    scope.update_invoice(invoice.id, {"status": "paid"})

    assert scope.projects.get(project.id).status == "paid"
    assert scope.projects.get(other.id).status == "idea"
    assert [p.status for p in scope.replica["projects"] if p.id == project.id] == ["paid"]


def test_invoice_created_paid_marks_linked_project_paid(make_scope):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch"}).record
    scope.create_invoice({"client_name": "Acme", "project_id": project.id, "status": "paid"})
    assert scope.projects.get(project.id).status == "paid"


def test_paid_mirror_ignores_missing_project(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme", "project_id": "gone"}).record
    updated = scope.update_invoice(invoice.id, {"status": "paid"}).record
    assert updated.status == "paid"
    assert scope.projects.fetch() == []


def test_paid_mirror_failure_keeps_primary_update(make_scope, monkeypatch):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch"}).record
    invoice = scope.create_invoice({"client_name": "Acme", "project_id": project.id}).record

    def boom(*_args, **_kwargs):
        raise RuntimeError("projects backend down")

    monkeypatch.setattr(scope.projects, "update", boom)

    updated = scope.update_invoice(invoice.id, {"status": "paid"}).record
    assert updated.status == "paid"
    assert scope.projects.get(project.id).status == "idea"
