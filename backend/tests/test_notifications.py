from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from creator_crm.services.notification_emitter import (
    brand_deal_status_draft,
    content_post_created_draft,
    invoice_status_draft,
)


def _types(scope):
    return [n.type for n in scope.notifications.fetch()]


def test_invoice_created_notification(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme", "amount": 100}).record

    notes = scope.notifications.fetch()
    assert len(notes) == 1
    assert notes[0].type == "invoice_created"
    assert notes[0].message == f"Invoice {invoice.invoice_number} for Acme has been created."
    assert notes[0].read is False
    assert notes[0].related_id == invoice.id
    assert notes[0].related_type == "invoice"


def test_same_status_update_emits_nothing(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme"}).record

    scope.update_invoice(invoice.id, {"status": "draft", "notes": "edited"})
    assert _types(scope) == ["invoice_created"]


def test_status_transitions_emit_typed_notifications(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme"}).record

    sent = scope.update_invoice(invoice.id, {"status": "sent"}).record
    assert sent.sent_date is not None
    paid = scope.update_invoice(invoice.id, {"status": "paid"}).record
    assert paid.paid_date is not None

    notes = scope.notifications.fetch()
    assert {n.type for n in notes} == {"invoice_created", "invoice_sent", "invoice_paid"}
    paid_note = next(n for n in notes if n.type == "invoice_paid")
    assert paid_note.message == f"Invoice {invoice.invoice_number} has been paid by Acme."


def test_invoice_deleted_notification(make_scope):
    scope = make_scope()
    invoice = scope.create_invoice({"client_name": "Acme"}).record
    scope.delete_invoice(invoice.id)
    assert "invoice_deleted" in _types(scope)


def test_disabled_notifications_suppress_but_mutation_succeeds(make_scope):
    scope = make_scope()
    scope.update_settings({"notifications_enabled": False})

    result = scope.create_brand_deal({"brand_name": "Acme", "fee": 100})
    assert result.record.id
    scope.update_brand_deal(result.record.id, {"status": "confirmed"})

    assert scope.notifications.fetch() == []
    assert len(scope.brand_deals.fetch()) == 1


def test_notification_failure_never_fails_the_mutation(make_scope, monkeypatch):
    scope = make_scope()

    def boom(_data):
        raise SQLAlchemyError("notifications table unavailable")

    monkeypatch.setattr(scope.notifications, "create", boom)

    result = scope.create_project({"project_name": "Launch"})
    project = scope.update_project(result.record.id, {"status": "in-progress"}).record
    assert project.status == "in-progress"

    deal = scope.create_brand_deal({"brand_name": "Acme"}).record
    assert deal.brand_name == "Acme"
    assert len(scope.brand_deals.fetch()) == 1


def test_project_status_change(make_scope):
    scope = make_scope()
    project = scope.create_project({"project_name": "Launch"}).record
    scope.update_project(project.id, {"amount": 10})
    assert _types(scope) == []

    scope.update_project(project.id, {"status": "submitted"})
    notes = scope.notifications.fetch()
    assert notes[0].type == "project_updated"
    assert notes[0].message == "Launch status changed to submitted."


def test_content_post_notifications(make_scope):
    scope = make_scope()
    post = scope.create_content_post({"title": "Unboxing", "platform": "youtube"}).record
    assert _types(scope) == ["content_updated"]

    scope.update_content_post(post.id, {"status": "published"})
    assert "content_published" in _types(scope)


def test_brand_deal_phrasing():
    class Deal:
        id = "d1"
        brand_name = "Acme"

    deal = Deal()
    deal.status = "cancelled"
    assert brand_deal_status_draft(deal).message == "Brand deal with Acme has been cancelled."
    deal.status = "in_review"
    assert brand_deal_status_draft(deal).message == "Brand deal with Acme is now in review."


def test_draft_status_has_no_notification():
    class Invoice:
        id = "i1"
        invoice_number = "INV-001"
        client_name = "Acme"
        client_company = None
        status = "draft"

    assert invoice_status_draft(Invoice()) is None


def test_scheduled_post_phrasing():
    class Post:
        id = "p1"
        title = "Launch teaser"
        platform = "tiktok"
        scheduled_date = datetime(2026, 3, 5, 9, 0)

    draft = content_post_created_draft(Post())
    assert draft.type.value == "content_scheduled"
    assert draft.message == '"Launch teaser" has been scheduled for TikTok on Mar 05, 2026.'
