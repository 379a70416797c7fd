from fastapi.testclient import TestClient

from creator_crm.api import deps
from creator_crm.core.security import create_access_token_for_subject
from creator_crm.main import app

client = TestClient(app)


def _auth(user_id: str = "creator-1") -> dict:
    return {"Authorization": f"Bearer {create_access_token_for_subject(user_id)}"}


def test_healthcheck_and_request_id_header():
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert "uptime_seconds" in body
    assert "X-Request-ID" in r.headers


def test_request_id_is_propagated():
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"


def test_data_routes_require_identity():
    assert client.get("/api/projects").status_code == 401
    assert client.get("/api/projects", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_identity_override_for_routes():
    app.dependency_overrides[deps.get_current_identity] = lambda: "creator-override"
    r = client.post("/api/tasks", json={"text": "Film intro"})
    assert r.status_code == 201
    assert r.json()["user_id"] == "creator-override"


def test_project_crud_and_isolation():
    created = client.post(
        "/api/projects",
        json={"project_name": "Spring launch", "brand_name": "Acme", "amount": 1200},
        headers=_auth(),
    )
    assert created.status_code == 201
    project_id = created.json()["id"]
    assert created.json()["status"] == "idea"

    r = client.patch(
        f"/api/projects/{project_id}", json={"status": "in-progress"}, headers=_auth()
    )
    assert r.status_code == 200
    assert r.json()["status"] == "in-progress"
    assert r.json()["amount"] == 1200

    assert client.get(f"/api/projects/{project_id}", headers=_auth("creator-2")).status_code == 404
    assert client.get("/api/projects", headers=_auth("creator-2")).json() == []

    assert client.delete(f"/api/projects/{project_id}", headers=_auth()).status_code == 204
    assert client.get(f"/api/projects/{project_id}", headers=_auth()).status_code == 404


def test_invalid_status_is_rejected():
    r = client.post(
        "/api/projects", json={"project_name": "X", "status": "archived"}, headers=_auth()
    )
    assert r.status_code == 422


def test_invoice_numbering_over_http():
    assert client.get("/api/invoices/next-number", headers=_auth()).json() == {
        "invoice_number": "INV-001"
    }

    r = client.post(
        "/api/invoices",
        json={"client_name": "Acme", "line_items": [{"service": "Reel", "quantity": 2, "rate": 300}]},
        headers=_auth(),
    )
    assert r.status_code == 201
    body = r.json()
    assert body["invoice_number"] == "INV-001"
    assert body["amount"] == 600
    assert body["line_items"][0]["amount"] == 600

    assert client.get("/api/invoices/next-number", headers=_auth()).json()["invoice_number"] == "INV-002"
    # Numbering is per identity.
    assert (
        client.get("/api/invoices/next-number", headers=_auth("creator-2")).json()["invoice_number"]
        == "INV-001"
    )


def test_duplicate_explicit_invoice_number_is_409():
    payload = {"invoice_number": "INV-010", "client_name": "Acme"}
    assert client.post("/api/invoices", json=payload, headers=_auth()).status_code == 201

    r = client.post("/api/invoices", json=payload, headers=_auth())
    assert r.status_code == 409
    assert r.json()["code"] == "INVOICE_NUMBER_TAKEN"
    assert "request_id" in r.json()


def test_completed_brand_deal_materializes_invoice_over_http():
    deal = client.post(
        "/api/brand-deals",
        json={"brand_name": "Acme", "fee": 500, "deliverables": "1 reel"},
        headers=_auth(),
    ).json()
    assert client.get(f"/api/brand-deals/{deal['id']}/invoice", headers=_auth()).json() is None

    r = client.patch(f"/api/brand-deals/{deal['id']}", json={"status": "completed"}, headers=_auth())
    assert r.status_code == 200

    invoice = client.get(f"/api/brand-deals/{deal['id']}/invoice", headers=_auth()).json()
    assert invoice["status"] == "draft"
    assert invoice["amount"] == 500
    assert invoice["client_name"] == "Acme"

    invoices = client.get("/api/invoices", headers=_auth()).json()
    assert len(invoices) == 1


def test_notification_inbox_routes():
    client.post("/api/invoices", json={"client_name": "Acme"}, headers=_auth())
    client.post("/api/invoices", json={"client_name": "Globex"}, headers=_auth())

    assert client.get("/api/notifications/unread-count", headers=_auth()).json() == {"unread": 2}

    notes = client.get("/api/notifications", headers=_auth()).json()
    r = client.post(f"/api/notifications/{notes[0]['id']}/read", headers=_auth())
    assert r.status_code == 200
    assert r.json()["read"] is True

    read_all = client.post("/api/notifications/read-all", headers=_auth()).json()
    assert all(n["read"] for n in read_all)

    assert client.delete(f"/api/notifications/{notes[0]['id']}", headers=_auth()).status_code == 204
    assert client.post("/api/notifications/clear", headers=_auth()).json() == []
    assert client.post("/api/notifications/missing/read", headers=_auth()).status_code == 404


def test_profile_and_settings_routes():
    profile = client.get("/api/profile", headers=_auth()).json()
    assert profile["currency"] == "USD"

    invoice = client.post("/api/invoices", json={"client_name": "Acme"}, headers=_auth()).json()

    r = client.patch("/api/profile", json={"business_name": "Studio North"}, headers=_auth())
    assert r.status_code == 200
    assert r.json()["business_name"] == "Studio North"

    refreshed = client.get(f"/api/invoices/{invoice['id']}", headers=_auth()).json()
    assert refreshed["creator_business_name"] == "Studio North"

    r = client.patch("/api/settings", json={"notifications_enabled": False}, headers=_auth())
    assert r.json()["notifications_enabled"] is False


def test_content_post_batch_route():
    r = client.post(
        "/api/content-posts/batch",
        json={"title": "Launch teaser", "platforms": ["instagram", "tiktok"]},
        headers=_auth(),
    )
    assert r.status_code == 201
    assert sorted(p["platform"] for p in r.json()) == ["instagram", "tiktok"]

    r = client.post(
        "/api/content-posts/batch", json={"title": "Nothing", "platforms": []}, headers=_auth()
    )
    assert r.status_code == 422


def test_task_list_is_capped():
    for i in range(7):
        client.post("/api/tasks", json={"text": f"task {i}"}, headers=_auth())
    assert len(client.get("/api/tasks", headers=_auth()).json()) == 5


def test_session_snapshot():
    client.post("/api/projects", json={"project_name": "Launch"}, headers=_auth())
    r = client.get("/api/session/snapshot", headers=_auth())
    assert r.status_code == 200
    body = r.json()
    assert [p["project_name"] for p in body["projects"]] == ["Launch"]
    assert body["settings"]["notifications_enabled"] is True
    assert body["profile"]["user_id"] == "creator-1"


def test_null_for_required_columns_on_patch_is_422():
    invoice = client.post("/api/invoices", json={"client_name": "Acme"}, headers=_auth()).json()
    deal = client.post(
        "/api/brand-deals", json={"brand_name": "Acme", "fee": 500}, headers=_auth()
    ).json()
    project = client.post("/api/projects", json={"project_name": "Launch"}, headers=_auth()).json()

    cases = [
        (f"/api/invoices/{invoice['id']}", {"status": None}),
        (f"/api/invoices/{invoice['id']}", {"invoice_number": None}),
        (f"/api/brand-deals/{deal['id']}", {"fee": None}),
        (f"/api/brand-deals/{deal['id']}", {"status": None}),
        (f"/api/brand-deals/{deal['id']}", {"brand_name": None}),
        (f"/api/projects/{project['id']}", {"status": None}),
        ("/api/profile", {"currency": None}),
        ("/api/settings", {"notifications_enabled": None}),
    ]
    for url, payload in cases:
        r = client.patch(url, json=payload, headers=_auth())
        assert r.status_code == 422, (url, payload, r.status_code)

    assert client.get(f"/api/invoices/{invoice['id']}", headers=_auth()).json()["status"] == "draft"
    assert client.get("/api/profile", headers=_auth()).json()["currency"] == "USD"

    # Nullable columns can still be cleared.
    r = client.patch(f"/api/brand-deals/{deal['id']}", json={"contact_name": None}, headers=_auth())
    assert r.status_code == 200


def test_invoice_project_link_mirrors_paid_status():
    project = client.post("/api/projects", json={"project_name": "Launch"}, headers=_auth()).json()
    invoice = client.post(
        "/api/invoices",
        json={"client_name": "Acme", "project_id": project["id"]},
        headers=_auth(),
    ).json()
    assert invoice["project_id"] == project["id"]

    r = client.patch(f"/api/invoices/{invoice['id']}", json={"status": "paid"}, headers=_auth())
    assert r.status_code == 200
    assert client.get(f"/api/projects/{project['id']}", headers=_auth()).json()["status"] == "paid"
