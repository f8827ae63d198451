from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport

from app import documents
from app.deps import get_current_user, get_mailer
from app.main import app
from app.mailer import DeliveryFailure, DeliveryResult, Mailer

pytestmark = pytest.mark.anyio

OFFER_JSON = {
    "customer_name": "Jane Buyer",
    "customer_email": "jane@example.com",
    "customer_address": "42 Market Road",
    "offer_date": "2025-07-01",
    "due_date": "2025-07-31",
    "items": [
        {"description": "Widget", "quantity": 2, "unit_price": "10.00"},
        {"description": "Gadget", "quantity": 1, "unit_price": "5.00"},
    ],
}


class StubMailer(Mailer):
    def __init__(self, result):
        self.result = result
        self.sent = []

    def send(self, to, subject, html_body, attachment=None):
        self.sent.append(to)
        return self.result


def act_as(user_id, company_id):
    async def _fake_user():
        return {"id": user_id, "email": f"user{user_id}@example.com", "company_id": company_id}
    app.dependency_overrides[get_current_user] = _fake_user


@pytest.fixture
async def client(tenants):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def test_product_routes_are_tenant_scoped(client, tenants):
    act_as(tenants["u1"], tenants["c1"])
    r = await client.post("/products/", json={"name": "Widget", "price": "19.99"})
    assert r.status_code == 201, r.text
    pid = r.json()["id"]
    assert Decimal(r.json()["price"]) == Decimal("19.99")

    r = await client.get("/products/")
    assert [p["id"] for p in r.json()] == [pid]

    act_as(tenants["u2"], tenants["c2"])
    assert (await client.get("/products/")).json() == []
    assert (await client.get(f"/products/{pid}")).status_code == 404
    assert (await client.put(f"/products/{pid}", json={"name": "X", "price": "1.00"})).status_code == 404
    assert (await client.delete(f"/products/{pid}")).status_code == 404

    act_as(tenants["u1"], tenants["c1"])
    r = await client.get(f"/products/{pid}")
    assert r.json()["name"] == "Widget"
    assert (await client.delete(f"/products/{pid}")).status_code == 204


async def test_offer_routes_compute_totals(client, tenants):
    act_as(tenants["u1"], tenants["c1"])
    r = await client.post("/offers/", json=OFFER_JSON)
    assert r.status_code == 201, r.text
    body = r.json()
    assert [Decimal(i["total_price"]) for i in body["items"]] == [Decimal("20.00"), Decimal("5.00")]
    assert Decimal(body["total_amount"]) == Decimal("25.00")
    assert body["user_id"] == tenants["u1"]

    dup = await client.post("/offers/", json={**OFFER_JSON, "offer_number": body["offer_number"]})
    assert dup.status_code == 400

    act_as(tenants["u2"], tenants["c2"])
    assert (await client.get(f"/offers/{body['id']}")).status_code == 404


async def test_send_offer_reports_delivery_failure(client, tenants, monkeypatch):
    monkeypatch.setattr(documents, "render_offer_pdf", lambda doc, currency="EUR": b"%PDF-fake")
    act_as(tenants["u1"], tenants["c1"])
    offer = (await client.post("/offers/", json=OFFER_JSON)).json()

    failing = StubMailer(DeliveryResult.failure(DeliveryFailure.AUTH_REJECTED, "535"))
    app.dependency_overrides[get_mailer] = lambda: failing
    r = await client.post(f"/offers/{offer['id']}/send")
    assert r.status_code == 502
    assert r.json()["detail"]["reason"] == "auth_rejected"
    assert failing.sent == ["jane@example.com"]

    # l'offre n'a pas bougé
    assert (await client.get(f"/offers/{offer['id']}")).json() == offer

    app.dependency_overrides[get_mailer] = lambda: StubMailer(DeliveryResult.success())
    r = await client.post(f"/offers/{offer['id']}/send")
    assert r.status_code == 200
    assert r.json() == {"delivered": True, "recipient": "jane@example.com", "reason": None}

    act_as(tenants["u2"], tenants["c2"])
    assert (await client.post(f"/offers/{offer['id']}/send")).status_code == 404


async def test_user_without_company_is_forbidden(client, tenants):
    act_as(99, None)
    assert (await client.get("/customers/")).status_code == 403


async def test_register_login_and_company_flow(client):
    r = await client.post("/auth/register", json={"email": "new@example.com", "password": "s3cret-pass"})
    assert r.status_code == 200, r.text
    headers = {"Authorization": f"Bearer {r.json()['access_token']}"}

    me = (await client.get("/auth/me", headers=headers)).json()
    assert me["email"] == "new@example.com"
    assert me["company_id"] is None
    assert (await client.get("/offers/", headers=headers)).status_code == 403

    r = await client.post("/companies/", headers=headers, json={
        "name": "Initech", "address": "9 Side St", "phone": "0633333333", "email": "hello@initech.example.com",
    })
    assert r.status_code == 201, r.text
    company_id = r.json()["id"]
    assert r.json()["offers_used"] == 0

    # même token : la société est relue depuis la base
    assert (await client.get("/companies/me", headers=headers)).json()["id"] == company_id

    again = await client.post("/auth/register", json={"email": "new@example.com", "password": "s3cret-pass"})
    assert again.status_code == 400
    bad = await client.post("/auth/login", json={"email": "new@example.com", "password": "wrong-pass"})
    assert bad.status_code == 400
    ok = await client.post("/auth/login", json={"email": "new@example.com", "password": "s3cret-pass"})
    assert ok.status_code == 200

    r = await client.delete("/companies/me", headers=headers)
    assert r.status_code == 204
    assert (await client.get("/auth/me", headers=headers)).json()["company_id"] is None


async def test_invalid_token_is_rejected(client):
    r = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-valid-token"})
    assert r.status_code == 401
