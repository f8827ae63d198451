from decimal import Decimal
from datetime import date

import pytest

from app import schemas
from app.services.catalog import ProductService, CustomerService, PaymentService

pytestmark = pytest.mark.anyio


def widget(**kw) -> schemas.ProductCreate:
    data = dict(name="Widget", description="Blue widget", category="Parts", price=Decimal("19.99"))
    data.update(kw)
    return schemas.ProductCreate(**data)


async def test_product_listed_only_for_its_company(tenants):
    svc = ProductService()
    created = await svc.create(widget(), tenants["c1"])

    mine = await svc.list_by_company(tenants["c1"])
    theirs = await svc.list_by_company(tenants["c2"])

    assert [p.id for p in mine] == [created.id]
    assert theirs == []


async def test_create_then_get_round_trip(tenants):
    svc = ProductService()
    payload = widget()
    created = await svc.create(payload, tenants["c1"])

    got = await svc.get_by_id(created.id, tenants["c1"])
    assert got is not None
    assert got.model_dump(exclude={"id"}) == payload.model_dump()
    assert got.price == Decimal("19.99")


async def test_get_from_other_company_is_not_found(tenants):
    svc = ProductService()
    created = await svc.create(widget(), tenants["c1"])
    assert await svc.get_by_id(created.id, tenants["c2"]) is None


async def test_update_from_other_company_does_not_mutate(tenants):
    svc = ProductService()
    created = await svc.create(widget(), tenants["c1"])

    res = await svc.update(created.id, schemas.ProductUpdate(name="Hacked", price=Decimal("0")), tenants["c2"])
    assert res is None

    got = await svc.get_by_id(created.id, tenants["c1"])
    assert got.name == "Widget"
    assert got.price == Decimal("19.99")


async def test_update_replaces_every_field(tenants):
    svc = ProductService()
    created = await svc.create(widget(), tenants["c1"])

    updated = await svc.update(created.id, schemas.ProductUpdate(name="Widget v2", price=Decimal("21.50")), tenants["c1"])
    assert updated.name == "Widget v2"
    assert updated.price == Decimal("21.50")
    # remplacement complet : les champs absents repassent à None
    assert updated.description is None
    assert updated.category is None


async def test_update_missing_returns_none(tenants):
    assert await ProductService().update(9999, widget(), tenants["c1"]) is None


async def test_delete_nonexistent_and_foreign_return_false(tenants):
    svc = ProductService()
    created = await svc.create(widget(), tenants["c1"])

    assert await svc.delete(9999, tenants["c1"]) is False
    assert await svc.delete(created.id, tenants["c2"]) is False
    assert await svc.get_by_id(created.id, tenants["c1"]) is not None

    assert await svc.delete(created.id, tenants["c1"]) is True
    assert await svc.get_by_id(created.id, tenants["c1"]) is None


async def test_customer_crud(tenants):
    svc = CustomerService()
    payload = schemas.CustomerCreate(name="Initech", email="buyer@initech.example.com", phone="0622222222")
    created = await svc.create(payload, tenants["c1"])
    assert created.model_dump(exclude={"id"}) == payload.model_dump()

    assert await svc.get_by_id(created.id, tenants["c2"]) is None
    updated = await svc.update(
        created.id,
        schemas.CustomerUpdate(name="Initech Ltd", email="buyer@initech.example.com", address="9 Side St"),
        tenants["c1"],
    )
    assert updated.name == "Initech Ltd"
    assert updated.phone is None
    assert updated.address == "9 Side St"


async def test_payment_amount_is_fixed_point(tenants):
    svc = PaymentService()
    created = await svc.create(
        schemas.PaymentCreate(amount=Decimal("0.10"), method="card", paid_at=date(2025, 7, 2)),
        tenants["c1"],
    )
    got = await svc.get_by_id(created.id, tenants["c1"])
    assert got.amount == Decimal("0.10")
    assert got.paid_at == date(2025, 7, 2)
    assert await svc.list_by_company(tenants["c2"]) == []
