from decimal import Decimal

import pytest
from sqlalchemy import select, func

from app import models, schemas
from app.db import database
from app.services.catalog import ProductService, CustomerService, PaymentService
from app.services.companies import CompanyService
from app.services.offers import OfferService
from app.services.users import UserService

from factories import company_payload, offer_payload

pytestmark = pytest.mark.anyio


async def _count(model, **where) -> int:
    tbl = model.__table__
    stmt = select(func.count()).select_from(tbl)
    for col, val in where.items():
        stmt = stmt.where(tbl.c[col] == val)
    return int(await database.fetch_val(stmt))


async def _populate(company_id: int, user_id: int) -> int:
    await ProductService().create(schemas.ProductCreate(name="Widget", price=Decimal("19.99")), company_id)
    await CustomerService().create(schemas.CustomerCreate(name="Buyer", email="buyer@example.com"), company_id)
    await PaymentService().create(schemas.PaymentCreate(amount=Decimal("25.00")), company_id)
    offer = await OfferService().create(offer_payload(), company_id, user_id=user_id)
    return offer.id


async def test_company_delete_removes_all_dependents(tenants):
    offer_id = await _populate(tenants["c1"], tenants["u1"])
    other_offer_id = await _populate(tenants["c2"], tenants["u2"])

    assert await CompanyService().delete(tenants["c1"]) is True

    assert await CompanyService().get_by_id(tenants["c1"]) is None
    for model in (models.Product, models.Customer, models.Payment, models.Offer):
        assert await _count(model, company_id=tenants["c1"]) == 0
        assert await _count(model, company_id=tenants["c2"]) == 1
    assert await _count(models.OfferItem, offer_id=offer_id) == 0
    assert await _count(models.OfferItem, offer_id=other_offer_id) == 2


async def test_company_delete_keeps_users_and_nulls_company(tenants):
    await CompanyService().delete(tenants["c1"])

    user = await UserService().get_by_id(tenants["u1"])
    assert user is not None
    assert user["company_id"] is None
    other = await UserService().get_by_id(tenants["u2"])
    assert other["company_id"] == tenants["c2"]


async def test_company_delete_unknown_returns_false(db):
    assert await CompanyService().delete(12345) is False


async def test_user_delete_removes_authored_offers(tenants):
    users = UserService()
    colleague = await users.create("colleague@example.com", "password-3", company_id=tenants["c1"])
    mine = await OfferService().create(offer_payload(), tenants["c1"], user_id=tenants["u1"])
    theirs = await OfferService().create(offer_payload(), tenants["c1"], user_id=colleague)

    assert await users.delete(colleague) is True

    assert await OfferService().get_by_id(theirs.id, tenants["c1"]) is None
    assert await _count(models.OfferItem, offer_id=theirs.id) == 0
    assert await OfferService().get_by_id(mine.id, tenants["c1"]) is not None
    assert await CompanyService().get_by_id(tenants["c1"]) is not None


async def test_company_update_keeps_usage_counter(tenants):
    await OfferService().create(offer_payload(), tenants["c1"], user_id=tenants["u1"])
    updated = await CompanyService().update(tenants["c1"], company_payload("Acme Renamed", website="https://acme.example.com"))
    assert updated.name == "Acme Renamed"
    assert updated.tax_number == "TX-1"
    assert updated.offers_used == 1
    assert await CompanyService().update(9999, company_payload()) is None
