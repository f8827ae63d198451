"""Companies (tenants).

Deleting a company runs the whole cascade in one transaction: users are
detached (``company_id`` set to NULL), then offer items, offers, customers,
products and payments are removed before the company row itself.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select

from app import models, schemas
from app.db import database

logger = logging.getLogger(__name__)

COMPANY_FIELDS = ("name", "address", "phone", "email", "tax_number", "iban", "website", "logo")


class CompanyService:
    def __init__(self, db=database):
        self.db = db

    @staticmethod
    def to_view(row) -> schemas.CompanyOut:
        data = {f: row[f] for f in COMPANY_FIELDS}
        return schemas.CompanyOut(id=row["id"], offers_used=row["offers_used"] or 0, **data)

    async def get_by_id(self, company_id: int) -> Optional[schemas.CompanyOut]:
        tbl = models.Company.__table__
        row = await self.db.fetch_one(select(tbl).where(tbl.c.id == company_id))
        return self.to_view(row) if row else None

    async def create(self, payload: schemas.CompanyCreate, owner_id: Optional[int] = None) -> schemas.CompanyOut:
        tbl = models.Company.__table__
        utbl = models.User.__table__
        async with self.db.transaction():
            company_id = await self.db.execute(
                tbl.insert().values(offers_used=0, **payload.model_dump(include=set(COMPANY_FIELDS)))
            )
            if owner_id is not None:
                await self.db.execute(
                    utbl.update().where(utbl.c.id == owner_id).values(company_id=company_id)
                )
            row = await self.db.fetch_one(select(tbl).where(tbl.c.id == company_id))
        logger.info("company %s created", company_id)
        return self.to_view(row)

    async def update(self, company_id: int, payload: schemas.CompanyUpdate) -> Optional[schemas.CompanyOut]:
        tbl = models.Company.__table__
        async with self.db.transaction():
            existing = await self.db.fetch_one(select(tbl.c.id).where(tbl.c.id == company_id))
            if not existing:
                return None
            # offers_used n'est jamais modifiable par le client
            await self.db.execute(
                tbl.update().where(tbl.c.id == company_id).values(
                    **payload.model_dump(include=set(COMPANY_FIELDS))
                )
            )
            row = await self.db.fetch_one(select(tbl).where(tbl.c.id == company_id))
        return self.to_view(row)

    async def delete(self, company_id: int) -> bool:
        tbl = models.Company.__table__
        utbl = models.User.__table__
        otbl = models.Offer.__table__
        ltbl = models.OfferItem.__table__
        async with self.db.transaction():
            existing = await self.db.fetch_one(select(tbl.c.id).where(tbl.c.id == company_id))
            if not existing:
                return False
            await self.db.execute(
                utbl.update().where(utbl.c.company_id == company_id).values(company_id=None)
            )
            offer_ids = select(otbl.c.id).where(otbl.c.company_id == company_id)
            await self.db.execute(ltbl.delete().where(ltbl.c.offer_id.in_(offer_ids)))
            await self.db.execute(otbl.delete().where(otbl.c.company_id == company_id))
            for model in (models.Customer, models.Product, models.Payment):
                dep = model.__table__
                await self.db.execute(dep.delete().where(dep.c.company_id == company_id))
            await self.db.execute(tbl.delete().where(tbl.c.id == company_id))
        logger.info("company %s deleted with its customers, products, offers and payments", company_id)
        return True
