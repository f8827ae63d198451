"""Offers and their line items.

Item totals and the offer total are always recomputed from quantities and unit
prices; they are written in the same transaction as the items themselves.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import date
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError

from app import models, schemas
from app.db import database
from app.money import to_cents, from_cents, offer_totals
from app.services.companies import CompanyService

logger = logging.getLogger(__name__)

OFFER_FIELDS = (
    "customer_name", "customer_email", "customer_phone", "customer_address",
    "offer_date", "due_date", "notes",
)


class OfferNumberTaken(Exception):
    def __init__(self, offer_number: str):
        super().__init__(f"Offer number {offer_number!r} already used in this company")
        self.offer_number = offer_number


def make_offer_number(seq: int, year: Optional[int] = None) -> str:
    y = year or date.today().year
    return f"OFF-{y}-{seq:04d}"


def is_unique_violation(exc: Exception) -> bool:
    # SQLAlchemy enveloppe l'erreur du driver dans .orig
    if isinstance(exc, IntegrityError) and exc.orig is not None:
        exc = exc.orig
    if isinstance(exc, sqlite3.IntegrityError):
        return "UNIQUE constraint failed" in str(exc)
    # asyncpg / psycopg2 : unique_violation
    return getattr(exc, "sqlstate", None) == "23505" or getattr(exc, "pgcode", None) == "23505"


class OfferService:
    def __init__(self, db=database):
        self.db = db

    def _item_rows(self, offer_id: int, items) -> tuple[list[dict], int]:
        lines = [(i.quantity, to_cents(i.unit_price)) for i in items]
        totals, grand_total = offer_totals(lines)
        rows = [
            {
                "offer_id": offer_id,
                "position": pos,
                "description": item.description,
                "quantity": qty,
                "unit_price_cents": unit,
                "total_price_cents": total,
            }
            for pos, (item, (qty, unit), total) in enumerate(zip(items, lines, totals))
        ]
        return rows, grand_total

    async def _number_taken(self, company_id: int, offer_number: str, exclude_id: Optional[int] = None) -> bool:
        otbl = models.Offer.__table__
        cond = and_(otbl.c.company_id == company_id, otbl.c.offer_number == offer_number)
        if exclude_id is not None:
            cond = and_(cond, otbl.c.id != exclude_id)
        return await self.db.fetch_one(select(otbl.c.id).where(cond)) is not None

    async def _next_free_number(self, company_id: int, seq: int) -> str:
        # saute les numéros déjà pris à la main
        number = make_offer_number(seq)
        while await self._number_taken(company_id, number):
            seq += 1
            number = make_offer_number(seq)
        return number

    async def _items(self, offer_id: int) -> list:
        ltbl = models.OfferItem.__table__
        rows = await self.db.fetch_all(
            select(ltbl).where(ltbl.c.offer_id == offer_id).order_by(ltbl.c.position.asc(), ltbl.c.id.asc())
        )
        return [
            schemas.OfferItemOut(
                id=r["id"],
                description=r["description"],
                quantity=r["quantity"],
                unit_price=from_cents(r["unit_price_cents"]),
                total_price=from_cents(r["total_price_cents"]),
            )
            for r in rows
        ]

    async def _to_view(self, row) -> schemas.OfferOut:
        data = {f: row[f] for f in OFFER_FIELDS}
        return schemas.OfferOut(
            id=row["id"],
            offer_number=row["offer_number"],
            total_amount=from_cents(row["total_amount_cents"]),
            user_id=row["user_id"],
            items=await self._items(row["id"]),
            **data,
        )

    def _owned(self, offer_id: int, company_id: int):
        otbl = models.Offer.__table__
        return select(otbl).where(and_(otbl.c.id == offer_id, otbl.c.company_id == company_id))

    async def list_by_company(self, company_id: int) -> list[schemas.OfferOut]:
        otbl = models.Offer.__table__
        rows = await self.db.fetch_all(
            select(otbl).where(otbl.c.company_id == company_id).order_by(otbl.c.id.asc())
        )
        return [await self._to_view(r) for r in rows]

    async def get_by_id(self, offer_id: int, company_id: int) -> Optional[schemas.OfferOut]:
        row = await self.db.fetch_one(self._owned(offer_id, company_id))
        return await self._to_view(row) if row else None

    async def create(self, payload: schemas.OfferCreate, company_id: int, user_id: int) -> schemas.OfferOut:
        otbl = models.Offer.__table__
        ltbl = models.OfferItem.__table__
        ctbl = models.Company.__table__
        async with self.db.transaction():
            # verrou sur la société : sérialise la numérotation (ignoré par SQLite)
            used = await self.db.fetch_val(
                select(ctbl.c.offers_used).where(ctbl.c.id == company_id).with_for_update()
            )
            if used is None:
                raise LookupError(f"Company {company_id} does not exist")
            if payload.offer_number:
                number = payload.offer_number
                if await self._number_taken(company_id, number):
                    raise OfferNumberTaken(number)
            else:
                number = await self._next_free_number(company_id, int(used) + 1)
            data = payload.model_dump(include=set(OFFER_FIELDS))
            try:
                offer_id = await self.db.execute(
                    otbl.insert().values(
                        offer_number=number,
                        total_amount_cents=0,
                        user_id=user_id,
                        company_id=company_id,
                        **data,
                    )
                )
            except Exception as e:
                if is_unique_violation(e):
                    raise OfferNumberTaken(number) from e
                raise
            rows, grand_total = self._item_rows(offer_id, payload.items)
            if rows:
                await self.db.execute_many(ltbl.insert(), rows)
            await self.db.execute(
                otbl.update().where(otbl.c.id == offer_id).values(total_amount_cents=grand_total)
            )
            # compteur d'usage de la société
            await self.db.execute(
                ctbl.update().where(ctbl.c.id == company_id).values(offers_used=ctbl.c.offers_used + 1)
            )
            row = await self.db.fetch_one(select(otbl).where(otbl.c.id == offer_id))
            view = await self._to_view(row)
        logger.info("offer %s (%s) created for company %s", offer_id, number, company_id)
        return view

    async def update(self, offer_id: int, payload: schemas.OfferUpdate, company_id: int) -> Optional[schemas.OfferOut]:
        otbl = models.Offer.__table__
        ltbl = models.OfferItem.__table__
        async with self.db.transaction():
            existing = await self.db.fetch_one(self._owned(offer_id, company_id))
            if not existing:
                return None
            if await self._number_taken(company_id, payload.offer_number, exclude_id=offer_id):
                raise OfferNumberTaken(payload.offer_number)
            # remplacement complet des lignes, pas de fusion
            await self.db.execute(ltbl.delete().where(ltbl.c.offer_id == offer_id))
            rows, grand_total = self._item_rows(offer_id, payload.items)
            if rows:
                await self.db.execute_many(ltbl.insert(), rows)
            try:
                await self.db.execute(
                    otbl.update()
                    .where(and_(otbl.c.id == offer_id, otbl.c.company_id == company_id))
                    .values(
                        offer_number=payload.offer_number,
                        total_amount_cents=grand_total,
                        **payload.model_dump(include=set(OFFER_FIELDS)),
                    )
                )
            except Exception as e:
                if is_unique_violation(e):
                    raise OfferNumberTaken(payload.offer_number) from e
                raise
            row = await self.db.fetch_one(select(otbl).where(otbl.c.id == offer_id))
            view = await self._to_view(row)
        return view

    async def delete(self, offer_id: int, company_id: int) -> bool:
        otbl = models.Offer.__table__
        ltbl = models.OfferItem.__table__
        async with self.db.transaction():
            owned = await self.db.fetch_one(self._owned(offer_id, company_id))
            if not owned:
                return False
            await self.db.execute(ltbl.delete().where(ltbl.c.offer_id == offer_id))
            await self.db.execute(otbl.delete().where(otbl.c.id == offer_id))
        logger.info("offer %s deleted for company %s", offer_id, company_id)
        return True

    async def load_document(self, offer_id: int, company_id: int) -> Optional[schemas.OfferDocument]:
        offer = await self.get_by_id(offer_id, company_id)
        if offer is None:
            return None
        company = await CompanyService(self.db).get_by_id(company_id)
        if company is None:
            return None
        return schemas.OfferDocument(company=company, **offer.model_dump())
