"""Tenant-scoped CRUD over a single table.

Every lookup filters on ``company_id`` as well as ``id``: a row owned by
another company is reported exactly like a missing row (``None`` / ``False``).
Updates replace every mutable field; there is no partial patch.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel
from sqlalchemy import select, and_

from app.db import database
from app.money import to_cents, from_cents

logger = logging.getLogger(__name__)


class TenantService:
    model: Any = None
    view: Type[BaseModel] = BaseModel
    # champs métier recopiés tels quels entre requête et ligne
    fields: tuple = ()
    # champ API (Decimal) -> colonne (centimes)
    money_fields: Dict[str, str] = {}

    def __init__(self, db=database):
        self.db = db

    @property
    def table(self):
        return self.model.__table__

    def _owned(self, entity_id: int, company_id: int):
        tbl = self.table
        return select(tbl).where(and_(tbl.c.id == entity_id, tbl.c.company_id == company_id))

    def _values(self, payload: BaseModel) -> Dict[str, Any]:
        data = payload.model_dump()
        values = {f: data.get(f) for f in self.fields}
        for field, column in self.money_fields.items():
            values[column] = to_cents(data.get(field))
        return values

    def to_view(self, row) -> BaseModel:
        data = {"id": row["id"]}
        for f in self.fields:
            data[f] = row[f]
        for field, column in self.money_fields.items():
            data[field] = from_cents(row[column])
        return self.view(**data)

    async def list_by_company(self, company_id: int) -> list:
        tbl = self.table
        rows = await self.db.fetch_all(
            select(tbl).where(tbl.c.company_id == company_id).order_by(tbl.c.id.asc())
        )
        return [self.to_view(r) for r in rows]

    async def get_by_id(self, entity_id: int, company_id: int) -> Optional[BaseModel]:
        row = await self.db.fetch_one(self._owned(entity_id, company_id))
        return self.to_view(row) if row else None

    async def create(self, payload: BaseModel, company_id: int) -> BaseModel:
        tbl = self.table
        values = self._values(payload)
        async with self.db.transaction():
            new_id = await self.db.execute(tbl.insert().values(company_id=company_id, **values))
            row = await self.db.fetch_one(select(tbl).where(tbl.c.id == new_id))
        logger.info("%s %s created for company %s", tbl.name, new_id, company_id)
        return self.to_view(row)

    async def update(self, entity_id: int, payload: BaseModel, company_id: int) -> Optional[BaseModel]:
        tbl = self.table
        async with self.db.transaction():
            existing = await self.db.fetch_one(self._owned(entity_id, company_id))
            if not existing:
                return None
            await self.db.execute(
                tbl.update()
                .where(and_(tbl.c.id == entity_id, tbl.c.company_id == company_id))
                .values(**self._values(payload))
            )
            row = await self.db.fetch_one(select(tbl).where(tbl.c.id == entity_id))
        return self.to_view(row)

    async def delete(self, entity_id: int, company_id: int) -> bool:
        tbl = self.table
        async with self.db.transaction():
            owned = await self.db.fetch_one(self._owned(entity_id, company_id))
            if not owned:
                return False
            await self.db.execute(
                tbl.delete().where(and_(tbl.c.id == entity_id, tbl.c.company_id == company_id))
            )
        logger.info("%s %s deleted for company %s", tbl.name, entity_id, company_id)
        return True
