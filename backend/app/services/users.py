from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select

from app import models
from app.auth_utils import get_password_hash
from app.db import database

logger = logging.getLogger(__name__)


class EmailAlreadyRegistered(Exception):
    pass


class UserService:
    def __init__(self, db=database):
        self.db = db

    async def get_by_email(self, email: str):
        utbl = models.User.__table__
        return await self.db.fetch_one(select(utbl).where(utbl.c.email == email))

    async def get_by_id(self, user_id: int):
        utbl = models.User.__table__
        return await self.db.fetch_one(select(utbl).where(utbl.c.id == user_id))

    async def create(self, email: str, password: str, company_id: Optional[int] = None) -> int:
        utbl = models.User.__table__
        async with self.db.transaction():
            if await self.get_by_email(email):
                raise EmailAlreadyRegistered(email)
            user_id = await self.db.execute(
                utbl.insert().values(
                    email=email, hashed_password=get_password_hash(password), company_id=company_id
                )
            )
        logger.info("user %s registered", user_id)
        return int(user_id)

    async def attach_company(self, user_id: int, company_id: Optional[int]) -> bool:
        utbl = models.User.__table__
        async with self.db.transaction():
            if not await self.get_by_id(user_id):
                return False
            await self.db.execute(utbl.update().where(utbl.c.id == user_id).values(company_id=company_id))
        return True

    async def delete(self, user_id: int) -> bool:
        """Delete a user together with the offers they authored."""
        utbl = models.User.__table__
        otbl = models.Offer.__table__
        ltbl = models.OfferItem.__table__
        async with self.db.transaction():
            if not await self.get_by_id(user_id):
                return False
            offer_ids = select(otbl.c.id).where(otbl.c.user_id == user_id)
            await self.db.execute(ltbl.delete().where(ltbl.c.offer_id.in_(offer_ids)))
            await self.db.execute(otbl.delete().where(otbl.c.user_id == user_id))
            await self.db.execute(utbl.delete().where(utbl.c.id == user_id))
        logger.info("user %s deleted with their offers", user_id)
        return True
