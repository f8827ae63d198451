import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from app.db import database, create_tables
from app.routers import auth, companies, customers, offers, payments, products

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if os.getenv("AUTO_CREATE_TABLES", "false").lower() in ("1", "true", "yes"):
        create_tables()
    await database.connect()
    logger.info("database connected")
    try:
        yield
    finally:
        await database.disconnect()


app = FastAPI(title="Offer Management API", lifespan=lifespan)

for r in (auth, companies, customers, products, payments, offers):
    app.include_router(r.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
