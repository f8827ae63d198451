"""Connection objects shared by the services.

``database`` runs the async queries; ``engine`` is only used to create and
drop the schema.
"""
import os

from databases import Database
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

load_dotenv()

DEFAULT_DATABASE_URL = "postgresql://postgres:postgres@db:5432/offers"
DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

Base = declarative_base()


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # le moteur de schéma et le pool async partagent le fichier
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


database = Database(DATABASE_URL)
engine = make_engine(DATABASE_URL)


def _metadata():
    # import tardif : les modèles doivent être enregistrés sur Base
    from app import models  # noqa: F401
    return Base.metadata


def create_tables(bind: Engine = engine) -> None:
    _metadata().create_all(bind)


def drop_tables(bind: Engine = engine) -> None:
    _metadata().drop_all(bind)
