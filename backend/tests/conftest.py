import os
import tempfile

import pytest

# base SQLite jetable, à fixer avant tout import de app.db
_DB_PATH = os.path.join(tempfile.gettempdir(), "offers_test.db")
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ.setdefault("OFFER_CURRENCY", "EUR")

from app.db import create_tables, database, drop_tables  # noqa: E402
from app.services.companies import CompanyService  # noqa: E402
from app.services.users import UserService  # noqa: E402
from factories import company_payload  # noqa: E402


# Force AnyIO to use asyncio only (pas de trio)
@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db(anyio_backend):
    drop_tables()
    create_tables()
    await database.connect()
    try:
        yield database
    finally:
        await database.disconnect()
        drop_tables()

@pytest.fixture
async def tenants(db):
    """Two companies, one user in each."""
    users = UserService()
    u1 = await users.create("owner1@example.com", "password-1")
    u2 = await users.create("owner2@example.com", "password-2")
    c1 = await CompanyService().create(company_payload("Acme"), owner_id=u1)
    c2 = await CompanyService().create(company_payload("Globex"), owner_id=u2)
    return {"c1": c1.id, "c2": c2.id, "u1": u1, "u2": u2}
