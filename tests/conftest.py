"""
Shared pytest fixtures.

The database URL and admin credentials are placed in the environment before
any folio module is imported, so the module-level settings and engine pick
them up.
"""

import asyncio
import os
import tempfile

import pytest
from passlib.hash import pbkdf2_sha256

ADMIN_PASSWORD = "correct horse battery"

_DB_DIR = tempfile.mkdtemp(prefix="folio-tests-")
os.environ["FOLIO_DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["FOLIO_JWT_SECRET"] = "test-secret"
os.environ["FOLIO_ADMIN_PASSWORD_HASH"] = pbkdf2_sha256.hash(ADMIN_PASSWORD)
os.environ["FOLIO_DIAGRAM_RENDERER"] = "none"

from fastapi.testclient import TestClient  # noqa: E402

from folio.core.db import SessionLocal, init_models  # noqa: E402
from folio.core.security import ADMIN_SUBJECT, create_access_token  # noqa: E402


@pytest.fixture()
async def db_session():
    """Session on a freshly created schema"""
    await init_models(drop=True)
    async with SessionLocal() as session:
        yield session


@pytest.fixture()
def client():
    """Test client on a freshly created schema"""
    asyncio.run(init_models(drop=True))

    from folio.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture()
def admin_token() -> str:
    return create_access_token({"sub": ADMIN_SUBJECT})


@pytest.fixture()
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
