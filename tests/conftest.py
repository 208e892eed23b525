import os

# Force the app onto a throwaway SQLite file before anything imports hotel_admin.db.
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-do-not-use-in-production"
# Cheap hashing keeps user fixtures fast
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "1024"
os.environ["ARGON2_PARALLELISM"] = "1"

import pytest  # noqa: E402
from fastapi_cache import FastAPICache  # noqa: E402
from fastapi_cache.backends.inmemory import InMemoryBackend  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from hotel_admin.db import SessionLocal  # noqa: E402
from hotel_admin.db.init_db import drop_db, init_db  # noqa: E402
from hotel_admin.main import app  # noqa: E402
from hotel_admin.services.menu_permission_service import MenuPermissionStore  # noqa: E402
from hotel_admin.utils.auth import create_access_token, create_user  # noqa: E402

# ASGITransport does not run the lifespan, so Redis is never touched in tests
FastAPICache.init(InMemoryBackend(), prefix="test-cache")


@pytest.fixture
def db():
    """Fresh schema per test."""
    drop_db()
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    MenuPermissionStore(db).seed_defaults()
    return db


@pytest.fixture
def admin_user(seeded_db):
    return create_user(seeded_db, "admin", "admin123", role_name="Admin", full_name="Hotel Admin")


@pytest.fixture
def sales_user(seeded_db):
    return create_user(seeded_db, "sales", "sales123", role_name="Sales Manager")


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {create_access_token(admin_user)}"}


@pytest.fixture
def sales_headers(sales_user):
    return {"Authorization": f"Bearer {create_access_token(sales_user)}"}


@pytest.fixture
async def client_fixture():
    """Async HTTP client for testing FastAPI endpoints."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
