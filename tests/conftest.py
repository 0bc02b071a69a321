import os
import uuid

# Provide required auth secrets for tests if not already set
os.environ.setdefault("ENV_RESET_PASSWORD_TOKEN_SECRET", "test-reset-secret")
os.environ.setdefault("ENV_VERIFICATION_TOKEN_SECRET", "test-verify-secret")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import httpx
import pytest
import pytest_asyncio

from auth.auth import get_current_active_user, get_current_user
from db.engine import create_engine_for_url
from main import get_app
from storage.database_storage import DatabaseStorage
from storage.factory import get_storage
from storage.memory_storage import MemStorage
from users.user_model import User


def make_user(email: str = "owner@example.com") -> User:
    return User(id=str(uuid.uuid4()), email=email, hashed_password="not-a-real-hash", first_name="Ada")


@pytest_asyncio.fixture
async def mem_storage():
    storage = MemStorage()
    await storage.initialize()
    yield storage
    await storage.close()


@pytest_asyncio.fixture
async def db_storage(tmp_path):
    # File-backed so every connection sees the same database
    engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}")
    storage = DatabaseStorage(engine)
    await storage.initialize()
    yield storage
    await storage.close()


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request, tmp_path):
    """Runs contract tests against both backends."""
    if request.param == "memory":
        backend = MemStorage()
    else:
        backend = DatabaseStorage(create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'contract.db'}"))
    await backend.initialize()
    yield backend
    await backend.close()


@pytest_asyncio.fixture
async def owner(storage):
    return await storage.upsert_user(make_user())


@pytest_asyncio.fixture
async def stranger(storage):
    return await storage.upsert_user(make_user("stranger@example.com"))


@pytest.fixture
def app(mem_storage):
    application = get_app()
    application.dependency_overrides[get_storage] = lambda: mem_storage
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api_user(mem_storage):
    return await mem_storage.upsert_user(make_user("api@example.com"))


@pytest_asyncio.fixture
async def client(app, api_user):
    """Client whose requests are authenticated as `api_user`."""
    app.dependency_overrides[get_current_user] = lambda: api_user.id
    app.dependency_overrides[get_current_active_user] = lambda: api_user
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def anon_client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
