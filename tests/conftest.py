import uuid
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app.db.mongo import create_indexes, get_db
from app.main import app
from app.repositories.user_cache import UserCache
from app.repositories.user_repo import UserRepository

PLATFORM = "telegram"


@pytest_asyncio.fixture
async def test_db():
    """Fresh in-memory database with the production indexes."""
    client = AsyncMongoMockClient()
    db = client[f"balance_test_{uuid.uuid4().hex}"]
    await create_indexes(db)
    yield db


@pytest.fixture
def user_cache():
    return UserCache(ttl_seconds=60)


@pytest_asyncio.fixture
async def multiple_users(test_db):
    """Register alice, bob and charlie on telegram."""
    user_repo = UserRepository(test_db)
    users = []
    for platform_user_id, username in (("1", "Alice"), ("2", "Bob"), ("3", "Charlie")):
        users.append(await user_repo.create_user(PLATFORM, platform_user_id, username))
    return users


@pytest_asyncio.fixture
async def api_client(test_db):
    """HTTP client against the app, bound to the test database."""
    app.dependency_overrides[get_db] = lambda: test_db
    app.state.user_cache = UserCache(ttl_seconds=60)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
