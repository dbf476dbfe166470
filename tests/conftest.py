import os
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

# IMPORTANT:
# Set env vars BEFORE importing app.settings/app.main (pydantic settings load at import time)
os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./circles_test.db")
os.environ.setdefault("JWT_SECRET", "dev-test-secret")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:5173")

from app.main import app as fastapi_app  # noqa: E402
from app.db.base_class import Base  # noqa: E402
import app.db.base  # noqa: F401,E402  (register models)
from app.db.session import engine, AsyncSessionLocal, get_db_session  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
async def _create_test_schema(anyio_backend):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client(db_session):
    """
    Overrides app.db.session.get_db_session so every route (including the
    ones going through app.api.deps.get_db) uses the test session.
    """

    async def _override_get_db_session():
        yield db_session

    fastapi_app.dependency_overrides[get_db_session] = _override_get_db_session

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    fastapi_app.dependency_overrides.pop(get_db_session, None)


# --- Small helpers ---

def _unique(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}"


@pytest.fixture
def unique_str():
    return _unique


@pytest.fixture
def make_user(db_session, unique_str):
    """Insert a user row directly and return its id, for engine-level tests.

    Ids rather than instances: a refused action rolls the session back,
    which expires every loaded instance.
    """

    async def _create(name: str = "user") -> uuid.UUID:
        user = User(username=unique_str(name), display_name=name, password_hash="!")
        db_session.add(user)
        await db_session.commit()
        return user.id

    return _create


@pytest.fixture
def user_factory(unique_str):
    async def _create(
        client: AsyncClient,
        *,
        username: str | None = None,
        display_name: str | None = None,
        password: str = "SuperSecret123",
    ):
        username = username or unique_str("user")
        display_name = display_name or username
        r = await client.post(
            "/auth/register",
            json={
                "username": username,
                "display_name": display_name,
                "password": password,
            },
        )
        assert r.status_code in (200, 201), r.text
        data = r.json()
        assert "id" in data
        return {
            "id": data["id"],
            "username": username,
            "display_name": display_name,
            "password": password,
        }

    return _create


@pytest.fixture
def login_helper():
    async def _login(client: AsyncClient, *, username: str, password: str):
        client.cookies.clear()
        r = await client.post("/auth/login", json={"username": username, "password": password})
        assert r.status_code == 200, r.text
        token = client.cookies.get("access_token")
        assert token, "Login did not set access_token cookie"
        assert r.json()["access_token"] == token
        return token

    return _login


@pytest.fixture
def authed_user(user_factory, login_helper):
    async def _create(client: AsyncClient, **kwargs):
        user = await user_factory(client, **kwargs)
        token = await login_helper(client, username=user["username"], password=user["password"])
        user["token"] = token
        return user

    return _create


@pytest.fixture
def set_auth_cookie():
    def _set(client: AsyncClient, token: str | None):
        client.cookies.clear()
        if token:
            client.cookies.set("access_token", token)

    return _set
