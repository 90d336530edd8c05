import os
import tempfile
import uuid

# Settings are read from the environment when app.config is imported,
# so everything has to be in place before the app modules load.
TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["JWT_SECRET"] = "test-only-signing-secret-0123456789abcdef"
os.environ["COOKIE_SECURE"] = "false"  # httpx talks plain http to the test app
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="palacio-uploads-")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.config import settings as base_settings  # noqa: E402
from app.core.db import close_db, init_db  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Per-test settings; uploaded blobs go to the test's own tmp dir."""
    return base_settings.model_copy(update={"upload_dir": str(tmp_path / "uploads")})


@pytest.fixture
def app(settings):
    """A fresh application (own cache, hasher, token service) for every test."""
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    The lifespan is not run; the in-memory database is set up here instead.
    """
    await init_db(TEST_DB_URL, generate_schemas=True)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await close_db()


@pytest_asyncio.fixture
async def create_user(app, client):
    """
    Factory fixture to create users of any role directly via ORM.
    Role-specific fields are filled in so the accounts look like ones an
    admin would have created.
    """

    async def _create_user(role: str = "visitor", password: str = "UserPass!23", **fields) -> tuple[User, str]:
        suffix = uuid.uuid4().hex[:6]
        data = {"name": f"{role}_{suffix}", "email": f"{role}_{suffix}@example.com"}
        if role == "co":
            data.update(company=f"Empresa {suffix}", cif=f"B{suffix}", company_stand_id=str(uuid.uuid4()))
        elif role == "visitor":
            data.update(dni=f"{suffix}X", studies="Ingeniería Informática")
        data.update(fields)
        user = await User.create(
            password_hash=await app.state.hasher.hash(password),
            role=role,
            **data,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    The session cookie set by login is dropped so requests only carry the header.
    """

    async def _get_headers(identifier: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"nameOrEmail": identifier, "password": password},
        )
        assert resp.status_code == 200, resp.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {resp.json()['token']}"}

    return _get_headers


@pytest_asyncio.fixture
async def login_as(create_user, auth_header_factory):
    """Create a user with the given role and return it with its auth headers."""

    async def _login_as(role: str, **fields) -> tuple[User, dict[str, str]]:
        user, password = await create_user(role, **fields)
        return user, await auth_header_factory(user.name, password)

    return _login_as
