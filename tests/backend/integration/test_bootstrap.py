import pytest

from app.core.bootstrap import ensure_default_admin
from app.models.user import User


pytestmark = pytest.mark.asyncio


async def test_default_admin_created_once(client, app, settings):
    config = settings.model_copy(update={"admin_password": "Bootstrap!234"})

    admin = await ensure_default_admin(config, app.state.hasher)
    assert admin is not None
    assert admin.role == "admin"
    assert await ensure_default_admin(config, app.state.hasher) is None
    assert await User.filter(role="admin").count() == 1

    login = await client.post(
        "/api/v1/auth/login",
        json={"nameOrEmail": config.admin_email, "password": "Bootstrap!234"},
    )
    assert login.status_code == 200
    assert login.json()["user"]["role"] == "admin"


async def test_no_admin_without_password(client, app, settings):
    config = settings.model_copy(update={"admin_password": None})
    assert await ensure_default_admin(config, app.state.hasher) is None
    assert not await User.filter(role="admin").exists()


async def test_admin_name_taken_by_another_user(client, app, settings, create_user):
    await create_user("visitor", name="admin")
    config = settings.model_copy(update={"admin_name": "admin", "admin_password": "Bootstrap!234"})
    admin = await ensure_default_admin(config, app.state.hasher)
    assert admin.name == "admin2"
