# tests/conftest.py
"""
Pytest configuration and fixtures.
Adds src to sys.path so `import cloudstore` works without installing.
"""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from cloudstore.config import AppOptions, ConfigResolver  # noqa: E402
from cloudstore.core.di import Container, bootstrap_dependencies, register_app  # noqa: E402
from cloudstore.domain.auth import Auth, master, nobody  # noqa: E402
from cloudstore.infrastructure.controllers import LoggingEmailAdapter  # noqa: E402
from cloudstore.infrastructure.stores import InMemoryDatabase  # noqa: E402

APP_ID = "test-app"
MOUNT = "http://localhost/1"


@pytest.fixture
def container():
    Container.reset()
    c = bootstrap_dependencies()
    yield c
    Container.reset()


@pytest.fixture
def app_options():
    return AppOptions(
        application_id=APP_ID,
        master_key="master-key",
        public_server_url=MOUNT,
        app_name="Test App",
    )


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def email_adapter():
    return LoggingEmailAdapter()


@pytest.fixture
def app_entry(container, app_options, database, email_adapter):
    return register_app(app_options, database=database, email_adapter=email_adapter)


@pytest.fixture
def config(container, app_entry):
    return container.resolve(ConfigResolver).resolve(APP_ID, MOUNT)


@pytest.fixture
def triggers(app_entry):
    return app_entry.triggers


@pytest.fixture
def master_auth(config):
    return master(config)


@pytest.fixture
def anon_auth(config):
    return nobody(config)


@pytest.fixture
def user_auth_for(config, database):
    """Build an Auth for a stored user id (roles resolved against `database`)."""

    async def _build(user_id: str) -> Auth:
        rows = await database.find("_User", {"objectId": user_id})
        assert rows, f"no user {user_id}"
        return Auth(config=config, user=rows[0])

    return _build
