import os
import tempfile
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# TEST ENVIRONMENT
# Must be set BEFORE importing app.main: the module-level app is built
# from environment settings at import time.
# ------------------------------------------------------------------
_IMPORT_DIR = tempfile.mkdtemp(prefix="form-tests-")
os.environ["UPLOAD_DIR"] = os.path.join(_IMPORT_DIR, "uploads")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_IMPORT_DIR}/import.db"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from app.core.config import Settings
from app.core.database import init_db
from app.main import create_app


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "DATABASE_URL": f"sqlite+aiosqlite:///{tmp_path}/test.db",
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "RATE_LIMIT_ENABLED": False,
    }
    values.update(overrides)
    return Settings(**values)


async def build_app(settings: Settings):
    app = create_app(settings)
    await init_db(app.state.engine)
    return app


@pytest_asyncio.fixture
async def app_factory(tmp_path):
    """Builds extra apps with overridden settings; engines are disposed on teardown."""
    built = []

    async def factory(**overrides):
        base = tmp_path / f"app{len(built)}"
        base.mkdir()
        application = await build_app(make_settings(base, **overrides))
        built.append(application)
        return application

    yield factory

    for application in built:
        await application.state.engine.dispose()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app(settings):
    application = await build_app(settings)
    yield application
    await application.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
def seller_fields():
    return {
        "name": "Asha Verma",
        "email": "asha.verma@mail.com",
        "phone": "9876543210",
        "gender": "female",
        "dob": "1990-05-17",
        "address": "12 MG Road, Pune",
        "pincode": "411001",
        "govtIdType": "PAN",
        "govtIdNumber": "ABCDE1234F",
        "gstNo": "27ABCDE1234F1Z5",
        "password": "Secret123",
        "confirmPassword": "Secret123",
    }


@pytest.fixture
def basic_fields():
    return {
        "name": "Asha Verma",
        "email": "asha.verma@mail.com",
        "password": "Secret123",
    }
