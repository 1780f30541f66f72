import os

# Test-safe environment defaults for pydantic Settings; must run before quizhub imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from quizhub.core.token_denylist import get_denylist
from quizhub.db.base import Base
from quizhub.db.session import get_db, get_sessionmaker
from quizhub.main import app
import quizhub.models  # noqa: F401
from tests.helpers import FakeDenylist


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'quizhub.db'}", poolclass=NullPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return get_sessionmaker(engine)


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
def denylist():
    return FakeDenylist()


@pytest.fixture()
async def api(session_factory, denylist):
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_denylist] = lambda: denylist
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
