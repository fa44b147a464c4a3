import os
import sys
import pathlib
import tempfile
import pytest
import httpx
from asgi_lifespan import LifespanManager
from pytest_httpx import HTTPXMock

# Должно быть задано до импорта settings
os.environ.setdefault(
    'payment_service_database_url',
    f'sqlite+aiosqlite:///{pathlib.Path(tempfile.gettempdir())/'payment-service-tests.db'}'
)

sys.path.append(str(pathlib.Path(__file__).parent.parent/'src'))
sys.path.append(str(pathlib.Path(__file__).parent))

import db.postgres
import tables
from main import app


# httpx_mock нужен раньше lifespan: при остановке приложения
# пул еще отправляет уведомления, они должны попасть в mock
@pytest.fixture(scope='function')
async def run_migrations(httpx_mock: HTTPXMock):
    async with LifespanManager(app):
        assert db.postgres.engine is not None
        async with db.postgres.engine.begin() as conn:
            await conn.run_sync(tables.Base.metadata.drop_all)
            await conn.run_sync(tables.Base.metadata.create_all)

        yield


@pytest.fixture(scope='function')
async def api_client(run_migrations):
    async with httpx.AsyncClient(
        mounts={'http://tests': httpx.ASGITransport(app=app)},
        base_url='http://tests'
    ) as client:
        yield client


@pytest.fixture(scope='function')
def session_maker(run_migrations):
    return db.postgres.get_session_maker()
