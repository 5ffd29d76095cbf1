import httpx
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from tasktracker.core.tasks.repository import TaskRepository
from tasktracker.db.base import metadata
from tasktracker.db.session import Database
from tasktracker.gateway.main import create_app as create_gateway_app
from tasktracker.rpc.client import TaskServiceClient
from tasktracker.service.main import create_app as create_service_app
from tasktracker.service.servicer import TaskServicer


@pytest_asyncio.fixture
async def db():
    database = Database(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with database.engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def repo(db):
    return TaskRepository(db)


@pytest_asyncio.fixture
async def servicer(repo):
    return TaskServicer(repo)


@pytest_asyncio.fixture
async def service_app(db):
    return create_service_app(db)


@pytest_asyncio.fixture
async def rpc_client(service_app):
    client = TaskServiceClient(
        httpx.AsyncClient(transport=httpx.ASGITransport(app=service_app), base_url="http://task-service")
    )
    yield client
    await client.close()


@pytest_asyncio.fixture
async def api(rpc_client):
    app = create_gateway_app(rpc_client)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://gateway") as client:
        yield client
