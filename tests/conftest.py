"""共享 fixture：每个测试一个独立的 SQLite 文件库"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from todo_api.config import Settings
from todo_api.db.engine import Database
from todo_api.main import create_app
from todo_api.todo.store import TodoStore
from todo_api.users.store import UserStore

TEST_SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        DB_AUTO_CREATE=True,
        JWT_SECRET=TEST_SECRET,
        ENV="test",
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings)
    await db.connect()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
def user_store(session, settings) -> UserStore:
    return UserStore(session, settings)


@pytest.fixture
def todo_store(session) -> TodoStore:
    return TodoStore(session)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


def register(client: TestClient, email: str, password: str = "secret123") -> str:
    """注册并返回 x-auth Token"""
    resp = client.post("/users", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.headers["x-auth"]
