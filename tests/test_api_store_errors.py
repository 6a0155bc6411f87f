"""HTTP tests for persistence failures: store errors map to 400 (401 inside auth)."""

import pytest
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.api.deps import get_app_settings, get_todo_store, get_user_store
from todo_api.config import Settings
from todo_api.db.engine import get_db
from todo_api.errors import StoreError
from todo_api.todo.store import TodoStore
from todo_api.users.store import UserStore
from conftest import register


class BrokenTodoStore(TodoStore):
    """每个操作都模拟数据库失败"""

    async def create(self, *args, **kwargs):
        raise StoreError("db down")

    async def list_by_owner(self, *args, **kwargs):
        raise StoreError("db down")

    async def find_one(self, *args, **kwargs):
        raise StoreError("db down")

    async def update(self, *args, **kwargs):
        raise StoreError("db down")

    async def delete(self, *args, **kwargs):
        raise StoreError("db down")


class BrokenRegisterStore(UserStore):
    async def create(self, *args, **kwargs):
        raise StoreError("db down")


class BrokenLoginStore(UserStore):
    async def generate_auth_token(self, *args, **kwargs):
        raise StoreError("db down")


class BrokenLogoutStore(UserStore):
    async def remove_token(self, *args, **kwargs):
        raise StoreError("db down")


class BrokenLookupStore(UserStore):
    async def find_by_token(self, *args, **kwargs):
        raise StoreError("db down")


def override_user_store(client, store_cls):
    def factory(
        db: AsyncSession = Depends(get_db),
        settings: Settings = Depends(get_app_settings),
    ) -> UserStore:
        return store_cls(db, settings)

    client.app.dependency_overrides[get_user_store] = factory


@pytest.fixture
def alice(client):
    return {"x-auth": register(client, "alice@example.com")}


class TestTodoStoreFailure:
    @pytest.fixture(autouse=True)
    def broken_todos(self, client):
        client.app.dependency_overrides[get_todo_store] = (
            lambda db=Depends(get_db): BrokenTodoStore(db)
        )
        yield
        client.app.dependency_overrides.clear()

    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("POST", "/todos", {"text": "x"}),
            ("GET", "/todos", None),
            ("GET", "/todos/0190f3a4-5b6c-7d8e-9f00-112233445566", None),
            ("DELETE", "/todos/0190f3a4-5b6c-7d8e-9f00-112233445566", None),
            ("PATCH", "/todos/0190f3a4-5b6c-7d8e-9f00-112233445566", {"completed": True}),
        ],
    )
    def test_store_error_is_400_with_empty_body(self, client, alice, method, path, body):
        resp = client.request(method, path, json=body, headers=alice)
        assert resp.status_code == 400
        assert resp.content == b""


class TestUserStoreFailure:
    def test_register(self, client):
        override_user_store(client, BrokenRegisterStore)
        resp = client.post("/users", json={"email": "bob@example.com", "password": "secret123"})
        assert resp.status_code == 400
        assert resp.content == b""
        assert "x-auth" not in resp.headers

    def test_login(self, client):
        register(client, "carol@example.com", "secret123")
        override_user_store(client, BrokenLoginStore)
        resp = client.post("/users/login", json={"email": "carol@example.com", "password": "secret123"})
        assert resp.status_code == 400
        assert resp.content == b""

    def test_logout(self, client, alice):
        override_user_store(client, BrokenLogoutStore)
        resp = client.delete("/users/me/token", headers=alice)
        assert resp.status_code == 400
        assert resp.content == b""

        client.app.dependency_overrides.clear()
        assert client.get("/users/me", headers=alice).status_code == 200

    def test_token_lookup_failure_is_unauthenticated(self, client, alice):
        override_user_store(client, BrokenLookupStore)
        assert client.get("/users/me", headers=alice).status_code == 401
