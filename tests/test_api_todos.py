"""HTTP tests for /todos: owner-scoped CRUD behind x-auth."""

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from todo_api.main import create_app
from conftest import register


@pytest.fixture
def alice(client):
    return {"x-auth": register(client, "alice@example.com")}


@pytest.fixture
def bob(client):
    return {"x-auth": register(client, "bob@example.com")}


def create_todo(client, headers, text="Test todo text", **extra):
    resp = client.post("/todos", json={"text": text, **extra}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestCreate:
    def test_create(self, client, alice):
        body = create_todo(client, alice, "Test todo text")
        assert body["text"] == "Test todo text"
        assert body["completed"] is False
        assert body["completedAt"] is None
        assert set(body) == {"id", "text", "completed", "completedAt", "creator"}

        me = client.get("/users/me", headers=alice).json()
        assert body["creator"] == me["id"]

    def test_invalid_body(self, client, alice):
        assert client.post("/todos", json={}, headers=alice).status_code == 400
        assert client.post("/todos", json={"text": "   "}, headers=alice).status_code == 400
        assert client.get("/todos", headers=alice).json() == {"todos": []}

    @pytest.mark.parametrize("value", ["true", 1, "on"])
    def test_non_boolean_completed_is_not_complete(self, client, alice, value):
        body = create_todo(client, alice, completed=value)
        assert body["completed"] is False
        assert body["completedAt"] is None

    def test_requires_auth(self, client):
        assert client.post("/todos", json={"text": "x"}).status_code == 401


class TestList:
    def test_only_own_todos(self, client, alice, bob):
        create_todo(client, alice, "first")
        create_todo(client, alice, "second")
        create_todo(client, bob, "bob's")

        resp = client.get("/todos", headers=alice)
        assert resp.status_code == 200
        assert sorted(t["text"] for t in resp.json()["todos"]) == ["first", "second"]

        resp = client.get("/todos", headers=bob)
        assert [t["text"] for t in resp.json()["todos"]] == ["bob's"]


class TestGet:
    def test_get(self, client, alice):
        todo = create_todo(client, alice, "X")
        resp = client.get(f"/todos/{todo['id']}", headers=alice)
        assert resp.status_code == 200
        assert resp.json()["todo"] == todo

    def test_malformed_id(self, client, alice):
        resp = client.get("/todos/12234", headers=alice)
        assert resp.status_code == 404
        assert resp.content == b""

    def test_unknown_id(self, client, alice):
        resp = client.get(f"/todos/{uuid.uuid4()}", headers=alice)
        assert resp.status_code == 404
        assert resp.content == b""

    def test_other_owner(self, client, alice, bob):
        todo = create_todo(client, alice)
        assert client.get(f"/todos/{todo['id']}", headers=bob).status_code == 404


class TestDelete:
    def test_delete(self, client, alice):
        todo = create_todo(client, alice)
        resp = client.delete(f"/todos/{todo['id']}", headers=alice)
        assert resp.status_code == 200
        assert resp.json()["todo"]["id"] == todo["id"]
        assert client.get(f"/todos/{todo['id']}", headers=alice).status_code == 404

    def test_other_owner_cannot_delete(self, client, alice, bob):
        todo = create_todo(client, alice)
        assert client.delete(f"/todos/{todo['id']}", headers=bob).status_code == 404
        assert client.get(f"/todos/{todo['id']}", headers=alice).status_code == 200

    def test_malformed_id(self, client, alice):
        assert client.delete("/todos/12234", headers=alice).status_code == 404


class TestPatch:
    def test_complete_then_reopen(self, client, alice):
        todo = create_todo(client, alice)

        resp = client.patch(f"/todos/{todo['id']}", json={"completed": True}, headers=alice)
        assert resp.status_code == 200
        done = resp.json()["todo"]
        assert done["completed"] is True
        assert isinstance(done["completedAt"], int)

        resp = client.patch(f"/todos/{todo['id']}", json={"completed": False}, headers=alice)
        reopened = resp.json()["todo"]
        assert reopened["completed"] is False
        assert reopened["completedAt"] is None

    def test_text_patch_and_ignored_fields(self, client, alice):
        todo = create_todo(client, alice, "old", completed=True)
        resp = client.patch(
            f"/todos/{todo['id']}",
            json={"text": "new", "creator": str(uuid.uuid4()), "completedAt": 1},
            headers=alice,
        )
        assert resp.status_code == 200
        updated = resp.json()["todo"]
        assert updated["text"] == "new"
        assert updated["creator"] == todo["creator"]
        assert updated["completed"] is False
        assert updated["completedAt"] is None

    @pytest.mark.parametrize("value", ["true", 1, "yes", "maybe", None])
    def test_non_boolean_completed_is_not_complete(self, client, alice, value):
        todo = create_todo(client, alice, completed=True)
        resp = client.patch(f"/todos/{todo['id']}", json={"completed": value}, headers=alice)
        assert resp.status_code == 200
        updated = resp.json()["todo"]
        assert updated["completed"] is False
        assert updated["completedAt"] is None

    def test_blank_text_rejected(self, client, alice):
        todo = create_todo(client, alice, "keep me")
        resp = client.patch(f"/todos/{todo['id']}", json={"text": "  "}, headers=alice)
        assert resp.status_code == 400
        assert "text" in resp.json()["errors"]
        assert client.get(f"/todos/{todo['id']}", headers=alice).json()["todo"]["text"] == "keep me"

    def test_other_owner(self, client, alice, bob):
        todo = create_todo(client, alice)
        resp = client.patch(f"/todos/{todo['id']}", json={"completed": True}, headers=bob)
        assert resp.status_code == 404
        assert client.get(f"/todos/{todo['id']}", headers=alice).json()["todo"]["completed"] is False

    def test_malformed_id(self, client, alice):
        assert client.patch("/todos/12234", json={"completed": True}, headers=alice).status_code == 404


class TestAmbient:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "database": "ok"}

    def test_trace_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Trace-ID": "trace-123"})
        assert resp.headers["X-Trace-ID"] == "trace-123"

    def test_metrics_endpoint(self, client, alice):
        create_todo(client, alice)
        resp = client.get("/metrics/")
        assert resp.status_code == 200
        assert "todo_store_ops_total" in resp.text

    def test_request_timeout(self, settings):
        settings.REQUEST_TIMEOUT = 0.05
        app = create_app(settings)

        @app.get("/slow")
        async def slow():
            await asyncio.sleep(1)
            return {"ok": True}

        with TestClient(app) as client:
            resp = client.get("/slow")
        assert resp.status_code == 504
