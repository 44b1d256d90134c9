# tests/test_api.py

from __future__ import annotations

from fastapi.testclient import TestClient

from minithings.api.server import create_app
from minithings.core.state import AppState


def _create(client: TestClient, title: str, **extra) -> dict:
    resp = client.post("/api/tasks", json={"title": title, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()["task"]


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers["cache-control"] == "no-store"


def test_create_list_and_complete_flow(client: TestClient) -> None:
    _create(client, "Existing")
    task = _create(client, "Buy milk")
    assert task["tags"] == ["General"]
    assert task["done"] is False
    assert task["order"] == 1
    assert set(task) == {"id", "title", "description", "tags", "done", "order", "createdAt", "updatedAt"}

    resp = client.put(f"/api/tasks/{task['id']}", json={"done": True})
    assert resp.status_code == 200
    assert resp.json()["task"]["done"] is True

    tasks = client.get("/api/tasks").json()["tasks"]
    assert [t["title"] for t in tasks] == ["Existing", "Buy milk"]

    entries = client.get("/api/logbook").json()["entries"]
    assert len(entries) == 1
    assert entries[0]["type"] == "task_completed"
    assert entries[0]["data"]["taskId"] == task["id"]


def test_validation_errors_are_400(client: TestClient) -> None:
    resp = client.post("/api/tasks", json={"title": "  "})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Title is required."}

    resp = client.post("/api/tasks/reorder", json={"taskIds": "nope"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "taskIds must be an array."}

    resp = client.post("/api/tags/delete", json={})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Tag is required."}

    resp = client.post(
        "/api/tasks",
        content=b"{broken",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON body."}


def test_description_indentation_survives_reload(client: TestClient) -> None:
    task = _create(client, "Snippet", description="  indented\n    deeper")
    assert task["description"] == "  indented\n    deeper"

    listed = client.get("/api/tasks").json()["tasks"]
    assert listed[0]["description"] == "  indented\n    deeper"


def test_overflowing_order_is_400(client: TestClient) -> None:
    task = _create(client, "t")
    resp = client.put(
        f"/api/tasks/{task['id']}",
        content=b'{"order": 1e400}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "order must be an integer."}
    assert resp.headers["cache-control"] == "no-store"


def test_missing_task_is_404(client: TestClient) -> None:
    resp = client.put("/api/tasks/does-not-exist", json={"title": "x"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Task not found."}

    resp = client.delete("/api/tasks/does-not-exist")
    assert resp.status_code == 404


def test_unknown_route_and_wrong_method(client: TestClient) -> None:
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert "error" in resp.json()

    resp = client.patch("/api/tasks")
    assert resp.status_code == 405
    assert "error" in resp.json()

    resp = client.put("/api/tasks/completed", json={"title": "x"})
    assert resp.status_code == 405
    assert resp.headers["allow"] == "DELETE"
    assert "error" in resp.json()

    resp = client.delete("/api/tasks/reorder")
    assert resp.status_code == 405
    assert resp.headers["allow"] == "POST"


def test_delete_task_and_completed(client: TestClient) -> None:
    a = _create(client, "a")
    b = _create(client, "b", done=True)
    c = _create(client, "c")

    resp = client.delete(f"/api/tasks/{a['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}

    resp = client.delete("/api/tasks/completed")
    assert resp.status_code == 200
    body = resp.json()
    assert body["deletedCount"] == 1
    assert [t["id"] for t in body["tasks"]] == [c["id"]]

    types = [e["type"] for e in client.get("/api/logbook").json()["entries"]]
    assert sorted(types) == ["completed_tasks_deleted", "task_deleted"]
    assert b["id"] not in {t["id"] for t in client.get("/api/tasks").json()["tasks"]}


def test_reorder_endpoint(client: TestClient) -> None:
    ids = [_create(client, name)["id"] for name in ("one", "two", "three")]

    resp = client.post("/api/tasks/reorder", json={"taskIds": [ids[2], ids[0]]})

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tasks"]] == [ids[2], ids[0], ids[1]]


def test_delete_tag_everywhere_endpoint(client: TestClient) -> None:
    _create(client, "a", tags=["Work", "Home"])
    _create(client, "b", tags=["Work"])
    _create(client, "c", tags=["Home"])

    resp = client.post("/api/tags/delete", json={"tag": " work "})

    assert resp.status_code == 200
    body = resp.json()
    assert body["deletedTag"] == "work"
    assert body["changedCount"] == 2
    assert [t["tags"] for t in body["tasks"]] == [["Home"], ["General"], ["Home"]]

    entries = client.get("/api/logbook").json()["entries"]
    types = [e["type"] for e in entries]
    assert types.count("tag_removed_from_task") == 2
    assert types.count("tag_deleted_everywhere") == 1


def test_clear_logbook(client: TestClient) -> None:
    task = _create(client, "x")
    client.put(f"/api/tasks/{task['id']}", json={"done": True})
    assert client.get("/api/logbook").json()["entries"]

    resp = client.delete("/api/logbook")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "entries": []}
    assert client.get("/api/logbook").json()["entries"] == []


def test_unexpected_errors_are_500(state: AppState) -> None:
    class BrokenStore:
        def list_tasks(self):
            raise RuntimeError("disk on fire")

    state.task_store = BrokenStore()  # type: ignore[assignment]
    client = TestClient(create_app(state), raise_server_exceptions=False)

    resp = client.get("/api/tasks")

    assert resp.status_code == 500
    assert resp.json() == {"error": "disk on fire"}
    assert resp.headers["cache-control"] == "no-store"


def test_ui_is_served_when_enabled(state: AppState) -> None:
    state.settings.serve_ui = True
    client = TestClient(create_app(state))

    resp = client.get("/")
    assert resp.status_code == 200
    assert "MiniThings" in resp.text

    assert client.get("/api/health").json() == {"ok": True}
