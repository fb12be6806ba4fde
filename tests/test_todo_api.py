from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from src.server.app import create_app, get_lifecycle_manager


def create_test_client(tmp_path, monkeypatch) -> TestClient:
    db_path = tmp_path / "api_todos.db"
    monkeypatch.setenv("TASK_TRACKER_DB_PATH", str(db_path))
    get_lifecycle_manager.cache_clear()
    app = create_app()
    return TestClient(app)


def test_health(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_todo_api_crud_flow(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)

    resp = client.get("/api/todos")
    assert resp.status_code == 200
    assert resp.json() == []

    create_payload = {
        "title": "Prepare slides",
        "due_date": "2025-12-10",
        "category": "school",
    }
    resp = client.post("/api/todos", json=create_payload)
    assert resp.status_code == 201
    todo = resp.json()
    assert todo["title"] == create_payload["title"]
    assert todo["completed"] is False
    assert todo["deleted_at"] is None
    todo_id = todo["id"]

    resp = client.patch(f"/api/todos/{todo_id}", json={"due_date": None, "title": "Slides v2"})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["title"] == "Slides v2"
    assert updated["due_date"] is None
    assert updated["category"] == "school"
    assert updated["updated_at"] is not None

    resp = client.patch(f"/api/todos/{todo_id}/toggle")
    assert resp.status_code == 200
    assert resp.json()["completed"] is True

    resp = client.get(f"/api/todos/{todo_id}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Slides v2"

    resp = client.get("/api/todos", params={"status": "completed"})
    assert [item["id"] for item in resp.json()] == [todo_id]
    resp = client.get("/api/todos", params={"status": "active"})
    assert resp.json() == []


def test_recycle_bin_flow(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)
    todo_id = client.post("/api/todos", json={"title": "Buy milk"}).json()["id"]

    resp = client.patch(f"/api/todos/{todo_id}/recycle")
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is not None
    assert client.get("/api/todos").json() == []

    recycled = client.get("/api/todos/recycled").json()
    assert [item["id"] for item in recycled] == [todo_id]

    resp = client.patch(f"/api/todos/{todo_id}/restore")
    assert resp.status_code == 200
    restored = resp.json()
    assert restored["deleted_at"] is None
    assert restored["restored_at"] is not None
    assert client.get("/api/todos/recycled").json() == []

    client.patch(f"/api/todos/{todo_id}/recycle")
    resp = client.delete(f"/api/todos/{todo_id}")
    assert resp.status_code == 200
    assert resp.json()["id"] == todo_id
    assert client.get("/api/todos/recycled").json() == []
    assert client.get("/api/todos").json() == []


def test_not_found_and_validation_errors(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)
    todo_id = client.post("/api/todos", json={"title": "Active task"}).json()["id"]

    assert client.get("/api/todos/missing").status_code == 404
    assert client.patch("/api/todos/missing/toggle").status_code == 404
    assert client.patch("/api/todos/missing/restore").status_code == 404
    # permanent delete only applies to the recycle bin
    assert client.delete(f"/api/todos/{todo_id}").status_code == 404
    assert [item["id"] for item in client.get("/api/todos").json()] == [todo_id]

    resp = client.post("/api/todos", json={"title": "   "})
    assert resp.status_code == 422
    resp = client.patch(f"/api/todos/{todo_id}", json={"title": ""})
    assert resp.status_code == 422


def test_cleanup_and_empty_bin(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)
    manager = get_lifecycle_manager()
    old_id = client.post("/api/todos", json={"title": "old"}).json()["id"]
    new_id = client.post("/api/todos", json={"title": "new"}).json()["id"]

    now = datetime.now(timezone.utc)
    manager.clock = lambda: now - timedelta(days=31)
    client.patch(f"/api/todos/{old_id}/recycle")
    manager.clock = lambda: now
    client.patch(f"/api/todos/{new_id}/recycle")

    resp = client.delete("/api/todos/cleanup")
    assert resp.status_code == 200
    assert resp.json()["removed_count"] == 1
    assert [item["id"] for item in client.get("/api/todos/recycled").json()] == [new_id]

    resp = client.delete("/api/todos/recycled")
    assert resp.status_code == 200
    assert resp.json()["removed_count"] == 1
    assert client.get("/api/todos/recycled").json() == []


def test_due_dates_and_filters(tmp_path, monkeypatch):
    client = create_test_client(tmp_path, monkeypatch)
    client.post("/api/todos", json={"title": "a", "due_date": "2025-05-02", "category": "home"})
    client.post("/api/todos", json={"title": "b", "due_date": "2025-05-01"})
    client.post("/api/todos", json={"title": "c"})

    assert client.get("/api/todos/dates").json() == {"dates": ["2025-05-01", "2025-05-02"]}
    home = client.get("/api/todos", params={"category": "home"}).json()
    assert [item["title"] for item in home] == ["a"]
    due = client.get("/api/todos", params={"due_date": "2025-05-01"}).json()
    assert [item["title"] for item in due] == ["b"]


def test_unwritable_storage_maps_to_500(tmp_path, monkeypatch):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    monkeypatch.setenv("TASK_TRACKER_DB_PATH", str(blocker / "todo.db"))
    get_lifecycle_manager.cache_clear()
    client = TestClient(create_app())

    try:
        resp = client.get("/api/todos")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Failed to list todos"}
    finally:
        get_lifecycle_manager.cache_clear()
