import pytest
from fastapi.testclient import TestClient

from paradesk.db.database import open_database
from paradesk.server.local_server import app_setup


@pytest.fixture
def client(tmp_path):
    db = open_database(tmp_path / "paradesk.db")
    with TestClient(app_setup(db)) as client:
        yield client
    db.close()


def test_parse_markdown_tasks_camel_case(client):
    markdown = (
        "- [ ] Buy milk [pinned]\n"
        "- [x] Send report [截止:2024-05-01]\n"
        "  - [ ] Attach file\n"
    )
    response = client.post("/api/parse-markdown-tasks", json={"content": markdown})
    assert response.status_code == 200
    tasks = response.json()
    assert tasks[0] == {
        "id": "task-0",
        "content": "Buy milk",
        "isCompleted": False,
        "isPinned": True,
        "dueDate": None,
        "children": [],
    }
    assert tasks[1]["id"] == "task-1"
    assert tasks[1]["isCompleted"] is True
    assert tasks[1]["dueDate"] == "2024-05-01"
    assert [child["id"] for child in tasks[1]["children"]] == ["task-2"]


def test_task_progress(client):
    response = client.post(
        "/api/task-progress", json={"content": "- [x] a\n  - [ ] b\n- [x] c\n- [ ] d\n"}
    )
    assert response.json() == {"total": 4, "completed": 2, "fraction": 0.5}


def test_task_lists_and_pinned_tasks(client):
    work = client.post("/api/create-task-list", json={"name": "Work"}).json()
    home = client.post("/api/create-task-list", json={"name": "Home"}).json()
    client.post(
        "/api/update-task-list-content",
        json={"id": work["id"], "content": "- [ ] Plan\n  - [x] Draft [pinned]\n"},
    )
    client.post(
        "/api/update-task-list-content",
        json={"id": home["id"], "content": "- [ ] Water plants [pinned]\n"},
    )
    assert client.post(
        "/api/update-task-lists-order", json={"ordered_ids": [home["id"], work["id"]]}
    ).json()

    names = [tl["name"] for tl in client.post("/api/get-task-lists").json()]
    assert names == ["Home", "Work"]

    pinned = client.post("/api/pinned-tasks").json()
    assert [(t["content"], t["sourceList"]) for t in pinned["tasks"]] == [
        ("Water plants", "Home"),
        ("Draft", "Work"),
    ]
    assert pinned["progress"]["total"] == 2
    assert pinned["progress"]["completed"] == 1


def test_settings_and_notes(client):
    client.post("/api/set-theme", json={"theme": "dark"})
    assert client.post("/api/get-theme").json() == "dark"
    client.post("/api/set-mit", json={"content": "Finish taxes"})
    assert client.post("/api/get-mit").json() == "Finish taxes"
    client.post("/api/set-last-path-for-mode", json={"mode": "notes", "path": "/tmp/notes"})
    last_path = client.post("/api/get-last-path-for-mode", json={"mode": "notes"}).json()
    assert last_path == "/tmp/notes"

    note = client.post("/api/add-scratchpad-note", json={"content": "idea"}).json()
    assert note["content"] == "idea"
    notes = client.post("/api/get-scratchpad-notes").json()
    assert [n["id"] for n in notes] == [note["id"]]
    assert client.post("/api/delete-scratchpad-note", json={"id": note["id"]}).json() is True


def test_calendar_events(client):
    event = client.post(
        "/api/create-calendar-event",
        json={"date": "2025-02-01", "title": "Taxes", "is_urgent_pin": True},
    ).json()
    assert event["date"] == "2025-02-01"
    client.post("/api/create-calendar-event", json={"date": "2025-03-01", "title": "Trip"})

    in_range = client.post(
        "/api/get-calendar-events", json={"start_date": "2025-02-15", "end_date": "2025-03-31"}
    ).json()
    assert [e["title"] for e in in_range] == ["Trip"]
    assert [e["title"] for e in client.post("/api/get-pinned-calendar-events").json()] == [
        "Taxes"
    ]

    updated = client.post(
        "/api/update-calendar-event", json={"id": event["id"], "is_urgent_pin": False}
    ).json()
    assert updated["is_urgent_pin"] is False
    assert client.post("/api/get-pinned-calendar-events").json() == []


def test_files(client, tmp_path):
    root = tmp_path / "notes"
    root.mkdir()
    created = client.post(
        "/api/create-file",
        json={"parentDir": str(root), "name": "todo.md", "rootPath": str(root)},
    ).json()
    assert created["newPath"] == str(root / "todo.md")
    assert created["files"][0]["isDirectory"] is False

    client.post("/api/save-file", json={"filePath": created["newPath"], "content": "- [ ] a\n"})
    read = client.post("/api/read-file", json={"filePath": created["newPath"]}).json()
    assert read == {"content": "- [ ] a\n", "isBinary": False, "mimeType": None}

    listing = client.post("/api/get-files", json={"directoryPath": str(root)}).json()
    assert listing["folderName"] == "notes"
    assert [f["name"] for f in listing["files"]] == ["todo.md"]


def test_error_status_codes(client, tmp_path):
    response = client.post("/api/read-file", json={"filePath": str(tmp_path / "missing.md")})
    assert response.status_code == 404

    response = client.post("/api/get-task-list", json={"id": 999})
    assert response.status_code == 404

    response = client.post("/api/create-task-list", json={"name": "  "})
    assert response.status_code == 400
    assert "Invalid input" in response.json()["message"]

    response = client.post("/api/set-theme", json={"theme": "purple"})
    assert response.status_code == 400


def test_unexpected_errors_are_generic_500(tmp_path):
    db = open_database(tmp_path / "paradesk.db")
    app = app_setup(db)

    @app.post("/api/always-fails")
    def always_fails():
        raise RuntimeError("database file is locked at /secret/path")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.post("/api/always-fails")
        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error."}

        # Other channels keep working afterwards.
        assert client.post("/api/get-theme").status_code == 200
    db.close()
