"""
Tests for the REST API routes.

Uses FastAPI TestClient against a real TaskCache with a temp vault.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from fastapi.testclient import TestClient

from tasks_overview.api.app import create_app
from tasks_overview.cache.task_cache import TaskCache
from tasks_overview.store.documents import FileSystemDocumentStore


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_vault(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    vault.mkdir()

    (vault / "Inbox.md").write_text(
        "- [ ] Buy groceries 📅 2030-02-28 #errand\n"
        "- [ ] Call dentist ⏫\n"
        "- [x] File taxes ✅ 2024-01-15\n",
        encoding="utf-8",
    )
    work = vault / "Work"
    work.mkdir()
    (work / "Sprint.md").write_text("* [ ] Ship release 🔺\n", encoding="utf-8")
    return vault


@pytest.fixture
def vault_path(tmp_path):
    return _make_vault(tmp_path)


@pytest.fixture
def client(vault_path):
    cache = TaskCache(FileSystemDocumentStore(vault_path, set()))
    cache.initialize()
    return TestClient(create_app(cache))


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------

class TestBoard:
    def test_default(self, client):
        resp = client.get("/api/board")
        assert resp.status_code == 200
        data = resp.json()
        assert data["view"]["mode"] == "duedate"
        assert [g["key"] for g in data["groups"]] == ["future", "none"]

    def test_priority_sorted_desc(self, client):
        resp = client.get("/api/board", params={"mode": "page", "sort_by": "priority", "sort_dir": "desc"})
        data = resp.json()
        inbox = data["groups"][0]
        assert inbox["label"] == "Inbox"
        assert [t["text"] for t in inbox["tasks"]] == ["Buy groceries #errand", "Call dentist"]

    def test_bad_mode(self, client):
        assert client.get("/api/board", params={"mode": "kanban"}).status_code == 400


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TestTasks:
    def test_list(self, client):
        resp = client.get("/api/tasks", params={"completed": "false"})
        assert resp.status_code == 200
        assert len(resp.json()) == 3

    def test_lookup(self, client):
        resp = client.get("/api/tasks/lookup", params={"ref": "Work/Sprint.md:0"})
        assert resp.status_code == 200
        assert resp.json()["priority"] == "highest"

    def test_lookup_missing(self, client):
        assert client.get("/api/tasks/lookup", params={"ref": "Work/Sprint.md:5"}).status_code == 404

    def test_open(self, client, vault_path):
        resp = client.get("/api/tasks/open", params={"ref": "Work/Sprint.md:0"})
        assert resp.status_code == 200
        assert resp.json()["location"] == str(vault_path / "Work/Sprint.md")

    def test_toggle(self, client, vault_path):
        resp = client.post("/api/tasks/toggle", json={"ref": "Inbox.md:2"})
        assert resp.status_code == 200
        assert resp.json()["task"]["completed"] is False
        assert "- [ ] File taxes\n" in (vault_path / "Inbox.md").read_text(encoding="utf-8")

    def test_toggle_not_found(self, client):
        assert client.post("/api/tasks/toggle", json={"ref": "Inbox.md:9"}).status_code == 404

    def test_toggle_conflict(self, client, vault_path):
        (vault_path / "Inbox.md").write_text("- [ ] Replaced\n", encoding="utf-8")
        resp = client.post("/api/tasks/toggle", json={"ref": "Inbox.md:0"})
        assert resp.status_code == 409

    def test_edit(self, client, vault_path):
        resp = client.post(
            "/api/tasks/edit",
            json={"ref": "Inbox.md:1", "new_line": "- [ ] Call dentist 🔼 📅 2030-01-01"},
        )
        assert resp.status_code == 200
        assert resp.json()["task"]["priority"] == "medium"

    def test_edit_cancelled(self, client):
        resp = client.post("/api/tasks/edit", json={"ref": "Inbox.md:1"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

    def test_edit_empty_line_keeps_task(self, client, vault_path):
        before = (vault_path / "Inbox.md").read_text(encoding="utf-8")
        resp = client.post("/api/tasks/edit", json={"ref": "Inbox.md:1", "new_line": ""})
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"
        assert (vault_path / "Inbox.md").read_text(encoding="utf-8") == before

    def test_create(self, client, vault_path):
        resp = client.post(
            "/api/tasks",
            json={"description": "Write notes", "source_id": "Work/Sprint.md", "due": "2030-03-01"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["line_index"] == 1
        assert data["task"]["due_date"] == "2030-03-01"

    def test_create_bad_input(self, client):
        resp = client.post(
            "/api/tasks",
            json={"description": "Thing", "source_id": "Inbox.md", "due": "soon"},
        )
        assert resp.status_code == 400

    def test_create_missing_document(self, client):
        resp = client.post("/api/tasks", json={"description": "X", "source_id": "Nope.md"})
        assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Documents / cache
# ---------------------------------------------------------------------------

class TestCache:
    def test_documents(self, client):
        data = client.get("/api/documents").json()
        assert [d["source_id"] for d in data] == ["Inbox.md", "Work/Sprint.md"]

    def test_status(self, client):
        data = client.get("/api/cache/status").json()
        assert data["documents_indexed"] == 2
        assert data["tasks_indexed"] == 4

    def test_rebuild(self, client, vault_path):
        (vault_path / "Work" / "Sprint.md").write_text("", encoding="utf-8")
        data = client.post("/api/cache/rebuild").json()
        assert data["tasks_indexed"] == 3
