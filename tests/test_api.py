"""Tests for the journal HTTP API."""

import base64

import pytest
from fastapi.testclient import TestClient

from aisummary.app import create_app
from aisummary.services import LogStore


@pytest.fixture
def make_client(settings, reply_with):
    def _factory(transport=None):
        app = create_app(settings, transport=transport or reply_with("# Report"))
        return TestClient(app)

    return _factory


def _create(client, content="fixed bug A", date="2025-02-10T09:00:00Z", **extra):
    response = client.post("/api/v1/entries", json={"content": content, "date": date, **extra})
    assert response.status_code == 201
    return response.json()


class TestMeta:
    def test_health(self, make_client):
        with make_client() as client:
            response = client.get("/api/v1/health")
        assert response.json() == {"ok": True, "service": "aisummary", "version": "0.2.0"}

    def test_meta_lists_endpoints(self, make_client):
        with make_client() as client:
            endpoints = client.get("/api/v1/meta").json()["endpoints"]
        assert "/api/v1/entries" in endpoints
        assert "/api/v1/entries/{entry_id}" in endpoints
        assert "/api/v1/reports" in endpoints
        assert "/api/v1/meta" in endpoints


class TestEntries:
    def test_create_list_and_get(self, make_client):
        with make_client() as client:
            created = _create(client, imageData=[base64.b64encode(b"png").decode()])
            listed = client.get("/api/v1/entries").json()["entries"]
            fetched = client.get(f"/api/v1/entries/{created['id']}").json()

        assert created["category"] == "daily"
        assert created["imageData"] == ["cG5n"]
        assert [entry["id"] for entry in listed] == [created["id"]]
        assert fetched["content"] == "fixed bug A"

    def test_entries_survive_restart(self, make_client, settings):
        with make_client() as client:
            _create(client, content="persisted")

        with make_client() as client:
            listed = client.get("/api/v1/entries").json()["entries"]
        assert [entry["content"] for entry in listed] == ["persisted"]

    def test_category_filter(self, make_client):
        with make_client() as client:
            _create(client, content="day")
            _create(client, content="week", category="weekly")
            weekly = client.get("/api/v1/entries", params={"category": "weekly"}).json()["entries"]
        assert [entry["content"] for entry in weekly] == ["week"]

    def test_partial_update(self, make_client):
        with make_client() as client:
            created = _create(client)
            response = client.put(f"/api/v1/entries/{created['id']}", json={"content": "fixed bug B"})
        updated = response.json()
        assert response.status_code == 200
        assert updated["content"] == "fixed bug B"
        assert updated["date"] == created["date"]
        assert updated["id"] == created["id"]

    def test_delete(self, make_client):
        with make_client() as client:
            created = _create(client)
            response = client.delete(f"/api/v1/entries/{created['id']}")
            remaining = client.get("/api/v1/entries").json()["entries"]
        assert response.json() == {"ok": True, "id": created["id"]}
        assert remaining == []

    def test_unknown_entry_is_404(self, make_client):
        with make_client() as client:
            response = client.get("/api/v1/entries/missing")
            update = client.put("/api/v1/entries/missing", json={"content": "x"})
            delete = client.delete("/api/v1/entries/missing")
        assert response.status_code == 404
        assert response.json()["ok"] is False
        assert update.status_code == 404
        assert delete.status_code == 404

    def test_image_attach_and_detach(self, make_client):
        with make_client() as client:
            created = _create(client)
            attached = client.post(
                f"/api/v1/entries/{created['id']}/images",
                json={"images": [base64.b64encode(b"a").decode(), base64.b64encode(b"b").decode()]},
            ).json()
            detached = client.delete(f"/api/v1/entries/{created['id']}/images/0").json()
            missing = client.delete(f"/api/v1/entries/{created['id']}/images/9")
        assert len(attached["imageData"]) == 2
        assert detached["imageData"] == [base64.b64encode(b"b").decode()]
        assert missing.status_code == 404

    def test_invalid_image_payload_is_422(self, make_client):
        with make_client() as client:
            response = client.post("/api/v1/entries", json={"content": "x", "imageData": ["%%%"]})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"


class TestReports:
    def test_generate_weekly_report(self, make_client, settings, reply_with):
        transport = reply_with("<think>ok</think>\n```markdown\n# Report\n...\n```")
        with make_client(transport) as client:
            _create(client, content="fixed bug A", date="2025-02-10T09:00:00Z")
            _create(client, content="reviewed PR", date="2025-02-11T09:00:00Z")
            response = client.post("/api/v1/reports", json={"kind": "weekly"})
            weekly = client.get("/api/v1/entries", params={"category": "weekly"}).json()["entries"]

        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        assert body["text"] == "# Report\n..."
        assert body["path"].endswith("_weekly_report.md")
        assert [entry["id"] for entry in weekly] == [body["entry_id"]]
        sent = transport.json_bodies()[0]["messages"][1]["content"]
        assert sent == "2025-02-10: fixed bug A\n2025-02-11: reviewed PR"

    def test_remote_failure_is_data_not_http_error(self, make_client, reply_with):
        with make_client(reply_with(status_code=502, body={"error": "bad gateway"})) as client:
            _create(client)
            response = client.post("/api/v1/reports", json={"kind": "weekly"})
            status = client.get("/api/v1/reports/status").json()

        assert response.status_code == 200
        assert response.json()["ok"] is False
        assert "502" in response.json()["message"]
        assert status == {"busy": False}

    def test_busy_generator_returns_409(self, make_client):
        with make_client() as client:
            client.app.state.report_generator._busy = True
            response = client.post("/api/v1/reports", json={"kind": "weekly"})
        assert response.status_code == 409
        assert response.json()["ok"] is False

    def test_inverted_window_is_422(self, make_client):
        with make_client() as client:
            response = client.post(
                "/api/v1/reports", json={"kind": "weekly", "since": "2025-02-11", "until": "2025-02-10"}
            )
        assert response.status_code == 422


def test_store_saved_on_shutdown(make_client, settings):
    with make_client() as client:
        store: LogStore = client.app.state.log_store
        _create(client)
    assert settings.data_path.exists()
    assert len(store) == 1


def test_undecodable_journal_starts_empty(settings, reply_with):
    settings.data_path.parent.mkdir(parents=True, exist_ok=True)
    settings.data_path.write_bytes(b"\xff\xfe\x00garbage")

    with TestClient(create_app(settings, transport=reply_with("# Report"))) as client:
        response = client.get("/api/v1/entries")

    assert response.status_code == 200
    assert response.json()["entries"] == []
