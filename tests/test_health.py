"""
Tests for health check endpoints.
"""
from blogapp.errors import BackendUnavailable


class TestHealth:
    def test_live(self, client):
        response = client.get("/api/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_root_health_alias(self, client):
        assert client.get("/api/health").json()["ok"] is True

    def test_ready(self, client, repository):
        body = client.get("/api/health/ready").json()
        assert body["ok"] is True
        assert body["checks"]["blog_store"]["backend"] == "MemoryBlogsRepository"

    def test_ready_reports_store_failure(self, client, repository, monkeypatch):
        def broken(*args):
            raise BackendUnavailable("Blog store unavailable")

        monkeypatch.setattr(repository, "list_page", broken)

        body = client.get("/api/health/ready").json()
        assert body["ok"] is False
        assert body["status"] == "not_ready"
        assert body["checks"]["blog_store"]["error"] == "Blog store unavailable"
