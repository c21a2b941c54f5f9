"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from shared.config import get_settings


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("GORIDES_STORAGE_BACKEND", "supabase")
    monkeypatch.setenv("GORIDES_SUPABASE_URL", "")
    get_settings.cache_clear()
    return TestClient(create_app())


class TestHealthEndpoints:
    def test_health_check(self, client):
        """Health endpoint should return 200 with status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": "0.1.0"}

    def test_readiness_reports_missing_supabase_config(self, client):
        response = client.get("/api/ready")
        assert response.status_code == 200
        assert response.json() == {
            "status": "not_configured",
            "storage": "not_configured",
            "auth": "not_configured",
        }

    def test_readiness_in_memory_mode(self, client, monkeypatch):
        monkeypatch.setenv("GORIDES_STORAGE_BACKEND", "memory")
        get_settings.cache_clear()

        data = client.get("/api/ready").json()
        assert data == {"status": "ready", "storage": "memory", "auth": "memory"}

    def test_readiness_with_supabase_config(self, client, monkeypatch):
        monkeypatch.setenv("GORIDES_SUPABASE_URL", "https://test.supabase.co")
        monkeypatch.setenv("GORIDES_SUPABASE_ANON_KEY", "anon")
        monkeypatch.setenv("GORIDES_SUPABASE_SERVICE_ROLE_KEY", "service")
        monkeypatch.setenv("GORIDES_SUPABASE_JWT_SECRET", "secret")
        get_settings.cache_clear()

        assert client.get("/api/ready").json()["status"] == "ready"
