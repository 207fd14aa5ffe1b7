"""Tests for category routes and the health check."""

from unittest.mock import MagicMock

from lib.store import StoreError, StoreErrorKind
from server.deps import get_store


class TestCategories:
    def test_list(self, test_client):
        client, _ = test_client
        resp = client.get("/api/categories")
        assert resp.status_code == 200
        by_id = {c["id"]: c["name"] for c in resp.json()["categories"]}
        assert by_id == {"healing": "Healing", "faith": "Faith", "provision": "Provision"}

    def test_store_failure(self, test_client):
        client, _ = test_client
        from server.app import app

        store = MagicMock()
        store.list_categories.side_effect = StoreError(StoreErrorKind.UNAVAILABLE, "down")
        app.dependency_overrides[get_store] = lambda: store

        resp = client.get("/api/categories")
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Failed to fetch categories"


class TestHealth:
    def test_health(self, test_client):
        client, _ = test_client
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["version"] == "1.1.0"
