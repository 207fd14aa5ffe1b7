"""Shared test fixtures for the testimony library tests."""

from datetime import datetime, timezone

import pytest

from lib.store import CATEGORIES, CLIPS, MemoryStore

ADMIN_TOKEN = "test-admin-token"


def _ts(day: str) -> datetime:
    return datetime.fromisoformat(f"{day}T10:00:00+00:00")


@pytest.fixture
def sample_clip_docs():
    """Stored clip documents, written the way different app versions wrote them."""
    return {
        "clip_a": {
            "sourceVideoId": "vidA",
            "title": "Healed from migraines",
            "categoryId": "healing",
            "episode": "EP001",
            "serviceDate": "2025-01-05",
            "savedCount": 3,
            "startTimeSeconds": 60,
            "endTimeSeconds": 180,
            "createdAt": _ts("2025-01-05"),
        },
        "clip_b": {
            "videoId": "vidB",
            "titleShort": "New job after a year",
            "categoryId": "healing",
            "episode": "EP002",
            "serviceDate": "2025-02-02",
            "savedCount": 10,
            "startSec": 300,
            "endSec": 420,
            "createdAt": "2025-02-02T10:00:00Z",
        },
        "clip_c": {
            "video_id": "vidC",
            "titleShort": "Visa approved",
            "summaryShort": "A family shares how their visa came through.",
            "thumbUrl": "https://cdn.example.com/c.jpg",
            "categoryId": "faith",
            "episode": "EP003",
            "serviceDate": "2025-02-16",
            "savedCount": 1,
            "startTimeSeconds": 30,
            "endTimeSeconds": 95,
            "createdAt": _ts("2025-02-16"),
        },
        "clip_d": {
            "sourceVideoId": "vidD",
            "title": "Restored marriage",
            "categoryId": "faith",
            "episode": "EP007",
            "serviceDate": "2025-03-09",
            "savedCount": 7,
            "startTimeSeconds": 1200,
            "endTimeSeconds": 1500,
            "status": "live",
            "createdAt": _ts("2025-03-09"),
        },
        "clip_e": {
            "sourceVideoId": "vidE",
            "title": "Special service",
            "categoryId": "healing",
            "episode": "Special",
            "serviceDate": "2025-03-23",
            "savedCount": 0,
            "startTimeSeconds": 10,
            "endTimeSeconds": 70,
            "createdAt": _ts("2025-03-23"),
        },
        "clip_f": {
            "sourceVideoId": "vidF",
            "title": "Provision in lockdown",
            "categoryId": "provision",
            "episode": "EP010",
            "serviceDate": "2024-02-29",
            "savedCount": 5,
            "startTimeSeconds": 10830,
            "endTimeSeconds": 10950,
            "createdAt": _ts("2024-02-29"),
        },
    }


@pytest.fixture
def sample_categories():
    return {
        "healing": {"name": "Healing"},
        "faith": {"name": "Faith"},
        "provision": {"name": "Provision"},
    }


@pytest.fixture
def memory_store(sample_clip_docs, sample_categories):
    return MemoryStore({CLIPS: sample_clip_docs, CATEGORIES: sample_categories})


@pytest.fixture
def test_client(memory_store, monkeypatch):
    """TestClient wired to the in-memory store, with an admin token configured."""
    monkeypatch.setenv("ADMIN_API_TOKEN", ADMIN_TOKEN)
    monkeypatch.setenv("TESTIMONY_STORE", "memory")

    from fastapi.testclient import TestClient
    from server.app import app
    from server.deps import get_store

    app.dependency_overrides[get_store] = lambda: memory_store
    app.state.title_overrides = None
    client = TestClient(app)

    yield client, memory_store

    app.dependency_overrides.clear()
    app.state.title_overrides = None


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
