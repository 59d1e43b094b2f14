import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from sarnews.api import create_app
from sarnews.config import Config, ConfigModel
from sarnews.health import ErrorReporter
from sarnews.ingestion import FetchOutcome, SourceOutcome
from sarnews.pipeline import RefreshOrchestrator
from sarnews.translation import MockTranslator, TranslationBackfill

CRON_SECRET = "cron-secret"
ADMIN_TOKEN = "admin-token"


@pytest.fixture
def worker():
    outcome = FetchOutcome()
    outcome.add(SourceOutcome(source_name="Borneo Post", total=4, relevant=3, added=3))
    for i in range(3):
        outcome.add(SourceOutcome(source_name=f"Feed {i}", success=False, error=f"Failed to fetch Feed {i}: HTTP 500"))

    worker = MagicMock()
    worker.ingest_all = AsyncMock(return_value=outcome)
    return worker


@pytest.fixture
def config(monkeypatch):
    monkeypatch.setenv("CRON_SECRET", CRON_SECRET)
    monkeypatch.setenv("ADMIN_TOKEN", ADMIN_TOKEN)
    return Config.from_model(ConfigModel(refresh={"max_errors_in_response": 2}))


@pytest.fixture
def orchestrator(storage, worker, clock):
    backfill = TranslationBackfill(storage, MockTranslator(), delay_seconds=0)
    return RefreshOrchestrator(storage, worker, backfill=backfill, reporter=ErrorReporter(storage), clock=clock)


@pytest.fixture
def client(config, orchestrator):
    with TestClient(create_app(config, orchestrator)) as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestCronRefresh:
    def test_requires_bearer_secret(self, client, worker):
        response = client.get("/api/cron/refresh", headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401
        worker.ingest_all.assert_not_called()

    def test_missing_header(self, client):
        assert client.get("/api/cron/refresh").status_code == 401

    def test_unconfigured_secret(self, client, monkeypatch):
        monkeypatch.delenv("CRON_SECRET")

        response = client.get("/api/cron/refresh", headers={"Authorization": "Bearer anything"})

        assert response.status_code == 500

    def test_runs_refresh(self, client, storage):
        response = client.get("/api/cron/refresh", headers={"Authorization": f"Bearer {CRON_SECRET}"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "warning"
        assert body["added"] == 3
        assert body["total"] == 4
        assert len(body["errors"]) == 2
        assert body["refreshedAt"] == "2025-10-06T08:00:00Z"
        assert storage.metadata["last_cron_refresh"] == "2025-10-06T08:00:00Z"


class TestPublicRefresh:
    def test_second_call_is_throttled(self, client, worker):
        assert client.post("/api/refresh").status_code == 200

        response = client.post("/api/refresh")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "600"
        assert response.json() == {"error": "Refresh throttled", "retryAfter": 600}
        assert worker.ingest_all.await_count == 1

    def test_cooldown_expires(self, client, clock):
        client.post("/api/refresh")
        clock.advance(minutes=10)

        assert client.post("/api/refresh").status_code == 200

    def test_storage_outage_is_503(self, client, storage):
        storage.unavailable = True

        response = client.post("/api/refresh")

        assert response.status_code == 503
        assert response.json()["success"] is False


class TestAdmin:
    def test_refresh_requires_token(self, client):
        assert client.post("/api/admin/refresh").status_code == 401
        assert client.post("/api/admin/refresh", headers={"X-Admin-Token": "nope"}).status_code == 401

    def test_refresh_bypasses_cooldown(self, client, worker):
        client.post("/api/refresh")

        response = client.post("/api/admin/refresh", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 200
        assert worker.ingest_all.await_count == 2

    def test_translate(self, client, storage):
        storage.add_article("Kuching bridge opens", "https://example.com/a")
        storage.add_article("Sibu market reopens", "https://example.com/b")

        response = client.post("/api/admin/translate", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 200
        assert response.json() == {"success": True, "translated": 2}

    def test_feed_health(self, client, storage):
        storage.add_source("Dayak Daily", "https://dayak.example.com/feed/", error_count=3, last_error="HTTP 500")

        response = client.get("/api/admin/feeds/health", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 200
        body = response.json()
        assert body["healthy"] is False
        assert body["error_feeds"][0]["name"] == "Dayak Daily"
        assert body["stale_feeds"][0]["name"] == "Dayak Daily"
        assert body["stale_feeds"][0]["last_success_at"] is None


def test_status(client, clock):
    before = client.get("/api/refresh/status").json()
    assert before["lastRefresh"] is None
    assert before["retryAfter"] == 0

    client.post("/api/refresh")
    clock.advance(minutes=4)

    after = client.get("/api/refresh/status").json()
    assert after["lastRefresh"] == "2025-10-06T08:00:00Z"
    assert after["status"] == "warning"
    assert after["errorCount"] == 3
    assert after["retryAfter"] == 360
    assert after["running"] is False


def _called_inside_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def test_database_reads_run_off_the_event_loop(client, storage):
    seen = []
    get_metadata_many = storage.get_metadata_many
    list_sources = storage.list_sources

    def recording_metadata(keys):
        seen.append(("metadata", _called_inside_event_loop()))
        return get_metadata_many(keys)

    def recording_sources():
        seen.append(("sources", _called_inside_event_loop()))
        return list_sources()

    storage.get_metadata_many = recording_metadata
    storage.list_sources = recording_sources

    assert client.get("/api/refresh/status").status_code == 200
    assert client.get("/api/admin/feeds/health", headers={"X-Admin-Token": ADMIN_TOKEN}).status_code == 200
    assert seen == [("metadata", False), ("sources", False)]
