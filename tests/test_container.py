"""Tests for the dependency injection container."""

import asyncio
import json

import httpx
import pytest

from travelsync.application.use_cases.sync_selections import SyncSelectionsCommand
from travelsync.config import load_config
from travelsync.core.time_utils import DAY_MS
from travelsync.di.container import Container
from travelsync.domain.models.selection import Category, Selection, Snapshot, Status
from travelsync.domain.services.engine import SelectionEngine
from travelsync.infrastructure.persistence.sqlite.repositories.selection_blob_repository import (
    SqliteBlobStoreAdapter,
)

_ENV_VARS = (
    "DB_PATH",
    "LOCAL_STORE_KEY",
    "SYNC_TOMBSTONE_RETENTION_DAYS",
    "SYNC_REMOTE_URL",
    "SYNC_REMOTE_API_KEY",
    "SYNC_REMOTE_TIMEOUT_SEC",
    "SYNC_REMOTE_MAX_RETRIES",
    "DB_OPERATION_TIMEOUT",
    "DB_MAX_RETRIES",
    "REFERENCE_DATA_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _config(tmp_path, **sync):
    return load_config(
        runtime={"db_path": str(tmp_path / "local.db"), "local_store_key": "device-1"},
        database={"operation_timeout": 5, "max_retries": 1},
        sync={"tombstone_retention_days": 30, **sync},
    )


class TestContainer:
    """Test suite for Container wiring."""

    def test_engine_uses_configured_retention_and_empty_catalog(self, tmp_path):
        container = Container(_config(tmp_path))

        engine = container.engine()

        assert engine is container.engine()
        assert engine.retention_ms == 30 * DAY_MS
        assert engine.reference.country_codes == frozenset()

    def test_reference_data_is_loaded_from_configured_path(self, tmp_path, monkeypatch):
        path = tmp_path / "places.json"
        document = {
            "countries": [{"code": "FR"}],
            "worldCities": [{"id": "paris-fr", "countryCode": "FR"}],
        }
        path.write_text(json.dumps(document), encoding="utf-8")
        monkeypatch.setenv("REFERENCE_DATA_PATH", str(path))

        container = Container(_config(tmp_path))

        assert container.engine().reference.world_city_countries["paris-fr"] == "FR"

    def test_prebuilt_engine_is_kept(self, tmp_path):
        engine = SelectionEngine(retention_ms=DAY_MS)

        assert Container(_config(tmp_path), engine=engine).engine() is engine

    def test_session_manager_uses_database_settings(self, tmp_path):
        container = Container(_config(tmp_path))
        try:
            session = container.session_manager()

            assert session is container.session_manager()
            assert session.path == str(tmp_path / "local.db")
            assert session.operation_timeout == 5.0
            assert session.max_retries == 1
            assert isinstance(container.blob_store(), SqliteBlobStoreAdapter)
        finally:
            container.close()

    def test_local_use_case_persists_under_configured_key(self, tmp_path):
        snapshot = Snapshot({Category.STATES: (Selection("TX", Status.VISITED, 1000),)})

        async def _save_then_reload():
            first = Container(_config(tmp_path))
            try:
                use_case = first.load_local_selections_use_case()
                assert use_case.store_key == "device-1"
                assert use_case is first.load_local_selections_use_case()
                await use_case.save(snapshot)
            finally:
                first.close()

            second = Container(_config(tmp_path))
            try:
                return await second.load_local_selections_use_case().execute()
            finally:
                second.close()

        assert asyncio.run(_save_then_reload()) == snapshot

    def test_remote_client_is_none_without_url(self, tmp_path):
        assert Container(_config(tmp_path)).remote_client() is None

    def test_remote_client_uses_sync_settings(self, tmp_path):
        container = Container(
            _config(
                tmp_path,
                remote_url="https://sync.example.test/api/",
                remote_api_key="secret",
                remote_timeout_sec=7,
                remote_max_retries=4,
            )
        )

        client = container.remote_client()

        assert client is not None
        assert client.api_url == "https://sync.example.test/api"
        assert client.api_key == "secret"
        assert client.timeout == 7.0
        assert client.max_retries == 4

    def test_sync_use_case_merges_remote_and_persists_locally(self, tmp_path):
        uploads = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(
                    200,
                    json={
                        "userId": "u1",
                        "selections": {
                            "countries": [{"id": "MX", "status": "visited", "updatedAt": 3000}]
                        },
                    },
                )
            uploads.append(json.loads(request.content))
            return httpx.Response(200, json={})

        container = Container(
            _config(tmp_path, remote_url="https://sync.example.test", remote_max_retries=0),
            remote_transport=httpx.MockTransport(handler),
        )
        local = Snapshot({Category.COUNTRIES: (Selection("CA", Status.BUCKET_LIST, 2000),)})

        async def _sync():
            async with container.remote_client() as remote:
                use_case = container.sync_selections_use_case(remote)
                outcome = await use_case.execute(SyncSelectionsCommand(user_id="u1", local=local))
            stored = await container.load_local_selections_use_case().execute()
            return outcome, stored

        try:
            outcome, stored = asyncio.run(_sync())
        finally:
            container.close()

        assert outcome.success
        assert outcome.uploaded
        assert [item.id for item in stored.items(Category.COUNTRIES)] == ["CA", "MX"]
        assert [item["id"] for item in uploads[0]["selections"]["countries"]] == ["CA", "MX"]
