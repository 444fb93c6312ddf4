from __future__ import annotations

import json
import logging

import pytest

from wardrobe_app.app import build_geolocation, build_slot_store
from wardrobe_app.config import DEFAULT_TEXT_MODEL, WardrobeConfig
from wardrobe_app.logging_config import (
    CORRELATION_ID,
    SCOPE,
    JsonFormatter,
    operation_context,
    redact_for_log,
)
from tools.geolocation import StaticGeolocationProvider, UnavailableGeolocationProvider
from tools.kv_store import InMemoryKeyValueStore, SQLiteKeyValueStore

_ENV_KEYS = (
    "APP_ENV",
    "APP_CONFIG_PATH",
    "GEMINI_API_KEY",
    "TEXT_MODEL",
    "STORAGE_BACKEND",
    "STATIC_LATITUDE",
    "STATIC_LONGITUDE",
    "GEOLOCATION_BACKEND",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_any_configuration() -> None:
    config = WardrobeConfig.from_env()

    assert config.gemini_api_key is None
    assert config.text_model == DEFAULT_TEXT_MODEL
    assert config.storage_backend == "json"
    assert config.weather_timeout_seconds == 5.0
    assert config.geolocation_timeout_seconds == 3.0


def test_yaml_file_then_environment_override(tmp_path, monkeypatch) -> None:
    env_dir = tmp_path / "environments"
    env_dir.mkdir()
    (env_dir / "dev.yaml").write_text(
        "# dev box\n"
        "gemini_api_key: 'from-file'\n"
        "storage_backend: sqlite\n"
        "geolocation_backend: static\n"
        "static_latitude: 31.23\n"
        "static_longitude: 121.47\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("WARDROBE_CONFIG_DIR", str(env_dir))
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("STORAGE_BACKEND", "memory")

    config = WardrobeConfig.from_env()

    assert config.environment == "dev"
    assert config.gemini_api_key == "from-file"
    assert config.storage_backend == "memory"
    assert config.static_latitude == pytest.approx(31.23)
    assert isinstance(build_geolocation(config), StaticGeolocationProvider)


def test_slot_store_backends(tmp_path) -> None:
    assert isinstance(build_slot_store(WardrobeConfig(storage_backend="memory")), InMemoryKeyValueStore)
    sqlite = build_slot_store(WardrobeConfig(storage_backend="sqlite", storage_path=str(tmp_path / "w.db")))
    assert isinstance(sqlite, SQLiteKeyValueStore)
    with pytest.raises(ValueError):
        build_slot_store(WardrobeConfig(storage_backend="cloud"))


def test_geolocation_backends() -> None:
    assert isinstance(build_geolocation(WardrobeConfig(geolocation_backend="none")), UnavailableGeolocationProvider)
    with pytest.raises(ValueError):
        build_geolocation(WardrobeConfig(geolocation_backend="static"))


def test_redaction_scrubs_images_and_personal_text() -> None:
    scrubbed = redact_for_log(
        {
            "image": "data:image/png;base64,AAAA",
            "city": "上海",
            "notes": "data:image/jpeg;base64,BBBB",
            "nested": [{"message": "hi"}, "x" * 300],
            "count": 3,
        }
    )

    assert scrubbed["image"] == "[redacted]"
    assert scrubbed["city"] == "[redacted]"
    assert scrubbed["notes"] == "[redacted-data-url]"
    assert scrubbed["nested"][0]["message"] == "[redacted]"
    assert scrubbed["nested"][1].endswith("...[truncated]")
    assert scrubbed["count"] == 3


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.makeLogRecord(
        {
            "name": "wardrobe.test",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": "wardrobe_item_added",
            "event": "wardrobe_item_added",
            "correlation_id": "abc",
            "item_id": "17",
        }
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["event"] == "wardrobe_item_added"
    assert payload["correlation_id"] == "abc"
    assert payload["item_id"] == "17"
    assert payload["level"] == "INFO"


def test_operation_context_scopes_correlation_id() -> None:
    before = CORRELATION_ID.get()

    with operation_context("test", correlation_id="fixed") as correlation_id:
        assert correlation_id == "fixed"
        assert CORRELATION_ID.get() == "fixed"
        assert SCOPE.get() == "test"

    assert CORRELATION_ID.get() == before
    assert SCOPE.get() is None
