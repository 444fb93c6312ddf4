from __future__ import annotations

from typing import List

import pytest

from models.taxonomy import WeatherCondition
from models.weather import WeatherSnapshot
from tests.fakes import FixedClock
from tools.kv_store import InMemoryKeyValueStore
from tools.retry import RetryPolicy
from wardrobe_app.config import WardrobeConfig


@pytest.fixture()
def config() -> WardrobeConfig:
    return WardrobeConfig(gemini_api_key="test-key", storage_backend="memory", geolocation_backend="none")


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def slots() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def sleeps() -> List[float]:
    return []


@pytest.fixture()
def retry_policy(sleeps: List[float]) -> RetryPolicy:
    return RetryPolicy(sleep=sleeps.append)


@pytest.fixture()
def weather() -> WeatherSnapshot:
    return WeatherSnapshot(city="北京", temperature=8, condition=WeatherCondition.SUNNY, description="冷")
