"""Smart Wardrobe app bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Optional

from agents.chat_agent import ChatAgent
from agents.outfit_stylist_agent import OutfitRecommendation, OutfitStylistAgent
from agents.shopping_advisor import ShoppingAdvisorAgent
from agents.tagging_agent import ClothingTaggingAgent
from agents.try_on_agent import TryOnAgent, TryOnMode, default_mode, reference_image
from agents.weather_agent import WeatherAgent
from logic.prompts import DEFAULT_OCCASION
from logic.wardrobe_filter import WardrobeStats, wardrobe_stats
from memory.wardrobe_store import WardrobeStore, now_ms
from models.advice import ClothingAnalysis, ShoppingAdvice
from models.clothing_item import ClothingItem
from models.weather import WeatherSnapshot
from tools.generation_client import GeminiGenerationClient, GenerationClient
from tools.geolocation import (
    GeolocationProvider,
    IPGeolocationProvider,
    StaticGeolocationProvider,
    UnavailableGeolocationProvider,
)
from tools.kv_store import InMemoryKeyValueStore, JSONFileKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from tools.retry import RetryPolicy
from tools.weather_provider import OpenMeteoWeatherProvider, WeatherProvider
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import configure_logging, get_logger, log_event, operation_context

LOGGER = get_logger(__name__)


def build_slot_store(config: WardrobeConfig) -> KeyValueStore:
    backend = config.storage_backend.lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "sqlite":
        return SQLiteKeyValueStore(config.storage_path or "data/wardrobe.db")
    if backend == "json":
        return JSONFileKeyValueStore(config.storage_path or "data/wardrobe")
    raise ValueError(f"Unknown storage backend {config.storage_backend!r}")


def build_geolocation(config: WardrobeConfig) -> GeolocationProvider:
    backend = config.geolocation_backend.lower()
    if backend == "static":
        if config.static_latitude is None or config.static_longitude is None:
            raise ValueError("static geolocation needs static_latitude and static_longitude")
        return StaticGeolocationProvider(config.static_latitude, config.static_longitude)
    if backend == "ip":
        return IPGeolocationProvider()
    if backend == "none":
        return UnavailableGeolocationProvider()
    raise ValueError(f"Unknown geolocation backend {config.geolocation_backend!r}")


class WardrobeApp:
    """Owns the wardrobe store and wires it to the agents.

    Collaborators can be injected; anything left out is built from ``config``.
    """

    def __init__(
        self,
        config: WardrobeConfig | None = None,
        *,
        slots: KeyValueStore | None = None,
        client: GenerationClient | None = None,
        weather_provider: WeatherProvider | None = None,
        geolocation: GeolocationProvider | None = None,
        retry_policy: RetryPolicy | None = None,
        store: WardrobeStore | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config or WardrobeConfig.from_env()
        configure_logging()

        self.store = store or WardrobeStore(slots or build_slot_store(self.config), clock=clock)
        self.client = client or GeminiGenerationClient(
            api_key=self.config.gemini_api_key, api_endpoint=self.config.genai_api_endpoint
        )
        self.retry_policy = retry_policy or RetryPolicy()

        self.weather_agent = WeatherAgent(
            config=self.config,
            provider=weather_provider
            or OpenMeteoWeatherProvider(timeout_seconds=self.config.weather_timeout_seconds),
            geolocation=geolocation or build_geolocation(self.config),
        )
        self.tagging_agent = ClothingTaggingAgent(self.config, self.client, self.retry_policy, clock=clock)
        self.stylist = OutfitStylistAgent(self.config, self.client, self.retry_policy)
        self.shopping_advisor = ShoppingAdvisorAgent(self.config, self.client, self.retry_policy)
        self.try_on_agent = TryOnAgent(self.config, self.client, self.retry_policy)
        self.chat_agent = ChatAgent(self.config, self.client)

    def analyze_item(self, image: str) -> ClothingAnalysis:
        return self.tagging_agent.analyze(image)

    def save_item(self, image: str, analysis: Optional[ClothingAnalysis] = None) -> ClothingItem:
        """Persist a new record from a photo and the (possibly edited) tags."""

        return self.store.add(self.tagging_agent.build_item(image, analysis))

    def stats(self) -> WardrobeStats:
        return wardrobe_stats(self.store.items)

    def local_weather(self) -> WeatherSnapshot:
        return self.weather_agent.get_local_weather()

    def city_weather(self, query: str) -> Optional[WeatherSnapshot]:
        return self.weather_agent.get_city_weather(query)

    def recommend_outfit(
        self,
        occasion: str = DEFAULT_OCCASION,
        weather: Optional[WeatherSnapshot] = None,
    ) -> OutfitRecommendation:
        with operation_context("app:recommend_outfit") as correlation_id:
            weather = weather or self.local_weather()
            recommendation = self.stylist.recommend(
                self.store.items, weather, occasion, self.store.profile
            )
            log_event(
                LOGGER,
                logging.INFO,
                "app_call_completed",
                method="recommend_outfit",
                correlation_id=correlation_id,
                outfit_count=len(recommendation.items),
            )
            return recommendation

    def confirm_worn(self, item_ids: Iterable[str]) -> list[ClothingItem]:
        return self.store.mark_worn(item_ids)

    def render_try_on(
        self,
        item_ids: Iterable[str],
        mode: Optional[TryOnMode] = None,
        profile_overrides: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Try-on image for the given records; overrides apply to this render only."""

        items = self.store.items_by_ids(item_ids)
        profile = self.store.profile.merged(profile_overrides or {})
        mode = mode or default_mode(self.store.try_on_photo, profile)
        photo = reference_image(mode, self.store.try_on_photo, profile)
        return self.try_on_agent.try_on(items, profile, photo)

    def evaluate_purchase(self, image: str) -> ShoppingAdvice:
        return self.shopping_advisor.evaluate_purchase(image, self.store.items, self.store.profile)

    def chat(self, message: str) -> str:
        return self.chat_agent.chat(message, self.store.items)

    def dashboard_summary(self) -> str:
        """Plain-text greeting, weather and wardrobe usage."""

        weather = self.local_weather()
        stats = self.stats()
        return (
            f"早安，{self.store.profile.name}\n"
            f"{weather.city} {weather.temperature}°C {weather.condition.value}: {weather.description}\n"
            f"共 {stats.total} 件单品 · 资产利用率 {stats.utilization_percent}%"
        )


__all__ = ["WardrobeApp", "build_geolocation", "build_slot_store"]
