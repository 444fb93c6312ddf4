"""Weather agent: device location to a dashboard-ready weather snapshot."""

from __future__ import annotations

import logging
from typing import Optional

from models.weather import DEFAULT_WEATHER, WeatherSnapshot
from tools.geolocation import GeolocationError, GeolocationProvider
from tools.weather_provider import WeatherProvider
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import get_logger, log_event, operation_context

LOGGER = get_logger(__name__)

FALLBACK_LATITUDE = 39.9042
FALLBACK_LONGITUDE = 116.4074
FALLBACK_CITY = "北京"


class WeatherAgent:
    """Locate, name the place, fetch conditions; degrade at every step.

    Callers always get a snapshot. Without a position the lookup uses Beijing,
    and anything unexpected yields the hardcoded default.
    """

    def __init__(
        self,
        config: WardrobeConfig,
        provider: WeatherProvider,
        geolocation: GeolocationProvider,
    ) -> None:
        self.config = config
        self.provider = provider
        self.geolocation = geolocation

    def get_local_weather(self) -> WeatherSnapshot:
        with operation_context("agent:weather.get_local_weather") as correlation_id:
            try:
                try:
                    position = self.geolocation.locate(self.config.geolocation_timeout_seconds)
                except GeolocationError as exc:
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "geolocation_unavailable",
                        correlation_id=correlation_id,
                        reason=str(exc),
                    )
                    return self.provider.get_weather_by_location(
                        FALLBACK_LATITUDE, FALLBACK_LONGITUDE, FALLBACK_CITY
                    )
                city = self.provider.reverse_geocode(position.latitude, position.longitude)
                snapshot = self.provider.get_weather_by_location(position.latitude, position.longitude, city)
            except Exception:
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "local_weather_failed",
                    correlation_id=correlation_id,
                    exc_info=True,
                )
                return DEFAULT_WEATHER
            log_event(
                LOGGER,
                logging.INFO,
                "local_weather_ready",
                correlation_id=correlation_id,
                condition=snapshot.condition.value,
                temperature=snapshot.temperature,
            )
            return snapshot

    def get_city_weather(self, query: str) -> Optional[WeatherSnapshot]:
        """Weather for a searched city name; None when no city matches."""

        query = query.strip()
        if not query:
            return None
        match = self.provider.search_city(query)
        if match is None:
            return None
        return self.provider.get_weather_by_location(match.latitude, match.longitude, match.name)


__all__ = ["FALLBACK_CITY", "FALLBACK_LATITUDE", "FALLBACK_LONGITUDE", "WeatherAgent"]
