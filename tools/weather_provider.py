"""Weather provider abstractions and the Open-Meteo implementation."""

from __future__ import annotations

import logging
import math
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

import requests
from pydantic import BaseModel

from models.taxonomy import WeatherCondition
from models.weather import DEFAULT_WEATHER, CityMatch, WeatherSnapshot

LOGGER = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
REVERSE_GEOCODING_URL = "https://nominatim.openstreetmap.org/reverse"

UNNAMED_LOCATION = "当前位置"
LOOKUP_FAILED_LOCATION = "本地"
_CITY_SUFFIXES = re.compile(r"市|区")


class _CurrentWeather(BaseModel):
    temperature: float
    weathercode: int


class _ForecastResponse(BaseModel):
    current_weather: Optional[_CurrentWeather] = None


class _GeocodingResult(BaseModel):
    name: str
    latitude: float
    longitude: float
    admin1: Optional[str] = None
    country: Optional[str] = None


class _GeocodingResponse(BaseModel):
    results: List[_GeocodingResult] = []


class _Address(BaseModel):
    city: Optional[str] = None
    district: Optional[str] = None
    town: Optional[str] = None


class _ReverseResponse(BaseModel):
    address: Optional[_Address] = None


def condition_for_code(code: int) -> WeatherCondition:
    """Map a WMO weather code onto the six dashboard conditions."""

    if code == 0:
        return WeatherCondition.SUNNY
    if 1 <= code <= 3:
        return WeatherCondition.CLOUDY
    if code in (45, 48):
        return WeatherCondition.OVERCAST
    if 51 <= code <= 67 or 80 <= code <= 82:
        return WeatherCondition.RAIN
    if 71 <= code <= 77 or 85 <= code <= 86:
        return WeatherCondition.SNOW
    if 95 <= code <= 99:
        return WeatherCondition.RAIN
    return WeatherCondition.CLOUDY


def advisory_for(temperature: float, condition: WeatherCondition, code: int) -> str:
    """Dressing advice from the raw temperature and condition."""

    if code >= 95:
        return "有雷暴天气，请注意安全，尽量待在室内。"
    if condition is WeatherCondition.RAIN:
        return "出门记得带伞，建议穿防水鞋履。"
    if condition is WeatherCondition.SNOW:
        return "路面湿滑，建议穿着防滑保暖的靴子。"
    if temperature <= 5:
        return "寒潮来袭，请务必穿着厚羽绒或大衣保暖。"
    if temperature <= 12:
        return "天气较冷，建议“洋葱式”穿衣，搭配毛衣外套。"
    if temperature <= 20:
        return "体感舒适，早晚可能有温差，备一件薄外套。"
    if temperature <= 28:
        return "温暖舒适，适合衬衫、T恤等轻薄衣物。"
    return "天气炎热，建议穿着透气排汗的棉麻衣物。"


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_weather_by_location(self, latitude: float, longitude: float, city: str) -> WeatherSnapshot:
        """Current conditions for coordinates; never raises."""

    @abstractmethod
    def search_city(self, query: str) -> Optional[CityMatch]:
        """First geocoding hit for ``query`` or None; never raises."""

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """City label for coordinates; never raises."""


class OpenMeteoWeatherProvider(WeatherProvider):
    """Open-Meteo forecast and geocoding plus Nominatim reverse geocoding.

    Every outbound call gets ``retries`` extra attempts after a fixed
    ``retry_delay``; the delay does not grow.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout_seconds: float = 5.0,
        retries: int = 2,
        retry_delay: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        user_agent: str = "smart-wardrobe/0.1",
    ) -> None:
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.retries = retries
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.user_agent = user_agent

    def fetch_with_retry(self, url: str, params: Dict[str, object]) -> requests.Response:
        """GET with fixed-delay retries; non-2xx counts as failure."""

        for attempt in range(self.retries + 1):
            try:
                response = self.session.get(
                    url,
                    params=params,
                    headers={"User-Agent": self.user_agent},
                    timeout=self.timeout_seconds,
                )
                response.raise_for_status()
                return response
            except requests.RequestException:
                if attempt == self.retries:
                    raise
                LOGGER.warning("Weather request failed, retrying", extra={"attempt": attempt + 1})
                self._sleep(self.retry_delay)
        raise AssertionError("unreachable")  # pragma: no cover

    def _fallback(self, city: str, reason: str) -> WeatherSnapshot:
        LOGGER.warning("Using fallback weather snapshot", extra={"reason": reason})
        return WeatherSnapshot(
            city=city or DEFAULT_WEATHER.city,
            temperature=DEFAULT_WEATHER.temperature,
            condition=DEFAULT_WEATHER.condition,
            description="获取天气失败，已显示默认数据。",
        )

    def get_weather_by_location(self, latitude: float, longitude: float, city: str) -> WeatherSnapshot:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current_weather": "true",
            "timezone": "auto",
        }
        try:
            response = self.fetch_with_retry(FORECAST_URL, params)
            parsed = _ForecastResponse.model_validate(response.json())
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            return self._fallback(city, "request_error")
        except ValueError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            return self._fallback(city, "schema_validation")

        current = parsed.current_weather
        if current is None:
            return self._fallback(city, "no_current_weather")
        condition = condition_for_code(current.weathercode)
        return WeatherSnapshot(
            city=city,
            temperature=math.floor(current.temperature + 0.5),
            condition=condition,
            description=advisory_for(current.temperature, condition, current.weathercode),
        )

    def search_city(self, query: str) -> Optional[CityMatch]:
        params = {"name": query, "count": 1, "language": "zh", "format": "json"}
        try:
            response = self.fetch_with_retry(GEOCODING_URL, params)
            parsed = _GeocodingResponse.model_validate(response.json())
        except (requests.RequestException, ValueError) as exc:
            LOGGER.error("City search failed", exc_info=exc)
            return None
        if not parsed.results:
            return None
        hit = parsed.results[0]
        return CityMatch(
            name=hit.name,
            latitude=hit.latitude,
            longitude=hit.longitude,
            admin=hit.admin1 or hit.country or "",
        )

    def reverse_geocode(self, latitude: float, longitude: float) -> str:
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "zoom": 10,
            "accept-language": "zh-CN",
        }
        try:
            response = self.fetch_with_retry(REVERSE_GEOCODING_URL, params)
            parsed = _ReverseResponse.model_validate(response.json())
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("City reverse lookup failed", exc_info=exc)
            return LOOKUP_FAILED_LOCATION
        address = parsed.address or _Address()
        label = address.city or address.district or address.town or UNNAMED_LOCATION
        return _CITY_SUFFIXES.sub("", label)


__all__ = [
    "OpenMeteoWeatherProvider",
    "WeatherProvider",
    "advisory_for",
    "condition_for_code",
]
