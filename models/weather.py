"""Weather snapshot shown on the dashboard and fed to the stylist."""

from dataclasses import dataclass

from models.taxonomy import WeatherCondition


@dataclass(frozen=True)
class WeatherSnapshot:
    city: str
    temperature: int
    condition: WeatherCondition
    description: str


@dataclass(frozen=True)
class CityMatch:
    """First geocoding hit for a free-text city search."""

    name: str
    latitude: float
    longitude: float
    admin: str = ""


DEFAULT_WEATHER = WeatherSnapshot(
    city="北京",
    temperature=20,
    condition=WeatherCondition.SUNNY,
    description="暂无法获取实时天气，请检查网络连接。",
)

__all__ = ["CityMatch", "DEFAULT_WEATHER", "WeatherSnapshot"]
