"""Device location sources for the local-weather lookup."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests
from pydantic import BaseModel, ValidationError

LOGGER = logging.getLogger(__name__)


class GeolocationError(RuntimeError):
    """The device position could not be determined."""


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


class GeolocationProvider(ABC):
    """Returns the device position or raises :class:`GeolocationError`."""

    @abstractmethod
    def locate(self, timeout_seconds: float) -> Coordinates:
        """Resolve the current position within ``timeout_seconds``."""


class _IPLookup(BaseModel):
    latitude: float
    longitude: float


class IPGeolocationProvider(GeolocationProvider):
    """Approximates position from the public IP address."""

    def __init__(self, url: str = "https://ipapi.co/json/", session: requests.Session | None = None) -> None:
        self.url = url
        self.session = session or requests.Session()

    def locate(self, timeout_seconds: float) -> Coordinates:
        try:
            response = self.session.get(self.url, timeout=timeout_seconds)
            response.raise_for_status()
            parsed = _IPLookup.model_validate(response.json())
        except (requests.RequestException, ValueError, ValidationError) as exc:
            raise GeolocationError("IP geolocation failed") from exc
        return Coordinates(latitude=parsed.latitude, longitude=parsed.longitude)


class StaticGeolocationProvider(GeolocationProvider):
    """Fixed coordinates, e.g. configured for a home server."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self.coordinates = Coordinates(latitude=latitude, longitude=longitude)

    def locate(self, timeout_seconds: float) -> Coordinates:
        return self.coordinates


class UnavailableGeolocationProvider(GeolocationProvider):
    """No location support on this device."""

    def locate(self, timeout_seconds: float) -> Coordinates:
        raise GeolocationError("Geolocation is not supported on this device")


__all__ = [
    "Coordinates",
    "GeolocationError",
    "GeolocationProvider",
    "IPGeolocationProvider",
    "StaticGeolocationProvider",
    "UnavailableGeolocationProvider",
]
