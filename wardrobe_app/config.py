"""Configuration helpers for the Smart Wardrobe service."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


@dataclass
class WardrobeConfig:
    """Configuration values for the wardrobe service.

    Everything has a usable local default so the service starts without a
    config file; only ``gemini_api_key`` is needed for the AI features.
    """

    gemini_api_key: Optional[str] = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    genai_api_endpoint: Optional[str] = None
    storage_backend: str = "json"
    storage_path: Optional[str] = None
    geolocation_backend: str = "ip"
    static_latitude: Optional[float] = None
    static_longitude: Optional[float] = None
    weather_timeout_seconds: float = 5.0
    geolocation_timeout_seconds: float = 3.0
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "WardrobeConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default. Environment variables win over file values so the API key can
        be injected at runtime.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("WARDROBE_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(key.upper(), yaml_config.get(key, default))

        return cls(
            gemini_api_key=get_value("gemini_api_key"),
            text_model=str(get_value("text_model") or DEFAULT_TEXT_MODEL),
            image_model=str(get_value("image_model") or DEFAULT_IMAGE_MODEL),
            genai_api_endpoint=get_value("genai_api_endpoint"),
            storage_backend=str(get_value("storage_backend") or "json"),
            storage_path=get_value("storage_path"),
            geolocation_backend=str(get_value("geolocation_backend") or "ip"),
            static_latitude=cls._optional_float(get_value("static_latitude")),
            static_longitude=cls._optional_float(get_value("static_longitude")),
            weather_timeout_seconds=float(get_value("weather_timeout_seconds") or 5.0),
            geolocation_timeout_seconds=float(get_value("geolocation_timeout_seconds") or 3.0),
            environment=env_name,
        )

    @staticmethod
    def _optional_float(raw: Optional[str]) -> Optional[float]:
        if raw is None or str(raw).strip() == "":
            return None
        return float(raw)

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse flat ``key: value`` lines; nesting is not supported."""

        config: dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = ["WardrobeConfig", "DEFAULT_TEXT_MODEL", "DEFAULT_IMAGE_MODEL"]
