"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.advice import ClothingAnalysis, OutfitSuggestion, ShoppingAdvice
from models.clothing_item import ClothingItem
from models.user_profile import UserProfile
from models.weather import DEFAULT_WEATHER, CityMatch, WeatherSnapshot

__all__ = [
    "CityMatch",
    "ClothingAnalysis",
    "ClothingItem",
    "DEFAULT_WEATHER",
    "OutfitSuggestion",
    "ShoppingAdvice",
    "UserProfile",
    "WeatherSnapshot",
]
