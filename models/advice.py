"""Pydantic schemas for results parsed out of generation-model text."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.taxonomy import Formality, Season, coerce_enum


class _ModelOutput(BaseModel):
    """Accepts both the camelCase keys the model emits and snake_case."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ClothingAnalysis(_ModelOutput):
    """Tags suggested for a freshly photographed item."""

    category: str = ""
    color: str = ""
    season: Optional[Season] = None
    formality: Optional[Formality] = None
    description: str = ""

    @field_validator("season", mode="before")
    @classmethod
    def _lenient_season(cls, value: object) -> Optional[Season]:
        return coerce_enum(Season, value)

    @field_validator("formality", mode="before")
    @classmethod
    def _lenient_formality(cls, value: object) -> Optional[Formality]:
        return coerce_enum(Formality, value)

    @field_validator("category", "color", "description", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    @property
    def is_empty(self) -> bool:
        return not self.category and not self.color


class OutfitSuggestion(_ModelOutput):
    selected_item_ids: List[str] = Field(default_factory=list, alias="selectedItemIds")
    reasoning: str = ""

    @field_validator("selected_item_ids", mode="before")
    @classmethod
    def _ids_as_strings(cls, value: object) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("selectedItemIds must be a list")
        return [str(item_id) for item_id in value]


class ShoppingAdvice(_ModelOutput):
    verdict: Literal["买", "不买"]
    score: int = 0
    reasoning: str = ""
    suggestions: Optional[str] = None
    similar_item_id: Optional[str] = Field(default=None, alias="similarItemId")

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> int:
        if value is None or isinstance(value, bool):
            return 0
        if not isinstance(value, (int, float, str)):
            raise ValueError("score must be numeric")
        return max(0, min(100, int(round(float(value)))))


__all__ = ["ClothingAnalysis", "OutfitSuggestion", "ShoppingAdvice"]
