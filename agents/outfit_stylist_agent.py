"""Outfit stylist: picks one outfit from the wardrobe for the weather and occasion."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from logic.prompts import DEFAULT_OCCASION, outfit_prompt
from models.advice import OutfitSuggestion
from models.clothing_item import ClothingItem
from models.user_profile import UserProfile
from models.weather import WeatherSnapshot
from tools.generation_client import GenerationClient
from tools.json_parsing import parse_model_payload
from tools.observability import instrument_operation
from tools.retry import RetryPolicy
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

BUSY_REASONING = "服务繁忙，请稍后重试。"
UNAVAILABLE_REASONING = "AI 服务暂时不可用。"
NO_MATCH_REASONING = "抱歉，库存中没有找到符合当前天气和场合的完整搭配。"
EMPTY_WARDROBE_REASONING = "衣橱里还没有衣服，先录入几件再来搭配吧。"


@dataclass
class OutfitRecommendation:
    """Suggestion resolved against the wardrobe; ``items`` keep wardrobe order."""

    items: List[ClothingItem] = field(default_factory=list)
    reasoning: str = ""

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]


class OutfitStylistAgent:
    """Builds the stylist prompt and parses the model's pick."""

    def __init__(
        self,
        config: WardrobeConfig,
        client: GenerationClient,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()

    @instrument_operation("suggest_outfit")
    def suggest_outfit(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherSnapshot,
        occasion: str = DEFAULT_OCCASION,
        profile: Optional[UserProfile] = None,
    ) -> OutfitSuggestion:
        prompt = outfit_prompt(items, weather, occasion or DEFAULT_OCCASION, profile)

        def _request() -> OutfitSuggestion:
            result = self.client.generate([prompt], model=self.config.text_model, json_output=True)
            parsed = parse_model_payload(result.text, OutfitSuggestion)
            return parsed or OutfitSuggestion(reasoning=BUSY_REASONING)

        try:
            return self.retry_policy.run(_request)
        except Exception as exc:
            log_event(LOGGER, logging.WARNING, "stylist_failed", error_type=type(exc).__name__)
            return OutfitSuggestion(reasoning=UNAVAILABLE_REASONING)

    def recommend(
        self,
        items: Sequence[ClothingItem],
        weather: WeatherSnapshot,
        occasion: str = DEFAULT_OCCASION,
        profile: Optional[UserProfile] = None,
    ) -> OutfitRecommendation:
        """Ask for a suggestion and keep only ids that exist in ``items``."""

        if not items:
            return OutfitRecommendation(reasoning=EMPTY_WARDROBE_REASONING)
        suggestion = self.suggest_outfit(items, weather, occasion, profile)
        chosen = set(suggestion.selected_item_ids)
        selected = [item for item in items if item.item_id in chosen]
        if not selected:
            return OutfitRecommendation(reasoning=suggestion.reasoning or NO_MATCH_REASONING)
        log_event(LOGGER, logging.INFO, "outfit_recommended", item_count=len(selected), occasion=occasion)
        return OutfitRecommendation(items=selected, reasoning=suggestion.reasoning)


__all__ = ["OutfitRecommendation", "OutfitStylistAgent"]
