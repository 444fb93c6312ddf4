"""Buy / don't-buy advice for a garment the user is considering."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from logic.prompts import purchase_prompt
from models.advice import ShoppingAdvice
from models.clothing_item import ClothingItem
from models.user_profile import UserProfile
from tools.generation_client import GenerationClient
from tools.images import split_data_url
from tools.json_parsing import parse_model_payload
from tools.observability import instrument_operation
from tools.retry import RetryPolicy
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)


def _declined(reasoning: str) -> ShoppingAdvice:
    return ShoppingAdvice(verdict="不买", score=0, reasoning=reasoning)


class ShoppingAdvisorAgent:
    """Compares a product photo against the wardrobe for duplicates and versatility."""

    def __init__(
        self,
        config: WardrobeConfig,
        client: GenerationClient,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()

    @instrument_operation("evaluate_purchase")
    def evaluate_purchase(
        self,
        image: str,
        items: Sequence[ClothingItem],
        profile: Optional[UserProfile] = None,
    ) -> ShoppingAdvice:
        try:
            inline = split_data_url(image)
        except ValueError:
            return _declined("分析失败")
        prompt = purchase_prompt(items, profile)

        def _request() -> ShoppingAdvice:
            result = self.client.generate([inline, prompt], model=self.config.text_model, json_output=True)
            return parse_model_payload(result.text, ShoppingAdvice) or _declined("分析失败")

        try:
            advice = self.retry_policy.run(_request)
        except Exception as exc:
            log_event(LOGGER, logging.WARNING, "shopping_advice_failed", error_type=type(exc).__name__)
            return _declined("服务繁忙。")
        log_event(LOGGER, logging.INFO, "shopping_advice_ready", verdict=advice.verdict, score=advice.score)
        return advice


__all__ = ["ShoppingAdvisorAgent"]
