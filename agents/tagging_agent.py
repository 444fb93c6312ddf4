"""Tags a photographed garment and turns the tags into a wardrobe record."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from memory.wardrobe_store import now_ms
from models.advice import ClothingAnalysis
from models.clothing_item import ClothingItem
from models.taxonomy import Formality, Season
from logic.prompts import tagging_prompt
from tools.generation_client import GenerationClient, GenerationError
from tools.images import split_data_url
from tools.json_parsing import parse_model_payload
from tools.observability import instrument_operation
from tools.retry import RetryPolicy
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

UNNAMED_CATEGORY = "未命名"
UNNAMED_COLOR = "无色"


class ClothingTaggingAgent:
    """Asks the model for category, color, season, formality and a description."""

    def __init__(
        self,
        config: WardrobeConfig,
        client: GenerationClient,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.config = config
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self._clock = clock

    @instrument_operation("analyze_clothing_image")
    def analyze(self, image: str) -> ClothingAnalysis:
        """Suggested tags; an empty analysis when the model cannot help."""

        try:
            inline = split_data_url(image)
        except ValueError:
            log_event(LOGGER, logging.WARNING, "tagging_image_undecodable")
            return ClothingAnalysis()

        def _request() -> ClothingAnalysis:
            result = self.client.generate(
                [inline, tagging_prompt()], model=self.config.text_model, json_output=True
            )
            if not result.text:
                raise GenerationError("Empty response")
            return parse_model_payload(result.text, ClothingAnalysis, first_of_list=True) or ClothingAnalysis()

        try:
            return self.retry_policy.run(_request)
        except Exception as exc:
            log_event(LOGGER, logging.WARNING, "tagging_failed", error_type=type(exc).__name__)
            return ClothingAnalysis()

    def build_item(self, image: str, analysis: Optional[ClothingAnalysis] = None) -> ClothingItem:
        """Record ready for ``WardrobeStore.add``, filling gaps with save-time defaults."""

        analysis = analysis or ClothingAnalysis()
        timestamp = self._clock()
        return ClothingItem(
            item_id=str(timestamp),
            image_url=image,
            category=analysis.category or UNNAMED_CATEGORY,
            color=analysis.color or UNNAMED_COLOR,
            season=analysis.season or Season.ALL_YEAR,
            formality=analysis.formality or Formality.CASUAL,
            description=analysis.description or "",
            date_added=timestamp,
        )


__all__ = ["ClothingTaggingAgent", "UNNAMED_CATEGORY", "UNNAMED_COLOR"]
