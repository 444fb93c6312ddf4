"""Virtual try-on renders, with a flat-lay picture as the fallback."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence

from logic.prompts import flat_lay_prompt, try_on_prompt
from models.clothing_item import ClothingItem
from models.user_profile import UserProfile
from tools.generation_client import GenerationClient, Part
from tools.images import split_data_url
from tools.observability import instrument_operation
from tools.retry import RetryPolicy
from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

MAX_CLOTHING_IMAGES = 3


class TryOnMode(str, Enum):
    """Whose body the render uses."""

    PHOTO = "photo"
    AVATAR = "avatar"
    AI = "ai"


def default_mode(try_on_photo: Optional[str], profile: UserProfile) -> TryOnMode:
    if try_on_photo:
        return TryOnMode.PHOTO
    if profile.avatar:
        return TryOnMode.AVATAR
    return TryOnMode.AI


def reference_image(mode: TryOnMode, try_on_photo: Optional[str], profile: UserProfile) -> Optional[str]:
    if mode is TryOnMode.PHOTO:
        return try_on_photo
    if mode is TryOnMode.AVATAR:
        return profile.avatar
    return None


class TryOnAgent:
    def __init__(
        self,
        config: WardrobeConfig,
        client: GenerationClient,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.client = client
        base = retry_policy or RetryPolicy()
        self.render_retry = base.with_budget(max_attempts=2, initial_delay=2.0)
        self.flat_lay_retry = base.with_budget(max_attempts=2, initial_delay=1.0)

    def _first_image(self, parts: List[Part], retry_policy: RetryPolicy) -> str:
        def _request() -> str:
            result = self.client.generate(parts, model=self.config.image_model)
            return result.images[0].to_data_url() if result.images else ""

        try:
            return retry_policy.run(_request)
        except Exception as exc:
            log_event(LOGGER, logging.WARNING, "image_generation_failed", error_type=type(exc).__name__)
            return ""

    @instrument_operation("visualize_outfit")
    def visualize_outfit(
        self,
        user_photo: Optional[str],
        clothing_images: Sequence[str],
        profile: Optional[UserProfile] = None,
    ) -> str:
        """Data URL of the person (or a generated model) wearing the clothes, or ""."""

        parts: List[Part] = []
        try:
            if user_photo:
                parts.append(split_data_url(user_photo))
            parts.extend(split_data_url(image) for image in clothing_images[:MAX_CLOTHING_IMAGES])
        except ValueError:
            log_event(LOGGER, logging.WARNING, "try_on_image_undecodable")
            return ""
        parts.append(try_on_prompt(profile, with_reference_photo=bool(user_photo)))
        return self._first_image(parts, self.render_retry)

    @instrument_operation("generate_outfit_image")
    def generate_outfit_image(self, description: str) -> str:
        return self._first_image([flat_lay_prompt(description)], self.flat_lay_retry)

    def try_on(
        self,
        items: Sequence[ClothingItem],
        profile: UserProfile,
        user_photo: Optional[str] = None,
    ) -> str:
        """Render ``items`` on the reference person, else a flat lay, else ""."""

        if not items:
            return ""
        image = self.visualize_outfit(user_photo, [item.image_url for item in items], profile)
        if image:
            return image
        description = " + ".join(f"{item.color} {item.category}" for item in items)
        return self.generate_outfit_image(description)


__all__ = ["MAX_CLOTHING_IMAGES", "TryOnAgent", "TryOnMode", "default_mode", "reference_image"]
