"""Free-form style assistant."""

from __future__ import annotations

from typing import Sequence

from logic.prompts import chat_prompt, wardrobe_chat_context
from models.clothing_item import ClothingItem
from tools.generation_client import GenerationClient
from tools.observability import instrument_operation
from tools.retry import DefaultingRetryPolicy
from wardrobe_app.config import WardrobeConfig

NETWORK_BUSY_REPLY = "网络繁忙。"
NO_ANSWER_REPLY = "我暂时无法回答这个问题。"


class ChatAgent:
    """Answers style questions; a failed call becomes a canned reply, never an error."""

    def __init__(
        self,
        config: WardrobeConfig,
        client: GenerationClient,
        retry_policy: DefaultingRetryPolicy[str] | None = None,
    ) -> None:
        self.config = config
        self.client = client
        self.retry_policy = retry_policy or DefaultingRetryPolicy(NETWORK_BUSY_REPLY)

    @instrument_operation("chat")
    def chat(self, message: str, items: Sequence[ClothingItem]) -> str:
        prompt = chat_prompt(message, wardrobe_chat_context(items))

        def _request() -> str:
            result = self.client.generate([prompt], model=self.config.text_model)
            return result.text or NO_ANSWER_REPLY

        return self.retry_policy.run(_request)


__all__ = ["ChatAgent", "NETWORK_BUSY_REPLY", "NO_ANSWER_REPLY"]
