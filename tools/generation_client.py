"""Boundary to the Gemini generation API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import google.generativeai as genai

from tools.images import InlineImage
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

Part = Union[str, InlineImage]


class GenerationError(RuntimeError):
    """The generation API could not be called at all."""


@dataclass
class GenerationResult:
    """Text and inline images from the first candidate."""

    text: str = ""
    images: List[InlineImage] = field(default_factory=list)


class GenerationClient:
    """Interface for multimodal generation (image bytes plus instructions in)."""

    def generate(self, parts: Sequence[Part], *, model: str, json_output: bool = False) -> GenerationResult:
        raise NotImplementedError


class GeminiGenerationClient(GenerationClient):
    """``google.generativeai`` backed client.

    ``api_endpoint`` points the SDK at a forwarding host (for example this
    service's ``/google-api`` route) instead of Google directly.
    """

    def __init__(self, api_key: Optional[str], api_endpoint: Optional[str] = None) -> None:
        self.api_key = api_key
        self.api_endpoint = api_endpoint
        if api_key:
            genai.configure(
                api_key=api_key,
                transport="rest",
                client_options={"api_endpoint": api_endpoint} if api_endpoint else None,
            )

    def generate(self, parts: Sequence[Part], *, model: str, json_output: bool = False) -> GenerationResult:
        if not self.api_key:
            raise GenerationError("GEMINI_API_KEY is not configured")

        contents = [part.as_part() if isinstance(part, InlineImage) else part for part in parts]
        generation_config = (
            genai.GenerationConfig(response_mime_type="application/json") if json_output else None
        )
        log_event(LOGGER, logging.INFO, "generation_request", model=model, parts=len(contents))
        response = genai.GenerativeModel(model).generate_content(
            contents, generation_config=generation_config
        )
        return self._collect(response)

    @staticmethod
    def _collect(response) -> GenerationResult:
        result = GenerationResult()
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return result
        texts: List[str] = []
        for part in candidates[0].content.parts:
            if getattr(part, "text", ""):
                texts.append(part.text)
            inline = getattr(part, "inline_data", None)
            if inline and inline.data:
                result.images.append(InlineImage(mime_type=inline.mime_type or "image/png", data=inline.data))
        result.text = "".join(texts)
        return result


__all__ = ["GeminiGenerationClient", "GenerationClient", "GenerationError", "GenerationResult", "Part"]
