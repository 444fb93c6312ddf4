"""Pull JSON out of free-form model text.

The generation model is asked for JSON but often wraps it in a code fence or
adds chatter around it. Every helper here returns None instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)
M = TypeVar("M", bound=BaseModel)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_FENCE_MARKERS = re.compile(r"```json|```")


def parse_model_json(text: str | None) -> Optional[Any]:
    """Best-effort JSON decode of model output; None when nothing parses."""

    if not text:
        return None
    try:
        fenced = _FENCED_BLOCK.search(text)
        if fenced:
            return json.loads(fenced.group(1))
        cleaned = _FENCE_MARKERS.sub("", text).strip()
        first, last = cleaned.find("{"), cleaned.rfind("}")
        if first != -1 and last > first:
            return json.loads(cleaned[first : last + 1])
        return json.loads(cleaned)
    except (json.JSONDecodeError, ValueError) as exc:
        log_event(LOGGER, logging.WARNING, "model_json_unparseable", error=str(exc))
        return None


def parse_model_payload(text: str | None, model: Type[M], *, first_of_list: bool = False) -> Optional[M]:
    """Decode and validate model output into ``model``; None on any failure."""

    payload = parse_model_json(text)
    if first_of_list and isinstance(payload, list):
        payload = payload[0] if payload else None
    if not isinstance(payload, dict):
        return None
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        log_event(
            LOGGER,
            logging.WARNING,
            "model_json_schema_mismatch",
            schema=model.__name__,
            errors=len(exc.errors()),
        )
        return None


__all__ = ["parse_model_json", "parse_model_payload"]
