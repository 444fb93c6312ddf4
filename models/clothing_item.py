"""Clothing item data model and storage mapping."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from models.taxonomy import Formality, Season, coerce_enum

# Persisted key for each dataclass field; the stored layout predates this module.
_STORAGE_KEYS = {
    "item_id": "id",
    "image_url": "imageUrl",
    "category": "category",
    "color": "color",
    "season": "season",
    "formality": "formality",
    "description": "description",
    "date_added": "dateAdded",
    "wear_count": "wearCount",
    "last_worn": "lastWorn",
    "price": "price",
}


@dataclass(frozen=True)
class ClothingItem:
    """One cataloged piece of clothing plus its usage analytics.

    ``source`` is the dict the item was loaded from, if any. ``to_storage``
    starts from it so keys this model does not know, keys the record never
    had, and labels outside the taxonomy are written back unchanged.
    """

    item_id: str
    image_url: str
    category: str
    color: str
    season: Season
    formality: Formality
    description: str
    date_added: int
    wear_count: int = 0
    last_worn: Optional[int] = None
    price: Optional[float] = None
    source: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    def __post_init__(self) -> None:
        if self.wear_count < 0:
            raise ValueError("wear_count must be non-negative")

    def with_changes(self, **changes: Any) -> "ClothingItem":
        return replace(self, **changes)

    def to_storage(self) -> Dict[str, Any]:
        """Plain JSON-compatible dict using the persisted key names."""

        payload: Dict[str, Any] = dict(self.source)
        loaded = ClothingItem.from_storage(self.source) if self.source else None
        for attr, key in _STORAGE_KEYS.items():
            value = getattr(self, attr)
            # wearCount is always written so older records migrate on save.
            if loaded is not None and attr != "wear_count" and value == getattr(loaded, attr):
                continue
            if value is None:
                payload.pop(key, None)
                continue
            if isinstance(value, (Season, Formality)):
                value = value.value
            payload[key] = value
        return payload

    @classmethod
    def from_storage(cls, payload: Dict[str, Any]) -> "ClothingItem":
        """Build an item from a persisted dict.

        Older records carry no analytics fields; they load as never worn.
        Season or formality labels outside the taxonomy load as all-year and
        casual. A record without an id raises ``KeyError``.
        """

        if not isinstance(payload, dict):
            raise TypeError(f"Expected a mapping for a clothing item, got {type(payload).__name__}")
        return cls(
            item_id=str(payload["id"]),
            image_url=str(payload.get("imageUrl", "")),
            category=str(payload.get("category", "")),
            color=str(payload.get("color", "")),
            season=coerce_enum(Season, payload.get("season")) or Season.ALL_YEAR,
            formality=coerce_enum(Formality, payload.get("formality")) or Formality.CASUAL,
            description=str(payload.get("description", "")),
            date_added=int(payload.get("dateAdded") or 0),
            wear_count=int(payload.get("wearCount") or 0),
            last_worn=payload.get("lastWorn") or None,
            price=payload.get("price"),
            source=dict(payload),
        )


__all__ = ["ClothingItem"]
