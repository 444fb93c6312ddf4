"""Device owner profile."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from models.taxonomy import Gender, coerce_enum


@dataclass(frozen=True)
class UserProfile:
    """Singleton profile; gender steers prompt generation.

    ``height`` and ``weight`` are free-text numbers (cm / kg). Empty means the
    user did not say, and prompts must not guess.
    """

    name: str = "主人"
    gender: Gender = Gender.FEMALE
    height: str = ""
    weight: str = ""
    avatar: Optional[str] = None

    def merged(self, changes: Dict[str, Any]) -> "UserProfile":
        """Return a copy with known fields from ``changes`` applied."""

        known = {f.name for f in fields(self)}
        updates = {key: value for key, value in changes.items() if key in known}
        if "gender" in updates:
            gender = coerce_enum(Gender, updates["gender"])
            if gender is None:
                raise ValueError(f"Unknown gender {updates['gender']!r}")
            updates["gender"] = gender
        for key in ("name", "height", "weight"):
            if key in updates:
                updates[key] = "" if updates[key] is None else str(updates[key])
        return replace(self, **updates)

    def to_storage(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "gender": self.gender.value,
            "height": self.height,
            "weight": self.weight,
            "avatar": self.avatar,
        }

    @classmethod
    def from_storage(cls, payload: Dict[str, Any]) -> "UserProfile":
        if not isinstance(payload, dict):
            raise TypeError("Stored profile is not an object")
        default = cls()
        return cls(
            name=str(payload["name"]) if payload.get("name") is not None else default.name,
            gender=coerce_enum(Gender, payload.get("gender")) or Gender.FEMALE,
            height=str(payload.get("height") or ""),
            weight=str(payload.get("weight") or ""),
            avatar=payload.get("avatar") or None,
        )


__all__ = ["UserProfile"]
