"""The device's wardrobe: clothing records, owner profile, try-on photo.

One ``WardrobeStore`` is built at startup and handed to everything that reads
or changes the wardrobe. Each mutation rebuilds the affected state, swaps it
in, and then writes the whole collection (or profile) to its slot before
returning. A failed write leaves memory ahead of storage until the next
successful mutation; the error still reaches the caller.

Mutations are serialized with a lock because the HTTP surface runs sync
handlers on a thread pool. Stored records that cannot be read as clothing
items are left out of ``items`` but written back after the readable ones.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, List, Optional

from models.clothing_item import ClothingItem
from models.user_profile import UserProfile
from tools.kv_store import KeyValueStore
from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

ITEMS_KEY = "wardrobe_items_cn"
PROFILE_KEY = "user_profile_cn"


def now_ms() -> int:
    return int(time.time() * 1000)


class WardrobeStore:
    """Newest-first clothing records mirrored to a key-value slot."""

    def __init__(self, slots: KeyValueStore, clock: Callable[[], int] = now_ms) -> None:
        self._slots = slots
        self._clock = clock
        self._lock = threading.RLock()
        self._unreadable: List[Any] = []
        self._items: List[ClothingItem] = self._load_items()
        self._profile: UserProfile = self._load_profile()
        # Session only; never written to a slot.
        self.try_on_photo: Optional[str] = None

    @property
    def items(self) -> List[ClothingItem]:
        return list(self._items)

    @property
    def profile(self) -> UserProfile:
        return self._profile

    def get_item(self, item_id: str) -> Optional[ClothingItem]:
        return next((item for item in self._items if item.item_id == item_id), None)

    def items_by_ids(self, item_ids: Iterable[str]) -> List[ClothingItem]:
        """Records whose id is in ``item_ids``, in collection order."""

        wanted = set(item_ids)
        return [item for item in self._items if item.item_id in wanted]

    def add(self, item: ClothingItem) -> ClothingItem:
        stored = item.with_changes(wear_count=0)
        with self._lock:
            self._items = [stored, *self._items]
            self._persist_items()
            total = len(self._items)
        log_event(LOGGER, logging.INFO, "wardrobe_item_added", item_id=stored.item_id, total=total)
        return stored

    def remove(self, item_id: str) -> None:
        """Delete permanently; unknown ids are ignored."""

        with self._lock:
            self._items = [item for item in self._items if item.item_id != item_id]
            self._persist_items()
            total = len(self._items)
        log_event(LOGGER, logging.INFO, "wardrobe_item_removed", item_id=item_id, total=total)

    def mark_worn(self, item_ids: Iterable[str]) -> List[ClothingItem]:
        """Bump wear counts for ``item_ids`` in a single write; returns the bumped records."""

        worn = set(item_ids)
        updated: List[ClothingItem] = []
        with self._lock:
            timestamp = self._clock()
            new_items: List[ClothingItem] = []
            for item in self._items:
                if item.item_id in worn:
                    item = item.with_changes(wear_count=item.wear_count + 1, last_worn=timestamp)
                    updated.append(item)
                new_items.append(item)
            self._items = new_items
            self._persist_items()
        log_event(LOGGER, logging.INFO, "wardrobe_items_worn", count=len(updated))
        return updated

    def update_profile(self, changes: Dict[str, Any]) -> UserProfile:
        with self._lock:
            self._profile = self._profile.merged(changes)
            self._write(PROFILE_KEY, self._profile.to_storage())
            profile = self._profile
        log_event(LOGGER, logging.INFO, "profile_updated", fields=sorted(changes))
        return profile

    def _persist_items(self) -> None:
        records = [item.to_storage() for item in self._items]
        self._write(ITEMS_KEY, records + self._unreadable)

    def _write(self, key: str, payload: Any) -> None:
        try:
            self._slots.set(key, json.dumps(payload, ensure_ascii=False))
        except Exception:
            log_event(LOGGER, logging.ERROR, "wardrobe_persist_failed", slot=key, exc_info=True)
            raise

    def _load_items(self) -> List[ClothingItem]:
        raw = self._slots.get(ITEMS_KEY)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise TypeError("Stored wardrobe is not a list")
        except (ValueError, TypeError) as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "wardrobe_slot_unreadable",
                slot=ITEMS_KEY,
                error_type=type(exc).__name__,
            )
            return []
        items: List[ClothingItem] = []
        for position, entry in enumerate(payload):
            try:
                items.append(ClothingItem.from_storage(entry))
            except (ValueError, TypeError, KeyError) as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "wardrobe_record_unreadable",
                    slot=ITEMS_KEY,
                    position=position,
                    error_type=type(exc).__name__,
                )
                self._unreadable.append(entry)
        return items

    def _load_profile(self) -> UserProfile:
        raw = self._slots.get(PROFILE_KEY)
        if raw is None:
            return UserProfile()
        try:
            return UserProfile.from_storage(json.loads(raw))
        except (ValueError, TypeError) as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "wardrobe_slot_unreadable",
                slot=PROFILE_KEY,
                error_type=type(exc).__name__,
            )
            return UserProfile()


__all__ = ["ITEMS_KEY", "PROFILE_KEY", "WardrobeStore", "now_ms"]
