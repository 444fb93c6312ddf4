"""Category grouping, search and usage statistics over wardrobe records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

from models.clothing_item import ClothingItem


class CategoryGroup(str, Enum):
    ALL = "全部"
    TOPS = "上装"
    BOTTOMS = "下装"
    FOOTWEAR = "鞋履"
    OTHER = "其它"


# Checked in order; the first table with a keyword inside the label wins.
GROUP_KEYWORDS: Sequence[tuple[CategoryGroup, tuple[str, ...]]] = (
    (
        CategoryGroup.TOPS,
        ("T恤", "衬衫", "卫衣", "毛衣", "针织衫", "外套", "夹克", "大衣", "羽绒服", "马甲", "吊带", "西装外套"),
    ),
    (CategoryGroup.BOTTOMS, ("裤", "裙")),
    (CategoryGroup.FOOTWEAR, ("鞋", "靴")),
)


def category_group(category: str) -> CategoryGroup:
    for group, keywords in GROUP_KEYWORDS:
        if any(keyword in category for keyword in keywords):
            return group
    return CategoryGroup.OTHER


def _matches_query(item: ClothingItem, needle: str) -> bool:
    return any(needle in field.lower() for field in (item.category, item.color, item.description))


def filter_items(
    items: Iterable[ClothingItem],
    group: CategoryGroup = CategoryGroup.ALL,
    query: str = "",
) -> List[ClothingItem]:
    """Records in ``group`` that contain ``query`` (case-insensitive), order kept."""

    needle = query.lower()
    return [
        item
        for item in items
        if (group is CategoryGroup.ALL or category_group(item.category) is group)
        and (not needle or _matches_query(item, needle))
    ]


@dataclass(frozen=True)
class WardrobeStats:
    total: int
    worn: int
    utilization_percent: int


def wardrobe_stats(items: Sequence[ClothingItem]) -> WardrobeStats:
    """Share of records worn at least once, as a rounded percentage."""

    worn = sum(1 for item in items if item.wear_count > 0)
    percent = int(worn * 100 / len(items) + 0.5) if items else 0
    return WardrobeStats(total=len(items), worn=worn, utilization_percent=percent)


__all__ = ["CategoryGroup", "GROUP_KEYWORDS", "WardrobeStats", "category_group", "filter_items", "wardrobe_stats"]
