"""Canonical labels for clothing metadata.

Labels are stored verbatim in the persisted wardrobe and echoed back by the
generation model, so the enum values are the Chinese display strings rather
than English identifiers.
"""

from enum import Enum
from typing import Dict, List, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


class Season(str, Enum):
    SPRING = "春"
    SUMMER = "夏"
    AUTUMN = "秋"
    WINTER = "冬"
    ALL_YEAR = "四季通用"


class Formality(str, Enum):
    CASUAL = "休闲"
    SMART_CASUAL = "商务休闲"
    BUSINESS = "正式商务"
    FORMAL = "隆重礼服"
    SPORT = "运动户外"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    UNISEX = "Unisex"


class WeatherCondition(str, Enum):
    SUNNY = "晴"
    CLOUDY = "多云"
    RAIN = "雨"
    SNOW = "雪"
    WINDY = "大风"
    OVERCAST = "阴"


# Reference list shown to the tagging model; one noun per item is expected back.
CATEGORY_REFERENCE: Dict[str, List[str]] = {
    "上装": ["T恤", "衬衫", "卫衣", "毛衣", "针织衫", "西装外套", "夹克", "大衣", "羽绒服", "马甲", "吊带"],
    "下装": ["牛仔裤", "休闲裤", "西装裤", "运动裤", "短裤", "半身裙"],
    "全身": ["连衣裙", "连体裤"],
    "鞋履": ["运动鞋", "皮鞋", "靴子", "凉鞋", "休闲鞋"],
}


def coerce_enum(enum_cls: Type[E], value: object) -> Optional[E]:
    """Return the enum member for ``value`` or None when it is not a known label."""

    if isinstance(value, enum_cls):
        return value
    if value is None:
        return None
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        return None


__all__ = [
    "CATEGORY_REFERENCE",
    "Formality",
    "Gender",
    "Season",
    "WeatherCondition",
    "coerce_enum",
]
