"""Prompt builders for the generation model.

Height and weight only ever appear when the owner entered them; an empty
field must never turn into a guessed number.
"""

from __future__ import annotations

import json
from typing import Optional, Sequence

from models.clothing_item import ClothingItem
from models.taxonomy import CATEGORY_REFERENCE, Formality, Gender, Season
from models.user_profile import UserProfile
from models.weather import WeatherSnapshot

DEFAULT_OCCASION = "日常通勤"


def body_description(profile: Optional[UserProfile]) -> str:
    """Model description for try-on renders."""

    if profile is None:
        return "a fashion model"
    gender_term = {Gender.FEMALE: "Female", Gender.MALE: "Male"}.get(profile.gender, "Androgynous")
    height = f"{profile.height}cm" if profile.height else ""
    weight = f"{profile.weight}kg" if profile.weight else ""
    stats = f"Body Stats: {height} {weight}".rstrip() if (height or weight) else "Average body type"
    return f"{gender_term} model, {stats}"


def user_context(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return "User: Unknown Gender."
    style = {
        Gender.MALE: "Male (Men's Style)",
        Gender.FEMALE: "Female (Women's Style)",
    }.get(profile.gender, "Unisex Style")
    if profile.height and profile.weight:
        stats = f"Height: {profile.height}cm, Weight: {profile.weight}kg"
    else:
        stats = "Body stats not provided (Do not hallucinate numbers)."
    return f"User Profile: {style}. {stats}"


def inventory_listing(items: Sequence[ClothingItem]) -> str:
    listing = [
        {
            "id": item.item_id,
            "desc": f"{item.color} {item.category} ({item.season.value}, {item.description})",
            "tag": item.formality.value,
        }
        for item in items
    ]
    return json.dumps(listing, ensure_ascii=False)


def tagging_prompt() -> str:
    categories = "\n".join(f"- {group}: {', '.join(names)}" for group, names in CATEGORY_REFERENCE.items())
    seasons = ", ".join(season.value for season in Season)
    formalities = ", ".join(formality.value for formality in Formality)
    return (
        "你是一位资深的时尚单品数据录入员。请忽略背景，专注于图片中的主体衣物。\n"
        "请根据版型（收腰、肩宽、扣子方向等）判断性别倾向（男款/女款/中性），并写进描述。\n\n"
        "严格按以下 JSON 格式返回（中文）：\n"
        "{\n"
        '  "category": "分类，只填下方列表中最准确的一个名词",\n'
        '  "color": "具体颜色，如：藏青、米白、军绿",\n'
        f'  "season": "以下之一: {seasons}",\n'
        f'  "formality": "以下之一: {formalities}",\n'
        '  "description": "版型、材质以及性别风格，如：收腰女款、廓形男款"\n'
        "}\n\n"
        f"[分类参考列表]\n{categories}\n"
    )


def outfit_prompt(
    items: Sequence[ClothingItem],
    weather: WeatherSnapshot,
    occasion: str = DEFAULT_OCCASION,
    profile: Optional[UserProfile] = None,
) -> str:
    return (
        "Role: You are a professional Fashion Stylist.\n\n"
        "Context:\n"
        f"- Weather: {weather.city}, {weather.temperature}°C ({weather.condition.value}).\n"
        f"- Occasion: {occasion}.\n"
        f"- {user_context(profile)}\n\n"
        f"Inventory (JSON):\n{inventory_listing(items)}\n\n"
        "Task: Create the SINGLE BEST OUTFIT from the inventory.\n\n"
        "Rules:\n"
        "1. Match the user's gender. For women favour feminine silhouettes and layering; "
        "for men use masculine cuts and never pick skirts or dresses.\n"
        "2. Never quote body measurements the user did not provide; say "
        "\"based on your shape\" instead.\n"
        "3. Keep colours harmonious, at most 3 main colours.\n"
        "4. Dress for the temperature.\n\n"
        "Output JSON (Chinese):\n"
        '{ "selectedItemIds": ["id1", "id2"], '
        '"reasoning": "Title: [Stylish Name]. \\n\\nLogic: why this suits the user\'s gender and the occasion." }\n'
    )


def purchase_prompt(items: Sequence[ClothingItem], profile: Optional[UserProfile] = None) -> str:
    inventory = ", ".join(f"[{item.color}{item.category}]" for item in items)
    gender = f"用户性别/风格: {profile.gender.value}" if profile else "用户性别未知"
    return (
        "角色: 理性且毒舌的资产管理顾问。\n"
        "背景: 用户想买这张图片里的衣服。\n"
        f"用户库存: {inventory}。\n"
        f"{gender}。\n\n"
        "核心原则: 降本增效。\n"
        "1. 查重: 库存里有极为相似的，坚决劝退。\n"
        "2. 百搭性: 不能和库存里至少3件单品搭配的，判定为低效资产。\n"
        "3. 审美: 是否符合长期审美，避免廉价感和过时款。\n\n"
        "任务: 返回 JSON (中文)。\n"
        '{ "verdict": "买" 或 "不买", "score": 0-100, "reasoning": "犀利的点评理由", '
        '"suggestions": "如果不买，必须给出建设性建议，比如该买什么来替代" }\n'
    )


def wardrobe_chat_context(items: Sequence[ClothingItem]) -> str:
    sample = ", ".join(item.category for item in items[:5])
    return f"用户有 {len(items)} 件衣服，包括: {sample} 等。"


def chat_prompt(message: str, context: str) -> str:
    return f"你是一个专业的形象顾问。背景信息: {context}。用户问题: {message}"


def try_on_prompt(profile: Optional[UserProfile], with_reference_photo: bool) -> str:
    body = body_description(profile)
    if with_reference_photo:
        return (
            "TASK: HIGH-FIDELITY VIRTUAL TRY-ON.\n"
            "INPUTS: IMAGE 1 (Reference Person), Other Images (Clothes).\n"
            "1. IDENTITY LOCK: keep the face and head from IMAGE 1 exactly as is.\n"
            "2. ACTION: dress the person in the provided clothes.\n"
            f"3. BODY: {body}.\n"
            "4. STYLE: realistic photography, 8k resolution.\n"
        )
    gender = profile.gender.value if profile else Gender.FEMALE.value
    return (
        "TASK: FASHION CATALOG SHOOT.\n"
        f"1. GENERATE A MODEL: a realistic full-body {body}.\n"
        "2. WEARING: the model MUST wear the clothing items in the images.\n"
        f"3. GENDER: the model's gender must be {gender}.\n"
        "4. VIEW: full body standing pose.\n"
        "5. BACKGROUND: clean, neutral studio.\n\n"
        "NEGATIVE PROMPT: flat lay, clothes only, no human, headless, cartoon, ghost mannequin.\n"
    )


def flat_lay_prompt(description: str) -> str:
    return f"Fashion Photography, Flat lay: {description}. Clean background, aesthetic lighting."


__all__ = [
    "DEFAULT_OCCASION",
    "body_description",
    "chat_prompt",
    "flat_lay_prompt",
    "inventory_listing",
    "outfit_prompt",
    "purchase_prompt",
    "tagging_prompt",
    "try_on_prompt",
    "user_context",
    "wardrobe_chat_context",
]
