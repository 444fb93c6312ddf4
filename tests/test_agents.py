"""Requester behaviour against a scripted generation client."""

from __future__ import annotations

from typing import List

from agents.chat_agent import NETWORK_BUSY_REPLY, NO_ANSWER_REPLY, ChatAgent
from agents.outfit_stylist_agent import (
    BUSY_REASONING,
    EMPTY_WARDROBE_REASONING,
    NO_MATCH_REASONING,
    UNAVAILABLE_REASONING,
    OutfitStylistAgent,
)
from agents.shopping_advisor import ShoppingAdvisorAgent
from agents.tagging_agent import UNNAMED_CATEGORY, UNNAMED_COLOR, ClothingTaggingAgent
from agents.try_on_agent import MAX_CLOTHING_IMAGES, TryOnAgent, TryOnMode, default_mode, reference_image
from logic.prompts import body_description, user_context, wardrobe_chat_context
from models.advice import ClothingAnalysis
from models.taxonomy import Formality, Gender, Season
from models.user_profile import UserProfile
from tests.fakes import JPEG_DATA_URL, PNG_DATA_URL, ApiError, FakeGenerationClient, make_item
from tools.generation_client import GenerationError, GenerationResult
from tools.images import InlineImage
from tools.retry import DefaultingRetryPolicy

TAGS_JSON = (
    '```json\n{"category": "西装外套", "color": "藏青", "season": "秋", '
    '"formality": "正式商务", "description": "收腰女款"}\n```'
)


# --- tagging -------------------------------------------------------------


def test_tagging_parses_model_json(config, retry_policy) -> None:
    client = FakeGenerationClient([TAGS_JSON])
    agent = ClothingTaggingAgent(config, client, retry_policy)

    analysis = agent.analyze(JPEG_DATA_URL)

    assert analysis.category == "西装外套"
    assert analysis.season is Season.AUTUMN
    assert analysis.formality is Formality.BUSINESS
    call = client.calls[0]
    assert call["json_output"] is True
    assert call["model"] == config.text_model
    assert isinstance(call["parts"][0], InlineImage)


def test_tagging_retries_rate_limits(config, retry_policy, sleeps: List[float]) -> None:
    client = FakeGenerationClient([ApiError("quota", code=429), TAGS_JSON])
    agent = ClothingTaggingAgent(config, client, retry_policy)

    assert agent.analyze(JPEG_DATA_URL).color == "藏青"
    assert len(client.calls) == 2
    assert sleeps == [1.0]


def test_tagging_failures_yield_empty_analysis(config, retry_policy) -> None:
    for script in ([GenerationResult()], ["I think it is a shirt"], [ApiError("bad", code=400)]):
        agent = ClothingTaggingAgent(config, FakeGenerationClient(script), retry_policy)
        assert agent.analyze(JPEG_DATA_URL).is_empty


def test_tagging_undecodable_image_skips_the_model(config, retry_policy) -> None:
    client = FakeGenerationClient()

    assert ClothingTaggingAgent(config, client, retry_policy).analyze("data:image/png;base64,@@@").is_empty
    assert client.calls == []


def test_build_item_fills_defaults(config, clock) -> None:
    agent = ClothingTaggingAgent(config, FakeGenerationClient(), clock=clock)
    stamp = clock.now

    item = agent.build_item(JPEG_DATA_URL, ClothingAnalysis())

    assert item.item_id == str(stamp)
    assert item.date_added == stamp
    assert item.category == UNNAMED_CATEGORY
    assert item.color == UNNAMED_COLOR
    assert item.season is Season.ALL_YEAR
    assert item.formality is Formality.CASUAL
    assert item.wear_count == 0


# --- stylist -------------------------------------------------------------


def test_stylist_keeps_only_known_ids_in_wardrobe_order(config, retry_policy, weather) -> None:
    items = [make_item("1", category="大衣"), make_item("2", category="牛仔裤"), make_item("3")]
    client = FakeGenerationClient(['{"selectedItemIds": ["2", "1", "99"], "reasoning": "Title: 通勤"}'])
    agent = OutfitStylistAgent(config, client, retry_policy)

    recommendation = agent.recommend(items, weather, "约会", UserProfile(gender=Gender.MALE))

    assert recommendation.item_ids == ["1", "2"]
    assert recommendation.reasoning == "Title: 通勤"
    prompt = client.calls[0]["parts"][0]
    assert "约会" in prompt and "北京, 8°C (晴)" in prompt
    assert "Male (Men's Style)" in prompt


def test_stylist_with_no_usable_ids_reports_no_match(config, retry_policy, weather) -> None:
    client = FakeGenerationClient(['{"selectedItemIds": ["404"], "reasoning": ""}'])

    recommendation = OutfitStylistAgent(config, client, retry_policy).recommend([make_item("1")], weather)

    assert recommendation.items == []
    assert recommendation.reasoning == NO_MATCH_REASONING


def test_stylist_unparseable_output_is_busy(config, retry_policy, weather) -> None:
    client = FakeGenerationClient(["not json at all"])

    suggestion = OutfitStylistAgent(config, client, retry_policy).suggest_outfit([make_item("1")], weather)

    assert suggestion.selected_item_ids == []
    assert suggestion.reasoning == BUSY_REASONING


def test_stylist_exhausted_retries_is_unavailable(config, retry_policy, weather, sleeps) -> None:
    client = FakeGenerationClient([ApiError("429", code=429)] * 3)

    recommendation = OutfitStylistAgent(config, client, retry_policy).recommend([make_item("1")], weather)

    assert recommendation.reasoning == UNAVAILABLE_REASONING
    assert len(client.calls) == 3
    assert sleeps == [1.0, 2.0]


def test_stylist_empty_wardrobe_skips_the_model(config, weather) -> None:
    client = FakeGenerationClient()

    recommendation = OutfitStylistAgent(config, client).recommend([], weather)

    assert recommendation.reasoning == EMPTY_WARDROBE_REASONING
    assert client.calls == []


# --- shopping ------------------------------------------------------------


def test_shopping_advice_parsed(config, retry_policy) -> None:
    client = FakeGenerationClient(['{"verdict": "买", "score": 86, "reasoning": "百搭"}'])
    items = [make_item("1", category="衬衫", color="白色")]

    advice = ShoppingAdvisorAgent(config, client, retry_policy).evaluate_purchase(
        PNG_DATA_URL, items, UserProfile()
    )

    assert (advice.verdict, advice.score, advice.reasoning) == ("买", 86, "百搭")
    assert "[白色衬衫]" in client.calls[0]["parts"][1]


def test_shopping_malformed_output_declines(config, retry_policy) -> None:
    client = FakeGenerationClient(['{"verdict": "也许"}'])

    advice = ShoppingAdvisorAgent(config, client, retry_policy).evaluate_purchase(PNG_DATA_URL, [])

    assert (advice.verdict, advice.score, advice.reasoning) == ("不买", 0, "分析失败")


def test_shopping_failure_declines_as_busy(config, retry_policy) -> None:
    client = FakeGenerationClient([GenerationError("no key")])

    advice = ShoppingAdvisorAgent(config, client, retry_policy).evaluate_purchase(PNG_DATA_URL, [])

    assert (advice.verdict, advice.score, advice.reasoning) == ("不买", 0, "服务繁忙。")


# --- try-on --------------------------------------------------------------


def _image_result(payload: bytes = b"render") -> GenerationResult:
    return GenerationResult(images=[InlineImage(mime_type="image/png", data=payload)])


def test_try_on_with_photo_sends_photo_first_and_caps_clothes(config, retry_policy) -> None:
    client = FakeGenerationClient([_image_result()])
    items = [make_item(str(i)) for i in range(5)]

    image = TryOnAgent(config, client, retry_policy).try_on(items, UserProfile(height="165"), PNG_DATA_URL)

    assert image.startswith("data:image/png;base64,")
    parts = client.calls[0]["parts"]
    assert client.calls[0]["model"] == config.image_model
    assert parts[0].mime_type == "image/png"
    assert len(parts) == 1 + MAX_CLOTHING_IMAGES + 1
    assert "IDENTITY LOCK" in parts[-1]
    assert "165cm" in parts[-1]


def test_try_on_falls_back_to_flat_lay(config, retry_policy) -> None:
    client = FakeGenerationClient([GenerationResult(text="sorry"), _image_result(b"flat")])
    items = [make_item("1", category="毛衣", color="米白"), make_item("2", category="长裙", color="黑色")]

    image = TryOnAgent(config, client, retry_policy).try_on(items, UserProfile())

    assert InlineImage("image/png", b"flat").to_data_url() == image
    assert "FASHION CATALOG SHOOT" in client.calls[0]["parts"][-1]
    assert "米白 毛衣 + 黑色 长裙" in client.calls[1]["parts"][0]


def test_try_on_gives_up_with_empty_string(config, retry_policy, sleeps) -> None:
    client = FakeGenerationClient([ApiError("quota", code=429)] * 4)

    image = TryOnAgent(config, client, retry_policy).try_on([make_item("1")], UserProfile())

    assert image == ""
    assert len(client.calls) == 4
    assert sleeps == [2.0, 1.0]


def test_try_on_mode_selection() -> None:
    profile = UserProfile(avatar=PNG_DATA_URL)

    assert default_mode(JPEG_DATA_URL, profile) is TryOnMode.PHOTO
    assert default_mode(None, profile) is TryOnMode.AVATAR
    assert default_mode(None, UserProfile()) is TryOnMode.AI
    assert reference_image(TryOnMode.AVATAR, JPEG_DATA_URL, profile) == PNG_DATA_URL
    assert reference_image(TryOnMode.AI, JPEG_DATA_URL, profile) is None


# --- chat ----------------------------------------------------------------


def test_chat_includes_wardrobe_context(config) -> None:
    client = FakeGenerationClient(["试试米色风衣。"])
    items = [make_item(str(i), category=f"单品{i}") for i in range(7)]

    reply = ChatAgent(config, client).chat("明天穿什么？", items)

    assert reply == "试试米色风衣。"
    prompt = client.calls[0]["parts"][0]
    assert "用户有 7 件衣服" in prompt
    assert "单品4" in prompt and "单品5" not in prompt
    assert "明天穿什么？" in prompt


def test_chat_empty_reply_and_exhaustion(config, sleeps) -> None:
    policy = DefaultingRetryPolicy(NETWORK_BUSY_REPLY, sleep=sleeps.append)

    assert ChatAgent(config, FakeGenerationClient([GenerationResult()]), policy).chat("hi", []) == NO_ANSWER_REPLY

    busy = FakeGenerationClient([ApiError("RESOURCE_EXHAUSTED")] * 3)
    assert ChatAgent(config, busy, policy).chat("hi", []) == NETWORK_BUSY_REPLY
    assert len(busy.calls) == 3


# --- prompt fragments ------------------------------------------------------


def test_prompts_never_invent_body_stats() -> None:
    assert "Do not hallucinate numbers" in user_context(UserProfile(height="170"))
    assert "Height: 170cm, Weight: 55kg" in user_context(UserProfile(height="170", weight="55"))
    assert body_description(UserProfile()) == "Female model, Average body type"
    assert body_description(UserProfile(gender=Gender.UNISEX, weight="60")) == "Androgynous model, Body Stats:  60kg"
    assert wardrobe_chat_context([]) == "用户有 0 件衣服，包括:  等。"
