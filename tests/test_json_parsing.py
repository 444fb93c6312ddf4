"""Model-output JSON extraction and the schemas it feeds."""

from __future__ import annotations

import base64

import pytest

from models.advice import ClothingAnalysis, OutfitSuggestion, ShoppingAdvice
from models.taxonomy import Formality, Season
from tools.images import split_data_url
from tools.json_parsing import parse_model_json, parse_model_payload


def test_fenced_block_is_preferred() -> None:
    text = 'Here you go:\n```json\n{"category": "衬衫"}\n```\nEnjoy!'

    assert parse_model_json(text) == {"category": "衬衫"}


def test_braces_are_extracted_from_chatter() -> None:
    text = 'Sure! {"selectedItemIds": ["1"], "reasoning": "ok"} Hope that helps.'

    assert parse_model_json(text) == {"selectedItemIds": ["1"], "reasoning": "ok"}


def test_single_object_array_yields_the_object() -> None:
    # The brace slice wins over the surrounding brackets.
    assert parse_model_json('[{"category": "T恤"}]') == {"category": "T恤"}


def test_multi_object_array_does_not_parse() -> None:
    assert parse_model_json('[{"a": 1}, {"b": 2}]') is None


def test_fenced_array_parses_as_a_list() -> None:
    assert parse_model_json('```json\n[{"a": 1}, {"b": 2}]\n```') == [{"a": 1}, {"b": 2}]


@pytest.mark.parametrize("text", [None, "", "no json here", "{broken", "```json\n{nope}\n```"])
def test_unparseable_text_returns_none(text) -> None:
    assert parse_model_json(text) is None


def test_payload_takes_first_element_of_a_list() -> None:
    text = '[{"category": "T恤", "color": "白色", "season": "夏", "formality": "休闲"}]'

    analysis = parse_model_payload(text, ClothingAnalysis, first_of_list=True)

    assert analysis is not None
    assert analysis.season is Season.SUMMER
    assert analysis.formality is Formality.CASUAL


def test_payload_rejects_schema_mismatch() -> None:
    assert parse_model_payload('{"selectedItemIds": "1,2"}', OutfitSuggestion) is None
    assert parse_model_payload('{"verdict": "maybe", "score": 50}', ShoppingAdvice) is None


def test_analysis_tolerates_unknown_labels_and_nulls() -> None:
    analysis = ClothingAnalysis.model_validate(
        {"category": "夹克", "color": None, "season": "雨季", "formality": "正式商务"}
    )

    assert analysis.color == ""
    assert analysis.season is None
    assert analysis.formality is Formality.BUSINESS
    assert not analysis.is_empty
    assert ClothingAnalysis().is_empty


def test_outfit_ids_are_stringified() -> None:
    suggestion = OutfitSuggestion.model_validate({"selectedItemIds": [1, "2"], "reasoning": "r"})

    assert suggestion.selected_item_ids == ["1", "2"]


@pytest.mark.parametrize("raw, expected", [(150, 100), (-3, 0), ("72.6", 73), (None, 0), (True, 0)])
def test_shopping_score_is_clamped(raw, expected: int) -> None:
    advice = ShoppingAdvice.model_validate({"verdict": "买", "score": raw})

    assert advice.score == expected


def test_shopping_advice_dumps_camel_case() -> None:
    advice = ShoppingAdvice.model_validate(
        {"verdict": "不买", "score": 20, "reasoning": "太像了", "similarItemId": "17"}
    )

    dumped = advice.model_dump(by_alias=True)
    assert dumped["similarItemId"] == "17"
    assert dumped["verdict"] == "不买"


def test_data_url_is_split_into_mime_and_bytes() -> None:
    image = split_data_url("data:image/png;base64," + base64.b64encode(b"png-bytes").decode())

    assert image.mime_type == "image/png"
    assert image.data == b"png-bytes"
    assert split_data_url(image.to_data_url()) == image


def test_bare_base64_defaults_to_jpeg() -> None:
    image = split_data_url(base64.b64encode(b"jpeg").decode())

    assert image.mime_type == "image/jpeg"
    assert image.as_part() == {"mime_type": "image/jpeg", "data": b"jpeg"}


def test_invalid_base64_raises_value_error() -> None:
    with pytest.raises(ValueError):
        split_data_url("data:image/png;base64,***")
