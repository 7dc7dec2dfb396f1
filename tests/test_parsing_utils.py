import pytest

from recipe_harvest.app.services.url_parsing.errors import FieldMappingError
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    clean_instruction,
    clean_markup_text,
    clean_text,
    coerce_tags,
    duration_value,
    extract_number,
    extract_time,
    format_duration,
    image_value,
    parse_iso8601_duration,
    text_list,
    text_value,
)


def test_clean_text_collapses_whitespace():
    assert clean_text("  Chop\n\t the   onions ") == "Chop the onions"
    assert clean_text(None) == ""


def test_clean_markup_text_unescapes_and_strips_tags():
    assert clean_markup_text("Salt &amp; <b>pepper</b>") == "Salt & pepper"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1. Preheat the oven", "Preheat the oven"),
        ("Step 2: Whisk the eggs", "Whisk the eggs"),
        ("step 3 Fold gently", "Fold gently"),
        ("1. Step 2: 3. Mix well", "Mix well"),
        ("2.5 cups of stock go in next", "2.5 cups of stock go in next"),
    ],
)
def test_clean_instruction(raw, expected):
    assert clean_instruction(raw) == expected


def test_clean_instruction_is_idempotent():
    for raw in ["1. Step 2: 3. Mix well", "Step 10:   Rest the dough", "Bake"]:
        once = clean_instruction(raw)
        assert clean_instruction(once) == once


def test_extract_number():
    assert extract_number("Serves 4") == 4
    assert extract_number("Makes 2.5 cups") == 2.5
    assert extract_number(6) == 6
    assert extract_number("a few") is None
    assert extract_number(None) is None


def test_format_duration_carries_minutes():
    assert format_duration(0, 90) == "1h 30m"
    assert format_duration(2, 0) == "2h"
    assert format_duration(0, 0) is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1 hour 30 minutes", "1h 30m"),
        ("45 minutes", "45m"),
        ("Total: 2 hrs", "2h"),
        ("90 mins", "1h 30m"),
        ("1h30m", "1h 30m"),
        ("1.5 hours", "1h 30m"),
        ("Cook: 2.25 hrs", "2h 15m"),
        ("0.5 hr 10 mins", "40m"),
        ("overnight", "overnight"),
    ],
)
def test_extract_time(text, expected):
    assert extract_time(text) == expected


def test_extract_time_empty():
    assert extract_time("") is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("PT1H30M", "1h 30m"),
        ("PT45M", "45m"),
        ("PT90M", "1h 30m"),
        ("P1DT2H", "26h"),
        ("PT10M45S", "11m"),
        ("PT0M", None),
        ("1 hour", None),
        ("", None),
    ],
)
def test_parse_iso8601_duration(value, expected):
    assert parse_iso8601_duration(value) == expected


def test_duration_value_handles_iso_and_free_text():
    assert duration_value("PT20M") == "20m"
    assert duration_value("20 minutes") == "20m"
    assert duration_value(None) is None


def test_text_value_shapes():
    assert text_value("Soup") == "Soup"
    assert text_value({"@value": "Stew"}) == "Stew"
    assert text_value(["", "First", "Second"]) == "First"
    assert text_value(12) == "12"


def test_text_value_rejects_objects_without_text():
    with pytest.raises(FieldMappingError):
        text_value({"@type": "Thing", "url": "https://example.com"})


def test_text_list_skips_unusable_entries():
    value = ["1 cup rice", {"text": "2 cups water"}, {"url": "x"}, "", ["pinch of salt"]]
    assert text_list(value) == ["1 cup rice", "2 cups water", "pinch of salt"]


def test_image_value_formats():
    assert image_value("https://example.com/a.jpg") == "https://example.com/a.jpg"
    assert image_value({"contentUrl": "https://example.com/b.jpg"}) == "https://example.com/b.jpg"
    assert image_value([{"name": "no url"}, "https://example.com/c.jpg"]) == "https://example.com/c.jpg"
    assert image_value({}) is None


def test_coerce_tags_splits_and_dedupes():
    assert coerce_tags("Dessert, Baking", ["baking", "American"]) == ["Dessert", "Baking", "American"]
