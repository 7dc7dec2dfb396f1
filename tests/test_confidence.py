import pytest

from recipe_harvest.app.services.url_parsing.confidence import (
    agreement_bonus,
    is_high_quality_source,
    score_recipe,
)
from recipe_harvest.app.services.url_parsing.models import ExtractionResult, PartialRecipe


def test_missing_or_empty_recipe_scores_zero():
    assert score_recipe(None, "json-ld") == 0.0
    assert score_recipe(PartialRecipe(description="Only a description"), "json-ld") == 0.0


def test_method_bases_order():
    recipe = PartialRecipe(title="Pancakes")
    scores = [
        score_recipe(recipe, method)
        for method in ("json-ld", "site-specific", "microdata", "css-selectors", "mystery")
    ]
    assert scores == sorted(scores, reverse=True)
    assert score_recipe(recipe, "json-ld") == pytest.approx(0.78)


def test_merged_method_uses_underlying_base():
    recipe = PartialRecipe(title="Pancakes", ingredients=["1 cup flour"])
    assert score_recipe(recipe, "merged-microdata") == score_recipe(recipe, "microdata")


def test_adding_data_never_lowers_score():
    recipe = PartialRecipe(title="Pancakes")
    previous = score_recipe(recipe, "css-selectors")
    updates = [
        {"ingredients": ["1 cup flour", "1 egg"]},
        {"instructions": ["Whisk the batter.", "Cook on a hot griddle."]},
        {"image": "https://example.com/p.jpg"},
        {"description": "Fluffy weekend pancakes for a crowd."},
        {"prep_time": "10m"},
        {"servings": 4},
        {"source_url": "https://www.seriouseats.com/pancakes"},
    ]
    for update in updates:
        recipe = recipe.model_copy(update=update)
        current = score_recipe(recipe, "css-selectors")
        assert current >= previous
        previous = current


def test_list_bonuses_are_capped():
    few = PartialRecipe(title="Chili", ingredients=[f"item {i}" for i in range(6)])
    many = PartialRecipe(title="Chili", ingredients=[f"item {i}" for i in range(30)])
    assert score_recipe(few, "css-selectors") == score_recipe(many, "css-selectors")


def test_score_is_clamped():
    recipe = PartialRecipe(
        title="Everything Bagel",
        description="A long enough description to earn a bonus.",
        image="https://example.com/bagel.jpg",
        prep_time="1h",
        servings=12,
        ingredients=[f"ingredient {i}" for i in range(10)],
        instructions=[f"Step number {i} here" for i in range(10)],
        source_url="https://www.bbcgoodfood.com/recipes/bagels",
    )
    assert score_recipe(recipe, "json-ld") == 1.0


def test_high_quality_source():
    assert is_high_quality_source("https://cooking.nytimes.com/recipes/1")
    assert not is_high_quality_source("https://example.com/recipe")
    assert not is_high_quality_source(None)


def test_agreement_bonus():
    titled = ExtractionResult(recipe=PartialRecipe(title="Soup", ingredients=["water"]), confidence=0.8)
    scraped = ExtractionResult(
        recipe=PartialRecipe(title="Soup", ingredients=["water"]), confidence=0.6, method="css-selectors"
    )
    title_only = ExtractionResult(recipe=PartialRecipe(title="Soup"), confidence=0.5, method="microdata")
    failed = ExtractionResult.failed("css-selectors", ["nothing"])

    assert agreement_bonus([titled, failed]) == 0.0
    assert agreement_bonus([titled, title_only]) == pytest.approx(0.02)
    assert agreement_bonus([titled, scraped, failed]) == pytest.approx(0.05)


def test_agreement_bonus_counts_each_method_once():
    site_copy = ExtractionResult(recipe=PartialRecipe(title="Soup", ingredients=["water"]), confidence=0.8)
    block_copy = ExtractionResult(recipe=PartialRecipe(title="Soup", ingredients=["water"]), confidence=0.8)
    assert agreement_bonus([site_copy, block_copy]) == 0.0
    assert agreement_bonus([site_copy.model_copy(update={"method": "merged-json-ld"}), block_copy]) == 0.0
