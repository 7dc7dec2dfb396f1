"""Heuristic confidence scoring for extracted recipes.

The numbers are tuning, not a contract. What must hold: scores stay within
[0, 1], and adding data to a recipe never lowers its score.
"""

from typing import Optional, Sequence

from recipe_harvest.app.services.url_parsing.constants import HIGH_QUALITY_HOSTS
from recipe_harvest.app.services.url_parsing.models import (
    ExtractionMethod,
    ExtractionResult,
    PartialRecipe,
    base_method,
)

METHOD_BASE = {
    ExtractionMethod.JSON_LD.value: 0.70,
    ExtractionMethod.SITE_SPECIFIC.value: 0.65,
    ExtractionMethod.MICRODATA.value: 0.60,
    ExtractionMethod.CSS_SELECTORS.value: 0.50,
}
DEFAULT_BASE = 0.40

TITLE_BONUS = 0.08
PER_INGREDIENT_BONUS = 0.02
MAX_INGREDIENT_BONUS = 0.12
PER_INSTRUCTION_BONUS = 0.02
MAX_INSTRUCTION_BONUS = 0.10
IMAGE_BONUS = 0.03
DESCRIPTION_BONUS = 0.03
TIMING_BONUS = 0.02
SERVINGS_BONUS = 0.02
REPUTATION_BONUS = 0.03

MULTI_SOURCE_TITLE_BONUS = 0.02
MULTI_SOURCE_INGREDIENT_BONUS = 0.03


def clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def is_high_quality_source(url: Optional[str]) -> bool:
    return any(host in (url or "") for host in HIGH_QUALITY_HOSTS)


def score_recipe(recipe: Optional[PartialRecipe], method: str) -> float:
    """Score a partial recipe produced by the given method."""
    if recipe is None or not recipe.has_content:
        return 0.0

    confidence = METHOD_BASE.get(base_method(method), DEFAULT_BASE)
    if recipe.title and len(recipe.title) > 3:
        confidence += TITLE_BONUS
    confidence += min(MAX_INGREDIENT_BONUS, len(recipe.ingredients) * PER_INGREDIENT_BONUS)
    confidence += min(MAX_INSTRUCTION_BONUS, len(recipe.instructions) * PER_INSTRUCTION_BONUS)
    if recipe.image:
        confidence += IMAGE_BONUS
    if recipe.description and len(recipe.description) > 20:
        confidence += DESCRIPTION_BONUS
    if recipe.has_timing:
        confidence += TIMING_BONUS
    if recipe.servings and recipe.servings > 0:
        confidence += SERVINGS_BONUS
    if is_high_quality_source(recipe.source_url):
        confidence += REPUTATION_BONUS
    return round(clamp(confidence), 4)


def agreement_bonus(results: Sequence[ExtractionResult]) -> float:
    """Extra confidence when independent strategies found the same core fields.

    Results are counted per extraction method, so two strategies reading the
    same JSON-LD block count once.
    """
    with_title = {base_method(r.method) for r in results if r.recipe and r.recipe.title}
    with_ingredients = {
        base_method(r.method) for r in results if r.recipe and r.recipe.ingredients
    }
    bonus = 0.0
    if len(with_title) > 1:
        bonus += MULTI_SOURCE_TITLE_BONUS
    if len(with_ingredients) > 1:
        bonus += MULTI_SOURCE_INGREDIENT_BONUS
    return bonus
