"""Heuristic recipe extraction from HTML structure."""

import logging
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

from recipe_harvest.app.services.url_parsing.confidence import score_recipe
from recipe_harvest.app.services.url_parsing.constants import (
    AGGRESSIVE_MAX_TEXT_LENGTH,
    AGGRESSIVE_MIN_TEXT_LENGTH,
    GENERIC_COOK_TIME_SELECTORS,
    GENERIC_DESCRIPTION_SELECTORS,
    GENERIC_IMAGE_SELECTORS,
    GENERIC_INGREDIENT_SELECTORS,
    GENERIC_INSTRUCTION_SELECTORS,
    GENERIC_PREP_TIME_SELECTORS,
    GENERIC_SERVINGS_SELECTORS,
    GENERIC_TITLE_SELECTORS,
    GENERIC_TOTAL_TIME_SELECTORS,
    META_IMAGE_SELECTORS,
    META_TITLE_SELECTORS,
)
from recipe_harvest.app.services.url_parsing.extractors.schema_org import validate_recipe
from recipe_harvest.app.services.url_parsing.extractors.selectors import (
    SelectorSet,
    element_text,
    extract_with_selectors,
    select_attribute,
    select_elements,
    select_first_text,
)
from recipe_harvest.app.services.url_parsing.models import ExtractionMethod, ExtractionResult

logger = logging.getLogger(__name__)

GENERIC_SELECTORS = SelectorSet(
    title=GENERIC_TITLE_SELECTORS,
    description=GENERIC_DESCRIPTION_SELECTORS,
    image=GENERIC_IMAGE_SELECTORS,
    ingredients=GENERIC_INGREDIENT_SELECTORS,
    instructions=GENERIC_INSTRUCTION_SELECTORS,
    prep_time=GENERIC_PREP_TIME_SELECTORS,
    cook_time=GENERIC_COOK_TIME_SELECTORS,
    total_time=GENERIC_TOTAL_TIME_SELECTORS,
    servings=GENERIC_SERVINGS_SELECTORS,
)


def extract_text_array_aggressive(
    document: BeautifulSoup,
    selectors: Sequence[str],
    max_items: int,
    min_hits: int,
) -> List[str]:
    """Collect short, distinct texts from broad keyword selectors.

    Selectors are tried in order; collection stops once ``min_hits`` texts
    are gathered, and the result never exceeds ``max_items``.
    """
    results: List[str] = []
    for selector in selectors:
        for element in select_elements(document, selector):
            text = element_text(element)
            if AGGRESSIVE_MIN_TEXT_LENGTH < len(text) < AGGRESSIVE_MAX_TEXT_LENGTH and text not in results:
                results.append(text)
        if len(results) >= min_hits:
            logger.debug("Aggressive selector %r brought total to %d", selector, len(results))
            break
    return results[:max_items]


def meta_title(document: BeautifulSoup) -> Optional[str]:
    """Page title from social meta tags, then the first heading, then <title>."""
    title = select_attribute(document, META_TITLE_SELECTORS, attributes=("content",))
    return title or select_first_text(document, ("h1", "title"))


def meta_image(document: BeautifulSoup) -> Optional[str]:
    return select_attribute(document, META_IMAGE_SELECTORS, attributes=("content",))


class GenericHtmlExtractor:
    """Last-resort selector extraction for sites without structured data."""

    name = "generic-html"

    def can_handle(self, hostname: str) -> bool:
        return True

    def extract(self, document: BeautifulSoup, source_url: str) -> ExtractionResult:
        method = ExtractionMethod.CSS_SELECTORS.value
        try:
            title = select_first_text(document, GENERIC_SELECTORS.title)
            if not title:
                return ExtractionResult.failed(method, ["No recipe title found"])
            recipe = extract_with_selectors(document, GENERIC_SELECTORS)
            recipe = recipe.model_copy(update={"source_url": source_url})
        except Exception as exc:  # noqa: BLE001
            logger.exception("Generic HTML extraction failed for %s", source_url)
            return ExtractionResult.failed(method, [f"Generic HTML extraction error: {exc}"])

        logger.info(
            "Generic HTML for %s: ingredients=%d, steps=%d",
            source_url,
            len(recipe.ingredients),
            len(recipe.instructions),
        )
        return ExtractionResult(
            recipe=recipe,
            confidence=score_recipe(recipe, method),
            method=method,
            issues=validate_recipe(recipe),
        )
