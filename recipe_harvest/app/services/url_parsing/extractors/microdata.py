"""Schema.org microdata recipe extraction (itemscope/itemprop markup)."""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from recipe_harvest.app.services.url_parsing.confidence import score_recipe
from recipe_harvest.app.services.url_parsing.constants import MIN_INSTRUCTION_LENGTH
from recipe_harvest.app.services.url_parsing.extractors.schema_org import validate_recipe
from recipe_harvest.app.services.url_parsing.extractors.selectors import element_text
from recipe_harvest.app.services.url_parsing.models import (
    ExtractionMethod,
    ExtractionResult,
    PartialRecipe,
)
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    clean_instruction,
    clean_text,
    dedupe,
    duration_value,
    extract_number,
)

logger = logging.getLogger(__name__)

_RECIPE_ITEMTYPE_RE = re.compile(r"schema\.org/Recipe\b", re.I)


def find_recipe_scope(document: BeautifulSoup) -> Optional[Tag]:
    return document.find(attrs={"itemtype": _RECIPE_ITEMTYPE_RE})


def _owner_scope(element: Tag) -> Optional[Tag]:
    return element.find_parent(attrs={"itemscope": True})


def own_props(scope: Tag, prop: str) -> List[Tag]:
    """Elements carrying ``itemprop=prop`` that belong to this scope, not a nested one."""
    pattern = re.compile(rf"(^|\s){re.escape(prop)}(\s|$)")
    return [el for el in scope.find_all(attrs={"itemprop": pattern}) if _owner_scope(el) is scope]


def prop_value(element: Tag) -> str:
    for attr in ("content", "datetime"):
        value = element.get(attr)
        if value and value.strip():
            return clean_text(value)
    if element.name in ("img", "source", "video", "audio"):
        return (element.get("src") or element.get("data-src") or "").strip()
    if element.name in ("a", "link"):
        return (element.get("href") or "").strip()
    if element.name == "meta":
        return ""
    return element_text(element)


def _first_value(scope: Tag, *props: str) -> Optional[str]:
    for prop in props:
        for element in own_props(scope, prop):
            value = prop_value(element)
            if value:
                return value
    return None


def _all_values(scope: Tag, *props: str) -> List[str]:
    for prop in props:
        values = [prop_value(el) for el in own_props(scope, prop)]
        values = [value for value in values if value]
        if values:
            return values
    return []


def _instruction_texts(scope: Tag) -> List[str]:
    texts: List[str] = []
    for element in own_props(scope, "recipeInstructions"):
        if element.has_attr("itemscope"):
            step_text = _first_value(element, "text", "name", "description")
            texts.append(step_text or element_text(element))
            continue
        nested_steps = element.find_all(attrs={"itemtype": re.compile("HowToStep", re.I)})
        items = nested_steps or element.find_all("li")
        if items:
            texts.extend(element_text(item) for item in items)
        elif element.find("p"):
            texts.extend(element_text(p) for p in element.find_all("p"))
        else:
            texts.append(prop_value(element))
    steps = [clean_instruction(text) for text in texts]
    return [step for step in steps if len(step) > MIN_INSTRUCTION_LENGTH]


def extract_recipe_from_microdata(document: BeautifulSoup, url: str) -> Optional[PartialRecipe]:
    scope = find_recipe_scope(document)
    if scope is None:
        return None
    image = None
    for element in own_props(scope, "image"):
        image = prop_value(element) or element.get("src")
        if image:
            break
    return PartialRecipe(
        title=_first_value(scope, "name"),
        description=_first_value(scope, "description"),
        image=image or None,
        prep_time=duration_value(_first_value(scope, "prepTime")),
        cook_time=duration_value(_first_value(scope, "cookTime")),
        total_time=duration_value(_first_value(scope, "totalTime")),
        servings=extract_number(_first_value(scope, "recipeYield", "yield")),
        ingredients=_all_values(scope, "recipeIngredient", "ingredients"),
        instructions=_instruction_texts(scope),
        tags=dedupe(_all_values(scope, "recipeCategory") + _all_values(scope, "recipeCuisine")),
        source_url=url,
    )


class MicrodataExtractor:
    """Generic extractor for pages marked up with itemscope/itemprop."""

    name = "microdata"

    def can_handle(self, hostname: str) -> bool:
        return True

    def extract(self, document: BeautifulSoup, source_url: str) -> ExtractionResult:
        method = ExtractionMethod.MICRODATA.value
        try:
            recipe = extract_recipe_from_microdata(document, source_url)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Microdata extraction failed for %s", source_url)
            return ExtractionResult.failed(method, [f"Microdata parsing error: {exc}"])

        if recipe is None or not recipe.has_content:
            return ExtractionResult.failed(method, ["No microdata Recipe scope found"])

        logger.info(
            "Microdata recipe for %s: ingredients=%d, steps=%d",
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
