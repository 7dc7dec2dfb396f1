"""Schema.org JSON-LD recipe extraction."""

import json
import logging
import re
from typing import Any, Callable, Iterator, List, Optional, Tuple
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from recipe_harvest.app.core.config import get_settings
from recipe_harvest.app.services.url_parsing.confidence import score_recipe
from recipe_harvest.app.services.url_parsing.constants import (
    ALTERNATE_INGREDIENT_KEYS,
    ALTERNATE_INSTRUCTION_KEYS,
    JSON_LD_TYPE_PATTERN,
    RECIPE_TYPE,
)
from recipe_harvest.app.services.url_parsing.errors import FieldMappingError, JsonLdParseError
from recipe_harvest.app.services.url_parsing.instructions import flatten_instructions
from recipe_harvest.app.services.url_parsing.models import (
    ExtractionMethod,
    ExtractionResult,
    PartialRecipe,
)
from recipe_harvest.app.services.url_parsing.normalizer import normalize_recipe
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    coerce_tags,
    duration_value,
    extract_number,
    image_value,
    text_list,
    text_value,
)

logger = logging.getLogger(__name__)

_WRAPPER_RE = re.compile(r"^\s*(?:<!--|//\s*<!\[CDATA\[|<!\[CDATA\[)|(?:-->|//\s*\]\]>|\]\]>)\s*$")


def hostname_of(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def load_json_ld_block(raw: str, index: int) -> Any:
    """Decode one script block, tolerating comment/CDATA wrappers and raw control chars."""
    cleaned = _WRAPPER_RE.sub("", raw.strip()).strip()
    try:
        return json.loads(cleaned, strict=False)
    except json.JSONDecodeError as exc:
        raise JsonLdParseError(index, str(exc)) from exc


def iter_json_ld_blocks(document: BeautifulSoup, issues: List[str]) -> Iterator[Any]:
    """Yield each decodable JSON-LD payload; undecodable blocks become issues."""
    scripts = document.find_all("script", attrs={"type": re.compile(JSON_LD_TYPE_PATTERN, re.I)})
    logger.debug("Found %d JSON-LD script blocks", len(scripts))
    for idx, script in enumerate(scripts):
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            logger.debug("JSON-LD block %d is empty", idx)
            continue
        try:
            yield load_json_ld_block(raw, idx)
        except JsonLdParseError as exc:
            logger.warning("%s (first 200 chars: %s)", exc, raw.strip()[:200])
            issues.append(str(exc))


def is_recipe_type(obj: dict) -> bool:
    raw = obj.get("@type")
    types = raw if isinstance(raw, list) else [raw]
    return any(
        isinstance(t, str) and t.rsplit("/", 1)[-1].lower() == RECIPE_TYPE for t in types
    )


def find_recipe(data: Any, max_depth: int, depth: int = 0) -> Optional[dict]:
    """Locate a Recipe object in a decoded JSON-LD payload."""
    if depth > max_depth:
        return None
    if isinstance(data, list):
        for item in data:
            found = find_recipe(item, max_depth, depth + 1)
            if found is not None:
                return found
        return None
    if not isinstance(data, dict):
        return None
    if is_recipe_type(data):
        return data
    if "@graph" in data:
        found = find_recipe(data["@graph"], max_depth, depth + 1)
        if found is not None:
            return found
    for key, value in data.items():
        if key == "@graph" or not isinstance(value, (dict, list)):
            continue
        found = find_recipe(value, max_depth, depth + 1)
        if found is not None:
            return found
    return None


def find_recipe_in_document(document: BeautifulSoup, issues: List[str]) -> Optional[dict]:
    max_depth = get_settings().json_ld_max_depth
    for payload in iter_json_ld_blocks(document, issues):
        recipe = find_recipe(payload, max_depth)
        if recipe is not None:
            return recipe
    return None


def _map_field(name: str, mapper: Callable[[], Any], issues: List[str], fallback=None):
    try:
        return mapper()
    except (FieldMappingError, TypeError, ValueError, AttributeError, KeyError) as exc:
        logger.warning("JSON-LD %s extraction failed: %s", name, exc)
        issues.append(f"JSON-LD {name} extraction failed: {exc}")
        return fallback


def extract_ingredients(recipe: dict) -> List[str]:
    for key in ALTERNATE_INGREDIENT_KEYS:
        ingredients = text_list(recipe.get(key))
        if ingredients:
            if key != "recipeIngredient":
                logger.info("Found %d ingredients under '%s'", len(ingredients), key)
            return ingredients
    for key, value in recipe.items():
        if "ingredient" in key.lower() and value:
            ingredients = text_list(value)
            if ingredients:
                logger.info("Found %d ingredients in property '%s'", len(ingredients), key)
                return ingredients
    logger.debug("No ingredients found in any JSON-LD path")
    return []


def extract_instructions(recipe: dict) -> List[str]:
    raw = recipe.get("recipeInstructions")
    steps = flatten_instructions(raw)
    if steps:
        return steps
    sources = [recipe]
    if isinstance(raw, dict):
        sources.append(raw)
    for source in sources:
        for key in ALTERNATE_INSTRUCTION_KEYS:
            if source.get(key):
                steps = flatten_instructions(source[key])
                if steps:
                    logger.info("Found %d steps under alternate key '%s'", len(steps), key)
                    return steps
    return []


def map_recipe(recipe: dict, hostname: str, issues: List[str]) -> PartialRecipe:
    """Normalize a JSON-LD Recipe object and map it onto a PartialRecipe."""
    normalized = normalize_recipe(recipe, hostname)
    data = normalized.recipe

    return PartialRecipe(
        title=_map_field("title", lambda: text_value(data.get("name")), issues),
        description=_map_field("description", lambda: text_value(data.get("description")), issues),
        image=_map_field("image", lambda: image_value(data.get("image")), issues),
        prep_time=_map_field("prepTime", lambda: duration_value(data.get("prepTime")), issues),
        cook_time=_map_field("cookTime", lambda: duration_value(data.get("cookTime")), issues),
        total_time=_map_field("totalTime", lambda: duration_value(data.get("totalTime")), issues),
        servings=_map_field(
            "servings",
            lambda: extract_number(text_value(data.get("recipeYield") or data.get("yield"))),
            issues,
        ),
        ingredients=_map_field("ingredients", lambda: extract_ingredients(data), issues, []),
        instructions=_map_field("instructions", lambda: extract_instructions(data), issues, []),
        tags=_map_field(
            "tags",
            lambda: coerce_tags(data.get("recipeCategory"), data.get("recipeCuisine")),
            issues,
            [],
        ),
    )


def extract_recipe_from_schema_org(
    document: BeautifulSoup, url: str
) -> Tuple[Optional[PartialRecipe], List[str]]:
    """Find and map the first JSON-LD Recipe in the document."""
    issues: List[str] = []
    raw_recipe = find_recipe_in_document(document, issues)
    if raw_recipe is None:
        return None, issues
    recipe = map_recipe(raw_recipe, hostname_of(url), issues)
    recipe = recipe.model_copy(update={"source_url": url})
    logger.info(
        "JSON-LD recipe for %s: title=%s, ingredients=%d, steps=%d",
        url,
        (recipe.title or "None")[:50],
        len(recipe.ingredients),
        len(recipe.instructions),
    )
    return recipe, issues


def validate_recipe(recipe: PartialRecipe) -> List[str]:
    issues = []
    if not recipe.title:
        issues.append("Missing title")
    if not recipe.ingredients:
        issues.append("Missing ingredients")
    if not recipe.instructions:
        issues.append("Missing instructions")
    return issues


class JsonLdExtractor:
    """Generic extractor for any page embedding a schema.org Recipe."""

    name = "json-ld"

    def can_handle(self, hostname: str) -> bool:
        return True

    def extract(self, document: BeautifulSoup, source_url: str) -> ExtractionResult:
        method = ExtractionMethod.JSON_LD.value
        try:
            recipe, issues = extract_recipe_from_schema_org(document, source_url)
        except Exception as exc:  # noqa: BLE001
            logger.exception("JSON-LD extraction failed for %s", source_url)
            return ExtractionResult.failed(method, [f"JSON-LD parsing error: {exc}"])

        if recipe is None or not recipe.has_content:
            return ExtractionResult.failed(method, issues + ["No JSON-LD Recipe schema found"])

        return ExtractionResult(
            recipe=recipe,
            confidence=score_recipe(recipe, method),
            method=method,
            issues=issues + validate_recipe(recipe),
        )
