"""Per-site corrections applied to JSON-LD Recipe objects before field mapping.

Each hostname family maps to an ordered list of corrections. A correction
receives a (deep-copied) recipe dict and returns the corrected dict, or
``None`` when it had nothing to change.
"""

import copy
import logging
import re
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

Correction = Callable[[dict], Optional[dict]]


class NormalizationResult(NamedTuple):
    recipe: dict
    corrections: List[str]

    @property
    def improved(self) -> bool:
        return bool(self.corrections)


def _as_list(value) -> list:
    return value if isinstance(value, list) else [value]


def _item_text(item) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return item.get("text") or item.get("name") or ""
    return str(item)


def _flatten_howto_sections(recipe: dict) -> Optional[dict]:
    instructions = recipe.get("recipeInstructions")
    if not isinstance(instructions, list):
        return None
    flattened = []
    changed = False
    for instruction in instructions:
        if isinstance(instruction, dict) and instruction.get("@type") == "HowToSection":
            children = instruction.get("itemListElement") or instruction.get("hasStep")
            if children:
                flattened.extend(
                    step
                    for step in _as_list(children)
                    if not isinstance(step, dict) or step.get("@type") in (None, "HowToStep")
                )
                changed = True
                continue
        flattened.append(instruction)
    if not changed:
        return None
    recipe["recipeInstructions"] = flattened
    return recipe


def _collapse_ingredient_objects(recipe: dict) -> Optional[dict]:
    ingredients = recipe.get("recipeIngredient")
    if not isinstance(ingredients, list):
        return None
    if not any(isinstance(item, dict) and item.get("text") for item in ingredients):
        return None
    recipe["recipeIngredient"] = [
        item["text"] if isinstance(item, dict) and item.get("text") else item
        for item in ingredients
    ]
    return recipe


def _unwrap_item_list_instructions(recipe: dict) -> Optional[dict]:
    instructions = recipe.get("recipeInstructions")
    if (
        isinstance(instructions, dict)
        and instructions.get("@type") == "ItemList"
        and instructions.get("itemListElement")
    ):
        recipe["recipeInstructions"] = instructions["itemListElement"]
        return recipe
    return None


def _flatten_nested_ingredient_groups(recipe: dict) -> Optional[dict]:
    ingredients = recipe.get("recipeIngredient")
    if not isinstance(ingredients, list):
        return None
    if not any(isinstance(item, dict) and item.get("itemListElement") for item in ingredients):
        return None
    flattened = []
    for item in ingredients:
        if isinstance(item, dict) and item.get("itemListElement"):
            flattened.extend(_item_text(nested) for nested in _as_list(item["itemListElement"]))
        else:
            flattened.append(_item_text(item))
    recipe["recipeIngredient"] = [text for text in flattened if text]
    return recipe


UK_TO_US_INGREDIENTS: Tuple[Tuple[str, str], ...] = (
    ("caster sugar", "superfine sugar"),
    ("plain flour", "all-purpose flour"),
    ("self-raising flour", "self-rising flour"),
    ("bicarbonate of soda", "baking soda"),
    ("cornflour", "cornstarch"),
)


def _translate_uk_ingredients(recipe: dict) -> Optional[dict]:
    ingredients = recipe.get("recipeIngredient")
    if not isinstance(ingredients, list):
        return None
    translated = []
    changed = False
    for ingredient in ingredients:
        if isinstance(ingredient, str):
            updated = ingredient
            for uk, us in UK_TO_US_INGREDIENTS:
                updated = re.sub(re.escape(uk), us, updated, flags=re.I)
            changed = changed or updated != ingredient
            translated.append(updated)
        else:
            translated.append(ingredient)
    if not changed:
        return None
    recipe["recipeIngredient"] = translated
    return recipe


TIP_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"^tip:",
        r"^note:",
        r"^chef's note:",
        r"^variation:",
        r"^storage:",
        r"^make ahead:",
    )
)


def _drop_tip_steps(recipe: dict) -> Optional[dict]:
    instructions = recipe.get("recipeInstructions")
    if not isinstance(instructions, list):
        return None
    kept = [
        step
        for step in instructions
        if not any(p.search(_item_text(step).strip()) for p in TIP_PATTERNS)
    ]
    if len(kept) == len(instructions):
        return None
    recipe["recipeInstructions"] = kept
    return recipe


VERBOSE_INGREDIENT_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r",\s*such as\s+[^,]+",
        r"\s*\([^)]*see note[^)]*\)",
        r",\s*or to taste",
        r",\s*more as needed",
    )
)


def _trim_verbose_ingredients(recipe: dict) -> Optional[dict]:
    ingredients = recipe.get("recipeIngredient")
    if not isinstance(ingredients, list):
        return None
    trimmed = []
    for ingredient in ingredients:
        if isinstance(ingredient, str):
            for pattern in VERBOSE_INGREDIENT_PATTERNS:
                ingredient = pattern.sub("", ingredient)
        trimmed.append(ingredient)
    if trimmed == ingredients:
        return None
    recipe["recipeIngredient"] = trimmed
    return recipe


COMMUNITY_ASIDE_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"\s*\(this is what I do\)",
        r"\s*\(my preference\)",
        r"\s*\(optional, but recommended\)",
        r"\s*\(trust me on this\)",
        r"\s*\(learned this the hard way\)",
    )
)


def _strip_community_asides(recipe: dict) -> Optional[dict]:
    instructions = recipe.get("recipeInstructions")
    if not isinstance(instructions, list):
        return None
    cleaned = []
    changed = False
    for step in instructions:
        text = _item_text(step)
        stripped = text
        for pattern in COMMUNITY_ASIDE_PATTERNS:
            stripped = pattern.sub("", stripped)
        stripped = stripped.strip()
        if stripped == text.strip():
            cleaned.append(step)
            continue
        changed = True
        if isinstance(step, dict):
            cleaned.append({**step, "text": stripped})
        else:
            cleaned.append(stripped)
    if not changed:
        return None
    recipe["recipeInstructions"] = cleaned
    return recipe


def _tidy_ingredient_spacing(recipe: dict) -> Optional[dict]:
    ingredients = recipe.get("recipeIngredient")
    if not isinstance(ingredients, list):
        return None
    tidied = [
        re.sub(r"(\d+)\s*-\s*(\d+)", r"\1-\2", re.sub(r"\s+", " ", item)).strip()
        if isinstance(item, str)
        else item
        for item in ingredients
    ]
    if tidied == ingredients:
        return None
    recipe["recipeIngredient"] = tidied
    return recipe


NORMALIZATION_TABLE: Dict[str, Tuple[Tuple[str, Correction], ...]] = {
    "foodnetwork.com": (
        ("Flattened Food Network HowToSection instructions", _flatten_howto_sections),
        ("Collapsed Food Network ingredient objects", _collapse_ingredient_objects),
    ),
    "bbcgoodfood.com": (
        ("Unwrapped BBC Good Food ItemList instructions", _unwrap_item_list_instructions),
        ("Flattened BBC Good Food nested ingredients", _flatten_nested_ingredient_groups),
        ("Translated UK ingredient names to US equivalents", _translate_uk_ingredients),
    ),
    "simplyrecipes.com": (
        ("Removed Simply Recipes tips from instructions", _drop_tip_steps),
        ("Trimmed Simply Recipes verbose ingredients", _trim_verbose_ingredients),
    ),
    "food52.com": (
        ("Removed Food52 community notes from instructions", _strip_community_asides),
        ("Tidied Food52 ingredient formatting", _tidy_ingredient_spacing),
    ),
}


def _host_matches(hostname: str, key: str) -> bool:
    return hostname == key or hostname.endswith("." + key)


def corrections_for(hostname: str) -> Tuple[Tuple[str, Correction], ...]:
    hostname = (hostname or "").lower()
    for key, corrections in NORMALIZATION_TABLE.items():
        if _host_matches(hostname, key):
            return corrections
    return ()


def normalize_recipe(recipe: dict, hostname: str) -> NormalizationResult:
    """Apply the hostname's corrections to a parsed JSON-LD Recipe object."""
    corrections = corrections_for(hostname)
    if not corrections:
        return NormalizationResult(recipe, [])

    current = copy.deepcopy(recipe)
    applied: List[str] = []
    for label, correction in corrections:
        try:
            corrected = correction(copy.deepcopy(current))
        except (TypeError, AttributeError, KeyError, ValueError) as exc:
            logger.warning("Correction '%s' failed for %s: %s", label, hostname, exc)
            continue
        if corrected is not None:
            current = corrected
            applied.append(label)

    if applied:
        logger.info("Applied %d JSON-LD corrections for %s: %s", len(applied), hostname, applied)
    return NormalizationResult(current, applied)
