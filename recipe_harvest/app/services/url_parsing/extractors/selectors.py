"""Ordered CSS-selector lookups shared by the markup-based extractors."""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict
from soupsieve import SelectorSyntaxError

from recipe_harvest.app.services.url_parsing.constants import IMAGE_ATTRIBUTES
from recipe_harvest.app.services.url_parsing.models import PartialRecipe
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    clean_instruction,
    clean_text,
    extract_number,
    extract_time,
)

logger = logging.getLogger(__name__)


class SelectorSet(BaseModel):
    """Candidate selectors per field, most specific first."""

    model_config = ConfigDict(frozen=True)

    title: Tuple[str, ...] = ()
    description: Tuple[str, ...] = ()
    image: Tuple[str, ...] = ()
    ingredients: Tuple[str, ...] = ()
    instructions: Tuple[str, ...] = ()
    prep_time: Tuple[str, ...] = ()
    cook_time: Tuple[str, ...] = ()
    total_time: Tuple[str, ...] = ()
    servings: Tuple[str, ...] = ()
    difficulty: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    default_tags: Tuple[str, ...] = ()


def select_elements(document, selector: str, limit: Optional[int] = None) -> list:
    try:
        if limit == 1:
            found = document.select_one(selector)
            return [found] if found is not None else []
        return document.select(selector)
    except (SelectorSyntaxError, NotImplementedError) as exc:
        logger.warning("Skipping invalid selector %r: %s", selector, exc)
        return []


def element_text(element) -> str:
    return clean_text(element.get_text(" ", strip=True))


def select_first_text(document, selectors: Sequence[str]) -> Optional[str]:
    """Text of the first element matched by the first selector that yields any."""
    for selector in selectors:
        for element in select_elements(document, selector, limit=1):
            text = element_text(element)
            if text:
                logger.debug("Selector %r matched text %r", selector, text[:60])
                return text
    return None


def select_all_texts(document, selectors: Sequence[str]) -> List[str]:
    """Texts of all elements matched by the first selector that yields any."""
    for selector in selectors:
        texts = [element_text(el) for el in select_elements(document, selector)]
        texts = [text for text in texts if text]
        if texts:
            logger.debug("Selector %r matched %d items", selector, len(texts))
            return texts
    return []


def _attribute_url(element, attributes: Iterable[str]) -> Optional[str]:
    for attr in attributes:
        value = element.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if not value or not value.strip():
            continue
        value = value.strip()
        if attr.endswith("srcset"):
            value = value.split(",")[0].strip().split(" ")[0]
        if value and not value.startswith("data:"):
            return value
    return None


def select_attribute(
    document, selectors: Sequence[str], attributes: Sequence[str] = IMAGE_ATTRIBUTES
) -> Optional[str]:
    """First non-empty attribute on the first element matched by each selector in turn."""
    for selector in selectors:
        for element in select_elements(document, selector, limit=1):
            value = _attribute_url(element, attributes)
            if value:
                return value
    return None


def extract_with_selectors(document: BeautifulSoup, selectors: SelectorSet) -> PartialRecipe:
    """Run a selector set against a document and build a partial recipe."""
    title = select_first_text(document, selectors.title)
    description = select_first_text(document, selectors.description)
    image = select_attribute(document, selectors.image)
    ingredients = select_all_texts(document, selectors.ingredients)
    instructions = [
        step
        for step in (clean_instruction(text) for text in select_all_texts(document, selectors.instructions))
        if step
    ]
    tags = select_all_texts(document, selectors.tags) if selectors.tags else []

    return PartialRecipe(
        title=title,
        description=description,
        image=image,
        prep_time=extract_time(select_first_text(document, selectors.prep_time) or ""),
        cook_time=extract_time(select_first_text(document, selectors.cook_time) or ""),
        total_time=extract_time(select_first_text(document, selectors.total_time) or ""),
        servings=extract_number(select_first_text(document, selectors.servings)),
        difficulty=select_first_text(document, selectors.difficulty),
        ingredients=ingredients,
        instructions=instructions,
        tags=tags or list(selectors.default_tags),
    )
