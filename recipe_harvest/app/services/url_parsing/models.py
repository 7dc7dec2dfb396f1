"""Pydantic models for URL recipe extraction."""

from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExtractionMethod(str, Enum):
    JSON_LD = "json-ld"
    MICRODATA = "microdata"
    CSS_SELECTORS = "css-selectors"
    SITE_SPECIFIC = "site-specific"


MERGED_PREFIX = "merged-"


def merged_method(method: str) -> str:
    """Tag a method as the source of a merged result, e.g. ``merged-json-ld``."""
    method = getattr(method, "value", method)
    if method.startswith(MERGED_PREFIX):
        return method
    return f"{MERGED_PREFIX}{method}"


def base_method(method: str) -> str:
    """Strip the merged prefix from a method tag."""
    method = getattr(method, "value", method)
    if method.startswith(MERGED_PREFIX):
        return method[len(MERGED_PREFIX) :]
    return method


class PartialRecipe(BaseModel):
    """A best-effort recipe; every field except the step lists may be missing."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    total_time: Optional[str] = None
    servings: Optional[Union[int, float]] = None
    difficulty: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    source_url: Optional[str] = None

    @property
    def has_timing(self) -> bool:
        return bool(self.prep_time or self.cook_time or self.total_time)

    @property
    def has_content(self) -> bool:
        return bool(self.title or self.ingredients or self.instructions)


class ExtractionResult(BaseModel):
    """Outcome of one extraction attempt, or of the whole pipeline."""

    model_config = ConfigDict(frozen=True)

    recipe: Optional[PartialRecipe] = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    method: str = ExtractionMethod.JSON_LD.value
    issues: List[str] = Field(default_factory=list)

    @classmethod
    def failed(cls, method: str, issues: List[str]) -> "ExtractionResult":
        return cls(recipe=None, confidence=0.0, method=getattr(method, "value", method), issues=issues)
