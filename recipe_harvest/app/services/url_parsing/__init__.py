"""URL recipe parsing package.

This package provides the building blocks for extracting recipes from fetched
pages using multiple strategies: schema.org JSON-LD, microdata, hostname-tuned
CSS selectors and generic HTML selectors. The orchestration lives in
``recipe_harvest.app.services.url_recipe_parser``.
"""

from recipe_harvest.app.services.url_parsing.confidence import agreement_bonus, score_recipe
from recipe_harvest.app.services.url_parsing.errors import (
    FieldMappingError,
    JsonLdParseError,
    RecipeExtractionError,
)
from recipe_harvest.app.services.url_parsing.instructions import (
    classify_instruction,
    flatten_instructions,
)
from recipe_harvest.app.services.url_parsing.models import (
    ExtractionMethod,
    ExtractionResult,
    PartialRecipe,
    merged_method,
)
from recipe_harvest.app.services.url_parsing.normalizer import (
    NormalizationResult,
    normalize_recipe,
)
from recipe_harvest.app.services.url_parsing.parsing_utils import (
    clean_instruction,
    clean_text,
    extract_number,
    extract_time,
    parse_iso8601_duration,
)

__all__ = [
    # Models
    "ExtractionMethod",
    "ExtractionResult",
    "PartialRecipe",
    "merged_method",
    # Errors
    "FieldMappingError",
    "JsonLdParseError",
    "RecipeExtractionError",
    # Normalization
    "NormalizationResult",
    "normalize_recipe",
    # Scoring
    "agreement_bonus",
    "score_recipe",
    # Parsing utilities
    "classify_instruction",
    "clean_instruction",
    "clean_text",
    "extract_number",
    "extract_time",
    "flatten_instructions",
    "parse_iso8601_duration",
]
