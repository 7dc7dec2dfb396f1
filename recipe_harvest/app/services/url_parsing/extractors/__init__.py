"""Recipe extractors for different parsing strategies."""

from recipe_harvest.app.services.url_parsing.extractors.heuristic import (
    GenericHtmlExtractor,
    extract_text_array_aggressive,
)
from recipe_harvest.app.services.url_parsing.extractors.microdata import (
    MicrodataExtractor,
    extract_recipe_from_microdata,
)
from recipe_harvest.app.services.url_parsing.extractors.schema_org import (
    JsonLdExtractor,
    extract_recipe_from_schema_org,
)
from recipe_harvest.app.services.url_parsing.extractors.sites import SITE_EXTRACTORS, SiteExtractor

__all__ = [
    "GenericHtmlExtractor",
    "JsonLdExtractor",
    "MicrodataExtractor",
    "SITE_EXTRACTORS",
    "SiteExtractor",
    "extract_recipe_from_microdata",
    "extract_recipe_from_schema_org",
    "extract_text_array_aggressive",
]
