"""Site-specific extractors: JSON-LD first, then hand-tuned selectors per site."""

import logging
from typing import Tuple

from bs4 import BeautifulSoup

from recipe_harvest.app.services.url_parsing.confidence import score_recipe
from recipe_harvest.app.services.url_parsing.extractors.schema_org import (
    extract_recipe_from_schema_org,
    validate_recipe,
)
from recipe_harvest.app.services.url_parsing.extractors.selectors import (
    SelectorSet,
    extract_with_selectors,
)
from recipe_harvest.app.services.url_parsing.models import ExtractionMethod, ExtractionResult

logger = logging.getLogger(__name__)


class SiteExtractor:
    """Extraction tuned to one hostname family.

    ``hostnames`` are substrings tested against the page hostname; when
    ``required_terms`` is set, at least one of them must also appear.
    """

    def __init__(
        self,
        name: str,
        hostnames: Tuple[str, ...],
        selectors: SelectorSet,
        required_terms: Tuple[str, ...] = (),
    ):
        self.name = name
        self.hostnames = hostnames
        self.selectors = selectors
        self.required_terms = required_terms

    def __repr__(self) -> str:
        return f"SiteExtractor({self.name!r})"

    def can_handle(self, hostname: str) -> bool:
        hostname = (hostname or "").lower()
        if not any(host in hostname for host in self.hostnames):
            return False
        return not self.required_terms or any(term in hostname for term in self.required_terms)

    def extract(self, document: BeautifulSoup, source_url: str) -> ExtractionResult:
        try:
            recipe, issues = extract_recipe_from_schema_org(document, source_url)
            method = ExtractionMethod.JSON_LD.value
            if recipe is None or not recipe.title:
                logger.info("%s: no usable JSON-LD title, falling back to selectors", self.name)
                recipe = extract_with_selectors(document, self.selectors)
                recipe = recipe.model_copy(update={"source_url": source_url})
                method = ExtractionMethod.SITE_SPECIFIC.value
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s extraction failed for %s", self.name, source_url)
            return ExtractionResult.failed(
                ExtractionMethod.SITE_SPECIFIC, [f"{self.name} parsing error: {exc}"]
            )

        if not recipe.title:
            return ExtractionResult.failed(
                method, issues + [f"No recipe found using {self.name} extractors"]
            )

        logger.info(
            "%s: method=%s, ingredients=%d, steps=%d",
            self.name,
            method,
            len(recipe.ingredients),
            len(recipe.instructions),
        )
        return ExtractionResult(
            recipe=recipe,
            confidence=score_recipe(recipe, method),
            method=method,
            issues=issues + validate_recipe(recipe),
        )


NYT_COOKING = SiteExtractor(
    "NYT Cooking",
    hostnames=("nytimes.com",),
    required_terms=("cooking", "recipes"),
    selectors=SelectorSet(
        title=('h1[data-testid="recipe-title"]', ".recipe-title", ".nyt5-headline", "h1"),
        description=('[data-testid="recipe-description"]', ".recipe-intro", ".nyt5-summary", ".recipe-summary"),
        image=('[data-testid="recipe-image"] img', ".recipe-photo img", ".nyt5-image img", ".media-viewer img"),
        ingredients=(
            '[data-testid="recipe-ingredients"] li',
            ".recipe-ingredients li",
            ".nyt5-ingredients li",
            'section[aria-label="Ingredients"] li',
            ".ingredients li",
        ),
        instructions=(
            '[data-testid="recipe-instructions"] li',
            ".recipe-instructions li",
            ".nyt5-instructions li",
            'section[aria-label="Preparation"] li',
            'section[aria-label="Method"] li',
            ".directions li",
        ),
        prep_time=('[data-testid="recipe-time-prep"]', ".recipe-time-prep", ".prep-time", ".nyt5-time .prep"),
        cook_time=('[data-testid="recipe-time-cook"]', ".recipe-time-cook", ".cook-time", ".nyt5-time .cook"),
        total_time=('[data-testid="recipe-time-total"]', ".recipe-time-total", ".total-time", ".nyt5-time .total"),
        servings=('[data-testid="recipe-yield"]', ".recipe-yield", ".nyt5-yield", ".servings", ".serves"),
        default_tags=("NYT Cooking",),
    ),
)

BBC_GOOD_FOOD = SiteExtractor(
    "BBC Good Food",
    hostnames=("bbcgoodfood.com",),
    selectors=SelectorSet(
        title=(
            "h1.gel-trafalgar",
            ".recipe-header__title",
            ".post-header__title",
            ".recipe-details__header h1",
            ".recipe-title",
            "h1",
        ),
        description=(
            ".recipe-header__description",
            ".post-header__description",
            ".recipe-details__summary",
            ".recipe-summary",
            ".gel-pica",
        ),
        image=(
            ".recipe-media__image img",
            ".post-header__image img",
            ".recipe-details__image img",
            ".lead-image img",
            ".recipe-image img",
        ),
        ingredients=(
            ".recipe-ingredients__list li",
            ".ingredients-list li",
            ".recipe-details__ingredients li",
            'section[data-tracking-name="ingredients"] li',
            ".recipe-ingredients li",
            ".ingredients li",
        ),
        instructions=(
            ".recipe-method__list li",
            ".method-list li",
            ".recipe-details__method li",
            'section[data-tracking-name="method"] li',
            ".recipe-method li",
            ".recipe-instructions li",
            ".method li",
        ),
        prep_time=(
            ".recipe-details__cooking-time-prep",
            ".recipe-cooking-time .prep-time",
            '.recipe-details__item:-soup-contains("Prep")',
            ".recipe-time--prep",
        ),
        cook_time=(
            ".recipe-details__cooking-time-cook",
            ".recipe-cooking-time .cook-time",
            '.recipe-details__item:-soup-contains("Cook")',
            ".recipe-time--cook",
        ),
        total_time=(
            ".recipe-details__cooking-time-total",
            ".recipe-cooking-time .total-time",
            '.recipe-details__item:-soup-contains("Total")',
            ".recipe-time--total",
        ),
        servings=(
            ".recipe-details__serves",
            ".recipe-serves",
            '.recipe-details__item:-soup-contains("Serves")',
            ".serves",
            ".recipe-yield",
        ),
        difficulty=(
            ".recipe-details__skill-level",
            ".recipe-difficulty",
            '.recipe-details__item:-soup-contains("Difficulty")',
            ".skill-level",
        ),
        default_tags=("BBC Good Food",),
    ),
)

FOOD52 = SiteExtractor(
    "Food52",
    hostnames=("food52.com",),
    selectors=SelectorSet(
        title=("h1.recipe-title", ".recipe-header h1", ".recipe-name", 'h1[data-test="recipe-title"]', ".entry-title", "h1"),
        description=(".recipe-description", ".recipe-summary", ".recipe-headnote", ".entry-summary", ".recipe-intro", ".description"),
        image=(".recipe-photo img", ".recipe-image img", ".hero-image img", ".main-image img", ".recipe-header img", ".entry-image img"),
        ingredients=(
            '[data-test="recipe-ingredients"] li',
            ".recipe-ingredients li",
            ".recipe-ingredient-list li",
            ".ingredient-list li",
            ".ingredients li",
            ".recipe-list li",
        ),
        instructions=(
            '[data-test="recipe-instructions"] li',
            ".recipe-instructions li",
            ".recipe-directions li",
            ".recipe-steps li",
            ".instructions li",
            ".directions li",
            ".method li",
            ".preparation li",
        ),
        prep_time=('[data-test="prep-time"]', ".prep-time", ".recipe-prep-time", ".timing .prep", ".recipe-time .prep"),
        cook_time=('[data-test="cook-time"]', ".cook-time", ".recipe-cook-time", ".timing .cook", ".recipe-time .cook"),
        total_time=('[data-test="total-time"]', ".total-time", ".recipe-total-time", ".timing .total", ".recipe-time .total"),
        servings=('[data-test="recipe-yield"]', ".recipe-yield", ".servings", ".serves", ".makes", ".recipe-serves", ".portions"),
        default_tags=("Food52", "Community Recipe"),
    ),
)

SIMPLY_RECIPES = SiteExtractor(
    "Simply Recipes",
    hostnames=("simplyrecipes.com",),
    selectors=SelectorSet(
        title=("h1.entry-title", "h1.recipe-title", ".recipe-header h1", 'h1[data-cy="recipe-title"]', ".headline", "h1"),
        description=(".recipe-description", ".recipe-summary", ".entry-summary", ".intro-text", ".recipe-intro", ".article-intro"),
        image=(".recipe-photo img", ".recipe-image img", ".hero-image img", ".entry-image img", ".featured-image img", ".lead-image img"),
        ingredients=(
            '[data-cy="recipe-ingredients"] li',
            ".recipe-ingredients li",
            ".recipe-ingredient-list li",
            ".ingredient-list li",
            ".recipe-callout-ingredients li",
            ".ingredients li",
        ),
        instructions=(
            '[data-cy="recipe-instructions"] li',
            ".recipe-instructions li",
            ".recipe-method li",
            ".method-instructions li",
            ".recipe-steps li",
            ".preparation-steps li",
            ".instructions li",
            ".directions li",
        ),
        prep_time=('[data-cy="prep-time"]', ".recipe-prep-time", ".recipe-time .prep-time", ".prep-time", ".timing-prep"),
        cook_time=('[data-cy="cook-time"]', ".recipe-cook-time", ".recipe-time .cook-time", ".cook-time", ".timing-cook"),
        total_time=('[data-cy="total-time"]', ".recipe-total-time", ".recipe-time .total-time", ".total-time", ".timing-total"),
        servings=('[data-cy="recipe-yield"]', ".recipe-yield", ".recipe-serves", ".servings", ".serves", ".makes", ".recipe-serving-size"),
        difficulty=(".recipe-difficulty", ".difficulty", ".skill-level", ".recipe-skill-level"),
        default_tags=("Simply Recipes",),
    ),
)

BON_APPETIT = SiteExtractor(
    "Bon Appétit",
    hostnames=("bonappetit.com",),
    selectors=SelectorSet(
        title=('h1[data-testid="ContentHeaderHed"]', "h1.ContentHeaderHed", "h1.recipe-title", ".content-header h1", "h1.entry-title", ".recipe-header h1", "h1"),
        description=('[data-testid="ContentHeaderDek"]', ".ContentHeaderDek", ".recipe-description", ".recipe-summary", ".content-dek", ".entry-summary", ".recipe-intro"),
        image=(
            '[data-testid="ContentHeaderLeadAsset"] img',
            ".ContentHeaderLeadAsset img",
            ".recipe-image img",
            ".lead-image img",
            ".hero-image img",
            ".content-header img",
        ),
        ingredients=(
            '[data-testid="IngredientList"] li',
            ".recipe-ingredients li",
            ".ingredient-list li",
            ".ingredients li",
            '[class*="ingredient"] li',
            ".recipe-list li",
        ),
        instructions=(
            '[data-testid="InstructionList"] li',
            ".recipe-instructions li",
            ".preparation li",
            ".instructions li",
            ".directions li",
            ".method li",
            '[class*="instruction"] li',
        ),
        prep_time=('[data-testid="prep-time"]', ".recipe-prep-time", ".prep-time", ".active-time", ".recipe-time .prep"),
        cook_time=('[data-testid="cook-time"]', ".recipe-cook-time", ".cook-time", ".cooking-time", ".recipe-time .cook"),
        total_time=('[data-testid="total-time"]', ".recipe-total-time", ".total-time", ".recipe-time .total"),
        servings=('[data-testid="recipe-yield"]', ".recipe-yield", ".recipe-serves", ".servings", ".serves", ".makes", ".portions"),
        default_tags=("Bon Appétit",),
    ),
)

EPICURIOUS = SiteExtractor(
    "Epicurious",
    hostnames=("epicurious.com",),
    selectors=SelectorSet(
        title=('h1[data-testid="ContentHeaderHed"]', "h1.recipe-hed", "h1.content-hed", ".recipe-header h1", "h1"),
        description=('[data-testid="ContentHeaderDek"]', ".recipe-summary", ".content-dek", ".recipe-description"),
        image=(
            '[data-testid="ContentHeaderLeadAsset"] img',
            ".recipe-lead-image img",
            ".content-header-image img",
            ".lead-image img",
            ".recipe-image img",
        ),
        ingredients=('[data-testid="IngredientList"] li', ".recipe-ingredients li", ".ingredient-list li", ".ingredients li", ".recipe-ingredient"),
        instructions=(
            '[data-testid="InstructionsWrapper"] li',
            '[data-testid="InstructionWrapper"] p',
            ".recipe-instructions li",
            ".recipe-method li",
            ".preparation-list li",
            ".instructions li",
        ),
        prep_time=('[data-testid="PrepTime"]', ".prep-time", ".recipe-prep-time"),
        cook_time=('[data-testid="CookTime"]', ".cook-time", ".recipe-cook-time"),
        total_time=('[data-testid="TotalTime"]', ".total-time", ".recipe-total-time"),
        servings=('[data-testid="Servings"]', ".servings", ".recipe-serves", ".yield"),
        tags=(".recipe-tags a", ".tags a", ".categories a"),
        default_tags=("Epicurious",),
    ),
)

DELISH = SiteExtractor(
    "Delish",
    hostnames=("delish.com",),
    selectors=SelectorSet(
        title=(".content-hed", "h1.content-hed", "h1.recipe-hed", ".article-hed h1", ".recipe-header h1", "h1"),
        description=(".content-dek", ".recipe-summary", ".article-dek", ".recipe-description", ".content-intro"),
        image=(
            ".content-lede-image img",
            ".article-lead-image img",
            ".recipe-lead-image img",
            ".lead-image img",
            ".hero-image img",
            ".content-header img",
        ),
        ingredients=(
            ".ingredient-lists li",
            '[data-module="RecipeIngredients"] li',
            ".recipe-ingredients li",
            ".ingredient-list li",
            ".recipe-ingredient",
            ".ingredients li",
        ),
        instructions=(
            ".directions li",
            '[data-module="RecipeInstructions"] li',
            ".recipe-instructions li",
            ".recipe-directions li",
            ".preparation-list li",
            ".instructions li",
            ".method li",
        ),
        prep_time=('[data-field="prep_time"]', ".prep-time", ".recipe-prep-time"),
        cook_time=('[data-field="cook_time"]', ".cook-time", ".recipe-cook-time"),
        total_time=('[data-field="total_time"]', ".total-time", ".recipe-total-time"),
        servings=('[data-field="servings"]', ".servings", ".recipe-serves", ".yield"),
        difficulty=(".difficulty", ".recipe-difficulty"),
        tags=(".recipe-tags a", ".tags a", ".categories a", ".content-tags a"),
        default_tags=("Delish",),
    ),
)

FOOD_NETWORK = SiteExtractor(
    "Food Network",
    hostnames=("foodnetwork.com",),
    selectors=SelectorSet(
        title=(".o-AssetTitle__a-HeadlineText", "h1.entry-title", ".recipe-title", 'h1[data-module="RecipeTitle"]', ".o-RecipeInfo__a-Headline", "h1"),
        description=(".o-AssetSummary__a-Description", ".recipe-summary", ".entry-summary", '[data-module="RecipeSummary"]'),
        image=(
            ".m-MediaBlock__a-Image img",
            ".o-MediaBlock__a-Image img",
            ".recipe-image img",
            ".entry-image img",
            ".recipe-lead-image img",
            '[data-module="RecipeImage"] img',
        ),
        ingredients=(
            ".o-RecipeIngredients__a-Ingredient",
            ".o-Ingredients__a-Ingredient",
            ".recipe-ingredient",
            '[data-module="RecipeIngredients"] li',
            ".recipe-ingredients__ingredient",
            ".ingredient-list li",
            ".ingredients li",
        ),
        instructions=(
            ".o-Method__m-Step",
            ".o-Instructions__a-ListItem",
            ".recipe-instruction",
            '[data-module="RecipeInstructions"] li',
            ".recipe-directions__direction",
            ".method-step",
            ".directions li",
            ".instructions li",
        ),
        prep_time=('.o-RecipeInfo__a-Description:-soup-contains("Prep")', ".prep-time", ".recipe-prep-time"),
        cook_time=('.o-RecipeInfo__a-Description:-soup-contains("Cook")', ".cook-time", ".recipe-cook-time"),
        total_time=(".o-RecipeInfo__a-Description.m-RecipeInfo__a-Description--Total", ".total-time", ".recipe-total-time"),
        servings=('.o-RecipeInfo__a-Description:-soup-contains("Serves")', ".servings", ".recipe-serves", ".yield"),
        difficulty=(".difficulty", ".recipe-difficulty"),
        default_tags=("Food Network",),
    ),
)

ALL_RECIPES = SiteExtractor(
    "AllRecipes",
    hostnames=("allrecipes.com",),
    selectors=SelectorSet(
        title=(
            "h1.entry-title",
            'h1[data-module="RecipeTitle"]',
            ".headline-wrapper h1",
            ".recipe-header h1",
            ".recipe-title",
            ".entry-title",
            "h1",
        ),
        description=(
            ".recipe-description",
            ".recipe-summary__description",
            ".recipe-summary",
            ".entry-summary",
            ".recipe-intro",
            ".dek",
        ),
        image=(
            ".primary-image img",
            ".hero-photo__image",
            ".recipe-image img",
            ".image-container img",
            ".recipe-card-image img",
            ".lead-image img",
            ".recipe-photo img",
        ),
        ingredients=(
            ".mntl-structured-ingredients__list li",
            ".recipe-ingred_txt",
            ".recipe-ingredients__ingredient",
            ".ingredients-section__ingredient",
            ".recipe-ingredient-list li",
            ".ingredients-section li",
            ".component-recipe-ingredients li",
            "[data-ingredient] span",
            ".ingredient-list li",
            ".ingredients li",
        ),
        instructions=(
            ".mntl-sc-block-group--OL li",
            ".recipe-directions__list--item",
            ".instructions-section .section-body ol li",
            ".recipe-instruction-list li",
            ".instructions-section li",
            ".directions ol li",
            ".instructions li",
            ".directions li",
        ),
        prep_time=(".recipe-prep-time", ".prepTime", ".total-time .prep-time", ".prep-time"),
        cook_time=(".recipe-cook-time", ".cookTime", ".total-time .cook-time", ".cook-time"),
        total_time=(".recipe-total-time", ".totalTime", ".total-time"),
        servings=(
            ".recipe-adjust-servings__size-quantity",
            '.recipe-nutrition__item:-soup-contains("servings")',
            ".recipe-serves",
            ".servings",
            ".yield",
        ),
        default_tags=("AllRecipes",),
    ),
)

SERIOUS_EATS = SiteExtractor(
    "Serious Eats",
    hostnames=("seriouseats.com",),
    selectors=SelectorSet(
        title=("h1.heading__title", ".recipe-title", "h1.entry-title", ".project-name"),
        description=(".recipe-about", ".recipe-summary", ".project-description", ".entry-summary"),
        image=(".recipe-hero-image img", ".lead-image img", ".hero-image img", ".recipe-image img"),
        ingredients=(
            ".structured-ingredients li",
            ".recipe-ingredient-group li",
            ".recipe-ingredients li",
            ".ingredient-list li",
            ".ingredients li",
        ),
        instructions=(
            ".recipe-procedures li",
            ".recipe-instruction-group li",
            ".recipe-instructions li",
            ".procedure-text",
            ".instructions li",
            ".directions li",
        ),
        prep_time=(".recipe-time-prep", ".total-time-prep", ".prep-time"),
        cook_time=(".recipe-time-cook", ".total-time-cook", ".cook-time"),
        total_time=(".recipe-time-total", ".recipe-total-time", ".total-time"),
        servings=(".recipe-yield", ".recipe-serves", ".servings", ".makes"),
        default_tags=("Serious Eats",),
    ),
)

# Most specific matchers first.
SITE_EXTRACTORS: Tuple[SiteExtractor, ...] = (
    NYT_COOKING,
    BBC_GOOD_FOOD,
    FOOD52,
    SIMPLY_RECIPES,
    BON_APPETIT,
    EPICURIOUS,
    DELISH,
    FOOD_NETWORK,
    ALL_RECIPES,
    SERIOUS_EATS,
)
