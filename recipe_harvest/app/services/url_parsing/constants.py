"""Shared constants for recipe extraction."""

JSON_LD_TYPE_PATTERN = r"application/ld\+json"

RECIPE_TYPE = "recipe"

# Steps this short are usually stray numbering or headings.
MIN_INSTRUCTION_LENGTH = 5

INSTRUCTION_TEXT_FIELDS = ("text", "name", "description", "instruction", "step")
ALTERNATE_INSTRUCTION_KEYS = ("steps", "method", "directions", "preparation")
ALTERNATE_INGREDIENT_KEYS = (
    "recipeIngredient",
    "ingredients",
    "recipeIngredients",
    "ingredient",
    "recipeMaterial",
)

IMAGE_ATTRIBUTES = (
    "src",
    "data-src",
    "data-lazy-src",
    "data-original",
    "srcset",
    "data-srcset",
    "content",
)

HIGH_QUALITY_HOSTS = ("seriouseats.com", "bbcgoodfood.com", "food52.com", "nytimes.com")

GENERIC_TITLE_SELECTORS = (
    "h1",
    ".recipe-title",
    ".entry-title",
    '[itemprop="name"]',
    "title",
)
GENERIC_DESCRIPTION_SELECTORS = (
    ".recipe-description",
    ".wprm-recipe-summary",
    ".entry-summary",
    '[itemprop="description"]',
    ".summary",
)
GENERIC_IMAGE_SELECTORS = (
    ".recipe-image img",
    ".wprm-recipe-image img",
    ".entry-image img",
    '[itemprop="image"]',
)
GENERIC_INGREDIENT_SELECTORS = (
    ".recipe-ingredient",
    ".wprm-recipe-ingredient",
    ".tasty-recipes-ingredients li",
    ".ingredients li",
    '[itemprop="recipeIngredient"]',
    '[itemprop="ingredients"]',
    ".ingredient",
    ".recipe-ingredients li",
    ".ingredients-section li",
)
GENERIC_INSTRUCTION_SELECTORS = (
    ".recipe-instruction",
    ".wprm-recipe-instruction-text",
    ".tasty-recipes-instructions li",
    ".instructions li",
    ".directions li",
    '[itemprop="recipeInstructions"] li',
    '[itemprop="recipeInstructions"]',
    ".instruction",
    ".recipe-instructions li",
    ".method li",
    ".directions-section li",
)
GENERIC_PREP_TIME_SELECTORS = (".wprm-recipe-prep_time-container", ".prep-time", ".recipe-prep-time")
GENERIC_COOK_TIME_SELECTORS = (".wprm-recipe-cook_time-container", ".cook-time", ".recipe-cook-time")
GENERIC_TOTAL_TIME_SELECTORS = (".wprm-recipe-total_time-container", ".total-time", ".recipe-total-time")
GENERIC_SERVINGS_SELECTORS = (".wprm-recipe-servings", ".recipe-yield", ".servings", ".yield")

AGGRESSIVE_INGREDIENT_SELECTORS = (
    'li:-soup-contains("cup")',
    'li:-soup-contains("tablespoon")',
    'li:-soup-contains("teaspoon")',
    'li:-soup-contains("lb")',
    'li:-soup-contains("oz")',
    'li:-soup-contains("pound")',
    'p:-soup-contains("cup")',
    'p:-soup-contains("tablespoon")',
    'div:-soup-contains("ingredient")',
    '[class*="ingredient"]',
    '[id*="ingredient"]',
)
AGGRESSIVE_INSTRUCTION_SELECTORS = (
    "ol li",
    'div:-soup-contains("step")',
    'p:-soup-contains("step")',
    '[class*="direction"]',
    '[class*="instruction"]',
    '[class*="method"]',
    '[id*="direction"]',
    '[id*="instruction"]',
)
# Texts outside this window are page chrome or whole sections, not list items.
AGGRESSIVE_MIN_TEXT_LENGTH = 10
AGGRESSIVE_MAX_TEXT_LENGTH = 200

META_TITLE_SELECTORS = ('meta[property="og:title"]', 'meta[name="twitter:title"]')
META_IMAGE_SELECTORS = ('meta[property="og:image"]', 'meta[name="twitter:image"]')

ENHANCED_LIST_BONUS = 0.15
ENHANCED_IMAGE_BONUS = 0.03
