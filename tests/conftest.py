import json

import pytest

from recipe_harvest.app.core.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def html_page(body: str = "", head: str = "") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


def json_ld_script(payload) -> str:
    raw = payload if isinstance(payload, str) else json.dumps(payload)
    return f'<script type="application/ld+json">{raw}</script>'


def json_ld_page(*payloads, body: str = "", head: str = "") -> str:
    scripts = "".join(json_ld_script(payload) for payload in payloads)
    return html_page(body=body, head=scripts + head)


@pytest.fixture
def banana_bread():
    return {
        "@context": "https://schema.org",
        "@type": "Recipe",
        "name": "Banana Bread",
        "description": "A moist, simple banana bread for overripe bananas.",
        "image": {"@type": "ImageObject", "url": "https://example.com/banana-bread.jpg"},
        "prepTime": "PT15M",
        "cookTime": "PT1H",
        "totalTime": "PT1H15M",
        "recipeYield": "1 loaf (10 slices)",
        "recipeCategory": "Dessert, Baking",
        "recipeCuisine": "American",
        "recipeIngredient": [
            "3 ripe bananas, mashed",
            "1/3 cup melted butter",
            "3/4 cup sugar",
            "1 egg, beaten",
            "1 1/2 cups all-purpose flour",
        ],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "Preheat the oven to 350F and butter a loaf pan."},
            {"@type": "HowToStep", "text": "Mix the mashed bananas with the melted butter."},
            {"@type": "HowToStep", "text": "Stir in the sugar, egg and flour."},
            {"@type": "HowToStep", "text": "Bake for 1 hour, then cool on a rack."},
        ],
    }
