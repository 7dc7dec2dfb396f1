import pytest
from bs4 import BeautifulSoup

from conftest import html_page, json_ld_page
from recipe_harvest.app.services import url_recipe_parser
from recipe_harvest.app.services.url_parsing.models import ExtractionResult, PartialRecipe

URL = "https://example.com/recipes/banana-bread"

CHILI_BODY = """
<h1>Grandma's Chili</h1>
<ul>
  <li>2 cups kidney beans, drained</li>
  <li>1 tablespoon chili powder</li>
  <li>1 pound ground beef</li>
</ul>
<ol>
  <li>Brown the beef in a large pot.</li>
  <li>Add the beans and chili powder, then simmer.</li>
</ol>
"""


def test_banana_bread_scenario(banana_bread):
    html = json_ld_page(banana_bread, head="<title>Banana Bread | Example Kitchen</title>")
    result = url_recipe_parser.extract_recipe(URL, html=html)

    assert result.method == "json-ld"
    assert result.confidence >= 0.7
    assert result.recipe.title == "Banana Bread"
    assert len(result.recipe.ingredients) == 5
    assert len(result.recipe.instructions) == 4
    assert result.recipe.source_url == URL


def test_site_specific_scenario():
    html = html_page(
        """
        <h1 class="o-AssetTitle__a-HeadlineText">Baked Ziti</h1>
        <p class="o-Ingredients__a-Ingredient">1 pound ziti</p>
        <p class="o-Ingredients__a-Ingredient">2 cups marinara</p>
        <li class="o-Method__m-Step">Boil the ziti until al dente.</li>
        <li class="o-Method__m-Step">Bake with the sauce for 20 minutes.</li>
        """
    )
    result = url_recipe_parser.extract_recipe("https://www.foodnetwork.com/recipes/baked-ziti", html=html)

    assert result.method == "site-specific"
    assert result.recipe.title == "Baked Ziti"
    assert result.recipe.ingredients == ["1 pound ziti", "2 cups marinara"]
    assert result.recipe.tags == ["Food Network"]


def test_aggressive_enhancement_scenario():
    html = html_page(CHILI_BODY, head='<meta property="og:image" content="https://example.com/chili.jpg">')
    result = url_recipe_parser.extract_recipe("https://example.com/chili", html=html)

    assert result.recipe.title == "Grandma's Chili"
    assert result.recipe.ingredients == [
        "2 cups kidney beans, drained",
        "1 tablespoon chili powder",
        "1 pound ground beef",
    ]
    assert result.recipe.instructions == [
        "Brown the beef in a large pot.",
        "Add the beans and chili powder, then simmer.",
    ]
    assert result.recipe.image == "https://example.com/chili.jpg"
    assert "Ingredients found with aggressive extraction" in result.issues
    assert "Instructions found with aggressive extraction" in result.issues
    assert result.method == "css-selectors"
    assert result.confidence <= 1.0


def test_enhancement_respects_threshold(monkeypatch):
    monkeypatch.setenv("RECIPE_ENHANCE_THRESHOLD", "0")
    result = url_recipe_parser.extract_recipe("https://example.com/chili", html=html_page(CHILI_BODY))

    assert result.recipe is None
    assert result.confidence == 0


def test_nothing_to_extract():
    result = url_recipe_parser.extract_recipe(URL, html=html_page("<p>Hello world</p>"))

    assert result.recipe is None
    assert result.confidence == 0
    assert result.issues


@pytest.mark.parametrize("url", ["", "not a url", "http://[::1"])
def test_bad_urls_and_empty_markup(url):
    result = url_recipe_parser.extract_recipe(url, html="")
    assert result.recipe is None
    assert result.confidence == 0
    assert result.issues


def test_merge_combines_strategies():
    payload = {
        "@type": "Recipe",
        "name": "Tomato Soup",
        "recipeIngredient": ["6 tomatoes", "1 onion", "2 cups stock"],
    }
    body = """
    <h1>Tomato Soup</h1>
    <ol class="instructions">
      <li>Roast the tomatoes until blistered.</li>
      <li>Sweat the onion in butter.</li>
      <li>Add the stock and simmer.</li>
      <li>Blend until smooth.</li>
    </ol>
    """
    result = url_recipe_parser.extract_recipe(URL, html=json_ld_page(payload, body=body))

    assert result.method == "merged-json-ld"
    assert result.recipe.ingredients == ["6 tomatoes", "1 onion", "2 cups stock"]
    assert len(result.recipe.instructions) == 4
    assert result.recipe.source_url == URL


def test_merge_takes_longest_lists():
    short = ExtractionResult(
        recipe=PartialRecipe(title="Pie", ingredients=["flour"], instructions=["Roll the dough.", "Bake it."]),
        confidence=0.9,
        method="json-ld",
        issues=["Missing image"],
    )
    long = ExtractionResult(
        recipe=PartialRecipe(
            title="Apple Pie",
            image="https://example.com/pie.jpg",
            ingredients=["flour", "butter", "apples"],
            instructions=["Roll the dough."],
        ),
        confidence=0.6,
        method="css-selectors",
        issues=["Missing image", "Other"],
    )
    merged = url_recipe_parser.merge_results([short, long])

    assert merged.method == "merged-json-ld"
    assert merged.recipe.title == "Pie"
    assert merged.recipe.image == "https://example.com/pie.jpg"
    assert merged.recipe.ingredients == ["flour", "butter", "apples"]
    assert merged.recipe.instructions == ["Roll the dough.", "Bake it."]
    assert merged.issues == ["Missing image", "Other"]
    assert 0 <= merged.confidence <= 1


def test_merge_requires_title_and_ingredients():
    no_ingredients = ExtractionResult(recipe=PartialRecipe(title="Pie"), confidence=0.5)
    no_title = ExtractionResult(recipe=PartialRecipe(ingredients=["flour"]), confidence=0.5)

    assert url_recipe_parser.merge_results([no_ingredients]) is None
    assert url_recipe_parser.merge_results([no_title]) is None
    assert url_recipe_parser.merge_results([]) is None


def test_failing_strategy_does_not_abort_others(monkeypatch, banana_bread):
    def explode(document, source_url):
        raise RuntimeError("kaboom")

    def refuse(hostname):
        raise ValueError("bad hostname")

    monkeypatch.setattr(
        url_recipe_parser,
        "STRATEGIES",
        [
            url_recipe_parser.Strategy("exploding", lambda hostname: True, explode),
            url_recipe_parser.Strategy("picky", refuse, explode),
            *url_recipe_parser.STRATEGIES,
        ],
    )
    document = BeautifulSoup(json_ld_page(banana_bread), "lxml")

    results = url_recipe_parser.collect_results(document, URL)
    issues = [issue for result in results for issue in result.issues]
    assert "exploding failed: kaboom" in issues
    assert "picky failed: bad hostname" in issues
    assert results[0].confidence == 0

    final = url_recipe_parser.extract_recipe(URL, document=document)
    assert final.recipe.title == "Banana Bread"
    assert final.method == "json-ld"


def test_result_serializes_with_camel_case(banana_bread):
    result = url_recipe_parser.extract_recipe(URL, html=json_ld_page(banana_bread))
    payload = result.model_dump(by_alias=True)

    assert payload["recipe"]["sourceUrl"] == URL
    assert payload["recipe"]["prepTime"] == "15m"
    assert payload["method"] == "json-ld"


@pytest.mark.asyncio
async def test_extract_recipe_async(banana_bread):
    result = await url_recipe_parser.extract_recipe_async(URL, html=json_ld_page(banana_bread))
    assert result.recipe.title == "Banana Bread"


def test_summarize_results():
    results = [
        ExtractionResult(recipe=PartialRecipe(title="A"), confidence=0.9, method="json-ld"),
        ExtractionResult(recipe=PartialRecipe(title="B"), confidence=0.7, method="site-specific"),
        ExtractionResult(recipe=PartialRecipe(title="C"), confidence=0.5, method="json-ld"),
        ExtractionResult.failed("css-selectors", ["No recipe title found"]),
    ]
    summary = url_recipe_parser.summarize_results(results)

    assert summary.total == 4
    assert summary.successful == 3
    assert summary.failed == 1
    assert (summary.high_confidence, summary.medium_confidence, summary.low_confidence) == (1, 1, 2)
    assert summary.average_confidence == pytest.approx(0.525)
    assert summary.method_breakdown == {"json-ld": 2, "site-specific": 1, "css-selectors": 1}
    assert summary.common_issues == {"No recipe title found": 1}


def test_summarize_empty_batch():
    assert url_recipe_parser.summarize_results([]).total == 0


def test_settings_env_aliases(monkeypatch):
    monkeypatch.setenv("RECIPE_AGGRESSIVE_MAX_ITEMS", "5")
    settings = url_recipe_parser.get_settings()
    assert settings.aggressive_max_items == 5
    assert settings.aggressive_min_hits == 3
    assert settings.enhance_confidence_threshold == 0.6


def test_untitled_json_ld_does_not_hide_a_usable_merge():
    payload = {
        "@type": "Recipe",
        "description": "A flaky double-crust pie with a spiced apple filling.",
        "image": "https://example.com/pie.jpg",
        "recipeIngredient": [
            "2 pie crusts",
            "6 apples, sliced",
            "3/4 cup sugar",
            "1 teaspoon cinnamon",
            "2 tablespoons flour",
            "1 tablespoon butter",
        ],
        "recipeInstructions": [
            "Heat the oven to 425F.",
            "Toss the apples with sugar, cinnamon and flour.",
            "Fill the bottom crust and dot with butter.",
            "Cover with the top crust and cut vents.",
            "Bake for 45 minutes.",
        ],
    }
    result = url_recipe_parser.extract_recipe(URL, html=json_ld_page(payload, body="<h1>Pie</h1>"))

    assert result.recipe is not None
    assert result.recipe.title == "Pie"
    assert len(result.recipe.ingredients) == 6
    assert len(result.recipe.instructions) == 5
    assert result.method.startswith("merged-")
    assert result.confidence > 0


def test_finalize_skips_unusable_candidates_on_ties():
    untitled = ExtractionResult(
        recipe=PartialRecipe(ingredients=["flour"], instructions=["Bake it."]), confidence=0.9
    )
    usable = ExtractionResult(
        recipe=PartialRecipe(title="Pie", ingredients=["flour"], instructions=["Bake it."]),
        confidence=0.9,
        method="merged-json-ld",
    )
    final = url_recipe_parser.finalize([untitled, usable, None], URL, [untitled])

    assert final.method == "merged-json-ld"
    assert final.recipe.title == "Pie"
    assert final.recipe.source_url == URL


def test_title_with_only_instructions_is_a_failure():
    body = """
    <h1>Toast</h1>
    <ol class="instructions">
      <li>Slice the bread thickly.</li>
      <li>Toast until golden and butter at once.</li>
    </ol>
    """
    result = url_recipe_parser.extract_recipe("https://example.com/toast", html=html_page(body))

    assert result.recipe is None
    assert result.confidence == 0
    assert "No recipe could be extracted from the page" in result.issues


def test_finalize_without_ingredients_reports_failure():
    steps_only = ExtractionResult(
        recipe=PartialRecipe(title="Toast", instructions=["Toast the bread."]),
        confidence=0.7,
        method="css-selectors",
    )
    final = url_recipe_parser.finalize([steps_only, None, None], URL, [steps_only])

    assert final.recipe is None
    assert final.method == "css-selectors"
    assert final.issues[-1] == "No recipe could be extracted from the page"
