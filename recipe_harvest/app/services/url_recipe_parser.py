import asyncio
import logging
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from recipe_harvest.app.core.config import get_settings
from recipe_harvest.app.services.url_parsing.confidence import (
    agreement_bonus,
    clamp,
    score_recipe,
)
from recipe_harvest.app.services.url_parsing.constants import (
    AGGRESSIVE_INGREDIENT_SELECTORS,
    AGGRESSIVE_INSTRUCTION_SELECTORS,
    ENHANCED_IMAGE_BONUS,
    ENHANCED_LIST_BONUS,
)
from recipe_harvest.app.services.url_parsing.extractors import (
    SITE_EXTRACTORS,
    GenericHtmlExtractor,
    JsonLdExtractor,
    MicrodataExtractor,
    extract_text_array_aggressive,
)
from recipe_harvest.app.services.url_parsing.extractors.heuristic import meta_image, meta_title
from recipe_harvest.app.services.url_parsing.extractors.schema_org import (
    hostname_of,
    validate_recipe,
)
from recipe_harvest.app.services.url_parsing.models import (
    ExtractionMethod,
    ExtractionResult,
    PartialRecipe,
    merged_method,
)
from recipe_harvest.app.services.url_parsing.parsing_utils import clean_instruction, dedupe

logger = logging.getLogger(__name__)

_METHOD_TAGS = {method.value for method in ExtractionMethod}
_SCALAR_FIELDS = (
    "title",
    "description",
    "image",
    "prep_time",
    "cook_time",
    "total_time",
    "servings",
    "difficulty",
    "tags",
)


class Strategy(NamedTuple):
    """One registry entry: a hostname predicate and the extraction it guards."""

    name: str
    can_handle: Callable[[str], bool]
    extract: Callable[[BeautifulSoup, str], ExtractionResult]


class ExtractionSummary(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    high_confidence: int = 0
    medium_confidence: int = 0
    low_confidence: int = 0
    average_confidence: float = 0.0
    method_breakdown: Dict[str, int] = Field(default_factory=dict)
    common_issues: Dict[str, int] = Field(default_factory=dict)


def _as_strategy(extractor) -> Strategy:
    return Strategy(extractor.name, extractor.can_handle, extractor.extract)


def build_registry() -> List[Strategy]:
    """Site strategies first, then the generic structured-data strategies."""
    extractors = [*SITE_EXTRACTORS, MicrodataExtractor(), JsonLdExtractor()]
    return [_as_strategy(extractor) for extractor in extractors]


STRATEGIES: List[Strategy] = build_registry()
GENERIC_HTML_STRATEGY: Strategy = _as_strategy(GenericHtmlExtractor())


def _failure_method(strategy: Strategy) -> str:
    if strategy.name in _METHOD_TAGS:
        return strategy.name
    if strategy is GENERIC_HTML_STRATEGY:
        return ExtractionMethod.CSS_SELECTORS.value
    return ExtractionMethod.SITE_SPECIFIC.value


def _run_strategy(
    strategy: Strategy, document: BeautifulSoup, source_url: str, hostname: str
) -> Optional[ExtractionResult]:
    """Run one strategy; None when it declines the hostname. Never raises."""
    try:
        if not strategy.can_handle(hostname):
            return None
        logger.debug("Running %s for %s", strategy.name, source_url)
        result = strategy.extract(document, source_url)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Strategy %s crashed for %s", strategy.name, source_url)
        return ExtractionResult.failed(_failure_method(strategy), [f"{strategy.name} failed: {exc}"])

    logger.info(
        "%s result: confidence=%.2f, method=%s, has_recipe=%s, issues=%s",
        strategy.name,
        result.confidence,
        result.method,
        result.recipe is not None,
        result.issues,
    )
    return result


def collect_results(document: BeautifulSoup, source_url: str) -> List[ExtractionResult]:
    """Run every applicable strategy in registry order, then the generic HTML fallback."""
    hostname = hostname_of(source_url)
    results: List[ExtractionResult] = []
    for strategy in [*STRATEGIES, GENERIC_HTML_STRATEGY]:
        result = _run_strategy(strategy, document, source_url, hostname)
        if result is not None:
            results.append(result)
    return results


def best_result(results: Sequence[ExtractionResult]) -> Optional[ExtractionResult]:
    """Highest confidence wins; earlier results win ties."""
    best: Optional[ExtractionResult] = None
    for result in results:
        if best is None or result.confidence > best.confidence:
            best = result
    return best


def _is_usable(recipe: Optional[PartialRecipe]) -> bool:
    return recipe is not None and bool(recipe.title) and bool(recipe.ingredients)


def _union_issues(results: Sequence[ExtractionResult]) -> List[str]:
    issues: List[str] = []
    for result in results:
        for issue in result.issues:
            if issue not in issues:
                issues.append(issue)
    return issues


def merge_results(results: Sequence[ExtractionResult]) -> Optional[ExtractionResult]:
    """Combine partial results field by field.

    Scalars come from the most confident result that has them; ingredient and
    instruction lists come whole from whichever result has the longest one.
    Returns None unless the merge has both a title and ingredients.
    """
    candidates = sorted(
        (r for r in results if r.recipe is not None), key=lambda r: r.confidence, reverse=True
    )
    if not candidates:
        return None

    fields = {}
    contributors = set()
    for field in _SCALAR_FIELDS:
        for idx, candidate in enumerate(candidates):
            value = getattr(candidate.recipe, field)
            if value:
                fields[field] = value
                contributors.add(idx)
                break
    for field in ("ingredients", "instructions"):
        idx, longest = max(
            enumerate(getattr(c.recipe, field) for c in candidates),
            key=lambda pair: (len(pair[1]), -pair[0]),
        )
        fields[field] = list(longest)
        if longest:
            contributors.add(idx)

    if not fields.get("title") or not fields["ingredients"]:
        logger.debug(
            "Merge discarded: title=%s, ingredients=%d",
            fields.get("title"),
            len(fields["ingredients"]),
        )
        return None

    fields["source_url"] = next(
        (c.recipe.source_url for c in candidates if c.recipe.source_url), None
    )
    merged = PartialRecipe(**fields)
    method = merged_method(candidates[0].method)
    confidence = score_recipe(merged, method)
    # Agreement only counts when the merge actually drew on more than one result.
    if len(contributors) > 1:
        confidence = clamp(confidence + agreement_bonus(results))
    return ExtractionResult(
        recipe=merged,
        confidence=confidence,
        method=method,
        issues=_union_issues(results),
    )


def enhance_partial_data(result: ExtractionResult, document: BeautifulSoup) -> ExtractionResult:
    """Fill still-empty fields with broad keyword selectors and page metadata."""
    settings = get_settings()
    recipe = result.recipe or PartialRecipe()
    updates = {}
    bonus = 0.0
    issues = list(result.issues)

    if not recipe.title:
        title = meta_title(document)
        if title:
            updates["title"] = title
            issues.append("Title taken from page metadata")

    if not recipe.ingredients:
        ingredients = extract_text_array_aggressive(
            document,
            AGGRESSIVE_INGREDIENT_SELECTORS,
            settings.aggressive_max_items,
            settings.aggressive_min_hits,
        )
        if ingredients:
            updates["ingredients"] = ingredients
            bonus += ENHANCED_LIST_BONUS
            issues.append("Ingredients found with aggressive extraction")

    if not recipe.instructions:
        texts = extract_text_array_aggressive(
            document,
            AGGRESSIVE_INSTRUCTION_SELECTORS,
            settings.aggressive_max_items,
            settings.aggressive_min_hits,
        )
        instructions = dedupe(step for step in (clean_instruction(t) for t in texts) if step)
        if instructions:
            updates["instructions"] = instructions
            bonus += ENHANCED_LIST_BONUS
            issues.append("Instructions found with aggressive extraction")

    if not recipe.image:
        image = meta_image(document)
        if image:
            updates["image"] = image
            bonus += ENHANCED_IMAGE_BONUS
            issues.append("Image taken from social meta tags")

    if not updates:
        return result

    logger.info("Enhanced fields %s (bonus %.2f)", sorted(updates), bonus)
    method = result.method if result.recipe is not None else ExtractionMethod.CSS_SELECTORS.value
    return ExtractionResult(
        recipe=recipe.model_copy(update=updates),
        confidence=clamp(result.confidence + bonus),
        method=method,
        issues=issues,
    )


def finalize(
    candidates: Sequence[Optional[ExtractionResult]],
    source_url: str,
    all_results: Sequence[ExtractionResult],
) -> ExtractionResult:
    """Pick the most confident usable candidate, or report total failure.

    Only candidates with a title and ingredients compete, so an unusable result
    never displaces a usable one.
    """
    present = [c for c in candidates if c is not None]
    final = best_result([c for c in present if _is_usable(c.recipe)])
    if final is None:
        fallback = best_result(present)
        issues = _union_issues([*all_results, *present])
        issues.append("No recipe could be extracted from the page")
        logger.info("No usable recipe for %s", source_url)
        return ExtractionResult.failed(
            fallback.method if fallback else ExtractionMethod.CSS_SELECTORS, dedupe(issues)
        )

    recipe = final.recipe.model_copy(update={"source_url": source_url})
    return ExtractionResult(
        recipe=recipe,
        confidence=final.confidence,
        method=final.method,
        issues=dedupe([*final.issues, *validate_recipe(recipe)]),
    )


def extract_recipe(
    source_url: str, document: Optional[BeautifulSoup] = None, html: str = ""
) -> ExtractionResult:
    """Extract the best obtainable recipe from an already-fetched page."""
    settings = get_settings()
    if document is None:
        document = BeautifulSoup(html or "", "lxml")

    results = collect_results(document, source_url)
    best = best_result(results)
    merged = merge_results(results)
    top = best_result([r for r in (best, merged) if r is not None])

    enhanced = None
    if top is None or top.confidence < settings.enhance_confidence_threshold:
        logger.info(
            "Attempting to enhance partial data, current confidence: %.2f",
            top.confidence if top else 0.0,
        )
        if top is None:
            top = ExtractionResult.failed(ExtractionMethod.CSS_SELECTORS, [])
        enhanced = enhance_partial_data(top, document)

    final = finalize([best, merged, enhanced], source_url, results)
    logger.info(
        "Final result for %s: confidence=%.2f, method=%s, title=%s, ingredients=%d, steps=%d, attempts=%d",
        source_url,
        final.confidence,
        final.method,
        final.recipe.title if final.recipe else None,
        len(final.recipe.ingredients) if final.recipe else 0,
        len(final.recipe.instructions) if final.recipe else 0,
        len(results),
    )
    return final


async def extract_recipe_async(
    source_url: str, document: Optional[BeautifulSoup] = None, html: str = ""
) -> ExtractionResult:
    """Run :func:`extract_recipe` in a worker thread."""
    return await asyncio.to_thread(extract_recipe, source_url, document, html)


def summarize_results(results: Sequence[ExtractionResult]) -> ExtractionSummary:
    """Aggregate a batch of pipeline results into confidence buckets and method counts."""
    summary = ExtractionSummary(total=len(results))
    if not results:
        return summary

    methods: Dict[str, int] = {}
    issues: Dict[str, int] = {}
    high = medium = low = successful = 0
    for result in results:
        if result.recipe is not None and result.confidence > 0:
            successful += 1
        if result.confidence >= 0.8:
            high += 1
        elif result.confidence >= 0.6:
            medium += 1
        else:
            low += 1
        methods[result.method] = methods.get(result.method, 0) + 1
        for issue in result.issues:
            issues[issue] = issues.get(issue, 0) + 1

    return ExtractionSummary(
        total=len(results),
        successful=successful,
        failed=len(results) - successful,
        high_confidence=high,
        medium_confidence=medium,
        low_confidence=low,
        average_confidence=round(sum(r.confidence for r in results) / len(results), 4),
        method_breakdown=methods,
        common_issues=issues,
    )
