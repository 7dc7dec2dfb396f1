#!/usr/bin/env python
"""
Run the extraction pipeline over saved recipe pages and print a summary.

Run manually:
    python scripts/run_extraction_harness.py pages/*.html
    python scripts/run_extraction_harness.py page.html --url https://www.allrecipes.com/recipe/123/
"""
import argparse
import logging
import sys
from pathlib import Path

from bs4 import BeautifulSoup

from recipe_harvest.app.core.config import get_settings
from recipe_harvest.app.services.url_recipe_parser import extract_recipe, summarize_results

logger = logging.getLogger("extraction_harness")


def source_url_for(path: Path, document: BeautifulSoup) -> str:
    """Canonical URL recorded in the saved page, else the file's own URI."""
    canonical = document.find("link", rel="canonical")
    if canonical and canonical.get("href"):
        return canonical["href"]
    og_url = document.find("meta", attrs={"property": "og:url"})
    if og_url and og_url.get("content"):
        return og_url["content"]
    return path.resolve().as_uri()


def main():
    parser = argparse.ArgumentParser(description="Recipe extraction harness")
    parser.add_argument("pages", nargs="+", type=Path, help="Saved HTML files")
    parser.add_argument("--url", default=None, help="Source URL (single page only)")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    args = parser.parse_args()

    logging.basicConfig(level=get_settings().harness_log_level.upper())

    if args.url and len(args.pages) > 1:
        parser.error("--url can only be used with a single page")

    results = []
    for idx, path in enumerate(args.pages, start=1):
        try:
            html = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("Unable to read %s: %s", path, exc)
            continue
        document = BeautifulSoup(html, "lxml")
        url = args.url or source_url_for(path, document)
        logger.info("[%d/%d] %s (%s)", idx, len(args.pages), path, url)

        result = extract_recipe(url, document=document)
        results.append(result)
        title = result.recipe.title if result.recipe else None
        print(f"{path}: confidence={result.confidence:.2f} method={result.method} title={title!r}")
        if result.issues:
            print(f"    issues: {', '.join(result.issues)}")

    summary = summarize_results(results)
    if args.json:
        print(summary.model_dump_json(indent=2))
    else:
        print("=" * 60)
        print(f"Total pages: {summary.total}")
        print(f"Successful extractions: {summary.successful}/{summary.total}")
        print(f"Average confidence: {summary.average_confidence:.3f}")
        print(
            f"High (>=0.8): {summary.high_confidence}  "
            f"Medium (0.6-0.8): {summary.medium_confidence}  "
            f"Low (<0.6): {summary.low_confidence}"
        )
        for method, count in sorted(summary.method_breakdown.items()):
            print(f"  {method}: {count}")
    sys.exit(0 if summary.successful else 1)


if __name__ == "__main__":
    main()
