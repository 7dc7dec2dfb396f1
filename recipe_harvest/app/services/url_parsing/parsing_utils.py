"""General parsing utilities for recipe extraction."""

import html
import re
from typing import Iterable, List, Optional, Union

from recipe_harvest.app.services.url_parsing.errors import FieldMappingError

_TAG_RE = re.compile(r"<[^>]+>")
_STEP_MARKER_RE = re.compile(r"^(?:\d+\.(?!\d)\s*|step\s+\d+\s*:?\s*)", re.I)
_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_HOURS_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(?:hours?|hrs?|h)(?![a-z])", re.I)
_MINUTES_RE = re.compile(r"(?<![\d.])(\d+(?:\.\d+)?)\s*(?:minutes?|mins?|m)(?![a-z])", re.I)
_ISO_DURATION_RE = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$", re.I
)


def clean_text(text: str) -> str:
    """Normalize whitespace in text."""
    return re.sub(r"\s+", " ", text or "").strip()


def clean_markup_text(text: str) -> str:
    """Unescape entities and drop inline tags that leak into JSON-LD strings."""
    if not text:
        return ""
    unescaped = html.unescape(text)
    return clean_text(_TAG_RE.sub(" ", unescaped))


def clean_instruction(text: str) -> str:
    """Strip leading step markers ("3. ", "Step 2:") until none remain."""
    cleaned = clean_text(text)
    while True:
        stripped = _STEP_MARKER_RE.sub("", cleaned, count=1).strip()
        if stripped == cleaned:
            return cleaned
        cleaned = stripped


def extract_number(text) -> Optional[Union[int, float]]:
    """Return the first integer or decimal found in text."""
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return text
    match = _NUMBER_RE.search(str(text))
    if not match:
        return None
    raw = match.group(1)
    return float(raw) if "." in raw else int(raw)


def format_duration(hours: int, minutes: int) -> Optional[str]:
    """Render hours/minutes as "1h 30m", "2h" or "45m"."""
    hours += minutes // 60
    minutes = minutes % 60
    if hours and minutes:
        return f"{hours}h {minutes}m"
    if hours:
        return f"{hours}h"
    if minutes:
        return f"{minutes}m"
    return None


def extract_time(text: str) -> Optional[str]:
    """Parse free-text durations such as "1 hour 30 minutes".

    Text without a recognizable hour or minute count is returned unchanged.
    """
    if not text:
        return None
    hour_match = _HOURS_RE.search(text)
    minute_match = _MINUTES_RE.search(text)
    hours = float(hour_match.group(1)) if hour_match else 0.0
    minutes = float(minute_match.group(1)) if minute_match else 0.0
    # Fractional hours ("1.5 hrs") carry over as minutes.
    total_minutes = int(round(hours * 60 + minutes))
    return format_duration(0, total_minutes) or text


def parse_iso8601_duration(duration: str) -> Optional[str]:
    """Parse an ISO-8601 duration (e.g., PT1H30M) into "1h 30m"."""
    if not duration or not isinstance(duration, str):
        return None
    match = _ISO_DURATION_RE.match(duration.strip())
    if not match:
        return None
    days = int(match.group(1) or 0)
    hours = int(match.group(2) or 0) + days * 24
    minutes = int(match.group(3) or 0)
    seconds = float(match.group(4) or 0)
    if seconds >= 30:
        minutes += 1
    return format_duration(hours, minutes)


def is_iso8601_duration(value: str) -> bool:
    return bool(isinstance(value, str) and _ISO_DURATION_RE.match(value.strip()))


def text_value(value) -> Optional[str]:
    """Coerce a schema.org value (string, object, list, number) to text."""
    if value is None:
        return None
    if isinstance(value, str):
        return clean_markup_text(value) or None
    if isinstance(value, bool):
        raise FieldMappingError(f"Unexpected boolean value: {value!r}")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        for key in ("text", "name", "@value"):
            nested = value.get(key)
            if isinstance(nested, (str, int, float)) and not isinstance(nested, bool):
                text = text_value(nested)
                if text:
                    return text
        raise FieldMappingError(f"Object has no text content (keys: {', '.join(sorted(value))})")
    if isinstance(value, list):
        for item in value:
            text = text_value(item)
            if text:
                return text
        return None
    return clean_text(str(value)) or None


def text_list(value) -> List[str]:
    """Flatten a value that may be a string, object or list into clean strings."""
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    out: List[str] = []
    for item in items:
        if isinstance(item, list):
            out.extend(text_list(item))
            continue
        try:
            text = text_value(item)
        except FieldMappingError:
            continue
        if text:
            out.append(text)
    return out


def image_value(value) -> Optional[str]:
    """Extract an image URL from the schema.org image formats."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        for key in ("url", "contentUrl", "@id"):
            url = value.get(key)
            if isinstance(url, str) and url.strip():
                return url.strip()
        return None
    if isinstance(value, list):
        for item in value:
            url = image_value(item)
            if url:
                return url
    return None


def duration_value(value) -> Optional[str]:
    """Map a structured-data duration to "#h #m", falling back to free text."""
    text = text_value(value)
    if not text:
        return None
    if is_iso8601_duration(text):
        return parse_iso8601_duration(text)
    return extract_time(text)


def dedupe(values: Iterable[str]) -> List[str]:
    """Drop case-insensitive duplicates while keeping the first spelling."""
    seen = set()
    unique: List[str] = []
    for value in values:
        key = value.lower()
        if key not in seen:
            seen.add(key)
            unique.append(value)
    return unique


def coerce_tags(*values) -> List[str]:
    """Merge category/cuisine style values into a flat, de-duplicated tag list."""
    raw_tags: List[str] = []
    for value in values:
        for item in text_list(value):
            raw_tags.extend(part.strip() for part in item.split(",") if part.strip())
    return dedupe(raw_tags)
