"""
Blog content helpers — reading time, table of contents, SEO checks, tags and
rating averages. Pure functions with no I/O.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

WORDS_PER_MINUTE = 225
MIN_SEO_WORDS = 300

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")
_HEADING_RE = re.compile(r"<h([2-6])[^>]*>(.*?)</h[2-6]>", re.IGNORECASE)
_ANY_HEADING_RE = re.compile(r"<h([1-6])[^>]*>", re.IGNORECASE)
_H1_RE = re.compile(r"<h1[^>]*>", re.IGNORECASE)
_IMG_RE = re.compile(r"<img[^>]*>", re.IGNORECASE)
_EMPTY_ALT_RE = re.compile(r"alt=[\"']\s*[\"']")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def extract_plain_text(html_content: Optional[str]) -> str:
    if not html_content:
        return ""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", html_content)).strip()


def get_word_count(html_content: Optional[str]) -> int:
    return len([word for word in extract_plain_text(html_content).split(" ") if word])


def calculate_reading_time(html_content: Optional[str]) -> str:
    """Return a ``"N min read"`` label at 225 words per minute (minimum 1)."""
    if not html_content:
        return "1 min read"
    minutes = math.ceil(get_word_count(html_content) / WORDS_PER_MINUTE)
    return f"{max(1, minutes)} min read"


def generate_table_of_contents(html_content: Optional[str]) -> list[dict[str, Any]]:
    """Extract h2–h6 headings as ``{id, text, level}`` entries in document order."""
    if not html_content:
        return []

    toc: list[dict[str, Any]] = []
    counter = 0
    for match in _HEADING_RE.finditer(html_content):
        text = _TAG_RE.sub("", match.group(2)).strip()
        if not text:
            continue
        slug = _SLUG_RE.sub("-", text.lower()).strip("-")
        toc.append({"id": f"heading-{counter}-{slug}", "text": text, "level": int(match.group(1))})
        counter += 1
    return toc


def validate_content_seo(html_content: Optional[str]) -> dict[str, list[str]]:
    """Check content against a handful of SEO conventions.

    Returns:
        ``{"errors": [...], "warnings": [...]}``
    """
    if not html_content:
        return {"errors": ["Content is required"], "warnings": []}

    warnings: list[str] = []

    h1_count = len(_H1_RE.findall(html_content))
    if h1_count:
        warnings.append(
            f"Found {h1_count} H1 tag(s) in content. Only one H1 should be used (the post title)."
        )

    previous_level = 0
    for index, level_str in enumerate(_ANY_HEADING_RE.findall(html_content)):
        level = int(level_str)
        if index > 0 and level > previous_level + 1:
            warnings.append(
                f"Heading hierarchy issue: H{level} follows H{previous_level}. "
                "Headings should increase by only one level."
            )
        previous_level = level

    for index, img in enumerate(_IMG_RE.findall(html_content), start=1):
        if "alt=" not in img or _EMPTY_ALT_RE.search(img):
            warnings.append(f"Image {index} is missing alt text or has empty alt attribute.")

    word_count = get_word_count(html_content)
    if word_count < MIN_SEO_WORDS:
        warnings.append(
            f"Content is {word_count} words. Recommended minimum is {MIN_SEO_WORDS} words for better SEO."
        )

    return {"errors": [], "warnings": warnings}


def normalize_tags(tags: Any, separators: str = ",") -> list[str]:
    """Accept a delimited string or a list; trim and drop empties.

    *separators* is a regex character class body, e.g. ``",\\n"`` to split on
    commas and newlines.
    """
    if isinstance(tags, str):
        items = re.split(f"[{separators}]", tags)
    elif isinstance(tags, (list, tuple)):
        items = tags
    else:
        return []
    return [str(tag).strip() for tag in items if str(tag).strip()]


def ratings_average(ratings_total: int, ratings_count: int) -> float:
    """Mean rating rounded half-up to one decimal; 0 when there are no ratings."""
    if not ratings_count:
        return 0
    return math.floor(ratings_total / ratings_count * 10 + 0.5) / 10
