"""Total normalization of raw record mappings.

Every field is extracted by shape: a value of an unexpected shape
degrades to that field's default and never fails the whole record.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import math
from typing import Any, Mapping

from core.constants import (
    CQL_INT_MAX,
    CQL_INT_MIN,
    MISSING_RATING,
    MISSING_UNIX_REVIEW_TIME,
    NOT_AVAILABLE_VALUE,
)
from core.types import Item, Review

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_item(raw: Mapping[str, Any]) -> Item:
    """Map a raw item object to a typed item.

    Args:
        raw: Parsed item line.

    Returns:
        Item with sentinel defaults for missing scalars.
    """
    image_url = text_field(raw, "imageURL")
    if image_url == NOT_AVAILABLE_VALUE:
        image_url = text_field(raw, "imUrl")
    return Item(
        asin=text_field(raw, "asin"),
        title=text_field(raw, "title"),
        image_url=image_url,
        categories=category_set(raw.get("categories")),
        description=text_field(raw, "description"),
    )


def normalize_review(raw: Mapping[str, Any]) -> Review:
    """Map a raw review object to a typed review.

    Args:
        raw: Parsed review line.

    Returns:
        Review with sentinel defaults, rating -1 and epoch time when missing.
    """
    return Review(
        reviewer_id=text_field(raw, "reviewerId"),
        asin=text_field(raw, "asin"),
        time=epoch_seconds_field(raw, "unixReviewTime"),
        reviewer_name=text_field(raw, "reviewerName"),
        rating=int_field(raw, "rating", MISSING_RATING, bounds=(CQL_INT_MIN, CQL_INT_MAX)),
        summary=text_field(raw, "summary"),
        review_text=text_field(raw, "reviewText"),
    )


def text_field(raw: Mapping[str, Any], field_name: str) -> str:
    """Read a scalar as text, or the sentinel for missing and non-scalar values."""
    return _as_text(raw.get(field_name))


def int_field(
    raw: Mapping[str, Any],
    field_name: str,
    default_value: int,
    bounds: tuple[int, int] | None = None,
) -> int:
    """Read a numeric field as int, truncating floats.

    Values outside the inclusive ``bounds`` degrade to ``default_value``.
    """
    value = raw.get(field_name)
    if not _is_number(value):
        return default_value
    if isinstance(value, float) and not math.isfinite(value):
        return default_value
    parsed_value = int(value)
    if bounds is not None and not bounds[0] <= parsed_value <= bounds[1]:
        return default_value
    return parsed_value


def epoch_seconds_field(raw: Mapping[str, Any], field_name: str) -> datetime:
    """Read a Unix-seconds field as a UTC datetime, defaulting to the epoch."""
    seconds = int_field(raw, field_name, MISSING_UNIX_REVIEW_TIME)
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        return _EPOCH


def category_set(value: object) -> frozenset[str]:
    """Flatten nested or flat category lists into one set.

    Nested lists contribute every leaf, with null leaves mapped to the
    sentinel. Null entries of a flat list are skipped.
    """
    if not isinstance(value, list):
        return frozenset()
    categories: set[str] = set()
    for entry in value:
        if isinstance(entry, list):
            categories.update(_as_text(leaf) for leaf in entry)
        elif entry is not None:
            categories.add(_as_text(entry))
    return frozenset(categories)


def _as_text(value: object) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        return str(value)
    return NOT_AVAILABLE_VALUE


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
