"""Row decoding and fixed text rendering for lookups.

The labels and field order of both templates are a stable output
contract; callers compare these strings verbatim.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from core.types import Item, Review


def item_from_row(row: Mapping[str, Any]) -> Item:
    """Decode an items-table row."""
    return Item(
        asin=row["asin"],
        title=row["title"],
        image_url=row["imageurl"],
        categories=frozenset(row["categories"] or ()),
        description=row["description"],
    )


def review_from_row(row: Mapping[str, Any]) -> Review:
    """Decode a row from either review table."""
    return Review(
        reviewer_id=row["reviewerid"],
        asin=row["asin"],
        time=_as_utc(row["time"]),
        reviewer_name=row["reviewername"],
        rating=row["rating"],
        summary=row["summary"],
        review_text=row["reviewtext"],
    )


def format_item(item: Item) -> str:
    """Render an item as five labeled lines."""
    return (
        f"asin: {item.asin}\n"
        f"title: {item.title}\n"
        f"image: {item.image_url}\n"
        f"categories: {format_categories(item.categories)}\n"
        f"description: {item.description}\n"
    )


def format_review(review: Review) -> str:
    """Render a review as one labeled line."""
    return (
        f"time: {format_instant(review.time)}"
        f", asin: {review.asin}"
        f", reviewerID: {review.reviewer_id}"
        f", reviewerName: {review.reviewer_name}"
        f", rating: {review.rating}"
        f", summary: {review.summary}"
        f", reviewText: {review.review_text}\n"
    )


def format_categories(categories: Iterable[str]) -> str:
    """Render categories as a set literal with sorted members."""
    members = sorted(categories)
    if not members:
        return "set()"
    return "{" + ", ".join(repr(member) for member in members) + "}"


def format_instant(moment: datetime) -> str:
    """Render a UTC instant as ISO-8601 with a ``Z`` suffix."""
    utc_moment = _as_utc(moment)
    rendered = utc_moment.strftime("%Y-%m-%dT%H:%M:%S")
    if utc_moment.microsecond:
        rendered += f".{utc_moment.microsecond // 1000:03d}"
    return rendered + "Z"


def _as_utc(moment: datetime) -> datetime:
    # The driver returns naive datetimes that are already UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
