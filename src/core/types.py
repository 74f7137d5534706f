"""Shared typed models.

This module defines immutable records used by ingest, store,
and SDK layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Item:
    """Normalized catalog item.

    Attributes:
        asin: Item identifier and primary key.
        title: Item title.
        image_url: Image URL taken from ``imageURL`` or ``imUrl``.
        categories: Flattened, deduplicated category names.
        description: Free-text description.
    """

    asin: str
    title: str
    image_url: str
    categories: frozenset[str]
    description: str


@dataclass(frozen=True)
class Review:
    """Normalized review stored in both review tables.

    Attributes:
        reviewer_id: Reviewer identifier.
        asin: Reviewed item identifier.
        time: Timezone-aware UTC review time.
        reviewer_name: Display name of the reviewer.
        rating: Star rating, or -1 when unknown.
        summary: Review headline.
        review_text: Review body.
    """

    reviewer_id: str
    asin: str
    time: datetime
    reviewer_name: str
    rating: int
    summary: str
    review_text: str
