"""Public SDK surface for ReviewStore.

This module provides a stable import path for SDK users.
It re-exports the primary client, record types, and formatters.
"""

from __future__ import annotations

from core.config import ReviewStoreConfig
from core.constants import ITEM_NOT_FOUND_MARKER, NOT_AVAILABLE_VALUE
from core.types import Item, Review
from ingest.record_normalizer import normalize_item, normalize_review
from store.record_format import format_item, format_review
from store.review_store_sdk import ReviewStoreClient

__all__ = [
    "ITEM_NOT_FOUND_MARKER",
    "Item",
    "NOT_AVAILABLE_VALUE",
    "Review",
    "ReviewStoreClient",
    "ReviewStoreConfig",
    "format_item",
    "format_review",
    "normalize_item",
    "normalize_review",
]
