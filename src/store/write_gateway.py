"""Prepared-statement writes for items and reviews.

A review is written to both review tables through one prepared batch,
sent as a single request, so the store applies both copies or neither.
"""

from __future__ import annotations

from typing import Any, Mapping

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from core.errors import ReviewStoreWriteError
from core.types import Item, Review
from store.schema import (
    ITEMS_SCHEMA,
    REVIEWS_BY_ITEM_SCHEMA,
    REVIEWS_BY_REVIEWER_SCHEMA,
    TableSchema,
)
from store.statements import PreparedStatements


class WriteGateway:
    """Binds records to prepared inserts and executes them."""

    def __init__(self, session: Any, statements: PreparedStatements) -> None:
        self._session = session
        self._statements = statements

    def write_item(self, item: Item) -> None:
        """Upsert one item row.

        Raises:
            ReviewStoreWriteError: If the store rejects the write.
        """
        values = bind_values(ITEMS_SCHEMA, item_columns(item))
        self._execute(self._statements.item_insert, values, f"item '{item.asin}'")

    def write_review(self, review: Review) -> None:
        """Write one review into both review tables as a single batch.

        Raises:
            ReviewStoreWriteError: If the store rejects the batch.
        """
        columns = review_columns(review)
        values = (
            *bind_values(REVIEWS_BY_REVIEWER_SCHEMA, columns),
            *bind_values(REVIEWS_BY_ITEM_SCHEMA, columns),
        )
        self._execute(
            self._statements.review_insert_batch,
            values,
            f"review '{review.reviewer_id}/{review.asin}'",
        )

    def _execute(self, prepared: Any, values: tuple[object, ...], description: str) -> None:
        try:
            bound_statement = prepared.bind(values)
        except (TypeError, ValueError) as error:
            raise ReviewStoreWriteError(
                f"Failed to bind {description}: {error}. A value does not fit its column type."
            ) from error
        try:
            self._session.execute(bound_statement)
        except (DriverException, NoHostAvailable) as error:
            raise ReviewStoreWriteError(f"Failed to write {description}: {error}.") from error


def item_columns(item: Item) -> dict[str, object]:
    """Map an item onto its items-table column values."""
    return {
        "asin": item.asin,
        "title": item.title,
        "imageurl": item.image_url,
        "categories": set(item.categories),
        "description": item.description,
    }


def review_columns(review: Review) -> dict[str, object]:
    """Map a review onto the column values shared by both review tables."""
    return {
        "reviewerid": review.reviewer_id,
        "time": review.time,
        "asin": review.asin,
        "reviewername": review.reviewer_name,
        "rating": review.rating,
        "summary": review.summary,
        "reviewtext": review.review_text,
    }


def bind_values(schema: TableSchema, columns: Mapping[str, object]) -> tuple[object, ...]:
    """Order column values the way the table's insert statement binds them."""
    return tuple(columns[column] for column in schema.column_names)
