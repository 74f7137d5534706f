"""CQL statement text and preparation.

Insert statements list columns in schema order so bind values can be
built from one column-to-value mapping per record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from core.errors import ReviewStoreStatementError
from core.logging_config import get_logger
from store.schema import (
    ITEMS_SCHEMA,
    REVIEWS_BY_ITEM_SCHEMA,
    REVIEWS_BY_REVIEWER_SCHEMA,
    TableSchema,
)

_LOGGER = get_logger(__name__)


def render_insert(schema: TableSchema) -> str:
    """Render a positional-marker INSERT for every column of a table."""
    columns = ", ".join(schema.column_names)
    markers = ", ".join("?" for _ in schema.column_names)
    return f"INSERT INTO {schema.name} ({columns}) VALUES ({markers})"


def render_partition_select(schema: TableSchema) -> str:
    """Render a single-partition SELECT keyed by the partition key."""
    conditions = " AND ".join(f"{column} = ?" for column in schema.partition_key)
    return f"SELECT * FROM {schema.name} WHERE {conditions}"


ITEM_INSERT_CQL = render_insert(ITEMS_SCHEMA)
REVIEW_INSERT_BATCH_CQL = (
    "BEGIN BATCH "
    f"{render_insert(REVIEWS_BY_REVIEWER_SCHEMA)}; "
    f"{render_insert(REVIEWS_BY_ITEM_SCHEMA)}; "
    "APPLY BATCH"
)
ITEM_SELECT_CQL = render_partition_select(ITEMS_SCHEMA)
REVIEWS_BY_REVIEWER_SELECT_CQL = render_partition_select(REVIEWS_BY_REVIEWER_SCHEMA)
REVIEWS_BY_ITEM_SELECT_CQL = render_partition_select(REVIEWS_BY_ITEM_SCHEMA)


@dataclass(frozen=True)
class PreparedStatements:
    """Prepared statement handles shared by writers and readers."""

    item_insert: Any
    review_insert_batch: Any
    item_select: Any
    reviews_by_reviewer_select: Any
    reviews_by_item_select: Any


def prepare_statements(session: Any) -> PreparedStatements:
    """Prepare every statement the gateway and facade execute.

    Args:
        session: Open driver session with tables already created.

    Returns:
        Prepared statement handles.

    Raises:
        ReviewStoreStatementError: If any statement fails to prepare.
    """
    statements = PreparedStatements(
        item_insert=_prepare(session, ITEM_INSERT_CQL),
        review_insert_batch=_prepare(session, REVIEW_INSERT_BATCH_CQL),
        item_select=_prepare(session, ITEM_SELECT_CQL),
        reviews_by_reviewer_select=_prepare(session, REVIEWS_BY_REVIEWER_SELECT_CQL),
        reviews_by_item_select=_prepare(session, REVIEWS_BY_ITEM_SELECT_CQL),
    )
    _LOGGER.info("statements_prepared")
    return statements


def _prepare(session: Any, cql: str) -> Any:
    try:
        return session.prepare(cql)
    except (DriverException, NoHostAvailable) as error:
        raise ReviewStoreStatementError(
            f"Failed to prepare statement '{cql}': {error}. "
            "Create tables before preparing statements."
        ) from error
