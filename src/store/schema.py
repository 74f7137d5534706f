"""Table definitions for the denormalized review store.

Each table is described once as data and rendered into an idempotent
``CREATE TABLE IF NOT EXISTS`` statement. The clustering directions
declared here are what make review lookups come back newest-first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from core.constants import ITEMS_TABLE, REVIEWS_BY_ITEM_TABLE, REVIEWS_BY_REVIEWER_TABLE
from core.errors import ReviewStoreSchemaError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

ClusteringOrder = Literal["ASC", "DESC"]


@dataclass(frozen=True)
class TableSchema:
    """Column layout and primary-key structure of one table.

    Attributes:
        name: Table name inside the session keyspace.
        columns: Ordered ``(column, cql_type)`` pairs. Insert statements
            bind values in this order.
        partition_key: Partition key columns.
        clustering: Ordered ``(column, direction)`` clustering columns.
    """

    name: str
    columns: tuple[tuple[str, str], ...]
    partition_key: tuple[str, ...]
    clustering: tuple[tuple[str, ClusteringOrder], ...] = ()

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column for column, _ in self.columns)


_REVIEW_VALUE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("reviewername", "text"),
    ("rating", "int"),
    ("summary", "text"),
    ("reviewtext", "text"),
)

ITEMS_SCHEMA = TableSchema(
    name=ITEMS_TABLE,
    columns=(
        ("asin", "text"),
        ("title", "text"),
        ("imageurl", "text"),
        ("categories", "set<text>"),
        ("description", "text"),
    ),
    partition_key=("asin",),
)

REVIEWS_BY_REVIEWER_SCHEMA = TableSchema(
    name=REVIEWS_BY_REVIEWER_TABLE,
    columns=(
        ("reviewerid", "text"),
        ("time", "timestamp"),
        ("asin", "text"),
        *_REVIEW_VALUE_COLUMNS,
    ),
    partition_key=("reviewerid",),
    clustering=(("time", "DESC"), ("asin", "ASC")),
)

REVIEWS_BY_ITEM_SCHEMA = TableSchema(
    name=REVIEWS_BY_ITEM_TABLE,
    columns=(
        ("asin", "text"),
        ("time", "timestamp"),
        ("reviewerid", "text"),
        *_REVIEW_VALUE_COLUMNS,
    ),
    partition_key=("asin",),
    clustering=(("time", "DESC"), ("reviewerid", "ASC")),
)

ALL_TABLES: tuple[TableSchema, ...] = (
    ITEMS_SCHEMA,
    REVIEWS_BY_REVIEWER_SCHEMA,
    REVIEWS_BY_ITEM_SCHEMA,
)


def render_create_table(schema: TableSchema) -> str:
    """Render the idempotent CREATE TABLE statement for a schema."""
    column_rows = ", ".join(f"{column} {cql_type}" for column, cql_type in schema.columns)
    partition_key = ", ".join(schema.partition_key)
    key_parts = [f"({partition_key})", *(column for column, _ in schema.clustering)]
    statement = (
        f"CREATE TABLE IF NOT EXISTS {schema.name} "
        f"({column_rows}, PRIMARY KEY ({', '.join(key_parts)}))"
    )
    if schema.clustering:
        order_rows = ", ".join(f"{column} {order}" for column, order in schema.clustering)
        statement += f" WITH CLUSTERING ORDER BY ({order_rows})"
    return statement


def create_tables(session: Any) -> tuple[str, ...]:
    """Create all store tables when absent.

    Args:
        session: Open driver session bound to the target keyspace.

    Returns:
        Names of the tables that now exist.

    Raises:
        ReviewStoreSchemaError: If any table statement fails.
    """
    for schema in ALL_TABLES:
        try:
            session.execute(render_create_table(schema))
        except (DriverException, NoHostAvailable) as error:
            raise ReviewStoreSchemaError(
                f"Failed to create table '{schema.name}': {error}. "
                "Check keyspace permissions and connectivity."
            ) from error
    table_names = tuple(schema.name for schema in ALL_TABLES)
    _LOGGER.info("tables_created", tables=list(table_names))
    return table_names
