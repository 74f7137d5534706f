"""Python SDK for review store operations.

This module exposes one client covering the connection lifecycle, schema
setup, bulk loads, single writes, and lookups against the shared session.
"""

from __future__ import annotations

import threading
from typing import Iterable

from core.config import ReviewStoreConfig
from core.run_spec_execution import execute_run_spec_file
from core.types import Item, Review
from ingest.pipeline import load_items, load_reviews
from store.connection import StoreConnection
from store.query_facade import QueryFacade
from store.schema import create_tables
from store.statements import PreparedStatements, prepare_statements
from store.write_gateway import WriteGateway


class ReviewStoreClient:
    """Primary SDK entry point for load and lookup workflows."""

    def __init__(self, config: ReviewStoreConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or ReviewStoreConfig.from_env()
        self._connection = StoreConnection(self._config)
        self._statements: PreparedStatements | None = None
        self._statements_lock = threading.Lock()

    @property
    def config(self) -> ReviewStoreConfig:
        return self._config

    def connect(self) -> None:
        """Open the store session.

        Raises:
            ReviewStoreConnectionError: If the cluster cannot be reached.
        """
        self._connection.open()

    def close(self) -> None:
        """Close the store session and drop prepared statements."""
        with self._statements_lock:
            self._statements = None
        self._connection.close()

    def create_tables(self) -> tuple[str, ...]:
        """Create the items and review tables when absent.

        Returns:
            Names of the provisioned tables.

        Raises:
            ReviewStoreSchemaError: If a table statement fails.
        """
        return create_tables(self._connection.session)

    def initialize(self) -> None:
        """Prepare all statements eagerly.

        Raises:
            ReviewStoreStatementError: If preparation fails.
        """
        self._prepared()

    def load_items(self, source_uri: str, worker_count: int | None = None) -> int:
        """Bulk-load item lines from a file or S3 object.

        Args:
            source_uri: Local path or ``s3://bucket/key`` URI.
            worker_count: Optional pool size override.

        Returns:
            Number of items written.
        """
        return load_items(source_uri, self._write_gateway(), self._config, worker_count)

    def load_reviews(self, source_uri: str, worker_count: int | None = None) -> int:
        """Bulk-load review lines into both review tables.

        Args:
            source_uri: Local path or ``s3://bucket/key`` URI.
            worker_count: Optional pool size override.

        Returns:
            Number of reviews written.
        """
        return load_reviews(source_uri, self._write_gateway(), self._config, worker_count)

    def write_item(self, item: Item) -> None:
        """Write one item, propagating store errors."""
        self._write_gateway().write_item(item)

    def write_review(self, review: Review) -> None:
        """Write one review to both review tables, propagating store errors."""
        self._write_gateway().write_review(review)

    def item(self, asin: str) -> str:
        """Return the formatted item or ``"not exists"``."""
        return self._query_facade().get_item(asin)

    def user_reviews(self, reviewer_id: str) -> Iterable[str]:
        """Return formatted reviews written by a reviewer, newest first."""
        return self._query_facade().get_reviews_by_reviewer(reviewer_id)

    def item_reviews(self, asin: str) -> Iterable[str]:
        """Return formatted reviews of an item, newest first."""
        return self._query_facade().get_reviews_by_item(asin)

    def run_spec(self, spec_file: str) -> tuple[str, ...]:
        """Execute a YAML run-spec through the shared execution engine.

        Args:
            spec_file: Path to YAML run-spec file.

        Returns:
            Ordered command output lines.
        """
        return execute_run_spec_file(self, spec_file)

    def _write_gateway(self) -> WriteGateway:
        return WriteGateway(self._connection.session, self._prepared())

    def _query_facade(self) -> QueryFacade:
        return QueryFacade(self._connection.session, self._prepared())

    def _prepared(self) -> PreparedStatements:
        session = self._connection.session
        with self._statements_lock:
            if self._statements is None:
                self._statements = prepare_statements(session)
            return self._statements
