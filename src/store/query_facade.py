"""Point and partition lookups rendered as text.

Review lookups return restartable iterables: each iteration runs the
query again, so the same result object can be consumed repeatedly.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator

from cassandra import DriverException
from cassandra.cluster import NoHostAvailable

from core.constants import ITEM_NOT_FOUND_MARKER
from core.errors import ReviewStoreQueryError
from core.logging_config import get_logger
from store.record_format import format_item, format_review, item_from_row, review_from_row
from store.statements import PreparedStatements

_LOGGER = get_logger(__name__)


class ReviewLines:
    """Lazy, re-iterable formatted review lines for one partition."""

    def __init__(self, run_query: Callable[[], Any], description: str) -> None:
        self._run_query = run_query
        self._description = description

    def __iter__(self) -> Iterator[str]:
        rows = self._run_query()
        try:
            for row in rows:
                yield format_review(review_from_row(row))
        except (DriverException, NoHostAvailable) as error:
            raise ReviewStoreQueryError(
                f"Failed to page {self._description}: {error}."
            ) from error


class QueryFacade:
    """Runs prepared lookups and renders their rows."""

    def __init__(self, session: Any, statements: PreparedStatements) -> None:
        self._session = session
        self._statements = statements

    def get_item(self, asin: str) -> str:
        """Return the formatted item, or ``"not exists"`` when absent.

        Raises:
            ReviewStoreQueryError: If the lookup fails.
        """
        _LOGGER.info("item_lookup", asin=asin)
        rows = self._execute(self._statements.item_select, asin, f"item '{asin}'")
        row = rows.one()
        if row is None:
            return ITEM_NOT_FOUND_MARKER
        return format_item(item_from_row(row))

    def get_reviews_by_reviewer(self, reviewer_id: str) -> ReviewLines:
        """Return a reviewer's reviews, newest first."""
        description = f"reviews of reviewer '{reviewer_id}'"
        return self._review_lines(
            self._statements.reviews_by_reviewer_select, reviewer_id, description
        )

    def get_reviews_by_item(self, asin: str) -> ReviewLines:
        """Return an item's reviews, newest first."""
        description = f"reviews of item '{asin}'"
        return self._review_lines(self._statements.reviews_by_item_select, asin, description)

    def _review_lines(self, prepared: Any, key: str, description: str) -> ReviewLines:
        def _run_query() -> Any:
            _LOGGER.info("reviews_lookup", lookup=description)
            return self._execute(prepared, key, description)

        return ReviewLines(_run_query, description)

    def _execute(self, prepared: Any, key: str, description: str) -> Any:
        try:
            return self._session.execute(prepared.bind((key,)))
        except (DriverException, NoHostAvailable) as error:
            raise ReviewStoreQueryError(f"Failed to look up {description}: {error}.") from error
