"""Core constants used across ReviewStore modules.

This module centralizes sentinel values, table names, and sizing defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

NOT_AVAILABLE_VALUE = "na"
MISSING_RATING = -1
MISSING_UNIX_REVIEW_TIME = 0
CQL_INT_MIN = -(2**31)
CQL_INT_MAX = 2**31 - 1
ITEM_NOT_FOUND_MARKER = "not exists"
ITEMS_TABLE = "items"
REVIEWS_BY_REVIEWER_TABLE = "reviews_by_reviewer"
REVIEWS_BY_ITEM_TABLE = "reviews_by_item"
DEFAULT_KEYSPACE = "reviewstore"
DEFAULT_CONTACT_POINTS = ("127.0.0.1",)
DEFAULT_PORT = 9042
DEFAULT_CONNECT_TIMEOUT_SECONDS = 30.0
DEFAULT_WORKER_COUNT = 250
DEFAULT_DRAIN_TIMEOUT_SECONDS = 3600.0
S3_URI_SCHEME = "s3://"
SOURCE_ENCODING = "utf-8"
