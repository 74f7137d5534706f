"""ReviewStore exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class ReviewStoreError(Exception):
    """Base exception for all ReviewStore failures."""


class ReviewStoreConfigError(ReviewStoreError):
    """Raised for invalid runtime configuration."""


class ReviewStoreConnectionError(ReviewStoreError):
    """Raised when the store session cannot be opened or is not open."""


class ReviewStoreSchemaError(ReviewStoreError):
    """Raised when table definitions cannot be applied."""


class ReviewStoreStatementError(ReviewStoreError):
    """Raised when CQL statements cannot be prepared."""


class ReviewStoreIngestError(ReviewStoreError):
    """Raised for source reading and record parsing failures."""


class ReviewStoreWriteError(ReviewStoreError):
    """Raised when the store rejects an item or review write."""


class ReviewStoreQueryError(ReviewStoreError):
    """Raised when a lookup against the store fails."""


class ReviewStoreDependencyError(ReviewStoreError):
    """Raised when an optional runtime dependency is missing."""


class ReviewStoreRunSpecError(ReviewStoreError):
    """Raised for invalid or unsupported run-spec configuration."""
