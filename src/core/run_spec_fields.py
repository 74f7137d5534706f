"""Typed field readers for run-spec mappings."""

from __future__ import annotations

from typing import Mapping

from core.errors import ReviewStoreRunSpecError


def required_string(fields: Mapping[object, object], field_name: str) -> str:
    """Return a non-blank string field, stripped.

    Raises:
        ReviewStoreRunSpecError: If the field is absent, blank, or not text.
    """
    value = fields.get(field_name)
    if not isinstance(value, str) or not value.strip():
        raise ReviewStoreRunSpecError(
            f"Run-spec field '{field_name}' is required and must be a non-empty string."
        )
    return value.strip()


def optional_positive_int(fields: Mapping[object, object], field_name: str) -> int | None:
    """Return an optional integer field that must be at least 1 when set.

    Raises:
        ReviewStoreRunSpecError: If the value is not a positive integer.
    """
    value = fields.get(field_name)
    if value is None:
        return None
    if type(value) is not int or value < 1:
        raise ReviewStoreRunSpecError(
            f"Run-spec field '{field_name}' must be a positive integer, got {value!r}."
        )
    return value
