"""Storage access layer.

This module defines the table schema, the session lifecycle, prepared
writes, and formatted lookups against the wide-column store.
"""
