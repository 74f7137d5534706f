"""Record ingestion pipeline.

This module reads raw record lines, normalizes them into typed records,
and fans writes out to the store through a bounded worker pool.
"""
