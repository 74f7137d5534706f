"""Line sources for ingestion.

This module opens local files or S3 objects and yields their text lines
lazily, so arbitrarily large inputs never have to fit in memory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Generator

from core.config import ReviewStoreConfig
from core.constants import SOURCE_ENCODING
from core.errors import ReviewStoreDependencyError, ReviewStoreIngestError
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri


def iter_source_lines(source_uri: str, config: ReviewStoreConfig) -> Generator[str, None, None]:
    """Open a line source and return a lazy line iterator.

    The source is opened eagerly so a missing file or object fails here,
    before any record is dispatched.

    Args:
        source_uri: Local file path or ``s3://bucket/key`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Generator over decoded lines, line terminators included. Closing it
        releases the underlying file or object body.

    Raises:
        ReviewStoreIngestError: If the source cannot be opened.
    """
    if is_s3_uri(source_uri):
        return _open_s3_lines(parse_s3_uri(source_uri), config)
    return _open_local_lines(Path(source_uri).expanduser())


def _open_local_lines(source_path: Path) -> Generator[str, None, None]:
    """Open a local text file for line iteration.

    Raises:
        ReviewStoreIngestError: If path is missing, not a file, or unreadable.
    """
    if not source_path.is_file():
        raise ReviewStoreIngestError(
            f"Failed to read source at {source_path}: path does not exist or is not a file. "
            "Provide an existing newline-delimited record file."
        )
    try:
        handle = source_path.open("r", encoding=SOURCE_ENCODING, errors="replace")
    except OSError as error:
        raise ReviewStoreIngestError(
            f"Failed to open source at {source_path}: {error}. Check file permissions."
        ) from error
    return _iter_file_lines(handle)


def _iter_file_lines(handle: Any) -> Generator[str, None, None]:
    with handle:
        yield from handle


def _open_s3_lines(location: S3Location, config: ReviewStoreConfig) -> Generator[str, None, None]:
    """Open an S3 object body for streaming line iteration.

    Raises:
        ReviewStoreIngestError: If the object cannot be fetched.
    """
    s3_client = _create_s3_client(config)
    from botocore.exceptions import BotoCoreError, ClientError

    try:
        response = s3_client.get_object(Bucket=location.bucket, Key=location.key)
    except (BotoCoreError, ClientError) as error:
        raise ReviewStoreIngestError(
            f"Failed to fetch s3://{location.bucket}/{location.key}: {error}. "
            "Check the object key and AWS credentials."
        ) from error
    return _iter_body_lines(response["Body"])


def _iter_body_lines(body: Any) -> Generator[str, None, None]:
    try:
        for raw_line in body.iter_lines():
            yield raw_line.decode(SOURCE_ENCODING, errors="replace")
    finally:
        body.close()


def _create_s3_client(config: ReviewStoreConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        ReviewStoreDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise ReviewStoreDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to load records from s3:// sources."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: ReviewStoreConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config."""
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs
