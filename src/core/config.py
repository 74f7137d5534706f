"""Runtime configuration model for ReviewStore.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_CONTACT_POINTS,
    DEFAULT_DRAIN_TIMEOUT_SECONDS,
    DEFAULT_KEYSPACE,
    DEFAULT_PORT,
    DEFAULT_WORKER_COUNT,
)
from core.errors import ReviewStoreConfigError


@dataclass(frozen=True)
class ReviewStoreConfig:
    """Validated runtime configuration.

    Attributes:
        secure_connect_bundle: Optional Astra secure-connect bundle path.
            When set, contact points and port are ignored.
        contact_points: Cassandra hosts used without a bundle.
        port: Native protocol port used without a bundle.
        username: Optional plain-text auth username.
        password: Optional plain-text auth password.
        keyspace: Keyspace bound to the session.
        connect_timeout_seconds: Driver connect timeout.
        worker_count: Ingest worker pool size.
        drain_timeout_seconds: Maximum wait for in-flight ingest writes.
        s3_region: Optional default AWS region for S3 sources.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    secure_connect_bundle: Path | None
    contact_points: tuple[str, ...]
    port: int
    username: str | None
    password: str | None
    keyspace: str
    connect_timeout_seconds: float
    worker_count: int
    drain_timeout_seconds: float
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "ReviewStoreConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ReviewStoreConfigError: If environment values are invalid.
        """
        bundle_value = os.getenv("REVIEWSTORE_SECURE_BUNDLE")
        return cls(
            secure_connect_bundle=(
                Path(bundle_value).expanduser().resolve() if bundle_value else None
            ),
            contact_points=parse_contact_points(
                os.getenv("REVIEWSTORE_CONTACT_POINTS", ",".join(DEFAULT_CONTACT_POINTS))
            ),
            port=_parse_positive_int("REVIEWSTORE_PORT", DEFAULT_PORT),
            username=os.getenv("REVIEWSTORE_USERNAME") or None,
            password=os.getenv("REVIEWSTORE_PASSWORD") or None,
            keyspace=os.getenv("REVIEWSTORE_KEYSPACE", DEFAULT_KEYSPACE),
            connect_timeout_seconds=_parse_positive_float(
                "REVIEWSTORE_CONNECT_TIMEOUT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            worker_count=_parse_positive_int("REVIEWSTORE_WORKER_COUNT", DEFAULT_WORKER_COUNT),
            drain_timeout_seconds=_parse_positive_float(
                "REVIEWSTORE_DRAIN_TIMEOUT_SECONDS", DEFAULT_DRAIN_TIMEOUT_SECONDS
            ),
            s3_region=os.getenv("REVIEWSTORE_S3_REGION"),
            s3_profile=os.getenv("REVIEWSTORE_S3_PROFILE"),
        )


def parse_contact_points(raw_value: str) -> tuple[str, ...]:
    """Split a comma-separated host list.

    Raises:
        ReviewStoreConfigError: If no host remains after trimming.
    """
    hosts = tuple(host.strip() for host in raw_value.split(",") if host.strip())
    if not hosts:
        raise ReviewStoreConfigError(
            f"Invalid contact points '{raw_value}': expected at least one host. "
            "Set REVIEWSTORE_CONTACT_POINTS to a comma-separated host list."
        )
    return hosts


def _parse_positive_int(env_name: str, default_value: int) -> int:
    """Parse a strictly positive integer environment value.

    Args:
        env_name: Environment variable name.
        default_value: Value used when the variable is unset.

    Returns:
        Parsed integer.

    Raises:
        ReviewStoreConfigError: If value is not a positive integer.
    """
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default_value
    try:
        parsed_value = int(raw_value)
    except ValueError as error:
        raise ReviewStoreConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error
    if parsed_value < 1:
        raise ReviewStoreConfigError(
            f"Invalid {env_name} value: expected a value >= 1, got {parsed_value}."
        )
    return parsed_value


def _parse_positive_float(env_name: str, default_value: float) -> float:
    """Parse a strictly positive numeric environment value.

    Raises:
        ReviewStoreConfigError: If value is not a positive number.
    """
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default_value
    try:
        parsed_value = float(raw_value)
    except ValueError as error:
        raise ReviewStoreConfigError(
            f"Invalid {env_name} value: expected number of seconds, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error
    if not parsed_value > 0:
        raise ReviewStoreConfigError(
            f"Invalid {env_name} value: expected a value > 0, got {raw_value}."
        )
    return parsed_value
