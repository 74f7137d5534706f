"""Store session lifecycle.

This module owns the single process-wide driver session. Opening an
open connection or closing a closed one is a logged no-op.
"""

from __future__ import annotations

from typing import Any

from cassandra import DriverException
from cassandra.auth import PlainTextAuthProvider
from cassandra.cluster import Cluster, NoHostAvailable
from cassandra.query import dict_factory

from core.config import ReviewStoreConfig
from core.errors import ReviewStoreConnectionError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class StoreConnection:
    """Guarded open/close wrapper around one cluster session."""

    def __init__(self, config: ReviewStoreConfig) -> None:
        self._config = config
        self._cluster: Any = None
        self._session: Any = None

    @property
    def is_open(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Any:
        """Return the open session.

        Raises:
            ReviewStoreConnectionError: If the connection is not open.
        """
        if self._session is None:
            raise ReviewStoreConnectionError(
                "Store connection is not open. Call connect() before using the store."
            )
        return self._session

    def open(self) -> None:
        """Connect to the cluster and bind the configured keyspace.

        Raises:
            ReviewStoreConnectionError: If the cluster cannot be reached.
        """
        if self._session is not None:
            _LOGGER.warning("store_already_connected", keyspace=self._config.keyspace)
            return
        _LOGGER.info(
            "store_connecting",
            keyspace=self._config.keyspace,
            secure_bundle=str(self._config.secure_connect_bundle or "-"),
        )
        cluster = _build_cluster(self._config)
        try:
            session = cluster.connect(self._config.keyspace)
        except (DriverException, NoHostAvailable) as error:
            cluster.shutdown()
            raise ReviewStoreConnectionError(
                f"Failed to connect to keyspace '{self._config.keyspace}': {error}. "
                "Check contact points, credentials, and that the keyspace exists."
            ) from error
        session.row_factory = dict_factory
        self._cluster = cluster
        self._session = session
        _LOGGER.info("store_connected", keyspace=self._config.keyspace)

    def close(self) -> None:
        """Shut down the session and cluster."""
        if self._session is None:
            _LOGGER.warning("store_already_closed")
            return
        cluster = self._cluster
        self._session = None
        self._cluster = None
        cluster.shutdown()
        _LOGGER.info("store_closed", keyspace=self._config.keyspace)


def _build_cluster(config: ReviewStoreConfig) -> Any:
    """Build a driver cluster from bundle or contact-point settings."""
    auth_provider = None
    if config.username:
        auth_provider = PlainTextAuthProvider(
            username=config.username,
            password=config.password or "",
        )
    if config.secure_connect_bundle is not None:
        return Cluster(
            cloud={"secure_connect_bundle": str(config.secure_connect_bundle)},
            auth_provider=auth_provider,
            connect_timeout=config.connect_timeout_seconds,
        )
    return Cluster(
        list(config.contact_points),
        port=config.port,
        auth_provider=auth_provider,
        connect_timeout=config.connect_timeout_seconds,
    )
