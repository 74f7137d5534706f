"""Concurrent ingest orchestration.

This module fans record lines out to a bounded thread pool, where each
line is parsed, normalized, and written independently. One failing line
is logged and skipped; it never aborts the rest of the load.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
import threading
from typing import Any, Callable, Iterable, Literal, Mapping

from core.config import ReviewStoreConfig
from core.errors import ReviewStoreError
from core.logging_config import get_logger
from ingest.input_reader import iter_source_lines
from ingest.line_parser import parse_record_line
from ingest.record_normalizer import normalize_item, normalize_review
from store.write_gateway import WriteGateway

_LOGGER = get_logger(__name__)

RecordKind = Literal["item", "review"]
PayloadWriter = Callable[[Mapping[str, Any]], None]


class SuccessCounter:
    """Thread-safe monotonic counter of completed writes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0

    def increment(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


class InFlightFutures:
    """Lock-guarded set of submitted futures that are not yet done."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._futures: set[Future[None]] = set()

    def track(self, future: Future[None]) -> None:
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(self._discard)

    def snapshot(self) -> tuple[Future[None], ...]:
        with self._lock:
            return tuple(self._futures)

    def _discard(self, future: Future[None]) -> None:
        with self._lock:
            self._futures.discard(future)


class IngestPipelineRunner:
    """Bounded worker-pool runner for one record kind."""

    def __init__(
        self,
        record_kind: RecordKind,
        write_payload: PayloadWriter,
        worker_count: int,
        drain_timeout_seconds: float,
    ) -> None:
        self._record_kind = record_kind
        self._write_payload = write_payload
        self._worker_count = worker_count
        self._drain_timeout_seconds = drain_timeout_seconds

    def run(self, lines: Iterable[str]) -> int:
        """Dispatch every non-blank line and wait for the pool to drain.

        Args:
            lines: Raw record lines.

        Returns:
            Number of records written successfully.
        """
        counter = SuccessCounter()
        in_flight = InFlightFutures()
        submitted_count = 0
        executor = ThreadPoolExecutor(
            max_workers=self._worker_count,
            thread_name_prefix=f"ingest-{self._record_kind}",
        )
        try:
            for line in lines:
                record_line = line.strip()
                if not record_line:
                    continue
                future = executor.submit(self._process_line, record_line, counter)
                in_flight.track(future)
                submitted_count += 1
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=False)
        _, pending = wait(in_flight.snapshot(), timeout=self._drain_timeout_seconds)
        if pending:
            _LOGGER.warning(
                "ingest_drain_timeout",
                record_kind=self._record_kind,
                pending_count=len(pending),
                timeout_seconds=self._drain_timeout_seconds,
            )
        success_count = counter.value
        _LOGGER.info(
            "ingest_completed",
            record_kind=self._record_kind,
            submitted_count=submitted_count,
            success_count=success_count,
            worker_count=self._worker_count,
        )
        return success_count

    def _process_line(self, record_line: str, counter: SuccessCounter) -> None:
        try:
            payload = parse_record_line(record_line)
            self._write_payload(payload)
        except ReviewStoreError as error:
            _LOGGER.error(
                "record_failed",
                record_kind=self._record_kind,
                line=record_line,
                error=str(error),
                error_type=type(error).__name__,
            )
            return
        counter.increment()


def load_items(
    source_uri: str,
    gateway: WriteGateway,
    config: ReviewStoreConfig,
    worker_count: int | None = None,
) -> int:
    """Load newline-delimited item records into the items table.

    Args:
        source_uri: Local path or ``s3://bucket/key`` URI.
        gateway: Prepared write gateway.
        config: Runtime configuration.
        worker_count: Optional pool size override.

    Returns:
        Number of items written.

    Raises:
        ReviewStoreIngestError: If the source cannot be opened.
    """

    def _write_item(payload: Mapping[str, Any]) -> None:
        gateway.write_item(normalize_item(payload))

    return _run_load("item", source_uri, _write_item, config, worker_count)


def load_reviews(
    source_uri: str,
    gateway: WriteGateway,
    config: ReviewStoreConfig,
    worker_count: int | None = None,
) -> int:
    """Load newline-delimited review records into both review tables.

    Args:
        source_uri: Local path or ``s3://bucket/key`` URI.
        gateway: Prepared write gateway.
        config: Runtime configuration.
        worker_count: Optional pool size override.

    Returns:
        Number of reviews written.

    Raises:
        ReviewStoreIngestError: If the source cannot be opened.
    """

    def _write_review(payload: Mapping[str, Any]) -> None:
        gateway.write_review(normalize_review(payload))

    return _run_load("review", source_uri, _write_review, config, worker_count)


def _run_load(
    record_kind: RecordKind,
    source_uri: str,
    write_payload: PayloadWriter,
    config: ReviewStoreConfig,
    worker_count: int | None,
) -> int:
    """Open the source and run one pipeline pass over it."""
    resolved_worker_count = worker_count or config.worker_count
    lines = iter_source_lines(source_uri, config)
    _LOGGER.info(
        "ingest_started",
        record_kind=record_kind,
        source_uri=source_uri,
        worker_count=resolved_worker_count,
    )
    runner = IngestPipelineRunner(
        record_kind=record_kind,
        write_payload=write_payload,
        worker_count=resolved_worker_count,
        drain_timeout_seconds=config.drain_timeout_seconds,
    )
    try:
        return runner.run(lines)
    finally:
        lines.close()
