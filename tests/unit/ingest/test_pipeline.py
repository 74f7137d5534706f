"""Unit tests for the concurrent ingest pipeline."""

from __future__ import annotations

import json
from pathlib import Path
import random
import threading
from typing import Any, Iterator, Mapping

import pytest

from core.errors import ReviewStoreWriteError
from core.types import Item
from ingest.pipeline import IngestPipelineRunner, SuccessCounter, load_items
from store.schema import create_tables
from store.statements import prepare_statements
from store.write_gateway import WriteGateway
from tests.fake_cql_session import FakeCqlSession, connected_client, fake_config


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []
        self._lock = threading.Lock()

    def info(self, event: str, **fields: Any) -> None:
        self._record("info", event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._record("warning", event, fields)

    def error(self, event: str, **fields: Any) -> None:
        self._record("error", event, fields)

    def named(self, event: str) -> list[dict[str, Any]]:
        with self._lock:
            return [fields for _, name, fields in self.events if name == event]

    def _record(self, level: str, event: str, fields: dict[str, Any]) -> None:
        with self._lock:
            self.events.append((level, event, fields))


class _CollectingWriter:
    def __init__(self, rejected_asins: set[str] | None = None) -> None:
        self.payloads: list[Mapping[str, Any]] = []
        self._rejected_asins = rejected_asins or set()
        self._lock = threading.Lock()

    def __call__(self, payload: Mapping[str, Any]) -> None:
        if payload.get("asin") in self._rejected_asins:
            raise ReviewStoreWriteError(f"rejected {payload['asin']}")
        with self._lock:
            self.payloads.append(payload)


def _review_line(index: int) -> str:
    return json.dumps(
        {
            "reviewerId": f"R{index % 50}",
            "asin": f"B{index:06d}",
            "reviewerName": f"Reviewer {index % 50}",
            "rating": index % 5 + 1,
            "summary": "ok",
            "reviewText": "fine",
            "unixReviewTime": 1_000_000 + index,
        }
    )


def test_success_counter_counts_across_threads() -> None:
    """Concurrent increments should never be lost."""
    counter = SuccessCounter()

    def _increment_many() -> None:
        for _ in range(1000):
            counter.increment()

    threads = [threading.Thread(target=_increment_many) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter.value == 8000


def test_runner_skips_blank_lines_and_counts_successes() -> None:
    """Blank lines should not be dispatched or counted."""
    writer = _CollectingWriter()
    runner = IngestPipelineRunner("item", writer, worker_count=4, drain_timeout_seconds=30.0)

    loaded_count = runner.run(['{"asin": "B1"}\n', "\n", "   \n", "{'asin': 'B2'}\n"])

    assert loaded_count == 2
    assert sorted(payload["asin"] for payload in writer.payloads) == ["B1", "B2"]


def test_runner_isolates_parse_and_write_failures() -> None:
    """One bad record should be skipped without affecting the others."""
    writer = _CollectingWriter(rejected_asins={"B3"})
    runner = IngestPipelineRunner("item", writer, worker_count=2, drain_timeout_seconds=30.0)
    lines = ['{"asin": "B1"}', "garbage", '{"asin": "B3"}', "{'asin': 'B4'}"]

    loaded_count = runner.run(lines)

    assert loaded_count == 2
    assert sorted(payload["asin"] for payload in writer.payloads) == ["B1", "B4"]


def test_runner_propagates_source_errors() -> None:
    """A failure while reading the source should abort the run."""
    writer = _CollectingWriter()
    runner = IngestPipelineRunner("item", writer, worker_count=2, drain_timeout_seconds=30.0)

    def _broken_lines() -> Iterator[str]:
        yield '{"asin": "B1"}'
        raise OSError("connection reset")

    with pytest.raises(OSError):
        runner.run(_broken_lines())
    assert True


@pytest.mark.parametrize("worker_count", [1, 8, 64])
def test_load_reviews_counts_every_valid_record_for_any_pool_size(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    worker_count: int,
) -> None:
    """Loaded count should equal valid records regardless of order or pool size."""
    lines = [_review_line(index) for index in range(10_000)]
    for index in range(0, len(lines), 10):
        lines[index] = "{'broken': "
    random.Random(worker_count).shuffle(lines)
    source_path = tmp_path / "reviews.jsonl"
    source_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    client, session = connected_client(monkeypatch)

    loaded_count = client.load_reviews(str(source_path), worker_count=worker_count)

    assert loaded_count == 9000
    assert len(session.stored_rows("reviews_by_reviewer")) == 9000
    assert len(session.stored_rows("reviews_by_item")) == 9000


def test_load_reviews_skips_rejected_writes_in_both_tables(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    """A rejected review should be absent from both tables and not counted."""
    source_path = tmp_path / "reviews.jsonl"
    source_path.write_text("\n".join(_review_line(index) for index in range(20)), encoding="utf-8")
    client, session = connected_client(monkeypatch)
    session.rejected_values.add("B000007")

    loaded_count = client.load_reviews(str(source_path), worker_count=4)

    assert loaded_count == 19
    assert "B000007" not in {row["asin"] for row in session.stored_rows("reviews_by_reviewer")}
    assert "B000007" not in {row["asin"] for row in session.stored_rows("reviews_by_item")}


@pytest.mark.parametrize("worker_count", [1, 8, 64])
def test_load_reviews_counts_all_well_formed_records(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    worker_count: int,
) -> None:
    """Every well-formed review should be counted and stored in both tables."""
    lines = [_review_line(index) for index in range(10_000)]
    random.Random(worker_count + 1).shuffle(lines)
    source_path = tmp_path / "reviews.jsonl"
    source_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    client, session = connected_client(monkeypatch)

    loaded_count = client.load_reviews(str(source_path), worker_count=worker_count)

    assert loaded_count == 10_000
    assert len(session.stored_rows("reviews_by_reviewer")) == 10_000
    assert len(session.stored_rows("reviews_by_item")) == 10_000


def test_runner_logs_records_whose_values_do_not_bind(monkeypatch: pytest.MonkeyPatch) -> None:
    """A value the driver cannot bind should be logged as a failed record."""
    logger = _RecordingLogger()
    monkeypatch.setattr("ingest.pipeline._LOGGER", logger)
    session = FakeCqlSession()
    create_tables(session)
    gateway = WriteGateway(session, prepare_statements(session))

    def _write_raw_item(payload: Mapping[str, Any]) -> None:
        gateway.write_item(Item(payload["asin"], payload["title"], "na", frozenset(), "na"))

    runner = IngestPipelineRunner(
        "item", _write_raw_item, worker_count=2, drain_timeout_seconds=30.0
    )

    loaded_count = runner.run(['{"asin": "B1", "title": 7}', '{"asin": "B2", "title": "Rake"}'])

    failures = logger.named("record_failed")
    assert loaded_count == 1
    assert [failure["line"] for failure in failures] == ['{"asin": "B1", "title": 7}']
    assert failures[0]["error_type"] == "ReviewStoreWriteError"


def test_runner_returns_partial_count_after_drain_timeout(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """A stuck write should not hold the run past the drain timeout."""
    logger = _RecordingLogger()
    monkeypatch.setattr("ingest.pipeline._LOGGER", logger)
    release = threading.Event()
    writer = _CollectingWriter()

    def _write(payload: Mapping[str, Any]) -> None:
        if payload["asin"] == "B-slow":
            release.wait(timeout=30.0)
        writer(payload)

    runner = IngestPipelineRunner("item", _write, worker_count=2, drain_timeout_seconds=0.5)
    try:
        loaded_count = runner.run(['{"asin": "B-slow"}', '{"asin": "B1"}', '{"asin": "B2"}'])
        timeouts = logger.named("ingest_drain_timeout")
    finally:
        release.set()

    assert loaded_count == 2
    assert timeouts == [{"record_kind": "item", "pending_count": 1, "timeout_seconds": 0.5}]


def test_load_items_closes_source_when_run_aborts(monkeypatch: pytest.MonkeyPatch) -> None:
    """The line source should be released even if the run fails midway."""
    closed_sources: list[str] = []

    def _lines(source_uri: str, config: Any) -> Iterator[str]:
        try:
            yield '{"asin": "B1"}'
            yield '{"asin": "B2"}'
        finally:
            closed_sources.append(source_uri)

    def _abort(self: IngestPipelineRunner, lines: Iterator[str]) -> int:
        next(iter(lines))
        raise RuntimeError("pool failure")

    monkeypatch.setattr("ingest.pipeline.iter_source_lines", _lines)
    monkeypatch.setattr(IngestPipelineRunner, "run", _abort)

    with pytest.raises(RuntimeError):
        load_items("items.jsonl", gateway=None, config=fake_config())  # type: ignore[arg-type]

    assert closed_sources == ["items.jsonl"]
