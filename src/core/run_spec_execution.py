"""Run-spec execution shared by the CLI and the SDK.

Each validated step is dispatched to one client call, and its result is
rendered with the same ``name=value`` lines and lookup text the CLI
prints for the matching command.
"""

from __future__ import annotations

from typing import Iterable, Protocol

from core.run_spec import RunSpec, RunSpecStep, load_run_spec


class RunSpecClient(Protocol):
    """Client API contract required by run-spec execution."""

    def create_tables(self) -> tuple[str, ...]: ...

    def load_items(self, source_uri: str, worker_count: int | None = None) -> int: ...

    def load_reviews(self, source_uri: str, worker_count: int | None = None) -> int: ...

    def item(self, asin: str) -> str: ...

    def user_reviews(self, reviewer_id: str) -> Iterable[str]: ...

    def item_reviews(self, asin: str) -> Iterable[str]: ...


def execute_run_spec_file(client: RunSpecClient, spec_file: str) -> tuple[str, ...]:
    """Load and execute a run-spec file, returning printable output lines."""
    return execute_run_spec(client, load_run_spec(spec_file))


def execute_run_spec(client: RunSpecClient, spec: RunSpec) -> tuple[str, ...]:
    """Run every step in order and collect its output lines."""
    output_lines: list[str] = []
    for step in spec.steps:
        output_lines.extend(_run_step(client, step, spec.default_worker_count))
    return tuple(output_lines)


def _run_step(
    client: RunSpecClient,
    step: RunSpecStep,
    default_worker_count: int | None,
) -> Iterable[str]:
    worker_count = step.worker_count or default_worker_count
    if step.command == "create-tables":
        return (f"tables_created={','.join(client.create_tables())}",)
    if step.command == "load-items":
        return (f"items_loaded={client.load_items(step.key, worker_count)}",)
    if step.command == "load-reviews":
        return (f"reviews_loaded={client.load_reviews(step.key, worker_count)}",)
    if step.command == "item":
        return client.item(step.key).splitlines()
    if step.command == "user-reviews":
        return [review.rstrip("\n") for review in client.user_reviews(step.key)]
    return [review.rstrip("\n") for review in client.item_reviews(step.key)]
