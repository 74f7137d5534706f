"""Declarative load plans read from YAML.

A plan holds a version marker, an optional default worker count, and an
ordered list of steps. Each step names one store command plus that
command's fields. Field names are checked here against a per-command
table, so execution only ever sees complete, well-typed steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping, cast

from core.errors import ReviewStoreDependencyError, ReviewStoreRunSpecError
from core.run_spec_fields import optional_positive_int, required_string

RunSpecCommand = Literal[
    "create-tables",
    "load-items",
    "load-reviews",
    "item",
    "user-reviews",
    "item-reviews",
]

RUN_SPEC_VERSION = 1

# command -> (key field, accepts a workers override)
_STEP_FIELDS: dict[str, tuple[str | None, bool]] = {
    "create-tables": (None, False),
    "load-items": ("source", True),
    "load-reviews": ("source", True),
    "item": ("asin", False),
    "user-reviews": ("reviewer_id", False),
    "item-reviews": ("asin", False),
}
SUPPORTED_RUN_SPEC_COMMANDS: tuple[RunSpecCommand, ...] = cast(
    tuple[RunSpecCommand, ...], tuple(_STEP_FIELDS)
)


@dataclass(frozen=True)
class RunSpecStep:
    """One validated plan step.

    Attributes:
        command: Store command to run.
        key: Source URI, asin, or reviewer id; empty for ``create-tables``.
        worker_count: Optional pool size override for load steps.
    """

    command: RunSpecCommand
    key: str = ""
    worker_count: int | None = None


@dataclass(frozen=True)
class RunSpec:
    """Validated load plan."""

    default_worker_count: int | None
    steps: tuple[RunSpecStep, ...]


def load_run_spec(spec_path: str) -> RunSpec:
    """Read and validate a YAML load plan.

    Args:
        spec_path: File path to YAML run-spec.

    Returns:
        Validated plan with steps in file order.

    Raises:
        ReviewStoreDependencyError: If PyYAML is unavailable.
        ReviewStoreRunSpecError: If the file is missing, malformed, or
            names an unknown command or field.
    """
    spec_file = Path(spec_path).expanduser().resolve()
    document = _read_document(spec_file)
    if not isinstance(document, Mapping):
        raise ReviewStoreRunSpecError(
            f"Run spec at {spec_file} must be a mapping with 'version' and 'steps'."
        )
    _reject_unknown(document, {"version", "defaults", "steps"}, "run spec root")
    version = document.get("version")
    if type(version) is not int or version != RUN_SPEC_VERSION:
        raise ReviewStoreRunSpecError(
            f"Unsupported run spec version {version!r}. Set version: {RUN_SPEC_VERSION}."
        )
    raw_steps = document.get("steps")
    if not isinstance(raw_steps, list) or not raw_steps:
        raise ReviewStoreRunSpecError(
            "Run spec field 'steps' must be a non-empty list of commands."
        )
    return RunSpec(
        default_worker_count=_default_worker_count(document.get("defaults")),
        steps=tuple(
            _parse_step(raw_step, position) for position, raw_step in enumerate(raw_steps, 1)
        ),
    )


def _read_document(spec_file: Path) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise ReviewStoreDependencyError(
            "YAML run-spec support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    if not spec_file.is_file():
        raise ReviewStoreRunSpecError(
            f"Run spec file does not exist at {spec_file}. Provide a valid YAML file path."
        )
    try:
        return yaml.safe_load(spec_file.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as error:
        raise ReviewStoreRunSpecError(
            f"Failed to load run spec at {spec_file}: {error}. Fix the file and retry."
        ) from error


def _default_worker_count(raw_defaults: object) -> int | None:
    if raw_defaults is None:
        return None
    if not isinstance(raw_defaults, Mapping):
        raise ReviewStoreRunSpecError("Run spec 'defaults' must be a mapping.")
    _reject_unknown(raw_defaults, {"workers"}, "run spec defaults")
    return optional_positive_int(raw_defaults, "workers")


def _parse_step(raw_step: object, position: int) -> RunSpecStep:
    if not isinstance(raw_step, Mapping):
        raise ReviewStoreRunSpecError(f"Run spec step #{position} must be a mapping.")
    command = raw_step.get("command")
    if command not in _STEP_FIELDS:
        raise ReviewStoreRunSpecError(
            f"Unsupported command {command!r} in run spec step #{position}. "
            f"Use one of: {', '.join(SUPPORTED_RUN_SPEC_COMMANDS)}."
        )
    key_field, accepts_workers = _STEP_FIELDS[command]
    fields = {name: value for name, value in raw_step.items() if name != "command"}
    allowed_fields = {key_field} if key_field else set()
    if accepts_workers:
        allowed_fields.add("workers")
    _reject_unknown(fields, allowed_fields, f"run spec step #{position} ({command})")
    return RunSpecStep(
        command=cast(RunSpecCommand, command),
        key=required_string(fields, key_field) if key_field else "",
        worker_count=optional_positive_int(fields, "workers"),
    )


def _reject_unknown(mapping: Mapping[object, object], allowed: set[str], context: str) -> None:
    unknown_fields = sorted(str(name) for name in mapping if name not in allowed)
    if unknown_fields:
        raise ReviewStoreRunSpecError(
            f"Unknown fields in {context}: {', '.join(unknown_fields)}."
        )
