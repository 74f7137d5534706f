"""Loose JSON parsing for input record lines.

This module turns one input line into a generic mapping. Strict JSON is
tried first; lines using single-quoted strings or Python-style literals
fall back to a restricted literal evaluator over the Python AST.
"""

from __future__ import annotations

import ast
import json
from typing import Any

from core.errors import ReviewStoreIngestError

_NAMED_LITERALS: dict[str, object] = {
    "null": None,
    "true": True,
    "false": False,
    "None": None,
    "True": True,
    "False": False,
}


def parse_record_line(line: str) -> dict[str, Any]:
    """Parse one record line into a key-value mapping.

    Args:
        line: Raw input line, already stripped.

    Returns:
        Parsed object mapping.

    Raises:
        ReviewStoreIngestError: If the line is not a parsable object.
    """
    try:
        payload = json.loads(line)
    except (ValueError, RecursionError):
        payload = _parse_loose_literal(line)
    if not isinstance(payload, dict):
        raise ReviewStoreIngestError(
            f"Invalid record line: expected an object, got {type(payload).__name__}."
        )
    return payload


def _parse_loose_literal(line: str) -> object:
    try:
        expression = ast.parse(line, mode="eval")
    except (SyntaxError, ValueError, MemoryError, RecursionError) as error:
        raise ReviewStoreIngestError(f"Invalid record line: {error}.") from error
    try:
        return _evaluate_node(expression.body)
    except RecursionError as error:
        raise ReviewStoreIngestError("Invalid record line: nesting is too deep.") from error


def _evaluate_node(node: ast.AST) -> object:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, (str, int, float, bool)) or node.value is None:
            return node.value
        raise ReviewStoreIngestError(
            f"Invalid record line: unsupported literal {type(node.value).__name__}."
        )
    if isinstance(node, ast.Name) and node.id in _NAMED_LITERALS:
        return _NAMED_LITERALS[node.id]
    if isinstance(node, ast.Dict):
        return _evaluate_dict(node)
    if isinstance(node, (ast.List, ast.Tuple)):
        return [_evaluate_node(element) for element in node.elts]
    if isinstance(node, ast.UnaryOp) and isinstance(node.op, (ast.USub, ast.UAdd)):
        operand = _evaluate_node(node.operand)
        if isinstance(operand, (int, float)) and not isinstance(operand, bool):
            return -operand if isinstance(node.op, ast.USub) else operand
    raise ReviewStoreIngestError(
        f"Invalid record line: unsupported expression {type(node).__name__}."
    )


def _evaluate_dict(node: ast.Dict) -> dict[str, object]:
    mapping: dict[str, object] = {}
    for key_node, value_node in zip(node.keys, node.values):
        if key_node is None:
            raise ReviewStoreIngestError("Invalid record line: dict unpacking is not a literal.")
        key = _evaluate_node(key_node)
        if not isinstance(key, str):
            raise ReviewStoreIngestError(
                f"Invalid record line: expected string keys, got {type(key).__name__}."
            )
        mapping[key] = _evaluate_node(value_node)
    return mapping
