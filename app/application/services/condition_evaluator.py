"""Condition evaluation for workflow rules.

Pure functions: no I/O, no side effects, never raise on bad input.
Unknown operators and unresolvable field paths fail closed (no match),
so a broken condition can only cause its rule to be skipped.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from app.application.services.variable_substitution import stringify
from app.domain.entities.workflow import WorkflowCondition
from app.shared.enums import ConditionOperator
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class _Missing:
    """Sentinel for a field path that does not resolve."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()

ConditionLike = WorkflowCondition | Mapping[str, Any]


def resolve_field(payload: Mapping[str, Any], path: str) -> Any:
    """Walk a dot path through nested mappings; MISSING when any segment is absent."""
    current: Any = payload
    for segment in path.split("."):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def _strict_equals(left: Any, right: Any) -> bool:
    """Equality without cross-type coercion (True never equals 1, "5" never equals 5)."""
    if left is MISSING or right is MISSING:
        return False
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _to_text(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    return stringify(value)


def _to_number(value: Any) -> float:
    """Permissive numeric parse; NaN when the value has no numeric reading."""
    if value is MISSING or value is None:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        try:
            number = float(text)
        except ValueError:
            return math.nan
        return number if math.isfinite(number) else math.nan
    return math.nan


def _is_empty(value: Any) -> bool:
    return value is MISSING or value is None or _to_text(value).strip() == ""


def _numeric(cmp: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def _compare(field_value: Any, expected: Any) -> bool:
        left, right = _to_number(field_value), _to_number(expected)
        if math.isnan(left) or math.isnan(right):
            return False
        return cmp(left, right)

    return _compare


def _member(field_value: Any, expected: Any) -> bool:
    return any(_strict_equals(field_value, item) for item in expected)


_OPERATORS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: _strict_equals,
    ConditionOperator.NOT_EQUALS: lambda v, e: not _strict_equals(v, e),
    ConditionOperator.CONTAINS: lambda v, e: _to_text(e) in _to_text(v),
    ConditionOperator.NOT_CONTAINS: lambda v, e: _to_text(e) not in _to_text(v),
    ConditionOperator.GREATER_THAN: _numeric(operator.gt),
    ConditionOperator.LESS_THAN: _numeric(operator.lt),
    ConditionOperator.GREATER_THAN_OR_EQUAL: _numeric(operator.ge),
    ConditionOperator.LESS_THAN_OR_EQUAL: _numeric(operator.le),
    ConditionOperator.IS_EMPTY: lambda v, _e: _is_empty(v),
    ConditionOperator.IS_NOT_EMPTY: lambda v, _e: not _is_empty(v),
    ConditionOperator.IN: lambda v, e: isinstance(e, (list, tuple)) and _member(v, e),
    ConditionOperator.NOT_IN: lambda v, e: isinstance(e, (list, tuple)) and not _member(v, e),
}


def _as_condition(condition: ConditionLike) -> WorkflowCondition:
    if isinstance(condition, WorkflowCondition):
        return condition
    return WorkflowCondition.from_dict(condition)


def evaluate_condition(condition: ConditionLike, payload: Mapping[str, Any]) -> bool:
    """Return whether a single condition holds for the payload."""
    cond = _as_condition(condition)
    try:
        op = ConditionOperator(cond.operator)
    except ValueError:
        logger.debug("Unknown condition operator %r on field %r; failing closed", cond.operator, cond.field)
        return False
    field_value = resolve_field(payload or {}, cond.field) if cond.field else MISSING
    return _OPERATORS[op](field_value, cond.value)


def evaluate_conditions(
    conditions: Iterable[ConditionLike] | None, payload: Mapping[str, Any]
) -> bool:
    """Return True when every condition holds (AND); an empty list always matches."""
    if not conditions:
        return True
    return all(evaluate_condition(c, payload) for c in conditions)
