"""
leadgrade/rules/conditions.py — Evaluates one Condition against one record.

Never raises for bad data: a missing value, an unknown operator, a malformed
range or a type mismatch all come back as matched=False with a detail string
that ends up in the evaluation trace.

Comparison rules:
  - eq/neq/gt/gte/lt/lte/between compare as numbers when both sides are numeric
  - between is inclusive on both ends
  - eq/neq fall back to case-insensitive string comparison otherwise
  - contains/not_contains/in always compare case-insensitive strings
"""

import logging
import operator as op
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable

from leadgrade.rules.models import (
    OPERATOR_SYMBOLS,
    Condition,
    ConditionValue,
    ListValue,
    OperatorKind,
    RangeValue,
    format_scalar,
    parse_number,
)

logger = logging.getLogger(__name__)


# ── Record access ────────────────────────────────────────────────────────────

class FieldMap(Mapping):
    """Read-only flat field → scalar view over a lead or member record."""

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values = dict(values or {})

    def __getitem__(self, field: str) -> Any:
        return self._values[field]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"<FieldMap {self._values!r}>"

    def lookup(self, field: str) -> Any | None:
        """Return the field's value, or None when it is absent, null or ''."""
        value = self._values.get(field)
        if value is None or value == "":
            return None
        return value

    @classmethod
    def of(cls, record: Mapping[str, Any] | None) -> "FieldMap":
        if isinstance(record, FieldMap):
            return record
        return cls(record)


# ── Result ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ConditionResult:
    matched: bool
    detail: str


# ── Evaluation ───────────────────────────────────────────────────────────────

NUMERIC_OPERATORS = frozenset({
    OperatorKind.EQ, OperatorKind.NEQ,
    OperatorKind.GT, OperatorKind.GTE,
    OperatorKind.LT, OperatorKind.LTE,
    OperatorKind.BETWEEN,
})

_COMPARATORS: dict[OperatorKind, Callable[[float, float], bool]] = {
    OperatorKind.EQ: op.eq,
    OperatorKind.NEQ: op.ne,
    OperatorKind.GT: op.gt,
    OperatorKind.GTE: op.ge,
    OperatorKind.LT: op.lt,
    OperatorKind.LTE: op.le,
}


def _numeric(field: str, kind: OperatorKind, actual: float, target: ConditionValue) -> ConditionResult | None:
    """Numeric comparison, or None when the condition value is not a number."""
    if kind is OperatorKind.BETWEEN:
        if not isinstance(target, RangeValue):
            return ConditionResult(False, f"{field}: malformed range {target.display()}")
        matched = target.low <= actual <= target.high
        return ConditionResult(
            matched,
            f"{field}: {format_scalar(target.low)} <= {format_scalar(actual)} <= {format_scalar(target.high)}",
        )

    expected = target.as_number()
    if expected is None:
        return None
    matched = _COMPARATORS[kind](actual, expected)
    return ConditionResult(
        matched,
        f"{field}: {format_scalar(actual)} {OPERATOR_SYMBOLS[kind]} {format_scalar(expected)}",
    )


def _textual(field: str, kind: OperatorKind, actual: Any, target: ConditionValue) -> ConditionResult:
    text = format_scalar(actual).lower()
    shown = f'"{format_scalar(actual)}"'

    if kind is OperatorKind.IN:
        if not isinstance(target, (ListValue, RangeValue)):
            return ConditionResult(False, f"{field}: 'in' needs a list, got {target.display()}")
        options = [format_scalar(item).lower() for item in target.items()]
        return ConditionResult(text in options, f"{field}: {shown} in [{target.text()}]")

    if isinstance(target, (ListValue, RangeValue)):
        return ConditionResult(False, f"{field}: '{kind.value}' needs a single value, got {target.display()}")

    expected = target.text().lower()
    if kind is OperatorKind.EQ:
        matched = text == expected
    elif kind is OperatorKind.NEQ:
        matched = text != expected
    elif kind is OperatorKind.CONTAINS:
        matched = expected in text
    elif kind is OperatorKind.NOT_CONTAINS:
        matched = expected not in text
    else:
        return ConditionResult(False, f"{field}: type mismatch, {shown} is not comparable with {target.display()}")

    return ConditionResult(matched, f"{field}: {shown} {OPERATOR_SYMBOLS[kind]} {target.display()}")


def evaluate_condition(record: Mapping[str, Any], condition: Condition) -> ConditionResult:
    """
    Evaluate a single condition against a flat record.

    Args:
        record:    Lead or member field map.
        condition: The stored field/operator/value predicate.

    Returns:
        ConditionResult with the match flag and a human-readable detail.
    """
    fields = FieldMap.of(record)
    field = condition.field
    actual = fields.lookup(field)

    if actual is None:
        return ConditionResult(False, f"{field}: no value")

    kind = condition.kind
    if kind is None:
        logger.debug("Unknown operator %r on field %s.", condition.operator, field)
        return ConditionResult(False, f"{field}: unknown operator {condition.operator!r}")

    target = condition.typed_value

    if kind in NUMERIC_OPERATORS:
        actual_number = parse_number(actual)
        if actual_number is not None:
            result = _numeric(field, kind, actual_number, target)
            if result is not None:
                return result
        if kind not in (OperatorKind.EQ, OperatorKind.NEQ):
            return ConditionResult(
                False,
                f'{field}: type mismatch, "{format_scalar(actual)}" {OPERATOR_SYMBOLS[kind]} '
                f"{target.display()} needs numbers on both sides",
            )

    return _textual(field, kind, actual, target)
