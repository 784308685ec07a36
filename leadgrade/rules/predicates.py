"""
leadgrade/rules/predicates.py — Combines a list of conditions with AND/OR.

An empty condition list never matches, whatever the logic operator.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from leadgrade.rules.conditions import FieldMap, evaluate_condition
from leadgrade.rules.models import (
    OPERATOR_SYMBOLS,
    Condition,
    LogicOperator,
    OperatorKind,
    PredicateSet,
)


@dataclass
class PredicateSetResult:
    matched: bool
    details: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return " | ".join(self.details)


def evaluate_predicate_set(record: Mapping[str, Any], predicate_set: PredicateSet) -> PredicateSetResult:
    """
    Evaluate every condition left to right, then reduce with all() or any().

    Every condition is evaluated even after the outcome is known so the
    trace shows the full picture.
    """
    if not predicate_set.conditions:
        return PredicateSetResult(matched=False, details=["no conditions"])

    fields = FieldMap.of(record)
    results = [evaluate_condition(fields, condition) for condition in predicate_set.conditions]
    flags = [r.matched for r in results]

    if predicate_set.logic is LogicOperator.AND:
        matched = all(flags)
    else:
        matched = any(flags)

    details = [
        f"{r.detail} ({'matched' if r.matched else 'not matched'})"
        for r in results
    ]
    return PredicateSetResult(matched=matched, details=details)


# ── Human-readable descriptions ──────────────────────────────────────────────

def describe_condition(condition: Condition) -> str:
    kind = condition.kind
    value = condition.typed_value
    if kind is None:
        return f"{condition.field} {condition.operator} {value.text()}"
    if kind is OperatorKind.IN:
        return f"{condition.field} in [{value.text()}]"
    return f"{condition.field} {OPERATOR_SYMBOLS[kind]} {value.text()}"


def describe_predicate_set(predicate_set: PredicateSet) -> str:
    """e.g. 'annual_revenue >= 500000000 AND region in [seoul, busan]'."""
    if not predicate_set.conditions:
        return "(no conditions)"
    joiner = f" {predicate_set.logic.value} "
    return joiner.join(describe_condition(c) for c in predicate_set.conditions)
