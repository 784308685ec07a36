"""
leadgrade/services/classifier.py — Assigns a lead to a quality grade.

Order of evaluation:
  1. Tax delinquency hard override → default grade, nothing else evaluated
  2. Non-default grades by (priority, id); within a grade, rules in list order
  3. First matching rule wins; otherwise the default grade

Exactly one grade must be flagged as default. Anything else is a
configuration error and is raised before any rule is looked at.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from leadgrade.config import settings
from leadgrade.errors import AmbiguousDefaultGradeError, DefaultGradeMissingError
from leadgrade.models import Grade, GradeRule
from leadgrade.rules.conditions import FieldMap
from leadgrade.rules.predicates import describe_predicate_set, evaluate_predicate_set
from leadgrade.trace import EvaluationTrace, TraceOutcome

logger = logging.getLogger(__name__)


# ── Output dataclass ──────────────────────────────────────────────────────────

@dataclass
class ClassificationResult:
    grade_id: str
    grade_name: str
    trace: EvaluationTrace
    matched_rule_id: str | None = None

    @property
    def is_default(self) -> bool:
        return self.matched_rule_id is None


# ── Helpers ──────────────────────────────────────────────────────────────────

def resolve_default_grade(grades: Sequence[Grade]) -> Grade:
    """
    Return the single default grade.

    Raises:
        DefaultGradeMissingError:   no grade has is_default=True.
        AmbiguousDefaultGradeError: more than one grade does.
    """
    defaults = [g for g in grades if g.is_default]
    if not defaults:
        raise DefaultGradeMissingError(len(grades))
    if len(defaults) > 1:
        raise AmbiguousDefaultGradeError(sorted(g.id for g in defaults))

    default_grade = defaults[0]
    if not default_grade.is_active:
        logger.warning("Default grade %s is inactive; it is still used as the fallback.", default_grade.name)
    return default_grade


def sort_grades(grades: Iterable[Grade]) -> list[Grade]:
    """Ascending priority; equal priorities ordered by grade id."""
    return sorted(grades, key=lambda g: (g.priority, g.id))


def group_rules_by_grade(rules: Iterable[GradeRule]) -> dict[str, list[GradeRule]]:
    """Bucket a flat rule list by grade_id, keeping the incoming order."""
    grouped: dict[str, list[GradeRule]] = {}
    for rule in rules:
        grouped.setdefault(rule.grade_id, []).append(rule)
    return grouped


# ── Main function ────────────────────────────────────────────────────────────

def classify(
    lead: Mapping[str, Any],
    grades: Sequence[Grade],
    rules_by_grade: Mapping[str, Sequence[GradeRule]],
) -> ClassificationResult:
    """
    Classify one lead against a grade/rule snapshot.

    Args:
        lead:           Flat field map produced by ingestion/normalization.
        grades:         Every grade, including the default one.
        rules_by_grade: grade_id → rules owned by that grade.

    Returns:
        ClassificationResult with the chosen grade and the evaluation trace.

    Raises:
        GradeConfigurationError: when the grades do not have exactly one default.
    """
    default_grade = resolve_default_grade(grades)
    fields = FieldMap.of(lead)
    trace = EvaluationTrace()

    override_field = settings.tax_delinquency_field
    if fields.get(override_field) is True:
        trace.record(
            subject_id=default_grade.id,
            subject_name=default_grade.name,
            predicate_description=f"{override_field} = true (hard override)",
            matched=True,
            detail="Tax-delinquent leads always receive the default grade; no grade rule was evaluated.",
            outcome=TraceOutcome.OVERRIDE,
        )
        logger.debug("Lead forced to default grade %s by %s.", default_grade.name, override_field)
        return ClassificationResult(
            grade_id=default_grade.id,
            grade_name=default_grade.name,
            trace=trace,
        )

    for grade in sort_grades(grades):
        if grade.is_default or not grade.is_active:
            continue

        for rule in rules_by_grade.get(grade.id, ()):
            if not rule.is_active:
                continue

            result = evaluate_predicate_set(fields, rule.predicate_set)
            trace.record(
                subject_id=rule.id,
                subject_name=grade.name,
                predicate_description=describe_predicate_set(rule.predicate_set),
                matched=result.matched,
                detail=result.summary(),
            )

            if result.matched:
                logger.debug("Lead matched rule %s → grade %s.", rule.id, grade.name)
                return ClassificationResult(
                    grade_id=grade.id,
                    grade_name=grade.name,
                    trace=trace,
                    matched_rule_id=rule.id,
                )

    trace.record(
        subject_id=default_grade.id,
        subject_name=default_grade.name,
        predicate_description="default grade",
        matched=True,
        detail="No rule matched, default applied.",
        outcome=TraceOutcome.DEFAULT,
    )
    logger.debug("No grade rule matched; default grade %s applied.", default_grade.name)
    return ClassificationResult(
        grade_id=default_grade.id,
        grade_name=default_grade.name,
        trace=trace,
    )
