"""
leadgrade/services/eligibility.py — May this member receive this grade's leads?

For each distribution rule, in (priority, id) order:
  1. Exclusion tags are checked first. A tag naming a grade the member is
     quick-eligible for ends the evaluation: ineligible, excluded_by=<tag>.
  2. Otherwise the rule's predicate set runs against the member's fields.
     The first match makes the member eligible.
There is no default: if nothing matches, the member is ineligible.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from leadgrade.models import (
    DistributionRule,
    EligibilityThresholds,
    ExclusionTag,
    Grade,
    MemberSnapshot,
    QuickEligibility,
)
from leadgrade.rules.conditions import FieldMap
from leadgrade.rules.predicates import describe_predicate_set, evaluate_predicate_set
from leadgrade.services.classifier import sort_grades
from leadgrade.services.thresholds import format_payment_amount, quick_eligibility
from leadgrade.trace import EvaluationTrace, TraceOutcome

logger = logging.getLogger(__name__)

_EXCLUSION_GRADES: dict[str, str] = {
    ExclusionTag.GRADE_A_ELIGIBLE.value: "A",
    ExclusionTag.GRADE_B_ELIGIBLE.value: "B",
    ExclusionTag.GRADE_C_ELIGIBLE.value: "C",
    ExclusionTag.GRADE_D_ELIGIBLE.value: "D",
}


# ── Output dataclasses ────────────────────────────────────────────────────────

@dataclass
class EligibilityResult:
    is_eligible: bool
    trace: EvaluationTrace
    matched_rule_id: str | None = None
    excluded_by: str | None = None


@dataclass
class GradeEligibility:
    grade_id: str
    grade_name: str
    is_eligible: bool
    quick_eligible: bool | None     # None when the grade is not one of A-D
    reason: str
    result: EligibilityResult | None = None     # None when the grade has no rules


# ── Helpers ──────────────────────────────────────────────────────────────────

def member_field_map(member: MemberSnapshot) -> FieldMap:
    """The fields distribution rules may reference, with their stored aliases."""
    return FieldMap({
        "newbie_test_passed": member.test_passed,
        "monthly_payment": member.monthly_payment,
        "insurance_monthly_payment": member.monthly_payment,
        "commission": member.commission,
        "total_commission": member.commission,
        "contract_count": member.contract_count,
    })


def _exclusion_grade(tag: str) -> str | None:
    return _EXCLUSION_GRADES.get(str(tag).strip().lower())


def resolve_exclusion(tag: str, quick: QuickEligibility) -> bool | None:
    """True/False for a known tag, None for a tag this engine does not know."""
    grade_name = _exclusion_grade(tag)
    if grade_name is None:
        return None
    return quick.flag(grade_name)


# ── Main function ────────────────────────────────────────────────────────────

def evaluate_eligibility(
    member: MemberSnapshot,
    rules: Sequence[DistributionRule],
    quick: QuickEligibility,
) -> EligibilityResult:
    """
    Decide whether a member may receive leads governed by `rules`.

    Args:
        member: Qualification/performance snapshot.
        rules:  Distribution rules, usually those of a single grade.
        quick:  Quick eligibility used to resolve exclusion tags.

    Returns:
        EligibilityResult with the verdict, the matched rule or the
        exclusion that fired, and the evaluation trace.
    """
    trace = EvaluationTrace()
    fields = member_field_map(member)
    active = sorted((r for r in rules if r.is_active), key=lambda r: (r.priority, r.id))

    for rule in active:
        description = describe_predicate_set(rule.predicate_set)
        notes = []

        for tag in rule.exclusions:
            fired = resolve_exclusion(tag, quick)
            if fired is None:
                notes.append(f"unknown exclusion tag {tag!r} ignored")
                continue
            if fired:
                trace.record(
                    subject_id=rule.id,
                    subject_name=rule.label,
                    predicate_description=description,
                    matched=False,
                    detail=f"Excluded by {tag}: member is quick-eligible for grade {_exclusion_grade(tag)}.",
                    outcome=TraceOutcome.EXCLUDED,
                )
                logger.debug("Rule %s: member excluded by %s.", rule.id, tag)
                return EligibilityResult(is_eligible=False, trace=trace, excluded_by=tag)

        result = evaluate_predicate_set(fields, rule.predicate_set)
        trace.record(
            subject_id=rule.id,
            subject_name=rule.label,
            predicate_description=description,
            matched=result.matched,
            detail=" | ".join(notes + result.details),
        )

        if result.matched:
            logger.debug("Rule %s matched; member eligible.", rule.id)
            return EligibilityResult(is_eligible=True, trace=trace, matched_rule_id=rule.id)

    logger.debug("No distribution rule matched (%d evaluated).", len(active))
    return EligibilityResult(is_eligible=False, trace=trace)


# ── Per-grade report ─────────────────────────────────────────────────────────

def _quick_reason(grade_name: str, quick: QuickEligibility, member: MemberSnapshot,
                  thresholds: EligibilityThresholds) -> str:
    payment = format_payment_amount(member.monthly_payment)
    name = grade_name.strip().upper()

    if name == "A":
        if quick.grade_a:
            return f"monthly payment {payment}"
        if not member.test_passed:
            return "newbie test not passed"
        return f"monthly payment {payment} (below {format_payment_amount(thresholds.grade_a_min_payment)})"
    if name == "B":
        if quick.grade_b:
            return f"monthly payment {payment}"
        if quick.grade_a:
            return f"A-eligible member (monthly payment {payment})"
        if not member.test_passed:
            return "newbie test not passed"
        return f"monthly payment {payment} (below {format_payment_amount(thresholds.grade_b_min_payment)})"
    if name == "C":
        if quick.grade_c:
            return "newbie test passed"
        if quick.grade_a or quick.grade_b:
            return "eligible for a higher grade"
        return "newbie test not passed"
    if name == "D":
        return "open to every member"
    return "no quick-eligibility band for this grade"


def evaluate_grade_eligibility(
    member: MemberSnapshot,
    grades: Sequence[Grade],
    rules: Sequence[DistributionRule],
    thresholds: EligibilityThresholds | None = None,
) -> list[GradeEligibility]:
    """
    Evaluate a member against every active grade, in priority order.

    Grades with distribution rules use evaluate_eligibility(); grades with no
    rules fall back to the member's quick-eligibility flag for that grade.
    """
    bands = thresholds or EligibilityThresholds.from_settings()
    quick = quick_eligibility(member.monthly_payment, member.test_passed, bands)

    report = []
    for grade in sort_grades(g for g in grades if g.is_active):
        grade_rules = [r for r in rules if r.grade_id == grade.id and r.is_active]
        quick_flag = quick.flag(grade.name)

        if not grade_rules:
            report.append(GradeEligibility(
                grade_id=grade.id,
                grade_name=grade.name,
                is_eligible=bool(quick_flag),
                quick_eligible=quick_flag,
                reason=_quick_reason(grade.name, quick, member, bands),
            ))
            continue

        result = evaluate_eligibility(member, grade_rules, quick)
        if result.excluded_by:
            reason = f"excluded by {result.excluded_by}"
        elif result.is_eligible:
            reason = f"matched distribution rule {result.matched_rule_id}"
        else:
            reason = "no distribution rule matched"

        report.append(GradeEligibility(
            grade_id=grade.id,
            grade_name=grade.name,
            is_eligible=result.is_eligible,
            quick_eligible=quick_flag,
            reason=reason,
            result=result,
        ))

    logger.info(
        "Grade eligibility: %s",
        {g.grade_name: g.is_eligible for g in report},
    )
    return report
