"""
leadgrade/services/thresholds.py — Threshold-only ("quick") eligibility.

A member who has not passed the newbie test may only receive D leads. A
member who has passed is banded by previous-month monthly payment:

    A: payment >= grade_a_min_payment
    B: grade_b_min_payment <= payment < grade_a_min_payment
    C: neither A nor B
    D: always
"""

import logging

from leadgrade.models import EligibilityThresholds, QuickEligibility

logger = logging.getLogger(__name__)

GRADE_NAMES = ("A", "B", "C", "D")
FALLBACK_GRADE = "D"


def quick_eligibility(
    monthly_payment: float,
    test_passed: bool,
    thresholds: EligibilityThresholds | None = None,
) -> QuickEligibility:
    """
    Compute per-grade eligibility flags from payment and test status alone.

    Args:
        monthly_payment: Member's previous-month total monthly payment.
        test_passed:     Whether the member passed the newbie test.
        thresholds:      Payment bands; defaults to the configured settings.
    """
    if not test_passed:
        return QuickEligibility(grade_a=False, grade_b=False, grade_c=False, grade_d=True)

    bands = thresholds or EligibilityThresholds.from_settings()
    grade_a = monthly_payment >= bands.grade_a_min_payment
    grade_b = bands.grade_b_min_payment <= monthly_payment < bands.grade_a_min_payment
    grade_c = not grade_a and not grade_b

    logger.debug(
        "Quick eligibility for payment=%s: A=%s B=%s C=%s",
        monthly_payment, grade_a, grade_b, grade_c,
    )
    return QuickEligibility(grade_a=grade_a, grade_b=grade_b, grade_c=grade_c, grade_d=True)


def eligible_grades(quick: QuickEligibility) -> list[str]:
    """Grade names the member is quick-eligible for; never empty."""
    grades = [name for name in GRADE_NAMES if quick.flag(name)]
    return grades or [FALLBACK_GRADE]


def _grouped(value: float) -> str:
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_payment_amount(amount: float) -> str:
    """Render a KRW amount for operators: 600000 → '60만원', 5000 → '5,000원'."""
    if amount >= 10000:
        return f"{_grouped(amount / 10000)}만원"
    return f"{_grouped(amount)}원"
