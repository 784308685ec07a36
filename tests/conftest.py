"""
tests/conftest.py — Shared pytest configuration and fixtures.

Pins the threshold env vars BEFORE any leadgrade module is imported, so a
developer's local .env cannot change the bands the tests assert against.
"""

import os
import pytest

# ── Pin env vars before any leadgrade module is imported ─────────────────────
os.environ["GRADE_A_MIN_PAYMENT"] = "600000"
os.environ["GRADE_B_MIN_PAYMENT"] = "200000"
os.environ["TAX_DELINQUENCY_FIELD"] = "tax_delinquency"
os.environ["RECLASSIFY_DEFAULT_MODE"] = "auto_only"

from leadgrade.models import DistributionRule, Grade, GradeRule  # noqa: E402


# ── Grades ────────────────────────────────────────────────────────────────────

@pytest.fixture
def grades() -> list[Grade]:
    """A/B/C by priority, D as the default."""
    return [
        Grade(id="grade-a", name="A", priority=1),
        Grade(id="grade-b", name="B", priority=2),
        Grade(id="grade-c", name="C", priority=3),
        Grade(id="grade-d", name="D", priority=4, is_default=True),
    ]


@pytest.fixture
def grade_rules() -> list[GradeRule]:
    return [
        GradeRule(
            id="rule-a",
            grade_id="grade-a",
            conditions=[{"field": "annual_revenue", "operator": "gte", "value": 500000000}],
            logic_operator="AND",
        ),
        GradeRule(
            id="rule-b",
            grade_id="grade-b",
            conditions=[
                {"field": "annual_revenue", "operator": "between", "value": [100000000, 499999999]},
                {"field": "employee_count", "operator": "gte", "value": 5},
            ],
            logic_operator="AND",
        ),
        GradeRule(
            id="rule-c",
            grade_id="grade-c",
            conditions=[
                {"field": "industry", "operator": "in", "value": ["Manufacturing", "Retail"]},
                {"field": "region", "operator": "eq", "value": "Seoul"},
            ],
            logic_operator="OR",
        ),
    ]


@pytest.fixture
def rules_by_grade(grade_rules) -> dict[str, list[GradeRule]]:
    from leadgrade.services.classifier import group_rules_by_grade
    return group_rules_by_grade(grade_rules)


# ── Distribution ──────────────────────────────────────────────────────────────

@pytest.fixture
def distribution_rules() -> list[DistributionRule]:
    return [
        DistributionRule(
            id="dist-a",
            grade_id="grade-a",
            name="A: payment >= 60만원",
            conditions=[
                {"field": "newbie_test_passed", "operator": "eq", "value": True},
                {"field": "monthly_payment", "operator": "gte", "value": 600000},
            ],
            logic_operator="AND",
            priority=1,
        ),
        DistributionRule(
            id="dist-b",
            grade_id="grade-b",
            name="B: 20만원 ~ 60만원",
            conditions=[
                {"field": "newbie_test_passed", "operator": "eq", "value": True},
                {"field": "monthly_payment", "operator": "between", "value": [200000, 600000]},
            ],
            logic_operator="AND",
            exclusion_rules=["grade_a_eligible"],
            priority=1,
        ),
        DistributionRule(
            id="dist-c",
            grade_id="grade-c",
            name="C: test passed",
            conditions=[{"field": "newbie_test_passed", "operator": "eq", "value": True}],
            logic_operator="AND",
            exclusion_rules=["grade_a_eligible", "grade_b_eligible"],
            priority=1,
        ),
        DistributionRule(
            id="dist-d",
            grade_id="grade-d",
            name="D: trainees",
            conditions=[{"field": "newbie_test_passed", "operator": "eq", "value": False}],
            logic_operator="AND",
            priority=1,
        ),
    ]
