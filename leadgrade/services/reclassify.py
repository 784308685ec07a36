"""
leadgrade/services/reclassify.py — Bulk (re)classification sweeps.

The caller loads grades and rules once and passes the same snapshot for the
whole sweep, so a rule edited mid-sweep cannot grade half the batch one way
and half the other. Each lead is classified independently of the others.
"""

import enum
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from leadgrade.config import settings
from leadgrade.models import Grade, GradeRule
from leadgrade.services.classifier import ClassificationResult, classify, resolve_default_grade

logger = logging.getLogger(__name__)


class ReclassifyMode(str, enum.Enum):
    ALL = "all"
    AUTO_ONLY = "auto_only"


class GradeSource(str, enum.Enum):
    AUTO = "auto"
    MANUAL = "manual"


@dataclass
class LeadUpdate:
    lead_id: Any
    previous_grade_id: str | None
    grade_id: str


@dataclass
class ReclassifySummary:
    total_count: int = 0
    updated_count: int = 0
    grade_summary: dict[str, int] = field(default_factory=dict)
    updates: list[LeadUpdate] = field(default_factory=list)

    @property
    def message(self) -> str:
        if not self.total_count:
            return "No leads to reclassify."
        return f"{self.updated_count} of {self.total_count} lead(s) changed grade."


def classify_leads(
    leads: Sequence[Mapping[str, Any]],
    grades: Sequence[Grade],
    rules_by_grade: Mapping[str, Sequence[GradeRule]],
) -> list[ClassificationResult]:
    """Classify a batch of leads against one snapshot, preserving input order."""
    resolve_default_grade(grades)  # fail once, before touching any lead
    return [classify(lead, grades, rules_by_grade) for lead in leads]


def reclassify(
    leads: Sequence[Mapping[str, Any]],
    grades: Sequence[Grade],
    rules_by_grade: Mapping[str, Sequence[GradeRule]],
    mode: ReclassifyMode | str | None = None,
) -> ReclassifySummary:
    """
    Re-run classification over existing leads and report what would change.

    Args:
        leads:          Lead field maps carrying `id`, the current `grade_id`
                        and `grade_source` ("auto" or "manual").
        grades:         Grade snapshot for the whole sweep.
        rules_by_grade: Rule snapshot for the whole sweep.
        mode:           "auto_only" skips leads graded by hand; "all" includes them.
                        Defaults to settings.reclassify_default_mode.

    Returns:
        A ReclassifySummary; only leads whose grade actually changes are
        listed in `updates`.
    """
    mode = ReclassifyMode(mode or settings.reclassify_default_mode)
    resolve_default_grade(grades)

    if mode is ReclassifyMode.AUTO_ONLY:
        targets = [lead for lead in leads if lead.get("grade_source") == GradeSource.AUTO.value]
    else:
        targets = list(leads)

    summary = ReclassifySummary(total_count=len(targets))
    if not targets:
        logger.info("No leads to reclassify (mode=%s).", mode.value)
        return summary

    logger.info("Reclassifying %d lead(s) (mode=%s)...", len(targets), mode.value)

    for lead in targets:
        result = classify(lead, grades, rules_by_grade)
        summary.grade_summary[result.grade_name] = summary.grade_summary.get(result.grade_name, 0) + 1

        previous = lead.get("grade_id")
        if previous != result.grade_id:
            summary.updates.append(LeadUpdate(
                lead_id=lead.get("id"),
                previous_grade_id=previous,
                grade_id=result.grade_id,
            ))
            summary.updated_count += 1

    logger.info(
        "Reclassification done: %d processed, %d updated, summary=%s",
        summary.total_count, summary.updated_count, summary.grade_summary,
    )
    return summary
