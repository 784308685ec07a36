"""
leadgrade/snapshot.py — A frozen copy of the rule configuration.

A sweep loads one RuleSnapshot and passes it to every evaluation, so every
lead in the sweep is judged by the same rules.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from leadgrade.models import DistributionRule, EligibilityThresholds, Grade, GradeRule
from leadgrade.services.classifier import group_rules_by_grade

logger = logging.getLogger(__name__)


class RuleSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    grades: list[Grade] = Field(default_factory=list)
    grade_rules: list[GradeRule] = Field(default_factory=list)
    distribution_rules: list[DistributionRule] = Field(default_factory=list)
    thresholds: EligibilityThresholds | None = None

    def rules_by_grade(self) -> dict[str, list[GradeRule]]:
        return group_rules_by_grade(self.grade_rules)

    def effective_thresholds(self) -> EligibilityThresholds:
        return self.thresholds or EligibilityThresholds.from_settings()


def load_snapshot(path: str | Path) -> RuleSnapshot:
    """
    Read a snapshot JSON file:
        {"grades": [...], "grade_rules": [...], "distribution_rules": [...],
         "thresholds": {"grade_a_min_payment": ..., "grade_b_min_payment": ...}}

    Raises:
        pydantic.ValidationError: if the file does not describe a snapshot.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    snapshot = RuleSnapshot.model_validate(raw)
    logger.info(
        "Loaded snapshot %s: %d grade(s), %d grade rule(s), %d distribution rule(s).",
        path, len(snapshot.grades), len(snapshot.grade_rules), len(snapshot.distribution_rules),
    )
    return snapshot
