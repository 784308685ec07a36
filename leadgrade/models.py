"""
leadgrade/models.py — Domain models consumed by the grading engine.

Entities:
  - Grade                 → a lead quality tier (A/B/C/D), one of which is the default
  - GradeRule             → a predicate set that assigns its grade to a lead
  - DistributionRule      → a predicate set deciding who may receive a grade's leads
  - MemberSnapshot        → the qualification/performance facts about one member
  - EligibilityThresholds → payment bands behind quick eligibility
  - QuickEligibility      → threshold-only eligibility flags per grade

All of them accept the row shapes the storage layer returns (nullable
flags, flat `conditions` / `logic_operator` / `exclusion_rules` columns).
"""

import enum
from dataclasses import asdict, dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from leadgrade.config import settings
from leadgrade.rules.models import PredicateSet


# ── Enums ────────────────────────────────────────────────────────────────────

class ExclusionTag(str, enum.Enum):
    GRADE_A_ELIGIBLE = "grade_a_eligible"
    GRADE_B_ELIGIBLE = "grade_b_eligible"
    GRADE_C_ELIGIBLE = "grade_c_eligible"
    GRADE_D_ELIGIBLE = "grade_d_eligible"


def _fold_predicate_columns(data: Any) -> Any:
    """Move flat `conditions` / `logic_operator` columns into `predicate_set`."""
    if not isinstance(data, dict) or "predicate_set" in data:
        return data
    data = dict(data)
    logic = data.pop("logic_operator", None) or data.pop("logic", None)
    data["predicate_set"] = {
        "conditions": data.pop("conditions", []),
        "logic": logic,
    }
    return data


# ── Grades ───────────────────────────────────────────────────────────────────

class Grade(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str
    priority: int = 0                       # lower is evaluated first
    is_default: bool = False
    is_active: bool = True
    color: str | None = None

    @field_validator("is_default", mode="before")
    @classmethod
    def _default_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_active", mode="before")
    @classmethod
    def _active_flag(cls, value: Any) -> Any:
        return True if value is None else value

    def __repr__(self) -> str:
        return f"<Grade id={self.id} name={self.name!r} priority={self.priority}>"


class GradeRule(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    grade_id: str
    predicate_set: PredicateSet = Field(default_factory=PredicateSet)
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _stored_row(cls, data: Any) -> Any:
        return _fold_predicate_columns(data)

    @field_validator("is_active", mode="before")
    @classmethod
    def _active_flag(cls, value: Any) -> Any:
        return True if value is None else value


# ── Distribution ─────────────────────────────────────────────────────────────

class DistributionRule(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    grade_id: str
    name: str = ""
    predicate_set: PredicateSet = Field(default_factory=PredicateSet)
    # Raw tag strings; unknown tags are reported in the trace, not rejected
    exclusions: list[str] = Field(default_factory=list)
    priority: int = 0
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _stored_row(cls, data: Any) -> Any:
        data = _fold_predicate_columns(data)
        if isinstance(data, dict) and "exclusion_rules" in data:
            data = dict(data)
            data.setdefault("exclusions", data.pop("exclusion_rules"))
        return data

    @field_validator("exclusions", mode="before")
    @classmethod
    def _exclusion_list(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return []
        return [v.value if isinstance(v, ExclusionTag) else v for v in value]

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_active", mode="before")
    @classmethod
    def _active_flag(cls, value: Any) -> Any:
        return True if value is None else value

    @property
    def label(self) -> str:
        return self.name or self.id


# ── Members ──────────────────────────────────────────────────────────────────

class MemberSnapshot(BaseModel):
    """What the engine knows about a member: previous-month figures and the test flag."""

    test_passed: bool = False
    monthly_payment: float = 0
    commission: float = 0
    contract_count: int = 0

    @field_validator("test_passed", mode="before")
    @classmethod
    def _test_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("monthly_payment", "commission", "contract_count", mode="before")
    @classmethod
    def _missing_figure(cls, value: Any) -> Any:
        # No performance row for the period counts as zero
        return 0 if value is None else value


class EligibilityThresholds(BaseModel):
    grade_a_min_payment: float = Field(default=600000, ge=0)
    grade_b_min_payment: float = Field(default=200000, ge=0)

    @model_validator(mode="after")
    def _ordered_bands(self) -> "EligibilityThresholds":
        if self.grade_b_min_payment > self.grade_a_min_payment:
            raise ValueError(
                f"grade_b_min_payment ({self.grade_b_min_payment}) must not exceed "
                f"grade_a_min_payment ({self.grade_a_min_payment})"
            )
        return self

    @classmethod
    def from_settings(cls) -> "EligibilityThresholds":
        return cls(
            grade_a_min_payment=settings.grade_a_min_payment,
            grade_b_min_payment=settings.grade_b_min_payment,
        )


@dataclass(frozen=True)
class QuickEligibility:
    grade_a: bool
    grade_b: bool
    grade_c: bool
    grade_d: bool

    def flag(self, grade_name: str) -> bool | None:
        """Flag for a grade by its name ('A'..'D'); None for any other grade."""
        key = f"grade_{str(grade_name).strip().lower()}"
        return getattr(self, key, None) if key in self.__dataclass_fields__ else None

    def as_dict(self) -> dict[str, bool]:
        return asdict(self)
