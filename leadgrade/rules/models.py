"""
leadgrade/rules/models.py — The predicate language shared by grade rules and
distribution rules.

A Condition is stored by administrators as a loosely typed
{field, operator, value} triple. The raw value is turned into one of the
ConditionValue variants below so evaluation can dispatch on
(operator, variant) instead of probing types at every call site.
"""

import enum
import math
from dataclasses import dataclass
from typing import Any, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator


# ── Enums ────────────────────────────────────────────────────────────────────

class OperatorKind(str, enum.Enum):
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"
    IN = "in"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"


class LogicOperator(str, enum.Enum):
    AND = "AND"
    OR = "OR"


# Symbolic spellings saved by older versions of the rule editor
OPERATOR_ALIASES: dict[str, OperatorKind] = {
    "=": OperatorKind.EQ,
    "==": OperatorKind.EQ,
    "!=": OperatorKind.NEQ,
    ">": OperatorKind.GT,
    ">=": OperatorKind.GTE,
    "<": OperatorKind.LT,
    "<=": OperatorKind.LTE,
}

OPERATOR_SYMBOLS: dict[OperatorKind, str] = {
    OperatorKind.EQ: "=",
    OperatorKind.NEQ: "!=",
    OperatorKind.GT: ">",
    OperatorKind.GTE: ">=",
    OperatorKind.LT: "<",
    OperatorKind.LTE: "<=",
    OperatorKind.BETWEEN: "between",
    OperatorKind.IN: "in",
    OperatorKind.CONTAINS: "contains",
    OperatorKind.NOT_CONTAINS: "not contains",
}


def resolve_operator(raw: str | None) -> OperatorKind | None:
    """Map a stored operator string to an OperatorKind, or None if unknown."""
    if raw is None:
        return None
    key = str(raw).strip()
    if key in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[key]
    try:
        return OperatorKind(key.lower())
    except ValueError:
        return None


# ── Scalar helpers ───────────────────────────────────────────────────────────

def parse_number(value: Any) -> float | None:
    """
    Return value as a finite float, or None if it is not numeric.
    Booleans are not numbers.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def format_scalar(value: Any) -> str:
    """Render a scalar the way it appears in trace text: 5e8 → '500000000'."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ── Condition values (tagged union) ──────────────────────────────────────────

@dataclass(frozen=True)
class NumberValue:
    number: float

    def as_number(self) -> float | None:
        return self.number

    def text(self) -> str:
        return format_scalar(self.number)

    def display(self) -> str:
        return self.text()


@dataclass(frozen=True)
class StringValue:
    raw: str

    def as_number(self) -> float | None:
        return parse_number(self.raw)

    def text(self) -> str:
        return self.raw

    def display(self) -> str:
        return f'"{self.raw}"'


@dataclass(frozen=True)
class BoolValue:
    flag: bool

    def as_number(self) -> float | None:
        return None

    def text(self) -> str:
        return format_scalar(self.flag)

    def display(self) -> str:
        return self.text()


@dataclass(frozen=True)
class RangeValue:
    low: float
    high: float

    def as_number(self) -> float | None:
        return None

    def items(self) -> tuple[Any, ...]:
        return (self.low, self.high)

    def text(self) -> str:
        return f"{format_scalar(self.low)}~{format_scalar(self.high)}"

    def display(self) -> str:
        return self.text()


@dataclass(frozen=True)
class ListValue:
    values: tuple[Any, ...]

    def as_number(self) -> float | None:
        return None

    def items(self) -> tuple[Any, ...]:
        return self.values

    def text(self) -> str:
        return ", ".join(format_scalar(v) for v in self.values)

    def display(self) -> str:
        return f"[{self.text()}]"


ConditionValue = Union[NumberValue, StringValue, BoolValue, RangeValue, ListValue]


def to_condition_value(raw: Any) -> ConditionValue:
    """
    Classify a raw stored value into its ConditionValue variant.

    A two-element list whose items are both numeric becomes a RangeValue;
    every other list becomes a ListValue.
    """
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, (int, float)):
        return NumberValue(float(raw))
    if isinstance(raw, (list, tuple)):
        if len(raw) == 2:
            low, high = parse_number(raw[0]), parse_number(raw[1])
            if low is not None and high is not None:
                return RangeValue(low, high)
        return ListValue(tuple(raw))
    if raw is None:
        return StringValue("")
    return StringValue(str(raw))


# ── Stored rule shapes ───────────────────────────────────────────────────────

class Condition(BaseModel):
    """One field/operator/value predicate as stored by the rule editor."""

    field: str
    # Raw string; unknown operators surface as non-matches during evaluation.
    operator: str
    value: Any = None

    @property
    def kind(self) -> OperatorKind | None:
        return resolve_operator(self.operator)

    @property
    def typed_value(self) -> ConditionValue:
        return to_condition_value(self.value)


class PredicateSet(BaseModel):
    conditions: list[Condition] = Field(default_factory=list)
    logic: LogicOperator = Field(
        default=LogicOperator.AND,
        validation_alias=AliasChoices("logic", "logic_operator"),
    )

    @field_validator("conditions", mode="before")
    @classmethod
    def _conditions_list(cls, value: Any) -> Any:
        # JSON columns occasionally hold null or an object instead of a list
        return value if isinstance(value, (list, tuple)) else []

    @field_validator("logic", mode="before")
    @classmethod
    def _normalize_logic(cls, value: Any) -> Any:
        if value is None or value == "":
            return LogicOperator.AND
        if isinstance(value, LogicOperator):
            return value
        return str(value).strip().upper()
