"""
tests/test_conditions.py — Unit tests for the condition language.

Covers value classification, operator resolution, and single-condition
evaluation including every absorbed-anomaly path.
"""

import pytest

from leadgrade.rules.conditions import FieldMap, evaluate_condition
from leadgrade.rules.models import (
    BoolValue,
    Condition,
    ListValue,
    NumberValue,
    OperatorKind,
    RangeValue,
    StringValue,
    format_scalar,
    parse_number,
    resolve_operator,
    to_condition_value,
)


def cond(field: str, operator: str, value) -> Condition:
    return Condition(field=field, operator=operator, value=value)


# ── Value variants ────────────────────────────────────────────────────────────

class TestConditionValue:
    def test_number(self):
        assert to_condition_value(500) == NumberValue(500.0)

    def test_bool_is_not_a_number(self):
        assert to_condition_value(True) == BoolValue(True)

    def test_two_numbers_make_a_range(self):
        assert to_condition_value([100, "200"]) == RangeValue(100.0, 200.0)

    def test_other_lists_stay_lists(self):
        assert to_condition_value(["seoul", "busan", "incheon"]) == ListValue(("seoul", "busan", "incheon"))
        assert to_condition_value([1]) == ListValue((1,))
        assert to_condition_value(["a", "b"]) == ListValue(("a", "b"))

    def test_string(self):
        assert to_condition_value("Retail") == StringValue("Retail")

    def test_none_becomes_empty_string(self):
        assert to_condition_value(None) == StringValue("")


class TestScalarHelpers:
    def test_parse_number_accepts_numeric_strings(self):
        assert parse_number(" 42.5 ") == 42.5

    def test_parse_number_rejects_text_bool_and_nan(self):
        assert parse_number("abc") is None
        assert parse_number(True) is None
        assert parse_number("nan") is None
        assert parse_number(None) is None

    def test_format_scalar_drops_trailing_zero(self):
        assert format_scalar(500000000.0) == "500000000"
        assert format_scalar(1.5) == "1.5"
        assert format_scalar(False) == "false"


class TestResolveOperator:
    def test_named_operators(self):
        assert resolve_operator("gte") is OperatorKind.GTE
        assert resolve_operator("IN") is OperatorKind.IN

    def test_symbol_aliases(self):
        assert resolve_operator(">=") is OperatorKind.GTE
        assert resolve_operator("!=") is OperatorKind.NEQ
        assert resolve_operator("=") is OperatorKind.EQ

    def test_unknown(self):
        assert resolve_operator("regex") is None
        assert resolve_operator(None) is None


# ── FieldMap ──────────────────────────────────────────────────────────────────

class TestFieldMap:
    def test_lookup_treats_missing_none_and_empty_alike(self):
        fields = FieldMap({"a": None, "b": "", "c": 0, "d": False})
        assert fields.lookup("a") is None
        assert fields.lookup("b") is None
        assert fields.lookup("missing") is None
        assert fields.lookup("c") == 0
        assert fields.lookup("d") is False

    def test_behaves_as_mapping(self):
        fields = FieldMap({"region": "Seoul"})
        assert dict(fields) == {"region": "Seoul"}
        assert len(fields) == 1
        assert FieldMap.of(fields) is fields


# ── Missing values / unknown operators ────────────────────────────────────────

class TestAbsorbedAnomalies:
    @pytest.mark.parametrize("record", [{}, {"annual_revenue": None}, {"annual_revenue": ""}])
    def test_missing_value_is_no_match(self, record):
        result = evaluate_condition(record, cond("annual_revenue", "gte", 1))
        assert result.matched is False
        assert "no value" in result.detail

    def test_unknown_operator_is_no_match(self):
        result = evaluate_condition({"region": "Seoul"}, cond("region", "regex", "^S"))
        assert result.matched is False
        assert "unknown operator" in result.detail

    def test_malformed_between_is_no_match(self):
        result = evaluate_condition({"annual_revenue": 5}, cond("annual_revenue", "between", [1]))
        assert result.matched is False
        assert "malformed range" in result.detail

    def test_between_on_text_is_no_match(self):
        result = evaluate_condition({"region": "Seoul"}, cond("region", "between", [1, 10]))
        assert result.matched is False
        assert "type mismatch" in result.detail

    def test_gt_against_text_target_is_no_match(self):
        result = evaluate_condition({"employee_count": 10}, cond("employee_count", "gt", "many"))
        assert result.matched is False
        assert "type mismatch" in result.detail

    def test_in_with_scalar_value_is_no_match(self):
        result = evaluate_condition({"region": "Seoul"}, cond("region", "in", "Seoul"))
        assert result.matched is False
        assert "needs a list" in result.detail

    def test_contains_with_list_value_is_no_match(self):
        result = evaluate_condition({"region": "Seoul"}, cond("region", "contains", ["Se", "ou", "l"]))
        assert result.matched is False


# ── Numeric comparisons ───────────────────────────────────────────────────────

class TestNumeric:
    @pytest.mark.parametrize("operator,target,expected", [
        ("eq", 100, True),
        ("neq", 100, False),
        ("gt", 99, True),
        ("gt", 100, False),
        ("gte", 100, True),
        ("lt", 101, True),
        ("lte", 100, True),
        ("lte", 99, False),
    ])
    def test_operators(self, operator, target, expected):
        assert evaluate_condition({"n": 100}, cond("n", operator, target)).matched is expected

    def test_numeric_string_on_both_sides(self):
        assert evaluate_condition({"n": "800000000"}, cond("n", "gte", "500000000")).matched is True

    def test_eq_compares_numbers_not_strings(self):
        assert evaluate_condition({"n": "5.0"}, cond("n", "eq", 5)).matched is True

    def test_between_is_inclusive_on_both_ends(self):
        between = cond("n", "between", [200000, 600000])
        assert evaluate_condition({"n": 200000}, between).matched is True
        assert evaluate_condition({"n": 600000}, between).matched is True
        assert evaluate_condition({"n": 199999}, between).matched is False
        assert evaluate_condition({"n": 600001}, between).matched is False

    def test_detail_shows_comparison(self):
        result = evaluate_condition({"annual_revenue": 800000000}, cond("annual_revenue", "gte", 500000000))
        assert result.detail == "annual_revenue: 800000000 >= 500000000"


# ── String comparisons ────────────────────────────────────────────────────────

class TestText:
    def test_eq_is_case_insensitive(self):
        assert evaluate_condition({"region": "SEOUL"}, cond("region", "eq", "seoul")).matched is True

    def test_neq(self):
        assert evaluate_condition({"region": "Busan"}, cond("region", "neq", "Seoul")).matched is True

    def test_eq_falls_back_to_text_when_target_is_not_numeric(self):
        assert evaluate_condition({"code": "123"}, cond("code", "neq", "abc")).matched is True

    def test_contains(self):
        assert evaluate_condition({"campaign_name": "Spring_SALE_2024"}, cond("campaign_name", "contains", "sale")).matched is True

    def test_not_contains(self):
        assert evaluate_condition({"campaign_name": "Spring"}, cond("campaign_name", "not_contains", "sale")).matched is True

    def test_in_is_case_insensitive(self):
        c = cond("industry", "in", ["Manufacturing", "Retail"])
        assert evaluate_condition({"industry": "retail"}, c).matched is True
        assert evaluate_condition({"industry": "Finance"}, c).matched is False

    def test_in_with_numbers(self):
        c = cond("employee_count", "in", [5, 10, 20])
        assert evaluate_condition({"employee_count": 10.0}, c).matched is True

    def test_in_with_two_numbers(self):
        # Two numeric items classify as a range but still work as a list for 'in'
        c = cond("employee_count", "in", [5, 10])
        assert evaluate_condition({"employee_count": 10}, c).matched is True
        assert evaluate_condition({"employee_count": 7}, c).matched is False

    def test_bool_equality(self):
        c = cond("tax_delinquency", "eq", False)
        assert evaluate_condition({"tax_delinquency": False}, c).matched is True
        assert evaluate_condition({"tax_delinquency": True}, c).matched is False

    def test_bool_is_not_numeric(self):
        result = evaluate_condition({"newbie_test_passed": True}, cond("newbie_test_passed", "gt", 0))
        assert result.matched is False


class TestDeterminism:
    def test_same_input_same_output(self):
        record = {"annual_revenue": 700}
        c = cond("annual_revenue", "between", [100, 900])
        assert evaluate_condition(record, c) == evaluate_condition(record, c)
