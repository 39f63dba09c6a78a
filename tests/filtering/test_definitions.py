"""Tests for FilterDefinition validation and value coercion."""

from __future__ import annotations

from datetime import datetime

import pytest

from flightsafe_query.filtering.definitions import (
    CoercionError,
    FilterDefinition,
    TagField,
    ValueType,
    coerce_value,
)
from flightsafe_query.specifications.operators import SpecificationOperator


def _builder(value, operators):  # pragma: no cover - never invoked
    raise AssertionError


class TestFilterDefinition:
    def test_needs_exactly_one_target(self) -> None:
        with pytest.raises(ValueError, match="exactly one"):
            FilterDefinition("x")
        with pytest.raises(ValueError, match="exactly one"):
            FilterDefinition("x", target_field="x", builder=_builder)

    def test_enum_needs_choices(self) -> None:
        with pytest.raises(ValueError, match="no choices"):
            FilterDefinition("role", ValueType.ENUM, target_field="role")

    def test_sets_only_with_equality(self) -> None:
        with pytest.raises(ValueError, match="range"):
            FilterDefinition(
                "from",
                ValueType.DATE,
                target_field="d",
                operator=SpecificationOperator.GE,
                allow_multiple=True,
            )

    def test_builder_cannot_be_sortable(self) -> None:
        with pytest.raises(ValueError, match="sort"):
            FilterDefinition("pilot", builder=_builder, sortable=True)

    def test_sortable_defaults(self) -> None:
        assert FilterDefinition("a", target_field="a").is_sortable
        assert not FilterDefinition("a", target_field="a", sortable=False).is_sortable
        assert not FilterDefinition("p", builder=_builder).is_sortable

    def test_coerce_applies_normalize(self) -> None:
        definition = FilterDefinition("d", target_field="d", normalize=str.upper)
        assert definition.coerce(" n1ab ") == "N1AB"

    def test_choices_are_frozen(self) -> None:
        definition = FilterDefinition(
            "role", ValueType.ENUM, target_field="role", choices={"a", "b"}
        )
        assert definition.choices == frozenset({"a", "b"})


def test_tag_field_apply() -> None:
    assert TagField("designation", str.upper).apply("n1") == "N1"
    assert TagField("tag.externalId").apply("x1") == "x1"


class TestCoerceValue:
    @pytest.mark.parametrize(("raw", "expected"), [(" C172 ", "C172"), (42, "42")])
    def test_string(self, raw, expected) -> None:
        assert coerce_value(raw, ValueType.STRING) == expected

    @pytest.mark.parametrize("raw", ["", "   ", True, None, ["a"], {"$ne": 1}])
    def test_string_rejects(self, raw) -> None:
        with pytest.raises(CoercionError):
            coerce_value(raw, ValueType.STRING)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("12", 12), ("-3", -3), ("2.5", 2.5), ("4.0", 4), (7, 7), (1.25, 1.25)],
    )
    def test_number(self, raw, expected) -> None:
        value = coerce_value(raw, ValueType.NUMBER)
        assert value == expected
        assert type(value) is type(expected)

    @pytest.mark.parametrize("raw", ["abc", "nan", "inf", "-inf", False, ""])
    def test_number_rejects(self, raw) -> None:
        with pytest.raises(CoercionError):
            coerce_value(raw, ValueType.NUMBER)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("2024-05-01", datetime(2024, 5, 1)),
            ("2024-05-01T10:30:00Z", datetime(2024, 5, 1, 10, 30)),
            ("2024-05-01T12:30:00+02:00", datetime(2024, 5, 1, 10, 30)),
            ("1714521600000", datetime(2024, 5, 1)),
            (1714521600000, datetime(2024, 5, 1)),
        ],
    )
    def test_date_is_naive_utc(self, raw, expected) -> None:
        value = coerce_value(raw, ValueType.DATE)
        assert value == expected
        assert value.tzinfo is None

    @pytest.mark.parametrize("raw", ["yesterday", "2024-13-01", True])
    def test_date_rejects(self, raw) -> None:
        with pytest.raises(CoercionError):
            coerce_value(raw, ValueType.DATE)

    def test_enum(self) -> None:
        choices = frozenset({"admin", "pilot"})
        assert coerce_value("pilot", ValueType.ENUM, choices=choices) == "pilot"
        with pytest.raises(CoercionError, match="admin, pilot"):
            coerce_value("root", ValueType.ENUM, choices=choices)

    @pytest.mark.parametrize("raw", ["65f1c0ffee00000000000001", "u1", "abc_123"])
    def test_id_reference(self, raw) -> None:
        assert coerce_value(raw, ValueType.ID_REFERENCE) == raw

    @pytest.mark.parametrize("raw", ["a.b", "x:y", "{'$gt': ''}", "ünï"])
    def test_id_reference_rejects(self, raw) -> None:
        with pytest.raises(CoercionError, match="record id"):
            coerce_value(raw, ValueType.ID_REFERENCE)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("YES", True), ("1", True), ("false", False), ("0", False)],
    )
    def test_boolean(self, raw, expected) -> None:
        assert coerce_value(raw, ValueType.BOOLEAN) is expected

    def test_boolean_rejects(self) -> None:
        with pytest.raises(CoercionError):
            coerce_value("maybe", ValueType.BOOLEAN)
