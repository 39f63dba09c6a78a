"""
FilterDefinition — one declared, public filter key of an entity.

A definition maps a caller-facing key either to a store field (compared
with ``operator``) or to a custom ``builder`` that returns a specification.
Values are coerced per ``value_type`` before any predicate is built.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..specifications.operators import SpecificationOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..specifications.base import ISpecification
    from ..specifications.evaluator import MemoryOperatorRegistry


class ValueType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    ENUM = "enum"
    ID_REFERENCE = "id_reference"
    BOOLEAN = "boolean"


class CoercionError(ValueError):
    """Raised by :func:`coerce_value`; the compiler re-raises it per key."""


_ID_REFERENCE_RE = re.compile(r"^\w+$", re.ASCII)
_TRUE = frozenset({"true", "1", "yes"})
_FALSE = frozenset({"false", "0", "no"})


@dataclass(frozen=True)
class FilterDefinition:
    """
    Declarative filter for one public key.

    Attributes:
        key: Public name used in the query string.
        value_type: Coercion applied to each raw value.
        target_field: Store field compared with ``operator``.
        builder: Alternative to ``target_field``; receives the coerced value
            (a list for in-set filters) and the operator registry, and
            returns a specification.
        operator: Comparison used with ``target_field``.
        allow_multiple: Whether a list value yields an in-set predicate.
        choices: Allowed values for ``ValueType.ENUM``.
        normalize: Applied to each value after coercion.
        sortable: Whether ``key`` may appear in ``sort``; defaults to
            ``True`` when a ``target_field`` is set.
    """

    key: str
    value_type: ValueType = ValueType.STRING
    target_field: str | None = None
    builder: Callable[[Any, MemoryOperatorRegistry], ISpecification[Any]] | None = None
    operator: SpecificationOperator = SpecificationOperator.EQ
    allow_multiple: bool = False
    choices: frozenset[str] = field(default_factory=frozenset)
    normalize: Callable[[Any], Any] | None = None
    sortable: bool | None = None

    def __post_init__(self) -> None:
        if (self.target_field is None) == (self.builder is None):
            raise ValueError(
                f"Filter {self.key!r} needs exactly one of target_field or builder"
            )
        if self.value_type is ValueType.ENUM and not self.choices:
            raise ValueError(f"Enum filter {self.key!r} declares no choices")
        if self.allow_multiple and self.operator is not SpecificationOperator.EQ:
            raise ValueError(f"Filter {self.key!r} cannot combine a range with sets")
        if self.builder is not None and self.sortable:
            raise ValueError(f"Filter {self.key!r} has no target field to sort on")
        object.__setattr__(self, "choices", frozenset(self.choices))

    @property
    def is_sortable(self) -> bool:
        if self.sortable is None:
            return self.target_field is not None
        return self.sortable

    def coerce(self, raw: Any) -> Any:
        value = coerce_value(raw, self.value_type, choices=self.choices)
        if self.normalize is not None:
            value = self.normalize(value)
        return value


@dataclass(frozen=True)
class TagField:
    """Allow-listed target of a ``tag.<field>:<value>`` identifier."""

    target: str
    normalize: Callable[[str], Any] | None = None

    def apply(self, value: str) -> Any:
        return self.normalize(value) if self.normalize is not None else value


def coerce_value(
    raw: Any, value_type: ValueType, *, choices: frozenset[str] = frozenset()
) -> Any:
    """
    Coerce one scalar raw value to its declared type.

    Raises:
        CoercionError: when the value cannot represent ``value_type``.
    """
    if raw is None or isinstance(raw, (dict, list, tuple, set)):
        raise CoercionError(f"expected a single {value_type.value} value")
    if value_type is ValueType.STRING:
        return _coerce_string(raw)
    if value_type is ValueType.NUMBER:
        return _coerce_number(raw)
    if value_type is ValueType.DATE:
        return _coerce_date(raw)
    if value_type is ValueType.ENUM:
        value = _coerce_string(raw)
        if value not in choices:
            raise CoercionError(
                f"expected one of: {', '.join(sorted(choices))}"
            )
        return value
    if value_type is ValueType.ID_REFERENCE:
        value = _coerce_string(raw)
        if not _ID_REFERENCE_RE.match(value):
            raise CoercionError("expected a record id")
        return value
    if value_type is ValueType.BOOLEAN:
        return _coerce_boolean(raw)
    raise CoercionError(f"unsupported value type {value_type!r}")


def _coerce_string(raw: Any) -> str:
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise CoercionError("expected a string")
    value = str(raw).strip()
    if not value:
        raise CoercionError("expected a non-empty string")
    return value


def _coerce_number(raw: Any) -> int | float:
    if isinstance(raw, bool):
        raise CoercionError("expected a number")
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError as e:
        raise CoercionError("expected a number") from e
    if number != number or number in (float("inf"), float("-inf")):
        raise CoercionError("expected a finite number")
    return int(number) if number.is_integer() else number


def _coerce_date(raw: Any) -> datetime.datetime:
    """ISO-8601 or epoch milliseconds -> naive UTC datetime (BSON convention)."""
    if isinstance(raw, bool):
        raise CoercionError("expected a date")
    is_millis = isinstance(raw, str) and raw.strip().isdigit()
    if isinstance(raw, (int, float)) or is_millis:
        try:
            millis = float(raw)
            return datetime.datetime.fromtimestamp(
                millis / 1000, tz=datetime.timezone.utc
            ).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError) as e:
            raise CoercionError("expected a date") from e
    text = str(raw).strip()
    try:
        result = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as e:
        raise CoercionError("expected an ISO-8601 date") from e
    if result.tzinfo is not None:
        result = result.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return result


def _coerce_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise CoercionError("expected true or false")
