"""
Query filter model.

A filter is a ``(key, operator, value)`` triple. It serializes to a single
query-string fragment ``<key>__<token>=<value>`` where the token is the
lowercase operator name, prefixed with ``not_`` when negated:

    QueryFilter("username", FilterOperator(Operator.EQUALS), "alice")
        -> username__equals=alice
    QueryFilter("username", Operator.EQUALS.negate(), "alice")
        -> username__not_equals=alice
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional, Union

from hubuum_client.core.exceptions import FilterValidationError, QuerySerializationError
from hubuum_client.core.types import DataType

NEGATION_PREFIX = "not_"


class Operator(str, Enum):
    EQUALS = "equals"
    IEQUALS = "iequals"
    CONTAINS = "contains"
    ICONTAINS = "icontains"
    STARTSWITH = "startswith"
    ISTARTSWITH = "istartswith"
    ENDSWITH = "endswith"
    IENDSWITH = "iendswith"
    LIKE = "like"
    REGEX = "regex"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    BETWEEN = "between"

    def negate(self) -> "FilterOperator":
        return FilterOperator(self, negated=True)


_ANY_TYPE = frozenset(DataType)
_STRING = frozenset({DataType.STRING})
_STRING_OR_ARRAY = frozenset({DataType.STRING, DataType.ARRAY})
_NUMERIC_OR_DATE = frozenset({DataType.NUMERIC_OR_DATE})

APPLICABLE_TYPES = {
    Operator.EQUALS: _ANY_TYPE,
    Operator.IEQUALS: _STRING,
    Operator.CONTAINS: _STRING_OR_ARRAY,
    Operator.ICONTAINS: _STRING,
    Operator.STARTSWITH: _STRING,
    Operator.ISTARTSWITH: _STRING,
    Operator.ENDSWITH: _STRING,
    Operator.IENDSWITH: _STRING,
    Operator.LIKE: _STRING,
    Operator.REGEX: _STRING,
    Operator.GT: _NUMERIC_OR_DATE,
    Operator.GTE: _NUMERIC_OR_DATE,
    Operator.LT: _NUMERIC_OR_DATE,
    Operator.LTE: _NUMERIC_OR_DATE,
    Operator.BETWEEN: _NUMERIC_OR_DATE,
}


@dataclass(frozen=True)
class FilterOperator:
    kind: Operator
    negated: bool = False

    @property
    def token(self) -> str:
        if self.negated:
            return f"{NEGATION_PREFIX}{self.kind.value}"
        return self.kind.value

    @property
    def applicable_types(self) -> FrozenSet[DataType]:
        return APPLICABLE_TYPES[self.kind]

    def is_applicable_to(self, data_type: DataType) -> bool:
        return data_type in APPLICABLE_TYPES[self.kind]

    def negate(self) -> "FilterOperator":
        return FilterOperator(self.kind, negated=not self.negated)

    @classmethod
    def parse(cls, token: str) -> "FilterOperator":
        negated = token.startswith(NEGATION_PREFIX)
        name = token[len(NEGATION_PREFIX):] if negated else token
        try:
            return cls(Operator(name), negated=negated)
        except ValueError:
            raise QuerySerializationError(f"Unknown filter operator: {token!r}") from None

    def __str__(self) -> str:
        return self.token


OperatorLike = Union[Operator, FilterOperator, str]


def as_filter_operator(operator: OperatorLike) -> FilterOperator:
    """Accept an Operator, a FilterOperator or a token such as ``"not_equals"``."""
    if isinstance(operator, FilterOperator):
        return operator
    if isinstance(operator, Operator):
        return FilterOperator(operator)
    if isinstance(operator, str):
        return FilterOperator.parse(operator)
    raise QuerySerializationError(f"Not a filter operator: {operator!r}")


@dataclass(frozen=True)
class QueryFilter:
    key: str
    operator: FilterOperator
    value: str

    def __post_init__(self):
        if not self.key:
            raise QuerySerializationError("Filter key must not be empty")
        if not isinstance(self.operator, FilterOperator):
            object.__setattr__(self, "operator", as_filter_operator(self.operator))
        if not isinstance(self.value, str):
            object.__setattr__(self, "value", stringify_value(self.value))

    @property
    def lookup(self) -> str:
        return f"{self.key}__{self.operator.token}"

    @classmethod
    def checked(
        cls,
        key: str,
        operator: OperatorLike,
        value,
        data_type: Optional[DataType],
    ) -> "QueryFilter":
        """
        Build a filter, refusing operators that cannot apply to ``data_type``.

        A ``data_type`` of None means the category is unknown, and any
        operator is accepted.
        """
        operator = as_filter_operator(operator)
        if data_type is not None and not operator.is_applicable_to(data_type):
            raise FilterValidationError(
                f"Operator '{operator.token}' cannot be applied to '{key}' "
                f"({data_type.value})"
            )
        return cls(key, operator, value)


def stringify_value(value) -> str:
    """Render a filter value the way the server expects it in a query string."""
    if value is None:
        raise QuerySerializationError("Filter values cannot be None")
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_value(v) for v in value)
    return str(value)
