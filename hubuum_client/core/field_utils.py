"""
Field utilities for turning filters into query strings and back.
"""

from typing import Iterable, List, Tuple
from urllib.parse import quote, unquote

from hubuum_client.core.exceptions import QuerySerializationError
from hubuum_client.core.filters import NEGATION_PREFIX, FilterOperator, Operator, QueryFilter

# Every token the server understands, negated or not
SUPPORTED_OPERATORS = frozenset(
    {op.value for op in Operator} | {f"{NEGATION_PREFIX}{op.value}" for op in Operator}
)


def split_lookup(lookup: str) -> Tuple[str, FilterOperator]:
    """
    Split a lookup into its field path and operator.

    Examples:
        "username__equals" -> ("username", equals)
        "name__not_icontains" -> ("name", not_icontains)
        "data__owner__equals" -> ("data__owner", equals)
    """
    key, sep, token = lookup.rpartition("__")
    if not sep or not key:
        raise QuerySerializationError(f"Missing filter operator in {lookup!r}")
    if token not in SUPPORTED_OPERATORS:
        raise QuerySerializationError(f"Unknown filter operator: {token!r}")
    return key, FilterOperator.parse(token)


def strip_lookup_operator(lookup: str) -> str:
    """
    Strip a trailing lookup operator from a field path.

    Examples:
        "name__icontains" -> "name"
        "created_at__not_gte" -> "created_at"
        "name" -> "name"
    """
    key, sep, token = lookup.rpartition("__")
    if sep and key and token in SUPPORTED_OPERATORS:
        return key
    return lookup


def encode_filter(query_filter: QueryFilter) -> str:
    return f"{quote(query_filter.lookup, safe='_')}={quote(query_filter.value, safe='')}"


def encode_query(filters: Iterable[QueryFilter]) -> str:
    """Serialize filters into a query string, keeping insertion order."""
    return "&".join(encode_filter(f) for f in filters)


def parse_query(query: str) -> List[QueryFilter]:
    """
    Parse a query string produced by :func:`encode_query`.

    A leading ``?`` is ignored. Empty fragments (``a=1&&b=2``) are skipped.
    """
    if query.startswith("?"):
        query = query[1:]
    filters: List[QueryFilter] = []
    for fragment in query.split("&"):
        if not fragment:
            continue
        lookup, sep, value = fragment.partition("=")
        if not sep:
            raise QuerySerializationError(f"Missing value in {fragment!r}")
        key, operator = split_lookup(unquote(lookup))
        filters.append(QueryFilter(key, operator, unquote(value)))
    return filters
