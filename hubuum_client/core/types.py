from enum import Enum


class DataType(Enum):
    """Semantic categories a filter operator may target."""

    STRING = "string"
    NUMERIC_OR_DATE = "numeric_or_date"
    BOOLEAN = "boolean"
    ARRAY = "array"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"
    PUT = "PUT"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
