from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorDetail:
    message: str
    code: str

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ErrorDetail(message={self.message!r}, code={self.code!r})"


class HubuumError(Exception):
    """Base exception for all hubuum client errors."""

    default_detail: str = "A client error occurred."
    default_code: str = "error"

    def __init__(self, detail: Optional[str] = None, code: Optional[str] = None):
        detail = detail if detail is not None else self.default_detail
        self.detail = ErrorDetail(str(detail), code or self.default_code)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return self.detail.message

    @property
    def code(self) -> str:
        return self.detail.code


class TransportError(HubuumError):
    """The request never produced a response (connection, TLS, timeout, cancellation)."""

    default_detail = "Transport failure."
    default_code = "transport_error"

    def _format_message(self) -> str:
        return f"HTTP error: {self.detail.message}"


class UrlError(HubuumError):
    """Error raised while constructing a URL."""

    default_detail = "Invalid URL."
    default_code = "url_error"


class InvalidSchemeError(UrlError):
    default_code = "invalid_scheme"

    def __init__(self, scheme: str):
        self.scheme = scheme
        super().__init__(scheme)

    def _format_message(self) -> str:
        return f"Invalid URL scheme: {self.scheme}"


class UrlNotBaseError(UrlError):
    default_code = "url_not_base"

    def _format_message(self) -> str:
        return f"URL cannot be a base: {self.detail.message}"


class UrlParseError(UrlError):
    default_code = "url_parse_error"

    def _format_message(self) -> str:
        return f"Invalid URL: {self.detail.message}"


class AuthenticationError(HubuumError):
    default_detail = "Authentication failed."
    default_code = "authentication_error"


class InvalidTokenError(AuthenticationError):
    """The server answered, but rejected the token."""

    default_detail = "Invalid token."
    default_code = "invalid_token"


class HttpError(HubuumError):
    """Non-success HTTP status, with the best message we could extract from the body."""

    default_code = "http_error"

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    def _format_message(self) -> str:
        return f"HTTP error {self.status_code}: {self.message}"


class DeserializationError(HubuumError):
    """The response body did not match the expected shape. The raw text is kept."""

    default_code = "deserialization_error"

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(raw)

    def _format_message(self) -> str:
        return f"Deserialization error: {self.raw}"


class QuerySerializationError(HubuumError):
    default_detail = "Unable to serialize query."
    default_code = "query_serialization_error"

    def _format_message(self) -> str:
        return f"URL serialization error: {self.detail.message}"


class FilterValidationError(QuerySerializationError):
    """An operator was paired with a field it cannot apply to."""

    default_code = "filter_validation_error"


class CardinalityError(HubuumError):
    default_code = "cardinality_error"


class NotFound(CardinalityError):
    """Error raised when a lookup expected exactly one result and got none."""

    default_detail = "Not found."
    default_code = "not_found"

    def _format_message(self) -> str:
        return f"Empty result: {self.detail.message}"


class TooManyResults(CardinalityError):
    """Error raised when a lookup expected exactly one result and got several."""

    default_detail = "Multiple objects returned."
    default_code = "too_many_results"

    def _format_message(self) -> str:
        return f"Too many results: {self.detail.message}"


class InvalidParamsError(HubuumError):
    """Caller-supplied parameters do not fit the resource's shape."""

    default_detail = "Invalid parameters."
    default_code = "invalid_params"

    def _format_message(self) -> str:
        return f"Invalid parameters: {self.detail.message}"


class MissingIdentifierError(HubuumError):
    default_detail = "Missing URL identifier."
    default_code = "missing_identifier"


class UnsupportedOperationError(HubuumError):
    default_code = "unsupported_operation"

    def _format_message(self) -> str:
        return f"Unsupported HTTP operation: {self.detail.message}"


class ResourceDefinitionError(HubuumError):
    """Error raised while generating types from a resource description."""

    default_code = "resource_definition_error"


class ConfigError(HubuumError):
    """Error raised for configuration issues."""

    default_code = "config_error"
