"""
Pieces shared by the blocking and the asynchronous clients.

Everything here is free of I/O: URL building, request preparation, response
classification and the non-sending halves of the fluent resource API. The
``sync`` and ``aio`` modules add the part that actually talks to the server.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import (
    Any,
    Dict,
    Generic,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Type,
    TypeVar,
    Union,
)

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from hubuum_client.core.baseurl import BaseUrl
from hubuum_client.core.classes import Credentials, Token
from hubuum_client.core.config import ClientConfig
from hubuum_client.core.endpoints import Endpoint
from hubuum_client.core.exceptions import (
    DeserializationError,
    HttpError,
    InvalidParamsError,
    MissingIdentifierError,
    NotFound,
    TooManyResults,
    TransportError,
    UnsupportedOperationError,
    UrlParseError,
)
from hubuum_client.core.field_utils import encode_query
from hubuum_client.core.filters import (
    FilterOperator,
    Operator,
    OperatorLike,
    QueryFilter,
    as_filter_operator,
)
from hubuum_client.core.resource import ResourceRecord, filters_from_params
from hubuum_client.core.types import HttpMethod

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ResourceRecord)
UrlParams = Dict[str, str]

_PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")
# Endpoints whose path already names a single item
ITEM_ENDPOINTS = frozenset({Endpoint.GROUP_MEMBERS_ADD_REMOVE})


@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class Authenticated:
    token: str = field(repr=False)


def one_or_err(items: Sequence[T], name: Optional[str] = None) -> T:
    """Return the single element of ``items``, or fail with NotFound / TooManyResults."""
    if name is None:
        name = type(items[0]).__name__ if items else "Resource"
    if len(items) == 1:
        return items[0]
    if not items:
        raise NotFound(f"{name} not found")
    raise TooManyResults(f"Type: {name}, Count: {len(items)} (expected 1)")


def extract_error_message(text: str) -> str:
    """The ``message`` of a JSON error body, or the raw body when it is not JSON."""
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return "Error without message."


def check_success(response: httpx.Response) -> httpx.Response:
    if not response.is_success:
        raise HttpError(response.status_code, extract_error_message(response.text))
    return response


@lru_cache(maxsize=None)
def _adapter(output: Any) -> TypeAdapter:
    return TypeAdapter(output)


def parse_body(text: str, output: Any) -> Any:
    """Validate a JSON body against ``output``, keeping the raw text on failure."""
    try:
        return _adapter(output).validate_json(text)
    except (ValidationError, ValueError) as exc:
        logger.error(f"Failed to deserialize response: {exc} Response text: {text}")
        raise DeserializationError(text) from exc


def classify_response(method: HttpMethod, response: httpx.Response, output: Any) -> Any:
    """
    Turn a response into a value or a failure.

    - non-success status: HttpError with the extracted message
    - DELETE: empty body is success (None), anything else is a contract violation
    - 204, an empty body, or no expected output: None
    - otherwise the body must parse into ``output``
    """
    text = check_success(response).text
    logger.debug(f"Response: {text}")

    if method is HttpMethod.DELETE:
        if not text.strip():
            return None
        logger.error(f"Expected empty response, got: {text}")
        raise DeserializationError(text)

    if response.status_code == httpx.codes.NO_CONTENT or output is None or not text.strip():
        return None
    return parse_body(text, output)


def to_payload(body: Any) -> Any:
    if body is None:
        return None
    if hasattr(body, "to_payload"):
        return body.to_payload()
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json")
    return body


def redacted(payload: Any) -> Any:
    if isinstance(payload, dict) and "password" in payload:
        return {**payload, "password": "***"}
    return payload


def coerce_params(shape: Optional[Type[BaseModel]], params: Any) -> Any:
    """Validate a dict against the resource's shape; shape instances pass through."""
    if shape is None or params is None or isinstance(params, shape):
        return params
    if not isinstance(params, Mapping):
        raise InvalidParamsError(
            f"Expected {shape.__name__} or a mapping, got {type(params).__name__}"
        )
    try:
        return shape.model_validate(dict(params))
    except ValidationError as exc:
        raise InvalidParamsError(str(exc)) from exc


def login_body(credentials: Union[Credentials, Mapping[str, str]]) -> Dict[str, Any]:
    if not isinstance(credentials, Credentials):
        try:
            credentials = Credentials.model_validate(dict(credentials))
        except ValidationError as exc:
            raise InvalidParamsError(str(exc)) from exc
    return credentials.model_dump()


def token_value(token: Union[Token, str]) -> str:
    return token.token if isinstance(token, Token) else token


class ClientCore:
    """State shared by every client: base URL, auth state and the httpx client."""

    def __init__(self, base_url: Union[BaseUrl, str], state, http_client):
        if not isinstance(base_url, BaseUrl):
            base_url = BaseUrl.parse(base_url)
        self._base_url = base_url
        self._state = state
        self._http = http_client

    @property
    def base_url(self) -> BaseUrl:
        return self._base_url

    @property
    def state(self):
        return self._state

    @property
    def http_client(self):
        return self._http

    @staticmethod
    def http_kwargs(config: Optional[ClientConfig]) -> Dict[str, Any]:
        return (config or ClientConfig()).client_kwargs()

    def build_url(self, endpoint: Endpoint, url_params: Optional[Mapping[str, Any]] = None) -> str:
        return endpoint.complete(self._base_url, url_params)

    def clone(self):
        """A new client value sharing the same connection pool."""
        return type(self)(self._base_url, self._state, http_client=self._http)

    def _login_request(self, credentials) -> httpx.Request:
        url = self.build_url(Endpoint.LOGIN)
        logger.debug(f"POST {url}")
        return self._http.build_request("POST", url, json=login_body(credentials))

    def _validate_token_request(self, token: str) -> httpx.Request:
        url = self.build_url(Endpoint.LOGIN_WITH_TOKEN)
        logger.debug(f"GET {url}")
        return self._http.build_request(
            "GET", url, headers={"Authorization": f"Bearer {token}"}
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._base_url.as_str()!r}, state={self._state!r})"


class AuthenticatedCore(ClientCore):
    """Request preparation for clients holding a token."""

    # Set by the concrete flavors
    resource_class: Type["ResourceBase"]

    def __init__(self, base_url: Union[BaseUrl, str], state: Authenticated, http_client):
        if not isinstance(state, Authenticated):
            raise TypeError("An authenticated client needs an Authenticated state")
        super().__init__(base_url, state, http_client)

    @property
    def token(self) -> str:
        return self._state.token

    def get_token(self) -> str:
        return self._state.token

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._state.token}"}

    def prepare_request(
        self,
        method: Union[HttpMethod, str],
        endpoint: Endpoint,
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
        body: Any = None,
        target_id: Any = None,
    ) -> httpx.Request:
        try:
            method = HttpMethod(method.upper() if isinstance(method, str) else method)
        except ValueError:
            raise UnsupportedOperationError(str(method)) from None

        url = self.build_url(endpoint, url_params)
        missing = _PLACEHOLDER.findall(url)
        if missing:
            raise MissingIdentifierError(f"Missing URL parameter: {', '.join(missing)}")

        payload = None
        if method is HttpMethod.GET:
            query_string = encode_query(query)
            if query_string:
                url = f"{url}?{query_string}"
            logger.debug(f"GET {url}")
        elif method is HttpMethod.POST:
            payload = to_payload(body)
            logger.debug(f"POST {url} with {redacted(payload)!r}")
        elif method in (HttpMethod.PATCH, HttpMethod.DELETE):
            if endpoint not in ITEM_ENDPOINTS:
                if target_id is None:
                    raise MissingIdentifierError(
                        f"{method.value} on {endpoint.value} requires a target id"
                    )
                url = f"{url}{target_id}"
            if method is HttpMethod.PATCH:
                payload = to_payload(body)
                logger.debug(f"PATCH {url} with {redacted(payload)!r}")
            else:
                logger.debug(f"DELETE {url}")
        else:
            raise UnsupportedOperationError(method.value)

        try:
            return self._http.build_request(
                method.value, url, json=payload, headers=self.auth_headers()
            )
        except httpx.InvalidURL as exc:
            raise UrlParseError(str(exc)) from exc

    # Resource collections

    def users(self):
        from hubuum_client.resources import User

        return self.resource_class(self, User)

    def groups(self):
        from hubuum_client.resources import Group

        return self.resource_class(self, Group)

    def namespaces(self):
        from hubuum_client.resources import Namespace

        return self.resource_class(self, Namespace)

    def classes(self):
        from hubuum_client.resources import Class

        return self.resource_class(self, Class)

    def objects(self, class_id: int):
        from hubuum_client.resources import Object

        return self.resource_class(self, Object, {"class_id": str(class_id)})

    def class_relations(self):
        from hubuum_client.resources import ClassRelation

        return self.resource_class(self, ClassRelation)

    def object_relations(self):
        from hubuum_client.resources import ObjectRelation

        return self.resource_class(self, ObjectRelation)


def wrap_transport_error(exc: httpx.HTTPError) -> TransportError:
    logger.debug(f"Transport failure: {exc!r}")
    return TransportError(str(exc) or type(exc).__name__)


class FilterBuilderBase(Generic[T]):
    """
    Accumulates ``(field, operator, value)`` tuples.

    Immutable: every ``add_*`` returns a new builder, so a partially built
    query can be reused as a starting point.
    """

    def __init__(self, client, resource: Type[T], url_params: Optional[UrlParams] = None):
        self._client = client
        self._resource = resource
        self._url_params: UrlParams = dict(url_params or {})
        self._filters: List[tuple] = []

    def _clone(self):
        builder = type(self)(self._client, self._resource, self._url_params)
        builder._filters = list(self._filters)
        return builder

    @property
    def filters(self) -> List[tuple]:
        return list(self._filters)

    def add_filter(self, field: str, operator: OperatorLike, value: Any):
        builder = self._clone()
        builder._filters.append((field, as_filter_operator(operator), value))
        return builder

    def add_checked_filter(self, field: str, operator: OperatorLike, value: Any):
        """Like add_filter, but refuse operators that cannot apply to the field's type."""
        query_filter = QueryFilter.checked(
            field, operator, value, self._resource.field_data_type(field)
        )
        return self.add_filter(query_filter.key, query_filter.operator, value)

    def add_filter_equals(self, field: str, value: Any):
        return self.add_filter(field, FilterOperator(Operator.EQUALS), value)

    def add_filter_id(self, value: Any):
        return self.add_filter_equals("id", value)

    def add_filter_name_exact(self, value: Any):
        """Exact match on the resource's name field (``username`` for users, ``groupname`` for groups)."""
        return self.add_filter_equals(self._resource.NAME_FIELD, value)

    def build(self) -> List[QueryFilter]:
        return self._resource.build_params(self._filters)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._resource.__name__}, {encode_query(self.build())!r})"


class ResourceBase(Generic[T]):
    """A resource kind bound to a client and, for nested collections, its URL parameters."""

    builder_class: Type[FilterBuilderBase]

    def __init__(self, client, resource: Type[T], url_params: Optional[UrlParams] = None):
        self._client = client
        self._resource = resource
        self._url_params: UrlParams = dict(url_params or {})

    @property
    def resource(self) -> Type[T]:
        return self._resource

    @property
    def url_params(self) -> UrlParams:
        return dict(self._url_params)

    def find(self):
        return self.builder_class(self._client, self._resource, self._url_params)

    def _params_filters(self, params, kwargs) -> List[QueryFilter]:
        params = coerce_params(self._resource.GetParams, params if params is not None else kwargs)
        return filters_from_params(params)

    def _id_filters(self, id: int) -> List[QueryFilter]:
        return [QueryFilter("id", FilterOperator(Operator.EQUALS), id)]

    def _name_filters(self, name: str) -> List[QueryFilter]:
        return [QueryFilter(self._resource.NAME_FIELD, FilterOperator(Operator.EQUALS), name)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._resource.__name__}, url_params={self._url_params!r})"


class HandleBase(Generic[T]):
    """A fetched record bound to the client that fetched it."""

    def __init__(self, client, resource: T, url_params: Optional[UrlParams] = None):
        self._client = client
        self._resource = resource
        self._url_params: UrlParams = dict(url_params or {})

    @property
    def resource(self) -> T:
        return self._resource

    @property
    def id(self) -> int:
        return self._resource.id

    @property
    def client(self):
        return self._client

    def __str__(self) -> str:
        return str(self._resource)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._resource!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, HandleBase):
            return self._resource == other._resource
        return NotImplemented

    def __hash__(self):
        return hash((type(self._resource), self.id))


def require_body(result: Any, method: HttpMethod) -> Any:
    if result is None:
        raise NotFound(f"{method.value} returned empty result")
    return result


def identifier(value: Any) -> int:
    """The id of a handle, a record, or a plain integer."""
    if isinstance(value, (HandleBase, BaseModel)):
        return value.id
    return int(value)


def resolve_endpoint(target: Any) -> Endpoint:
    if isinstance(target, Endpoint):
        return target
    return target.endpoint()
