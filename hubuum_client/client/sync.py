import logging
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

import httpx

from hubuum_client.core.baseurl import BaseUrl
from hubuum_client.core.classes import Credentials, GroupPermissionsResult, Token
from hubuum_client.core.config import ClientConfig
from hubuum_client.core.endpoints import Endpoint
from hubuum_client.core.exceptions import InvalidTokenError
from hubuum_client.core.filters import QueryFilter
from hubuum_client.core.types import HttpMethod
from hubuum_client.client.base import (
    Authenticated,
    AuthenticatedCore,
    ClientCore,
    FilterBuilderBase,
    HandleBase,
    ResourceBase,
    T,
    Unauthenticated,
    check_success,
    classify_response,
    coerce_params,
    identifier,
    one_or_err,
    parse_body,
    require_body,
    resolve_endpoint,
    token_value,
    wrap_transport_error,
)

logger = logging.getLogger(__name__)


def _send(http: httpx.Client, request: httpx.Request) -> httpx.Response:
    start = time.monotonic()
    try:
        response = http.send(request)
    except httpx.HTTPError as exc:
        raise wrap_transport_error(exc) from exc
    logger.debug(f"{request.method} {request.url} took {time.monotonic() - start:.3f}s")
    return response


class _SyncLifecycle:
    def close(self) -> None:
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class SyncClient(_SyncLifecycle, ClientCore):
    """
    A blocking client that has not logged in yet.

        client = SyncClient("https://hubuum.example.com")
        hubuum = client.login(Credentials(username="alice", password="secret"))
        servers = hubuum.classes().select_by_name("Servers")

    The unauthenticated client stays usable after login; both share one
    connection pool.
    """

    def __init__(
        self,
        base_url: Union[BaseUrl, str],
        config: Optional[ClientConfig] = None,
        *,
        http_client: Optional[httpx.Client] = None,
    ):
        if http_client is None:
            http_client = httpx.Client(**self.http_kwargs(config))
        super().__init__(base_url, Unauthenticated(), http_client)

    def clone(self) -> "SyncClient":
        return type(self)(self._base_url, http_client=self._http)

    def login(self, credentials: Union[Credentials, Mapping[str, str]]) -> "AuthenticatedSyncClient":
        response = check_success(_send(self._http, self._login_request(credentials)))
        token = parse_body(response.text, Token)
        logger.debug("Login successful")
        return AuthenticatedSyncClient(
            self._base_url, Authenticated(token.token), http_client=self._http
        )

    def login_with_token(self, token: Union[Token, str]) -> "AuthenticatedSyncClient":
        token = token_value(token)
        response = _send(self._http, self._validate_token_request(token))
        if not response.is_success:
            raise InvalidTokenError()
        return AuthenticatedSyncClient(
            self._base_url, Authenticated(token), http_client=self._http
        )


class AuthenticatedSyncClient(_SyncLifecycle, AuthenticatedCore):
    """A blocking client holding a bearer token."""

    def __init__(
        self,
        base_url: Union[BaseUrl, str],
        state: Authenticated,
        *,
        http_client: httpx.Client,
    ):
        super().__init__(base_url, state, http_client)

    def request(
        self,
        method: Union[HttpMethod, str],
        target: Any,
        *,
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
        body: Any = None,
        target_id: Any = None,
        output: Any = None,
    ) -> Any:
        """
        Send one request and classify the response.

        ``target`` is an Endpoint or a resource type. The body is parsed into
        ``output`` (any type pydantic can validate); None discards it.
        """
        request = self.prepare_request(
            method, resolve_endpoint(target), url_params, query, body, target_id
        )
        response = _send(self._http, request)
        return classify_response(HttpMethod(request.method), response, output)

    def get(
        self,
        resource: Type[T],
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
    ) -> List[T]:
        result = self.request(
            HttpMethod.GET, resource, url_params=url_params, query=query,
            output=List[resource.GetOutput],
        )
        return require_body(result, HttpMethod.GET)

    def search(
        self,
        resource: Type[T],
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
    ) -> List[T]:
        return self.get(resource, url_params, query)

    def post(
        self,
        resource: Type[T],
        params: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> T:
        result = self.request(
            HttpMethod.POST, resource, url_params=url_params,
            body=coerce_params(resource.PostParams, params), output=resource.PostOutput,
        )
        return require_body(result, HttpMethod.POST)

    def patch(
        self,
        resource: Type[T],
        id: Any,
        params: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> T:
        result = self.request(
            HttpMethod.PATCH, resource, url_params=url_params, target_id=id,
            body=coerce_params(resource.PatchParams, params), output=resource.PatchOutput,
        )
        return require_body(result, HttpMethod.PATCH)

    def delete(
        self,
        resource: Type[T],
        id: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.request(HttpMethod.DELETE, resource, url_params=url_params, target_id=id)


class FilterBuilder(FilterBuilderBase[T]):
    def execute(self) -> List[T]:
        return self._client.get(self._resource, self._url_params, self.build())

    def execute_expecting_single_result(self) -> T:
        return one_or_err(self.execute(), self._resource.__name__)


class Resource(ResourceBase[T]):
    """
    One resource kind on an authenticated client:

        hubuum.classes().find().add_filter("name", Operator.ICONTAINS, "server").execute()
        hubuum.users().create({"username": "bob", "password": "hunter2"})
    """

    builder_class = FilterBuilder

    def filter(self, params: Any = None, **kwargs) -> List[T]:
        """GET with equality filters for every field set in ``params`` (or ``kwargs``)."""
        return self._client.get(
            self._resource, self._url_params, self._params_filters(params, kwargs)
        )

    def filter_expecting_single_result(self, params: Any = None, **kwargs) -> T:
        return one_or_err(self.filter(params, **kwargs), self._resource.__name__)

    def create(self, params: Any) -> T:
        return self._client.post(self._resource, params, self._url_params)

    def update(self, id: int, params: Any) -> T:
        return self._client.patch(self._resource, id, params, self._url_params)

    def delete(self, id: int) -> None:
        self._client.delete(self._resource, id, self._url_params)

    def select(self, id: int) -> "Handle[T]":
        record = one_or_err(
            self._client.get(self._resource, self._url_params, self._id_filters(id)),
            self._resource.__name__,
        )
        return handle_for(self._client, record, self._url_params)

    def select_by_name(self, name: str) -> "Handle[T]":
        record = one_or_err(
            self._client.get(self._resource, self._url_params, self._name_filters(name)),
            self._resource.__name__,
        )
        return handle_for(self._client, record, self._url_params)


AuthenticatedSyncClient.resource_class = Resource


class Handle(HandleBase[T]):
    def update(self, patch: Any) -> "Handle[T]":
        record = self._client.patch(type(self._resource), self.id, patch, self._url_params)
        return type(self)(self._client, record, self._url_params)

    def delete(self) -> None:
        self._client.delete(type(self._resource), self.id, self._url_params)


class ClassHandle(Handle):
    def object_collection(self) -> Resource:
        from hubuum_client.resources import Object

        return Resource(self._client, Object, {"class_id": str(self.id)})

    def objects(self) -> list:
        return self.object_collection().find().execute()

    def object_by_name(self, name: str):
        return self.object_collection().find().add_filter_name_exact(name).execute_expecting_single_result()


class GroupHandle(Handle):
    def members(self) -> list:
        from hubuum_client.resources import User

        return self._client.request(
            HttpMethod.GET, Endpoint.GROUP_MEMBERS,
            url_params={"group_id": self.id}, output=List[User],
        ) or []

    def _membership(self, method: HttpMethod, user: Any) -> None:
        self._client.request(
            method, Endpoint.GROUP_MEMBERS_ADD_REMOVE,
            url_params={"group_id": self.id, "user_id": identifier(user)},
        )

    def add_member(self, user: Any) -> None:
        self._membership(HttpMethod.POST, user)

    def remove_member(self, user: Any) -> None:
        self._membership(HttpMethod.DELETE, user)


class NamespaceHandle(Handle):
    def group_permissions(self) -> List[GroupPermissionsResult]:
        return self._client.request(
            HttpMethod.GET, Endpoint.NAMESPACE_PERMISSIONS,
            url_params={"namespace_id": self.id}, output=List[GroupPermissionsResult],
        ) or []


class UserHandle(Handle):
    def groups(self) -> list:
        from hubuum_client.resources import Group

        return self._client.request(
            HttpMethod.GET, Endpoint.USER_GROUPS,
            url_params={"user_id": self.id}, output=List[Group],
        ) or []


HANDLE_TYPES: Dict[str, Type[Handle]] = {
    "Class": ClassHandle,
    "Group": GroupHandle,
    "Namespace": NamespaceHandle,
    "User": UserHandle,
}


def handle_for(client: AuthenticatedSyncClient, record: T, url_params=None) -> Handle[T]:
    handle_type = HANDLE_TYPES.get(record.resource_name, Handle)
    return handle_type(client, record, url_params)
