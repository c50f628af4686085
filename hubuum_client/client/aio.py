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


async def _send(http: httpx.AsyncClient, request: httpx.Request) -> httpx.Response:
    start = time.monotonic()
    try:
        response = await http.send(request)
    except httpx.HTTPError as exc:
        raise wrap_transport_error(exc) from exc
    logger.debug(f"{request.method} {request.url} took {time.monotonic() - start:.3f}s")
    return response


class _AsyncLifecycle:
    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()


class AsyncClient(_AsyncLifecycle, ClientCore):
    """
    The asyncio counterpart of :class:`~hubuum_client.client.sync.SyncClient`.

        async with AsyncClient("https://hubuum.example.com") as client:
            hubuum = await client.login(Credentials(username="alice", password="secret"))
            servers = await hubuum.classes().select_by_name("Servers")
    """

    def __init__(
        self,
        base_url: Union[BaseUrl, str],
        config: Optional[ClientConfig] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if http_client is None:
            http_client = httpx.AsyncClient(**self.http_kwargs(config))
        super().__init__(base_url, Unauthenticated(), http_client)

    def clone(self) -> "AsyncClient":
        return type(self)(self._base_url, http_client=self._http)

    async def login(
        self, credentials: Union[Credentials, Mapping[str, str]]
    ) -> "AuthenticatedAsyncClient":
        response = check_success(await _send(self._http, self._login_request(credentials)))
        token = parse_body(response.text, Token)
        logger.debug("Login successful")
        return AuthenticatedAsyncClient(
            self._base_url, Authenticated(token.token), http_client=self._http
        )

    async def login_with_token(self, token: Union[Token, str]) -> "AuthenticatedAsyncClient":
        token = token_value(token)
        response = await _send(self._http, self._validate_token_request(token))
        if not response.is_success:
            raise InvalidTokenError()
        return AuthenticatedAsyncClient(
            self._base_url, Authenticated(token), http_client=self._http
        )


class AuthenticatedAsyncClient(_AsyncLifecycle, AuthenticatedCore):
    def __init__(
        self,
        base_url: Union[BaseUrl, str],
        state: Authenticated,
        *,
        http_client: httpx.AsyncClient,
    ):
        super().__init__(base_url, state, http_client)

    async def request(
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
        request = self.prepare_request(
            method, resolve_endpoint(target), url_params, query, body, target_id
        )
        response = await _send(self._http, request)
        return classify_response(HttpMethod(request.method), response, output)

    async def get(
        self,
        resource: Type[T],
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
    ) -> List[T]:
        result = await self.request(
            HttpMethod.GET, resource, url_params=url_params, query=query,
            output=List[resource.GetOutput],
        )
        return require_body(result, HttpMethod.GET)

    async def search(
        self,
        resource: Type[T],
        url_params: Optional[Mapping[str, Any]] = None,
        query: Iterable[QueryFilter] = (),
    ) -> List[T]:
        return await self.get(resource, url_params, query)

    async def post(
        self,
        resource: Type[T],
        params: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> T:
        result = await self.request(
            HttpMethod.POST, resource, url_params=url_params,
            body=coerce_params(resource.PostParams, params), output=resource.PostOutput,
        )
        return require_body(result, HttpMethod.POST)

    async def patch(
        self,
        resource: Type[T],
        id: Any,
        params: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> T:
        result = await self.request(
            HttpMethod.PATCH, resource, url_params=url_params, target_id=id,
            body=coerce_params(resource.PatchParams, params), output=resource.PatchOutput,
        )
        return require_body(result, HttpMethod.PATCH)

    async def delete(
        self,
        resource: Type[T],
        id: Any,
        url_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        await self.request(HttpMethod.DELETE, resource, url_params=url_params, target_id=id)


class AsyncFilterBuilder(FilterBuilderBase[T]):
    async def execute(self) -> List[T]:
        return await self._client.get(self._resource, self._url_params, self.build())

    async def execute_expecting_single_result(self) -> T:
        return one_or_err(await self.execute(), self._resource.__name__)


class AsyncResource(ResourceBase[T]):
    builder_class = AsyncFilterBuilder

    async def filter(self, params: Any = None, **kwargs) -> List[T]:
        return await self._client.get(
            self._resource, self._url_params, self._params_filters(params, kwargs)
        )

    async def filter_expecting_single_result(self, params: Any = None, **kwargs) -> T:
        return one_or_err(await self.filter(params, **kwargs), self._resource.__name__)

    async def create(self, params: Any) -> T:
        return await self._client.post(self._resource, params, self._url_params)

    async def update(self, id: int, params: Any) -> T:
        return await self._client.patch(self._resource, id, params, self._url_params)

    async def delete(self, id: int) -> None:
        await self._client.delete(self._resource, id, self._url_params)

    async def select(self, id: int) -> "AsyncHandle[T]":
        records = await self._client.get(self._resource, self._url_params, self._id_filters(id))
        return handle_for(self._client, one_or_err(records, self._resource.__name__), self._url_params)

    async def select_by_name(self, name: str) -> "AsyncHandle[T]":
        records = await self._client.get(self._resource, self._url_params, self._name_filters(name))
        return handle_for(self._client, one_or_err(records, self._resource.__name__), self._url_params)


AuthenticatedAsyncClient.resource_class = AsyncResource


class AsyncHandle(HandleBase[T]):
    async def update(self, patch: Any) -> "AsyncHandle[T]":
        record = await self._client.patch(type(self._resource), self.id, patch, self._url_params)
        return type(self)(self._client, record, self._url_params)

    async def delete(self) -> None:
        await self._client.delete(type(self._resource), self.id, self._url_params)


class AsyncClassHandle(AsyncHandle):
    def object_collection(self) -> AsyncResource:
        from hubuum_client.resources import Object

        return AsyncResource(self._client, Object, {"class_id": str(self.id)})

    async def objects(self) -> list:
        return await self.object_collection().find().execute()

    async def object_by_name(self, name: str):
        builder = self.object_collection().find().add_filter_name_exact(name)
        return await builder.execute_expecting_single_result()


class AsyncGroupHandle(AsyncHandle):
    async def members(self) -> list:
        from hubuum_client.resources import User

        return await self._client.request(
            HttpMethod.GET, Endpoint.GROUP_MEMBERS,
            url_params={"group_id": self.id}, output=List[User],
        ) or []

    async def _membership(self, method: HttpMethod, user: Any) -> None:
        await self._client.request(
            method, Endpoint.GROUP_MEMBERS_ADD_REMOVE,
            url_params={"group_id": self.id, "user_id": identifier(user)},
        )

    async def add_member(self, user: Any) -> None:
        await self._membership(HttpMethod.POST, user)

    async def remove_member(self, user: Any) -> None:
        await self._membership(HttpMethod.DELETE, user)


class AsyncNamespaceHandle(AsyncHandle):
    async def group_permissions(self) -> List[GroupPermissionsResult]:
        return await self._client.request(
            HttpMethod.GET, Endpoint.NAMESPACE_PERMISSIONS,
            url_params={"namespace_id": self.id}, output=List[GroupPermissionsResult],
        ) or []


class AsyncUserHandle(AsyncHandle):
    async def groups(self) -> list:
        from hubuum_client.resources import Group

        return await self._client.request(
            HttpMethod.GET, Endpoint.USER_GROUPS,
            url_params={"user_id": self.id}, output=List[Group],
        ) or []


HANDLE_TYPES: Dict[str, Type[AsyncHandle]] = {
    "Class": AsyncClassHandle,
    "Group": AsyncGroupHandle,
    "Namespace": AsyncNamespaceHandle,
    "User": AsyncUserHandle,
}


def handle_for(client: AuthenticatedAsyncClient, record: T, url_params=None) -> AsyncHandle[T]:
    handle_type = HANDLE_TYPES.get(record.resource_name, AsyncHandle)
    return handle_type(client, record, url_params)
