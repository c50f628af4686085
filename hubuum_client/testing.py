"""
In-process test transport for the hubuum client.

Routes requests to canned responses through ``httpx.MockTransport``, so the
full client stack (URL building, headers, classification) runs without a
server:

    server = MockHubuum()
    server.add("POST", "/api/v0/auth/login", json={"token": "abc"})
    client = SyncClient("https://hubuum.test", http_client=server.sync_client())
"""

import json as jsonlib
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx

Responder = Callable[[httpx.Request], httpx.Response]


class MockHubuum:
    """Route table keyed by (method, path). Every request is recorded in ``requests``."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Union[Tuple[int, str], Responder]] = {}

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        text: Optional[str] = None,
    ) -> None:
        if text is None:
            text = "" if json is None else jsonlib.dumps(json)
        self._routes[(method.upper(), path)] = (status_code, text)

    def add_callback(self, method: str, path: str, responder: Responder) -> None:
        self._routes[(method.upper(), path)] = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(
                404, json={"message": f"No route for {request.method} {request.url.path}"}
            )
        if callable(route):
            return route(request)
        status_code, text = route
        return httpx.Response(
            status_code, text=text, headers={"Content-Type": "application/json"}
        )

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def sync_client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
