"""Per-call request builders produced by clients."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

import httpx

from .dump import DEFAULT_PROTO
from .exceptions import ReqKitNetworkError, ReqKitTimeoutError
from .security import sanitize_headers

if TYPE_CHECKING:
    from .client import AsyncClient, Client, _BaseClient


class _BaseRequest:
    def __init__(self, client: "_BaseClient") -> None:
        self.client = client
        self.headers: dict[str, str] = dict(client.common_headers)
        self.proto = DEFAULT_PROTO
        self.query: dict[str, Any] = {}
        self.content: bytes | None = None

    def set_header(self, key: str, value: str) -> "_BaseRequest":
        self.headers[key] = value
        return self

    def set_headers(self, headers: Mapping[str, str]) -> "_BaseRequest":
        for key, value in headers.items():
            self.headers[str(key)] = str(value)
        return self

    def set_query_param(self, key: str, value: Any) -> "_BaseRequest":
        self.query[key] = value
        return self

    def set_query_params(self, params: Mapping[str, Any]) -> "_BaseRequest":
        self.query.update(params)
        return self

    def set_body(self, body: bytes | str) -> "_BaseRequest":
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def set_json_body(self, payload: Any) -> "_BaseRequest":
        encoded = self.client._json_marshal(payload)
        self.content = encoded.encode("utf-8") if isinstance(encoded, str) else encoded
        self.headers.setdefault("Content-Type", "application/json")
        return self

    def set_proto(self, proto: str) -> "_BaseRequest":
        self.proto = proto
        return self

    def _build(self, method: str, url: str) -> httpx.Request:
        method = method.upper()
        self.client.logger.debug("%s %s headers=%s", method, url, sanitize_headers(self.headers))
        return self.client._http.build_request(
            method,
            url,
            headers=self.headers,
            params=self.query or None,
            content=self.content,
            extensions={"proto": self.proto},
        )


class Request(_BaseRequest):
    """Synchronous request builder."""

    client: "Client"

    def send(self, method: str, url: str) -> httpx.Response:
        request = self._build(method, url)
        try:
            return self.client._http.send(request)
        except httpx.TimeoutException as exc:
            raise ReqKitTimeoutError("Request timed out", timeout=self.client.settings.timeout, cause=exc)
        except httpx.NetworkError as exc:
            raise ReqKitNetworkError("Network error", cause=exc)

    def get(self, url: str) -> httpx.Response:
        return self.send("GET", url)

    def post(self, url: str) -> httpx.Response:
        return self.send("POST", url)

    def put(self, url: str) -> httpx.Response:
        return self.send("PUT", url)

    def patch(self, url: str) -> httpx.Response:
        return self.send("PATCH", url)

    def delete(self, url: str) -> httpx.Response:
        return self.send("DELETE", url)

    def head(self, url: str) -> httpx.Response:
        return self.send("HEAD", url)

    def options(self, url: str) -> httpx.Response:
        return self.send("OPTIONS", url)


class AsyncRequest(_BaseRequest):
    """Asynchronous request builder."""

    client: "AsyncClient"

    async def send(self, method: str, url: str) -> httpx.Response:
        request = self._build(method, url)
        try:
            return await self.client._http.send(request)
        except httpx.TimeoutException as exc:
            raise ReqKitTimeoutError("Request timed out", timeout=self.client.settings.timeout, cause=exc)
        except httpx.NetworkError as exc:
            raise ReqKitNetworkError("Network error", cause=exc)

    async def get(self, url: str) -> httpx.Response:
        return await self.send("GET", url)

    async def post(self, url: str) -> httpx.Response:
        return await self.send("POST", url)

    async def put(self, url: str) -> httpx.Response:
        return await self.send("PUT", url)

    async def patch(self, url: str) -> httpx.Response:
        return await self.send("PATCH", url)

    async def delete(self, url: str) -> httpx.Response:
        return await self.send("DELETE", url)

    async def head(self, url: str) -> httpx.Response:
        return await self.send("HEAD", url)

    async def options(self, url: str) -> httpx.Response:
        return await self.send("OPTIONS", url)
