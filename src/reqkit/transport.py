"""httpx transport that carries the dump hook and response options."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Union
from urllib.request import getproxies_environment, proxy_bypass_environment

import httpx

from .config import ClientSettings
from .dump import DumpOptions, Dumper, TeeStream
from .response_options import (
    ResponseOption,
    ResponseOptions,
    apply_response_options,
    detect_text_encoding,
    has_charset,
    is_text_content_type,
)

logger = logging.getLogger(__name__)

RESPONSE_OPTIONS_EXTENSION = "response_options"

InnerTransport = Union[httpx.BaseTransport, httpx.AsyncBaseTransport]
TransportFactory = Callable[[ClientSettings, Union[str, None], bool], InnerTransport]


def build_httpx_transport(settings: ClientSettings, proxy: str | None, asynchronous: bool) -> InnerTransport:
    kwargs: dict[str, Any] = {
        "verify": settings.verify,
        "http2": settings.http2,
        "limits": settings.httpx_limits(),
        "proxy": proxy,
    }
    if asynchronous:
        return httpx.AsyncHTTPTransport(**kwargs)
    return httpx.HTTPTransport(**kwargs)


def proxy_from_environment(url: httpx.URL) -> str | None:
    proxies = getproxies_environment()
    if not proxies:
        return None
    if url.host and proxy_bypass_environment(url.host, proxies):
        return None
    return proxies.get(url.scheme) or proxies.get("all")


class Transport(httpx.BaseTransport, httpx.AsyncBaseTransport):
    """Serves both sync and async clients.

    Inner httpx transports (one connection pool each) are built lazily per
    proxy and per sync/async mode. The dump sink and response options are read
    once per request, so reconfiguring them never affects a request that has
    already started.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        response_options: ResponseOptions | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self.response_options = response_options or ResponseOptions()
        self._factory = transport_factory or build_httpx_transport
        self._dumper: Dumper | None = None
        self._pool: dict[tuple[str | None, bool], InnerTransport] = {}
        self._lock = threading.Lock()

    @property
    def dump_enabled(self) -> bool:
        return self._dumper is not None

    @property
    def dump_options(self) -> DumpOptions | None:
        dumper = self._dumper
        return dumper.options if dumper is not None else None

    @property
    def dumper(self) -> Dumper | None:
        return self._dumper

    def attach_dump_sink(self, options: DumpOptions) -> None:
        if self._dumper is not None:
            return
        self._dumper = Dumper(options)
        logger.debug("dump sink attached: %s", ", ".join(options.enabled_parts()) or "nothing")

    def detach_dump_sink(self) -> Dumper | None:
        """Detach the sink; its worker finishes queued writes in the background."""
        dumper, self._dumper = self._dumper, None
        if dumper is not None:
            dumper.stop()
            logger.debug("dump sink detached")
        return dumper

    def set_dump_options(self, options: DumpOptions) -> None:
        if self._dumper is not None:
            self._dumper.options = options

    def apply_response_options(self, *opts: ResponseOption) -> None:
        self.response_options = apply_response_options(self.response_options, opts)

    def set_proxy(self, proxy: str | None) -> None:
        self.settings = self.settings.model_copy(update={"proxy": proxy})

    def clone(self) -> "Transport":
        return Transport(
            self.settings,
            transport_factory=self._factory,
            response_options=self.response_options,
        )

    def _resolve_proxy(self, url: httpx.URL) -> str | None:
        if self.settings.proxy:
            return self.settings.proxy
        if self.settings.trust_env:
            return proxy_from_environment(url)
        return None

    def _inner(self, url: httpx.URL, asynchronous: bool) -> Any:
        key = (self._resolve_proxy(url), asynchronous)
        inner = self._pool.get(key)
        if inner is not None:
            return inner
        with self._lock:
            inner = self._pool.get(key)
            if inner is None:
                inner = self._factory(self.settings, key[0], asynchronous)
                self._pool[key] = inner
        return inner

    @staticmethod
    def _dump_request(dumper: Dumper, request: httpx.Request) -> None:
        dumper.dump_request_head(request)
        try:
            body = request.content
        except httpx.RequestNotRead:
            request.stream = TeeStream(request.stream, dumper.dump_request_body, lambda: dumper.end_body("request"))
            return
        if body:
            dumper.dump_request_body(body)
            dumper.end_body("request")

    def _finish_response(self, response: httpx.Response, dumper: Dumper | None, options: ResponseOptions) -> httpx.Response:
        if dumper is not None:
            dumper.dump_response_head(response)
        if dumper is not None or options.discard_response_body:
            on_chunk = dumper.dump_response_body if dumper is not None else _ignore_chunk
            on_end = (lambda: dumper.end_body("response")) if dumper is not None else _ignore_end
            headers = response.headers.raw
            if options.discard_response_body:
                headers = [(k, v) for k, v in headers if k.lower() not in (b"content-encoding", b"content-length")]
            response = httpx.Response(
                status_code=response.status_code,
                headers=headers,
                stream=TeeStream(response.stream, on_chunk, on_end, discard=options.discard_response_body),
                extensions=dict(response.extensions),
                request=response.request if _has_request(response) else None,
            )
        response.extensions[RESPONSE_OPTIONS_EXTENSION] = options
        return response

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        dumper = self._dumper
        options = self.response_options
        if dumper is not None:
            self._dump_request(dumper, request)
        response = self._inner(request.url, False).handle_request(request)
        return self._finish_response(response, dumper, options)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        dumper = self._dumper
        options = self.response_options
        if dumper is not None:
            self._dump_request(dumper, request)
        response = await self._inner(request.url, True).handle_async_request(request)
        return self._finish_response(response, dumper, options)

    def process_response(self, response: httpx.Response) -> None:
        """Response hook: switch on charset sniffing for textual bodies."""
        options = response.extensions.get(RESPONSE_OPTIONS_EXTENSION, self.response_options)
        if not options.auto_decode_text_content:
            return
        content_type = response.headers.get("content-type")
        if has_charset(content_type):
            return
        if is_text_content_type(content_type, options.auto_decode_content_types):
            response.default_encoding = detect_text_encoding

    async def aprocess_response(self, response: httpx.Response) -> None:
        self.process_response(response)

    def _drain_pool(self, asynchronous: bool) -> list[Any]:
        with self._lock:
            keys = [key for key in self._pool if key[1] is asynchronous]
            return [self._pool.pop(key) for key in keys]

    def close(self) -> None:
        dumper = self.detach_dump_sink()
        if dumper is not None:
            dumper.close()
        for inner in self._drain_pool(False):
            inner.close()

    async def aclose(self) -> None:
        dumper = self.detach_dump_sink()
        if dumper is not None:
            await asyncio.to_thread(dumper.close)
        for inner in self._drain_pool(True):
            await inner.aclose()


def _has_request(response: httpx.Response) -> bool:
    try:
        response.request
    except RuntimeError:
        return False
    return True


def _ignore_chunk(chunk: bytes) -> None:
    return None


def _ignore_end() -> None:
    return None
