"""Configurable synchronous and asynchronous clients with dump control."""

from __future__ import annotations

import copy
import json
import sys
import threading
import weakref
from typing import IO, Any, Callable, Mapping, TypeVar

import httpx

from .config import ClientSettings
from .cookies import new_cookie_jar
from .dump import DumpOptions, default_dump_options
from .logger import Logger, new_logger, nop_logger
from .request import AsyncRequest, Request
from .response_options import ResponseOption, auto_decode_text_content, discard_response_body
from .transport import Transport

USER_AGENT_FIREFOX = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:95.0) Gecko/20100101 Firefox/95.0"
USER_AGENT_CHROME = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/97.0.4692.71 Safari/537.36"
)

_C = TypeVar("_C", bound="_BaseClient")


def _close_files(files: list[IO[bytes]]) -> None:
    while files:
        files.pop().close()


class _BaseClient:
    """Configuration shared by :class:`Client` and :class:`AsyncClient`.

    Every mutator returns the client itself so calls can be chained, and none
    of them raise: a sink that cannot be opened is reported through the
    client logger and the call leaves the configuration unchanged.
    """

    _http: Any

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
        logger: Logger | None = None,
    ) -> None:
        if settings is None:
            settings = transport.settings if transport is not None else ClientSettings()
        self.settings = settings
        self._transport = transport or Transport(settings)
        self._log: Logger = logger or nop_logger()
        self._dump_options: DumpOptions | None = None
        self._dump_files: list[IO[bytes]] = []
        self._finalizer = weakref.finalize(self, _close_files, self._dump_files)
        self.common_headers: dict[str, str] = {}
        self._json_marshal: Callable[[Any], str | bytes] = json.dumps
        self._json_unmarshal: Callable[[str | bytes], Any] = json.loads

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def logger(self) -> Logger:
        return self._log

    @property
    def dump_options(self) -> DumpOptions | None:
        return self._dump_options

    @property
    def cookies(self) -> httpx.Cookies:
        return self._http.cookies

    def set_logger(self: _C, logger: Logger | None) -> _C:
        if logger is None:
            return self
        self._log = logger
        return self

    def set_common_header(self: _C, key: str, value: str) -> _C:
        self.common_headers[key] = value
        return self

    def set_common_headers(self: _C, headers: Mapping[str, str]) -> _C:
        for key, value in headers.items():
            self.common_headers[str(key)] = str(value)
        return self

    def set_user_agent(self: _C, user_agent: str) -> _C:
        return self.set_common_header("User-Agent", user_agent)

    def set_timeout(self: _C, timeout: float | None) -> _C:
        """Bound each request by ``timeout`` seconds; 0 or None removes the bound."""
        if timeout is not None and timeout < 0:
            self._log.error("invalid timeout: %s", timeout)
            return self
        self.settings = self.settings.model_copy(update={"timeout": timeout or None})
        self._http.timeout = self.settings.httpx_timeout()
        return self

    def set_proxy(self: _C, proxy: str | None) -> _C:
        self.settings = self.settings.model_copy(update={"proxy": proxy})
        self._transport.set_proxy(proxy)
        return self

    def set_response_options(self: _C, *opts: ResponseOption) -> _C:
        self._transport.apply_response_options(*opts)
        return self

    def enable_auto_decode_text_content(self: _C) -> _C:
        return self.set_response_options(auto_decode_text_content())

    def enable_auto_discard_response_body(self: _C) -> _C:
        return self.set_response_options(discard_response_body())

    def set_json_marshal(self: _C, marshal: Callable[[Any], str | bytes]) -> _C:
        self._json_marshal = marshal
        return self

    def set_json_unmarshal(self: _C, unmarshal: Callable[[str | bytes], Any]) -> _C:
        self._json_unmarshal = unmarshal
        return self

    def decode_json(self, response: httpx.Response) -> Any:
        return self._json_unmarshal(response.content)

    def debug_mode(self: _C) -> _C:
        """Dump everything, log to stdout and present a browser User-Agent."""
        return (
            self.enable_auto_decode_text_content()
            .dump_all()
            .set_logger(new_logger(sys.stdout))
            .set_user_agent(USER_AGENT_CHROME)
        )

    def test_mode(self: _C) -> _C:
        """Like :meth:`debug_mode`, but response bodies are discarded after dumping."""
        return self.debug_mode().enable_auto_discard_response_body()

    # dump control

    def _get_dump_options(self) -> DumpOptions:
        if self._dump_options is None:
            self._dump_options = default_dump_options()
        return self._dump_options

    def _enable_dump(self) -> None:
        if self._transport.dump_enabled:
            return
        self._transport.attach_dump_sink(self._get_dump_options())

    def enable_dump(self: _C) -> _C:
        self._enable_dump()
        return self

    def disable_dump(self: _C) -> _C:
        self._transport.detach_dump_sink()
        return self

    def set_dump_options(self: _C, options: DumpOptions | None) -> _C:
        if options is None:
            return self
        self._dump_options = options
        self._transport.set_dump_options(options)
        return self

    def dump_to(self: _C, output: Any) -> _C:
        self._get_dump_options().output = output
        self._enable_dump()
        return self

    def dump_to_file(self: _C, filename: str) -> _C:
        try:
            file = open(filename, "wb")
        except OSError as exc:
            self._log.error("create dump file error: %s", exc)
            return self
        self._dump_files.append(file)
        return self.dump_to(file)

    def dump_async(self: _C) -> _C:
        """Write dumps from a background thread so a slow output never delays requests."""
        self._get_dump_options().async_ = True
        self._enable_dump()
        return self

    def dump_only_request(self: _C) -> _C:
        self._get_dump_options().set_only_request()
        self._enable_dump()
        return self

    def dump_only_response(self: _C) -> _C:
        self._get_dump_options().set_only_response()
        self._enable_dump()
        return self

    def dump_only_head(self: _C) -> _C:
        self._get_dump_options().set_only_head()
        self._enable_dump()
        return self

    def dump_only_body(self: _C) -> _C:
        self._get_dump_options().set_only_body()
        self._enable_dump()
        return self

    def dump_all(self: _C) -> _C:
        self._get_dump_options().set_all()
        self._enable_dump()
        return self

    def clone(self: _C) -> _C:
        """Independent copy: own connection pool, dump options and headers."""
        transport = self._transport.clone()
        cloned = type(self)(self.settings, transport=transport, logger=self._log)
        if self._dump_options is not None:
            cloned._dump_options = self._dump_options.clone()
            cloned._reopen_dump_file(self._dump_files)
        if self._transport.dump_enabled:
            transport.attach_dump_sink(cloned._get_dump_options())
        cloned.common_headers = dict(self.common_headers)
        cloned._json_marshal = self._json_marshal
        cloned._json_unmarshal = self._json_unmarshal
        for cookie in self._http.cookies.jar:
            cloned._http.cookies.jar.set_cookie(copy.copy(cookie))
        return cloned

    def _reopen_dump_file(self, owned: list[IO[bytes]]) -> None:
        """Reopen, in append mode, a dump file the source client owns."""
        options = self._get_dump_options()
        output = options.output
        if not any(output is file for file in owned):
            return
        try:
            file = open(output.name, "ab")
        except OSError as exc:
            self._log.error("reopen dump file error: %s", exc)
            return
        self._dump_files.append(file)
        options.output = file

    def _close_dump_files(self) -> None:
        _close_files(self._dump_files)


class Client(_BaseClient):
    """Synchronous client."""

    _http: httpx.Client

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(settings, transport=transport, logger=logger)
        self._http = httpx.Client(
            transport=self._transport,
            timeout=self.settings.httpx_timeout(),
            follow_redirects=self.settings.follow_redirects,
            cookies=new_cookie_jar(),
            event_hooks={"response": [self._transport.process_response]},
        )

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()
        self._close_dump_files()

    def r(self) -> Request:
        return Request(self)

    def new_request(self) -> Request:
        return self.r()


class AsyncClient(_BaseClient):
    """Asynchronous client."""

    _http: httpx.AsyncClient

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
        logger: Logger | None = None,
    ) -> None:
        super().__init__(settings, transport=transport, logger=logger)
        self._http = httpx.AsyncClient(
            transport=self._transport,
            timeout=self.settings.httpx_timeout(),
            follow_redirects=self.settings.follow_redirects,
            cookies=new_cookie_jar(),
            event_hooks={"response": [self._transport.aprocess_response]},
        )

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()
        self._close_dump_files()

    def r(self) -> AsyncRequest:
        return AsyncRequest(self)

    def new_request(self) -> AsyncRequest:
        return self.r()


def new_client(settings: ClientSettings | None = None) -> Client:
    return Client(settings)


_default_client: Client | None = None
_default_lock = threading.Lock()


def default_client() -> Client:
    """Process-wide client, built on first use."""
    global _default_client
    client = _default_client
    if client is None:
        with _default_lock:
            if _default_client is None:
                _default_client = Client()
            client = _default_client
    return client


def set_default_client(client: Client | None) -> None:
    global _default_client
    if client is None:
        return
    with _default_lock:
        _default_client = client


def r() -> Request:
    return default_client().r()
