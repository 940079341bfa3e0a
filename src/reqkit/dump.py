"""Dump options and the sink that writes captured requests and responses."""

from __future__ import annotations

import io
import logging
import queue
import sys
import threading
from dataclasses import dataclass, replace
from typing import Any, AsyncIterator, Callable, Iterator

import httpx

logger = logging.getLogger(__name__)

DEFAULT_PROTO = "HTTP/1.1"
DEFAULT_QUEUE_SIZE = 1024
BODY_TERMINATOR = b"\r\n\r\n"

_POLL_INTERVAL = 0.2
_STOP = object()


@dataclass
class DumpOptions:
    """What to capture and where to write it."""

    request_head: bool = False
    request_body: bool = False
    response_head: bool = False
    response_body: bool = False
    async_: bool = False
    output: Any = None

    def clone(self) -> "DumpOptions":
        return replace(self)

    def _set_flags(self, request_head: bool, request_body: bool, response_head: bool, response_body: bool) -> "DumpOptions":
        self.request_head = request_head
        self.request_body = request_body
        self.response_head = response_head
        self.response_body = response_body
        return self

    def set_only_request(self) -> "DumpOptions":
        return self._set_flags(True, True, False, False)

    def set_only_response(self) -> "DumpOptions":
        return self._set_flags(False, False, True, True)

    def set_only_head(self) -> "DumpOptions":
        return self._set_flags(True, False, True, False)

    def set_only_body(self) -> "DumpOptions":
        return self._set_flags(False, True, False, True)

    def set_all(self) -> "DumpOptions":
        return self._set_flags(True, True, True, True)

    def enabled_parts(self) -> tuple[str, ...]:
        names = ("request_head", "request_body", "response_head", "response_body")
        return tuple(name for name in names if getattr(self, name))


def default_dump_options() -> DumpOptions:
    """Capture everything, synchronously, to stdout."""
    return DumpOptions(output=sys.stdout).set_all()


def _write(output: Any, data: bytes) -> None:
    try:
        if isinstance(output, io.TextIOBase):
            output.write(data.decode("utf-8", errors="replace"))
        else:
            output.write(data)
        flush = getattr(output, "flush", None)
        if flush is not None:
            flush()
    except (OSError, ValueError) as exc:
        logger.warning("dump write failed: %s", exc)


def _render_headers(raw_headers: list[tuple[bytes, bytes]]) -> bytes:
    return b"".join(key + b": " + value + b"\r\n" for key, value in raw_headers)


def render_request_head(request: httpx.Request) -> bytes:
    proto = request.extensions.get("proto") or DEFAULT_PROTO
    if isinstance(proto, str):
        proto = proto.encode("ascii")
    line = request.method.encode("ascii") + b" " + request.url.raw_path + b" " + proto + b"\r\n"
    return line + _render_headers(request.headers.raw) + b"\r\n"


def render_response_head(response: httpx.Response) -> bytes:
    line = f"{response.http_version} {response.status_code} {response.reason_phrase}\r\n".encode("ascii", errors="replace")
    return line + _render_headers(response.headers.raw) + b"\r\n"


class Dumper:
    """Writes captured bytes to the configured output.

    Options are read on every call so flags, output and async mode may be
    changed while the dumper is attached to a transport. In async mode the
    bytes are handed to a background thread through a bounded queue; when the
    queue is full the chunk is dropped and counted in ``dropped``.
    """

    def __init__(self, options: DumpOptions, *, max_pending: int = DEFAULT_QUEUE_SIZE) -> None:
        self.options = options
        self.dropped = 0
        self._queue: queue.Queue = queue.Queue(maxsize=max_pending)
        self._worker: threading.Thread | None = None
        self._stopping = threading.Event()
        self._lock = threading.Lock()

    def dump(self, data: bytes) -> None:
        if not data:
            return
        output = self.options.output
        if output is None:
            return
        if not self.options.async_:
            _write(output, data)
            return
        self._ensure_worker()
        try:
            self._queue.put_nowait((output, bytes(data)))
        except queue.Full:
            self.dropped += 1

    def dump_request_head(self, request: httpx.Request) -> None:
        if self.options.request_head:
            self.dump(render_request_head(request))

    def dump_request_body(self, chunk: bytes) -> None:
        if self.options.request_body:
            self.dump(chunk)

    def dump_response_head(self, response: httpx.Response) -> None:
        if self.options.response_head:
            self.dump(render_response_head(response))

    def dump_response_body(self, chunk: bytes) -> None:
        if self.options.response_body:
            self.dump(chunk)

    def end_body(self, kind: str) -> None:
        if getattr(self.options, f"{kind}_body"):
            self.dump(BODY_TERMINATOR)

    def _ensure_worker(self) -> None:
        if self._worker is not None and self._worker.is_alive():
            return
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._stopping.clear()
            self._worker = threading.Thread(target=self._run, name="reqkit-dump", daemon=True)
            self._worker.start()

    def _run(self) -> None:
        while True:
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                if self._stopping.is_set():
                    return
                continue
            if item is _STOP:
                return
            output, data = item
            _write(output, data)

    def stop(self) -> None:
        """Ask the worker to exit after what is already queued, without waiting for it."""
        if self._worker is None:
            return
        self._stopping.set()
        try:
            self._queue.put_nowait(_STOP)
        except queue.Full:
            pass

    def close(self, timeout: float | None = 1.0) -> None:
        """Stop the worker and wait until everything already queued has been written."""
        worker = self._worker
        if worker is None:
            return
        self.stop()
        worker.join(timeout)
        self._worker = None


class TeeStream(httpx.SyncByteStream, httpx.AsyncByteStream):
    """Byte stream that reports every chunk of an inner stream to a callback."""

    def __init__(
        self,
        stream: Any,
        on_chunk: Callable[[bytes], None],
        on_end: Callable[[], None],
        *,
        discard: bool = False,
    ) -> None:
        self._stream = stream
        self._on_chunk = on_chunk
        self._on_end = on_end
        self._discard = discard

    def __iter__(self) -> Iterator[bytes]:
        seen = False
        for chunk in self._stream:
            if chunk:
                seen = True
                self._on_chunk(chunk)
            if not self._discard:
                yield chunk
        if seen:
            self._on_end()

    async def __aiter__(self) -> AsyncIterator[bytes]:
        seen = False
        async for chunk in self._stream:
            if chunk:
                seen = True
                self._on_chunk(chunk)
            if not self._discard:
                yield chunk
        if seen:
            self._on_end()

    def close(self) -> None:
        close = getattr(self._stream, "close", None)
        if close is not None:
            close()

    async def aclose(self) -> None:
        aclose = getattr(self._stream, "aclose", None)
        if aclose is not None:
            await aclose()
