"""Configurable HTTP client with request/response dumping."""

from .client import (
    USER_AGENT_CHROME,
    USER_AGENT_FIREFOX,
    AsyncClient,
    Client,
    default_client,
    new_client,
    r,
    set_default_client,
)
from .config import ClientSettings
from .dump import DumpOptions, Dumper, default_dump_options
from .exceptions import ReqKitError, ReqKitNetworkError, ReqKitTimeoutError
from .logger import Logger, new_logger, nop_logger
from .request import AsyncRequest, Request
from .response_options import (
    ResponseOption,
    ResponseOptions,
    auto_decode_content_type,
    auto_decode_text_content,
    discard_response_body,
)
from .transport import Transport

__all__ = [
    "AsyncClient",
    "AsyncRequest",
    "Client",
    "ClientSettings",
    "DumpOptions",
    "Dumper",
    "Logger",
    "ReqKitError",
    "ReqKitNetworkError",
    "ReqKitTimeoutError",
    "Request",
    "ResponseOption",
    "ResponseOptions",
    "Transport",
    "USER_AGENT_CHROME",
    "USER_AGENT_FIREFOX",
    "auto_decode_content_type",
    "auto_decode_text_content",
    "default_client",
    "default_dump_options",
    "discard_response_body",
    "new_client",
    "new_logger",
    "nop_logger",
    "r",
    "set_default_client",
]

__version__ = "0.1.0"
