"""Response-processing toggles applied by the transport."""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass, replace
from typing import Callable, Iterable

TEXT_CONTENT_TYPES = (
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-www-form-urlencoded",
)

_META_CHARSET = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?\s*([a-zA-Z0-9_\-:.]+)""", re.IGNORECASE)
_XML_ENCODING = re.compile(rb"""<\?xml[^>]+encoding\s*=\s*["']([a-zA-Z0-9_\-.]+)["']""", re.IGNORECASE)
_BOMS = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)
_SNIFF_LENGTH = 1024
FALLBACK_ENCODING = "windows-1252"


@dataclass(frozen=True)
class ResponseOptions:
    auto_decode_text_content: bool = False
    auto_decode_content_types: tuple[str, ...] = ()
    discard_response_body: bool = False


ResponseOption = Callable[[ResponseOptions], ResponseOptions]


def auto_decode_text_content(enable: bool = True) -> ResponseOption:
    """Decode textual bodies using the charset sniffed from the content."""

    def apply(options: ResponseOptions) -> ResponseOptions:
        return replace(options, auto_decode_text_content=enable)

    return apply


def auto_decode_content_type(*content_types: str) -> ResponseOption:
    """Treat the given content types as text in addition to the built-in ones."""
    normalized = tuple(value.strip().lower() for value in content_types if value.strip())

    def apply(options: ResponseOptions) -> ResponseOptions:
        return replace(options, auto_decode_text_content=True, auto_decode_content_types=normalized)

    return apply


def discard_response_body(enable: bool = True) -> ResponseOption:
    """Drain response bodies without keeping them."""

    def apply(options: ResponseOptions) -> ResponseOptions:
        return replace(options, discard_response_body=enable)

    return apply


def apply_response_options(options: ResponseOptions, opts: Iterable[ResponseOption]) -> ResponseOptions:
    for opt in opts:
        options = opt(options)
    return options


def is_text_content_type(content_type: str | None, extra: Iterable[str] = ()) -> bool:
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type.startswith("text/"):
        return True
    if media_type.endswith("+json") or media_type.endswith("+xml"):
        return True
    return media_type in TEXT_CONTENT_TYPES or media_type in tuple(extra)


def has_charset(content_type: str | None) -> bool:
    return bool(content_type) and "charset=" in content_type.lower()


def _known_encoding(name: bytes) -> str | None:
    try:
        return codecs.lookup(name.decode("ascii")).name
    except (LookupError, UnicodeDecodeError):
        return None


def detect_text_encoding(content: bytes) -> str:
    """Guess the charset of a text body that did not declare one in its headers."""
    for bom, encoding in _BOMS:
        if content.startswith(bom):
            return encoding

    head = content[:_SNIFF_LENGTH]
    for pattern in (_META_CHARSET, _XML_ENCODING):
        match = pattern.search(head)
        if match:
            encoding = _known_encoding(match.group(1))
            if encoding:
                return encoding

    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        return FALLBACK_ENCODING
    return "utf-8"
