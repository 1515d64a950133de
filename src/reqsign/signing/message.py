"""Transport adapters and parameter/body extraction.

The signer never touches a socket. It sees HTTP messages through the
:class:`SignableMessage` protocol, which any transport can satisfy:

* header lookup and assignment,
* the URL path and query items,
* a body that can be read without consuming it.

Adapters are provided for ``httpx.Request``, ``httpx.Response`` and
incoming Starlette requests.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import parse_qsl

import httpx

from reqsign.signing.errors import (
    BodyReadError,
    ContentTypeParseError,
    FormParseError,
    UnsupportedContentTypeError,
)
from reqsign.signing.headers import DEFAULT_CONTENT_TYPE, HEADER_CONTENT_TYPE

if TYPE_CHECKING:
    from starlette.requests import Request as StarletteRequest

__all__ = [
    "SignableMessage",
    "HttpxRequestMessage",
    "HttpxResponseMessage",
    "StarletteRequestMessage",
    "as_message",
    "decode_body",
    "extract",
    "first_values",
    "parse_form",
    "parse_media_type",
    "request_path",
]

JSON_MEDIA_TYPE = "application/json"

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MEDIA_TYPE_RE = re.compile(rf"{_TOKEN}(?:/{_TOKEN})?")
_MEDIA_PARAM_RE = re.compile(rf'\s*;\s*({_TOKEN})\s*=\s*(?:{_TOKEN}|"(?:[^"\\]|\\.)*")\s*')
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class SignableMessage(Protocol):
    """Minimal view of an HTTP message needed to sign or validate it."""

    @property
    def path(self) -> str: ...

    def get_header(self, name: str) -> str | None: ...

    def set_header(self, name: str, value: str) -> None: ...

    def query_items(self) -> list[tuple[str, str]]: ...

    def read_body(self) -> bytes:
        """Return the full body, leaving it readable for later consumers."""
        ...


class HttpxRequestMessage:
    """Outgoing (or test-built) ``httpx.Request``."""

    def __init__(self, request: httpx.Request) -> None:
        self.request = request

    @property
    def path(self) -> str:
        return self.request.url.path

    def get_header(self, name: str) -> str | None:
        return self.request.headers.get(name)

    def set_header(self, name: str, value: str) -> None:
        self.request.headers[name] = value

    def query_items(self) -> list[tuple[str, str]]:
        return self.request.url.params.multi_items()

    def read_body(self) -> bytes:
        # read() caches the content and swaps in a replayable byte stream
        try:
            return self.request.read()
        except Exception as exc:
            raise BodyReadError(f"failed to read request body: {exc}") from exc


class HttpxResponseMessage:
    """Received ``httpx.Response``; the path comes from its originating request."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response

    @property
    def path(self) -> str:
        return self.response.request.url.path

    def get_header(self, name: str) -> str | None:
        return self.response.headers.get(name)

    def set_header(self, name: str, value: str) -> None:
        self.response.headers[name] = value

    def query_items(self) -> list[tuple[str, str]]:
        return []

    def read_body(self) -> bytes:
        try:
            return self.response.read()
        except Exception as exc:
            raise BodyReadError(f"failed to read response body: {exc}") from exc


class StarletteRequestMessage:
    """Incoming Starlette request whose body has already been awaited.

    Starlette caches ``await request.body()``, so handlers can still read it.
    """

    def __init__(self, request: StarletteRequest, body: bytes) -> None:
        self.request = request
        self._body = body

    @property
    def path(self) -> str:
        return request_path(self.request)

    def get_header(self, name: str) -> str | None:
        return self.request.headers.get(name)

    def set_header(self, name: str, value: str) -> None:
        raise TypeError("incoming Starlette request headers are read-only")

    def query_items(self) -> list[tuple[str, str]]:
        return self.request.query_params.multi_items()

    def read_body(self) -> bytes:
        return self._body


def request_path(request: StarletteRequest) -> str:
    """Decoded path of an incoming request, straight from the ASGI scope.

    ``request.url.path`` is rebuilt by re-parsing a URL string, so a decoded
    ``?`` or ``#`` in the path would truncate it.
    """
    return request.scope["path"]  # type: ignore[no-any-return]


def as_message(message: Any) -> SignableMessage:
    """Wrap httpx objects; pass anything already speaking the protocol through."""
    if isinstance(message, httpx.Request):
        return HttpxRequestMessage(message)
    if isinstance(message, httpx.Response):
        return HttpxResponseMessage(message)
    return message  # type: ignore[no-any-return]


def first_values(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Collapse multi-valued pairs to one value per key, keeping the first."""
    params: dict[str, str] = {}
    for key, value in items:
        params.setdefault(key, value)
    return params


def decode_body(body: bytes) -> str:
    """Bytes -> text without loss; non-UTF-8 bytes survive as surrogates."""
    return body.decode("utf-8", errors="surrogateescape")


def parse_media_type(value: str) -> str:
    """Return the lowercased media type of a Content-Type value.

    Raises ContentTypeParseError on an empty or malformed type, or a
    malformed or repeated ``; key=value`` parameter. A trailing ``;`` is tolerated.
    """
    base, sep, tail = value.partition(";")
    media_type = base.strip().lower()
    if not media_type:
        raise ContentTypeParseError(value, "no media type")
    if not _MEDIA_TYPE_RE.fullmatch(media_type):
        raise ContentTypeParseError(value, "invalid media type")

    rest = sep + tail
    seen: set[str] = set()
    pos = 0
    while pos < len(rest):
        match = _MEDIA_PARAM_RE.match(rest, pos)
        if match is None:
            if rest[pos:].strip() in ("", ";"):
                break
            raise ContentTypeParseError(value, "invalid media parameter")
        name = match.group(1).lower()
        if name in seen:
            raise ContentTypeParseError(value, f"duplicate parameter {name!r}")
        seen.add(name)
        pos = match.end()
    return media_type


def parse_form(text: str) -> dict[str, str]:
    """Parse an ``application/x-www-form-urlencoded`` body.

    ``+`` decodes to a space and a key without ``=`` gets an empty value.
    Semicolon separators and broken percent escapes are rejected.
    """
    if ";" in text:
        raise FormParseError("failed to parse form data: invalid semicolon separator")
    if _BAD_ESCAPE_RE.search(text):
        raise FormParseError("failed to parse form data: invalid percent escape")
    pairs = parse_qsl(text, keep_blank_values=True, errors="surrogateescape")
    return first_values(pairs)


def extract(message: SignableMessage) -> tuple[str, dict[str, str]]:
    """Pull ``(body_text, params)`` out of a message for canonicalisation.

    Query parameters always contribute. A JSON body is kept verbatim as
    ``body_text``. A form body is merged into ``params`` (form wins on a
    key collision) and ``body_text`` is empty.
    """
    params = first_values(message.query_items())

    media_type = parse_media_type(message.get_header(HEADER_CONTENT_TYPE) or DEFAULT_CONTENT_TYPE)
    body = decode_body(message.read_body())

    if JSON_MEDIA_TYPE in media_type:
        return body, params
    if DEFAULT_CONTENT_TYPE in media_type:
        params.update(parse_form(body))
        return "", params
    raise UnsupportedContentTypeError(media_type)
