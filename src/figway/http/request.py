"""Immutable HTTP request.

Frozen metadata with async body access. Built from the ASGI scope and
validated before any routing happens, so a request that reaches the
router is known to be well-formed.
"""

from __future__ import annotations

import re
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote, unquote_to_bytes

from figway._internal.asgi import Receive
from figway.errors import MalformedRequest, RequestTooLarge
from figway.http.headers import Headers

# RFC 9110 token characters
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_LENGTH_RE = re.compile(r"[0-9]+")

# RFC 3986 pchar and "/", left unescaped when encoding a decoded path
PATH_SAFE = "/:@!$&'()*+,;=-._~"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable inbound HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    ``raw_path`` is the percent-encoded path as sent by the client, so
    ``/files/a%2Fb`` can be forwarded without turning into ``/files/a/b``.
    Body is accessed asynchronously via ``.body()`` and is read at most
    once from the ASGI receive channel.
    """

    method: str
    path: str
    raw_path: bytes
    query_string: bytes
    headers: Headers
    http_version: str
    scheme: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive
    _max_body: int | None = None

    # Private: mutable cache for the body
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_length(self) -> int | None:
        """The declared Content-Length, or None when absent or not ASCII digits."""
        value = self.headers.get("content-length")
        if value is None or not _LENGTH_RE.fullmatch(value.strip()):
            return None
        return int(value)

    @property
    def url(self) -> str:
        """Request target (path + query string)."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    @property
    def host(self) -> str | None:
        """The inbound Host header."""
        return self.headers.get("host")

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.

        Raises:
            RequestTooLarge: If the body exceeds the configured limit.
            MalformedRequest: If the body length contradicts Content-Length.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks: list[bytes] = []
        size = 0
        async for chunk in self.stream():
            size += len(chunk)
            if self._max_body is not None and size > self._max_body:
                raise RequestTooLarge(self._max_body)
            chunks.append(chunk)
        declared = self.content_length
        if declared is not None and declared != size:
            msg = f"Body length {size} does not match Content-Length {declared}"
            raise MalformedRequest(msg)
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: dict[str, Any],
        receive: Receive,
        *,
        max_content_length: int | None = None,
    ) -> Request:
        """Create a validated Request from an ASGI scope and receive callable.

        Raises ``MalformedRequest`` when the method, path, or
        Content-Length cannot be accepted, and ``RequestTooLarge`` when
        the declared body length exceeds *max_content_length*.
        """
        method = scope.get("method", "")
        if not _METHOD_RE.match(method):
            msg = f"Invalid request method {method!r}"
            raise MalformedRequest(msg)

        path = scope.get("path", "")
        if not path.startswith("/") or _CONTROL_RE.search(path):
            msg = f"Invalid request path {path!r}"
            raise MalformedRequest(msg)

        # Some servers (and httpx's ASGITransport) leave the query in raw_path
        raw_path = (scope.get("raw_path") or b"").split(b"?", 1)[0]
        if unquote_to_bytes(raw_path) != path.encode("utf-8"):
            raw_path = quote(path, safe=PATH_SAFE).encode("ascii")

        headers = Headers(tuple(scope.get("headers", ())))
        lengths = headers.get_list("content-length")
        if lengths:
            if len(set(lengths)) > 1 or not _LENGTH_RE.fullmatch(lengths[0].strip()):
                msg = f"Invalid Content-Length {', '.join(lengths)!r}"
                raise MalformedRequest(msg)
            if max_content_length is not None and int(lengths[0]) > max_content_length:
                raise RequestTooLarge(max_content_length)

        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=method,
            path=path,
            raw_path=raw_path,
            query_string=scope.get("query_string", b""),
            headers=headers,
            http_version=scope.get("http_version", "1.1"),
            scheme=scope.get("scheme", "http"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
            _max_body=max_content_length,
        )
