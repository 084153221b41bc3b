"""Figway exception hierarchy.

Shared across Router, Forwarder, Gateway, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class FigwayError(Exception):
    """Base for all figway-specific errors."""


class ConfigurationError(FigwayError):
    """Raised when gateway configuration is invalid.

    Typically raised by ``load_config()`` or during ``Gateway._freeze()``
    at startup, never while serving requests.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(FigwayError):
    """An error that maps directly to an HTTP status code.

    Raised by the request parser, the router, or the forwarder. The ASGI
    handler catches these and dispatches to the matching
    ``@gateway.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class MalformedRequest(HTTPError):  # noqa: N818
    """400 — the inbound request could not be parsed.

    Raised before route resolution; nothing is forwarded.
    """

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class RequestTooLarge(MalformedRequest):
    """413 — the request body exceeds ``max_content_length``."""

    def __init__(self, limit: int) -> None:
        HTTPError.__init__(
            self,
            status=413,
            detail=f"Request body exceeds {limit} bytes",
        )


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing to serve for the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NoRouteMatch(NotFound):
    """404 — no configured route matches the request path.

    Carries the unmatched ``path`` in the detail for developer visibility.
    """

    def __init__(self, path: str) -> None:
        super().__init__(detail=f"No route matches {path!r}")


class UpstreamUnreachable(HTTPError):  # noqa: N818
    """502 — the destination cluster could not be reached.

    Covers refused connections, DNS failures, and broken responses.
    Never retried by the gateway.
    """

    def __init__(self, cluster: str, detail: str = "") -> None:
        super().__init__(
            status=502,
            detail=detail or f"Upstream {cluster!r} is unreachable",
        )


class UpstreamTimeout(UpstreamUnreachable):
    """504 — the destination cluster did not answer in time."""

    def __init__(self, cluster: str, timeout: float) -> None:
        HTTPError.__init__(
            self,
            status=504,
            detail=f"Upstream {cluster!r} timed out after {timeout:g}s",
        )
