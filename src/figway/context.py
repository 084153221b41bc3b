"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task.
- ``match_var``: The ``RouteMatch`` chosen for the current request, set
  once resolution succeeds.

Both are set by the handler pipeline and reset after each request.
Middleware reads them instead of tagging the relayed response.
"""

from contextvars import ContextVar

from figway.http.request import Request
from figway.routing.route import RouteMatch

request_var: ContextVar[Request] = ContextVar("figway_request")
"""The current request. Set by the ASGI handler before dispatch."""

match_var: ContextVar[RouteMatch | None] = ContextVar("figway_match", default=None)
"""The resolved route for the current request, if resolution has happened."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_match() -> RouteMatch | None:
    """Return the resolved route for the current request, or None."""
    return match_var.get()
