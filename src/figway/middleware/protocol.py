"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The gateway checks the shape, not the lineage.
Middleware wraps the whole resolve-and-forward step, so it sees the
relayed upstream response and can still short-circuit before anything
is sent upstream.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from figway.http.request import Request
from figway.http.response import Response

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for figway middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Gateway-Time", f"{elapsed:.3f}")

        # Class middleware
        class BlockAdmin:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
