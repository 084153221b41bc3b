"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    AccessLogMiddleware -- One log line per request on ``figway.access``
"""

from figway.middleware.access_log import AccessLogMiddleware
from figway.middleware.protocol import Middleware, Next

__all__ = [
    "AccessLogMiddleware",
    "Middleware",
    "Next",
]
