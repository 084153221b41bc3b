"""Built-in middleware: access log.

Writes one ``figway.access`` line per request with the resolved
cluster, final status, and elapsed time.
"""

import logging
import time

from figway.context import get_match
from figway.errors import HTTPError
from figway.http.request import Request
from figway.http.response import Response
from figway.middleware.protocol import Next

logger = logging.getLogger("figway.access")


class AccessLogMiddleware:
    """Log every request after its response is known.

    Gateway errors raised further down the chain are logged with their
    status and then re-raised so the error pipeline still maps them.

    Usage::

        gateway.add_middleware(AccessLogMiddleware())
    """

    __slots__ = ("level",)

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        try:
            response = await next(request)
        except HTTPError as exc:
            self._log(request, exc.status, start)
            raise
        self._log(request, response.status, start)
        return response

    def _log(self, request: Request, status: int, start: float) -> None:
        match = get_match()
        cluster = match.cluster.name if match is not None else "-"
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client[0] if request.client else "-"
        logger.log(
            self.level,
            '%s "%s %s" %d %s %.1fms',
            client,
            request.method,
            request.url,
            status,
            cluster,
            elapsed_ms,
        )
