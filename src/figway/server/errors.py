"""Error handling pipeline for gateway requests.

Maps HTTPError exceptions (no route, bad request, unreachable upstream)
and unexpected failures to Response objects, using registered error
handlers or plain-text defaults. Errors never escape a single request.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from figway._internal.invoke import invoke
from figway.errors import HTTPError
from figway.http.request import Request
from figway.http.response import Response, plain_text

logger = logging.getLogger("figway.server")


def _to_response(result: Any, status: int) -> Response:
    """Coerce an error handler's return value into a Response."""
    if isinstance(result, Response):
        return result
    if isinstance(result, tuple):
        body, code = result
        return plain_text(str(body), code)
    return plain_text(str(result), status)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, request, exc)
    elif len(params) == 1:
        result = await invoke(handler, request)
    else:
        result = await invoke(handler)

    return _to_response(result, status)


def _find_handler(
    exc: Exception,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Callable[..., Any] | None:
    """The handler for the nearest registered class in *exc*'s MRO."""
    for cls in type(exc).__mro__:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return None


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try the exception type and its bases, then the status code
    handler = _find_handler(exc, error_handlers) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, exc.status)
        # Preserve the HTTP status from the exception unless the handler
        # explicitly returned a Response with its own status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = plain_text(detail, exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or _find_handler(exc, error_handlers)
    if handler is not None:
        return await call_error_handler(handler, request, exc, 500)

    if debug:
        return plain_text(f"500: {type(exc).__name__}: {exc}", 500)
    return plain_text("Internal Server Error", 500)
