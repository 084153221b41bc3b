"""ASGI handler — translates ASGI scope/messages to figway types.

The only component that touches raw ASGI directly. Converts the scope
to a validated Request, runs middleware around resolve-and-forward,
and sends the relayed Response back through ASGI send().
"""

import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from figway._internal.asgi import Receive, Scope, Send
from figway.context import match_var, request_var
from figway.errors import HTTPError, MalformedRequest, NoRouteMatch
from figway.http.request import Request
from figway.http.response import Response, plain_text
from figway.middleware.protocol import Next
from figway.proxy.forwarder import Forwarder
from figway.routing.route import Cluster, Route, RouteMatch
from figway.routing.router import Router
from figway.server.errors import handle_http_error, handle_internal_error
from figway.server.sender import send_response

logger = logging.getLogger("figway.server")


def resolve_with_fallback(router: Router, path: str, fallback: Cluster | None) -> RouteMatch:
    """Resolve *path*, falling back to *fallback* when nothing matches.

    The fallback is an explicit gateway setting; the router itself
    never applies a default.
    """
    try:
        return router.resolve(path)
    except NoRouteMatch:
        if fallback is None:
            raise
        route = Route(path="/*", cluster=fallback.name, name="fallback")
        return RouteMatch(route=route, cluster=fallback, path=path, remainder=path.lstrip("/"))


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    forwarder: Forwarder,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    fallback_cluster: Cluster | None = None,
    max_content_length: int | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    # Malformed input is rejected before resolution; nothing is forwarded
    try:
        request = Request.from_asgi(scope, receive, max_content_length=max_content_length)
    except MalformedRequest as exc:
        logger.debug(
            "%d %r %r — %s", exc.status, scope.get("method"), scope.get("path"), exc.detail
        )
        await send_response(plain_text(exc.detail, exc.status), send)
        return

    token: Token[Request] = request_var.set(request)
    match_token = match_var.set(None)

    try:

        async def dispatch(req: Request) -> Response:
            match = resolve_with_fallback(router, req.path, fallback_cluster)
            match_var.set(match)
            return await forwarder.forward(
                req, match.cluster, match.raw_forward_path(req.raw_path)
            )

        # Wrap middleware around the dispatch
        handler: Next = dispatch
        for mw in reversed(middleware):
            outer = handler
            mw_ref = mw

            async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        match_var.reset(match_token)
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")
