"""Figway gateway application.

Mutable during setup (clusters, routes, middleware, error handlers).
Frozen at runtime when gateway.run() or __call__() is first invoked.
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeAlias

import httpx

from figway._internal.asgi import Receive, Scope, Send
from figway._internal.invoke import invoke
from figway.config import GatewayConfig, load_config
from figway.errors import ConfigurationError
from figway.middleware.access_log import AccessLogMiddleware
from figway.middleware.protocol import Middleware
from figway.proxy.forwarder import Forwarder
from figway.routing.route import Cluster, Route, RouteMatch
from figway.routing.router import Router
from figway.server.handler import handle_request, resolve_with_fallback

ErrorHandler: TypeAlias = Callable[..., Any]


class Gateway:
    """The figway reverse proxy.

    Mutable during setup (clusters, routes, middleware, error handlers).
    Frozen at runtime when ``gateway.run()`` or ``__call__()`` is first
    invoked; after that the route and cluster tables are read-only and
    shared by every in-flight request without locking.

    Usage::

        gateway = Gateway()
        gateway.cluster("legacy", "http://127.0.0.1:8080")
        gateway.cluster("dotnet", "http://127.0.0.1:5000")
        gateway.route("/api/users/*", "dotnet")
        gateway.route("/*", "legacy")
        gateway.run()

    Thread safety:
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the route table, even when several pounce
        workers receive their first request at the same time.
    """

    __slots__ = (
        "_error_handlers",
        "_fallback",
        "_forwarder",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pending_clusters",
        "_pending_routes",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: GatewayConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config: GatewayConfig = config or GatewayConfig()
        self._pending_clusters: list[Cluster] = list(self.config.clusters)
        self._pending_routes: list[Route] = list(self.config.routes)
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Outbound side. ``transport`` lets tests route upstream traffic
        # to in-process ASGI apps instead of the network.
        self._forwarder = Forwarder(
            timeout=self.config.upstream_timeout,
            connect_timeout=self.config.connect_timeout,
            max_connections=self.config.max_connections,
            forwarded_headers=self.config.forwarded_headers,
            transport=transport,
        )

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._fallback: Cluster | None = None

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Gateway":
        """Create a gateway from a YAML configuration file."""
        return cls(load_config(path), transport=transport)

    # -- Route table registration --

    def cluster(self, name: str, address: str) -> None:
        """Register an upstream cluster with a single base address."""
        self._check_not_frozen()
        self._pending_clusters.append(Cluster(name=name, address=address))

    def route(
        self,
        path: str,
        cluster: str,
        *,
        name: str | None = None,
        strip_prefix: bool = False,
    ) -> None:
        """Append a route. Routes are tried in registration order.

        Args:
            path: Prefix pattern, optionally ending in ``/*``.
            cluster: Name of the destination cluster.
            name: Optional label shown by ``figway routes``.
            strip_prefix: Forward only the part of the path after the
                pattern's literal prefix.
        """
        self._check_not_frozen()
        self._pending_routes.append(
            Route(path=path, cluster=cluster, name=name, strip_prefix=strip_prefix)
        )

    # -- Error handlers --

    def error(self, code_or_exception: int | type[Exception]) -> Callable[..., Any]:
        """Register an error handler for a status code or exception type.

        Handlers may take ``()``, ``(request)`` or ``(request, exc)`` and
        return a ``Response``, a string, or a ``(body, status)`` tuple::

            @gateway.error(502)
            def bad_gateway(request):
                return "The legacy site is down for maintenance"
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware. Middleware runs in registration order."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run on ASGI lifespan startup (sync or async)."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a hook run on ASGI lifespan shutdown (sync or async)."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def router(self) -> Router:
        """The compiled router. Freezes the gateway on first access."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    def resolve(self, path: str) -> RouteMatch:
        """Resolve *path* the way a live request would be routed.

        Applies the configured ``fallback_cluster``; raises
        ``NoRouteMatch`` when there is none and no route matches.
        """
        return resolve_with_fallback(self.router, path, self._fallback)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the server (dev or production based on config.debug).

        Compiles the route table and starts serving requests.

        - **Development mode** (debug=True): Single worker with auto-reload
        - **Production mode** (debug=False): Multi-worker
        """
        self._ensure_frozen()

        _host = host or self.config.host
        _port = port or self.config.port

        if self.config.debug:
            from figway.server.dev import run_dev_server

            run_dev_server(
                self,
                _host,
                _port,
                reload=True,
                reload_dirs=self.config.reload_dirs,
            )
        else:
            from figway.server.production import run_production_server

            run_production_server(
                self,
                host=_host,
                port=_port,
                workers=self.config.workers,
                log_level=self.config.log_level,
                backlog=self.config.backlog,
                keep_alive_timeout=self.config.keep_alive_timeout,
                request_timeout=self.config.upstream_timeout + self.config.connect_timeout,
                ssl_certfile=self.config.ssl_certfile,
                ssl_keyfile=self.config.ssl_keyfile,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan and per-worker lifecycle scopes directly,
        then delegates HTTP scopes to the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        if scope["type"] == "pounce.worker.shutdown":
            # Each worker loop owns its own upstream connection pool
            await self._forwarder.aclose()
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            forwarder=self._forwarder,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            fallback_cluster=self._fallback,
            max_content_length=self.config.max_content_length,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the gateway at startup (before the first request) so a
        broken route table fails the server start instead of a request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        await invoke(hook)
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await self._forwarder.aclose()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the route table and middleware chain.

        Raises ``ConfigurationError`` for a route that references an
        unknown cluster, or an unknown ``fallback_cluster``.
        """
        router = Router()
        for cluster in self._pending_clusters:
            router.add_cluster(cluster)
        for route in self._pending_routes:
            router.add(route)
        router.compile()

        fallback: Cluster | None = None
        if self.config.fallback_cluster is not None:
            name = self.config.fallback_cluster
            if name not in router.clusters:
                msg = f"fallback_cluster {name!r} is not a defined cluster."
                raise ConfigurationError(msg)
            fallback = router.cluster(name)

        middleware: list[Callable[..., Any]] = []
        if self.config.access_log:
            middleware.append(AccessLogMiddleware())
        middleware.extend(self._middleware_list)

        self._router = router
        self._fallback = fallback
        self._middleware = tuple(middleware)
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the gateway after it has started serving requests. "
                "Register clusters, routes, and middleware before calling gateway.run()."
            )
            raise RuntimeError(msg)
