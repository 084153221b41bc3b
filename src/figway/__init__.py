"""Figway — a path-prefix reverse proxy for strangler-fig migrations.

Routes each request by ordered path prefix to one named upstream
cluster and relays the response unmodified, so endpoints can move from
a legacy system to a new one a prefix at a time.

Basic usage::

    from figway import Gateway

    gateway = Gateway()
    gateway.cluster("legacy", "http://127.0.0.1:8080")
    gateway.cluster("dotnet", "http://127.0.0.1:5000")

    gateway.route("/api/users/*", "dotnet")
    gateway.route("/*", "legacy")

    gateway.run()

From a YAML file::

    gateway = Gateway.from_file("gateway.yaml")
"""

__version__ = "0.1.0"
__all__ = [
    "Cluster",
    "ConfigurationError",
    "FigwayError",
    "Gateway",
    "GatewayConfig",
    "HTTPError",
    "MalformedRequest",
    "Middleware",
    "Next",
    "NoRouteMatch",
    "Request",
    "Response",
    "Route",
    "UpstreamTimeout",
    "UpstreamUnreachable",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import figway`` fast (httpx is only imported with the gateway).
    """
    if name == "Gateway":
        from figway.app import Gateway

        return Gateway

    if name in ("GatewayConfig", "load_config"):
        from figway import config as _config

        return getattr(_config, name)

    if name == "Request":
        from figway.http.request import Request

        return Request

    if name == "Response":
        from figway.http.response import Response

        return Response

    if name in ("Cluster", "Route"):
        from figway.routing import route as _route

        return getattr(_route, name)

    if name in ("Middleware", "Next"):
        from figway.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "FigwayError",
        "HTTPError",
        "MalformedRequest",
        "NoRouteMatch",
        "UpstreamTimeout",
        "UpstreamUnreachable",
    ):
        from figway import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
