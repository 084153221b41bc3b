"""Production server.

Starts a multi-worker pounce server with the Gateway as the ASGI app.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from figway.app import Gateway


def run_production_server(
    app: Gateway,
    host: str = "0.0.0.0",
    port: int = 8000,
    workers: int = 0,  # 0 = auto-detect from CPU count
    *,
    log_level: str = "info",
    backlog: int = 2048,
    keep_alive_timeout: float = 5.0,
    request_timeout: float = 30.0,
    ssl_certfile: str | None = None,
    ssl_keyfile: str | None = None,
) -> None:
    """Run the gateway in production mode.

    Args:
        app: Gateway instance.
        host: Bind address (default: 0.0.0.0 for all interfaces).
        port: Bind port (default: 8000).
        workers: Worker count (0 = auto-detect from CPU count).
        log_level: Log level (debug, info, warning, error, critical).
        backlog: TCP listen backlog.
        keep_alive_timeout: Keep-alive connection timeout (seconds).
        request_timeout: Inbound request timeout (seconds). Should be at
            least the gateway's upstream timeout so that slow upstreams
            surface as 504 rather than a dropped connection.
        ssl_certfile: Path to TLS certificate file.
        ssl_keyfile: Path to TLS private key file.

    Example:
        >>> from figway import Gateway, load_config
        >>> from figway.server.production import run_production_server
        >>> run_production_server(Gateway(load_config("gateway.yaml")), workers=4)
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        lifecycle_logging=True,
        log_level=log_level,
        backlog=backlog,
        keep_alive_timeout=keep_alive_timeout,
        request_timeout=request_timeout,
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
        # Every path belongs to the route table; no built-in health endpoint
        health_check_path=None,
    )

    server = Server(config, app)
    server.run()
