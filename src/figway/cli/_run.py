"""``figway run`` — development or production server command."""

import argparse

from figway._internal.log import configure_logging
from figway.cli._resolve import load_or_exit


def run_server(args: argparse.Namespace) -> None:
    """Start the gateway (dev or production mode).

    Resolves ``args.target`` to a Gateway, installs logging, then
    delegates to either:
    - ``run_dev_server()`` for development (``--dev`` or debug=True)
    - ``run_production_server()`` otherwise

    CLI flags override the config file.
    """
    gateway = load_or_exit(args.target)
    config = gateway.config

    host = args.host or config.host
    port = args.port or config.port
    log_level = args.log_level or config.log_level
    configure_logging(log_level)

    if args.dev or config.debug:
        from figway.server.dev import run_dev_server

        is_file = args.target.endswith((".yaml", ".yml"))
        run_dev_server(
            gateway,
            host,
            port,
            reload=True,
            reload_dirs=config.reload_dirs,
            app_path=None if is_file else args.target,
        )
    else:
        from figway.server.production import run_production_server

        run_production_server(
            gateway,
            host=host,
            port=port,
            workers=args.workers if args.workers is not None else config.workers,
            log_level=log_level,
            backlog=config.backlog,
            keep_alive_timeout=config.keep_alive_timeout,
            request_timeout=config.upstream_timeout + config.connect_timeout,
            ssl_certfile=config.ssl_certfile,
            ssl_keyfile=config.ssl_keyfile,
        )
