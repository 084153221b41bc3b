"""Figway CLI — serve, inspect, and test a route table.

Entry point registered as ``figway`` in ``pyproject.toml``::

    [project.scripts]
    figway = "figway.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``figway`` command."""
    parser = argparse.ArgumentParser(
        prog="figway",
        description="Figway — path-prefix reverse proxy for strangler-fig migrations.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- figway run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the gateway")
    run_parser.add_argument(
        "target",
        help="Config file (gateway.yaml) or import string (e.g. mygateway:gateway)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect, production only)",
    )
    run_parser.add_argument(
        "--dev",
        action="store_true",
        help="Run single-worker with auto-reload",
    )
    run_parser.add_argument("--log-level", default=None, help="Override the configured log level")

    # -- figway routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the route table in match order")
    routes_parser.add_argument("target", help="Config file or import string")

    # -- figway resolve ---------------------------------------------------
    resolve_parser = subparsers.add_parser("resolve", help="Show which cluster serves a path")
    resolve_parser.add_argument("target", help="Config file or import string")
    resolve_parser.add_argument("path", help="Request path (e.g. /api/users/42)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from figway.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from figway.cli._routes import run_routes

        run_routes(args)
    elif args.command == "resolve":
        from figway.cli._lookup import run_lookup

        run_lookup(args)
