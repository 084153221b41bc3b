"""``figway resolve`` — show which cluster a path is routed to."""

import argparse
import sys

from figway.cli._resolve import load_or_exit
from figway.errors import NoRouteMatch


def run_lookup(args: argparse.Namespace) -> None:
    """Resolve ``args.path`` and print the winning route.

    Exits 1 when no route matches and there is no fallback cluster.
    """
    gateway = load_or_exit(args.target)

    try:
        match = gateway.resolve(args.path)
    except NoRouteMatch as exc:
        print(f"Error: {exc.detail}", file=sys.stderr)
        raise SystemExit(1) from exc

    print(f"route:   {match.route.path}")
    print(f"cluster: {match.cluster.name}")
    print(f"forward: {match.cluster.address.rstrip('/')}{match.forward_path}")
