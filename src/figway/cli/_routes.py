"""``figway routes`` — list the route table.

Prints every route in match order with its cluster and the cluster's
address, then the fallback cluster if one is configured.
"""

import argparse

from figway.cli._resolve import load_or_exit


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of ORDER, PATH, CLUSTER, and ADDRESS."""
    gateway = load_or_exit(args.target)
    router = gateway.router

    routes = router.routes
    if not routes:
        print("No routes registered.")
        return

    clusters = router.clusters
    rows: list[tuple[str, str, str, str]] = []
    for index, route in enumerate(routes, start=1):
        path = route.path
        if route.strip_prefix:
            path = f"{path} (strip)"
        cluster = route.cluster
        if route.name:
            cluster = f"{cluster} ({route.name})"
        rows.append((str(index), path, cluster, clusters[route.cluster].address))

    headers = ("#", "PATH", "CLUSTER", "ADDRESS")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"

    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 6, 80))
    for row in rows:
        print(fmt.format(*row))

    if gateway.config.fallback_cluster:
        name = gateway.config.fallback_cluster
        print(f"\nfallback: {name} -> {clusters[name].address}")
