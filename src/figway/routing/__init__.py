"""Routing — ordered prefix table with first-match resolution.

Routes are registered during setup and frozen into an immutable
lookup table when the gateway starts.
"""

from figway.routing.route import Cluster, Route, RouteMatch, RoutePattern
from figway.routing.router import Router, parse_pattern

__all__ = [
    "Cluster",
    "Route",
    "RouteMatch",
    "RoutePattern",
    "Router",
    "parse_pattern",
]
