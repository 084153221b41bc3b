"""Ordered prefix router.

Routes are registered during setup and frozen into an immutable
lookup table when the gateway starts. Resolution is strict
first-match in declaration order.
"""

from figway.errors import ConfigurationError, NoRouteMatch
from figway.routing.route import Cluster, Route, RouteMatch, RoutePattern


def parse_pattern(path: str) -> RoutePattern:
    """Parse a route path pattern.

    Examples::

        "/legacy"        -> RoutePattern("/legacy")
        "/api/users/*"   -> RoutePattern("/api/users", wildcard=True)
        "/*"             -> RoutePattern("", wildcard=True)
    """
    if not path.startswith("/"):
        msg = f"Route pattern {path!r} must start with '/'."
        raise ConfigurationError(msg)

    wildcard = path == "/*" or path.endswith("/*")
    prefix = path[:-2] if wildcard else path

    if "*" in prefix:
        msg = (
            f"Route pattern {path!r} uses '*' outside the final segment. "
            "Only a trailing '/*' wildcard is supported."
        )
        raise ConfigurationError(msg)

    return RoutePattern(prefix=prefix, wildcard=wildcard)


class Router:
    """Ordered prefix router.

    Usage::

        router = Router()
        router.add_cluster(Cluster("legacy", "http://127.0.0.1:8080"))
        router.add_cluster(Cluster("dotnet", "http://127.0.0.1:5000"))
        router.add(Route("/api/users/*", "dotnet"))
        router.add(Route("/*", "legacy"))
        router.compile()
        match = router.resolve("/api/users/42")
    """

    __slots__ = ("_clusters", "_compiled", "_entries", "_pending")

    def __init__(self) -> None:
        self._clusters: dict[str, Cluster] = {}
        self._pending: list[Route] = []
        self._entries: tuple[tuple[RoutePattern, Route, Cluster], ...] = ()
        self._compiled = False

    def add_cluster(self, cluster: Cluster) -> None:
        """Register a cluster. Must be called before compile()."""
        self._check_not_compiled()
        if cluster.name in self._clusters:
            msg = f"Cluster {cluster.name!r} is defined more than once."
            raise ConfigurationError(msg)
        self._clusters[cluster.name] = cluster

    def add(self, route: Route) -> None:
        """Append a route. Must be called before compile().

        The pattern is validated eagerly so mistakes surface at the
        line that registered them.
        """
        self._check_not_compiled()
        parse_pattern(route.path)
        self._pending.append(route)

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes in declaration order."""
        return list(self._pending)

    @property
    def clusters(self) -> dict[str, Cluster]:
        """Return a copy of the cluster table."""
        return dict(self._clusters)

    def cluster(self, name: str) -> Cluster:
        """Look up a cluster by name.

        Raises ``ConfigurationError`` if it is not defined.
        """
        try:
            return self._clusters[name]
        except KeyError:
            msg = f"Unknown cluster {name!r}. Defined clusters: {sorted(self._clusters)}"
            raise ConfigurationError(msg) from None

    def compile(self) -> None:
        """Freeze the router. No more routes or clusters can be added.

        Raises ``ConfigurationError`` if a route references a cluster
        that does not exist.
        """
        entries: list[tuple[RoutePattern, Route, Cluster]] = []
        for route in self._pending:
            if route.cluster not in self._clusters:
                msg = (
                    f"Route {route.path!r} references unknown cluster {route.cluster!r}. "
                    f"Defined clusters: {sorted(self._clusters)}"
                )
                raise ConfigurationError(msg)
            entries.append((parse_pattern(route.path), route, self._clusters[route.cluster]))
        self._entries = tuple(entries)
        self._compiled = True

    def resolve(self, path: str) -> RouteMatch:
        """Resolve a request path to its destination cluster.

        Returns the ``RouteMatch`` of the first route, in declaration
        order, whose pattern matches *path*.
        Raises ``NoRouteMatch`` if none does.
        """
        if not self._compiled:
            msg = "Router must be compiled before resolving paths."
            raise RuntimeError(msg)

        for pattern, route, cluster in self._entries:
            remainder = pattern.match(path)
            if remainder is not None:
                return RouteMatch(route=route, cluster=cluster, path=path, remainder=remainder)

        raise NoRouteMatch(path)

    def _check_not_compiled(self) -> None:
        if self._compiled:
            msg = "Cannot add routes or clusters after compilation."
            raise RuntimeError(msg)
