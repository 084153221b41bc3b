"""Tests for figway.routing.router — ordered first-match router."""

import pytest

from figway.errors import ConfigurationError, NoRouteMatch, NotFound
from figway.routing.route import Cluster, Route
from figway.routing.router import Router, parse_pattern

A = Cluster("A", "http://127.0.0.1:5001")
B = Cluster("B", "http://127.0.0.1:5002")


def _router(*routes: tuple[str, str], clusters: tuple[Cluster, ...] = (A, B)) -> Router:
    r = Router()
    for cluster in clusters:
        r.add_cluster(cluster)
    for path, cluster_name in routes:
        r.add(Route(path=path, cluster=cluster_name))
    r.compile()
    return r


class TestParsePattern:
    def test_literal(self) -> None:
        pattern = parse_pattern("/legacy")
        assert pattern.prefix == "/legacy"
        assert pattern.wildcard is False

    def test_wildcard(self) -> None:
        pattern = parse_pattern("/api/users/*")
        assert pattern.prefix == "/api/users"
        assert pattern.wildcard is True

    def test_catch_all(self) -> None:
        pattern = parse_pattern("/*")
        assert pattern.prefix == ""
        assert pattern.wildcard is True

    def test_root_literal(self) -> None:
        pattern = parse_pattern("/")
        assert pattern.prefix == "/"
        assert pattern.wildcard is False

    def test_rejects_relative(self) -> None:
        with pytest.raises(ConfigurationError, match="must start with '/'"):
            parse_pattern("api/*")

    def test_rejects_inner_wildcard(self) -> None:
        with pytest.raises(ConfigurationError, match="final segment"):
            parse_pattern("/api/*/users")

    def test_rejects_partial_segment_wildcard(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_pattern("/api/user*")


class TestDeclaredOrderExample:
    """routes = [("/api/users/*", A), ("/legacy/*", B), ("/*", B)]"""

    @pytest.fixture
    def router(self) -> Router:
        return _router(("/api/users/*", "A"), ("/legacy/*", "B"), ("/*", "B"))

    def test_users_go_to_a(self, router: Router) -> None:
        match = router.resolve("/api/users/42")
        assert match.cluster is A
        assert match.route.path == "/api/users/*"
        assert match.remainder == "42"

    def test_legacy_goes_to_b(self, router: Router) -> None:
        match = router.resolve("/legacy/x")
        assert match.cluster is B
        assert match.route.path == "/legacy/*"

    def test_other_hits_catch_all(self, router: Router) -> None:
        match = router.resolve("/other")
        assert match.cluster is B
        assert match.route.path == "/*"

    def test_wildcard_base_path_matches(self, router: Router) -> None:
        assert router.resolve("/api/users").route.path == "/api/users/*"

    def test_wildcard_empty_remainder(self, router: Router) -> None:
        match = router.resolve("/api/users/")
        assert match.route.path == "/api/users/*"
        assert match.remainder == ""

    def test_wildcard_respects_segment_boundary(self, router: Router) -> None:
        # "/api/usersettings" is not below "/api/users"
        assert router.resolve("/api/usersettings").route.path == "/*"


class TestFirstMatchWins:
    def test_earlier_route_shadows_later(self) -> None:
        r = _router(("/*", "B"), ("/api/users/*", "A"))
        assert r.resolve("/api/users/42").cluster is B

    def test_order_not_specificity(self) -> None:
        r = _router(("/api/*", "B"), ("/api/users/*", "A"))
        assert r.resolve("/api/users/1").cluster is B

    def test_cluster_definition_order_irrelevant(self) -> None:
        forward = _router(("/api/*", "A"), ("/*", "B"), clusters=(A, B))
        backward = _router(("/api/*", "A"), ("/*", "B"), clusters=(B, A))
        for path in ("/api/x", "/api", "/home", "/"):
            assert forward.resolve(path).cluster == backward.resolve(path).cluster

    def test_literal_prefix_is_plain_startswith(self) -> None:
        r = _router(("/legacy", "B"))
        assert r.resolve("/legacy").cluster is B
        assert r.resolve("/legacy.php").cluster is B
        assert r.resolve("/legacy/x").remainder == "/x"


class TestNoMatch:
    def test_raises_no_route_match(self) -> None:
        r = _router(("/api/*", "A"))
        with pytest.raises(NoRouteMatch) as exc_info:
            r.resolve("/home")
        assert exc_info.value.status == 404
        assert "/home" in exc_info.value.detail

    def test_no_route_match_is_not_found(self) -> None:
        r = _router()
        with pytest.raises(NotFound):
            r.resolve("/")

    def test_case_sensitive(self) -> None:
        r = _router(("/API/*", "A"))
        with pytest.raises(NoRouteMatch):
            r.resolve("/api/x")


class TestCompile:
    def test_unknown_cluster_rejected(self) -> None:
        r = Router()
        r.add_cluster(A)
        r.add(Route("/x/*", "missing"))
        with pytest.raises(ConfigurationError, match="unknown cluster 'missing'"):
            r.compile()

    def test_duplicate_cluster_rejected(self) -> None:
        r = Router()
        r.add_cluster(A)
        with pytest.raises(ConfigurationError, match="more than once"):
            r.add_cluster(Cluster("A", "http://other:1"))

    def test_invalid_pattern_rejected_on_add(self) -> None:
        r = Router()
        with pytest.raises(ConfigurationError):
            r.add(Route("nope", "A"))

    def test_add_after_compile(self) -> None:
        r = _router()
        with pytest.raises(RuntimeError, match="after compilation"):
            r.add(Route("/x", "A"))
        with pytest.raises(RuntimeError):
            r.add_cluster(Cluster("C", "http://c:1"))

    def test_resolve_before_compile(self) -> None:
        r = Router()
        with pytest.raises(RuntimeError, match="compiled"):
            r.resolve("/")

    def test_routes_in_declared_order(self) -> None:
        r = _router(("/b/*", "B"), ("/a/*", "A"), ("/*", "B"))
        assert [route.path for route in r.routes] == ["/b/*", "/a/*", "/*"]

    def test_cluster_lookup(self) -> None:
        r = _router()
        assert r.cluster("A") is A
        with pytest.raises(ConfigurationError, match="Unknown cluster"):
            r.cluster("Z")
