"""Route, Cluster, and RouteMatch frozen dataclasses."""

from dataclasses import dataclass
from urllib.parse import urlsplit

from figway.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A parsed route path pattern.

    Literal:   ``/legacy``        (prefix="/legacy", wildcard=False)
    Wildcard:  ``/api/users/*``   (prefix="/api/users", wildcard=True)
    Catch-all: ``/*``             (prefix="", wildcard=True)
    """

    prefix: str
    wildcard: bool = False

    def match(self, path: str) -> str | None:
        """Return the remainder of *path* after the prefix, or None.

        A wildcard pattern matches its base path exactly or any path
        continuing with ``/``; the remainder may be empty.
        """
        if not self.wildcard:
            if path.startswith(self.prefix):
                return path[len(self.prefix) :]
            return None
        if path == self.prefix:
            return ""
        if path.startswith(self.prefix + "/"):
            return path[len(self.prefix) + 1 :]
        return None


@dataclass(frozen=True, slots=True)
class Cluster:
    """A named upstream destination with a single base address.

    ``address`` is a base URL such as ``http://127.0.0.1:8080`` and may
    carry a base path (``http://legacy.internal/app``).
    """

    name: str
    address: str

    def __post_init__(self) -> None:
        parts = urlsplit(self.address)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            msg = (
                f"Cluster {self.name!r} has invalid address {self.address!r}. "
                "Expected an absolute http:// or https:// URL."
            )
            raise ConfigurationError(msg)
        if parts.query or parts.fragment:
            msg = f"Cluster {self.name!r} address must not carry a query or fragment."
            raise ConfigurationError(msg)

    @property
    def host(self) -> str:
        """The ``host[:port]`` authority, as sent in the ``Host`` header."""
        return urlsplit(self.address).netloc

    @property
    def scheme(self) -> str:
        return urlsplit(self.address).scheme

    @property
    def base_path(self) -> str:
        """Base path of the address without trailing slash ("" for none)."""
        return urlsplit(self.address).path.rstrip("/")


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Maps a path pattern to a cluster by name. The cluster must exist
    when the router compiles.
    """

    path: str
    cluster: str
    name: str | None = None
    strip_prefix: bool = False


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful resolution."""

    route: Route
    cluster: Cluster
    path: str
    remainder: str

    @property
    def forward_path(self) -> str:
        """The path sent upstream, before the cluster's base path is applied."""
        if not self.route.strip_prefix:
            return self.path
        return "/" + self.remainder.lstrip("/")

    def raw_forward_path(self, raw_path: bytes) -> bytes:
        """``forward_path`` in the client's own percent-encoding.

        *raw_path* must decode to ``path``. For ``strip_prefix`` routes
        the matched prefix is cut off the raw bytes, so escapes in the
        remainder (``%2F``) survive.
        """
        if not self.route.strip_prefix:
            return raw_path
        matched = len(self.path.encode("utf-8")) - len(self.remainder.encode("utf-8"))
        index = consumed = 0
        while consumed < matched and index < len(raw_path):
            # One decoded byte is either a literal byte or a %XX escape
            index += 3 if raw_path[index : index + 1] == b"%" else 1
            consumed += 1
        return b"/" + raw_path[index:].lstrip(b"/")
