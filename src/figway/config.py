"""Gateway configuration.

GatewayConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups. ``load_config()`` reads
the same fields from a YAML file.
"""

from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from figway.errors import ConfigurationError
from figway.routing.route import Cluster, Route


@dataclass(frozen=True, slots=True)
class GatewayConfig:
    """Gateway configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = GatewayConfig(port=3000, upstream_timeout=5.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 0  # 0 = auto-detect from CPU count (production only)

    # Reload (development mode, requires debug=True)
    reload_dirs: tuple[str, ...] = ()

    # Route table (ordered) and cluster table
    routes: tuple[Route, ...] = ()
    clusters: tuple[Cluster, ...] = ()
    fallback_cluster: str | None = None  # used only when no route matches

    # Upstream
    upstream_timeout: float = 30.0
    connect_timeout: float = 5.0
    max_connections: int = 100  # outbound pool size per worker
    forwarded_headers: bool = True  # X-Forwarded-For/Host/Proto

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Logging
    log_level: str = "info"
    access_log: bool = True

    # Production settings
    keep_alive_timeout: float = 5.0
    backlog: int = 2048

    # TLS (optional)
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None


# YAML keys nested under ``server:`` map to these fields
_SERVER_KEYS = frozenset(
    {
        "host",
        "port",
        "debug",
        "workers",
        "reload_dirs",
        "keep_alive_timeout",
        "backlog",
        "ssl_certfile",
        "ssl_keyfile",
    }
)
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "host": (str,),
    "port": (int,),
    "debug": (bool,),
    "workers": (int,),
    "reload_dirs": (list,),
    "fallback_cluster": (str,),
    "upstream_timeout": (int, float),
    "connect_timeout": (int, float),
    "max_connections": (int,),
    "forwarded_headers": (bool,),
    "max_content_length": (int,),
    "log_level": (str,),
    "access_log": (bool,),
    "keep_alive_timeout": (int, float),
    "backlog": (int,),
    "ssl_certfile": (str,),
    "ssl_keyfile": (str,),
}
_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})
_OPTIONAL_KEYS = frozenset({"fallback_cluster", "ssl_certfile", "ssl_keyfile"})
_ROUTE_KEYS = frozenset({"path", "cluster", "name", "strip_prefix"})


def load_config(path: str | Path) -> GatewayConfig:
    """Load a GatewayConfig from a YAML file.

    Raises ``ConfigurationError`` if the file is missing, is not valid
    YAML, or describes an invalid gateway.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        msg = f"Cannot read config file {str(path)!r}: {exc.strerror}"
        raise ConfigurationError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Config file {str(path)!r} is not valid YAML: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, Mapping):
        msg = f"Config file {str(path)!r} must contain a mapping at the top level."
        raise ConfigurationError(msg)
    return parse_config(data)


def parse_config(data: Mapping[str, Any]) -> GatewayConfig:
    """Build a GatewayConfig from an already-parsed mapping."""
    known = {f.name for f in fields(GatewayConfig)} - _SERVER_KEYS - {"routes", "clusters"}
    kwargs: dict[str, Any] = {}

    for key, value in data.items():
        if key == "server":
            kwargs.update(_parse_server(value))
        elif key == "clusters":
            kwargs["clusters"] = _parse_clusters(value)
        elif key == "routes":
            kwargs["routes"] = _parse_routes(value)
        elif key in known:
            kwargs[key] = _check_type(key, value)
        else:
            msg = f"Unknown config key {key!r}."
            raise ConfigurationError(msg)

    return GatewayConfig(**kwargs)


def _check_type(key: str, value: Any) -> Any:
    if value is None and key in _OPTIONAL_KEYS:
        return None
    expected = _FIELD_TYPES[key]
    # bool is an int subclass; never accept it for numeric fields
    if isinstance(value, bool) and bool not in expected:
        ok = False
    else:
        ok = isinstance(value, expected)
    if not ok:
        names = " or ".join(t.__name__ for t in expected)
        msg = f"Config key {key!r} must be {names}, got {type(value).__name__}."
        raise ConfigurationError(msg)
    if key == "reload_dirs":
        return tuple(str(item) for item in value)
    if key == "log_level" and value.lower() not in _LOG_LEVELS:
        msg = f"Config key 'log_level' must be one of {sorted(_LOG_LEVELS)}, got {value!r}."
        raise ConfigurationError(msg)
    return value


def _parse_server(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        msg = "Config key 'server' must be a mapping."
        raise ConfigurationError(msg)
    result: dict[str, Any] = {}
    for key, item in value.items():
        if key not in _SERVER_KEYS:
            msg = f"Unknown config key 'server.{key}'."
            raise ConfigurationError(msg)
        result[key] = _check_type(key, item)
    return result


def _parse_clusters(value: Any) -> tuple[Cluster, ...]:
    if not isinstance(value, Mapping):
        msg = "Config key 'clusters' must map cluster names to addresses."
        raise ConfigurationError(msg)
    clusters: list[Cluster] = []
    for name, address in value.items():
        if isinstance(address, Mapping):
            address = address.get("address")
        if not isinstance(address, str):
            msg = f"Cluster {name!r} must have a string address."
            raise ConfigurationError(msg)
        clusters.append(Cluster(name=str(name), address=address))
    return tuple(clusters)


def _parse_routes(value: Any) -> tuple[Route, ...]:
    if not isinstance(value, list):
        msg = "Config key 'routes' must be a list."
        raise ConfigurationError(msg)
    routes: list[Route] = []
    for index, entry in enumerate(value):
        if not isinstance(entry, Mapping):
            msg = f"routes[{index}] must be a mapping with 'path' and 'cluster'."
            raise ConfigurationError(msg)
        unknown = set(entry) - _ROUTE_KEYS
        if unknown:
            msg = f"routes[{index}] has unknown keys: {sorted(unknown)}"
            raise ConfigurationError(msg)
        path = entry.get("path")
        cluster = entry.get("cluster")
        if not isinstance(path, str) or not isinstance(cluster, str):
            msg = f"routes[{index}] requires string 'path' and 'cluster'."
            raise ConfigurationError(msg)
        strip_prefix = entry.get("strip_prefix", False)
        if not isinstance(strip_prefix, bool):
            msg = f"routes[{index}].strip_prefix must be a bool."
            raise ConfigurationError(msg)
        routes.append(
            Route(path=path, cluster=cluster, name=entry.get("name"), strip_prefix=strip_prefix)
        )
    return tuple(routes)
