"""Gateway resolution — turns a CLI target into a Gateway instance.

Shared by every subcommand. A target is either a YAML config file or a
``"module:attribute"`` import string.
"""

import importlib
from pathlib import Path

from figway.app import Gateway


def resolve_gateway(target: str) -> Gateway:
    """Resolve a config path or import string to a Gateway.

    ``*.yaml`` / ``*.yml`` targets and existing files are loaded with
    ``Gateway.from_file``. Anything else is imported: ``"module:attr"``,
    defaulting to ``"gateway"`` when the attribute is omitted. Factory
    functions are called.

    Raises:
        ConfigurationError: If the config file is missing or invalid.
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a ``Gateway``.
    """
    if target.endswith((".yaml", ".yml")) or Path(target).is_file():
        return Gateway.from_file(target)

    module_path, _, attr_name = target.partition(":")
    if not attr_name:
        attr_name = "gateway"

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    if callable(obj) and not isinstance(obj, Gateway):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {target!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Gateway):
        msg = f"{target!r} resolved to {type(obj).__name__}, not a figway.Gateway instance"
        raise TypeError(msg)

    return obj


def load_or_exit(target: str) -> Gateway:
    """``resolve_gateway`` for CLI use: print the error and exit 1 on failure.

    The gateway is frozen here so route-table mistakes are reported
    the same way as a missing file.
    """
    import sys

    from figway.errors import ConfigurationError

    try:
        gateway = resolve_gateway(target)
        gateway._ensure_frozen()
    except (ConfigurationError, ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return gateway
