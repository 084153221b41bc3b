"""Logging setup for the ``figway`` command.

Library code only creates named loggers (``figway.server``,
``figway.proxy``, ``figway.access``); handlers are installed here,
once, by the CLI.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Install a stderr handler on the ``figway`` logger tree.

    Raises ``ValueError`` for an unknown level name.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        msg = f"Unknown log level: {level!r}"
        raise ValueError(msg)

    root = logging.getLogger("figway")
    root.setLevel(numeric)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
