"""Console logging for the league loggers.

Everything logs under the ``league`` namespace. A single stderr handler sits
on that namespace, so the werkzeug request log and the root logger are left
alone and records are never printed twice.
"""

import logging

NAMESPACE = "league"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _namespace_logger() -> logging.Logger:
    base = logging.getLogger(NAMESPACE)
    if not base.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        base.addHandler(handler)
        base.setLevel(logging.INFO)
        base.propagate = False
    return base


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the ``league`` namespace."""
    _namespace_logger()
    if name != NAMESPACE and not name.startswith(NAMESPACE + "."):
        name = f"{NAMESPACE}.{name}"
    return logging.getLogger(name)


def set_log_level(level):
    """Apply ``level`` (name or number) to every league logger."""
    if isinstance(level, str):
        level = level.upper()
    _namespace_logger().setLevel(level)
