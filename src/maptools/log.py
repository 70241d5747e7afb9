from __future__ import annotations

import logging
import os

LOG_LEVEL_ENV = "MAPTOOLS_LOG_LEVEL"


def get_logger(name: str = "maptools") -> logging.Logger:
    """Return a `maptools` logger, attaching a stream handler on first use."""
    if name != "maptools" and not name.startswith("maptools."):
        name = f"maptools.{name}"
    logger = logging.getLogger(name)

    root = logging.getLogger("maptools")
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[maptools] %(levelname)s %(message)s"))
        root.addHandler(h)
        root.setLevel(default_level())
    return logger


def default_level() -> int:
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").strip().upper()
    value = logging.getLevelName(level)
    return value if isinstance(value, int) else logging.WARNING


def set_level(level: int | str) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.getLogger("maptools").setLevel(level)
