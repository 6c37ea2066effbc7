"""Logging setup for the library and CLI."""

import logging
import sys

from siglip2.core.config import get_config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure application logging.

    Invariants:
    - A single stdout handler is installed on the root logger; calling again replaces it.
    - Level comes from the argument when given, else from Settings.log_level.
    """
    if level is None:
        level = get_config().log_level
    if isinstance(level, str):
        level = level.upper()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    root = logging.getLogger()
    root.setLevel(level)
    # Remove existing handlers so we don't duplicate when called again
    for h in root.handlers[:]:
        root.removeHandler(h)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)
