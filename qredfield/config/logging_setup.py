"""Package logger helpers.

All modules obtain their logger through::

    from qredfield.config.logging_setup import get_logger
    logger = get_logger(__name__)
    logger.debug("...")

Loggers live below the ``qredfield`` hierarchy and stay silent (NullHandler)
until the embedding application configures handlers, e.g. via
``configure_logging``.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

PACKAGE_LOGGER = "qredfield"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str = PACKAGE_LOGGER, level: Optional[int] = None) -> logging.Logger:
    """Return a logger inside the package hierarchy.

    - Names outside ``qredfield`` are nested below it
    - The package root carries a NullHandler (no output unless configured)
    - ``level`` is applied only when given; otherwise inherited
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"

    root = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h, logging.NullHandler) for h in root.handlers):
        root.addHandler(logging.NullHandler())

    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


def configure_logging(
    level: int = logging.INFO, stream: Optional[TextIO] = None
) -> logging.Logger:
    """Attach one formatted StreamHandler to the package logger.

    Calling it again replaces the previous handler instead of stacking.
    """
    root = get_logger(PACKAGE_LOGGER)
    for handler in list(root.handlers):
        if getattr(handler, "_qredfield_stream", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._qredfield_stream = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(level)
    return root


__all__ = ["get_logger", "configure_logging", "PACKAGE_LOGGER"]
