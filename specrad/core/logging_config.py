"""
Logging configuration for specrad.

All library loggers live under the ``specrad`` namespace so that a host model
can silence or redirect the engine with a single logger configuration.
"""

import logging
import sys
from typing import Optional, Set, Tuple

DEFAULT_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"

_warned: Set[Tuple[str, str]] = set()


def setup_logging(
    level: str = "INFO", format_string: Optional[str] = None, stream: Optional[object] = None
) -> None:
    """
    Configure logging for specrad.

    Parameters
    ----------
    level : str
        Logging level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'
    format_string : str, optional
        Custom format string. If None, uses ``DEFAULT_FORMAT``.
    stream : file-like object, optional
        Stream to write logs to. If None, uses sys.stderr.
    """
    if stream is None:
        stream = sys.stderr

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or DEFAULT_FORMAT,
        stream=stream,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Parameters
    ----------
    name : str
        Dotted module path below the package, e.g. ``"radiation.band"``

    Returns
    -------
    logging.Logger
        Logger named ``specrad.<name>``
    """
    return logging.getLogger(f"specrad.{name}")


def warn_once(logger: logging.Logger, key: str, message: str) -> bool:
    """
    Emit a warning only the first time ``key`` is seen for ``logger``.

    Returns True if the warning was emitted.
    """
    token = (logger.name, key)
    if token in _warned:
        return False
    _warned.add(token)
    logger.warning(message)
    return True


def reset_warnings() -> None:
    """Forget which one-time warnings have already been emitted."""
    _warned.clear()
