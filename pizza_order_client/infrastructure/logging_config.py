"""
Logging setup: stdlib logging rendered through rich on stderr.

Levels use the .NET names found in appsettings.json ("Logging:LogLevel:Default").
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "information": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "none": logging.CRITICAL + 10,
}


def parse_level(name: Optional[str]) -> int:
    """Map a .NET or Python level name to a logging level; unknown names mean WARNING."""
    return _LEVELS.get((name or "").strip().lower(), logging.WARNING)


def configure_logging(level_name: Optional[str] = "Warning", console: Optional[Console] = None) -> None:
    """Route the package logger through a RichHandler; idempotent."""
    root = logging.getLogger("pizza_order_client")
    root.setLevel(parse_level(level_name))
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)


__all__ = ["configure_logging", "parse_level"]
