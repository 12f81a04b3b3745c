"""
Rich consoles for the pizza CLI.

Styles used by the handlers and the chat loop: accent, muted, success, error.
"""

import os
import sys
from typing import Optional

from rich.console import Console
from rich.theme import Theme

THEMES = {
    "dark": {"accent": "cyan", "muted": "grey70", "success": "green", "error": "bold red"},
    "light": {"accent": "dark_green", "muted": "grey42", "success": "green", "error": "red"},
}

_FORCE_COLOR_ENV = "PIZZA_CLI_FORCE_COLOR"


def color_enabled(requested: Optional[bool], stream=None) -> bool:
    """
    Decide whether to emit color.

    An explicit request wins over auto-detection (is the target stream a tty?).
    NO_COLOR turns color off unless PIZZA_CLI_FORCE_COLOR is set to a true value.
    """
    if requested is None:
        stream = stream or sys.stdout
        requested = bool(getattr(stream, "isatty", lambda: False)())
    if not requested:
        return False
    forced = (os.getenv(_FORCE_COLOR_ENV) or "").strip().lower() in ("1", "true", "yes", "on")
    return forced or "NO_COLOR" not in os.environ


def make_console(theme_name: str = "dark", use_color: Optional[bool] = None, stderr: bool = False) -> Console:
    """Console with the named theme (unknown names fall back to dark)."""
    styles = THEMES.get(theme_name, THEMES["dark"])
    color = color_enabled(use_color, sys.stderr if stderr else sys.stdout)
    return Console(
        theme=Theme(styles),
        stderr=stderr,
        no_color=not color,
        color_system="auto" if color else None,
        emoji=False,
        highlight=False,
    )


__all__ = ["make_console", "color_enabled", "THEMES"]
