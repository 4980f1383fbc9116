"""Chooses between plain and rich terminal output."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from panelkit.config import Config


UI_MODE_PLAIN = "plain"
UI_MODE_RICH = "rich"
UI_MODE_AUTO = "auto"
VALID_UI_MODES = {UI_MODE_PLAIN, UI_MODE_RICH, UI_MODE_AUTO}


class UIResolutionError(RuntimeError):
    """The requested output mode cannot be honoured in this environment."""


@dataclass(frozen=True)
class UIContext:
    """Output mode decision together with the terminal facts it was based on."""

    selected_mode: str
    effective_mode: str
    is_tty: bool
    rich_available: bool
    plain_color_enabled: bool


def _normalize_mode(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    mode = str(value).strip().lower()
    return mode if mode in VALID_UI_MODES else None


def _is_rich_available() -> bool:
    try:
        import rich  # noqa: F401

        return True
    except ImportError:
        return False


def _stdout_isatty() -> bool:
    return bool(getattr(sys.stdout, "isatty", lambda: False)())


def _color_allowed(is_tty: bool, environ: Mapping[str, str]) -> bool:
    # NO_COLOR beats FORCE_COLOR; dumb terminals never get escapes.
    if "NO_COLOR" in environ:
        return False
    if environ.get("TERM", "").lower() == "dumb":
        return False
    if environ.get("FORCE_COLOR"):
        return True
    return is_tty


def resolve_ui_context(args: Any, config: Config) -> UIContext:
    """
    Resolve CLI UI context from CLI args, config and runtime capabilities.

    The --ui flag wins over `ui.mode` from config, which wins over plain.
    Auto mode picks rich only on a terminal with rich installed.

    Raises:
        UIResolutionError: If rich is requested explicitly but not installed.
    """
    config_get = getattr(config, "get", None)
    configured = config_get("ui.mode", UI_MODE_PLAIN) if callable(config_get) else None
    selected_mode = (
        _normalize_mode(getattr(args, "ui", None))
        or _normalize_mode(configured)
        or UI_MODE_PLAIN
    )

    is_tty = _stdout_isatty()
    rich_available = _is_rich_available()

    if selected_mode == UI_MODE_RICH and not rich_available:
        raise UIResolutionError(
            "--ui rich needs the rich package; install it with: pip install panelkit[ui]"
        )

    if selected_mode == UI_MODE_AUTO:
        effective_mode = UI_MODE_RICH if (rich_available and is_tty) else UI_MODE_PLAIN
    else:
        effective_mode = selected_mode

    return UIContext(
        selected_mode=selected_mode,
        effective_mode=effective_mode,
        is_tty=is_tty,
        rich_available=rich_available,
        plain_color_enabled=_color_allowed(is_tty, os.environ),
    )
