"""Rendering interface shared by the terminal backends."""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from panelkit.cli.ui.context import UI_MODE_PLAIN, UI_MODE_RICH, UIContext
from panelkit.cli.ui.models import ChangeLine, KeyValueList, SummaryTile, TableSection


class UIBackend(Protocol):
    """What a report renderer may ask of a backend."""

    def title(self, text: str) -> None:
        """Panel title."""

    def details(self, rows: KeyValueList) -> None:
        """Aligned label/value pairs."""

    def change(self, line: ChangeLine) -> None:
        """Card diff line."""

    def tiles(self, title: str, tiles: Sequence[SummaryTile]) -> None:
        """Benchmark summary cards."""

    def table(self, section: TableSection) -> None:
        """Titled table, or its empty message when it has no rows."""

    def style_state(self, text: str, state: Optional[str] = None) -> str:
        """Style `text` by `state`, or by the text itself when no state is given."""


def create_ui_backend(ctx: UIContext) -> UIBackend:
    """Instantiate the backend for the resolved mode; rich is imported lazily."""
    if ctx.effective_mode == UI_MODE_PLAIN:
        from panelkit.cli.ui.plain import PlainBackend

        return PlainBackend(enable_color=ctx.plain_color_enabled)
    if ctx.effective_mode == UI_MODE_RICH:
        from panelkit.cli.ui.rich_backend import RichBackend

        return RichBackend()
    raise ValueError(f"Unsupported UI mode: {ctx.effective_mode}")
