"""Rich backend for interactive terminals."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from panelkit.cli.ui.models import ChangeLine, KeyValueList, SummaryTile, TableSection


_RICH_STYLE_BY_STATE = {
    "ok": "bold green",
    "alert": "bold red",
    "severity": "bold magenta",
    "info": "bold cyan",
    "complete": "green",
    "running": "bold yellow",
    "error": "bold red",
    "up": "green",
    "down": "red",
}


class RichBackend:
    """Draws summary cards as bordered tiles and tables with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def title(self, text: str) -> None:
        self.console.rule(f"[bold]{text}[/bold]", align="left", style="cyan")

    def details(self, rows: KeyValueList) -> None:
        if not rows:
            return
        grid = Table.grid(padding=(0, 2))
        grid.add_column(style="bold cyan", no_wrap=True)
        grid.add_column()
        for label, value in rows:
            grid.add_row(label, value)
        self.console.print(grid)

    def change(self, line: ChangeLine) -> None:
        self.console.print()
        self.console.print(f"Change: {self.style_state(line.text, line.direction)}")

    def tiles(self, title: str, tiles: Sequence[SummaryTile]) -> None:
        self.console.print()
        self.console.print(f"[bold]{title}[/bold]")
        if not tiles:
            return
        panels = []
        for tile in tiles:
            body = f"[bold]{tile.value}[/bold]"
            if tile.share is not None:
                body += f" [dim]{tile.share:.1f}%[/dim]"
            panels.append(
                Panel(
                    f"{body}\n{tile.label}",
                    border_style=_RICH_STYLE_BY_STATE.get(tile.state or "", "grey42"),
                    expand=False,
                )
            )
        self.console.print(Columns(panels))

    def table(self, section: TableSection) -> None:
        self.console.print()
        if not section.rows:
            self.console.print(f"[bold]{section.title}[/bold]")
            self.console.print(f"  {section.empty_message}")
            return

        table = Table(title=section.title, title_justify="left", header_style="bold cyan")
        for header in section.headers:
            table.add_column(header, overflow="fold")
        for row in section.rows:
            table.add_row(
                *(
                    self.style_state(cell) if idx in section.state_columns else cell
                    for idx, cell in enumerate(row)
                )
            )
        self.console.print(table)

    def style_state(self, text: str, state: Optional[str] = None) -> str:
        style = _RICH_STYLE_BY_STATE.get((state or text).strip().lower())
        if style is None:
            return text
        return f"[{style}]{text}[/{style}]"
