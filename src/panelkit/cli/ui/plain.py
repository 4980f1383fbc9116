"""Plain-text backend; ANSI colors only when the context allows them."""

from __future__ import annotations

from typing import Optional, Sequence

from tabulate import tabulate

from panelkit.cli.ui.models import ChangeLine, KeyValueList, SummaryTile, TableSection


_ANSI_BY_STATE = {
    # card and summary types
    "ok": "32",
    "alert": "31",
    "severity": "1;31",
    "info": "36",
    # run states
    "complete": "32",
    "running": "33",
    "error": "31",
    # diff directions
    "up": "32",
    "down": "31",
}


class PlainBackend:
    """Renders reports as text, with tabulate for anything columnar."""

    def __init__(self, enable_color: bool = False, rule_width: int = 80):
        self.enable_color = enable_color
        self.rule_width = rule_width

    def title(self, text: str) -> None:
        print(text)
        print("=" * min(max(len(text), 1), self.rule_width))

    def details(self, rows: KeyValueList) -> None:
        if not rows:
            return
        labelled = [(f"{label}:", value) for label, value in rows]
        print(tabulate(labelled, tablefmt="plain", disable_numparse=True))

    def change(self, line: ChangeLine) -> None:
        print()
        print(f"Change: {self.style_state(line.text, line.direction)}")

    def tiles(self, title: str, tiles: Sequence[SummaryTile]) -> None:
        print()
        print(title)
        if not tiles:
            return
        rows = []
        for tile in tiles:
            share = "" if tile.share is None else f"{tile.share:.1f}%"
            rows.append((self.style_state(tile.label, tile.state), tile.value, share))
        # tabulate ignores ANSI escapes when measuring column widths
        print(tabulate(rows, tablefmt="plain", colalign=("left", "right", "right"), disable_numparse=True))

    def table(self, section: TableSection) -> None:
        print()
        print(section.title)
        print("-" * self.rule_width)
        if not section.rows:
            print(f"  {section.empty_message}")
            return
        rows = [
            [
                self.style_state(cell) if idx in section.state_columns else cell
                for idx, cell in enumerate(row)
            ]
            for row in section.rows
        ]
        print(tabulate(rows, headers=list(section.headers), tablefmt="simple", disable_numparse=True))

    def style_state(self, text: str, state: Optional[str] = None) -> str:
        if not self.enable_color:
            return text
        code = _ANSI_BY_STATE.get((state or text).strip().lower())
        if code is None:
            return text
        return f"\033[{code}m{text}\033[0m"
