"""Report builders and renderers for card and benchmark commands."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from panelkit.benchmark import (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    STATUS_CARD_SPECS,
    BenchmarkView,
    CheckNode,
    resolve_tree_grouping,
)
from panelkit.cards import (
    DIRECTION_DOWN,
    DIRECTION_NONE,
    DIRECTION_UP,
    PERCENT_INFINITY,
    CardDiffState,
    CardState,
    format_number,
)
from panelkit.cli.ui.backend import UIBackend
from panelkit.cli.ui.models import (
    BenchmarkReport,
    CardReport,
    ChangeLine,
    SummaryTile,
    TableSection,
)
from panelkit.tabular import TabularResult


TREE_HEADERS = ["Group", "Status", "OK", "Alarm", "Error", "Info", "Skipped", "Critical/High"]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _format_change(diff: CardDiffState) -> str:
    if diff.direction == DIRECTION_NONE:
        if diff.value is None:
            return "No comparable change"
        return "No change"

    arrow = "up" if diff.direction == DIRECTION_UP else "down"
    sign = "+" if diff.direction == DIRECTION_UP else "-"
    if diff.value_percent == PERCENT_INFINITY:
        percent = "∞%"
    else:
        percent = f"{sign}{diff.value_percent}%"
    return f"{arrow} {format_number(diff.value)} ({percent})"


def build_card_report(state: CardState) -> CardReport:
    """Build view-model for card output."""
    details = [
        ("Value", "-" if state.value is None else str(state.value)),
        ("Type", state.type or "-"),
        ("Icon", state.icon or "-"),
        ("Link", state.href or "-"),
    ]
    if state.loading:
        details.append(("Status", "loading"))

    change = None
    if state.diff is not None:
        direction = state.diff.direction
        change = ChangeLine(
            text=_format_change(state.diff),
            direction=direction if direction in (DIRECTION_UP, DIRECTION_DOWN) else None,
        )

    return CardReport(
        title=f"Card: {state.label}" if state.label else "Card",
        details=details,
        change=change,
    )


def _severity_total(node: CheckNode) -> Optional[int]:
    severity = node.severity_summary
    if SEVERITY_CRITICAL not in severity and SEVERITY_HIGH not in severity:
        return None
    return (severity.get(SEVERITY_CRITICAL) or 0) + (severity.get(SEVERITY_HIGH) or 0)


def _tree_rows(node: CheckNode, depth: int, rows: List[List[str]]) -> None:
    summary = node.summary
    rows.append(
        [
            f"{'  ' * depth}{node.title or node.name}",
            _cell(node.status),
            str(summary.ok),
            str(summary.alarm),
            str(summary.error),
            str(summary.info),
            str(summary.skip),
            _cell(_severity_total(node)),
        ]
    )
    for child in node.children:
        _tree_rows(child, depth + 1, rows)


def build_benchmark_report(view: BenchmarkView) -> BenchmarkReport:
    """Build view-model for benchmark output."""
    cards = view.summary_cards
    status_labels = {label for _, label, _, _ in STATUS_CARD_SPECS}
    total_checks = sum(
        card.properties.value for card in cards if card.properties.label in status_labels
    )
    tiles = []
    for card in cards:
        share = None
        if card.properties.label in status_labels and total_checks:
            share = card.properties.value / total_checks * 100
        tiles.append(
            SummaryTile(
                label=card.properties.label,
                value=str(card.properties.value),
                share=share,
                state=card.properties.type or None,
            )
        )

    tree = view.tree
    grouping = resolve_tree_grouping(tree)
    rows: List[List[str]] = []
    if grouping is not None:
        for child in grouping.children:
            _tree_rows(child, 0, rows)

    details = [("Panel", view.name)]
    if grouping is not None and grouping.status:
        details.append(("Status", grouping.status))
    if view.data is not None:
        details.append(("Result rows", str(len(view.data.rows))))

    return BenchmarkReport(
        title=view.title or view.name,
        details=details,
        tiles=tiles,
        tree=TableSection(
            title=f"Results ({len(rows)} groups):",
            headers=TREE_HEADERS,
            rows=rows,
            state_columns=(1,),
            empty_message="(no groups)",
        ),
    )


def build_table_section(title: str, data: Optional[TabularResult]) -> TableSection:
    """Build a table section straight from a tabular result."""
    if data is None:
        return TableSection(title=title, headers=[], rows=[], empty_message="(no data)")
    headers = [column.name for column in data.columns]
    rows = [[_cell(row.get(name)) for name in headers] for row in data.rows]
    return TableSection(title=title, headers=headers, rows=rows)


def render_card_report(report: CardReport, backend: UIBackend) -> None:
    """Render card report with selected backend."""
    backend.title(report.title)
    backend.details(report.details)
    if report.change is not None:
        backend.change(report.change)


def render_benchmark_report(report: BenchmarkReport, backend: UIBackend) -> None:
    """Render benchmark report with selected backend."""
    backend.title(report.title)
    backend.details(report.details)
    backend.tiles("Summary:", report.tiles)
    backend.table(report.tree)


def summary_card_rows(view: BenchmarkView) -> Sequence[dict]:
    """Flat records of the summary cards, for CSV output."""
    return [
        {
            "name": card.name,
            "label": card.properties.label,
            "value": card.properties.value,
            "type": card.properties.type,
            "icon": card.properties.icon,
        }
        for card in view.summary_cards
    ]
