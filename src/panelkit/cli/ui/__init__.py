"""Terminal rendering for the panelkit CLI: mode resolution, backends and reports."""

from panelkit.cli.ui.backend import UIBackend, create_ui_backend
from panelkit.cli.ui.context import UIContext, UIResolutionError, resolve_ui_context
from panelkit.cli.ui.models import (
    BenchmarkReport,
    CardReport,
    ChangeLine,
    SummaryTile,
    TableSection,
)
from panelkit.cli.ui.reports import (
    build_benchmark_report,
    build_card_report,
    build_table_section,
    render_benchmark_report,
    render_card_report,
    summary_card_rows,
)

__all__ = [
    "BenchmarkReport",
    "CardReport",
    "ChangeLine",
    "SummaryTile",
    "TableSection",
    "UIBackend",
    "UIContext",
    "UIResolutionError",
    "build_benchmark_report",
    "build_card_report",
    "build_table_section",
    "create_ui_backend",
    "render_benchmark_report",
    "render_card_report",
    "resolve_ui_context",
    "summary_card_rows",
]
