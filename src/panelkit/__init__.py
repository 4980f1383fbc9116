"""
panelkit - derived panel state for dashboard query results.

A toolkit for turning raw query results into renderable panel state:
- Card state from simple or formal tabular results, with diff mode
- Benchmark summary cards rolled up from check grouping trees
- Snapshot stripping before export
"""

from panelkit._version import __version__

from panelkit.config import Config, get_config
from panelkit.tabular import TabularColumn, TabularDataError, TabularResult
from panelkit.cards import (
    CardDiffState,
    CardProperties,
    CardState,
    build_card_state,
    diff_card_states,
)
from panelkit.benchmark import (
    CheckNode,
    CheckSummary,
    GroupingContext,
    SummaryCard,
    build_summary_cards,
    render_benchmark,
)
from panelkit.snapshot import strip_snapshot_for_export

__all__ = [
    # Version
    "__version__",
    # Config
    "Config",
    "get_config",
    # Tabular results
    "TabularColumn",
    "TabularDataError",
    "TabularResult",
    # Cards
    "CardDiffState",
    "CardProperties",
    "CardState",
    "build_card_state",
    "diff_card_states",
    # Benchmarks
    "CheckNode",
    "CheckSummary",
    "GroupingContext",
    "SummaryCard",
    "build_summary_cards",
    "render_benchmark",
    # Snapshots
    "strip_snapshot_for_export",
]
