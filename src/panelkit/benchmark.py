"""
Benchmark aggregation.

A benchmark groups checks (and sub-benchmarks) into a tree built by an
external grouping step. Each node carries its own run status, a severity
summary and a status summary (error/alarm/ok/info/skip counts). This module
rolls the immediate children's summaries up into summary cards, composes
the benchmark panel layout around them, and dispatches on the root
benchmark type to decide between the full benchmark view, a plain table
view, or an error view.

Only one level is summed here: every node is responsible for its own
children when the tree renderer recurses.
"""

from __future__ import annotations

import functools
import logging
import operator
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from panelkit.tabular import TabularResult


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

STATUS_RUNNING = "running"
STATUS_COMPLETE = "complete"

BENCHMARK_TYPE_BENCHMARK = "benchmark"
BENCHMARK_TYPE_TABLE = "table"

SEVERITY_CRITICAL = "critical"
SEVERITY_HIGH = "high"

# Semantic styling types of summary cards
SUMMARY_TYPE_OK = "ok"
SUMMARY_TYPE_ALERT = "alert"
SUMMARY_TYPE_INFO = "info"
SUMMARY_TYPE_SEVERITY = "severity"

DEFAULT_CARD_WIDTH = 2

# (category, label, icon, type when count > 0), in display order
STATUS_CARD_SPECS = (
    ("ok", "OK", "heroicons-solid:check-circle", SUMMARY_TYPE_OK),
    ("alarm", "Alarm", "heroicons-solid:bell", SUMMARY_TYPE_ALERT),
    ("error", "Error", "heroicons-solid:exclamation-circle", SUMMARY_TYPE_ALERT),
    ("info", "Info", "heroicons-solid:information-circle", SUMMARY_TYPE_INFO),
    ("skip", "Skipped", "heroicons-solid:arrow-circle-right", None),
)
SEVERITY_CARD_LABEL = "Critical / High"
SEVERITY_CARD_ICON = "heroicons-solid:exclamation"


# =============================================================================
# Grouping Tree
# =============================================================================

@dataclass(frozen=True)
class CheckSummary:
    """Status counts of a node in the grouping tree."""

    error: int = 0
    alarm: int = 0
    ok: int = 0
    info: int = 0
    skip: int = 0

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "CheckSummary":
        """
        Build counts from a mapping; missing or null counts are 0.

        Raises:
            ValueError: If the payload is not a mapping or a count is not a number.
        """
        payload = payload or {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"Check summary must be a mapping, got {type(payload).__name__}")
        counts = {}
        for f in fields(cls):
            raw = payload.get(f.name) or 0
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"Check summary count '{f.name}' must be a number, got {raw!r}")
            counts[f.name] = int(raw)
        return cls(**counts)

    def __add__(self, other: "CheckSummary") -> "CheckSummary":
        if not isinstance(other, CheckSummary):
            return NotImplemented
        return CheckSummary(**{
            f.name: getattr(self, f.name) + getattr(other, f.name)
            for f in fields(self)
        })

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class CheckNode:
    """
    A node of the check grouping tree.

    `severity_summary` keeps keys exactly as supplied: a key mapped to None
    is present, which is different from a missing key.
    """

    name: str
    title: Optional[str] = None
    status: Optional[str] = None
    severity_summary: Dict[str, Optional[int]] = field(default_factory=dict)
    summary: CheckSummary = field(default_factory=CheckSummary)
    children: List["CheckNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CheckNode":
        """
        Build a node (and its subtree) from a mapping.

        Raises:
            ValueError: If the payload is not a mapping, lacks a name, or has
                wrongly shaped summaries or children.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Grouping node must be a mapping, got {type(payload).__name__}")
        if not payload.get("name"):
            raise ValueError("Grouping node is missing a 'name'")

        severity_summary = payload.get("severity_summary") or {}
        if not isinstance(severity_summary, Mapping):
            raise ValueError(f"severity_summary of '{payload['name']}' must be a mapping")
        for key, value in severity_summary.items():
            if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
                raise ValueError(
                    f"severity_summary '{key}' of '{payload['name']}' must be a number, got {value!r}"
                )

        children = payload.get("children") or []
        if not isinstance(children, list):
            raise ValueError(f"children of '{payload['name']}' must be a list")

        return cls(
            name=str(payload["name"]),
            title=payload.get("title"),
            status=payload.get("status"),
            severity_summary=dict(severity_summary),
            summary=CheckSummary.from_dict(payload.get("summary")),
            children=[cls.from_dict(child) for child in children],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "title": self.title,
            "status": self.status,
            "severity_summary": dict(self.severity_summary),
            "summary": self.summary.to_dict(),
            "children": [child.to_dict() for child in self.children],
        }


def first_child_summaries(node: Optional[CheckNode]) -> List[CheckSummary]:
    """Return the status summaries of a node's immediate children."""
    if node is None:
        return []
    return [child.summary for child in node.children]


def sum_summaries(summaries: Sequence[CheckSummary]) -> CheckSummary:
    """Field-wise total of status summaries; an empty list gives all zeros."""
    return functools.reduce(operator.add, summaries, CheckSummary())


# =============================================================================
# Summary Cards
# =============================================================================

@dataclass(frozen=True)
class SummaryCardProperties:
    """
    Presentation properties of a summary card.

    `type` is None for an inactive status card but "" for an inactive
    severity card.
    """

    label: str
    value: int
    icon: str
    type: Optional[str] = None


@dataclass(frozen=True)
class SummaryCard:
    """A card descriptor in the benchmark summary row."""

    name: str
    width: int
    properties: SummaryCardProperties
    node_type: str = "card"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_type": self.node_type,
            "name": self.name,
            "width": self.width,
            "properties": {
                "label": self.properties.label,
                "value": self.properties.value,
                "type": self.properties.type,
                "icon": self.properties.icon,
            },
        }


def summary_card_name(parent_name: str, category: str, count: int) -> str:
    """Card identity; it changes with the count so the card re-renders."""
    return f"{parent_name}.container.summary.{category}-{count}"


def build_severity_card(
    parent_name: str,
    severity_summary: Optional[Mapping[str, Optional[int]]],
    width: int = DEFAULT_CARD_WIDTH,
) -> Optional[SummaryCard]:
    """
    Build the combined critical/high card.

    The card exists when either key is present, whatever its value.
    """
    severity_summary = severity_summary or {}
    if SEVERITY_CRITICAL not in severity_summary and SEVERITY_HIGH not in severity_summary:
        return None

    critical = severity_summary.get(SEVERITY_CRITICAL) or 0
    high = severity_summary.get(SEVERITY_HIGH) or 0
    total = critical + high
    return SummaryCard(
        name=summary_card_name(parent_name, "severity", total),
        width=width,
        properties=SummaryCardProperties(
            label=SEVERITY_CARD_LABEL,
            value=total,
            icon=SEVERITY_CARD_ICON,
            type=SUMMARY_TYPE_SEVERITY if total > 0 else "",
        ),
    )


def build_summary_cards(
    parent_name: str,
    node: Optional[CheckNode],
    summaries: Sequence[CheckSummary],
    width: int = DEFAULT_CARD_WIDTH,
) -> List[SummaryCard]:
    """
    Build the summary cards of a benchmark node.

    Args:
        parent_name: Name of the benchmark panel; prefixes every card name.
        node: Root grouping node, read for its severity summary.
        summaries: Status summaries of the node's immediate children.
        width: Width hint of each card.

    Returns:
        Five status cards (ok, alarm, error, info, skip) plus a critical/high
        card when the node reports either severity; empty when node is None.
    """
    if node is None:
        return []

    total = sum_summaries(summaries)
    cards = []
    for category, label, icon, active_type in STATUS_CARD_SPECS:
        count = getattr(total, category)
        cards.append(
            SummaryCard(
                name=summary_card_name(parent_name, category, count),
                width=width,
                properties=SummaryCardProperties(
                    label=label,
                    value=count,
                    icon=icon,
                    type=active_type if count > 0 else None,
                ),
            )
        )

    severity_card = build_severity_card(parent_name, node.severity_summary, width)
    if severity_card is not None:
        cards.append(severity_card)
    return cards


# =============================================================================
# Panel Layout
# =============================================================================

@dataclass(frozen=True)
class PanelDefinition:
    """Definition of the benchmark panel being rendered."""

    name: str
    title: Optional[str] = None
    width: Optional[int] = None


@dataclass(frozen=True)
class DashboardInfo:
    """What the layout needs to know about the hosting dashboard."""

    artificial: bool = False
    selected_title: Optional[str] = None


@dataclass(frozen=True)
class Benchmark:
    """A benchmark with its optional type discriminator and result table."""

    name: str
    title: Optional[str] = None
    type: Optional[str] = None
    data_table: Optional[TabularResult] = None

    def get_data_table(self) -> Optional[TabularResult]:
        return self.data_table


@dataclass(frozen=True)
class BenchmarkTitle:
    """Title block shown above the summary row."""

    name: str
    title: Optional[str]
    status: Optional[str]
    artificial: bool
    with_padding: bool
    node_type: str = "benchmark_title"

    @property
    def heading_level(self) -> str:
        return "h1" if self.artificial else "h2"

    @property
    def loading(self) -> bool:
        return self.status == STATUS_RUNNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "node_type": self.node_type,
            "title": self.title,
            "with_padding": self.with_padding,
            "properties": {"status": self.status, "artificial": self.artificial},
        }


@dataclass(frozen=True)
class BenchmarkTree:
    """Hand-off to the tree renderer, which recurses through the grouping."""

    name: str
    grouping: CheckNode
    first_child_summaries: Optional[Sequence[CheckSummary]]
    node_type: str = "benchmark_tree"

    def to_dict(self) -> Dict[str, Any]:
        summaries = self.first_child_summaries
        return {
            "name": self.name,
            "node_type": self.node_type,
            "properties": {
                "grouping": self.grouping.to_dict(),
                "first_child_summaries": (
                    None if summaries is None else [s.to_dict() for s in summaries]
                ),
            },
        }


@dataclass(frozen=True)
class LayoutContainer:
    """A container row of the benchmark layout."""

    name: str
    children: Sequence[Union[SummaryCard, BenchmarkTree]]
    with_padding: bool
    node_type: str = "container"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "node_type": self.node_type,
            "with_padding": self.with_padding,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class BenchmarkView:
    """Full benchmark rendering: optional title, summary row and tree."""

    name: str
    width: Optional[int]
    title: Optional[str]
    with_title: bool
    children: Sequence[Union[BenchmarkTitle, LayoutContainer]]
    data: Optional[TabularResult] = None
    node_type: str = "benchmark"

    @property
    def summary_cards(self) -> List[SummaryCard]:
        for child in self.children:
            if isinstance(child, LayoutContainer) and child.name.endswith(".container.summary"):
                return [card for card in child.children if isinstance(card, SummaryCard)]
        return []

    @property
    def tree(self) -> Optional[BenchmarkTree]:
        for child in self.children:
            if isinstance(child, LayoutContainer):
                for node in child.children:
                    if isinstance(node, BenchmarkTree):
                        return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "node_type": self.node_type,
            "width": self.width,
            "title": self.title,
            "with_title": self.with_title,
            "children": [child.to_dict() for child in self.children],
            "data": self.data.to_dict() if self.data is not None else None,
        }


@dataclass(frozen=True)
class TableView:
    """Benchmark shown as its raw result table."""

    name: str
    width: Optional[int]
    data: Optional[TabularResult]
    node_type: str = "table"

    @property
    def ready(self) -> bool:
        return self.data is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "node_type": self.node_type,
            "width": self.width,
            "data": self.data.to_dict() if self.data is not None else None,
        }


@dataclass(frozen=True)
class ErrorView:
    """Terminal error panel for a benchmark that cannot be rendered."""

    name: str
    width: Optional[int]
    error: str
    node_type: str = "benchmark"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "node_type": self.node_type,
            "width": self.width,
            "error": self.error,
        }


def build_benchmark_layout(
    definition: PanelDefinition,
    grouping: Optional[CheckNode],
    summaries: Sequence[CheckSummary],
    benchmark: Optional[Benchmark] = None,
    dashboard: Optional[DashboardInfo] = None,
    expanded: bool = False,
    with_title: bool = False,
    card_width: int = DEFAULT_CARD_WIDTH,
) -> Optional[BenchmarkView]:
    """
    Compose the benchmark panel: title, summary cards and result tree.

    Args:
        definition: Panel definition; its name prefixes every child name.
        grouping: Root of the grouping tree. None renders nothing.
        summaries: Status summaries of the root's immediate children.
        benchmark: Benchmark whose data table backs the panel.
        dashboard: Hosting dashboard details.
        expanded: True when the panel is shown expanded; drops the title block.
        with_title: Passed through to the panel container.
        card_width: Width hint of each summary card.

    Returns:
        BenchmarkView, or None when there is no grouping.
    """
    if grouping is None:
        return None

    dashboard = dashboard or DashboardInfo()
    with_padding = not expanded and dashboard.artificial
    name = definition.name

    children: List[Union[BenchmarkTitle, LayoutContainer]] = []
    if not expanded:
        children.append(
            BenchmarkTitle(
                name=f"{name}.container.title",
                title=dashboard.selected_title if dashboard.artificial else definition.title,
                status=grouping.status,
                artificial=dashboard.artificial,
                with_padding=with_padding,
            )
        )

    children.append(
        LayoutContainer(
            name=f"{name}.container.summary",
            children=build_summary_cards(name, grouping, summaries, card_width),
            with_padding=with_padding,
        )
    )
    children.append(
        LayoutContainer(
            name=f"{name}.container.tree",
            children=[
                BenchmarkTree(
                    name=f"{name}.container.tree.results",
                    grouping=grouping,
                    first_child_summaries=list(summaries),
                )
            ],
            with_padding=with_padding,
        )
    )

    data = None
    if benchmark is not None and grouping.status == STATUS_COMPLETE:
        data = benchmark.get_data_table()

    return BenchmarkView(
        name=name,
        width=definition.width,
        title=definition.title or dashboard.selected_title,
        with_title=with_title,
        children=children,
        data=data,
    )


def resolve_tree_grouping(tree: Optional[BenchmarkTree]) -> Optional[CheckNode]:
    """Grouping the tree renderer should recurse into, or None when it has nothing to show."""
    if tree is None or tree.first_child_summaries is None:
        return None
    return tree.grouping


# =============================================================================
# Dispatch
# =============================================================================

@dataclass
class GroupingContext:
    """Everything the grouping step hands to the benchmark panel."""

    definition: PanelDefinition
    benchmark: Optional[Benchmark] = None
    root_benchmark: Optional[Benchmark] = None
    grouping: Optional[CheckNode] = None
    first_child_summaries: List[CheckSummary] = field(default_factory=list)
    dashboard: Optional[DashboardInfo] = None

    @classmethod
    def from_dict(
        cls,
        payload: Mapping[str, Any],
        definition: Optional[PanelDefinition] = None,
    ) -> "GroupingContext":
        """
        Build a context from a mapping with `benchmark`, `grouping`,
        `first_child_summaries` and `dashboard` keys.

        When `first_child_summaries` is missing, the summaries of the
        grouping's immediate children are used. When no definition is
        given, one is derived from the benchmark name and title.

        Raises:
            ValueError: If the payload is malformed.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Benchmark payload must be a mapping, got {type(payload).__name__}")

        benchmark = None
        raw_benchmark = payload.get("benchmark")
        if raw_benchmark is not None:
            if not isinstance(raw_benchmark, Mapping) or not raw_benchmark.get("name"):
                raise ValueError("Benchmark is missing a 'name'")
            raw_table = raw_benchmark.get("data")
            benchmark = Benchmark(
                name=str(raw_benchmark["name"]),
                title=raw_benchmark.get("title"),
                type=raw_benchmark.get("type"),
                data_table=TabularResult.from_dict(raw_table) if raw_table is not None else None,
            )

        grouping = None
        if payload.get("grouping") is not None:
            grouping = CheckNode.from_dict(payload["grouping"])

        raw_summaries = payload.get("first_child_summaries")
        if raw_summaries is None:
            summaries = first_child_summaries(grouping)
        elif isinstance(raw_summaries, list):
            summaries = [CheckSummary.from_dict(item) for item in raw_summaries]
        else:
            raise ValueError("first_child_summaries must be a list")

        raw_dashboard = payload.get("dashboard") or {}
        if not isinstance(raw_dashboard, Mapping):
            raise ValueError(f"dashboard must be a mapping, got {type(raw_dashboard).__name__}")
        dashboard = DashboardInfo(
            artificial=bool(raw_dashboard.get("artificial", False)),
            selected_title=raw_dashboard.get("title"),
        )

        if definition is None:
            definition = PanelDefinition(
                name=benchmark.name if benchmark else "benchmark",
                title=benchmark.title if benchmark else None,
            )

        return cls(
            definition=definition,
            benchmark=benchmark,
            root_benchmark=benchmark,
            grouping=grouping,
            first_child_summaries=summaries,
            dashboard=dashboard,
        )


def render_benchmark(
    context: GroupingContext,
    expanded: bool = False,
    with_title: bool = False,
    card_width: int = DEFAULT_CARD_WIDTH,
) -> Optional[Union[BenchmarkView, TableView, ErrorView]]:
    """
    Choose how to render a benchmark panel from the root benchmark type.

    Args:
        context: Grouping context of the panel.
        expanded: True when the panel is shown expanded.
        with_title: Passed through to the panel container.
        card_width: Width hint of each summary card.

    Returns:
        BenchmarkView for an untyped or "benchmark" root, TableView for a
        "table" root, ErrorView for any other type, and None when the
        benchmark, grouping or root benchmark is missing.
    """
    if context.benchmark is None or context.grouping is None or context.root_benchmark is None:
        return None

    definition = context.definition
    benchmark_type = context.root_benchmark.type

    if not benchmark_type or benchmark_type == BENCHMARK_TYPE_BENCHMARK:
        return build_benchmark_layout(
            definition,
            context.grouping,
            context.first_child_summaries,
            benchmark=context.benchmark,
            dashboard=context.dashboard,
            expanded=expanded,
            with_title=with_title,
            card_width=card_width,
        )

    if benchmark_type == BENCHMARK_TYPE_TABLE:
        return TableView(
            name=definition.name,
            width=definition.width,
            data=context.benchmark.get_data_table(),
        )

    logger.warning("Unsupported benchmark type %r for %s", benchmark_type, definition.name)
    return ErrorView(
        name=definition.name,
        width=definition.width,
        error=f"Unsupported benchmark type {benchmark_type}",
    )
