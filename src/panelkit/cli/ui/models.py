"""View models handed from report builders to UI backends."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple


KeyValueList = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class SummaryTile:
    """One benchmark summary card as shown in the terminal.

    `share` is the tile's percentage of all checks, when that makes sense.
    `state` is the card type (ok, alert, info, severity) used for styling.
    """

    label: str
    value: str
    share: Optional[float] = None
    state: Optional[str] = None


@dataclass(frozen=True)
class ChangeLine:
    """Rendered card diff, styled by its direction."""

    text: str
    direction: Optional[str] = None


@dataclass(frozen=True)
class TableSection:
    title: str
    headers: Sequence[str]
    rows: Sequence[Sequence[str]]
    state_columns: Sequence[int] = field(default_factory=tuple)
    empty_message: str = "(no rows)"


@dataclass(frozen=True)
class CardReport:
    """View model for `card` table output."""

    title: str
    details: KeyValueList
    change: Optional[ChangeLine] = None


@dataclass(frozen=True)
class BenchmarkReport:
    """View model for `benchmark` table output."""

    title: str
    details: KeyValueList
    tiles: Sequence[SummaryTile]
    tree: TableSection
