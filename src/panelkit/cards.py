"""
Card state derivation.

A card panel shows a single value with an optional label, icon, link and,
in diff mode, the change against a previously captured result. This module
turns a tabular result (plus the panel's configured properties) into a plain
CardState. Two encodings of the result are understood:

- simple: one column; its name is the label and the first row's cell is
  the value.
- formal: several columns; `label`, `value`, `type`, `icon` and `href` are
  read from the first row by name, each falling back to the panel
  properties.

Numeric values are shown with thousands grouping while the raw number is
kept in `value_number`, which is the only input to diffing.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from panelkit.tabular import (
    DATA_FORMAT_SIMPLE,
    TabularResult,
    detect_format,
    get_column,
    has_data,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Card types
CARD_TYPE_ALERT = "alert"
CARD_TYPE_INFO = "info"
CARD_TYPE_OK = "ok"
CARD_TYPE_TABLE = "table"
CARD_TYPES = (CARD_TYPE_ALERT, CARD_TYPE_INFO, CARD_TYPE_OK, CARD_TYPE_TABLE)

# Run states of the panel producing the data
RUN_STATE_INITIALIZED = "initialized"
RUN_STATE_BLOCKED = "blocked"
RUN_STATE_RUNNING = "running"
RUN_STATE_COMPLETE = "complete"
RUN_STATE_ERROR = "error"
RUN_STATES = (
    RUN_STATE_INITIALIZED,
    RUN_STATE_BLOCKED,
    RUN_STATE_RUNNING,
    RUN_STATE_COMPLETE,
    RUN_STATE_ERROR,
)

DATA_MODE_DIFF = "diff"

# Diff directions
DIRECTION_NONE = "none"
DIRECTION_UP = "up"
DIRECTION_DOWN = "down"

# Percent change reported when the current value is zero
PERCENT_INFINITY = "infinity"

_TYPE_ICONS = {
    CARD_TYPE_ALERT: "heroicons-solid:exclamation-circle",
    CARD_TYPE_OK: "heroicons-solid:check-circle",
    CARD_TYPE_INFO: "heroicons-solid:information-circle",
}


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class CardProperties:
    """Configured properties of a card panel."""

    label: Optional[str] = None
    value: Any = None
    icon: Optional[str] = None
    href: Optional[str] = None
    data_mode: Optional[str] = None
    diff_data: Optional[TabularResult] = None

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> "CardProperties":
        """Build properties from a mapping; `diff_data` is parsed as a tabular result."""
        payload = payload or {}
        diff_data = payload.get("diff_data")
        if diff_data is not None and not isinstance(diff_data, TabularResult):
            diff_data = TabularResult.from_dict(diff_data)
        return cls(
            label=payload.get("label"),
            value=payload.get("value"),
            icon=payload.get("icon"),
            href=payload.get("href"),
            data_mode=payload.get("data_mode"),
            diff_data=diff_data,
        )


@dataclass(frozen=True)
class CardDiffState:
    """Change of a card value against a prior result."""

    direction: str = DIRECTION_NONE
    value: Optional[float] = None
    value_percent: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"direction": self.direction}
        if self.value is not None:
            data["value"] = self.value
        if self.value_percent is not None:
            data["value_percent"] = self.value_percent
        return data


@dataclass(frozen=True)
class CardState:
    """Renderable state of a card panel."""

    loading: bool
    label: Optional[str]
    value: Any
    value_number: Optional[float]
    type: Optional[str]
    icon: Optional[str]
    href: Optional[str]
    diff: Optional[CardDiffState] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "loading": self.loading,
            "label": self.label,
            "value": self.value,
            "value_number": self.value_number,
            "type": self.type,
            "icon": self.icon,
            "href": self.href,
        }
        if self.diff is not None:
            data["diff"] = self.diff.to_dict()
        return data


# =============================================================================
# Value Helpers
# =============================================================================

def is_number(value: Any) -> bool:
    """True for real numbers; booleans and complex numbers do not count."""
    return isinstance(value, numbers.Number) and not isinstance(value, (bool, complex))


def format_number(value: Any) -> str:
    """
    Format a number for display with thousands grouping.

    Integers keep every digit; other numbers are rounded to at most three
    fraction digits with trailing zeros dropped.

    Example:
        >>> format_number(1234567)
        '1,234,567'
        >>> format_number(1234.5678)
        '1,234.568'
    """
    if isinstance(value, numbers.Integral):
        return f"{int(value):,}"
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "∞" if number > 0 else "-∞"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def resolve_first(*candidates: Any) -> Any:
    """
    Return the first candidate that is set.

    Candidates are checked in order; None and empty strings are skipped.
    Returns None when nothing is set.
    """
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str) and candidate == "":
            continue
        return candidate
    return None


def get_icon_for_type(card_type: Optional[str], icon: Optional[str]) -> Optional[str]:
    """
    Resolve the icon of a card.

    An explicit icon always wins over the default icon of the card type.
    """
    return resolve_first(icon, _TYPE_ICONS.get(card_type) if card_type else None)


def _display_value(value: Any, numeric: bool) -> Any:
    if value is None or not numeric:
        return value
    if is_number(value):
        return format_number(value)
    return str(value)


# =============================================================================
# State Derivation
# =============================================================================

def default_card_state(
    status: Optional[str],
    properties: CardProperties,
    display_type: Optional[str],
) -> CardState:
    """
    State of a card with no result data, built from its properties alone.

    Args:
        status: Run state of the panel; "running" marks the card as loading.
        properties: Configured card properties.
        display_type: Configured card type.

    Returns:
        CardState without diff.
    """
    value = properties.value
    numeric = is_number(value)
    return CardState(
        loading=status == RUN_STATE_RUNNING,
        label=properties.label or None,
        value=format_number(value) if numeric else (value or None),
        value_number=value if numeric else None,
        type=display_type or None,
        icon=get_icon_for_type(display_type, properties.icon),
        href=properties.href or None,
    )


def parse_data(
    data: TabularResult,
    display_type: Optional[str],
    properties: CardProperties,
) -> CardState:
    """
    Extract card state from a result that has data.

    Args:
        data: Tabular result with at least one column and one row.
        display_type: Configured card type.
        properties: Configured card properties used as fallbacks.

    Returns:
        CardState without diff.
    """
    row = data.rows[0]

    if detect_format(data) == DATA_FORMAT_SIMPLE:
        column = data.columns[0]
        numeric = column.is_numeric
        value = row.get(column.name)
        return CardState(
            loading=False,
            label=column.name,
            value=_display_value(value, numeric),
            value_number=value if numeric and is_number(value) else None,
            type=display_type or None,
            icon=get_icon_for_type(display_type, properties.icon),
            href=properties.href or None,
        )

    value, numeric = _resolve_formal_value(data, row, properties)
    card_type = resolve_first(row.get("type"), display_type)
    return CardState(
        loading=False,
        label=resolve_first(row.get("label"), properties.label),
        value=_display_value(value, numeric),
        value_number=value if numeric and is_number(value) else None,
        type=card_type,
        icon=get_icon_for_type(card_type, resolve_first(row.get("icon"), properties.icon)),
        href=resolve_first(row.get("href"), properties.href),
    )


def _resolve_formal_value(
    data: TabularResult,
    row: Mapping[str, Any],
    properties: CardProperties,
) -> Tuple[Any, bool]:
    # Row values are numeric by declared column type, property values by their own type.
    row_value = row.get("value")
    if row_value is not None:
        value_column = get_column(data.columns, "value")
        return row_value, value_column is not None and value_column.is_numeric
    return properties.value, is_number(properties.value)


def diff_card_states(current: CardState, previous: Optional[CardState]) -> CardDiffState:
    """
    Compute the change from a previous card state to the current one.

    The percentage is relative to the current value and always rounded up.
    A current value of zero yields the "infinity" sentinel.

    Args:
        current: State derived from the current result.
        previous: State derived from the prior result, if any.

    Returns:
        CardDiffState; direction "none" without magnitude when either side
        is not numeric.
    """
    if (
        previous is None
        or current.value_number is None
        or previous.value_number is None
    ):
        return CardDiffState(direction=DIRECTION_NONE)

    now = current.value_number
    before = previous.value_number

    if now > before:
        direction = DIRECTION_UP
        value = now - before
    elif now < before:
        direction = DIRECTION_DOWN
        value = before - now
    else:
        direction = DIRECTION_NONE
        value = 0

    if now == 0:
        value_percent: Any = PERCENT_INFINITY
    elif value == 0:
        value_percent = 0
    else:
        value_percent = math.ceil((value / now) * 100)

    return CardDiffState(direction=direction, value=value, value_percent=value_percent)


def build_card_state(
    data: Optional[TabularResult],
    display_type: Optional[str],
    properties: Optional[CardProperties],
    status: Optional[str],
) -> CardState:
    """
    Derive the renderable state of a card panel.

    Args:
        data: Current tabular result, or None when nothing has arrived.
        display_type: Configured card type (alert, info, ok, table).
        properties: Configured card properties.
        status: Run state of the panel.

    Returns:
        CardState, with a diff attached when the card is in diff mode and
        prior data is available.

    Example:
        >>> build_card_state(None, None, CardProperties(value=42), "running").value
        '42'
    """
    properties = properties or CardProperties()

    if not has_data(data):
        return default_card_state(status, properties, display_type)

    state = parse_data(data, display_type, properties)

    if properties.data_mode == DATA_MODE_DIFF and properties.diff_data is not None:
        previous = None
        if has_data(properties.diff_data):
            previous = parse_data(properties.diff_data, display_type, properties)
        state = replace(state, diff=diff_card_states(state, previous))

    logger.debug("Derived card state %s from properties %s", state, properties)
    return state
