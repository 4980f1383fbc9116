"""Tests for panelkit.cards module."""

import pytest

from panelkit.cards import (
    PERCENT_INFINITY,
    CardDiffState,
    CardProperties,
    CardState,
    build_card_state,
    diff_card_states,
    format_number,
    get_icon_for_type,
    is_number,
    parse_data,
    resolve_first,
)
from panelkit.tabular import TabularResult


def simple_result(value, data_type="INT8", name="Total"):
    return TabularResult.from_dict({
        "columns": [{"name": name, "data_type": data_type}],
        "rows": [{name: value}],
    })


def formal_result(row, value_type="INT8"):
    columns = [{"name": "label", "data_type": "TEXT"}, {"name": "value", "data_type": value_type}]
    for extra in ("type", "icon", "href"):
        if extra in row:
            columns.append({"name": extra, "data_type": "TEXT"})
    return TabularResult.from_dict({"columns": columns, "rows": [row]})


def _state(value_number):
    return CardState(
        loading=False,
        label="x",
        value=None,
        value_number=value_number,
        type=None,
        icon=None,
        href=None,
    )


class TestValueHelpers:
    """Tests for number detection, formatting and fallback resolution."""

    def test_is_number(self):
        """Booleans are not numbers even though they subclass int."""
        assert is_number(3)
        assert is_number(2.5)
        assert not is_number(True)
        assert not is_number("3")
        assert not is_number(None)

    @pytest.mark.parametrize(
        "value,expected",
        [
            (42, "42"),
            (1234567, "1,234,567"),
            (-1234, "-1,234"),
            (1234.5678, "1,234.568"),
            (1.5, "1.5"),
            (1000.0, "1,000"),
            (0, "0"),
            (float("nan"), "NaN"),
            (float("inf"), "∞"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_resolve_first_skips_unset(self):
        """None and empty strings are skipped; zero counts as set."""
        assert resolve_first(None, "", "a", "b") == "a"
        assert resolve_first(None, 0, 1) == 0
        assert resolve_first(None, "") is None

    def test_icon_override_wins(self):
        """An explicit icon beats the type's default icon."""
        assert get_icon_for_type("alert", "custom:icon") == "custom:icon"
        assert get_icon_for_type(None, "custom:icon") == "custom:icon"

    def test_icon_from_type(self):
        """Known types have default icons; others have none."""
        assert get_icon_for_type("alert", None) == "heroicons-solid:exclamation-circle"
        assert get_icon_for_type("ok", None) == "heroicons-solid:check-circle"
        assert get_icon_for_type("info", None) == "heroicons-solid:information-circle"
        assert get_icon_for_type("table", None) is None
        assert get_icon_for_type(None, None) is None


class TestDefaultState:
    """Tests for cards without result data."""

    def test_running_with_numeric_property_value(self):
        """No data, running, value 42 -> loading with formatted value."""
        state = build_card_state(None, None, CardProperties(value=42), "running")
        assert state.loading is True
        assert state.value == "42"
        assert state.value_number == 42
        assert state.diff is None

    def test_not_loading_when_complete(self):
        """Only the running state marks the card as loading."""
        state = build_card_state(None, None, CardProperties(value=42), "complete")
        assert state.loading is False

    def test_text_value_passes_through(self):
        """Non-numeric property values are shown as is."""
        state = build_card_state(None, "info", CardProperties(label="Status", value="green"), "complete")
        assert state.label == "Status"
        assert state.value == "green"
        assert state.value_number is None
        assert state.type == "info"
        assert state.icon == "heroicons-solid:information-circle"

    def test_empty_properties(self):
        """Missing properties collapse to None."""
        state = build_card_state(None, None, CardProperties(label="", href=""), None)
        assert state.label is None
        assert state.value is None
        assert state.href is None
        assert state.type is None
        assert state.icon is None

    def test_result_without_rows_is_absent(self):
        """A result with columns but no rows falls back to properties."""
        empty = TabularResult.from_dict({"columns": [{"name": "a", "data_type": "INT8"}], "rows": []})
        state = build_card_state(empty, None, CardProperties(label="Fallback"), "complete")
        assert state.label == "Fallback"
        assert state.value is None

    def test_properties_default_when_none(self):
        """Properties may be omitted entirely."""
        state = build_card_state(None, "ok", None, "complete")
        assert state.icon == "heroicons-solid:check-circle"


class TestSimpleFormat:
    """Tests for single-column results."""

    def test_numeric_value(self):
        """The column name is the label and the value is grouped."""
        state = build_card_state(simple_result(1234567), None, CardProperties(), "complete")
        assert state.label == "Total"
        assert state.value == "1,234,567"
        assert state.value_number == 1234567
        assert state.loading is False

    def test_numeric_value_is_not_rounded(self):
        """value_number keeps the raw number."""
        state = build_card_state(simple_result(1234.56789, "FLOAT8"), None, CardProperties(), "complete")
        assert state.value == "1,234.568"
        assert state.value_number == 1234.56789

    def test_numeric_by_declared_type_only(self):
        """A number in a text column is not treated as numeric."""
        state = build_card_state(simple_result(42, "TEXT"), None, CardProperties(), "complete")
        assert state.value == 42
        assert state.value_number is None

    def test_null_value(self):
        """A null cell stays null."""
        state = build_card_state(simple_result(None), None, CardProperties(), "complete")
        assert state.value is None
        assert state.value_number is None

    def test_type_icon_href_from_properties(self):
        """Simple results have no type/icon/href columns."""
        state = build_card_state(
            simple_result(3),
            "alert",
            CardProperties(href="https://example.com/x"),
            "complete",
        )
        assert state.type == "alert"
        assert state.icon == "heroicons-solid:exclamation-circle"
        assert state.href == "https://example.com/x"

    def test_loading_ignored_once_data_arrives(self):
        """Data present means not loading, even while running."""
        state = build_card_state(simple_result(3), None, CardProperties(), "running")
        assert state.loading is False


class TestFormalFormat:
    """Tests for named-column results."""

    def test_reads_named_columns(self):
        """label/value/type are read from the first row."""
        state = build_card_state(
            formal_result({"label": "Users", "value": 1500, "type": "ok"}),
            "alert",
            CardProperties(),
            "complete",
        )
        assert state.label == "Users"
        assert state.value == "1,500"
        assert state.value_number == 1500
        assert state.type == "ok"
        assert state.icon == "heroicons-solid:check-circle"

    def test_row_icon_and_href_win(self):
        """Row icon and href take precedence over properties."""
        state = build_card_state(
            formal_result({"label": "A", "value": 1, "icon": "row:icon", "href": "/row"}),
            None,
            CardProperties(icon="prop:icon", href="/prop"),
            "complete",
        )
        assert state.icon == "row:icon"
        assert state.href == "/row"

    def test_falls_back_to_properties(self):
        """Missing row fields fall back to properties and display type."""
        data = TabularResult.from_dict({
            "columns": [{"name": "value", "data_type": "INT8"}, {"name": "extra", "data_type": "TEXT"}],
            "rows": [{"value": 5, "extra": "x"}],
        })
        state = build_card_state(
            data,
            "info",
            CardProperties(label="Fallback", icon="prop:icon", href="https://example.com"),
            "complete",
        )
        assert state.label == "Fallback"
        assert state.value == "5"
        assert state.type == "info"
        assert state.icon == "prop:icon"
        assert state.href == "https://example.com"

    def test_value_falls_back_to_property_value(self):
        """A missing value cell uses the configured value."""
        state = build_card_state(
            formal_result({"label": "A", "value": None}),
            None,
            CardProperties(value=2500),
            "complete",
        )
        assert state.value == "2,500"
        assert state.value_number == 2500

    def test_zero_is_numeric(self):
        """Zero is a real value, not a missing one."""
        state = build_card_state(formal_result({"label": "A", "value": 0}), None, CardProperties(), "complete")
        assert state.value == "0"
        assert state.value_number == 0

    def test_value_column_type_decides_numeric(self):
        """A text value column leaves the value unformatted."""
        state = build_card_state(
            formal_result({"label": "A", "value": 1234}, value_type="TEXT"),
            None,
            CardProperties(),
            "complete",
        )
        assert state.value == 1234
        assert state.value_number is None

    def test_numeric_column_with_text_cell(self):
        """A text cell in a numeric column is shown but not diffable."""
        state = parse_data(formal_result({"label": "A", "value": "12"}), None, CardProperties())
        assert state.value == "12"
        assert state.value_number is None


class TestDiff:
    """Tests for diff_card_states and diff mode."""

    def test_up(self):
        """101 vs 100: up by 1, ceil(100/101) = 1 percent."""
        diff = diff_card_states(_state(101), _state(100))
        assert diff == CardDiffState(direction="up", value=1, value_percent=1)

    def test_down(self):
        """100 vs 101: down by 1 percent of the current value."""
        diff = diff_card_states(_state(100), _state(101))
        assert diff.direction == "down"
        assert diff.value == 1
        assert diff.value_percent == 1

    def test_percent_rounds_up(self):
        """2/3 of the current value rounds up to 67 percent."""
        diff = diff_card_states(_state(3), _state(1))
        assert diff.direction == "up"
        assert diff.value == 2
        assert diff.value_percent == 67

    def test_percent_relative_to_current(self):
        """The percentage divides by the current value, not the prior one."""
        diff = diff_card_states(_state(200), _state(100))
        assert diff.value_percent == 50

    def test_equal_values(self):
        """Equal values have no direction and zero magnitude."""
        diff = diff_card_states(_state(50), _state(50))
        assert diff == CardDiffState(direction="none", value=0, value_percent=0)

    def test_current_zero_is_infinity(self):
        """A current value of zero reports the infinity sentinel."""
        diff = diff_card_states(_state(0), _state(10))
        assert diff.direction == "down"
        assert diff.value == 10
        assert diff.value_percent == PERCENT_INFINITY

    def test_both_zero_is_infinity(self):
        """The zero-current rule applies before the zero-magnitude rule."""
        diff = diff_card_states(_state(0), _state(0))
        assert diff.direction == "none"
        assert diff.value == 0
        assert diff.value_percent == "infinity"

    @pytest.mark.parametrize("current,previous", [(None, 1), (1, None), (None, None)])
    def test_non_numeric_collapses(self, current, previous):
        """Without two numbers there is only a direction of none."""
        diff = diff_card_states(_state(current), _state(previous))
        assert diff.to_dict() == {"direction": "none"}

    def test_missing_previous_collapses(self):
        diff = diff_card_states(_state(1), None)
        assert diff.to_dict() == {"direction": "none"}

    def test_diff_mode_attaches_diff(self):
        """diff_data is parsed with the same format rules."""
        properties = CardProperties(data_mode="diff", diff_data=simple_result(100))
        state = build_card_state(simple_result(101), None, properties, "complete")
        assert state.diff == CardDiffState(direction="up", value=1, value_percent=1)
        assert state.to_dict()["diff"] == {"direction": "up", "value": 1, "value_percent": 1}

    def test_diff_data_format_detected_independently(self):
        """A formal prior result can be compared to a simple current one."""
        properties = CardProperties(
            data_mode="diff",
            diff_data=formal_result({"label": "Before", "value": 40}),
        )
        state = build_card_state(simple_result(50), None, properties, "complete")
        assert state.diff.direction == "up"
        assert state.diff.value == 10
        assert state.diff.value_percent == 20

    def test_diff_ignored_without_diff_mode(self):
        """Prior data alone does not enable diffing."""
        properties = CardProperties(diff_data=simple_result(100))
        state = build_card_state(simple_result(101), None, properties, "complete")
        assert state.diff is None
        assert "diff" not in state.to_dict()

    def test_empty_diff_data_collapses(self):
        """Prior data without rows gives a direction of none."""
        empty = TabularResult.from_dict({"columns": [{"name": "Total", "data_type": "INT8"}], "rows": []})
        properties = CardProperties(data_mode="diff", diff_data=empty)
        state = build_card_state(simple_result(5), None, properties, "complete")
        assert state.diff.to_dict() == {"direction": "none"}

    def test_non_numeric_prior(self):
        """A text prior value cannot be diffed."""
        properties = CardProperties(data_mode="diff", diff_data=simple_result("n/a", "TEXT"))
        state = build_card_state(simple_result(5), None, properties, "complete")
        assert state.diff == CardDiffState(direction="none")


class TestPurity:
    """Deriving twice from the same inputs gives equal results."""

    def test_idempotent(self):
        properties = CardProperties.from_dict({
            "label": "Buckets",
            "data_mode": "diff",
            "diff_data": {
                "columns": [{"name": "Total", "data_type": "INT8"}],
                "rows": [{"Total": 7}],
            },
        })
        data = simple_result(9)
        first = build_card_state(data, "ok", properties, "complete")
        second = build_card_state(data, "ok", properties, "complete")
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_from_dict_parses_diff_data(self):
        """CardProperties.from_dict turns diff_data into a tabular result."""
        properties = CardProperties.from_dict({"diff_data": {"columns": [{"name": "a"}], "rows": [{"a": 1}]}})
        assert isinstance(properties.diff_data, TabularResult)
        assert CardProperties.from_dict(None) == CardProperties()
