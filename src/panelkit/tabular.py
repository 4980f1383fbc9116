"""
Tabular query results shared by every panel deriver.

A tabular result is the raw `{columns, rows}` payload produced by an upstream
query. Columns carry a name and a declared data type; rows map column names
to scalar cells. The helpers here answer the questions the derivers need:
does the result carry data, which column is which, is a column numeric, and
which of the two card encodings (simple or formal) the result uses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd


# =============================================================================
# Constants
# =============================================================================

DATA_FORMAT_SIMPLE = "simple"
DATA_FORMAT_FORMAL = "formal"

_NUMERIC_TYPE_MARKERS = ("int", "float", "double", "numeric", "decimal", "real", "money")
_NON_NUMERIC_TYPES = {"interval", "point"}


class TabularDataError(ValueError):
    """Raised when a tabular payload does not match the columns/rows contract."""


# =============================================================================
# Data Model
# =============================================================================

@dataclass(frozen=True)
class TabularColumn:
    """A named result column with its declared data type."""

    name: str
    data_type: Optional[str] = None

    @property
    def is_numeric(self) -> bool:
        return is_numeric_type(self.data_type)


@dataclass(frozen=True)
class TabularResult:
    """Columns plus rows returned by an upstream query."""

    columns: Sequence[TabularColumn] = field(default_factory=tuple)
    rows: Sequence[Mapping[str, Any]] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TabularResult":
        """
        Parse a `{columns: [...], rows: [...]}` mapping.

        Args:
            payload: Raw result mapping, as decoded from JSON or YAML.

        Returns:
            Parsed TabularResult.

        Raises:
            TabularDataError: If the payload is not a valid tabular result.
        """
        if not isinstance(payload, Mapping):
            raise TabularDataError(
                f"Tabular result must be a mapping, got {type(payload).__name__}"
            )

        raw_columns = payload.get("columns") or []
        raw_rows = payload.get("rows") or []
        if not isinstance(raw_columns, list):
            raise TabularDataError("Tabular result 'columns' must be a list")
        if not isinstance(raw_rows, list):
            raise TabularDataError("Tabular result 'rows' must be a list")

        columns: List[TabularColumn] = []
        seen = set()
        for idx, raw in enumerate(raw_columns):
            if not isinstance(raw, Mapping) or not raw.get("name"):
                raise TabularDataError(f"Column {idx} is missing a 'name'")
            name = str(raw["name"])
            if name in seen:
                raise TabularDataError(f"Duplicate column name: {name}")
            seen.add(name)
            data_type = raw.get("data_type")
            columns.append(
                TabularColumn(name=name, data_type=str(data_type) if data_type else None)
            )

        rows: List[Dict[str, Any]] = []
        for idx, raw in enumerate(raw_rows):
            if not isinstance(raw, Mapping):
                raise TabularDataError(f"Row {idx} must be a mapping")
            rows.append(dict(raw))

        return cls(columns=tuple(columns), rows=tuple(rows))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "TabularResult":
        """
        Build a result from a pandas DataFrame.

        Column data types are derived from the pandas dtypes and missing
        cells (NaN, NA, NaT) become None.
        """
        columns = tuple(
            TabularColumn(name=str(name), data_type=_data_type_for_dtype(df[name].dtype))
            for name in df.columns
        )
        rows = []
        for record in df.to_dict(orient="records"):
            rows.append({
                str(key): (None if _is_missing(value) else value)
                for key, value in record.items()
            })
        return cls(columns=columns, rows=tuple(rows))

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with columns in declared order."""
        names = [column.name for column in self.columns]
        return pd.DataFrame(list(self.rows), columns=names)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [
                {"name": column.name, "data_type": column.data_type}
                for column in self.columns
            ],
            "rows": [dict(row) for row in self.rows],
        }


# =============================================================================
# Helper Functions
# =============================================================================

def has_data(data: Optional[TabularResult]) -> bool:
    """Return True when the result is present with at least one column and row."""
    if data is None:
        return False
    return len(data.columns) > 0 and len(data.rows) > 0


def get_column(columns: Sequence[TabularColumn], name: str) -> Optional[TabularColumn]:
    """Find a column by exact name."""
    for column in columns:
        if column.name == name:
            return column
    return None


def is_numeric_type(data_type: Optional[str]) -> bool:
    """
    Decide whether a declared column data type holds numbers.

    Matching is case-insensitive on the type name, so `INT8`, `bigint`,
    `FLOAT8`, `double precision` and `NUMERIC(10,2)` are all numeric while
    `TEXT`, `BOOL`, `TIMESTAMP`, `INTERVAL` and `POINT` are not.

    Args:
        data_type: Declared data type, possibly None.

    Returns:
        True for numeric types.
    """
    if not data_type:
        return False
    lowered = str(data_type).strip().lower()
    base = lowered.split("(", 1)[0].strip()
    if base in _NON_NUMERIC_TYPES:
        return False
    return any(marker in lowered for marker in _NUMERIC_TYPE_MARKERS)


def detect_format(data: Optional[TabularResult]) -> str:
    """
    Classify a result as simple (one column) or formal (named columns).

    Returns:
        DATA_FORMAT_FORMAL when there is more than one column, else
        DATA_FORMAT_SIMPLE.
    """
    if data is not None and len(data.columns) > 1:
        return DATA_FORMAT_FORMAL
    return DATA_FORMAT_SIMPLE


def _data_type_for_dtype(dtype: Any) -> str:
    if pd.api.types.is_bool_dtype(dtype):
        return "BOOL"
    if pd.api.types.is_integer_dtype(dtype):
        return "INT8"
    if pd.api.types.is_float_dtype(dtype):
        return "FLOAT8"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "TIMESTAMP"
    return "TEXT"


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)
