from __future__ import annotations

import math
from datetime import date, datetime, time
from typing import Any, Optional, Union

import numpy as np
import pandas as pd
from dash.development.base_component import Component

from .columns import ColumnSpec, ColumnStyle

# Shown for empty cells and for objects that have no text form
PLACEHOLDER = "-"

DisplayValue = Union[str, Component]


# -------------------------------------------------------------------------
# Classification
# -------------------------------------------------------------------------

def is_numeric(value: Any) -> bool:
    """True for real numbers (numpy scalars included), False for bools and NaN."""
    if isinstance(value, (bool, np.bool_)):
        return False
    if isinstance(value, (int, np.integer)):
        return True
    if isinstance(value, (float, np.floating)):
        return not math.isnan(value)
    return False


def is_primitive(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float, np.number, np.bool_))


def is_date_like(value: Any) -> bool:
    return isinstance(value, (date, time, np.datetime64))


def is_renderable(value: Any) -> bool:
    """Values the host renders as-is (Dash components)."""
    return isinstance(value, Component)


def is_plain_object(value: Any) -> bool:
    """
    Mappings and other structured values: not a primitive, sequence, date
    or renderable component.
    """
    if value is None or is_primitive(value) or is_date_like(value) or is_renderable(value):
        return False
    if isinstance(value, (list, tuple, set, frozenset, bytes, np.ndarray)):
        return False
    return True


# -------------------------------------------------------------------------
# Timestamps
# -------------------------------------------------------------------------

# Range Python datetimes can represent; pandas allows more in non-nano units
_MIN_YEAR, _MAX_YEAR = 1, 9999

_OUT_OF_RANGE = (OverflowError, ValueError, pd.errors.OutOfBoundsDatetime)


def from_epoch_ms(ms: float) -> Optional[pd.Timestamp]:
    """Timestamp for epoch milliseconds, or None when it can't be represented."""
    try:
        ts = pd.Timestamp(np.datetime64(int(round(ms * 1000)), "us"))
    except _OUT_OF_RANGE:
        return None
    if pd.isna(ts) or not _MIN_YEAR <= ts.year <= _MAX_YEAR:
        return None
    return ts


def _coerce_datetime(value: Any) -> Optional[pd.Timestamp]:
    if isinstance(value, (bool, np.bool_)) or value is None:
        return None
    if is_numeric(value):
        return from_epoch_ms(float(value))
    try:
        if isinstance(value, time):
            ts = pd.Timestamp(datetime.combine(date.today(), value))
        elif isinstance(value, (date, np.datetime64)):
            ts = pd.Timestamp(value)
        elif isinstance(value, str):
            if not value.strip():
                return None
            ts = pd.to_datetime(value, errors="coerce")
        else:
            return None
        if ts is pd.NaT or pd.isna(ts):
            return None
        if ts.tzinfo is not None:
            ts = ts.tz_convert("UTC").tz_localize(None)
    except _OUT_OF_RANGE:
        return None
    if not _MIN_YEAR <= ts.year <= _MAX_YEAR:
        return None
    return ts


def to_timestamp(value: Any) -> Optional[float]:
    """
    Coerce a value to epoch milliseconds.

    Numbers (and numeric strings) are taken as already being milliseconds,
    dates and date strings are converted. Anything else gives None.
    """
    if is_numeric(value):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            pass
        else:
            return None if math.isnan(number) else number
    ts = _coerce_datetime(value)
    if ts is None:
        return None
    # Microseconds in int64 cover years 1-9999 whatever unit pandas picked
    micros = ts.asm8.astype("datetime64[us]").astype(np.int64)
    return float(micros) / 1000


def time_of_day(value: Any) -> Optional[float]:
    """Milliseconds since midnight, ignoring the date portion."""
    ts = _coerce_datetime(value)
    if ts is None:
        return None
    return ((ts.hour * 60 + ts.minute) * 60 + ts.second) * 1000 + ts.microsecond / 1000


# -------------------------------------------------------------------------
# Text forms
# -------------------------------------------------------------------------

def _format_clock(ts: pd.Timestamp) -> str:
    hour = ts.hour % 12 or 12
    suffix = "AM" if ts.hour < 12 else "PM"
    return f"{hour}:{ts.minute:02d} {suffix}"


def format_date(value: Any, style: ColumnStyle = ColumnStyle.DATE, fallback: str = "") -> str:
    """
    Format a date-ish value for display.

    - date:     "Jan 5, 2021"
    - datetime: "Jan 5, 2021 3:07 PM"
    - time:     "3:07 PM"
    """
    if not value:
        return fallback
    ts = _coerce_datetime(value)
    if ts is None:
        return fallback

    day = f"{ts:%b} {ts.day}, {ts.year}"
    if style == ColumnStyle.TIME:
        return _format_clock(ts)
    if style == ColumnStyle.DATETIME:
        return f"{day} {_format_clock(ts)}"
    return day


def value_key(value: Any) -> str:
    """
    Stable string form used to key filter options and compare values.

    None -> "", booleans lower-cased, integral floats without ".0".
    """
    if value is None:
        return ""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def data_string(value: Any, style: ColumnStyle = ColumnStyle.DEFAULT) -> DisplayValue:
    """Convert a table entry into the string shown when no extractor applies."""
    if style.is_temporal and (is_numeric(value) or is_date_like(value) or isinstance(value, str)):
        return format_date(value, style)
    if is_renderable(value):
        return value
    if value is None or (isinstance(value, str) and value == ""):
        return PLACEHOLDER
    if not is_primitive(value):
        return PLACEHOLDER
    return value_key(value)


def render_entry(column: ColumnSpec, value: Any) -> Any:
    """Render a cell using the column's value extractor unless table rendering is disabled."""
    if column.value_extractor is not None and not column.rendering.disable_table:
        return column.value_extractor(value)
    return data_string(value, column.style)
