"""
sftime Time Column Processing

This module decides which columns count as temporal, normalizes time values
and time columns, and provides the interval and regularity helpers used by
binning and cube conversion.
"""

from datetime import date, datetime
from typing import Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from ..core.config import DATETIME_PRECISION, TIME_PARTS
from ..core.exceptions import (
    ConversionError, ParameterError, SchemaError, check_column_exists
)

# ============================================================================
# Temporal Type Detection
# ============================================================================

def is_temporal_dtype(dtype) -> bool:
    """Check whether a pandas dtype stores timestamps, periods or datetime intervals."""
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return True
    if isinstance(dtype, pd.PeriodDtype):
        return True
    if isinstance(dtype, pd.IntervalDtype):
        return pd.api.types.is_datetime64_any_dtype(dtype.subtype)
    return False


def _normalize_object_values(series: pd.Series) -> Optional[pd.Series]:
    """Parse an object/string column into a temporal series, or return None."""
    values = series.dropna()

    if values.empty:
        # Nothing to contradict a time type
        return pd.Series(pd.NaT, index=series.index, name=series.name, dtype=f"datetime64[{DATETIME_PRECISION}]")

    if all(isinstance(v, str) for v in values):
        try:
            return pd.to_datetime(series, format="ISO8601")
        except (ValueError, TypeError, OverflowError):
            return None

    if all(isinstance(v, (pd.Period, pd.Interval)) for v in values):
        try:
            array = pd.array(series.tolist())
        except (ValueError, TypeError):
            return None
        return pd.Series(array, index=series.index, name=series.name) if is_temporal_dtype(array.dtype) else None

    if all(isinstance(v, (datetime, date, np.datetime64)) for v in values):
        try:
            return pd.to_datetime(series)
        except (ValueError, TypeError, OverflowError):
            return None

    return None


def normalize_time_series(series: pd.Series) -> Optional[pd.Series]:
    """
    Normalize a column to a temporal pandas series.

    Datetime, period and datetime-interval columns are returned unchanged.
    Object columns holding ISO 8601 strings, datetime objects, periods or
    datetime intervals are parsed. Anything else yields None.

    Args:
        series: Column values

    Returns:
        Optional[pd.Series]: Temporal series, or None when the column is not temporal
    """
    dtype = series.dtype

    if is_temporal_dtype(dtype):
        return series

    if isinstance(dtype, pd.CategoricalDtype):
        return normalize_time_series(series.astype(object))

    if pd.api.types.is_bool_dtype(dtype) or pd.api.types.is_numeric_dtype(dtype):
        return None

    if pd.api.types.is_object_dtype(dtype) or pd.api.types.is_string_dtype(dtype):
        return _normalize_object_values(series.astype(object))

    return None


def is_temporal_series(series: pd.Series) -> bool:
    """Check whether every non-missing value of a column is a timestamp or time range."""
    return normalize_time_series(series) is not None


def validate_time_column(frame: pd.DataFrame, column: str) -> pd.Series:
    """
    Validate that a column exists and holds temporal values.

    Args:
        frame: Table holding the column
        column: Time column name

    Returns:
        pd.Series: Normalized time values

    Raises:
        SchemaError: If the column is missing or not temporal
    """
    check_column_exists(column, list(frame.columns), "time column")
    if list(frame.columns).count(column) > 1:
        raise SchemaError(column, "time column name is not unique", list(frame.columns))

    normalized = normalize_time_series(frame[column])
    if normalized is None:
        raise SchemaError(
            column,
            f"values are not temporal (dtype {frame[column].dtype}); "
            "expected timestamps, periods, datetime intervals or ISO 8601 strings",
            list(frame.columns)
        )
    return normalized

# ============================================================================
# Time Value Normalization
# ============================================================================

def normalize_time_value(time_value) -> pd.Timestamp:
    """
    Normalize various time formats to pandas.Timestamp.

    Args:
        time_value: Time value (str, datetime, np.datetime64 or pd.Timestamp)

    Returns:
        pd.Timestamp: Normalized time value

    Raises:
        ParameterError: If time format is invalid
    """
    try:
        timestamp = pd.Timestamp(time_value)
    except (ValueError, TypeError, OverflowError) as e:
        raise ParameterError("time_value", str(time_value), f"Cannot parse time value: {e}")

    if pd.isna(timestamp):
        raise ParameterError("time_value", str(time_value), "Time value is missing")
    return timestamp


def normalize_time_range(time_range) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    """
    Normalize time range to pandas.Timestamp values.

    Either bound may be None for an open range.

    Args:
        time_range: Time range (start, end)

    Returns:
        Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]: Normalized time range
    """
    if time_range is None:
        return None, None

    if len(time_range) != 2:
        raise ParameterError("time_range", str(time_range), "Must contain exactly 2 values")

    start_time = normalize_time_value(time_range[0]) if time_range[0] is not None else None
    end_time = normalize_time_value(time_range[1]) if time_range[1] is not None else None

    if start_time is not None and end_time is not None and start_time > end_time:
        raise ParameterError("time_range", str(time_range), "Start time must be <= end time")

    return start_time, end_time

# ============================================================================
# Interval Helpers
# ============================================================================

def is_interval_valued(times: pd.Series) -> bool:
    """Check whether a normalized time series holds time ranges rather than instants."""
    return isinstance(times.dtype, (pd.IntervalDtype, pd.PeriodDtype))


def interval_start(times: pd.Series) -> pd.Series:
    """Start instant of every value of a normalized time series."""
    if isinstance(times.dtype, pd.IntervalDtype):
        return pd.Series(times.array.left, index=times.index, name=times.name)
    if isinstance(times.dtype, pd.PeriodDtype):
        return times.dt.start_time
    return times


def interval_end(times: pd.Series) -> pd.Series:
    """End instant of every value of a normalized time series."""
    if isinstance(times.dtype, pd.IntervalDtype):
        return pd.Series(times.array.right, index=times.index, name=times.name)
    if isinstance(times.dtype, pd.PeriodDtype):
        return times.dt.end_time
    return times


def make_interval_series(start, end, name: Optional[str] = None, index=None) -> pd.Series:
    """Build a left-closed datetime interval series from start and end instants."""
    start_index = pd.DatetimeIndex(pd.to_datetime(list(start)))
    end_index = pd.DatetimeIndex(pd.to_datetime(list(end)))
    intervals = pd.IntervalIndex.from_arrays(start_index, end_index, closed="left")
    return pd.Series(intervals, index=index, name=name)

# ============================================================================
# Regularity
# ============================================================================

def is_regular(times: pd.Series) -> bool:
    """
    Check whether the distinct instants of a time series are equally spaced.

    Zero, one or two distinct instants are always regular.
    """
    unique = pd.Series(pd.unique(times.dropna())).sort_values()
    if len(unique) <= 2:
        return True
    return unique.diff().dropna().nunique() == 1

# ============================================================================
# Time Column Construction
# ============================================================================

def compose_time_column(frame: pd.DataFrame, time_parts: Mapping[str, str]) -> pd.Series:
    """
    Build a time column from decomposed date/time part columns.

    Args:
        frame: Table holding the part columns
        time_parts: Mapping of part name (year, month, day, hour, minute, second)
            to the column holding it; year, month and day are required

    Returns:
        pd.Series: Composed timestamps

    Raises:
        ParameterError: If an unknown or required part is missing
        SchemaError: If a referenced column does not exist
        ConversionError: If the parts do not form valid timestamps

    Examples:
        >>> times = compose_time_column(df, {"year": "yr", "month": "mo", "day": "dy", "hour": "hr"})
    """
    unknown = [part for part in time_parts if part not in TIME_PARTS]
    if unknown:
        raise ParameterError("time_parts", str(dict(time_parts)), f"Unknown parts: {unknown}; allowed: {TIME_PARTS}")

    missing = [part for part in ("year", "month", "day") if part not in time_parts]
    if missing:
        raise ParameterError("time_parts", str(dict(time_parts)), f"Missing required parts: {missing}")

    for column in time_parts.values():
        check_column_exists(column, list(frame.columns), "date/time part column")

    parts = pd.DataFrame({part: frame[column] for part, column in time_parts.items()}, index=frame.index)
    try:
        return pd.to_datetime(parts)
    except (ValueError, TypeError, OverflowError) as e:
        raise ConversionError("date/time parts", f"Parts {dict(time_parts)} do not form valid timestamps: {e}")
