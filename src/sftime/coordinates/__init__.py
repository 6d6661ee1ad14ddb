"""
sftime Coordinate Handling

This package locates or constructs geometry columns and validates and
normalizes time columns.
"""

# Geometry column functions
from .geometry_handler import (
    xy_to_geodataframe,
    wkt_to_geodataframe,
    ensure_geodataframe,
    active_geometry_name,
)

# Time column functions
from .time_handler import (
    is_temporal_dtype,
    is_temporal_series,
    normalize_time_series,
    validate_time_column,
    normalize_time_value,
    normalize_time_range,
    is_interval_valued,
    interval_start,
    interval_end,
    make_interval_series,
    is_regular,
    compose_time_column,
)

__all__ = [
    # Geometry
    "xy_to_geodataframe",
    "wkt_to_geodataframe",
    "ensure_geodataframe",
    "active_geometry_name",
    # Time
    "is_temporal_dtype",
    "is_temporal_series",
    "normalize_time_series",
    "validate_time_column",
    "normalize_time_value",
    "normalize_time_range",
    "is_interval_valued",
    "interval_start",
    "interval_end",
    "make_interval_series",
    "is_regular",
    "compose_time_column",
]
