"""
sftime Type Definitions and Data Classes

This module defines all data structures and type aliases used throughout the codebase
for better type safety and code clarity.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from geopandas import GeoDataFrame

from .config import TRACK_PREFIX, TRACKS_PREFIX
from .exceptions import SchemaError, check_column_exists

# ============================================================================
# Type Aliases
# ============================================================================

TimeValue = Union[str, datetime, np.datetime64, pd.Timestamp]
TimeRange = Tuple[Optional[TimeValue], Optional[TimeValue]]
TimeWidth = Union[str, pd.Timedelta]
CoordinateColumns = Tuple[str, str]
Bounds = Tuple[float, float, float, float]

# ============================================================================
# Spatiotemporal Feature Table
# ============================================================================

@dataclass(frozen=True, eq=False)
class SpatiotemporalFeatureTable:
    """
    Spatial feature table with an active time column.

    An explicit wrapper around a GeoDataFrame: the geometry and time column
    designations live here, never on the frame itself. Every operation
    returns a new wrapper.

    Attributes:
        data: Underlying geometry table
        geometry_column: Name of the active geometry column of ``data``
        time_column: Name of the active time column, or None when untagged
    """
    data: GeoDataFrame
    geometry_column: str
    time_column: Optional[str] = None

    def __post_init__(self):
        """Validate geometry and time designations against the data."""
        from ..coordinates.geometry_handler import active_geometry_name
        from ..coordinates.time_handler import validate_time_column

        if not isinstance(self.data, GeoDataFrame):
            raise SchemaError(
                self.geometry_column,
                f"table data must be a GeoDataFrame, got {type(self.data).__name__}"
            )

        available = list(self.data.columns)
        check_column_exists(self.geometry_column, available, "geometry column")
        if active_geometry_name(self.data) != self.geometry_column:
            raise SchemaError(self.geometry_column, "not the active geometry column of the table", available)

        if self.time_column is not None:
            if self.time_column == self.geometry_column:
                raise SchemaError(self.time_column, "time column cannot be the geometry column", available)
            validate_time_column(self.data, self.time_column)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_tagged(self) -> bool:
        """Check if an active time column is designated."""
        return self.time_column is not None

    @property
    def crs(self):
        """Coordinate reference system shared by all geometries."""
        return self.data.crs

    @property
    def columns(self) -> List[str]:
        """Column names, in table order."""
        return list(self.data.columns)

    @property
    def total_bounds(self) -> Bounds:
        """Bounding box (minx, miny, maxx, maxy) of all geometries."""
        return tuple(float(v) for v in self.data.total_bounds)

    # ------------------------------------------------------------------
    # Time access
    # ------------------------------------------------------------------

    @property
    def time_values(self) -> pd.Series:
        """
        Active time column normalized to a temporal series.

        String columns are parsed; the underlying data is left untouched.

        Raises:
            SchemaError: If the table is untagged
        """
        from ..coordinates.time_handler import validate_time_column

        if self.time_column is None:
            raise SchemaError("<time>", "table has no active time column", self.columns)
        return validate_time_column(self.data, self.time_column)

    @property
    def time_range(self) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
        """Earliest start and latest end of the active time column."""
        from ..coordinates.time_handler import interval_end, interval_start

        times = self.time_values
        start = interval_start(times).min()
        end = interval_end(times).max()
        return (None if pd.isna(start) else start, None if pd.isna(end) else end)

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        from ..utils.info import format_table_summary
        return format_table_summary(self)

# ============================================================================
# Time Binning
# ============================================================================

@dataclass
class TimeBinning:
    """
    Rule for partitioning a time column into consecutive intervals.

    At most one rule may be given. With none, the time range is split into
    ``DEFAULT_TIME_BINS`` equal-width bins.

    Attributes:
        n_bins: Number of equal-width bins over the time range
        width: Fixed bin width (e.g. "1D", "6h" or a Timedelta), anchored at the earliest time
        breaks: Explicit, strictly increasing bin edges
    """
    n_bins: Optional[int] = None
    width: Optional[TimeWidth] = None
    breaks: Optional[Sequence[TimeValue]] = None

    def __post_init__(self):
        """Validate binning parameters."""
        given = [name for name in ("n_bins", "width", "breaks") if getattr(self, name) is not None]
        if len(given) > 1:
            raise ValueError(f"Only one binning rule may be given, got: {', '.join(given)}")

        if self.n_bins is not None:
            if isinstance(self.n_bins, bool) or not isinstance(self.n_bins, (int, np.integer)) or self.n_bins <= 0:
                raise ValueError("n_bins must be a positive integer")

        if self.width is not None:
            self.width = pd.Timedelta(self.width)
            if self.width <= pd.Timedelta(0):
                raise ValueError("width must be a positive duration")

        if self.breaks is not None:
            edges = pd.DatetimeIndex(pd.to_datetime(list(self.breaks)))
            if len(edges) < 2:
                raise ValueError("breaks must contain at least 2 edges")
            if not edges.is_monotonic_increasing or not edges.is_unique:
                raise ValueError("breaks must be strictly increasing")
            self.breaks = list(edges)

    @property
    def has_rule(self) -> bool:
        """Check if any explicit rule is defined."""
        return self.n_bins is not None or self.width is not None or self.breaks is not None

# ============================================================================
# Trajectory Sources
# ============================================================================

@dataclass
class SpaceTimePoints:
    """
    Irregular space-time records: one geometry and one time per row.

    When ``end_time`` is given each record covers the range [time, end_time).

    Attributes:
        geometry: Shapely geometries, one per record
        time: Record times
        data: Optional attribute table aligned with the records
        end_time: Optional record end times
        crs: Coordinate reference system of the geometries
    """
    geometry: Sequence[Any]
    time: Sequence[TimeValue]
    data: Optional[pd.DataFrame] = None
    end_time: Optional[Sequence[TimeValue]] = None
    crs: Optional[str] = None

    def __post_init__(self):
        """Validate record alignment."""
        n = len(self.geometry)
        if len(self.time) != n:
            raise ValueError(f"time has {len(self.time)} values for {n} geometries")
        if self.end_time is not None and len(self.end_time) != n:
            raise ValueError(f"end_time has {len(self.end_time)} values for {n} geometries")
        if self.data is not None and len(self.data) != n:
            raise ValueError(f"data has {len(self.data)} rows for {n} geometries")

    def __len__(self) -> int:
        return len(self.geometry)


@dataclass
class Track:
    """A single trajectory: space-time points ordered by time."""
    points: SpaceTimePoints

    def __post_init__(self):
        """Validate temporal ordering."""
        times = pd.DatetimeIndex(pd.to_datetime(list(self.points.time)))
        if not times.is_monotonic_increasing:
            raise ValueError("Track times must be non-decreasing")

    def __len__(self) -> int:
        return len(self.points)


def _name_members(members, prefix: str) -> Dict[str, Any]:
    """Turn a mapping or sequence of members into an ordered name -> member dict."""
    if isinstance(members, Mapping):
        named = {str(name): member for name, member in members.items()}
    else:
        named = {f"{prefix}{i}": member for i, member in enumerate(members, start=1)}
    if not named:
        raise ValueError(f"At least one member is required to build a {prefix} group")
    return named


@dataclass
class Tracks:
    """
    Several trajectories of one object, keyed by track name.

    A plain sequence of tracks is named Track1, Track2, ...
    """
    tracks: Union[Mapping[str, Track], Sequence[Track]] = field(default_factory=dict)

    def __post_init__(self):
        self.tracks = _name_members(self.tracks, TRACK_PREFIX)
        for name, track in self.tracks.items():
            if not isinstance(track, Track):
                raise ValueError(f"Member '{name}' is not a Track")

    def __len__(self) -> int:
        return sum(len(track) for track in self.tracks.values())


@dataclass
class TracksCollection:
    """
    Trajectories of several objects, keyed by tracks name.

    A plain sequence of Tracks is named Tracks1, Tracks2, ...
    """
    tracks: Union[Mapping[str, Tracks], Sequence[Tracks]] = field(default_factory=dict)

    def __post_init__(self):
        self.tracks = _name_members(self.tracks, TRACKS_PREFIX)
        for name, tracks in self.tracks.items():
            if not isinstance(tracks, Tracks):
                raise ValueError(f"Member '{name}' is not a Tracks object")

    def __len__(self) -> int:
        return sum(len(tracks) for tracks in self.tracks.values())
