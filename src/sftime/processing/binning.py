"""
sftime Time Partitioning

This module splits a tagged table into consecutive time intervals according
to a TimeBinning rule. Interval-valued times are binned by their start.
"""

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from ..core.config import DEFAULT_TIME_BINS
from ..core.core_types import SpatiotemporalFeatureTable, TimeBinning
from ..core.exceptions import SchemaError
from ..core.logging_config import get_logger
from ..coordinates.time_handler import interval_start

logger = get_logger('processing.binning')


@dataclass
class TimePartition:
    """
    Rows of a table falling into one time bin.

    Attributes:
        start: Left edge of the bin (inclusive)
        end: Right edge of the bin (exclusive, inclusive for the last bin)
        table: Rows in the bin, with metadata preserved
    """
    start: pd.Timestamp
    end: pd.Timestamp
    table: SpatiotemporalFeatureTable

    def __len__(self) -> int:
        return len(self.table)


# ============================================================================
# Bin Edges
# ============================================================================

def compute_bin_edges(starts: pd.Series, binning: TimeBinning) -> Optional[pd.DatetimeIndex]:
    """
    Compute bin edges for a series of start instants.

    Args:
        starts: Start instants of the rows
        binning: Binning rule

    Returns:
        Optional[pd.DatetimeIndex]: Edges, or None when there is nothing to bin
    """
    if binning.breaks is not None:
        return pd.DatetimeIndex(binning.breaks)

    valid = starts.dropna()
    if valid.empty:
        return None

    t_min, t_max = valid.min(), valid.max()

    if binning.width is not None:
        n_bins = math.floor((t_max - t_min) / binning.width) + 1
        return pd.DatetimeIndex([t_min + i * binning.width for i in range(n_bins + 1)])

    n_bins = binning.n_bins if binning.n_bins is not None else DEFAULT_TIME_BINS
    if t_min == t_max:
        return pd.DatetimeIndex([t_min, t_max])
    return pd.date_range(start=t_min, end=t_max, periods=n_bins + 1)

# ============================================================================
# Partitioning
# ============================================================================

def partition_by_time(
    table: SpatiotemporalFeatureTable,
    binning: Optional[TimeBinning] = None,
) -> List[TimePartition]:
    """
    Partition a tagged table into consecutive time bins.

    Bins are left-closed; the last bin also includes its right edge. Rows with
    missing times, or outside explicit breaks, belong to no bin. Empty bins
    are returned with an empty table.

    Args:
        table: Tagged table
        binning: Binning rule (default: equal-width bins over the time range)

    Returns:
        List[TimePartition]: Partitions in time order

    Raises:
        SchemaError: If the table has no active time column

    Examples:
        >>> parts = partition_by_time(storms, TimeBinning(width="1D"))
        >>> [(p.start, len(p)) for p in parts]
    """
    if not table.is_tagged:
        raise SchemaError("<time>", "partitioning requires an active time column", table.columns)

    binning = binning or TimeBinning()
    starts = interval_start(table.time_values).reset_index(drop=True)
    edges = compute_bin_edges(starts, binning)
    if edges is None:
        logger.info("No time values to partition")
        return []

    n_bins = len(edges) - 1
    valid = starts.notna().to_numpy()
    codes = np.full(len(starts), -1)
    if valid.any():
        valid_starts = pd.DatetimeIndex(starts[valid])
        valid_codes = np.asarray(edges.searchsorted(valid_starts, side="right")) - 1
        # Right edge of the last bin is inclusive
        on_last_edge = np.asarray(valid_starts == edges[-1])
        valid_codes[(valid_codes == n_bins) & on_last_edge] = n_bins - 1
        valid_codes[valid_codes >= n_bins] = -1
        codes[valid] = valid_codes

    partitions = []
    for i in range(n_bins):
        positions = np.flatnonzero(codes == i)
        partitions.append(TimePartition(
            start=edges[i],
            end=edges[i + 1],
            table=SpatiotemporalFeatureTable(
                data=table.data.iloc[positions],
                geometry_column=table.geometry_column,
                time_column=table.time_column,
            ),
        ))

    logger.debug("Partitioned %d rows into %d time bins", len(table), n_bins)
    return partitions
