"""
sftime Processing

This package provides geometry operations with metadata re-derivation and
time partitioning of tagged tables.
"""

# Geometry operations
from .operations import (
    apply_geometry_operation,
    rederive_metadata,
    transform_crs,
    set_crs,
    filter_bbox,
    spatial_filter,
    spatial_join,
    select_rows,
    filter_rows,
    select_columns,
    drop_columns,
    rename_columns,
    sort_by_time,
    filter_by_time,
    merge_attributes,
    concat_tables,
    SPATIAL_PREDICATES,
)

# Time partitioning
from .binning import (
    TimePartition,
    compute_bin_edges,
    partition_by_time,
)

__all__ = [
    # Geometry operations
    "apply_geometry_operation",
    "rederive_metadata",
    "transform_crs",
    "set_crs",
    "filter_bbox",
    "spatial_filter",
    "spatial_join",
    "select_rows",
    "filter_rows",
    "select_columns",
    "drop_columns",
    "rename_columns",
    "sort_by_time",
    "filter_by_time",
    "merge_attributes",
    "concat_tables",
    "SPATIAL_PREDICATES",
    # Time partitioning
    "TimePartition",
    "compute_bin_edges",
    "partition_by_time",
]
