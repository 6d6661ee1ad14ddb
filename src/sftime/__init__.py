"""
sftime - Spatial feature tables with an active time column.

This package attaches a time designation to geopandas feature tables so that
irregular spatiotemporal records (storm tracks, earthquake events, animal
trajectories) can be filtered, joined, transformed, converted and plotted
without losing track of which column holds time.

Key Features:
- Explicit tagging of the active time column, validated at construction
- Geometry operations delegated to geopandas with metadata re-derived afterwards
- Named conversion adapters for tables, regular cubes and trajectories
- Time-binned small-multiple plots

Quick Start:
    >>> import sftime
    >>> st = sftime.tag(df, "time", coords=("lon", "lat"), crs="EPSG:4326")
    >>> st.time_column
    'time'
    >>>
    >>> # Spatial work is delegated to geopandas, the time tag survives
    >>> st_web = sftime.transform_crs(st, "EPSG:3857")
    >>> fig, axes = sftime.plot(st, "wind", sftime.TimeBinning(width="1D"))
"""

__version__ = "1.0.0"
__author__ = "sftime Development Team"

# Tagging interface
from .main import (
    tag,
    drop_time,
    untag,
    set_time,
    get_time,
    is_sftime,
)

# Data types
from .core.core_types import (
    SpatiotemporalFeatureTable,
    TimeBinning,
    SpaceTimePoints,
    Track,
    Tracks,
    TracksCollection,
)

# Configuration for advanced users
from .core.config import (
    DEFAULT_TIME_COLUMN,
    DEFAULT_GEOMETRY_COLUMN,
    DEFAULT_CRS,
    TRACK_NAME_COLUMN,
    TRACKS_NAME_COLUMN,
    JOIN_SUFFIXES,
)

# Exceptions for error handling
from .core.exceptions import (
    SftimeError,
    SchemaError,
    ConversionError,
    ParameterError,
    MetadataLossWarning,
)

# Logging configuration
from .core.logging_config import setup_logging, set_log_level

# Geometry and time operations
from .processing import (
    apply_geometry_operation,
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
    TimePartition,
    partition_by_time,
)

# Conversion adapters
from . import conversion
from .conversion import (
    convert,
    export,
    list_formats,
    from_dataframe,
    from_geodataframe,
    from_xarray,
    from_space_time_points,
    from_track,
    from_tracks,
    from_tracks_collection,
    to_dataframe,
    to_geodataframe,
    to_xarray,
    to_space_time_points,
    to_tracks,
    to_tracks_collection,
)

# Plotting and information
from .plotting import plot
from .utils import get_table_info

__all__ = [
    # Version info
    '__version__',

    # Tagging interface
    'tag',
    'drop_time',
    'untag',
    'set_time',
    'get_time',
    'is_sftime',

    # Data types
    'SpatiotemporalFeatureTable',
    'TimeBinning',
    'SpaceTimePoints',
    'Track',
    'Tracks',
    'TracksCollection',

    # Configuration constants
    'DEFAULT_TIME_COLUMN',
    'DEFAULT_GEOMETRY_COLUMN',
    'DEFAULT_CRS',
    'TRACK_NAME_COLUMN',
    'TRACKS_NAME_COLUMN',
    'JOIN_SUFFIXES',

    # Exception classes
    'SftimeError',
    'SchemaError',
    'ConversionError',
    'ParameterError',
    'MetadataLossWarning',

    # Logging configuration
    'setup_logging',
    'set_log_level',

    # Operations
    'apply_geometry_operation',
    'transform_crs',
    'set_crs',
    'filter_bbox',
    'spatial_filter',
    'spatial_join',
    'select_rows',
    'filter_rows',
    'select_columns',
    'drop_columns',
    'rename_columns',
    'sort_by_time',
    'filter_by_time',
    'merge_attributes',
    'concat_tables',
    'TimePartition',
    'partition_by_time',

    # Conversion
    'conversion',
    'convert',
    'export',
    'list_formats',
    'from_dataframe',
    'from_geodataframe',
    'from_xarray',
    'from_space_time_points',
    'from_track',
    'from_tracks',
    'from_tracks_collection',
    'to_dataframe',
    'to_geodataframe',
    'to_xarray',
    'to_space_time_points',
    'to_tracks',
    'to_tracks_collection',

    # Plotting and information
    'plot',
    'get_table_info',
]

import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
