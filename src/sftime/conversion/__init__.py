"""
sftime Conversion Adapters

This package maps neighbouring containers (plain tables, geometry tables,
regular space-time cubes, space-time points and trajectories) to and from
feature tables. Importing it registers every adapter with the global
conversion registry.
"""

from .registry import (
    ConversionAdapter,
    ConversionRegistry,
    get_registry,
    register_adapter,
    convert,
    export,
    list_formats,
)

# Adapter modules register themselves on import
from .frames import (
    from_dataframe,
    from_geodataframe,
    to_dataframe,
    to_geodataframe,
)
from .cube import (
    from_xarray,
    to_xarray,
)
from .trajectories import (
    from_space_time_points,
    from_track,
    from_tracks,
    from_tracks_collection,
    to_space_time_points,
    to_tracks,
    to_tracks_collection,
)

__all__ = [
    # Registry
    "ConversionAdapter",
    "ConversionRegistry",
    "get_registry",
    "register_adapter",
    "convert",
    "export",
    "list_formats",
    # Tables
    "from_dataframe",
    "from_geodataframe",
    "to_dataframe",
    "to_geodataframe",
    # Cubes
    "from_xarray",
    "to_xarray",
    # Trajectories
    "from_space_time_points",
    "from_track",
    "from_tracks",
    "from_tracks_collection",
    "to_space_time_points",
    "to_tracks",
    "to_tracks_collection",
]
