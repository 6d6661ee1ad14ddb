"""
Tabular Conversion Adapters

Conversions between feature tables and plain pandas / geopandas tables.
"""

import warnings
from typing import Mapping, Optional, Sequence

import pandas as pd
from geopandas import GeoDataFrame

from ..core.config import DEFAULT_TIME_COLUMN, FROM_SFTIME, TO_SFTIME
from ..core.core_types import SpatiotemporalFeatureTable
from ..core.exceptions import ConversionError, MetadataLossWarning, SchemaError
from ..core.logging_config import get_logger
from ..coordinates.time_handler import compose_time_column
from ..main import tag
from .registry import register_adapter

logger = get_logger('conversion.frames')

# ============================================================================
# To Feature Tables
# ============================================================================

@register_adapter(
    'dataframe', TO_SFTIME,
    description="Plain table; geometry from coordinate or WKT columns, time from a column or date/time parts",
)
def from_dataframe(
    frame: pd.DataFrame,
    time_column: Optional[str] = None,
    coords: Optional[Sequence[str]] = None,
    wkt_column: Optional[str] = None,
    crs: Optional[str] = None,
    time_parts: Optional[Mapping[str, str]] = None,
    time_name: str = DEFAULT_TIME_COLUMN,
) -> SpatiotemporalFeatureTable:
    """
    Convert a plain table into a feature table.

    Args:
        frame: Source table
        time_column: Existing column holding the times
        coords: (x_column, y_column) holding point coordinates
        wkt_column: Column holding WKT geometries
        crs: CRS of the constructed geometry
        time_parts: Mapping of date/time part (year, month, day, hour, minute,
            second) to column, used to compose the time column
        time_name: Name of the composed time column

    Returns:
        SpatiotemporalFeatureTable: Tagged table

    Raises:
        ConversionError: If no time column is given and none can be composed
        SchemaError: If columns are missing or invalid

    Examples:
        >>> st = from_dataframe(df, coords=("lon", "lat"),
        ...                     time_parts={"year": "year", "month": "month", "day": "day", "hour": "hour"})
    """
    if time_parts:
        if time_column is not None:
            raise ConversionError("DataFrame", "give either time_column or time_parts, not both")
        if time_name in frame.columns:
            raise SchemaError(time_name, "composed time column name collides with an existing column", list(frame.columns))
        frame = frame.copy()
        frame[time_name] = compose_time_column(frame, time_parts)
        time_column = time_name
        logger.debug("Composed time column '%s' from parts %s", time_name, dict(time_parts))
    elif time_column is None:
        raise ConversionError("DataFrame", "no time column given and no date/time parts to compose one")

    return tag(frame, time_column, crs=crs, coords=coords, wkt_column=wkt_column)


@register_adapter('geodataframe', TO_SFTIME, description="Geometry table with an existing time column")
def from_geodataframe(
    gdf: GeoDataFrame,
    time_column: str = DEFAULT_TIME_COLUMN,
    geometry_column: Optional[str] = None,
) -> SpatiotemporalFeatureTable:
    """Convert a GeoDataFrame into a feature table by designating its time column."""
    if not isinstance(gdf, GeoDataFrame):
        raise ConversionError(type(gdf).__name__, "expected a GeoDataFrame; use the 'dataframe' adapter for plain tables")
    return tag(gdf, time_column, geometry_column)

# ============================================================================
# From Feature Tables
# ============================================================================

def _warn_metadata_loss(table: SpatiotemporalFeatureTable, target: str) -> None:
    if table.is_tagged:
        warnings.warn(
            f"Converting to {target} drops the active time column designation '{table.time_column}'; "
            "the column is kept as an ordinary attribute",
            MetadataLossWarning,
            stacklevel=3,
        )


@register_adapter(
    'geodataframe', FROM_SFTIME,
    description="Plain geometry table; drops the time designation (MetadataLossWarning)",
)
def to_geodataframe(table: SpatiotemporalFeatureTable) -> GeoDataFrame:
    """
    Convert a feature table to a plain GeoDataFrame.

    The time column stays as an ordinary attribute; the designation is
    dropped with a MetadataLossWarning. Use ``drop_time`` to do the same
    silently.
    """
    _warn_metadata_loss(table, "GeoDataFrame")
    return table.data.copy()


@register_adapter(
    'dataframe', FROM_SFTIME,
    description="Plain table with WKT geometry; drops all metadata (MetadataLossWarning)",
)
def to_dataframe(table: SpatiotemporalFeatureTable) -> pd.DataFrame:
    """
    Convert a feature table to a plain DataFrame.

    Geometries are written as WKT strings in the geometry column; CRS and
    time designation are dropped with a MetadataLossWarning.
    """
    _warn_metadata_loss(table, "DataFrame")
    frame = pd.DataFrame(table.data.copy())
    frame[table.geometry_column] = table.data.geometry.to_wkt()
    return frame
