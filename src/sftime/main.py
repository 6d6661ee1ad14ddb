"""
sftime Main Interface

This module provides the tagging API: designating, switching, reading and
removing the active time column of a spatial feature table.
"""

from typing import Optional, Sequence, Union

import pandas as pd
from geopandas import GeoDataFrame

from .core.core_types import SpatiotemporalFeatureTable
from .core.exceptions import SchemaError
from .core.logging_config import get_logger
from .coordinates.geometry_handler import active_geometry_name, ensure_geodataframe

logger = get_logger('main')

TableLike = Union[SpatiotemporalFeatureTable, GeoDataFrame, pd.DataFrame]


# ============================================================================
# Tagging
# ============================================================================

def tag(
    table: TableLike,
    time_column_name: str,
    geometry_column_name: Optional[str] = None,
    crs: Optional[str] = None,
    *,
    coords: Optional[Sequence[str]] = None,
    wkt_column: Optional[str] = None,
) -> SpatiotemporalFeatureTable:
    """
    Designate the active time column of a geometry table.

    The table is either an existing GeoDataFrame (or tagged table, which is
    retagged), or a plain DataFrame together with ``coords`` or ``wkt_column``
    describing how to construct its geometry.

    Args:
        table: Geometry table, tagged table, or plain DataFrame
        time_column_name: Column holding the timestamps or time ranges
        geometry_column_name: Geometry column to activate, or name of the
            constructed geometry column
        crs: CRS of constructed geometry, or CRS assigned to a GeoDataFrame without one
        coords: (x_column, y_column) holding point coordinates
        wkt_column: Column holding WKT geometries

    Returns:
        SpatiotemporalFeatureTable: Tagged table; input data is not modified

    Raises:
        SchemaError: If the time column is missing or not temporal, or no
            geometry can be located or constructed

    Examples:
        >>> st = tag(gdf, "time")

        >>> st = tag(df, "time", coords=("lon", "lat"), crs="EPSG:4326")
        >>> st.time_column
        'time'
    """
    if isinstance(table, SpatiotemporalFeatureTable):
        table = table.data

    gdf = ensure_geodataframe(
        table,
        geometry_column_name=geometry_column_name,
        crs=crs,
        coords=coords,
        wkt_column=wkt_column,
    )

    result = SpatiotemporalFeatureTable(
        data=gdf,
        geometry_column=active_geometry_name(gdf),
        time_column=time_column_name,
    )
    logger.debug(
        "Tagged table with %d rows: geometry='%s', time='%s'",
        len(gdf), result.geometry_column, time_column_name
    )
    return result


def drop_time(table: Union[SpatiotemporalFeatureTable, GeoDataFrame]) -> GeoDataFrame:
    """
    Remove the active time designation, returning the plain geometry table.

    Column data is left untouched, including the former time column.
    Plain GeoDataFrames are returned unchanged.

    Args:
        table: Tagged table or plain geometry table

    Returns:
        GeoDataFrame: Geometry table without time metadata
    """
    if isinstance(table, SpatiotemporalFeatureTable):
        if table.time_column is not None:
            logger.debug("Dropping time designation '%s'", table.time_column)
        return table.data
    return table


def untag(table: SpatiotemporalFeatureTable) -> SpatiotemporalFeatureTable:
    """Return the same table as an untagged wrapper (time_column is None)."""
    return SpatiotemporalFeatureTable(data=table.data, geometry_column=table.geometry_column)


def set_time(table: TableLike, time_column_name: str) -> SpatiotemporalFeatureTable:
    """
    Switch the active time column of a table.

    Args:
        table: Tagged table or GeoDataFrame
        time_column_name: New active time column

    Returns:
        SpatiotemporalFeatureTable: Table designating the new time column

    Raises:
        SchemaError: If the new column is missing or not temporal
    """
    if isinstance(table, SpatiotemporalFeatureTable):
        if table.time_column is not None and table.time_column != time_column_name:
            logger.info("Switching active time column '%s' -> '%s'", table.time_column, time_column_name)
        return SpatiotemporalFeatureTable(
            data=table.data,
            geometry_column=table.geometry_column,
            time_column=time_column_name,
        )
    return tag(table, time_column_name)


def get_time(table: SpatiotemporalFeatureTable) -> pd.Series:
    """
    Get the values of the active time column.

    Args:
        table: Tagged table

    Returns:
        pd.Series: Time column exactly as stored

    Raises:
        SchemaError: If the table has no active time column
    """
    if table.time_column is None:
        raise SchemaError("<time>", "table has no active time column", table.columns)
    return table.data[table.time_column]


def is_sftime(value) -> bool:
    """Check if a value is a tagged spatiotemporal feature table."""
    return isinstance(value, SpatiotemporalFeatureTable) and value.is_tagged
