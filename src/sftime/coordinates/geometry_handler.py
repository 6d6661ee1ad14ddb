"""
sftime Geometry Column Handling

This module locates or constructs the geometry column of a table: point
geometries from coordinate columns, geometries parsed from WKT, or the active
geometry of an existing GeoDataFrame.
"""

from typing import Optional, Sequence, Tuple

import pandas as pd
from geopandas import GeoDataFrame, GeoSeries
from shapely import points, wkt
from shapely.errors import ShapelyError

from ..core.config import DEFAULT_CRS, DEFAULT_GEOMETRY_COLUMN
from ..core.exceptions import SchemaError, check_column_exists
from ..core.logging_config import get_logger

logger = get_logger('coordinates.geometry')

# ============================================================================
# Geometry Construction
# ============================================================================

def xy_to_geodataframe(
    frame: pd.DataFrame,
    x_column: str,
    y_column: str,
    crs: Optional[str] = DEFAULT_CRS,
    geometry_name: str = DEFAULT_GEOMETRY_COLUMN,
) -> GeoDataFrame:
    """
    Convert a DataFrame with coordinate columns to a GeoDataFrame of points.

    Coordinate columns are kept as ordinary attributes.

    Args:
        frame: DataFrame with x (longitude) and y (latitude) columns
        x_column: Name of x / longitude column
        y_column: Name of y / latitude column
        crs: Coordinate reference system (default: EPSG:4326)
        geometry_name: Name of the constructed geometry column

    Returns:
        GeoDataFrame with Point geometries

    Raises:
        SchemaError: If a coordinate column is missing or not numeric

    Example:
        df = pd.DataFrame({'lat': [40.7, 34.0], 'lon': [-74.0, -118.2]})
        gdf = xy_to_geodataframe(df, 'lon', 'lat')
    """
    available = list(frame.columns)
    for column in (x_column, y_column):
        check_column_exists(column, available, "coordinate column")
        if not pd.api.types.is_numeric_dtype(frame[column]):
            raise SchemaError(column, f"coordinate values must be numeric, got {frame[column].dtype}", available)

    if geometry_name in frame.columns:
        raise SchemaError(geometry_name, "geometry column name collides with an existing column", available)

    logger.debug(f"Building point geometries from '{x_column}', '{y_column}' for {len(frame)} rows")

    geometry = points(frame[x_column].to_numpy(dtype=float), frame[y_column].to_numpy(dtype=float))
    data = frame.copy()
    data[geometry_name] = GeoSeries(geometry, index=frame.index, crs=crs)
    return GeoDataFrame(data, geometry=geometry_name)


def wkt_to_geodataframe(
    frame: pd.DataFrame,
    wkt_column: str,
    crs: Optional[str] = DEFAULT_CRS,
    geometry_name: Optional[str] = None,
) -> GeoDataFrame:
    """
    Convert a DataFrame with a WKT column to a GeoDataFrame.

    The WKT column is replaced by parsed geometries; it keeps its name unless
    ``geometry_name`` is given.

    Args:
        frame: DataFrame with WKT geometry column
        wkt_column: Name of column containing WKT strings
        crs: Coordinate reference system (default: EPSG:4326)
        geometry_name: Optional new name of the geometry column

    Returns:
        GeoDataFrame with parsed geometries

    Raises:
        SchemaError: If the column is missing or WKT parsing fails
    """
    check_column_exists(wkt_column, list(frame.columns), "WKT column")

    try:
        geometry = [wkt.loads(value) if isinstance(value, str) else None for value in frame[wkt_column]]
    except ShapelyError as e:
        raise SchemaError(wkt_column, f"cannot parse WKT geometry: {e}", list(frame.columns))

    data = frame.copy()
    data[wkt_column] = GeoSeries(geometry, index=frame.index, crs=crs)
    gdf = GeoDataFrame(data, geometry=wkt_column)
    if geometry_name is not None and geometry_name != wkt_column:
        if geometry_name in gdf.columns:
            raise SchemaError(geometry_name, "geometry column name collides with an existing column", list(gdf.columns))
        gdf = gdf.rename_geometry(geometry_name)
    return gdf

# ============================================================================
# Geometry Resolution
# ============================================================================

def ensure_geodataframe(
    table,
    geometry_column_name: Optional[str] = None,
    crs: Optional[str] = None,
    coords: Optional[Sequence[str]] = None,
    wkt_column: Optional[str] = None,
) -> GeoDataFrame:
    """
    Locate or construct the geometry column of a table.

    Args:
        table: GeoDataFrame or plain DataFrame
        geometry_column_name: Geometry column to activate (existing GeoDataFrame)
            or to create (constructed geometry)
        crs: CRS of constructed geometry; assigned to a GeoDataFrame lacking one
        coords: (x_column, y_column) to build points from
        wkt_column: Column holding WKT strings

    Returns:
        GeoDataFrame: A copy of the table with an active geometry column

    Raises:
        SchemaError: If no geometry can be located or constructed
    """
    if coords is not None and wkt_column is not None:
        raise SchemaError(wkt_column, "give either coords or wkt_column, not both")

    if coords is not None:
        x_column, y_column = _split_coords(coords)
        return xy_to_geodataframe(
            pd.DataFrame(table), x_column, y_column,
            crs=crs or DEFAULT_CRS,
            geometry_name=geometry_column_name or DEFAULT_GEOMETRY_COLUMN,
        )

    if wkt_column is not None:
        return wkt_to_geodataframe(pd.DataFrame(table), wkt_column, crs=crs or DEFAULT_CRS, geometry_name=geometry_column_name)

    if not isinstance(table, GeoDataFrame):
        raise SchemaError(
            geometry_column_name or DEFAULT_GEOMETRY_COLUMN,
            "plain tables need coords=(x, y) or wkt_column to construct geometry",
            list(table.columns),
        )

    gdf = table.copy()
    if geometry_column_name is not None and geometry_column_name != active_geometry_name(gdf):
        check_column_exists(geometry_column_name, list(gdf.columns), "geometry column")
        try:
            gdf = gdf.set_geometry(geometry_column_name)
        except (TypeError, ValueError) as e:
            raise SchemaError(geometry_column_name, f"column does not hold geometries: {e}", list(gdf.columns))

    if active_geometry_name(gdf) is None:
        raise SchemaError(
            geometry_column_name or DEFAULT_GEOMETRY_COLUMN,
            "table has no active geometry column",
            list(gdf.columns),
        )

    if crs is not None:
        if gdf.crs is None:
            gdf = gdf.set_crs(crs)
        else:
            logger.debug(f"Table already has CRS {gdf.crs}; ignoring crs={crs}")
    return gdf


def active_geometry_name(gdf: GeoDataFrame) -> Optional[str]:
    """Name of the active geometry column, or None when it is not set or was dropped."""
    try:
        return gdf.geometry.name
    except AttributeError:
        return None


def _split_coords(coords: Sequence[str]) -> Tuple[str, str]:
    if len(coords) != 2:
        raise SchemaError(str(coords), "coords must name exactly 2 columns (x, y)")
    return coords[0], coords[1]
