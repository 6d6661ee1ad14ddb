"""
Regular Space-Time Cube Conversion

Conversions between feature tables and xarray vector data cubes with a
geometry dimension (coordinate values are shapely geometries) and a time
dimension. Only regularly spaced times can form a cube.
"""

from typing import Optional, Sequence, Union

import numpy as np
import pandas as pd
import shapely
import xarray as xr
from geopandas import GeoDataFrame
from shapely.geometry.base import BaseGeometry

from ..core.config import (
    CUBE_CRS_ATTR, CUBE_GEOMETRY_DIM, CUBE_TIME_DIM, FROM_SFTIME, GEOMETRY_KEY_COLUMN, TO_SFTIME
)
from ..core.core_types import SpatiotemporalFeatureTable
from ..core.exceptions import ConversionError, check_column_exists
from ..core.logging_config import get_logger
from ..coordinates.time_handler import is_interval_valued, is_regular, is_temporal_dtype
from ..main import tag
from .registry import register_adapter

logger = get_logger('conversion.cube')

# ============================================================================
# Feature Table -> Cube
# ============================================================================

@register_adapter(
    'xarray', FROM_SFTIME,
    description="Regular (geometry, time) vector data cube; fails on irregular times",
)
def to_xarray(
    table: SpatiotemporalFeatureTable,
    variables: Optional[Sequence[str]] = None,
    geometry_dim: str = CUBE_GEOMETRY_DIM,
    time_dim: str = CUBE_TIME_DIM,
) -> xr.Dataset:
    """
    Convert a feature table to a regular space-time cube.

    Each distinct geometry becomes one position along ``geometry_dim`` (in
    order of first appearance), each distinct time one position along
    ``time_dim``. Combinations without a row are filled with NaN.

    Args:
        table: Tagged table
        variables: Attribute columns to carry (default: all but geometry and time)
        geometry_dim: Name of the geometry dimension
        time_dim: Name of the time dimension

    Returns:
        xr.Dataset: Cube with dims (geometry_dim, time_dim); CRS in attrs

    Raises:
        ConversionError: If the table is untagged, its times are missing,
            interval-valued or irregularly spaced, a (geometry, time)
            pair occurs more than once, or a variable is named like a dimension
    """
    source = "SpatiotemporalFeatureTable"
    if not table.is_tagged:
        raise ConversionError(source, "table has no active time column")

    times = table.time_values
    if is_interval_valued(times):
        raise ConversionError(source, f"time column '{table.time_column}' holds time ranges; a regular cube needs instants")
    if times.isna().any():
        raise ConversionError(source, f"time column '{table.time_column}' has missing values")
    if not is_regular(times):
        raise ConversionError(source, f"time column '{table.time_column}' is irregularly spaced")

    if variables is None:
        variables = [c for c in table.columns if c not in (table.geometry_column, table.time_column)]
    for variable in variables:
        check_column_exists(variable, table.columns, "variable column")
        if variable in (time_dim, geometry_dim, GEOMETRY_KEY_COLUMN):
            raise ConversionError(
                source,
                f"variable '{variable}' collides with a cube dimension name; "
                "rename it, choose other dimension names, or leave it out of variables"
            )

    codes, unique_wkb = pd.factorize(table.data.geometry.to_wkb())

    frame = pd.DataFrame({GEOMETRY_KEY_COLUMN: codes, time_dim: times.reset_index(drop=True)})
    for variable in variables:
        frame[variable] = table.data[variable].to_numpy()

    if frame.duplicated([GEOMETRY_KEY_COLUMN, time_dim]).any():
        raise ConversionError(source, "a (geometry, time) combination occurs more than once")

    dataset = frame.set_index([GEOMETRY_KEY_COLUMN, time_dim]).to_xarray()
    dataset = dataset.rename({GEOMETRY_KEY_COLUMN: geometry_dim})
    geometries = shapely.from_wkb(np.asarray(unique_wkb, dtype=object))
    dataset = dataset.assign_coords({geometry_dim: geometries})

    if table.crs is not None:
        dataset.attrs[CUBE_CRS_ATTR] = table.crs.to_string()

    logger.info(
        "Converted %d rows to cube with %d geometries x %d times",
        len(table), dataset.sizes[geometry_dim], dataset.sizes[time_dim]
    )
    return dataset

# ============================================================================
# Cube -> Feature Table
# ============================================================================

@register_adapter(
    'xarray', TO_SFTIME,
    description="Vector data cube with a geometry and a time dimension; one row per cell",
)
def from_xarray(
    dataset: Union[xr.Dataset, xr.DataArray],
    geometry_dim: str = CUBE_GEOMETRY_DIM,
    time_dim: str = CUBE_TIME_DIM,
    crs: Optional[str] = None,
) -> SpatiotemporalFeatureTable:
    """
    Convert a vector data cube to a feature table with one row per cell.

    Args:
        dataset: Cube whose ``geometry_dim`` coordinate holds shapely geometries
        geometry_dim: Name of the geometry dimension
        time_dim: Name of the time dimension
        crs: CRS (default: ``dataset.attrs['crs']``)

    Returns:
        SpatiotemporalFeatureTable: Table tagged with ``time_dim``

    Raises:
        ConversionError: If a dimension is missing, the time coordinate is not
            temporal, or the geometry coordinate does not hold geometries
    """
    if not isinstance(dataset, (xr.Dataset, xr.DataArray)):
        raise ConversionError(type(dataset).__name__, "the 'xarray' adapter expects an xarray Dataset or DataArray")
    if isinstance(dataset, xr.DataArray):
        dataset = dataset.to_dataset(name=dataset.name or "value")

    source = "xarray.Dataset"
    for dim in (geometry_dim, time_dim):
        if dim not in dataset.dims:
            raise ConversionError(source, f"dimension '{dim}' not found; available: {', '.join(map(str, dataset.dims))}")

    if time_dim not in dataset.coords or not is_temporal_dtype(dataset[time_dim].dtype):
        raise ConversionError(source, f"dimension '{time_dim}' has no datetime coordinate")

    if geometry_dim not in dataset.coords or not all(
        isinstance(g, BaseGeometry) for g in dataset[geometry_dim].values
    ):
        raise ConversionError(source, f"coordinate '{geometry_dim}' does not hold shapely geometries")

    # Flatten on integer positions, then map positions back to geometries
    geometries = np.asarray(dataset[geometry_dim].values, dtype=object)
    positions = np.arange(dataset.sizes[geometry_dim])
    frame = dataset.assign_coords({geometry_dim: positions}).to_dataframe().reset_index()
    frame[geometry_dim] = geometries[frame[geometry_dim].to_numpy()]

    gdf = GeoDataFrame(
        frame,
        geometry=geometry_dim,
        crs=crs or dataset.attrs.get(CUBE_CRS_ATTR),
    )
    logger.debug("Converted cube with %d cells to feature table", len(gdf))
    return tag(gdf, time_dim)
