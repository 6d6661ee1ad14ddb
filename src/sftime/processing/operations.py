"""
sftime Geometry Operations

Every geometry-level operation is delegated unchanged to geopandas; the
metadata of the result is then re-derived from column names. Nothing here
reimplements a spatial predicate, join or transform.
"""

from typing import Any, Callable, Mapping, Optional, Sequence, Tuple, Union

import geopandas as gpd
import numpy as np
import pandas as pd
from geopandas import GeoDataFrame
from shapely.geometry.base import BaseGeometry

from ..core.config import JOIN_SUFFIXES
from ..core.core_types import SpatiotemporalFeatureTable, TimeRange
from ..core.exceptions import ParameterError, SchemaError, check_column_exists
from ..core.logging_config import get_logger
from ..coordinates.geometry_handler import active_geometry_name
from ..coordinates.time_handler import (
    interval_end, interval_start, is_temporal_series, normalize_time_range
)

logger = get_logger('processing.operations')

SPATIAL_PREDICATES = (
    "intersects", "within", "contains", "overlaps", "crosses",
    "touches", "covers", "covered_by", "contains_properly", "dwithin",
)

GeometryOperation = Callable[..., Any]

# ============================================================================
# Metadata Re-derivation
# ============================================================================

def _keep_left_duplicate(result: GeoDataFrame, column: str, right_suffix: str) -> GeoDataFrame:
    """Rename every repeat of a column after the first (left-hand) occurrence."""
    names = list(result.columns)
    seen = False
    for i, name in enumerate(names):
        if name == column:
            if seen:
                names[i] = f"{column}_{right_suffix}"
            seen = True
    result = result.copy()
    result.columns = names
    return result


def rederive_metadata(
    source: SpatiotemporalFeatureTable,
    result: Any,
    suffixes: Optional[Tuple[str, str]] = None,
) -> SpatiotemporalFeatureTable:
    """
    Wrap an operation result, carrying over the source's designations by name.

    Args:
        source: Table the operation was applied to
        result: Value returned by the operation
        suffixes: (left, right) suffixes the operation applied to colliding
            column names; the left-hand column keeps the time designation

    Returns:
        SpatiotemporalFeatureTable: Result with re-derived metadata

    Raises:
        SchemaError: If the result no longer has a geometry column
    """
    if isinstance(result, SpatiotemporalFeatureTable):
        result = result.data

    if not isinstance(result, GeoDataFrame) or active_geometry_name(result) is None:
        raise SchemaError(
            source.geometry_column,
            f"operation result has no geometry column (got {type(result).__name__})",
            list(getattr(result, "columns", [])),
        )

    time_column = source.time_column
    if time_column is not None:
        right_suffix = suffixes[1] if suffixes else JOIN_SUFFIXES[1]
        if list(result.columns).count(time_column) > 1:
            result = _keep_left_duplicate(result, time_column, right_suffix)
        elif time_column not in result.columns and suffixes:
            left_name = f"{time_column}_{suffixes[0]}"
            if left_name in result.columns:
                logger.debug("Restoring time column '%s' from '%s'", time_column, left_name)
                result = result.rename(columns={left_name: time_column})

        if time_column not in result.columns:
            logger.warning("Operation dropped time column '%s'; result is untagged", time_column)
            time_column = None
        elif not is_temporal_series(result[time_column]):
            logger.warning("Time column '%s' is no longer temporal; result is untagged", time_column)
            time_column = None

    return SpatiotemporalFeatureTable(
        data=result,
        geometry_column=active_geometry_name(result),
        time_column=time_column,
    )


def apply_geometry_operation(
    table: SpatiotemporalFeatureTable,
    op: GeometryOperation,
    *args,
    suffixes: Optional[Tuple[str, str]] = None,
    **kwargs,
) -> SpatiotemporalFeatureTable:
    """
    Apply a geopandas operation to the table data and re-tag the result.

    Args:
        table: Input table
        op: Callable taking the GeoDataFrame as first argument
        *args: Extra positional arguments for ``op``
        suffixes: Column-collision suffixes applied by ``op`` (joins)
        **kwargs: Extra keyword arguments for ``op``

    Returns:
        SpatiotemporalFeatureTable: Result; untagged when the time column did not survive

    Examples:
        >>> moved = apply_geometry_operation(st, GeoDataFrame.to_crs, "EPSG:3857")
        >>> buffered = apply_geometry_operation(st, lambda gdf: gdf.assign(geometry=gdf.buffer(1.0)))
    """
    op_name = getattr(op, "__name__", repr(op))
    logger.debug("Applying %s to table with %d rows", op_name, len(table))
    result = op(table.data, *args, **kwargs)
    return rederive_metadata(table, result, suffixes)

# ============================================================================
# Coordinate Reference Systems
# ============================================================================

def transform_crs(table: SpatiotemporalFeatureTable, crs) -> SpatiotemporalFeatureTable:
    """Reproject all geometries to another CRS."""
    return apply_geometry_operation(table, GeoDataFrame.to_crs, crs)


def set_crs(table: SpatiotemporalFeatureTable, crs, allow_override: bool = False) -> SpatiotemporalFeatureTable:
    """Declare the CRS of the geometries without transforming coordinates."""
    return apply_geometry_operation(table, GeoDataFrame.set_crs, crs, allow_override=allow_override)

# ============================================================================
# Spatial Selection and Joins
# ============================================================================

def _validate_predicate(predicate: str) -> None:
    if predicate not in SPATIAL_PREDICATES:
        raise ParameterError("predicate", predicate, f"Supported predicates: {', '.join(SPATIAL_PREDICATES)}")


def _as_geodataframe(other, crs) -> GeoDataFrame:
    """Turn a filter/join operand into a plain GeoDataFrame."""
    if isinstance(other, SpatiotemporalFeatureTable):
        return other.data
    if isinstance(other, BaseGeometry):
        return GeoDataFrame(geometry=[other], crs=crs)
    if isinstance(other, gpd.GeoSeries):
        return GeoDataFrame(geometry=other)
    if isinstance(other, GeoDataFrame):
        return other
    raise ParameterError("other", type(other).__name__, "Expected a geometry, GeoSeries, GeoDataFrame or feature table")


def filter_bbox(
    table: SpatiotemporalFeatureTable,
    bbox: Sequence[float],
) -> SpatiotemporalFeatureTable:
    """
    Keep features intersecting a bounding box.

    Args:
        table: Input table
        bbox: (minx, miny, maxx, maxy) in the table's CRS
    """
    if len(bbox) != 4:
        raise ParameterError("bbox", str(bbox), "Must contain exactly 4 values (minx, miny, maxx, maxy)")
    minx, miny, maxx, maxy = bbox
    if minx > maxx or miny > maxy:
        raise ParameterError("bbox", str(bbox), "Minimum must be <= maximum")

    def _cx_filter(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf.cx[minx:maxx, miny:maxy]

    return apply_geometry_operation(table, _cx_filter)


def spatial_filter(
    table: SpatiotemporalFeatureTable,
    other,
    predicate: str = "intersects",
    **kwargs,
) -> SpatiotemporalFeatureTable:
    """
    Keep features satisfying a spatial predicate against another geometry set.

    Row order and row identity of the input are preserved; no columns of
    ``other`` are added.

    Args:
        table: Input table
        other: Shapely geometry, GeoSeries, GeoDataFrame or feature table
        predicate: Spatial predicate name passed to geopandas
        **kwargs: Extra predicate arguments (e.g. distance for "dwithin")
    """
    _validate_predicate(predicate)
    right = _as_geodataframe(other, table.crs)
    if table.crs is not None and right.crs is not None and right.crs != table.crs:
        right = right.to_crs(table.crs)

    def _predicate_filter(gdf: GeoDataFrame) -> GeoDataFrame:
        left_idx, _ = right.sindex.query(gdf.geometry, predicate=predicate, **kwargs)
        keep = np.zeros(len(gdf), dtype=bool)
        keep[np.unique(left_idx)] = True
        return gdf.iloc[np.flatnonzero(keep)]

    return apply_geometry_operation(table, _predicate_filter)


def spatial_join(
    table: SpatiotemporalFeatureTable,
    other,
    how: str = "inner",
    predicate: str = "intersects",
    **kwargs,
) -> SpatiotemporalFeatureTable:
    """
    Join attributes of another geometry table by spatial relationship.

    Colliding column names get "_left"/"_right" suffixes; when the time column
    collides, the left-hand (this table's) column keeps the time designation
    under its original name. A tagged right-hand table is joined untagged.

    Args:
        table: Left table
        other: Right table (GeoDataFrame or feature table)
        how: "inner", "left" or "right"
        predicate: Spatial predicate name passed to geopandas
        **kwargs: Extra arguments for geopandas.sjoin
    """
    _validate_predicate(predicate)
    if how not in ("inner", "left", "right"):
        raise ParameterError("how", how, "Must be 'inner', 'left' or 'right'")
    right = _as_geodataframe(other, table.crs)

    lsuffix, rsuffix = JOIN_SUFFIXES
    return apply_geometry_operation(
        table, gpd.sjoin, right,
        how=how, predicate=predicate, lsuffix=lsuffix, rsuffix=rsuffix,
        suffixes=JOIN_SUFFIXES,
        **kwargs,
    )

# ============================================================================
# Row and Column Selection
# ============================================================================

def select_rows(table: SpatiotemporalFeatureTable, rows: Union[slice, Sequence[int]]) -> SpatiotemporalFeatureTable:
    """Select rows by position."""
    def _iloc(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf.iloc[rows]

    return apply_geometry_operation(table, _iloc)


def filter_rows(table: SpatiotemporalFeatureTable, mask) -> SpatiotemporalFeatureTable:
    """
    Select rows by a boolean mask, or a callable computing one from the data.

    Examples:
        >>> strong = filter_rows(storms, lambda gdf: gdf["wind"] > 50)
    """
    def _mask_filter(gdf: GeoDataFrame) -> GeoDataFrame:
        selected = mask(gdf) if callable(mask) else mask
        return gdf.loc[np.asarray(selected, dtype=bool)]

    return apply_geometry_operation(table, _mask_filter)


def select_columns(
    table: SpatiotemporalFeatureTable,
    columns: Sequence[str],
    keep_geometry: bool = True,
) -> SpatiotemporalFeatureTable:
    """
    Select columns by name.

    The geometry column is kept unless ``keep_geometry`` is False. The time
    column is not sticky: leaving it out yields an untagged table.
    """
    available = table.columns
    for column in columns:
        check_column_exists(column, available)

    selected = list(columns)
    if keep_geometry and table.geometry_column not in selected:
        selected.append(table.geometry_column)

    def _select(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf[selected]

    return apply_geometry_operation(table, _select)


def drop_columns(table: SpatiotemporalFeatureTable, columns: Sequence[str]) -> SpatiotemporalFeatureTable:
    """Drop columns by name; dropping the time column untags the table."""
    for column in columns:
        check_column_exists(column, table.columns)
    return apply_geometry_operation(table, GeoDataFrame.drop, columns=list(columns))


def rename_columns(table: SpatiotemporalFeatureTable, mapping: Mapping[str, str]) -> SpatiotemporalFeatureTable:
    """Rename columns; geometry and time designations follow their columns."""
    for column in mapping:
        check_column_exists(column, table.columns)

    data = table.data
    if table.geometry_column in mapping:
        data = data.rename_geometry(mapping[table.geometry_column])
    others = {old: new for old, new in mapping.items() if old != table.geometry_column}
    if others:
        data = data.rename(columns=others)

    time_column = table.time_column
    if time_column is not None:
        time_column = mapping.get(time_column, time_column)

    return SpatiotemporalFeatureTable(
        data=data,
        geometry_column=active_geometry_name(data),
        time_column=time_column,
    )

# ============================================================================
# Time-Based Operations
# ============================================================================

def _require_time(table: SpatiotemporalFeatureTable) -> None:
    if not table.is_tagged:
        raise SchemaError("<time>", "operation requires an active time column", table.columns)


def sort_by_time(table: SpatiotemporalFeatureTable, ascending: bool = True) -> SpatiotemporalFeatureTable:
    """Order rows by (start) time; missing times go last."""
    _require_time(table)
    starts = interval_start(table.time_values)
    keys = starts.reset_index(drop=True)
    order = keys.sort_values(ascending=ascending, kind="stable", na_position="last").index.to_numpy()

    def _reorder(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf.iloc[order]

    return apply_geometry_operation(table, _reorder)


def filter_by_time(table: SpatiotemporalFeatureTable, time_range: TimeRange) -> SpatiotemporalFeatureTable:
    """
    Keep rows whose time falls in (or whose time range overlaps) a closed time range.

    Args:
        table: Tagged table
        time_range: (start, end); either bound may be None

    Examples:
        >>> july = filter_by_time(storms, ("2020-07-01", "2020-07-31 23:59"))
    """
    _require_time(table)
    tr_start, tr_end = normalize_time_range(time_range)
    times = table.time_values
    starts = interval_start(times)
    ends = interval_end(times)

    mask = times.notna()
    if tr_start is not None:
        mask = mask & (ends >= tr_start)
    if tr_end is not None:
        mask = mask & (starts <= tr_end)
    positions = np.flatnonzero(mask.to_numpy(dtype=bool))

    def _time_filter(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf.iloc[positions]

    return apply_geometry_operation(table, _time_filter)

# ============================================================================
# Attribute Joins and Row Binding
# ============================================================================

def merge_attributes(
    table: SpatiotemporalFeatureTable,
    other: pd.DataFrame,
    on: Optional[Union[str, Sequence[str]]] = None,
    how: str = "left",
    **kwargs,
) -> SpatiotemporalFeatureTable:
    """
    Join a plain attribute table by key columns.

    Colliding column names get "_left"/"_right" suffixes; the left-hand time
    column keeps the designation.
    """
    if isinstance(other, GeoDataFrame):
        raise ParameterError("other", "GeoDataFrame", "Use spatial_join to combine two geometry tables")

    pandas_suffixes = tuple(f"_{s}" for s in JOIN_SUFFIXES)

    def _attribute_merge(gdf: GeoDataFrame) -> GeoDataFrame:
        return gdf.merge(other, on=on, how=how, suffixes=pandas_suffixes, **kwargs)

    return apply_geometry_operation(table, _attribute_merge, suffixes=JOIN_SUFFIXES)


def concat_tables(tables: Sequence[SpatiotemporalFeatureTable], ignore_index: bool = False) -> SpatiotemporalFeatureTable:
    """
    Bind the rows of several tables.

    All tables must share geometry column, time column and CRS.

    Raises:
        SchemaError: If the tables are incompatible
    """
    if not tables:
        raise ParameterError("tables", "[]", "At least one table is required")

    first = tables[0]
    for other in tables[1:]:
        if other.geometry_column != first.geometry_column:
            raise SchemaError(other.geometry_column, f"geometry column differs from '{first.geometry_column}'", other.columns)
        if other.time_column != first.time_column:
            raise SchemaError(str(other.time_column), f"time column differs from '{first.time_column}'", other.columns)
        if other.crs != first.crs:
            raise SchemaError(other.geometry_column, f"CRS {other.crs} differs from {first.crs}", other.columns)

    combined = pd.concat([t.data for t in tables], ignore_index=ignore_index)
    combined = GeoDataFrame(combined, geometry=first.geometry_column, crs=first.crs)
    logger.debug("Concatenated %d tables into %d rows", len(tables), len(combined))
    return rederive_metadata(first, combined)
