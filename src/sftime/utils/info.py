"""
sftime Information Utilities

This module provides functions for describing feature tables: a dictionary
of table facts and the printable summary header.
"""

from typing import Dict

import pandas as pd

from ..core.core_types import SpatiotemporalFeatureTable
from ..coordinates.time_handler import is_interval_valued


# ============================================================================
# Table Information
# ============================================================================

def _time_class(times: pd.Series) -> str:
    """Describe the kind of values held by a normalized time column."""
    if isinstance(times.dtype, pd.PeriodDtype):
        return f"period[{times.dtype.freq.freqstr}]"
    if is_interval_valued(times):
        return "interval"
    return str(times.dtype)


def get_table_info(table: SpatiotemporalFeatureTable) -> Dict:
    """
    Get information about a feature table.

    Args:
        table: Feature table (tagged or untagged)

    Returns:
        Dict: Table information

    Examples:
        >>> info = get_table_info(st)
        >>> print(f"{info['n_features']} features, time column {info['time_column']}")
        >>> print(f"Time range: {info['time_range']}")
    """
    geometry = table.data.geometry
    info = {
        'n_features': len(table),
        'n_fields': len(table.columns) - 1,
        'columns': table.columns,
        'geometry_column': table.geometry_column,
        'geometry_types': sorted(geometry.geom_type.dropna().unique().tolist()),
        'crs': table.crs.to_string() if table.crs is not None else None,
        'bounds': table.total_bounds if len(table) else None,
        'time_column': table.time_column,
        'time_class': None,
        'time_range': None,
    }

    if table.is_tagged:
        info['time_class'] = _time_class(table.time_values)
        info['time_range'] = table.time_range

    return info


def format_table_summary(table: SpatiotemporalFeatureTable) -> str:
    """
    Format the printable header of a feature table followed by its first rows.

    Args:
        table: Feature table

    Returns:
        str: Multi-line summary
    """
    info = get_table_info(table)

    if info['geometry_types']:
        geometry_type = info['geometry_types'][0] if len(info['geometry_types']) == 1 else "GEOMETRY"
    else:
        geometry_type = "EMPTY"

    lines = [
        f"Spatiotemporal feature collection with {info['n_features']} features and {info['n_fields']} fields",
        f"Geometry type: {geometry_type}",
    ]
    if info['bounds'] is not None:
        xmin, ymin, xmax, ymax = info['bounds']
        lines.append(f"Bounding box:  xmin: {xmin:g} ymin: {ymin:g} xmax: {xmax:g} ymax: {ymax:g}")
    lines.append(f"CRS:           {info['crs'] or 'NA'}")

    if info['time_column'] is not None:
        start, end = info['time_range']
        lines.append(f"Time column:   {info['time_column']} ({info['time_class']})")
        lines.append(f"Time range:    {start} to {end}")
    else:
        lines.append("Time column:   none (untagged)")

    lines.append(repr(pd.DataFrame(table.data).head(10)))
    return "\n".join(lines)
