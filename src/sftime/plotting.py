"""
sftime Time Panel Plotting

Small-multiple maps: one panel per time bin, each rendered by
``GeoDataFrame.plot`` on its own matplotlib axis.
"""

import math
from typing import Callable, Optional, Tuple

import pandas as pd

from .core.config import DEFAULT_PANEL_COLUMNS, DEFAULT_PANEL_SIZE, PANEL_TITLE_FORMAT
from .core.core_types import SpatiotemporalFeatureTable, TimeBinning
from .core.exceptions import SchemaError, check_column_exists
from .core.logging_config import get_logger
from .processing.binning import partition_by_time

logger = get_logger('plotting')


def _render_partition(data, ax, value_column: Optional[str], **plot_kwargs):
    """Default renderer: delegate to GeoDataFrame.plot."""
    return data.plot(column=value_column, ax=ax, **plot_kwargs)


def plot(
    table: SpatiotemporalFeatureTable,
    value_column: Optional[str] = None,
    binning: Optional[TimeBinning] = None,
    ncols: Optional[int] = None,
    figsize: Optional[Tuple[float, float]] = None,
    render: Optional[Callable] = None,
    **plot_kwargs,
):
    """
    Plot one map panel per time bin.

    Rows are partitioned by ``binning``; each non-empty partition is rendered
    once, titled with the partition's start time. Numeric value columns share
    one colour scale across panels unless vmin/vmax are given.

    Args:
        table: Tagged table
        value_column: Attribute used to colour features (None: plain geometries)
        binning: Time binning rule (default: equal-width bins)
        ncols: Panels per row
        figsize: Figure size (default: 4x4 inches per panel)
        render: Callable(data, ax, value_column, **kwargs) used instead of GeoDataFrame.plot
        **plot_kwargs: Extra arguments for the renderer

    Returns:
        Tuple[Figure, ndarray]: Figure and 2-D array of axes

    Raises:
        SchemaError: If the table is untagged, has no time values, or
            ``value_column`` does not exist

    Examples:
        >>> fig, axes = plot(storms, "wind", TimeBinning(width="1D"))
    """
    import matplotlib.pyplot as plt

    if value_column is not None:
        check_column_exists(value_column, table.columns, "value column")

    partitions = partition_by_time(table, binning)
    if not partitions:
        raise SchemaError(str(table.time_column), "no time values to plot", table.columns)

    if value_column is not None and pd.api.types.is_numeric_dtype(table.data[value_column]):
        plot_kwargs.setdefault("vmin", table.data[value_column].min())
        plot_kwargs.setdefault("vmax", table.data[value_column].max())

    render = render or _render_partition
    n_panels = len(partitions)
    ncols = max(1, min(ncols or DEFAULT_PANEL_COLUMNS, n_panels))
    nrows = math.ceil(n_panels / ncols)
    if figsize is None:
        figsize = (DEFAULT_PANEL_SIZE[0] * ncols, DEFAULT_PANEL_SIZE[1] * nrows)

    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)
    flat_axes = axes.ravel()

    for ax, partition in zip(flat_axes, partitions):
        if len(partition):
            render(partition.table.data, ax, value_column, **plot_kwargs)
        ax.set_title(partition.start.strftime(PANEL_TITLE_FORMAT))

    for ax in flat_axes[n_panels:]:
        ax.set_visible(False)

    logger.debug("Plotted %d time panels", n_panels)
    return fig, axes
