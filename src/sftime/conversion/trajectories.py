"""
Trajectory Conversion Adapters

Conversions between feature tables and the space-time point and trajectory
containers (SpaceTimePoints, Track, Tracks, TracksCollection).

Tracks and collections encode their grouping structurally; converting them
synthesizes ``track_name`` (and ``tracks_name``) columns so the grouping
survives as plain attributes.
"""

from typing import List

import pandas as pd
from geopandas import GeoDataFrame, GeoSeries

from ..core.config import (
    DEFAULT_GEOMETRY_COLUMN, DEFAULT_TIME_COLUMN, FROM_SFTIME, TO_SFTIME,
    TRACK_NAME_COLUMN, TRACKS_NAME_COLUMN,
)
from ..core.core_types import (
    SpaceTimePoints, SpatiotemporalFeatureTable, Track, Tracks, TracksCollection
)
from ..core.exceptions import ConversionError, SchemaError, check_column_exists
from ..core.logging_config import get_logger
from ..coordinates.time_handler import interval_end, interval_start, is_interval_valued, make_interval_series
from ..main import tag
from ..processing.operations import sort_by_time
from .registry import register_adapter

logger = get_logger('conversion.trajectories')

# ============================================================================
# Frame Construction
# ============================================================================

def _points_frame(points: SpaceTimePoints, source: str) -> GeoDataFrame:
    """Build the geometry table of a SpaceTimePoints object."""
    n = len(points)
    if points.data is not None:
        data = points.data.reset_index(drop=True).copy()
    else:
        data = pd.DataFrame(index=pd.RangeIndex(n))

    for reserved in (DEFAULT_TIME_COLUMN, DEFAULT_GEOMETRY_COLUMN):
        if reserved in data.columns:
            raise ConversionError(source, f"attribute column '{reserved}' collides with a synthesized column")

    start = pd.to_datetime(list(points.time))
    if points.end_time is not None:
        end = pd.to_datetime(list(points.end_time))
        if (end < start).any():
            raise ConversionError(source, "end_time precedes time for some records")
        if (end == start).all():
            data[DEFAULT_TIME_COLUMN] = start
        else:
            data[DEFAULT_TIME_COLUMN] = make_interval_series(start, end, index=data.index)
    else:
        data[DEFAULT_TIME_COLUMN] = start

    data[DEFAULT_GEOMETRY_COLUMN] = GeoSeries(list(points.geometry), index=data.index, crs=points.crs)
    return GeoDataFrame(data, geometry=DEFAULT_GEOMETRY_COLUMN)


def _insert_name_column(frame: GeoDataFrame, column: str, value: str, source: str) -> GeoDataFrame:
    if column in frame.columns:
        raise ConversionError(source, f"attribute column '{column}' collides with a synthesized grouping column")
    frame.insert(0, column, value)
    return frame


def _concat_frames(frames: List[GeoDataFrame], source: str) -> GeoDataFrame:
    crs_values = {str(f.crs) for f in frames}
    if len(crs_values) > 1:
        raise ConversionError(source, f"members use different CRS: {sorted(crs_values)}")
    combined = pd.concat(frames, ignore_index=True)
    return GeoDataFrame(combined, geometry=DEFAULT_GEOMETRY_COLUMN, crs=frames[0].crs)


def _check_source(source, expected: type, adapter: str) -> None:
    if not isinstance(source, expected):
        raise ConversionError(
            type(source).__name__,
            f"the '{adapter}' adapter expects a {expected.__name__}",
        )


def _tracks_frame(tracks: Tracks, source: str) -> GeoDataFrame:
    frames = [
        _insert_name_column(_points_frame(track.points, source), TRACK_NAME_COLUMN, name, source)
        for name, track in tracks.tracks.items()
    ]
    return _concat_frames(frames, source)

# ============================================================================
# To Feature Tables
# ============================================================================

@register_adapter(
    'space_time_points', TO_SFTIME,
    description="Irregular space-time points; end times become a datetime interval column",
)
def from_space_time_points(points: SpaceTimePoints) -> SpatiotemporalFeatureTable:
    """
    Convert space-time points to a feature table.

    Records with an ``end_time`` differing from their ``time`` yield a
    left-closed datetime interval column named ``time``.
    """
    _check_source(points, SpaceTimePoints, "space_time_points")
    return tag(_points_frame(points, "SpaceTimePoints"), DEFAULT_TIME_COLUMN)


@register_adapter('track', TO_SFTIME, description="Single trajectory; one row per point")
def from_track(track: Track) -> SpatiotemporalFeatureTable:
    """Convert a single trajectory to a feature table."""
    _check_source(track, Track, "track")
    return tag(_points_frame(track.points, "Track"), DEFAULT_TIME_COLUMN)


@register_adapter(
    'tracks', TO_SFTIME,
    description="Several trajectories of one object; synthesizes a track_name column",
)
def from_tracks(tracks: Tracks) -> SpatiotemporalFeatureTable:
    """
    Convert several trajectories to one feature table.

    Rows keep track order, then point order; a ``track_name`` column records
    which track each row came from.

    Examples:
        >>> st = from_tracks(Tracks({"A": track_a, "B": track_b}))
        >>> st.data["track_name"].value_counts()
    """
    _check_source(tracks, Tracks, "tracks")
    frame = _tracks_frame(tracks, "Tracks")
    logger.debug("Converted %d tracks into %d rows", len(tracks.tracks), len(frame))
    return tag(frame, DEFAULT_TIME_COLUMN)


@register_adapter(
    'tracks_collection', TO_SFTIME,
    description="Trajectories of several objects; synthesizes tracks_name and track_name columns",
)
def from_tracks_collection(collection: TracksCollection) -> SpatiotemporalFeatureTable:
    """Convert a collection of Tracks to one feature table with tracks_name and track_name columns."""
    _check_source(collection, TracksCollection, "tracks_collection")
    source = "TracksCollection"
    frames = [
        _insert_name_column(_tracks_frame(tracks, source), TRACKS_NAME_COLUMN, name, source)
        for name, tracks in collection.tracks.items()
    ]
    frame = _concat_frames(frames, source)
    logger.debug("Converted %d Tracks objects into %d rows", len(collection.tracks), len(frame))
    return tag(frame, DEFAULT_TIME_COLUMN)

# ============================================================================
# From Feature Tables
# ============================================================================

@register_adapter('space_time_points', FROM_SFTIME, description="Irregular space-time points")
def to_space_time_points(table: SpatiotemporalFeatureTable) -> SpaceTimePoints:
    """
    Convert a feature table to space-time points.

    Interval-valued times become ``time`` / ``end_time``; remaining columns
    become the attribute table.
    """
    if not table.is_tagged:
        raise SchemaError("<time>", "conversion requires an active time column", table.columns)

    times = table.time_values
    end_time = list(interval_end(times)) if is_interval_valued(times) else None
    attributes = pd.DataFrame(
        table.data.drop(columns=[table.geometry_column, table.time_column])
    ).reset_index(drop=True)

    return SpaceTimePoints(
        geometry=list(table.data.geometry),
        time=list(interval_start(times)),
        data=attributes,
        end_time=end_time,
        crs=table.crs.to_string() if table.crs is not None else None,
    )


@register_adapter('tracks', FROM_SFTIME, description="Trajectories grouped by a track name column")
def to_tracks(
    table: SpatiotemporalFeatureTable,
    track_column: str = TRACK_NAME_COLUMN,
) -> Tracks:
    """
    Split a feature table into trajectories by a track name column.

    Tracks keep the order of first appearance; points within a track are
    sorted by time. The track column is not carried into the points.
    """
    check_column_exists(track_column, table.columns, "track column")
    if not table.is_tagged:
        raise SchemaError("<time>", "conversion requires an active time column", table.columns)

    tracks = {}
    ordered = sort_by_time(table)
    for name in pd.unique(table.data[track_column]):
        members = ordered.data[ordered.data[track_column] == name].drop(columns=[track_column])
        member_table = SpatiotemporalFeatureTable(
            data=members,
            geometry_column=table.geometry_column,
            time_column=table.time_column,
        )
        tracks[str(name)] = Track(to_space_time_points(member_table))
    return Tracks(tracks)


@register_adapter(
    'tracks_collection', FROM_SFTIME,
    description="Collection of Tracks grouped by tracks name and track name columns",
)
def to_tracks_collection(
    table: SpatiotemporalFeatureTable,
    tracks_column: str = TRACKS_NAME_COLUMN,
    track_column: str = TRACK_NAME_COLUMN,
) -> TracksCollection:
    """Split a feature table into a collection of Tracks by two name columns."""
    check_column_exists(tracks_column, table.columns, "tracks column")

    collection = {}
    for name in pd.unique(table.data[tracks_column]):
        members = table.data[table.data[tracks_column] == name].drop(columns=[tracks_column])
        member_table = SpatiotemporalFeatureTable(
            data=members,
            geometry_column=table.geometry_column,
            time_column=table.time_column,
        )
        collection[str(name)] = to_tracks(member_table, track_column)
    return TracksCollection(collection)
