"""Tests for space-time point and trajectory conversions."""

import pandas as pd
import pytest
from shapely.geometry import Point

from sftime import (
    ConversionError,
    SchemaError,
    SpaceTimePoints,
    Track,
    Tracks,
    TracksCollection,
    from_space_time_points,
    from_track,
    from_tracks,
    from_tracks_collection,
    tag,
    to_space_time_points,
    to_tracks,
    to_tracks_collection,
)

from tests.factories import BASE_TIME


def _points(n: int = 5, offset: float = 0.0, start=BASE_TIME, **kwargs) -> SpaceTimePoints:
    return SpaceTimePoints(
        geometry=[Point(offset + i, offset) for i in range(n)],
        time=list(pd.date_range(start, periods=n, freq="h")),
        crs="EPSG:4326",
        **kwargs,
    )


def _track(offset: float = 0.0, start=BASE_TIME) -> Track:
    return Track(_points(offset=offset, start=start))


# ── Containers ───────────────────────────────────────────────────────────────


class TestContainers:
    def test_points_length_mismatch(self) -> None:
        with pytest.raises(ValueError):
            SpaceTimePoints(geometry=[Point(0, 0)], time=[BASE_TIME, BASE_TIME])

    def test_track_requires_ordered_times(self) -> None:
        points = SpaceTimePoints(
            geometry=[Point(0, 0), Point(1, 1)],
            time=[BASE_TIME + pd.Timedelta("1h"), BASE_TIME],
        )
        with pytest.raises(ValueError):
            Track(points)

    def test_default_track_names(self) -> None:
        tracks = Tracks([_track(), _track(10)])
        assert list(tracks.tracks) == ["Track1", "Track2"]
        assert len(tracks) == 10

    def test_default_collection_names(self) -> None:
        collection = TracksCollection([Tracks([_track()]), Tracks([_track(5)])])
        assert list(collection.tracks) == ["Tracks1", "Tracks2"]

    def test_members_are_validated(self) -> None:
        with pytest.raises(ValueError):
            Tracks({"A": _points()})


# ── To feature tables ────────────────────────────────────────────────────────


class TestToFeatureTable:
    def test_space_time_points(self) -> None:
        data = pd.DataFrame({"depth": [1.0, 2.0, 3.0, 4.0, 5.0]})
        st = from_space_time_points(_points(data=data))
        assert st.time_column == "time"
        assert st.columns == ["depth", "time", "geometry"]
        assert st.crs.to_epsg() == 4326

    def test_end_time_becomes_interval(self) -> None:
        starts = list(pd.date_range(BASE_TIME, periods=5, freq="h"))
        ends = [t + pd.Timedelta("30min") for t in starts]
        st = from_space_time_points(_points(end_time=ends))
        assert isinstance(st.data["time"].dtype, pd.IntervalDtype)
        assert st.time_range == (starts[0], ends[-1])

    def test_equal_end_time_stays_instant(self) -> None:
        starts = list(pd.date_range(BASE_TIME, periods=5, freq="h"))
        st = from_space_time_points(_points(end_time=starts))
        assert pd.api.types.is_datetime64_any_dtype(st.data["time"])

    def test_end_before_start_fails(self) -> None:
        starts = list(pd.date_range(BASE_TIME, periods=5, freq="h"))
        ends = [t - pd.Timedelta("1min") for t in starts]
        with pytest.raises(ConversionError):
            from_space_time_points(_points(end_time=ends))

    def test_reserved_attribute_name_fails(self) -> None:
        with pytest.raises(ConversionError):
            from_space_time_points(_points(data=pd.DataFrame({"time": range(5)})))

    def test_track(self) -> None:
        st = from_track(_track())
        assert len(st) == 5
        assert "track_name" not in st.columns

    def test_tracks(self) -> None:
        st = from_tracks(Tracks({"A": _track(), "B": _track(10)}))
        assert len(st) == 10
        assert st.columns[0] == "track_name"
        assert st.data["track_name"].value_counts().to_dict() == {"A": 5, "B": 5}
        assert st.time_column == "time"

    def test_tracks_collection(self) -> None:
        collection = TracksCollection({
            "gull": Tracks({"A": _track(), "B": _track(10)}),
            "tern": Tracks({"C": _track(20)}),
        })
        st = from_tracks_collection(collection)
        assert len(st) == 15
        assert st.columns[:2] == ["tracks_name", "track_name"]
        assert st.data.groupby("tracks_name").size().to_dict() == {"gull": 10, "tern": 5}

    def test_mixed_crs_fails(self) -> None:
        other = Track(SpaceTimePoints(geometry=[Point(0, 0)], time=[BASE_TIME], crs="EPSG:3857"))
        with pytest.raises(ConversionError, match="CRS"):
            from_tracks(Tracks({"A": _track(), "B": other}))

    def test_wrong_container_type(self) -> None:
        with pytest.raises(ConversionError, match="expects a Tracks"):
            from_tracks(_track())
        with pytest.raises(ConversionError, match="expects a SpaceTimePoints"):
            from_space_time_points(_track())
        with pytest.raises(ConversionError, match="expects a TracksCollection"):
            from_tracks_collection(Tracks({"A": _track()}))


# ── From feature tables ──────────────────────────────────────────────────────


class TestFromFeatureTable:
    def test_to_space_time_points(self) -> None:
        data = pd.DataFrame({"depth": [1.0, 2.0, 3.0, 4.0, 5.0]})
        points = to_space_time_points(from_space_time_points(_points(data=data)))
        assert len(points) == 5
        assert list(points.data.columns) == ["depth"]
        assert points.end_time is None
        assert points.crs == "EPSG:4326"

    def test_intervals_split_into_start_and_end(self) -> None:
        starts = list(pd.date_range(BASE_TIME, periods=5, freq="h"))
        ends = [t + pd.Timedelta("30min") for t in starts]
        points = to_space_time_points(from_space_time_points(_points(end_time=ends)))
        assert list(points.time) == starts
        assert list(points.end_time) == ends

    def test_to_tracks(self) -> None:
        st = from_tracks(Tracks({"B": _track(10), "A": _track()}))
        tracks = to_tracks(st)
        assert list(tracks.tracks) == ["B", "A"]
        assert len(tracks.tracks["A"]) == 5
        assert "track_name" not in tracks.tracks["A"].points.data.columns

    def test_to_tracks_sorts_points(self) -> None:
        frame = pd.DataFrame({
            "track_name": ["A", "A", "A"],
            "time": [BASE_TIME + pd.Timedelta(hours=h) for h in (2, 0, 1)],
            "x": [2.0, 0.0, 1.0],
            "y": [0.0, 0.0, 0.0],
        })
        tracks = to_tracks(tag(frame, "time", coords=("x", "y")))
        assert [p.x for p in tracks.tracks["A"].points.geometry] == [0.0, 1.0, 2.0]

    def test_to_tracks_collection(self) -> None:
        collection = TracksCollection({
            "gull": Tracks({"A": _track(), "B": _track(10)}),
            "tern": Tracks({"C": _track(20)}),
        })
        result = to_tracks_collection(from_tracks_collection(collection))
        assert list(result.tracks) == ["gull", "tern"]
        assert list(result.tracks["gull"].tracks) == ["A", "B"]
        assert len(result) == 15

    def test_missing_track_column(self) -> None:
        with pytest.raises(SchemaError, match="track_name"):
            to_tracks(from_track(_track()))
