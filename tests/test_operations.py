"""Tests for delegated geometry operations and metadata re-derivation."""

import logging

import geopandas as gpd
import pandas as pd
import pytest
from geopandas import GeoDataFrame
from shapely.geometry import Polygon, box

from sftime import (
    ParameterError,
    SchemaError,
    SpatiotemporalFeatureTable,
    apply_geometry_operation,
    concat_tables,
    drop_columns,
    filter_bbox,
    filter_by_time,
    filter_rows,
    merge_attributes,
    rename_columns,
    select_columns,
    select_rows,
    set_crs,
    sort_by_time,
    spatial_filter,
    spatial_join,
    tag,
    transform_crs,
    untag,
)

from tests.factories import make_gdf

OPERATIONS_LOGGER = "sftime.processing.operations"


# ── Coordinate reference systems ─────────────────────────────────────────────


class TestCrs:
    def test_transform_keeps_time_column(self, tagged) -> None:
        moved = transform_crs(tagged, "EPSG:3857")
        assert moved.time_column == "time"
        assert moved.crs.to_epsg() == 3857
        pd.testing.assert_series_equal(moved.data["time"], tagged.data["time"])
        assert moved.data.geometry.iloc[1].x == pytest.approx(111319.49, rel=1e-6)

    def test_input_is_unchanged(self, tagged) -> None:
        transform_crs(tagged, "EPSG:3857")
        assert tagged.crs.to_epsg() == 4326

    def test_set_crs_override(self, tagged) -> None:
        relabelled = set_crs(tagged, "EPSG:3857", allow_override=True)
        assert relabelled.crs.to_epsg() == 3857
        assert relabelled.data.geometry.iloc[1].x == 1.0
        assert relabelled.time_column == "time"


# ── Generic delegation ───────────────────────────────────────────────────────


class TestApplyGeometryOperation:
    def test_buffer_keeps_designations(self) -> None:
        st = tag(make_gdf(crs="EPSG:3857"), "time")
        buffered = apply_geometry_operation(st, lambda gdf: gdf.assign(geometry=gdf.buffer(1.0)))
        assert buffered.time_column == "time"
        assert set(buffered.data.geom_type) == {"Polygon"}

    def test_unbound_method(self, tagged) -> None:
        moved = apply_geometry_operation(tagged, GeoDataFrame.to_crs, "EPSG:3857")
        assert moved.crs.to_epsg() == 3857

    def test_plain_frame_result_is_rejected(self, tagged) -> None:
        with pytest.raises(SchemaError):
            apply_geometry_operation(tagged, lambda gdf: pd.DataFrame(gdf.drop(columns="geometry")))

    def test_untagged_input_stays_untagged(self, tagged) -> None:
        result = apply_geometry_operation(untag(tagged), GeoDataFrame.to_crs, "EPSG:3857")
        assert result.time_column is None

    def test_result_that_breaks_time_type_untags(self, tagged, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=OPERATIONS_LOGGER):
            result = apply_geometry_operation(tagged, lambda gdf: gdf.assign(time=range(len(gdf))))
        assert result.time_column is None
        assert "no longer temporal" in caplog.text


# ── Row and column selection ─────────────────────────────────────────────────


class TestSelection:
    def test_select_rows(self, tagged) -> None:
        subset = select_rows(tagged, [0, 2])
        assert len(subset) == 2
        assert list(subset.data["id"]) == [0, 2]
        assert subset.time_column == "time"

    def test_select_rows_slice(self, tagged) -> None:
        assert len(select_rows(tagged, slice(1, None))) == 3

    def test_filter_rows_callable(self, tagged) -> None:
        result = filter_rows(tagged, lambda gdf: gdf["id"] % 2 == 0)
        assert list(result.data["id"]) == [0, 2]

    def test_filter_rows_mask(self, tagged) -> None:
        result = filter_rows(tagged, [True, False, False, True])
        assert list(result.data["id"]) == [0, 3]

    def test_filter_to_missing_string_times_keeps_tag(self, points_gdf) -> None:
        gdf = points_gdf.assign(t=["2020-01-01T00:00", None, None, None])
        result = filter_rows(tag(gdf, "t"), [False, True, False, True])
        assert result.time_column == "t"
        assert result.time_values.isna().all()

    def test_select_columns_keeps_geometry(self, tagged) -> None:
        result = select_columns(tagged, ["id", "time"])
        assert result.columns == ["id", "time", "geometry"]
        assert result.time_column == "time"

    def test_select_columns_without_time_untags(self, tagged, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger=OPERATIONS_LOGGER):
            result = select_columns(tagged, ["id"])
        assert result.time_column is None
        assert result.geometry_column == "geometry"
        assert "dropped time column 'time'" in caplog.text

    def test_select_missing_column(self, tagged) -> None:
        with pytest.raises(SchemaError, match="nope"):
            select_columns(tagged, ["nope"])

    def test_drop_columns(self, tagged) -> None:
        result = drop_columns(tagged, ["lon", "lat"])
        assert result.columns == ["id", "time", "geometry"]
        assert result.time_column == "time"

    def test_drop_time_column_untags(self, tagged) -> None:
        assert drop_columns(tagged, ["time"]).time_column is None

    def test_rename_time_column(self, tagged) -> None:
        result = rename_columns(tagged, {"time": "when", "id": "storm"})
        assert result.time_column == "when"
        assert "storm" in result.columns

    def test_rename_geometry_column(self, tagged) -> None:
        result = rename_columns(tagged, {"geometry": "geom"})
        assert result.geometry_column == "geom"
        assert result.data.geometry.name == "geom"


# ── Spatial selection and joins ──────────────────────────────────────────────


class TestSpatial:
    def test_filter_bbox(self, tagged) -> None:
        result = filter_bbox(tagged, (-0.5, -0.5, 1.5, 1.5))
        assert list(result.data["id"]) == [0, 1]
        assert result.time_column == "time"

    def test_filter_bbox_invalid(self, tagged) -> None:
        with pytest.raises(ParameterError):
            filter_bbox(tagged, (2, 0, 1, 1))
        with pytest.raises(ParameterError):
            filter_bbox(tagged, (0, 0, 1))

    def test_spatial_filter_with_geometry(self, tagged) -> None:
        result = spatial_filter(tagged, box(0.5, 0.5, 2.5, 2.5))
        assert list(result.data["id"]) == [1, 2]
        assert result.columns == tagged.columns

    def test_spatial_filter_reprojects_other(self, tagged) -> None:
        area = gpd.GeoSeries([box(0.5, 0.5, 2.5, 2.5)], crs="EPSG:4326").to_crs("EPSG:3857")
        result = spatial_filter(tagged, area)
        assert list(result.data["id"]) == [1, 2]

    def test_spatial_filter_unknown_predicate(self, tagged) -> None:
        with pytest.raises(ParameterError):
            spatial_filter(tagged, box(0, 0, 1, 1), predicate="near")

    def test_spatial_join_adds_columns(self, tagged) -> None:
        zones = GeoDataFrame(
            {"zone": ["a", "b"]},
            geometry=[box(-0.5, -0.5, 1.5, 1.5), box(1.5, 1.5, 3.5, 3.5)],
            crs="EPSG:4326",
        )
        joined = spatial_join(tagged, zones)
        assert list(joined.data.sort_values("id")["zone"]) == ["a", "a", "b", "b"]
        assert joined.time_column == "time"

    def test_spatial_join_time_collision_prefers_left(self) -> None:
        st = tag(make_gdf(time_column="t"), "t")
        zones = GeoDataFrame(
            {"t": pd.to_datetime(["1999-12-31", "1999-12-31"])},
            geometry=[Polygon([(-1, -1), (4, -1), (4, 4), (-1, 4)]), box(10, 10, 11, 11)],
            crs="EPSG:4326",
        )
        joined = spatial_join(st, zones)
        assert joined.time_column == "t"
        assert "t_right" in joined.columns
        pd.testing.assert_series_equal(
            joined.data.sort_values("id")["t"].reset_index(drop=True),
            st.data["t"].reset_index(drop=True),
        )

    def test_spatial_join_with_tagged_right(self, tagged) -> None:
        other = tag(make_gdf(), "time")
        joined = spatial_join(tagged, other)
        assert joined.time_column == "time"
        assert len(joined) == 4


# ── Time-based operations ────────────────────────────────────────────────────


class TestTimeOperations:
    def test_sort_by_time(self, tagged) -> None:
        shuffled = select_rows(tagged, [2, 0, 3, 1])
        ordered = sort_by_time(shuffled)
        assert list(ordered.data["id"]) == [0, 1, 2, 3]
        descending = sort_by_time(shuffled, ascending=False)
        assert list(descending.data["id"]) == [3, 2, 1, 0]

    def test_sort_puts_missing_last(self, points_gdf) -> None:
        gdf = points_gdf.copy()
        gdf.loc[0, "time"] = pd.NaT
        ordered = sort_by_time(tag(gdf, "time"))
        assert list(ordered.data["id"]) == [1, 2, 3, 0]

    def test_filter_by_time_inclusive(self, tagged) -> None:
        result = filter_by_time(tagged, ("2020-01-01 01:00", "2020-01-01 02:00"))
        assert list(result.data["id"]) == [1, 2]

    def test_filter_by_time_open_bound(self, tagged) -> None:
        result = filter_by_time(tagged, ("2020-01-01 02:00", None))
        assert list(result.data["id"]) == [2, 3]

    def test_filter_by_time_both_bounds_drop_missing(self, points_gdf) -> None:
        gdf = points_gdf.copy()
        gdf.loc[1, "time"] = pd.NaT
        st = tag(gdf, "time")
        window = ("2020-01-01 00:30", "2020-01-01 03:00")
        first = filter_by_time(st, window)
        second = filter_by_time(st, window)
        assert list(first.data["id"]) == [2, 3]
        assert list(second.data["id"]) == [2, 3]
        assert len(st) == 4

    def test_filter_by_time_overlapping_intervals(self, points_gdf) -> None:
        starts = points_gdf["time"]
        gdf = points_gdf.assign(span=pd.IntervalIndex.from_arrays(starts, starts + pd.Timedelta("90min")))
        st = tag(gdf, "span")
        result = filter_by_time(st, ("2020-01-01 02:30", "2020-01-01 02:45"))
        assert list(result.data["id"]) == [1, 2]

    def test_time_operations_require_tag(self, tagged) -> None:
        with pytest.raises(SchemaError):
            sort_by_time(untag(tagged))
        with pytest.raises(SchemaError):
            filter_by_time(untag(tagged), (None, None))


# ── Attribute joins and row binding ──────────────────────────────────────────


class TestMergeAndConcat:
    def test_merge_attributes(self, tagged) -> None:
        names = pd.DataFrame({"id": [0, 1, 2, 3], "name": ["w", "x", "y", "z"]})
        merged = merge_attributes(tagged, names, on="id")
        assert list(merged.data["name"]) == ["w", "x", "y", "z"]
        assert merged.time_column == "time"

    def test_merge_time_collision_prefers_left(self, tagged) -> None:
        other = pd.DataFrame({"id": [0, 1], "time": ["late", "later"]})
        merged = merge_attributes(tagged, other, on="id")
        assert merged.time_column == "time"
        assert "time_right" in merged.columns
        assert list(merged.data["time"]) == list(tagged.data["time"])

    def test_merge_rejects_geometry_table(self, tagged) -> None:
        with pytest.raises(ParameterError):
            merge_attributes(tagged, make_gdf(), on="id")

    def test_concat(self, tagged) -> None:
        combined = concat_tables([tagged, tagged], ignore_index=True)
        assert len(combined) == 8
        assert combined.time_column == "time"
        assert combined.crs == tagged.crs

    def test_concat_crs_mismatch(self, tagged) -> None:
        with pytest.raises(SchemaError):
            concat_tables([tagged, transform_crs(tagged, "EPSG:3857")])

    def test_concat_time_mismatch(self, tagged) -> None:
        with pytest.raises(SchemaError):
            concat_tables([tagged, untag(tagged)])

    def test_concat_empty(self) -> None:
        with pytest.raises(ParameterError):
            concat_tables([])

    def test_results_are_feature_tables(self, tagged) -> None:
        assert isinstance(concat_tables([tagged]), SpatiotemporalFeatureTable)
