"""Tests for time partitioning and time-panel plotting."""

import pandas as pd
import pytest

from sftime import SchemaError, TimeBinning, partition_by_time, plot, tag, untag
from sftime.processing.binning import compute_bin_edges

from tests.factories import BASE_TIME, make_gdf


@pytest.fixture
def six_hours():
    """Six points at hourly intervals."""
    return tag(make_gdf(n=6), "time")


def _sizes(partitions):
    return [len(p) for p in partitions]


# ── Binning rules ────────────────────────────────────────────────────────────


class TestTimeBinning:
    def test_only_one_rule(self) -> None:
        with pytest.raises(ValueError):
            TimeBinning(n_bins=2, width="1h")

    def test_width_is_parsed(self) -> None:
        assert TimeBinning(width="6h").width == pd.Timedelta(hours=6)

    def test_non_positive_width(self) -> None:
        with pytest.raises(ValueError):
            TimeBinning(width="0h")

    def test_invalid_n_bins(self) -> None:
        with pytest.raises(ValueError):
            TimeBinning(n_bins=0)

    def test_breaks_must_increase(self) -> None:
        with pytest.raises(ValueError):
            TimeBinning(breaks=["2020-01-02", "2020-01-01"])
        with pytest.raises(ValueError):
            TimeBinning(breaks=["2020-01-01"])

    def test_has_rule(self) -> None:
        assert not TimeBinning().has_rule
        assert TimeBinning(n_bins=3).has_rule


# ── Partitioning ─────────────────────────────────────────────────────────────


class TestPartitionByTime:
    def test_n_bins(self, six_hours) -> None:
        parts = partition_by_time(six_hours, TimeBinning(n_bins=2))
        assert _sizes(parts) == [3, 3]
        assert parts[0].start == BASE_TIME
        assert parts[-1].end == BASE_TIME + pd.Timedelta("5h")

    def test_width(self, six_hours) -> None:
        parts = partition_by_time(six_hours, TimeBinning(width="2h"))
        assert _sizes(parts) == [2, 2, 2]
        assert [p.start for p in parts] == list(pd.date_range(BASE_TIME, periods=3, freq="2h"))

    def test_breaks_skip_rows_outside(self, six_hours) -> None:
        breaks = [BASE_TIME, BASE_TIME + pd.Timedelta("90min"), BASE_TIME + pd.Timedelta("3h")]
        parts = partition_by_time(six_hours, TimeBinning(breaks=breaks))
        assert _sizes(parts) == [2, 2]

    def test_default_rule(self, six_hours) -> None:
        parts = partition_by_time(six_hours)
        assert _sizes(parts) == [1, 1, 1, 1, 1, 1]

    def test_empty_bins_are_kept(self, six_hours) -> None:
        breaks = [BASE_TIME, BASE_TIME + pd.Timedelta("90min"), BASE_TIME + pd.Timedelta("10h"), BASE_TIME + pd.Timedelta("12h")]
        parts = partition_by_time(six_hours, TimeBinning(breaks=breaks))
        assert _sizes(parts) == [2, 4, 0]

    def test_partitions_keep_metadata(self, six_hours) -> None:
        for part in partition_by_time(six_hours, TimeBinning(n_bins=3)):
            assert part.table.time_column == "time"
            assert part.table.crs == six_hours.crs

    def test_single_time(self) -> None:
        gdf = make_gdf(n=3)
        gdf["time"] = BASE_TIME
        parts = partition_by_time(tag(gdf, "time"))
        assert _sizes(parts) == [3]

    def test_missing_times_are_skipped(self, six_hours) -> None:
        gdf = six_hours.data.copy()
        gdf.loc[0, "time"] = pd.NaT
        parts = partition_by_time(tag(gdf, "time"), TimeBinning(n_bins=1))
        assert _sizes(parts) == [5]

    def test_intervals_binned_by_start(self, six_hours) -> None:
        starts = six_hours.data["time"]
        data = six_hours.data.assign(span=pd.IntervalIndex.from_arrays(starts, starts + pd.Timedelta("3h")))
        parts = partition_by_time(tag(data, "span"), TimeBinning(width="3h"))
        assert _sizes(parts) == [3, 3]

    def test_untagged_raises(self, six_hours) -> None:
        with pytest.raises(SchemaError):
            partition_by_time(untag(six_hours))

    def test_no_times_gives_no_edges(self) -> None:
        assert compute_bin_edges(pd.Series([pd.NaT, pd.NaT]), TimeBinning()) is None


# ── Plotting ─────────────────────────────────────────────────────────────────


class _Recorder:
    def __init__(self) -> None:
        self.calls = []

    def __call__(self, data, ax, value_column, **kwargs) -> None:
        self.calls.append((len(data), value_column, kwargs))


class TestPlot:
    def test_one_render_per_non_empty_bin(self, six_hours) -> None:
        render = _Recorder()
        fig, axes = plot(six_hours, binning=TimeBinning(n_bins=4), render=render)
        assert len(render.calls) == 4
        assert sum(n for n, _, _ in render.calls) == 6
        assert axes.shape == (2, 3)

    def test_titles_and_hidden_axes(self, six_hours) -> None:
        fig, axes = plot(six_hours, binning=TimeBinning(width="2h"), render=_Recorder(), ncols=2)
        flat = axes.ravel()
        assert [ax.get_title() for ax in flat[:3]] == [
            "2020-01-01 00:00:00", "2020-01-01 02:00:00", "2020-01-01 04:00:00",
        ]
        assert not flat[3].get_visible()

    def test_empty_bin_gets_panel_without_render(self, six_hours) -> None:
        breaks = [BASE_TIME, BASE_TIME + pd.Timedelta("90min"), BASE_TIME + pd.Timedelta("10h"), BASE_TIME + pd.Timedelta("12h")]
        render = _Recorder()
        fig, axes = plot(six_hours, binning=TimeBinning(breaks=breaks), render=render)
        assert len(render.calls) == 2
        assert axes.ravel()[2].get_title() == "2020-01-01 10:00:00"

    def test_shared_colour_scale(self, six_hours) -> None:
        render = _Recorder()
        plot(six_hours, "id", TimeBinning(n_bins=2), render=render)
        for _, value_column, kwargs in render.calls:
            assert value_column == "id"
            assert kwargs["vmin"] == 0
            assert kwargs["vmax"] == 5

    def test_missing_value_column(self, six_hours) -> None:
        with pytest.raises(SchemaError, match="wind"):
            plot(six_hours, "wind")

    def test_untagged_raises(self, six_hours) -> None:
        with pytest.raises(SchemaError):
            plot(untag(six_hours))

    def test_renders_with_geopandas(self, six_hours) -> None:
        fig, axes = plot(six_hours, "id", TimeBinning(n_bins=3))
        assert len(fig.axes) >= 3
        assert all(len(ax.collections) > 0 for ax in axes.ravel())
