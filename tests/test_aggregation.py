import numpy as np
import pandas as pd
import pytest

from gridpoint import (
    MissingTimeDimension,
    ParameterError,
    TimeBucket,
    aggregate,
    list_available_reducers,
    raster_from_array,
    register_reducer,
)


def test_daily_mean_scenario(scenario_raster):
    daily = aggregate(scenario_raster, "day", "mean")
    assert daily.shape == (2, 1, 2)
    np.testing.assert_array_equal(daily.data.values[0, 0], [2.0, 4.0])
    np.testing.assert_array_equal(daily.data.values[1, 0], [10.0, 10.0])
    assert daily.layer_names == ["day_2022-11-01", "day_2022-11-02"]
    assert daily.buckets == ["2022-11-01", "2022-11-02"]
    assert list(daily.timestamps) == [pd.Timestamp("2022-11-01"), pd.Timestamp("2022-11-02")]


def test_aggregation_preserves_grid(grid_raster):
    daily = aggregate(grid_raster, "day")
    np.testing.assert_array_equal(daily.x, grid_raster.x)
    np.testing.assert_array_equal(daily.y, grid_raster.y)
    assert daily.extent == grid_raster.extent
    assert daily.crs == grid_raster.crs


def test_single_bucket_mean_ignores_nodata():
    values = np.array([[[1.0, -9999.0]], [[3.0, 4.0]], [[5.0, -9999.0]]])
    r = raster_from_array(
        values,
        timestamps=["2022-01-01", "2022-03-01", "2023-06-01"],
        nodata=-9999.0,
    )
    result = aggregate(r, lambda ts: "all", "mean")
    assert result.n_layers == 1
    np.testing.assert_array_equal(result.data.values[0, 0], [3.0, 4.0])
    assert result.layer_names == ["bucket_all"]
    # a non-temporal key gives no synthetic timestamp
    assert pd.isna(result.timestamps[0])


def test_all_nodata_cell_stays_nodata():
    values = np.array([[[1.0, -9999.0]], [[3.0, -9999.0]]])
    r = raster_from_array(values, timestamps=["2022-11-01", "2022-11-01"], nodata=-9999.0)
    for reducer in ("mean", "sum", "max"):
        result = aggregate(r, "day", reducer)
        assert result.data.values[0, 0, 1] == -9999.0


def test_groups_need_not_be_contiguous():
    values = np.array([[[1.0]], [[7.0]], [[3.0]]])
    r = raster_from_array(values, timestamps=["2022-11-02", "2022-11-01", "2022-11-02"])
    result = aggregate(r, "day", "mean")
    assert result.layer_names == ["day_2022-11-01", "day_2022-11-02"]
    assert result.data.values[:, 0, 0].tolist() == [7.0, 2.0]


def test_hourly_buckets():
    values = np.array([[[1.0]], [[3.0]], [[8.0]]])
    r = raster_from_array(
        values,
        timestamps=["2022-11-01T06:10", "2022-11-01T06:40", "2022-11-01T07:00"],
    )
    hourly = aggregate(r, "hour", "mean")
    assert hourly.layer_names == ["hour_2022-11-01T06", "hour_2022-11-01T07"]
    assert hourly.buckets == ["2022-11-01T06", "2022-11-01T07"]
    assert list(hourly.timestamps) == [
        pd.Timestamp("2022-11-01T06:00"),
        pd.Timestamp("2022-11-01T07:00"),
    ]
    assert hourly.data.values[:, 0, 0].tolist() == [2.0, 8.0]


def test_month_and_year_buckets(grid_raster):
    monthly = aggregate(grid_raster, "month", "max")
    assert monthly.layer_names == ["month_2022-11"]
    assert monthly.timestamps[0] == pd.Timestamp("2022-11-01")
    assert monthly.data.values[0, 0, 0] == 60.0

    yearly = aggregate(grid_raster, "year", "min")
    assert yearly.layer_names == ["year_2022"]
    assert yearly.timestamps[0] == pd.Timestamp("2022-01-01")
    assert yearly.data.values[0, 0, 0] == 0.0


def test_custom_time_bucket():
    week = TimeBucket(
        name="week",
        key_func=lambda ts: ts.to_period("W").start_time,
        label_func=lambda key: key.strftime("%Y-%m-%d"),
    )
    values = np.array([[[1.0]], [[3.0]], [[10.0]]])
    r = raster_from_array(values, timestamps=["2022-10-31", "2022-11-02", "2022-11-08"])
    result = aggregate(r, week, "mean")
    assert result.layer_names == ["week_2022-10-31", "week_2022-11-07"]
    assert result.data.values[:, 0, 0].tolist() == [2.0, 10.0]
    assert result.timestamps[1] == pd.Timestamp("2022-11-07")


def test_custom_reducer_callable(scenario_raster):
    result = aggregate(scenario_raster, "day", np.nanmax)
    np.testing.assert_array_equal(result.data.values[0, 0], [3.0, 5.0])


def test_registered_reducer_is_available(scenario_raster):
    register_reducer("value_range", lambda a, axis: np.nanmax(a, axis=axis) - np.nanmin(a, axis=axis))
    assert "value_range" in list_available_reducers()
    result = aggregate(scenario_raster, "day", "value_range")
    np.testing.assert_array_equal(result.data.values[0, 0], [2.0, 2.0])


def test_missing_timestamps_raise():
    r = raster_from_array(np.zeros((2, 1, 1)), timestamps=["2022-11-01", None])
    with pytest.raises(MissingTimeDimension) as excinfo:
        aggregate(r, "day")
    assert excinfo.value.layers == ["lyr.2"]


def test_unknown_bucket_or_reducer(scenario_raster):
    with pytest.raises(ParameterError):
        aggregate(scenario_raster, "fortnight")
    with pytest.raises(ParameterError):
        aggregate(scenario_raster, "day", "mode")


def test_zero_layer_raster_aggregates_to_zero_layers():
    r = raster_from_array(np.empty((0, 2, 2)), timestamps=[])
    result = aggregate(r, "day")
    assert result.shape == (0, 2, 2)


def test_aggregation_is_deterministic(scenario_raster):
    first = aggregate(scenario_raster, "day", "mean")
    second = aggregate(scenario_raster, "day", "mean")
    assert first.equals(second)
