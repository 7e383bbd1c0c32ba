from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from gridpoint import (
    MissingTimeDimension,
    ParameterError,
    raster_from_array,
    select_layers,
    subset_by_time,
    truncate_times,
)


def test_subset_with_all_timestamps_is_identity(grid_raster):
    result = subset_by_time(grid_raster, list(grid_raster.timestamps))
    assert result.equals(grid_raster)


def test_empty_target_set_gives_zero_layers(grid_raster):
    result = subset_by_time(grid_raster, [])
    assert result.shape == (0, 4, 5)


def test_unmatched_targets_are_ignored(grid_raster, grid_values):
    result = subset_by_time(grid_raster, ["2022-11-02T06:00", "2030-01-01"])
    assert result.layer_names == ["t2"]
    np.testing.assert_array_equal(result.data.values[0], grid_values[2])


def test_match_is_exact(grid_raster):
    # a calendar day does not match layers stamped at 06:00
    assert subset_by_time(grid_raster, ["2022-11-02"]).n_layers == 0


def test_retained_layers_keep_raster_order(grid_raster):
    result = subset_by_time(grid_raster, ["2022-11-03T06:00", "2022-11-01T06:00"])
    assert result.layer_names == ["t0", "t3"]


def test_targets_accept_mixed_time_types(grid_raster):
    result = subset_by_time(
        grid_raster,
        [
            pd.Timestamp("2022-11-01T06:00"),
            datetime(2022, 11, 1, 18),
            np.datetime64("2022-11-02T06:00"),
        ],
    )
    assert result.layer_names == ["t0", "t1", "t2"]


def test_unparseable_target_is_rejected(grid_raster):
    with pytest.raises(ParameterError):
        subset_by_time(grid_raster, ["not a date"])


def test_layers_without_time_raise():
    r = raster_from_array(np.zeros((2, 2, 2)))
    with pytest.raises(MissingTimeDimension) as excinfo:
        subset_by_time(r, ["2022-11-01"])
    assert excinfo.value.layers == ["lyr.1", "lyr.2"]


def test_truncate_times_enables_daily_matching(grid_raster):
    daily_stamped = truncate_times(grid_raster, "D")
    assert daily_stamped.timestamps[1] == pd.Timestamp("2022-11-01")
    # original raster is untouched
    assert grid_raster.timestamps[1] == pd.Timestamp("2022-11-01T18:00")

    result = subset_by_time(daily_stamped, ["2022-11-01"])
    assert result.layer_names == ["t0", "t1"]


def test_truncate_times_rejects_bad_frequency(grid_raster):
    with pytest.raises(ParameterError):
        truncate_times(grid_raster, "fortnightly")


def test_select_layers_by_position_name_and_slice(grid_raster):
    assert select_layers(grid_raster, 0).layer_names == ["t0"]
    assert select_layers(grid_raster, -1).layer_names == ["t3"]
    assert select_layers(grid_raster, ["t2", "t0"]).layer_names == ["t2", "t0"]
    assert select_layers(grid_raster, slice(1, 3)).layer_names == ["t1", "t2"]


def test_select_layers_rejects_unknown_selection(grid_raster):
    with pytest.raises(ParameterError):
        select_layers(grid_raster, "t9")
    with pytest.raises(ParameterError):
        select_layers(grid_raster, 4)
