import numpy as np
import pandas as pd
import pytest

from gridpoint import Point, raster_from_array


@pytest.fixture
def scenario_raster():
    """Three layers over a 1x2 grid, two of them on the same day."""
    values = np.array([[[1.0, 3.0]], [[3.0, 5.0]], [[10.0, 10.0]]])
    return raster_from_array(
        values,
        timestamps=["2022-11-01", "2022-11-01", "2022-11-02"],
    )


@pytest.fixture
def grid_values():
    # layer k, row r, col c holds 20k + 5r + c
    return np.arange(80, dtype=np.float64).reshape(4, 4, 5)


@pytest.fixture
def grid_raster(grid_values):
    """4 layers, 4 rows x 5 cols of 1-degree cells over (-10, -5, 50, 54)."""
    return raster_from_array(
        grid_values,
        extent=(-10.0, -5.0, 50.0, 54.0),
        layer_names=["t0", "t1", "t2", "t3"],
        timestamps=[
            "2022-11-01T06:00",
            "2022-11-01T18:00",
            "2022-11-02T06:00",
            "2022-11-03T06:00",
        ],
    )


@pytest.fixture
def stations():
    return [
        Point("A", -8.5, 52.5, attributes={"gear": "GOV"}),
        Point("B", -7.5, 51.5, attributes={"gear": "GOV"}),
        Point("C", -5.5, 53.5, attributes={"gear": "BT"}),
    ]


@pytest.fixture
def hauls():
    return pd.DataFrame({
        "point_id": ["A", "B", "C"],
        "depth": [85.0, 120.0, 40.0],
        "haul_date": ["2022-11-01", "2022-11-03", "2022-11-03"],
    })
