import numpy as np
import pandas as pd
import pytest
from pyproj import Transformer

from gridpoint import (
    GeometryMismatch,
    ParameterError,
    Point,
    Raster,
    UnjoinableRecord,
    aggregate,
    extract,
    extract_wide,
    points_from_dataframe,
    raster_from_array,
    records_to_dataframe,
)


def test_daily_extraction_scenario(scenario_raster):
    daily = aggregate(scenario_raster, "day", "mean")
    points = [Point("P1", 0.5, 0.5), Point("P2", 5.0, 5.0)]

    records = extract(daily, points)

    assert len(records) == 4
    assert [r.point_id for r in records] == ["P1", "P1", "P2", "P2"]
    assert [r.layer for r in records] == ["day_2022-11-01", "day_2022-11-02"] * 2
    assert [r.value for r in records] == [2.0, 10.0, None, None]
    assert records[1].time == pd.Timestamp("2022-11-02")


def test_cell_centres_sample_their_own_cell(grid_raster, grid_values):
    points = [
        Point(f"r{row}c{col}", float(grid_raster.x[col]), float(grid_raster.y[row]))
        for row in range(grid_raster.n_rows)
        for col in range(grid_raster.n_cols)
    ]
    records = extract(grid_raster, points)
    values = np.array([r.value for r in records]).reshape(4, 5, 4)
    np.testing.assert_array_equal(values, np.moveaxis(grid_values, 0, -1))


def test_points_on_shared_edges_go_east_and_south(grid_raster):
    # x = -8 separates columns 1 and 2, y = 52 separates rows 1 and 2
    records = extract(grid_raster, [Point("edge", -8.0, 52.0)])
    assert records[0].value == 12.0


def test_outer_edges_follow_half_open_footprints(grid_raster):
    points = [
        Point("west", -10.0, 52.5),
        Point("east", -5.0, 52.5),
        Point("north", -7.5, 54.0),
        Point("south", -7.5, 50.0),
    ]
    wide = extract_wide(grid_raster, points)
    assert wide.loc["west", "t0"] == 5.0
    assert np.isnan(wide.loc["east", "t0"])
    assert wide.loc["north", "t0"] == 2.0
    assert np.isnan(wide.loc["south", "t0"])


def test_nodata_cells_yield_missing_values():
    r = raster_from_array(np.array([[1.0, -9999.0]]), nodata=-9999.0)
    records = extract(r, [Point("a", 0.5, 0.5), Point("b", 1.5, 0.5)])
    assert records[0].value == 1.0
    assert records[1].value is None
    assert records[1].is_missing


def test_untimed_layers_have_no_time():
    r = raster_from_array(np.array([[1.0, 2.0]]))
    records = extract(r, [Point("a", 0.5, 0.5)])
    assert records[0].time is None
    assert records[0].layer == "lyr.1"


def test_points_in_other_crs_are_projected(grid_raster, stations):
    to_mercator = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
    projected = []
    for p in stations:
        x, y = to_mercator.transform(p.x, p.y)
        projected.append(Point(p.point_id, x, y, crs="EPSG:3857"))

    direct = [r.value for r in extract(grid_raster, stations)]
    via_mercator = [r.value for r in extract(grid_raster, projected)]
    assert via_mercator == direct
    assert direct[:4] == [6.0, 26.0, 46.0, 66.0]


def test_points_without_crs_are_a_mismatch(grid_raster):
    with pytest.raises(GeometryMismatch):
        extract(grid_raster, [Point("a", -8.5, 52.5, crs=None)])


def test_extract_without_points_or_layers(grid_raster):
    assert extract(grid_raster, []) == []
    empty = grid_raster.data.isel(layer=[])
    no_layers = Raster(data=empty, resolution=grid_raster.resolution, crs=grid_raster.crs)
    assert extract(no_layers, [Point("a", -8.5, 52.5)]) == []


def test_unknown_method_is_rejected(grid_raster, stations):
    with pytest.raises(ParameterError):
        extract(grid_raster, stations, method="bilinear")


# ----------------------------------------------------------------------------
# Attribute merge
# ----------------------------------------------------------------------------

def test_attributes_are_joined_on_point_id(grid_raster, stations, hauls):
    records = extract(grid_raster, stations, attributes=hauls)
    first = records[0]
    assert first.attributes["depth"] == 85.0
    assert first.attributes["haul_date"] == "2022-11-01"
    # point attributes survive the join
    assert first.attributes["gear"] == "GOV"


def test_left_join_keeps_unmatched_points(grid_raster, stations, hauls):
    partial = hauls[hauls["point_id"] != "C"]
    records = extract(grid_raster, stations, attributes=partial)
    c_records = [r for r in records if r.point_id == "C"]
    assert len(c_records) == grid_raster.n_layers
    assert c_records[0].attributes["depth"] is None
    assert c_records[0].attributes["gear"] == "BT"
    assert c_records[0].value == 4.0


def test_strict_join_raises_for_unmatched_points(grid_raster, stations, hauls):
    partial = hauls[hauls["point_id"] != "C"]
    with pytest.raises(UnjoinableRecord) as excinfo:
        extract(grid_raster, stations, attributes=partial, strict=True)
    assert excinfo.value.missing_ids == ["C"]


def test_table_columns_override_point_attributes(grid_raster, stations):
    table = pd.DataFrame({"point_id": ["A", "B", "C"], "gear": ["OTB", "OTB", "OTB"]})
    records = extract(grid_raster, stations, attributes=table)
    assert {r.attributes["gear"] for r in records} == {"OTB"}


def test_custom_id_field(grid_raster, stations):
    table = pd.DataFrame({"station": ["A", "B", "C"], "depth": [1.0, 2.0, 3.0]})
    records = extract(grid_raster, stations, attributes=table, id_field="station")
    assert dict(records[-1].attributes) == {"gear": "BT", "depth": 3.0}
    with pytest.raises(ParameterError):
        extract(grid_raster, stations, attributes=table)


def test_duplicate_identifiers_are_rejected(grid_raster, stations):
    table = pd.DataFrame({"point_id": ["A", "A"], "depth": [1.0, 2.0]})
    with pytest.raises(ParameterError):
        extract(grid_raster, stations, attributes=table)


def test_mapping_attribute_table(grid_raster, stations):
    table = {"A": {"depth": 85.0}, "B": {"depth": 120.0, "sex": "F"}}
    records = extract(grid_raster, stations, attributes=table)
    by_point = {r.point_id: dict(r.attributes) for r in records}
    assert by_point["A"] == {"gear": "GOV", "depth": 85.0, "sex": None}
    assert by_point["C"] == {"gear": "BT", "depth": None, "sex": None}


# ----------------------------------------------------------------------------
# Tables
# ----------------------------------------------------------------------------

def test_extract_wide_layout(grid_raster, stations):
    wide = extract_wide(grid_raster, stations)
    assert list(wide.index) == ["A", "B", "C"]
    assert list(wide.columns) == ["t0", "t1", "t2", "t3"]
    assert wide.loc["B", "t1"] == 32.0


def test_records_to_dataframe(grid_raster, stations, hauls):
    df = records_to_dataframe(extract(grid_raster, stations, attributes=hauls))
    assert len(df) == 12
    assert list(df.columns) == ["point_id", "gear", "depth", "haul_date", "layer", "time", "value"]
    assert df.loc[0, "time"] == pd.Timestamp("2022-11-01T06:00")


def test_records_to_dataframe_without_records():
    df = records_to_dataframe([])
    assert df.empty
    assert list(df.columns) == ["point_id", "layer", "time", "value"]


def test_points_from_dataframe():
    df = pd.DataFrame({
        "point_id": ["A", "B"],
        "lon": [-8.5, -7.5],
        "lat": [52.5, 51.5],
        "depth": [85.0, 120.0],
    })
    points = points_from_dataframe(df)
    assert [p.point_id for p in points] == ["A", "B"]
    assert points[0].x == -8.5 and points[0].y == 52.5
    assert dict(points[1].attributes) == {"depth": 120.0}

    with pytest.raises(ParameterError):
        points_from_dataframe(df, x_column="longitude")


def test_cell_index_round_trip(grid_raster):
    from gridpoint.coordinates import cells_to_coordinates, coordinates_to_cells

    xs, ys = cells_to_coordinates(grid_raster, [0, 3], [4, 1])
    np.testing.assert_allclose(xs, [-5.5, -8.5])
    np.testing.assert_allclose(ys, [53.5, 50.5])
    rows, cols = coordinates_to_cells(grid_raster, xs, ys)
    assert rows.tolist() == [0, 3]
    assert cols.tolist() == [4, 1]


def test_edge_tie_break_on_decimal_resolution_grid():
    # 0.1 cells: edges such as 0.3 and 0.9 are not exact in binary
    r = raster_from_array(np.arange(100.0).reshape(10, 10), extent=(0.0, 1.0, 0.0, 1.0))
    points = [
        Point("x_edge", 0.3, 0.05),
        Point("y_edge", 0.45, 0.9),
        Point("corner", 0.3, 0.9),
    ]
    values = [rec.value for rec in extract(r, points)]
    # east of x = 0.3 is column 3; south of y = 0.9 is row 1
    assert values == [93.0, 14.0, 13.0]


def test_attribute_table_with_only_identifiers_joins(scenario_raster):
    table = pd.DataFrame({"point_id": ["a"]})
    records = extract(scenario_raster, [Point("a", 0.5, 0.5)], attributes=table, strict=True)
    assert len(records) == 3
    assert dict(records[0].attributes) == {}

    with pytest.raises(UnjoinableRecord):
        extract(scenario_raster, [Point("b", 0.5, 0.5)], attributes=table, strict=True)


def test_attributes_named_like_record_fields_are_rejected(scenario_raster):
    table = pd.DataFrame({"point_id": ["a"], "time": ["2022-11-05T07:30"], "value": [42]})
    with pytest.raises(ParameterError) as excinfo:
        extract(scenario_raster, [Point("a", 0.5, 0.5)], attributes=table)
    assert excinfo.value.value == "time, value"

    with pytest.raises(ParameterError):
        extract(scenario_raster, [Point("a", 0.5, 0.5, attributes={"layer": "surface"})])
