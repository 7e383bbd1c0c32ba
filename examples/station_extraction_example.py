"""
Example: Sampling Sea Surface Temperature at Survey Stations

This example builds a small synthetic hourly SST raster, prepares it with the
crop → aggregate → subset stages and extracts daily values at trawl stations,
merging them with haul metadata into a long-form table.
"""

import logging

import numpy as np
import pandas as pd

import gridpoint as gp

# ============================================================================
# Example 1: Build a Raster
# ============================================================================

print("="*70)
print("Example 1: Build an Hourly Raster")
print("="*70)

times = pd.date_range("2022-11-01", periods=72, freq="h")
rng = np.random.default_rng(42)
lats = np.linspace(55.75, 50.25, 12)[:, np.newaxis]
values = 12.0 + 0.3 * (55.0 - lats) + rng.normal(0.0, 0.2, size=(len(times), 12, 14))
values[:, 0, -3:] = -999.0  # land cells

sst = gp.raster_from_array(
    values,
    extent=(-12.0, -5.0, 50.0, 56.0),
    timestamps=times,
    layer_names=[f"sst_{t:%Y%m%dT%H}" for t in times],
    nodata=-999.0,
)

info = gp.describe_raster(sst)
print(f"\nGrid: {info['n_rows']} x {info['n_cols']} cells, {info['n_layers']} layers")
print(f"Resolution: {info['resolution']}")
print(f"Time range: {info['time_range'][0]} to {info['time_range'][1]}")
print(f"Value range: {info['value_range'][0]:.2f} to {info['value_range'][1]:.2f}")

# ============================================================================
# Example 2: Preview and Apply a Crop
# ============================================================================

print("\n" + "="*70)
print("Example 2: Crop to the Survey Area")
print("="*70)

survey_area = gp.BoundingBox(-11.0, -6.0, 51.0, 55.0)
crop_info = gp.get_crop_info(sst, survey_area)
print(f"\nSelected: {crop_info['n_cols_selected']} x {crop_info['n_rows_selected']} "
      f"of {crop_info['n_cols_total']} x {crop_info['n_rows_total']} cells")

cropped = gp.crop(sst, survey_area)
print(f"Cropped extent: {cropped.extent}")

# ============================================================================
# Example 3: Aggregate to Daily Means
# ============================================================================

print("\n" + "="*70)
print("Example 3: Aggregate Hourly Layers into Days")
print("="*70)

print(f"\nAvailable buckets: {gp.list_available_buckets()}")
print(f"Available reducers: {gp.list_available_reducers()}")

daily = gp.aggregate(cropped, "day", "mean")
print(f"\nDaily layers: {daily.layer_names}")

# ============================================================================
# Example 4: Extract at Stations
# ============================================================================

print("\n" + "="*70)
print("Example 4: Extract Values at Survey Stations")
print("="*70)

hauls = pd.DataFrame({
    "station": ["S01", "S02", "S03", "S04"],
    "lon": [-10.2, -8.7, -7.1, -3.0],
    "lat": [54.1, 52.6, 51.4, 53.0],
    "depth": [112.0, 85.0, 64.0, 20.0],
    "haul_date": pd.to_datetime(["2022-11-01", "2022-11-01", "2022-11-03", "2022-11-03"]),
})

stations = gp.points_from_dataframe(
    hauls, id_column="station", attribute_columns=["depth"]
)
survey_days = gp.subset_by_time(daily, hauls["haul_date"].unique())
records = gp.extract(
    survey_days, stations,
    attributes=hauls[["station", "haul_date"]],
    id_field="station",
)
print(f"\n{len(records)} records; station S04 lies outside the survey area:")
print(gp.records_to_dataframe(records).to_string(index=False))

# ============================================================================
# Example 5: Run the Whole Pipeline in One Call
# ============================================================================

print("\n" + "="*70)
print("Example 5: One-Call Pipeline")
print("="*70)

gp.setup_logging(level=logging.INFO)

params = gp.PipelineParameters(
    boundary=survey_area,
    bucket="day",
    reducer="max",
    target_times=hauls["haul_date"].unique(),
    attributes=hauls[["station", "haul_date"]],
    extraction=gp.ExtractionOptions(id_field="station"),
)
df = gp.extract_to_dataframe(sst, stations, params)

print("\nDaily maximum SST at each station on survey days:")
print(df.pivot(index="point_id", columns="layer", values="value"))
