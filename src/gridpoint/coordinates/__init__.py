"""
GridPoint Coordinate Handling

This package provides coordinate handling functionality including spatial
cropping, CRS reconciliation, and time coordinate normalization.
"""

# Spatial coordinate functions
from .spatial import (
    locate_cells,
    coordinates_to_cells,
    cells_to_coordinates,
    compute_crop_slices,
    apply_spatial_selection,
    mask_outside_polygon,
    crop,
)

# CRS functions
from .crs_handler import (
    crs_equal,
    transform_xy,
    reconcile_boundary,
)

# Time coordinate functions
from .time_handler import (
    normalize_time_value,
    normalize_time_values,
    TimeBucket,
    resolve_bucket,
    list_available_buckets,
    to_time_coordinate,
)

__all__ = [
    # Spatial - Conversion
    "locate_cells",
    "coordinates_to_cells",
    "cells_to_coordinates",
    # Spatial - Slicing and operations
    "compute_crop_slices",
    "apply_spatial_selection",
    "mask_outside_polygon",
    "crop",
    # CRS
    "crs_equal",
    "transform_xy",
    "reconcile_boundary",
    # Time coordinate functions
    "normalize_time_value",
    "normalize_time_values",
    "TimeBucket",
    "resolve_bucket",
    "list_available_buckets",
    "to_time_coordinate",
]
