"""
GridPoint Information Utilities

This module provides functions for summarizing rasters and previewing
spatial selections without materializing them.
"""

from typing import Dict
import warnings
import numpy as np

from ..core.core_types import Raster, Geometry
from ..coordinates.crs_handler import reconcile_boundary
from ..coordinates.spatial.slicing import compute_crop_slices


# ============================================================================
# Raster Summary
# ============================================================================

def describe_raster(raster: Raster) -> Dict:
    """
    Summarize a raster's grid, layers and values.

    Args:
        raster: Raster to describe

    Returns:
        Dict: Dimensions, resolution, extent, CRS, layer names, time range
              and value range (ignoring no-data)

    Examples:
        >>> info = describe_raster(raster)
        >>> print(f"Grid: {info['n_rows']} x {info['n_cols']} x {info['n_layers']}")
        >>> print(f"Time range: {info['time_range']}")
    """
    timestamps = raster.timestamps.dropna()
    values = raster.masked_values()

    value_range = None
    if values.size and not np.all(np.isnan(values)):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", category=RuntimeWarning)
            value_range = (float(np.nanmin(values)), float(np.nanmax(values)))

    return {
        'n_layers': raster.n_layers,
        'n_rows': raster.n_rows,
        'n_cols': raster.n_cols,
        'resolution': raster.resolution,
        'extent': raster.extent,
        'crs': raster.crs,
        'nodata': raster.nodata,
        'layer_names': raster.layer_names,
        'has_time': raster.has_time,
        'time_range': (timestamps.min(), timestamps.max()) if len(timestamps) else None,
        'buckets': raster.buckets,
        'value_range': value_range,
        'missing_cells': int(np.isnan(values).sum()),
    }


# ============================================================================
# Crop Preview
# ============================================================================

def get_crop_info(raster: Raster, boundary: Geometry) -> Dict:
    """
    Report which rows and columns a crop boundary would select.

    Args:
        raster: Raster to crop
        boundary: Crop boundary in any reconcilable CRS

    Returns:
        Dict: Selected grid size, index ranges and the boundary extent in the raster CRS

    Examples:
        >>> info = get_crop_info(raster, BoundingBox(-11, -9, 51, 54))
        >>> print(f"Selected: {info['n_cols_selected']} x {info['n_rows_selected']}")
    """
    reconciled = reconcile_boundary(boundary, raster.crs)
    slice_info = compute_crop_slices(raster.x, raster.y, reconciled.extent)
    empty = slice_info.is_empty

    return {
        'n_rows_total': raster.n_rows,
        'n_cols_total': raster.n_cols,
        'n_rows_selected': 0 if empty else slice_info.y_slice.stop - slice_info.y_slice.start,
        'n_cols_selected': 0 if empty else slice_info.x_slice.stop - slice_info.x_slice.start,
        'row_indices': None if empty else (slice_info.y_slice.start, slice_info.y_slice.stop - 1),
        'col_indices': None if empty else (slice_info.x_slice.start, slice_info.x_slice.stop - 1),
        'boundary_extent': reconciled.extent,
    }
