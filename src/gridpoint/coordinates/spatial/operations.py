"""
GridPoint Spatial Raster Operations

This module applies spatial selections to rasters: slicing, cropping to a
boundary, and masking cells outside a polygon.
"""

import dataclasses
import numpy as np
import shapely
import xarray as xr

from ...core.logging_config import get_logger
from ...core.config import X_DIM, Y_DIM
from ...core.core_types import Raster, SliceInfo, Geometry, PolygonBoundary
from ..crs_handler import reconcile_boundary
from .slicing import compute_crop_slices

logger = get_logger('coordinates.spatial.operations')


# ============================================================================
# Raster Operations
# ============================================================================

def apply_spatial_selection(raster: Raster, slice_info: SliceInfo) -> Raster:
    """
    Apply row/column slices to every layer of a raster.

    Args:
        raster: Input raster
        slice_info: Slice information

    Returns:
        Raster: New raster restricted to the selected cells
    """
    data = raster.data.isel({X_DIM: slice_info.x_slice, Y_DIM: slice_info.y_slice})
    return dataclasses.replace(raster, data=data)


def mask_outside_polygon(raster: Raster, boundary: PolygonBoundary) -> Raster:
    """
    Set cells whose centre lies outside a polygon to nodata.

    The polygon must already be expressed in the raster CRS. Centres on the
    polygon outline count as inside.

    Args:
        raster: Input raster
        boundary: Polygon boundary in the raster CRS

    Returns:
        Raster: New raster with outside cells set to nodata
    """
    if raster.is_empty:
        return raster

    xx, yy = np.meshgrid(raster.x, raster.y)
    inside = shapely.intersects_xy(boundary.polygon, xx, yy)
    inside_mask = xr.DataArray(inside, dims=(Y_DIM, X_DIM))

    logger.debug("Polygon mask keeps %d of %d cells", int(inside.sum()), inside.size)
    data = raster.data.where(inside_mask, other=raster.nodata)
    return dataclasses.replace(raster, data=data)


def crop(raster: Raster, boundary: Geometry, *, mask: bool = False) -> Raster:
    """
    Restrict a raster to the cells inside a boundary's bounding extent.

    Cells are kept when their centre lies inside the boundary extent
    (inclusive). A boundary disjoint from the raster yields a raster with zero
    rows and columns rather than an error. Layers and their metadata are
    carried over unchanged.

    Args:
        raster: Input raster
        boundary: Bounding box or polygon, in any reconcilable CRS
        mask: For polygon boundaries, also set cells whose centre falls
              outside the polygon to nodata

    Returns:
        Raster: Cropped raster

    Raises:
        GeometryMismatch: If the boundary CRS cannot be reconciled with the raster CRS

    Examples:
        >>> box = BoundingBox(-10.5, -9.0, 51.0, 53.0, crs="EPSG:4326")
        >>> cropped = crop(raster, box)
    """
    boundary = reconcile_boundary(boundary, raster.crs)
    slice_info = compute_crop_slices(raster.x, raster.y, boundary.extent)

    if slice_info.is_empty:
        logger.warning(
            "Crop boundary %s does not overlap raster extent %s, returning an empty raster",
            boundary.extent, raster.extent
        )

    cropped = apply_spatial_selection(raster, slice_info)
    logger.info(
        "Cropped raster from %dx%d to %dx%d cells",
        raster.n_rows, raster.n_cols, cropped.n_rows, cropped.n_cols
    )

    if mask and isinstance(boundary, PolygonBoundary):
        cropped = mask_outside_polygon(cropped, boundary)

    return cropped
