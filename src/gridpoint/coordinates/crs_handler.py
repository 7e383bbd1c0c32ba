"""
GridPoint Coordinate Reference System Handling

This module reconciles crop boundaries and point coordinates with the
coordinate reference system of a raster.
"""

from typing import Optional, Tuple
import numpy as np
import pyproj
from pyproj.exceptions import CRSError, ProjError
from shapely.ops import transform as transform_geometry

from ..core.logging_config import get_logger
from ..core.config import BOUNDS_DENSIFY_POINTS
from ..core.core_types import BoundingBox, PolygonBoundary, Geometry
from ..core.exceptions import GeometryMismatch

logger = get_logger('coordinates.crs_handler')

# ============================================================================
# CRS Comparison
# ============================================================================

def _parse_crs(crs: str, other: Optional[str]) -> pyproj.CRS:
    try:
        return pyproj.CRS.from_user_input(crs)
    except CRSError as e:
        raise GeometryMismatch(crs, other, f"Unrecognized CRS: {e}")


def crs_equal(source_crs: Optional[str], target_crs: Optional[str]) -> bool:
    """
    Check whether two CRS definitions describe the same system.

    Two missing CRS are considered equal; a missing and a defined CRS are not.

    Raises:
        GeometryMismatch: If either CRS cannot be parsed
    """
    if source_crs is None or target_crs is None:
        return source_crs is None and target_crs is None
    if source_crs == target_crs:
        return True
    return _parse_crs(source_crs, target_crs) == _parse_crs(target_crs, source_crs)


def _get_transformer(source_crs: Optional[str], target_crs: Optional[str]) -> pyproj.Transformer:
    """Build a transformer, raising GeometryMismatch when reconciliation is impossible."""
    if source_crs is None or target_crs is None:
        raise GeometryMismatch(source_crs, target_crs, "CRS is undefined on one side")

    source = _parse_crs(source_crs, target_crs)
    target = _parse_crs(target_crs, source_crs)
    try:
        return pyproj.Transformer.from_crs(source, target, always_xy=True)
    except ProjError as e:
        raise GeometryMismatch(source_crs, target_crs, f"No transformation available: {e}")

# ============================================================================
# Coordinate Transformation
# ============================================================================

def transform_xy(
    xs: np.ndarray,
    ys: np.ndarray,
    source_crs: Optional[str],
    target_crs: Optional[str]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Transform coordinate arrays between coordinate reference systems.

    Non-finite input coordinates pass through unchanged; finite inputs that
    cannot be projected signal an unreconcilable CRS pair.

    Args:
        xs: X coordinates
        ys: Y coordinates
        source_crs: CRS of the input coordinates
        target_crs: Requested CRS

    Returns:
        Tuple[np.ndarray, np.ndarray]: Transformed coordinates

    Raises:
        GeometryMismatch: If the CRS pair cannot be reconciled
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)

    if crs_equal(source_crs, target_crs):
        return xs.copy(), ys.copy()

    transformer = _get_transformer(source_crs, target_crs)
    try:
        new_xs, new_ys = transformer.transform(xs, ys)
    except ProjError as e:
        raise GeometryMismatch(source_crs, target_crs, f"Transformation failed: {e}")

    new_xs = np.asarray(new_xs, dtype=np.float64)
    new_ys = np.asarray(new_ys, dtype=np.float64)

    valid_input = np.isfinite(xs) & np.isfinite(ys)
    valid_output = np.isfinite(new_xs) & np.isfinite(new_ys)
    if np.any(valid_input & ~valid_output):
        raise GeometryMismatch(
            source_crs, target_crs, "Coordinates fall outside the target CRS domain"
        )

    logger.debug("Transformed %d coordinate(s) from %s to %s", xs.size, source_crs, target_crs)
    return new_xs, new_ys

# ============================================================================
# Boundary Reconciliation
# ============================================================================

def reconcile_boundary(boundary: Geometry, target_crs: Optional[str]) -> Geometry:
    """
    Express a crop boundary in the target coordinate reference system.

    Bounding boxes are reprojected by densified edges so the result still
    encloses the original box. Polygons are reprojected vertex by vertex.

    Args:
        boundary: Bounding box or polygon boundary
        target_crs: CRS of the raster being cropped

    Returns:
        Geometry: Boundary in the target CRS (the input itself when CRS already match)

    Raises:
        GeometryMismatch: If the CRS pair cannot be reconciled
    """
    if crs_equal(boundary.crs, target_crs):
        return boundary

    transformer = _get_transformer(boundary.crs, target_crs)
    logger.info("Reprojecting crop boundary from %s to %s", boundary.crs, target_crs)

    try:
        if isinstance(boundary, BoundingBox):
            left, bottom, right, top = transformer.transform_bounds(
                boundary.xmin, boundary.ymin, boundary.xmax, boundary.ymax,
                densify_pts=BOUNDS_DENSIFY_POINTS
            )
            if not np.all(np.isfinite([left, bottom, right, top])):
                raise GeometryMismatch(
                    boundary.crs, target_crs, "Bounding box falls outside the target CRS domain"
                )
            return BoundingBox(
                min(left, right), max(left, right), min(bottom, top), max(bottom, top),
                crs=target_crs
            )

        polygon = transform_geometry(transformer.transform, boundary.polygon)
    except ProjError as e:
        raise GeometryMismatch(boundary.crs, target_crs, f"Transformation failed: {e}")

    if not np.all(np.isfinite(polygon.bounds)):
        raise GeometryMismatch(
            boundary.crs, target_crs, "Polygon falls outside the target CRS domain"
        )
    return PolygonBoundary(polygon, crs=target_crs)
