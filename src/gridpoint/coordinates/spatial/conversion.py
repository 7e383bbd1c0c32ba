"""
GridPoint Coordinate Conversion

This module converts between coordinates and cell indices on a regular grid.
"""

from typing import Tuple
import numpy as np

from ...core.config import EDGE_SNAP_TOLERANCE
from ...core.core_types import Raster


# ============================================================================
# Coordinate/Index Conversion
# ============================================================================

def _is_ascending(coords: np.ndarray) -> bool:
    return coords.size < 2 or coords[1] > coords[0]


def locate_cells(
    coords: np.ndarray,
    step: float,
    values: np.ndarray,
    edge_to_lower: bool = False
) -> np.ndarray:
    """
    Find the cell index whose footprint contains each coordinate value.

    Footprints are half-open intervals of width ``step`` centred on ``coords``.
    A value lying exactly on the edge shared by two cells is assigned to the
    cell with the larger coordinate, or to the one with the smaller coordinate
    when ``edge_to_lower`` is set.

    Args:
        coords: Cell-centre coordinates along one axis (regular, monotonic)
        step: Cell size along the axis
        values: Coordinate values to locate
        edge_to_lower: Assign shared edges to the lower-coordinate cell

    Returns:
        np.ndarray: Integer indices, -1 where the value is outside the axis
    """
    values = np.asarray(values, dtype=np.float64)
    n = coords.size
    result = np.full(values.shape, -1, dtype=np.int64)
    if n == 0:
        return result

    low_edge = float(coords.min()) - step / 2.0
    offset = (values - low_edge) / step

    with np.errstate(invalid='ignore'):
        # Points on an edge may land a rounding error off it (e.g. 0.1 degree cells)
        nearest_edge = np.round(offset)
        offset = np.where(np.abs(offset - nearest_edge) <= EDGE_SNAP_TOLERANCE, nearest_edge, offset)
        if edge_to_lower:
            ordinal = np.ceil(offset) - 1
        else:
            ordinal = np.floor(offset)

    inside = np.isfinite(ordinal) & (ordinal >= 0) & (ordinal < n)
    ordinal = np.where(inside, ordinal, 0).astype(np.int64)

    # Ordinal counts cells from the low-coordinate end
    if _is_ascending(coords):
        index = ordinal
    else:
        index = n - 1 - ordinal

    result[inside] = index[inside]
    return result


def coordinates_to_cells(raster: Raster, xs: np.ndarray, ys: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert coordinates (in the raster CRS) to (row, col) indices.

    Cells cover ``[xmin, xmax)`` horizontally and ``(ymin, ymax]`` vertically,
    so a point on a shared edge belongs to the cell east of a vertical edge
    and south of a horizontal edge.

    Args:
        raster: Raster defining the grid
        xs: X coordinates
        ys: Y coordinates

    Returns:
        Tuple[np.ndarray, np.ndarray]: Row and column indices, -1 where outside
    """
    width, height = raster.resolution
    cols = locate_cells(raster.x, width, xs, edge_to_lower=False)
    rows = locate_cells(raster.y, height, ys, edge_to_lower=True)

    outside = (rows < 0) | (cols < 0)
    rows = np.where(outside, -1, rows)
    cols = np.where(outside, -1, cols)
    return rows, cols


def cells_to_coordinates(raster: Raster, rows: np.ndarray, cols: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert (row, col) indices to cell-centre coordinates.

    Args:
        raster: Raster defining the grid
        rows: Row indices
        cols: Column indices

    Returns:
        Tuple[np.ndarray, np.ndarray]: Cell-centre x and y coordinates
    """
    rows = np.asarray(rows, dtype=np.int64)
    cols = np.asarray(cols, dtype=np.int64)
    return raster.x[cols], raster.y[rows]
