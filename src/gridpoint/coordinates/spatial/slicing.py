"""
GridPoint Spatial Slicing

This module computes the row/column slices selected by a crop extent.
"""

import numpy as np

from ...core.core_types import Extent, SliceInfo


# ============================================================================
# Crop Slice Computation
# ============================================================================

def _axis_slice(coords: np.ndarray, lower: float, upper: float) -> slice:
    """Contiguous slice of cell centres within [lower, upper]."""
    indices = np.where((coords >= lower) & (coords <= upper))[0]
    if indices.size == 0:
        return slice(0, 0)  # Empty slice
    return slice(int(indices.min()), int(indices.max()) + 1)


def compute_crop_slices(
    x: np.ndarray,
    y: np.ndarray,
    extent: Extent
) -> SliceInfo:
    """
    Compute the row/column slices whose cell centres fall inside an extent.

    Bounds are inclusive, so a boundary passing exactly through a cell centre
    keeps that cell.

    Args:
        x: Cell-centre x coordinates
        y: Cell-centre y coordinates
        extent: Crop extent as (min-x, max-x, min-y, max-y)

    Returns:
        SliceInfo: Computed slice information
    """
    xmin, xmax, ymin, ymax = extent

    x_slice = _axis_slice(np.asarray(x), xmin, xmax)
    y_slice = _axis_slice(np.asarray(y), ymin, ymax)

    # An empty axis empties the whole grid
    if x_slice.stop <= x_slice.start or y_slice.stop <= y_slice.start:
        x_slice = slice(0, 0)
        y_slice = slice(0, 0)

    return SliceInfo(x_slice=x_slice, y_slice=y_slice)
