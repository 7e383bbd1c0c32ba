"""
GridPoint Spatial Coordinate Handling

This package provides spatial processing functionality including coordinate
to cell conversion, crop slice computation, and raster operations.
"""

# Conversion functions
from .conversion import (
    locate_cells,
    coordinates_to_cells,
    cells_to_coordinates,
)

# Slicing functions
from .slicing import (
    compute_crop_slices,
)

# Raster operations
from .operations import (
    apply_spatial_selection,
    mask_outside_polygon,
    crop,
)

__all__ = [
    # Conversion functions
    "locate_cells",
    "coordinates_to_cells",
    "cells_to_coordinates",
    # Slicing functions
    "compute_crop_slices",
    # Raster operations
    "apply_spatial_selection",
    "mask_outside_polygon",
    "crop",
]
