"""
GridPoint Utilities

This package provides utility functions for raster summaries and
crop previews.
"""

from .info import (
    describe_raster,
    get_crop_info,
)

__all__ = [
    "describe_raster",
    "get_crop_info",
]
