"""
GridPoint Type Definitions and Data Classes

This module defines all data structures and type aliases used throughout the codebase
for better type safety and code clarity.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Optional, Tuple, Union, Dict, Any, Sequence, Mapping, Hashable, List
import numpy as np
import pandas as pd
import xarray as xr
from shapely.geometry import MultiPolygon, Polygon

from .config import (
    RASTER_DIMS, LAYER_DIM, X_DIM, Y_DIM, TIME_COORD, BUCKET_COORD,
    DEFAULT_CRS, DEFAULT_NODATA, DEFAULT_REDUCER, DEFAULT_EXTRACTION_METHOD,
    EXTRACTION_METHODS, POINT_ID_COLUMN, LAYER_COLUMN, TIME_COLUMN, VALUE_COLUMN,
)
from .exceptions import ParameterError

# ============================================================================
# Type Aliases
# ============================================================================

TimeValue = Union[str, date, datetime, np.datetime64, pd.Timestamp]
CoordinateRange = Tuple[float, float]
Extent = Tuple[float, float, float, float]
Resolution = Tuple[float, float]

# ============================================================================
# Validation Utilities (Module Level)
# ============================================================================

def _validate_coordinate_range(name: str, range_val: Optional[CoordinateRange]) -> None:
    """Validate a coordinate range (min, max)."""
    if range_val is not None:
        if len(range_val) != 2:
            raise ParameterError(name, str(range_val), "Must contain exactly 2 values")
        if range_val[0] > range_val[1]:
            raise ParameterError(name, str(range_val), f"{name}[0] must be <= {name}[1]")

def _freeze_mapping(values: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    """Return a read-only copy of an attribute mapping."""
    return MappingProxyType(dict(values or {}))

def _nodata_equal(a: float, b: float) -> bool:
    if np.isnan(a) and np.isnan(b):
        return True
    return a == b

# ============================================================================
# Raster
# ============================================================================

@dataclass(frozen=True, eq=False)
class Raster:
    """
    Multi-layer gridded data on a regular grid.

    The values live in a single ``xarray.DataArray`` with dimensions
    ``(layer, y, x)`` so every layer shares the same extent, resolution and
    cell grid. ``x``/``y`` coordinates are cell centres. Each layer carries a
    name (``layer`` coordinate) and an optional timestamp (``time`` coordinate,
    ``NaT`` when absent). Aggregated rasters also carry a ``bucket`` coordinate.

    Attributes:
        data: Values with dims ``(layer, y, x)``
        resolution: Cell size (width, height), both positive
        crs: Coordinate reference system understood by pyproj, or None
        nodata: Sentinel marking missing cells (NaN by default)
    """
    data: xr.DataArray
    resolution: Resolution
    crs: Optional[str] = DEFAULT_CRS
    nodata: float = DEFAULT_NODATA

    def __post_init__(self):
        """Validate grid structure."""
        if tuple(self.data.dims) != RASTER_DIMS:
            raise ParameterError(
                "data", str(tuple(self.data.dims)), f"Expected dimensions {RASTER_DIMS}"
            )

        for coord in (X_DIM, Y_DIM, LAYER_DIM, TIME_COORD):
            if coord not in self.data.coords:
                raise ParameterError("data", coord, "Required coordinate is missing")

        if not np.issubdtype(self.data[TIME_COORD].dtype, np.datetime64):
            raise ParameterError(
                "data", str(self.data[TIME_COORD].dtype), "Time coordinate must be datetime64"
            )

        if len(self.resolution) != 2:
            raise ParameterError("resolution", str(self.resolution), "Must contain exactly 2 values")
        width, height = float(self.resolution[0]), float(self.resolution[1])
        if not (width > 0 and height > 0):
            raise ParameterError("resolution", str(self.resolution), "Cell size must be positive")
        object.__setattr__(self, 'resolution', (width, height))
        object.__setattr__(self, 'nodata', float(self.nodata))

    def __repr__(self) -> str:
        return (
            f"Raster(layers={self.n_layers}, rows={self.n_rows}, cols={self.n_cols}, "
            f"resolution={self.resolution}, extent={self.extent}, crs={self.crs!r})"
        )

    # ------------------------------------------------------------------
    # Shape
    # ------------------------------------------------------------------

    @property
    def n_layers(self) -> int:
        return int(self.data.sizes[LAYER_DIM])

    @property
    def n_rows(self) -> int:
        return int(self.data.sizes[Y_DIM])

    @property
    def n_cols(self) -> int:
        return int(self.data.sizes[X_DIM])

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Shape as (layers, rows, cols)."""
        return (self.n_layers, self.n_rows, self.n_cols)

    @property
    def is_empty(self) -> bool:
        """True when the grid has no cells (zero rows or zero columns)."""
        return self.n_rows == 0 or self.n_cols == 0

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    @property
    def x(self) -> np.ndarray:
        return self.data[X_DIM].values

    @property
    def y(self) -> np.ndarray:
        return self.data[Y_DIM].values

    @property
    def extent(self) -> Optional[Extent]:
        """Spatial extent as (min-x, max-x, min-y, max-y); None for an empty grid."""
        if self.is_empty:
            return None
        half_w = self.resolution[0] / 2.0
        half_h = self.resolution[1] / 2.0
        x, y = self.x, self.y
        return (
            float(x.min() - half_w),
            float(x.max() + half_w),
            float(y.min() - half_h),
            float(y.max() + half_h),
        )

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    @property
    def layer_names(self) -> List[str]:
        return [str(name) for name in self.data[LAYER_DIM].values]

    @property
    def timestamps(self) -> pd.DatetimeIndex:
        """Layer timestamps; NaT where a layer has none."""
        return pd.DatetimeIndex(self.data[TIME_COORD].values)

    @property
    def buckets(self) -> Optional[List[str]]:
        """Aggregation bucket labels, if the raster was produced by aggregation."""
        if BUCKET_COORD not in self.data.coords:
            return None
        return [str(label) for label in self.data[BUCKET_COORD].values]

    @property
    def untimed_layers(self) -> List[str]:
        """Names of layers without a timestamp."""
        missing = self.timestamps.isna()
        return [name for name, flag in zip(self.layer_names, missing) if flag]

    @property
    def has_time(self) -> bool:
        """True when the raster has layers and every layer carries a timestamp."""
        return self.n_layers > 0 and not self.untimed_layers

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def masked_values(self) -> np.ndarray:
        """Return a float copy of the values with nodata cells replaced by NaN."""
        values = np.array(self.data.values, dtype=np.float64, copy=True)
        if not np.isnan(self.nodata):
            values[values == self.nodata] = np.nan
        return values

    def equals(self, other: "Raster") -> bool:
        """Check values, grid, layer metadata and raster attributes for equality."""
        if not isinstance(other, Raster):
            return False
        return (
            self.crs == other.crs
            and self.resolution == other.resolution
            and _nodata_equal(self.nodata, other.nodata)
            and self.data.equals(other.data)
        )

# ============================================================================
# Points
# ============================================================================

@dataclass(frozen=True)
class Point:
    """
    A named sampling location.

    Attributes:
        point_id: Identifier used to join survey metadata
        x: X coordinate (longitude for geographic CRS)
        y: Y coordinate (latitude for geographic CRS)
        crs: Coordinate reference system of x/y
        attributes: Arbitrary associated attributes (read-only)
    """
    point_id: Hashable
    x: float
    y: float
    crs: Optional[str] = DEFAULT_CRS
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))
        object.__setattr__(self, 'attributes', _freeze_mapping(self.attributes))

# ============================================================================
# Crop Boundaries
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned crop boundary.

    Attributes:
        xmin, xmax: X range
        ymin, ymax: Y range
        crs: Coordinate reference system of the box
    """
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    crs: Optional[str] = DEFAULT_CRS

    def __post_init__(self):
        _validate_coordinate_range("x_range", (self.xmin, self.xmax))
        _validate_coordinate_range("y_range", (self.ymin, self.ymax))

    @classmethod
    def from_bounds(cls, bounds: Sequence[float], crs: Optional[str] = DEFAULT_CRS) -> "BoundingBox":
        """Build from (minx, miny, maxx, maxy) ordering used by shapely and rasterio."""
        if len(bounds) != 4:
            raise ParameterError("bounds", str(bounds), "Must contain exactly 4 values")
        minx, miny, maxx, maxy = map(float, bounds)
        return cls(minx, maxx, miny, maxy, crs)

    @property
    def extent(self) -> Extent:
        return (float(self.xmin), float(self.xmax), float(self.ymin), float(self.ymax))


@dataclass(frozen=True)
class PolygonBoundary:
    """
    Polygonal crop boundary.

    Attributes:
        polygon: shapely Polygon or MultiPolygon
        crs: Coordinate reference system of the polygon
    """
    polygon: Union[Polygon, MultiPolygon]
    crs: Optional[str] = DEFAULT_CRS

    def __post_init__(self):
        if not isinstance(self.polygon, (Polygon, MultiPolygon)):
            raise ParameterError(
                "polygon", type(self.polygon).__name__, "Expected a shapely Polygon or MultiPolygon"
            )
        if self.polygon.is_empty:
            raise ParameterError("polygon", "EMPTY", "Boundary polygon must not be empty")

    @property
    def extent(self) -> Extent:
        minx, miny, maxx, maxy = self.polygon.bounds
        return (float(minx), float(maxx), float(miny), float(maxy))


Geometry = Union[BoundingBox, PolygonBoundary]

# ============================================================================
# Extraction Output
# ============================================================================

@dataclass(frozen=True)
class ExtractionRecord:
    """
    One (point, layer) row of the long-form extraction table.

    Attributes:
        point_id: Point identifier
        attributes: Point attributes merged with the attribute table (read-only)
        layer: Layer label
        time: Layer timestamp, None when the layer has none
        value: Sampled value, None when missing (outside extent or nodata)
    """
    point_id: Hashable
    attributes: Mapping[str, Any] = field(hash=False)
    layer: str
    time: Optional[pd.Timestamp]
    value: Optional[float]

    def __post_init__(self):
        object.__setattr__(self, 'attributes', _freeze_mapping(self.attributes))

    @property
    def is_missing(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into a single table row."""
        row: Dict[str, Any] = {POINT_ID_COLUMN: self.point_id}
        row.update(self.attributes)
        row[LAYER_COLUMN] = self.layer
        row[TIME_COLUMN] = self.time
        row[VALUE_COLUMN] = self.value
        return row

# ============================================================================
# Slice Info
# ============================================================================

@dataclass
class SliceInfo:
    """Row/column slices selected by a spatial crop."""
    x_slice: slice
    y_slice: slice

    @property
    def is_empty(self) -> bool:
        return self.x_slice.stop <= self.x_slice.start or self.y_slice.stop <= self.y_slice.start

# ============================================================================
# Processing Options
# ============================================================================

@dataclass
class ExtractionOptions:
    """
    Point extraction options.

    Attributes:
        method: Sampling method (only "nearest" is supported)
        id_field: Column of the attribute table holding point identifiers
        strict_join: Raise UnjoinableRecord when a point has no attribute row
    """
    method: str = DEFAULT_EXTRACTION_METHOD
    id_field: str = POINT_ID_COLUMN
    strict_join: bool = False

    def __post_init__(self):
        if self.method not in EXTRACTION_METHODS:
            raise ParameterError(
                "method", self.method, f"Supported methods: {', '.join(EXTRACTION_METHODS)}"
            )


@dataclass
class PipelineParameters:
    """
    Consolidated parameters for the crop → aggregate → subset → extract pipeline.

    Any stage whose parameter is None is skipped.
    """
    boundary: Optional[Geometry] = None
    mask: bool = False
    bucket: Optional[Any] = None
    reducer: Any = DEFAULT_REDUCER
    target_times: Optional[Sequence[TimeValue]] = None
    attributes: Optional[Any] = None
    extraction: ExtractionOptions = field(default_factory=ExtractionOptions)
