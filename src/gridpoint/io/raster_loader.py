"""
GridPoint Raster Loader

This module builds Raster objects from numpy arrays, xarray objects handed
over by a grid-data service, and gridded files readable by xarray.
"""

from pathlib import Path
from typing import Optional, Sequence, Union, Any
import numpy as np
import xarray as xr

from ..core.logging_config import get_logger
from ..core.config import (
    RASTER_DIMS, LAYER_DIM, X_DIM, Y_DIM, TIME_COORD,
    X_DIM_CANDIDATES, Y_DIM_CANDIDATES, TIME_DIM_CANDIDATES,
    DEFAULT_CRS, DEFAULT_NODATA, DEFAULT_LAYER_PREFIX, SPACING_RTOL,
)
from ..core.core_types import Raster, Extent, Resolution, TimeValue
from ..core.exceptions import (
    ParameterError, RasterFormatError, check_variables_availability, validate_required_file
)
from ..coordinates.time_handler import to_time_coordinate

logger = get_logger('io.raster_loader')

# ============================================================================
# Shared Construction
# ============================================================================

def _default_layer_names(prefix: str, n_layers: int) -> list:
    return [f"{prefix}.{i + 1}" for i in range(n_layers)]


def _build_raster(
    values: np.ndarray,
    x: np.ndarray,
    y: np.ndarray,
    resolution: Resolution,
    crs: Optional[str],
    layer_names: Optional[Sequence[str]],
    timestamps: Optional[Sequence[Any]],
    nodata: float,
    name: Optional[str] = None,
    attrs: Optional[dict] = None,
) -> Raster:
    """Assemble a Raster from a (layer, y, x) array and its coordinates."""
    n_layers = values.shape[0]

    if layer_names is None:
        layer_names = _default_layer_names(name or DEFAULT_LAYER_PREFIX, n_layers)
    if len(layer_names) != n_layers:
        raise ParameterError(
            "layer_names", str(len(layer_names)), f"Expected {n_layers} names, one per layer"
        )

    if timestamps is None:
        timestamps = [None] * n_layers
    if len(timestamps) != n_layers:
        raise ParameterError(
            "timestamps", str(len(timestamps)), f"Expected {n_layers} timestamps, one per layer"
        )

    data = xr.DataArray(
        values,
        dims=RASTER_DIMS,
        coords={
            LAYER_DIM: np.array([str(n) for n in layer_names], dtype=object),
            Y_DIM: np.asarray(y, dtype=np.float64),
            X_DIM: np.asarray(x, dtype=np.float64),
            TIME_COORD: (LAYER_DIM, to_time_coordinate(timestamps)),
        },
        name=name,
        attrs=dict(attrs or {}),
    )
    return Raster(data=data, resolution=resolution, crs=crs, nodata=nodata)

# ============================================================================
# From Arrays
# ============================================================================

def raster_from_array(
    values: Union[np.ndarray, Sequence],
    *,
    extent: Optional[Extent] = None,
    resolution: Optional[Resolution] = None,
    crs: Optional[str] = DEFAULT_CRS,
    layer_names: Optional[Sequence[str]] = None,
    timestamps: Optional[Sequence[Optional[TimeValue]]] = None,
    nodata: float = DEFAULT_NODATA,
) -> Raster:
    """
    Create a north-up raster from a 2-D (rows, cols) or 3-D (layers, rows, cols) array.

    Row 0 is the northernmost row. Without an extent the grid spans
    ``0..ncol`` by ``0..nrow`` with unit cells; with only a resolution the grid
    starts at the origin.

    Args:
        values: Cell values
        extent: (min-x, max-x, min-y, max-y)
        resolution: Cell size (width, height); must agree with extent if both given
        crs: Coordinate reference system
        layer_names: One name per layer (default "lyr.1", "lyr.2", ...)
        timestamps: One timestamp per layer; None marks a layer without time
        nodata: No-data sentinel

    Returns:
        Raster: New raster

    Examples:
        >>> r = raster_from_array(np.arange(1, 26).reshape(5, 5))
        >>> r.extent
        (0.0, 5.0, 0.0, 5.0)
    """
    array = np.asarray(values)
    if array.ndim == 2:
        array = array[np.newaxis, :, :]
    if array.ndim != 3:
        raise ParameterError("values", str(array.shape), "Expected a 2-D or 3-D array")

    _, n_rows, n_cols = array.shape

    if extent is not None:
        if n_rows == 0 or n_cols == 0:
            raise ParameterError("extent", str(extent), "Cannot fit an extent to an empty grid")
        xmin, xmax, ymin, ymax = map(float, extent)
        if xmax <= xmin or ymax <= ymin:
            raise ParameterError("extent", str(extent), "Extent must have positive width and height")
        derived = ((xmax - xmin) / n_cols, (ymax - ymin) / n_rows)
        if resolution is not None and not np.allclose(resolution, derived, rtol=SPACING_RTOL):
            raise ParameterError(
                "resolution", str(resolution), f"Inconsistent with extent, which implies {derived}"
            )
        resolution = derived
    else:
        if resolution is None:
            resolution = (1.0, 1.0)
        xmin = 0.0
        ymax = n_rows * float(resolution[1])

    width, height = float(resolution[0]), float(resolution[1])
    x = xmin + (np.arange(n_cols) + 0.5) * width
    y = ymax - (np.arange(n_rows) + 0.5) * height

    return _build_raster(array, x, y, (width, height), crs, layer_names, timestamps, nodata)

# ============================================================================
# From xarray Objects
# ============================================================================

def _find_dim(da: xr.DataArray, requested: Optional[str], candidates: Sequence[str], role: str) -> Optional[str]:
    if requested is not None:
        if requested not in da.dims:
            raise RasterFormatError(role, f"Dimension '{requested}' not in {tuple(da.dims)}")
        return requested
    for candidate in candidates:
        if candidate in da.dims:
            return candidate
    return None


def _axis_step(coords: np.ndarray, axis: str) -> Optional[float]:
    """Regular spacing of a coordinate axis; None if it has fewer than two cells."""
    if coords.size < 2:
        return None
    steps = np.diff(coords.astype(np.float64))
    step = steps[0]
    if step == 0 or not np.allclose(steps, step, rtol=SPACING_RTOL, atol=0):
        raise RasterFormatError(axis, "Coordinates are not regularly spaced")
    return abs(float(step))


def raster_from_dataarray(
    da: xr.DataArray,
    *,
    crs: Optional[str] = None,
    x_dim: Optional[str] = None,
    y_dim: Optional[str] = None,
    time_dim: Optional[str] = None,
    resolution: Optional[Resolution] = None,
    nodata: Optional[float] = None,
) -> Raster:
    """
    Adapt an xarray DataArray (e.g. from a grid-data service) to a Raster.

    Axis names are guessed from common conventions (x/lon/longitude,
    y/lat/latitude, time/t/date) unless given. Size-1 extra dimensions are
    dropped. The time axis, if any, becomes the layer axis.

    Args:
        da: Source array with two spatial dimensions and optionally a time dimension
        crs: CRS of the coordinates (default: ``crs`` attribute or package default)
        x_dim: Name of the x dimension
        y_dim: Name of the y dimension
        time_dim: Name of the time dimension
        resolution: Cell size, required when an axis has a single cell
        nodata: No-data sentinel (default: ``_FillValue`` or NaN)

    Returns:
        Raster: New raster

    Raises:
        RasterFormatError: If the array is not a regular grid
    """
    x_name = _find_dim(da, x_dim, X_DIM_CANDIDATES, "x")
    y_name = _find_dim(da, y_dim, Y_DIM_CANDIDATES, "y")
    if x_name is None or y_name is None:
        raise RasterFormatError(str(da.name), f"Cannot identify spatial dimensions in {tuple(da.dims)}")
    t_name = _find_dim(da, time_dim, TIME_DIM_CANDIDATES, "time")

    extra = [d for d in da.dims if d not in (x_name, y_name, t_name)]
    too_large = [d for d in extra if da.sizes[d] != 1]
    if too_large:
        raise RasterFormatError(str(da.name), f"Unsupported extra dimensions: {too_large}")
    if extra:
        da = da.isel({d: 0 for d in extra}, drop=True)

    x = np.asarray(da[x_name].values, dtype=np.float64)
    y = np.asarray(da[y_name].values, dtype=np.float64)

    step_x = _axis_step(x, "x")
    step_y = _axis_step(y, "y")
    if step_x is None or step_y is None:
        if resolution is None:
            raise RasterFormatError(str(da.name), "Resolution is required for single-cell axes")
        step_x = step_x if step_x is not None else float(resolution[0])
        step_y = step_y if step_y is not None else float(resolution[1])

    if t_name is not None:
        values = da.transpose(t_name, y_name, x_name).values
        timestamps = list(da[t_name].values)
    else:
        values = da.transpose(y_name, x_name).values[np.newaxis, :, :]
        timestamps = None

    if crs is None:
        crs = da.attrs.get("crs", DEFAULT_CRS)
    if nodata is None:
        nodata = da.encoding.get("_FillValue", da.attrs.get("_FillValue", DEFAULT_NODATA))
        # Decoded fill values are already NaN
        if np.issubdtype(values.dtype, np.floating) and "_FillValue" in da.encoding:
            nodata = DEFAULT_NODATA

    logger.debug(
        "Adapted '%s' with dims %s to a %d-layer raster", da.name, tuple(da.dims), values.shape[0]
    )
    return _build_raster(
        values, x, y, (step_x, step_y), crs,
        layer_names=None,
        timestamps=timestamps,
        nodata=float(nodata),
        name=da.name,
        attrs={k: v for k, v in da.attrs.items() if k != "crs"},
    )


def _dataset_crs(ds: xr.Dataset, da: xr.DataArray) -> Optional[str]:
    """Read a CRS from CF grid-mapping metadata, if present."""
    grid_mapping = da.attrs.get("grid_mapping") or da.encoding.get("grid_mapping")
    if grid_mapping and grid_mapping in ds.variables:
        mapping_attrs = ds[grid_mapping].attrs
        for key in ("crs_wkt", "spatial_ref"):
            if key in mapping_attrs:
                return mapping_attrs[key]
    return ds.attrs.get("crs")


def open_raster(
    path: Union[str, Path],
    variable: Optional[str] = None,
    *,
    crs: Optional[str] = None,
    engine: Optional[str] = None,
    **kwargs
) -> Raster:
    """
    Open a gridded file (e.g. NetCDF) as a Raster.

    Args:
        path: File path
        variable: Data variable to read (may be omitted if the file holds one)
        crs: Override the CRS found in the file
        engine: xarray backend engine
        **kwargs: Passed to :func:`raster_from_dataarray`

    Returns:
        Raster: Loaded raster (values are read into memory)

    Raises:
        RequiredFileNotFoundError: If the file does not exist
        VariableNotFoundError: If the variable is not in the file
    """
    file_path = validate_required_file(Path(path), "Raster")

    with xr.open_dataset(file_path, engine=engine) as ds:
        available = list(ds.data_vars)
        if variable is None:
            if len(available) != 1:
                raise ParameterError(
                    "variable", "None", f"File holds {len(available)} variables: {', '.join(available)}"
                )
            variable = available[0]
        check_variables_availability([variable], available)

        da = ds[variable].load()
        if crs is None:
            crs = _dataset_crs(ds, da)

    logger.info("Opened variable '%s' from %s", variable, file_path)
    return raster_from_dataarray(da, crs=crs, **kwargs)
