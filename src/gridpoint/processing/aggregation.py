"""
GridPoint Temporal Aggregation

This module groups raster layers by a time bucket (day, month, year, ...)
and reduces every group to a single layer.
"""

import dataclasses
import logging
import warnings
from typing import Callable, Dict, Hashable, List, Union
import numpy as np
import pandas as pd
import xarray as xr

from ..core.config import (
    RASTER_DIMS, LAYER_DIM, X_DIM, Y_DIM, TIME_COORD, BUCKET_COORD, DEFAULT_REDUCER
)
from ..core.core_types import Raster
from ..core.exceptions import MissingTimeDimension, ParameterError, DataProcessingError
from ..coordinates.time_handler import TimeBucket, resolve_bucket, to_time_coordinate
from .registry import Reducer, ReduceFunc, get_registry

logger = logging.getLogger('gridpoint.processing.aggregation')

BucketSpec = Union[str, TimeBucket, Callable[[pd.Timestamp], Hashable]]
ReducerSpec = Union[str, Reducer, ReduceFunc]


# ============================================================================
# Grouping
# ============================================================================

def group_layers(raster: Raster, bucket: TimeBucket) -> Dict[Hashable, List[int]]:
    """
    Partition layer indices by bucket key, in ascending key order.

    Layers need not be contiguous to share a group.

    Raises:
        MissingTimeDimension: If any layer lacks a timestamp
        ParameterError: If bucket keys cannot be ordered
    """
    untimed = raster.untimed_layers
    if untimed:
        raise MissingTimeDimension("aggregate", untimed)

    groups: Dict[Hashable, List[int]] = {}
    for index, timestamp in enumerate(raster.timestamps):
        groups.setdefault(bucket.key(timestamp), []).append(index)

    try:
        ordered_keys = sorted(groups)
    except TypeError as e:
        raise ParameterError("bucket_key_fn", bucket.name, f"Bucket keys must be mutually comparable: {e}")

    return {key: groups[key] for key in ordered_keys}

# ============================================================================
# Reduction
# ============================================================================

def _reduce_group(stack: np.ndarray, reducer: Reducer) -> np.ndarray:
    """Reduce a (n, rows, cols) NaN-masked stack to (rows, cols)."""
    with warnings.catch_warnings():
        # All-NaN cells are handled below
        warnings.simplefilter("ignore", category=RuntimeWarning)
        result = np.asarray(reducer(stack), dtype=np.float64)

    if result.shape != stack.shape[1:]:
        raise DataProcessingError(
            "aggregate",
            f"Reducer '{reducer.name}' returned shape {result.shape}, expected {stack.shape[1:]}"
        )

    all_missing = np.all(np.isnan(stack), axis=0)
    return np.where(all_missing, np.nan, result)


def aggregate(
    raster: Raster,
    bucket_key_fn: BucketSpec,
    reduce_fn: ReducerSpec = DEFAULT_REDUCER
) -> Raster:
    """
    Aggregate raster layers into time buckets.

    Layers are grouped by the bucket key of their timestamp and each group is
    reduced cell by cell. No-data cells are excluded from the reduction and a
    cell that is no-data in every layer of its group stays no-data. Output
    layers are ordered by ascending key and named ``<bucket>_<label>``, e.g.
    ``day_2022-11-05``; the label is also kept in the ``bucket`` coordinate.

    Args:
        raster: Raster whose layers all carry timestamps
        bucket_key_fn: Bucket name ("hour", "day", "month", "year"), TimeBucket,
                       or callable mapping a timestamp to a key
        reduce_fn: Reducer name ("mean", "median", "sum", "min", "max", "std"),
                   Reducer, or callable ``f(stack, axis=0)`` ignoring NaN

    Returns:
        Raster: One layer per distinct bucket key

    Raises:
        MissingTimeDimension: If any layer lacks a timestamp
        ParameterError: If bucket or reducer cannot be resolved

    Examples:
        >>> daily = aggregate(raster, "day", "mean")
        >>> yearly_max = aggregate(raster, "year", "max")
    """
    bucket = resolve_bucket(bucket_key_fn)
    reducer = get_registry().resolve(reduce_fn)

    groups = group_layers(raster, bucket)
    values = raster.masked_values()

    reduced = [_reduce_group(values[indices], reducer) for indices in groups.values()]
    if reduced:
        stacked = np.stack(reduced)
    else:
        stacked = np.empty((0, raster.n_rows, raster.n_cols), dtype=np.float64)

    if not np.isnan(raster.nodata):
        stacked = np.where(np.isnan(stacked), raster.nodata, stacked)

    keys = list(groups)
    data = xr.DataArray(
        stacked,
        dims=RASTER_DIMS,
        coords={
            LAYER_DIM: np.array([bucket.layer_name(key) for key in keys], dtype=object),
            Y_DIM: raster.y,
            X_DIM: raster.x,
            TIME_COORD: (LAYER_DIM, to_time_coordinate(bucket.timestamp(key) for key in keys)),
            BUCKET_COORD: (LAYER_DIM, np.array([bucket.label(key) for key in keys], dtype=object)),
        },
        name=raster.data.name,
        attrs=dict(raster.data.attrs),
    )

    logger.info(
        "Aggregated %d layer(s) into %d '%s' bucket(s) using '%s'",
        raster.n_layers, len(keys), bucket.name, reducer.name
    )
    return dataclasses.replace(raster, data=data)
