"""
GridPoint Layer Subsetting

This module selects raster layers by timestamp, by position or by name,
and aligns layer timestamps to a coarser granularity.
"""

import dataclasses
import logging
from typing import Iterable, List, Sequence, Union
import numpy as np

from ..core.config import LAYER_DIM, TIME_COORD
from ..core.core_types import Raster, TimeValue
from ..core.exceptions import MissingTimeDimension, ParameterError
from ..coordinates.time_handler import normalize_time_values, to_time_coordinate

logger = logging.getLogger('gridpoint.processing.subsetting')

LayerSelection = Union[int, str, slice, Sequence[Union[int, str]]]


# ============================================================================
# Temporal Subsetting
# ============================================================================

def subset_by_time(raster: Raster, target_timestamps: Iterable[TimeValue]) -> Raster:
    """
    Keep the layers whose timestamp exactly matches one of the targets.

    Matching is exact at nanosecond precision, so callers must align the
    granularity first (see :func:`truncate_times`). Retained layers keep their
    original relative order. Targets matching no layer are ignored, and an
    empty target set or no match yields a raster with zero layers.

    Args:
        raster: Raster whose layers all carry timestamps
        target_timestamps: Timestamps to keep (str, date, datetime, Timestamp, datetime64)

    Returns:
        Raster: Raster with the matching layers

    Raises:
        MissingTimeDimension: If any layer lacks a timestamp
        ParameterError: If a target cannot be parsed as a time value

    Examples:
        >>> survey_days = subset_by_time(daily, ["2022-11-05", "2022-11-09"])
    """
    untimed = raster.untimed_layers
    if untimed:
        raise MissingTimeDimension("subset_by_time", untimed)

    targets = normalize_time_values(target_timestamps)
    layer_times = raster.data[TIME_COORD].values

    keep = np.isin(layer_times, targets)
    indices = np.flatnonzero(keep)

    unmatched = targets[~np.isin(targets, layer_times)]
    if unmatched.size:
        logger.debug(
            "%d target timestamp(s) match no layer: %s",
            unmatched.size, [str(t) for t in unmatched]
        )

    logger.info("Selected %d of %d layer(s) by timestamp", indices.size, raster.n_layers)
    return dataclasses.replace(raster, data=raster.data.isel({LAYER_DIM: indices}))


def truncate_times(raster: Raster, freq: str = "D") -> Raster:
    """
    Floor layer timestamps to a granularity (e.g. "D" for calendar day).

    Only the time coordinate changes; values and layer names are kept.
    Layers without a timestamp stay without one.

    Args:
        raster: Input raster
        freq: pandas frequency string

    Returns:
        Raster: Raster with floored layer timestamps
    """
    try:
        floored = raster.timestamps.floor(freq)
    except ValueError as e:
        raise ParameterError("freq", freq, f"Invalid frequency: {e}")

    data = raster.data.assign_coords({TIME_COORD: (LAYER_DIM, to_time_coordinate(floored))})
    return dataclasses.replace(raster, data=data)

# ============================================================================
# Layer Selection
# ============================================================================

def _resolve_layer_indices(raster: Raster, selection: LayerSelection) -> List[int]:
    """Convert a layer selection to a list of positional indices."""
    n_layers = raster.n_layers
    names = raster.layer_names

    if isinstance(selection, slice):
        return list(range(n_layers))[selection]

    if isinstance(selection, (int, np.integer, str)):
        selection = [selection]

    indices = []
    for item in selection:
        if isinstance(item, str):
            if item not in names:
                raise ParameterError("selection", item, f"Unknown layer; available layers: {', '.join(names)}")
            indices.append(names.index(item))
        elif isinstance(item, (int, np.integer)):
            position = int(item)
            if not -n_layers <= position < n_layers:
                raise ParameterError(
                    "selection", str(position), f"Layer index outside [0, {n_layers - 1}]"
                )
            indices.append(position % n_layers)
        else:
            raise ParameterError("selection", repr(item), "Expected a layer index or name")
    return indices


def select_layers(raster: Raster, selection: LayerSelection) -> Raster:
    """
    Select layers by position, slice, or name.

    Args:
        raster: Input raster
        selection: Index, name, slice, or sequence of indices/names;
                   the result follows the order of the selection

    Returns:
        Raster: Raster with the selected layers

    Raises:
        ParameterError: If a name is unknown or an index is out of range

    Examples:
        >>> first = select_layers(raster, 0)
        >>> pair = select_layers(raster, ["red", "green"])
    """
    indices = _resolve_layer_indices(raster, selection)
    return dataclasses.replace(raster, data=raster.data.isel({LAYER_DIM: indices}))
