"""
GridPoint Processing Module

This module contains the raster processing stages applied after loading:
temporal aggregation, layer subsetting, and point extraction.
"""

from .registry import (
    Reducer,
    ReducerRegistry,
    get_registry,
    register_reducer,
    list_available_reducers,
)

from .aggregation import (
    group_layers,
    aggregate,
)

from .subsetting import (
    subset_by_time,
    truncate_times,
    select_layers,
)

from .extraction import (
    points_from_dataframe,
    sample_points,
    extract_wide,
    merge_point_attributes,
    extract,
    records_to_dataframe,
)

__all__ = [
    # Reducer registry
    'Reducer',
    'ReducerRegistry',
    'get_registry',
    'register_reducer',
    'list_available_reducers',

    # Temporal aggregation
    'group_layers',
    'aggregate',

    # Layer subsetting
    'subset_by_time',
    'truncate_times',
    'select_layers',

    # Point extraction
    'points_from_dataframe',
    'sample_points',
    'extract_wide',
    'merge_point_attributes',
    'extract',
    'records_to_dataframe',
]
