"""
GridPoint Main Interface

This module provides the pipeline entry points that chain the processing
stages: crop → aggregate → subset → extract.
"""

import dataclasses
import logging
from typing import List, Sequence, Optional
import pandas as pd

from .core.core_types import Raster, Point, ExtractionRecord, PipelineParameters
from .coordinates.spatial import crop
from .processing.aggregation import aggregate
from .processing.subsetting import subset_by_time
from .processing.extraction import extract, records_to_dataframe

# Get logger for this module
logger = logging.getLogger('gridpoint.main')


# ============================================================================
# Main API Function
# ============================================================================

def prepare_raster(raster: Raster, params: PipelineParameters) -> Raster:
    """
    Run the raster stages of the pipeline (crop, aggregate, subset).

    Each stage is skipped when its parameter is None.

    Args:
        raster: Input raster
        params: Pipeline parameters

    Returns:
        Raster: Raster ready for extraction
    """
    if params.boundary is not None:
        logger.info("Stage 1/3: cropping to %s", params.boundary.extent)
        raster = crop(raster, params.boundary, mask=params.mask)

    if params.bucket is not None:
        logger.info("Stage 2/3: aggregating by %s", params.bucket)
        raster = aggregate(raster, params.bucket, params.reducer)

    if params.target_times is not None:
        logger.info("Stage 3/3: subsetting to %d target time(s)", len(params.target_times))
        raster = subset_by_time(raster, params.target_times)

    return raster


def run_pipeline(
    raster: Raster,
    points: Sequence[Point],
    params: Optional[PipelineParameters] = None,
    **overrides
) -> List[ExtractionRecord]:
    """
    Crop, aggregate, subset and extract in one call.

    Args:
        raster: Input raster (e.g. hourly sea surface temperature)
        points: Sampling stations
        params: Pipeline parameters (default: extraction only)
        **overrides: Individual PipelineParameters fields to replace

    Returns:
        List[ExtractionRecord]: Long-form records, one per (point, layer)

    Examples:
        >>> params = PipelineParameters(
        ...     boundary=BoundingBox(-11.0, -5.0, 51.0, 56.0),
        ...     bucket="day",
        ...     reducer="mean",
        ...     target_times=haul_table["date"].unique(),
        ...     attributes=haul_table,
        ...     extraction=ExtractionOptions(id_field="station"),
        ... )
        >>> records = run_pipeline(sst, stations, params)
    """
    params = params or PipelineParameters()
    if overrides:
        params = dataclasses.replace(params, **overrides)

    prepared = prepare_raster(raster, params)

    options = params.extraction
    return extract(
        prepared,
        points,
        options.method,
        attributes=params.attributes,
        id_field=options.id_field,
        strict=options.strict_join,
    )


def extract_to_dataframe(
    raster: Raster,
    points: Sequence[Point],
    params: Optional[PipelineParameters] = None,
    **overrides
) -> pd.DataFrame:
    """
    Run the pipeline and return the records as a long-form DataFrame.

    Args:
        raster: Input raster
        points: Sampling stations
        params: Pipeline parameters
        **overrides: Individual PipelineParameters fields to replace

    Returns:
        pd.DataFrame: Columns point_id, attribute columns, layer, time, value
    """
    return records_to_dataframe(run_pipeline(raster, points, params, **overrides))
