"""
GridPoint - Extract gridded environmental data at sampling stations.

This package provides tools for preparing spatiotemporal rasters (e.g. sea
surface temperature from a grid-data service) and sampling them at survey
stations to build tables for statistical modelling.

Key Features:
- Immutable multi-layer Raster built on xarray
- Spatial crop to bounding boxes or polygons, with CRS reconciliation
- Temporal aggregation into hour/day/month/year buckets
- Exact-match temporal subsetting
- Nearest-cell point extraction reshaped to long form and merged with metadata

Quick Start:
    >>> import gridpoint as gp
    >>> sst = gp.open_raster("/path/to/sst.nc", "analysed_sst")
    >>> sst = gp.crop(sst, gp.BoundingBox(-11.0, -5.0, 51.0, 56.0))
    >>> daily = gp.aggregate(sst, "day", "mean")
    >>> survey_days = gp.subset_by_time(daily, ["2022-11-05", "2022-11-09"])
    >>> records = gp.extract(survey_days, stations, attributes=hauls)
    >>> df = gp.records_to_dataframe(records)
"""

__version__ = "1.0.0"
__author__ = "GridPoint Development Team"

# Import main interface functions
from .main import (
    prepare_raster,
    run_pipeline,
    extract_to_dataframe,
)

# Import data types and parameter classes
from .core.core_types import (
    Raster,
    Point,
    BoundingBox,
    PolygonBoundary,
    ExtractionRecord,
    ExtractionOptions,
    PipelineParameters,
)

# Import processing stages
from .coordinates.spatial import crop, mask_outside_polygon
from .coordinates.time_handler import TimeBucket, list_available_buckets
from .processing import (
    aggregate,
    subset_by_time,
    truncate_times,
    select_layers,
    extract,
    extract_wide,
    points_from_dataframe,
    records_to_dataframe,
    register_reducer,
    list_available_reducers,
)

# Import I/O adapters
from .io.raster_loader import raster_from_array, raster_from_dataarray, open_raster
from .io.table_io import read_attribute_table, write_records_csv

# Import utilities
from .utils import describe_raster, get_crop_info

# Import configuration for advanced users
from .core.config import (
    LAYER_DIM,
    X_DIM,
    Y_DIM,
    TIME_COORD,
    BUCKET_COORD,
    DEFAULT_CRS,
)

# Import exceptions for error handling
from .core.exceptions import (
    GridPointError,
    GeometryMismatch,
    MissingTimeDimension,
    UnjoinableRecord,
    ParameterError,
    RasterFormatError,
    RequiredFileNotFoundError,
    VariableNotFoundError,
    DataProcessingError,
)

# Import logging configuration
from .core.logging_config import setup_logging, set_log_level

__all__ = [
    # Version info
    '__version__',

    # Main interface functions
    'prepare_raster',
    'run_pipeline',
    'extract_to_dataframe',

    # Data types and parameter classes
    'Raster',
    'Point',
    'BoundingBox',
    'PolygonBoundary',
    'ExtractionRecord',
    'ExtractionOptions',
    'PipelineParameters',

    # Processing stages
    'crop',
    'mask_outside_polygon',
    'aggregate',
    'subset_by_time',
    'truncate_times',
    'select_layers',
    'extract',
    'extract_wide',
    'points_from_dataframe',
    'records_to_dataframe',
    'TimeBucket',
    'list_available_buckets',
    'register_reducer',
    'list_available_reducers',

    # I/O adapters
    'raster_from_array',
    'raster_from_dataarray',
    'open_raster',
    'read_attribute_table',
    'write_records_csv',

    # Utilities
    'describe_raster',
    'get_crop_info',

    # Configuration constants
    'LAYER_DIM',
    'X_DIM',
    'Y_DIM',
    'TIME_COORD',
    'BUCKET_COORD',
    'DEFAULT_CRS',

    # Exception classes
    'GridPointError',
    'GeometryMismatch',
    'MissingTimeDimension',
    'UnjoinableRecord',
    'ParameterError',
    'RasterFormatError',
    'RequiredFileNotFoundError',
    'VariableNotFoundError',
    'DataProcessingError',

    # Logging configuration
    'setup_logging',
    'set_log_level',
]
