"""
GridPoint Configuration and Constants

This module centralizes all configuration parameters, constants, and default values
for better maintainability and consistency across the codebase.
"""

import os

# ============================================================================
# Dimension and Coordinate Names
# ============================================================================

LAYER_DIM = 'layer'
Y_DIM = 'y'
X_DIM = 'x'
TIME_COORD = 'time'
BUCKET_COORD = 'bucket'

RASTER_DIMS = (LAYER_DIM, Y_DIM, X_DIM)

# Candidate axis names when adapting datasets from a grid-data service
X_DIM_CANDIDATES = ('x', 'lon', 'longitude')
Y_DIM_CANDIDATES = ('y', 'lat', 'latitude')
TIME_DIM_CANDIDATES = ('time', 't', 'date')

# ============================================================================
# Coordinate Reference System
# ============================================================================

# Users can override via GRIDPOINT_DEFAULT_CRS environment variable
DEFAULT_CRS = os.environ.get("GRIDPOINT_DEFAULT_CRS", "EPSG:4326")

# Points used to densify bounding box edges when reprojecting
BOUNDS_DENSIFY_POINTS = 21

# ============================================================================
# Raster Defaults
# ============================================================================

DEFAULT_NODATA = float('nan')
DEFAULT_LAYER_PREFIX = "lyr"

# Relative tolerance for regular coordinate spacing
SPACING_RTOL = 1e-6

# Distance, in cells, within which a coordinate counts as lying on a cell edge
EDGE_SNAP_TOLERANCE = 1e-9

# ============================================================================
# Temporal Processing
# ============================================================================

DATETIME_PRECISION = "ns"
DEFAULT_REDUCER = "mean"

# ============================================================================
# Extraction
# ============================================================================

EXTRACTION_METHODS = ("nearest",)
DEFAULT_EXTRACTION_METHOD = "nearest"

# ============================================================================
# Tabular Output
# ============================================================================

POINT_ID_COLUMN = 'point_id'
LAYER_COLUMN = 'layer'
TIME_COLUMN = 'time'
VALUE_COLUMN = 'value'

RECORD_COLUMNS = (POINT_ID_COLUMN, LAYER_COLUMN, TIME_COLUMN, VALUE_COLUMN)
