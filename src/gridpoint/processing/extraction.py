"""
GridPoint Point Extraction

This module samples raster layers at point locations and reshapes the
samples into long-form records merged with point metadata.
"""

import logging
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd

from ..core.config import (
    DEFAULT_CRS, DEFAULT_EXTRACTION_METHOD, EXTRACTION_METHODS,
    POINT_ID_COLUMN, RECORD_COLUMNS,
)
from ..core.core_types import Raster, Point, ExtractionRecord
from ..core.exceptions import ParameterError, UnjoinableRecord
from ..coordinates.crs_handler import transform_xy
from ..coordinates.spatial.conversion import coordinates_to_cells

logger = logging.getLogger('gridpoint.processing.extraction')

AttributeTable = Union[pd.DataFrame, Mapping[Hashable, Mapping[str, Any]]]


# ============================================================================
# Point Preparation
# ============================================================================

def points_from_dataframe(
    df: pd.DataFrame,
    id_column: str = POINT_ID_COLUMN,
    x_column: str = "lon",
    y_column: str = "lat",
    crs: Optional[str] = DEFAULT_CRS,
    attribute_columns: Optional[Sequence[str]] = None
) -> List[Point]:
    """
    Build points from a survey table.

    Args:
        df: Table with one row per point
        id_column: Column with point identifiers
        x_column: Column with x coordinates (e.g. longitude)
        y_column: Column with y coordinates (e.g. latitude)
        crs: CRS of the coordinates
        attribute_columns: Columns kept as point attributes (default: all others)

    Returns:
        List[Point]: Points in table order
    """
    missing = [c for c in (id_column, x_column, y_column) if c not in df.columns]
    if missing:
        raise ParameterError("df", ", ".join(missing), "Required columns are missing")

    if attribute_columns is None:
        attribute_columns = [c for c in df.columns if c not in (id_column, x_column, y_column)]

    attrs = df[list(attribute_columns)].to_dict(orient="records")
    return [
        Point(point_id=pid, x=x, y=y, crs=crs, attributes=row)
        for pid, x, y, row in zip(df[id_column], df[x_column], df[y_column], attrs)
    ]


def _project_points(points: Sequence[Point], target_crs: Optional[str]) -> Tuple[np.ndarray, np.ndarray]:
    """Express point coordinates in the raster CRS, one transform per source CRS."""
    xs = np.array([p.x for p in points], dtype=np.float64)
    ys = np.array([p.y for p in points], dtype=np.float64)

    by_crs: Dict[Optional[str], List[int]] = {}
    for index, point in enumerate(points):
        by_crs.setdefault(point.crs, []).append(index)

    for crs, indices in by_crs.items():
        idx = np.asarray(indices)
        xs[idx], ys[idx] = transform_xy(xs[idx], ys[idx], crs, target_crs)

    return xs, ys

# ============================================================================
# Sampling
# ============================================================================

def sample_points(
    raster: Raster,
    points: Sequence[Point],
    method: str = DEFAULT_EXTRACTION_METHOD
) -> np.ndarray:
    """
    Sample every layer at every point.

    Args:
        raster: Raster to sample
        points: Points in any reconcilable CRS
        method: Sampling method; "nearest" picks the cell containing the point

    Returns:
        np.ndarray: Samples with shape (points, layers); NaN where the point is
                    outside the raster or the cell is no-data

    Raises:
        GeometryMismatch: If point CRS cannot be reconciled with the raster CRS
        ParameterError: If the method is not supported
    """
    if method not in EXTRACTION_METHODS:
        raise ParameterError("method", method, f"Supported methods: {', '.join(EXTRACTION_METHODS)}")

    samples = np.full((len(points), raster.n_layers), np.nan, dtype=np.float64)
    if not points:
        return samples

    xs, ys = _project_points(points, raster.crs)
    rows, cols = coordinates_to_cells(raster, xs, ys)

    inside = rows >= 0
    n_outside = int((~inside).sum())
    if n_outside:
        logger.info("%d of %d point(s) fall outside the raster extent", n_outside, len(points))

    if inside.any() and raster.n_layers:
        values = raster.masked_values()
        samples[inside] = values[:, rows[inside], cols[inside]].T

    return samples


def extract_wide(
    raster: Raster,
    points: Sequence[Point],
    method: str = DEFAULT_EXTRACTION_METHOD
) -> pd.DataFrame:
    """
    Sample a raster at points into a wide table.

    Args:
        raster: Raster to sample
        points: Points to sample at

    Returns:
        pd.DataFrame: One row per point (indexed by point id), one column per layer
    """
    samples = sample_points(raster, points, method)
    index = pd.Index([p.point_id for p in points], name=POINT_ID_COLUMN)
    return pd.DataFrame(samples, index=index, columns=raster.layer_names)

# ============================================================================
# Attribute Merge
# ============================================================================

def _attribute_lookup(
    attributes: AttributeTable,
    id_field: str
) -> Tuple[Dict[Hashable, Dict[str, Any]], List[str]]:
    """Normalize an attribute table to an id -> row mapping plus column names."""
    if isinstance(attributes, pd.DataFrame):
        if id_field not in attributes.columns:
            raise ParameterError("id_field", id_field, "Column not found in attribute table")

        duplicated = attributes[id_field][attributes[id_field].duplicated()]
        if not duplicated.empty:
            raise ParameterError(
                "attributes", ", ".join(map(str, duplicated.unique())),
                "Attribute table must hold one row per point identifier"
            )

        table = attributes.astype(object).where(attributes.notna(), None)
        columns = [c for c in table.columns if c != id_field]
        # Seed from the id column so tables without extra columns still join
        lookup = {pid: {} for pid in table[id_field]}
        for column in columns:
            for pid, value in zip(table[id_field], table[column]):
                lookup[pid][column] = value
        return lookup, columns

    lookup = {pid: dict(row) for pid, row in attributes.items()}
    columns: List[str] = []
    for row in lookup.values():
        for column in row:
            if column not in columns:
                columns.append(column)
    return lookup, columns


def _check_attribute_names(names: Sequence[Hashable], source: str) -> None:
    """Reject attribute names that would shadow record fields in table output."""
    clashes = [name for name in names if name in RECORD_COLUMNS]
    if clashes:
        raise ParameterError(
            source, ", ".join(map(str, clashes)),
            f"Attribute names clash with record fields {RECORD_COLUMNS}; rename them"
        )


def merge_point_attributes(
    points: Sequence[Point],
    attributes: Optional[AttributeTable] = None,
    id_field: str = POINT_ID_COLUMN,
    strict: bool = False
) -> List[Dict[str, Any]]:
    """
    Join each point's attributes with an external attribute table.

    The join is many-to-one on the point identifier. Table columns override
    point attributes of the same name. Table columns a point does not carry
    (including every column, without ``strict``, for points lacking a table
    row) are filled with None.

    Args:
        points: Points to enrich
        attributes: DataFrame with an ``id_field`` column, or mapping id -> row
        id_field: Join column of the attribute table
        strict: Raise instead of leaving unmatched points unenriched

    Returns:
        List[Dict[str, Any]]: Merged attributes, one per point

    Raises:
        UnjoinableRecord: If strict and a point has no attribute row
        ParameterError: If the table lacks the join column, repeats identifiers,
                        or an attribute is named like a record field
    """
    merged = [dict(p.attributes) for p in points]
    for attrs in merged:
        _check_attribute_names(list(attrs), "points")
    if attributes is None:
        return merged

    lookup, columns = _attribute_lookup(attributes, id_field)
    _check_attribute_names(columns, "attributes")

    missing: List[Hashable] = []
    for point, attrs in zip(points, merged):
        row = lookup.get(point.point_id)
        if row is None:
            if point.point_id not in missing:
                missing.append(point.point_id)
        else:
            attrs.update(row)
        for column in columns:
            attrs.setdefault(column, None)

    if missing:
        if strict:
            raise UnjoinableRecord(missing, id_field)
        logger.warning("%d point id(s) have no attribute row: %s", len(missing), missing)

    return merged

# ============================================================================
# Extraction
# ============================================================================

def extract(
    raster: Raster,
    points: Sequence[Point],
    method: str = DEFAULT_EXTRACTION_METHOD,
    *,
    attributes: Optional[AttributeTable] = None,
    id_field: str = POINT_ID_COLUMN,
    strict: bool = False
) -> List[ExtractionRecord]:
    """
    Extract raster values at points as long-form records.

    Produces one record per (point, layer), grouped by point in input order
    and then by layer in raster order. Points outside the raster extent and
    no-data cells yield records whose value is None.

    Args:
        raster: Raster to sample
        points: Points in any reconcilable CRS
        method: Sampling method ("nearest")
        attributes: Optional attribute table joined on point identifier
        id_field: Join column of the attribute table
        strict: Raise UnjoinableRecord for points without an attribute row

    Returns:
        List[ExtractionRecord]: Long-form records

    Raises:
        GeometryMismatch: If point CRS cannot be reconciled with the raster CRS
        UnjoinableRecord: If strict and a point has no attribute row

    Examples:
        >>> records = extract(daily, stations, attributes=haul_table, id_field="station")
        >>> df = records_to_dataframe(records)
    """
    merged = merge_point_attributes(points, attributes, id_field, strict)
    samples = sample_points(raster, points, method)

    n_points, n_layers = samples.shape

    # Long layout: point-major, layer-minor
    point_index = np.repeat(np.arange(n_points), n_layers)
    layer_index = np.tile(np.arange(n_layers), n_points)
    flat_values = samples.ravel()

    names = raster.layer_names
    times = [None if pd.isna(ts) else ts for ts in raster.timestamps]
    ids = [p.point_id for p in points]

    records = [
        ExtractionRecord(
            point_id=ids[p],
            attributes=merged[p],
            layer=names[l],
            time=times[l],
            value=None if np.isnan(v) else float(v),
        )
        for p, l, v in zip(point_index, layer_index, flat_values)
    ]

    logger.info(
        "Extracted %d record(s) for %d point(s) x %d layer(s)",
        len(records), n_points, n_layers
    )
    return records

# ============================================================================
# Tabular Output
# ============================================================================

def records_to_dataframe(records: Sequence[ExtractionRecord]) -> pd.DataFrame:
    """
    Convert extraction records to a long-form table.

    Args:
        records: Extraction records

    Returns:
        pd.DataFrame: Columns point_id, attribute columns, layer, time, value
    """
    if not records:
        return pd.DataFrame(columns=list(RECORD_COLUMNS))
    return pd.DataFrame([record.to_dict() for record in records])
