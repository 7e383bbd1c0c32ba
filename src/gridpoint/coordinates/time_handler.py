"""
GridPoint Time Coordinate Processing

This module handles time value normalization and the bucket definitions
used to group raster layers for temporal aggregation.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Hashable, Iterable, List, Union
import numpy as np
import pandas as pd

from ..core.logging_config import get_logger
from ..core.config import DATETIME_PRECISION
from ..core.core_types import TimeValue
from ..core.exceptions import ParameterError

logger = get_logger('coordinates.time_handler')

# ============================================================================
# Time Value Normalization
# ============================================================================

def normalize_time_value(time_value: TimeValue) -> np.datetime64:
    """
    Normalize various time formats to numpy.datetime64.

    Args:
        time_value: Time value (str, date, datetime, pandas.Timestamp or np.datetime64)

    Returns:
        np.datetime64: Normalized time value

    Raises:
        ParameterError: If time format is invalid or the value is missing
    """
    try:
        if isinstance(time_value, np.datetime64):
            result = time_value.astype(f'datetime64[{DATETIME_PRECISION}]')
        elif isinstance(time_value, (pd.Timestamp, datetime)):
            result = np.datetime64(pd.Timestamp(time_value).to_datetime64(), DATETIME_PRECISION)
        elif isinstance(time_value, date):
            result = np.datetime64(time_value.isoformat(), DATETIME_PRECISION)
        elif isinstance(time_value, str):
            result = np.datetime64(pd.Timestamp(time_value).to_datetime64(), DATETIME_PRECISION)
        else:
            result = np.datetime64(time_value, DATETIME_PRECISION)
    except Exception as e:
        raise ParameterError("time_value", str(time_value), f"Cannot parse time value: {e}")

    if np.isnat(result):
        raise ParameterError("time_value", str(time_value), "Time value is missing (NaT)")
    return result


def normalize_time_values(time_values: Iterable[TimeValue]) -> np.ndarray:
    """
    Normalize a collection of time values to a datetime64 array.

    Args:
        time_values: Iterable of time values

    Returns:
        np.ndarray: Array of datetime64 values in input order
    """
    normalized = [normalize_time_value(value) for value in time_values]
    return np.array(normalized, dtype=f'datetime64[{DATETIME_PRECISION}]')

# ============================================================================
# Time Buckets
# ============================================================================

@dataclass(frozen=True)
class TimeBucket:
    """
    Grouping rule mapping a layer timestamp to a discrete bucket key.

    Attributes:
        name: Bucket name, used as the prefix of aggregated layer names
        key_func: Maps a timestamp to a sortable, hashable key
        label_func: Formats a key for layer names and the bucket coordinate
        timestamp_func: Maps a key to the synthetic timestamp of the output layer
    """
    name: str
    key_func: Callable[[pd.Timestamp], Hashable]
    label_func: Callable[[Hashable], str] = str
    timestamp_func: Callable[[Hashable], Any] = None

    def key(self, timestamp: pd.Timestamp) -> Hashable:
        return self.key_func(timestamp)

    def label(self, key: Hashable) -> str:
        return self.label_func(key)

    def layer_name(self, key: Hashable) -> str:
        return f"{self.name}_{self.label(key)}"

    def timestamp(self, key: Hashable) -> pd.Timestamp:
        """Synthetic timestamp for a bucket key; NaT when the key has no time meaning."""
        if self.timestamp_func is not None:
            return pd.Timestamp(self.timestamp_func(key))
        return _coerce_timestamp(key)


def _coerce_timestamp(key: Hashable) -> pd.Timestamp:
    if isinstance(key, (pd.Timestamp, datetime, date, np.datetime64)):
        return pd.Timestamp(key)
    logger.debug("Bucket key %r has no timestamp equivalent, using NaT", key)
    return pd.NaT


BUCKETS: Dict[str, TimeBucket] = {
    "hour": TimeBucket(
        name="hour",
        key_func=lambda ts: ts.floor("h"),
        label_func=lambda key: key.strftime("%Y-%m-%dT%H"),
        timestamp_func=lambda key: key,
    ),
    "day": TimeBucket(
        name="day",
        key_func=lambda ts: ts.normalize(),
        label_func=lambda key: key.strftime("%Y-%m-%d"),
        timestamp_func=lambda key: key,
    ),
    "month": TimeBucket(
        name="month",
        key_func=lambda ts: (ts.year, ts.month),
        label_func=lambda key: f"{key[0]:04d}-{key[1]:02d}",
        timestamp_func=lambda key: pd.Timestamp(year=key[0], month=key[1], day=1),
    ),
    "year": TimeBucket(
        name="year",
        key_func=lambda ts: ts.year,
        label_func=lambda key: f"{key:04d}",
        timestamp_func=lambda key: pd.Timestamp(year=key, month=1, day=1),
    ),
}


def resolve_bucket(bucket: Union[str, TimeBucket, Callable[[pd.Timestamp], Hashable]]) -> TimeBucket:
    """
    Resolve a bucket specification to a TimeBucket.

    Args:
        bucket: Registered bucket name, TimeBucket, or key function

    Returns:
        TimeBucket: Resolved bucket

    Raises:
        ParameterError: If the bucket name is unknown or the value is not usable
    """
    if isinstance(bucket, TimeBucket):
        return bucket

    if isinstance(bucket, str):
        try:
            return BUCKETS[bucket.lower()]
        except KeyError:
            raise ParameterError(
                "bucket", bucket, f"Available buckets: {', '.join(list_available_buckets())}"
            )

    if callable(bucket):
        name = getattr(bucket, "__name__", "bucket")
        if name == "<lambda>":
            name = "bucket"
        return TimeBucket(name=name, key_func=bucket)

    raise ParameterError("bucket", repr(bucket), "Expected a bucket name, TimeBucket or callable")


def list_available_buckets() -> List[str]:
    """List registered bucket names."""
    return list(BUCKETS)


def to_time_coordinate(time_values: Iterable[Any]) -> np.ndarray:
    """
    Build a layer time coordinate, keeping missing values as NaT.

    Args:
        time_values: Timestamps, datetimes, strings, None or NaT

    Returns:
        np.ndarray: datetime64 array at the package precision
    """
    index = pd.DatetimeIndex([pd.NaT if value is None else value for value in time_values])
    return np.asarray(index.values, dtype=f'datetime64[{DATETIME_PRECISION}]')
