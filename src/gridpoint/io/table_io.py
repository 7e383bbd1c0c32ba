"""
GridPoint Tabular I/O

This module reads point attribute tables and writes extraction records.
"""

from pathlib import Path
from typing import Sequence, Union
import pandas as pd

from ..core.logging_config import get_logger
from ..core.config import POINT_ID_COLUMN
from ..core.core_types import ExtractionRecord
from ..core.exceptions import ParameterError, validate_required_file
from ..processing.extraction import records_to_dataframe

logger = get_logger('io.table_io')


def read_attribute_table(
    path: Union[str, Path],
    id_field: str = POINT_ID_COLUMN,
    **read_kwargs
) -> pd.DataFrame:
    """
    Read a point attribute table (e.g. survey haul metadata) from CSV.

    Args:
        path: CSV file path
        id_field: Column holding point identifiers
        **read_kwargs: Passed to pandas.read_csv

    Returns:
        pd.DataFrame: Attribute table with one row per identifier

    Raises:
        RequiredFileNotFoundError: If the file does not exist
        ParameterError: If the id column is missing or identifiers repeat
    """
    file_path = validate_required_file(Path(path), "Attribute table")
    table = pd.read_csv(file_path, **read_kwargs)

    if id_field not in table.columns:
        raise ParameterError("id_field", id_field, f"Column not found in {file_path}")

    duplicated = table[id_field][table[id_field].duplicated()]
    if not duplicated.empty:
        raise ParameterError(
            "id_field", id_field,
            f"Identifiers repeat in {file_path}: {', '.join(map(str, duplicated.unique()))}"
        )

    logger.debug("Read %d attribute row(s) from %s", len(table), file_path)
    return table


def write_records_csv(
    records: Sequence[ExtractionRecord],
    path: Union[str, Path],
    **to_csv_kwargs
) -> Path:
    """
    Write extraction records to CSV in long form.

    Args:
        records: Extraction records
        path: Output path (parent directories are created)
        **to_csv_kwargs: Passed to pandas.DataFrame.to_csv

    Returns:
        Path: Written file path
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    to_csv_kwargs.setdefault("index", False)
    records_to_dataframe(records).to_csv(out_path, **to_csv_kwargs)

    logger.info("Wrote %d record(s) to %s", len(records), out_path)
    return out_path
