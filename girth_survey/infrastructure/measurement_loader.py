"""
Infrastructure layer: girth measurement CSV loader.
"""
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from girth_survey.domain.exceptions import MeasurementFileError

logger = logging.getLogger(__name__)


def load_measurements(
    csv_path: Path,
    girth_column: str = "Girth_mm",
    file_name_column: Optional[str] = "FileName",
) -> pd.DataFrame:
    """
    Load the girth measurements.

    The returned frame always has a nullable integer "girth_mm" column and,
    when the CSV names the photograph of each row, a "file_name" column.
    Empty girth cells become missing values.

    Args:
        csv_path: Path of the CSV file
        girth_column: Column holding the girth in millimetres
        file_name_column: Optional column holding the photograph file name

    Returns:
        DataFrame with "girth_mm" and optionally "file_name" columns, in file order

    Raises:
        MeasurementFileError: If the file is absent, unreadable or malformed
    """
    csv_path = Path(csv_path)
    if not csv_path.is_file():
        raise MeasurementFileError(f"Girth CSV not found: {csv_path}")

    try:
        raw = pd.read_csv(csv_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise MeasurementFileError(f"Could not read {csv_path}: {e}") from e

    if girth_column not in raw.columns:
        raise MeasurementFileError(
            f"Column '{girth_column}' missing from {csv_path} "
            f"(found: {', '.join(map(str, raw.columns))})"
        )

    girths = pd.to_numeric(raw[girth_column], errors="coerce")
    unparseable = girths.isna() & raw[girth_column].notna()
    if unparseable.any():
        rows = [int(i) + 1 for i in raw.index[unparseable]]
        raise MeasurementFileError(f"Non-numeric girth values in rows {rows}")

    if (girths.dropna() % 1 != 0).any():
        raise MeasurementFileError("Girth values must be whole millimetres")

    if (girths.dropna() <= 0).any():
        rows = [int(i) + 1 for i in raw.index[girths <= 0]]
        raise MeasurementFileError(f"Girth values must be positive (rows {rows})")

    measurements = pd.DataFrame({"girth_mm": girths.astype("Int64")})

    if file_name_column and file_name_column in raw.columns:
        measurements["file_name"] = raw[file_name_column].astype("string").str.strip()
        logger.debug(f"Using '{file_name_column}' as join key")

    logger.info(f"Loaded {len(measurements)} girth measurements from {csv_path} "
                f"({int(measurements['girth_mm'].isna().sum())} missing)")
    return measurements
