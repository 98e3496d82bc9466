"""
Domain service: pairing girth measurements with photograph metadata.
"""
import logging
from typing import List, Optional

import pandas as pd

from girth_survey.domain.exceptions import MeasurementMismatchError
from girth_survey.domain.models import PhotoMetadata, TreeRecord

logger = logging.getLogger(__name__)


def _girth_or_none(value) -> Optional[int]:
    return None if pd.isna(value) else int(value)


def _build_record(photo: PhotoMetadata, girth) -> TreeRecord:
    return TreeRecord(
        file_name=photo.file_name,
        timestamp=photo.timestamp,
        girth_mm=_girth_or_none(girth),
        longitude=photo.longitude,
        latitude=photo.latitude,
    )


def join_by_file_name(
    measurements: pd.DataFrame,
    metadata: List[PhotoMetadata],
) -> List[TreeRecord]:
    """
    Join measurements to photographs on the file name.

    Every photograph needs exactly one measurement row and every row must
    name a photograph. Records follow the photograph order.

    Args:
        measurements: Frame with "file_name" and "girth_mm" columns
        metadata: Photograph metadata

    Returns:
        List of TreeRecord, one per photograph

    Raises:
        MeasurementMismatchError: On duplicate, missing or unmatched keys
    """
    keys = measurements["file_name"]
    duplicated = sorted(set(keys[keys.duplicated()].dropna()))
    if duplicated:
        raise MeasurementMismatchError(
            f"Duplicate measurement rows for: {', '.join(duplicated)}"
        )

    girth_by_name = dict(zip(keys, measurements["girth_mm"]))
    photo_names = {photo.file_name for photo in metadata}

    missing = photo_names - set(girth_by_name)
    unmatched = {str(k) for k in girth_by_name if k not in photo_names}
    if missing or unmatched:
        raise MeasurementMismatchError(
            f"Measurements do not match photographs: "
            f"{len(missing)} photographs without a measurement, "
            f"{len(unmatched)} measurements without a photograph",
            missing_measurements=missing,
            unmatched_measurements=unmatched,
        )

    return [_build_record(photo, girth_by_name[photo.file_name]) for photo in metadata]


def join_by_position(
    measurements: pd.DataFrame,
    metadata: List[PhotoMetadata],
) -> List[TreeRecord]:
    """
    Pair the i-th measurement with the i-th photograph.

    Only correct if the CSV rows were written in photograph file name order.

    Args:
        measurements: Frame with a "girth_mm" column
        metadata: Photograph metadata, in enumeration order

    Returns:
        List of TreeRecord, one per photograph

    Raises:
        MeasurementMismatchError: If the counts differ
    """
    if len(measurements) != len(metadata):
        raise MeasurementMismatchError(
            f"Row count mismatch: {len(measurements)} measurements "
            f"for {len(metadata)} photographs"
        )

    logger.warning("Girth CSV has no file name column, pairing rows by position")
    return [
        _build_record(photo, girth)
        for photo, girth in zip(metadata, measurements["girth_mm"])
    ]


def join_measurements(
    measurements: pd.DataFrame,
    metadata: List[PhotoMetadata],
) -> List[TreeRecord]:
    """
    Merge girth measurements with photograph metadata.

    Uses the file name key when the measurements carry one and falls back
    to positional pairing otherwise. Both fail loudly on a mismatch.

    Args:
        measurements: Output of load_measurements
        metadata: Photograph metadata, in enumeration order

    Returns:
        List of TreeRecord, one per photograph
    """
    if "file_name" in measurements.columns:
        records = join_by_file_name(measurements, metadata)
    else:
        records = join_by_position(measurements, metadata)

    logger.info(f"Joined {len(records)} tree records")
    return records
