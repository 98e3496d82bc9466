"""
Infrastructure layer: photograph enumeration.
"""
import fnmatch
import logging
from pathlib import Path
from typing import List

from girth_survey.domain.exceptions import MissingPhotosError

logger = logging.getLogger(__name__)


def list_photos(directory: Path, pattern: str = "*.jpg") -> List[Path]:
    """
    List the photographs in a directory.

    The pattern is matched case-insensitively so "*.jpg" also picks up
    "*.JPG" files written by most cameras. Files are returned sorted by
    name, independent of the operating system's listing order.

    Args:
        directory: Directory holding the photographs
        pattern: Glob pattern applied to the file names

    Returns:
        Sorted list of photograph paths

    Raises:
        MissingPhotosError: If the directory is absent or nothing matches
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingPhotosError(f"Photo directory not found: {directory}")

    photos = sorted(
        (
            path for path in directory.iterdir()
            if path.is_file() and fnmatch.fnmatch(path.name.lower(), pattern.lower())
        ),
        key=lambda path: path.name,
    )

    if not photos:
        raise MissingPhotosError(
            f"No photographs matching '{pattern}' in {directory}"
        )

    logger.info(f"Found {len(photos)} photographs in {directory}")
    return photos
