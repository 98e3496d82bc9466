"""
Infrastructure layer: EXIF metadata reader.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import exifread

from girth_survey.domain.models import PhotoMetadata
from girth_survey.infrastructure.constants import ExifTags

logger = logging.getLogger(__name__)


class ExifReader:
    """
    Reader for capture time and GPS position stored in photo EXIF tags.
    Tag decoding is delegated to exifread.
    """

    def __init__(self, details: bool = False):
        """
        Initialize the reader.

        Args:
            details: Ask exifread for maker notes and thumbnails (slower)
        """
        self.details = details

    def _read_tags(self, path: Path) -> Dict[str, Any]:
        """
        Read all EXIF tags of a file.

        Args:
            path: Image file path

        Returns:
            Mapping of exifread tag key to tag object
        """
        with open(path, "rb") as f:
            return exifread.process_file(f, details=self.details)

    def read(self, path: Path) -> PhotoMetadata:
        """
        Read the metadata of a single photograph.

        A photograph without usable GPS tags yields None coordinates;
        the caller decides what to do with it.

        Args:
            path: Image file path

        Returns:
            PhotoMetadata instance
        """
        path = Path(path)
        tags = self._read_tags(path)

        timestamp = self.parse_timestamp(tags)
        latitude = self.parse_coordinate(
            tags.get(ExifTags.GPS_LATITUDE), tags.get(ExifTags.GPS_LATITUDE_REF)
        )
        longitude = self.parse_coordinate(
            tags.get(ExifTags.GPS_LONGITUDE), tags.get(ExifTags.GPS_LONGITUDE_REF)
        )

        if latitude is None or longitude is None:
            logger.warning(f"No GPS position in {path.name}")
            latitude = longitude = None
        else:
            logger.debug(f"Read {path.name}: {latitude:.6f}, {longitude:.6f} at {timestamp}")

        return PhotoMetadata(
            file_name=path.name,
            timestamp=timestamp,
            latitude=latitude,
            longitude=longitude,
        )

    def read_all(self, paths: List[Path]) -> List[PhotoMetadata]:
        """
        Read the metadata of several photographs, preserving their order.

        Args:
            paths: Image file paths

        Returns:
            List of PhotoMetadata instances
        """
        metadata = [self.read(path) for path in paths]
        without_gps = sum(1 for m in metadata if not m.has_gps)
        logger.info(f"Read EXIF metadata from {len(metadata)} photographs "
                    f"({without_gps} without GPS)")
        return metadata

    @staticmethod
    def parse_timestamp(tags: Dict[str, Any]) -> Optional[datetime]:
        """
        Parse the capture time, trying the preferred tags in order.

        Args:
            tags: exifread tag mapping

        Returns:
            Naive datetime, or None when no tag parses
        """
        for key in ExifTags.TIMESTAMP_TAGS:
            tag = tags.get(key)
            if tag is None:
                continue
            value = str(tag.values).strip().rstrip("\x00")
            try:
                return datetime.strptime(value, ExifTags.DATETIME_FORMAT)
            except ValueError:
                logger.debug(f"Unparseable {key}: {value!r}")
        return None

    @staticmethod
    def parse_coordinate(coord_tag: Any, ref_tag: Any) -> Optional[float]:
        """
        Convert an EXIF degree/minute/second coordinate to decimal degrees.

        Args:
            coord_tag: Tag whose values are three rationals (d, m, s)
            ref_tag: Hemisphere tag ("N", "S", "E" or "W")

        Returns:
            Signed decimal degrees, or None when the tags are missing or malformed
        """
        if coord_tag is None or ref_tag is None:
            return None

        values = list(coord_tag.values)
        if len(values) != 3:
            return None

        try:
            degrees, minutes, seconds = (float(v) for v in values)
        except (TypeError, ValueError, ZeroDivisionError):
            return None

        decimal = degrees + minutes / 60.0 + seconds / 3600.0

        ref = str(ref_tag.values).strip().upper()
        if ref in ExifTags.NEGATIVE_REFS:
            decimal = -decimal

        return decimal


# Singleton instance
_exif_reader: Optional[ExifReader] = None


def get_exif_reader() -> ExifReader:
    """
    Get or create the singleton EXIF reader instance.

    Returns:
        ExifReader instance
    """
    global _exif_reader
    if _exif_reader is None:
        _exif_reader = ExifReader()
    return _exif_reader
