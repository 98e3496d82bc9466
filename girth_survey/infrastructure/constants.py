"""
EXIF tag names and map tile constants.

This module contains all EXIF tag keys and tile provider definitions.
Centralizing these values makes it easy to swap out providers or support
cameras that write the capture time under a different tag.
"""


# EXIF tag keys as reported by exifread
class ExifTags:
    """exifread tag keys used by the metadata reader."""

    # Capture time, in order of preference
    DATETIME_ORIGINAL = "EXIF DateTimeOriginal"
    DATETIME_DIGITIZED = "EXIF DateTimeDigitized"
    IMAGE_DATETIME = "Image DateTime"
    TIMESTAMP_TAGS = (DATETIME_ORIGINAL, DATETIME_DIGITIZED, IMAGE_DATETIME)

    # GPS
    GPS_LATITUDE = "GPS GPSLatitude"
    GPS_LATITUDE_REF = "GPS GPSLatitudeRef"
    GPS_LONGITUDE = "GPS GPSLongitude"
    GPS_LONGITUDE_REF = "GPS GPSLongitudeRef"

    # "YYYY:MM:DD HH:MM:SS"
    DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

    # Hemisphere references that negate the coordinate
    NEGATIVE_REFS = ("S", "W")


# Base tile layers of the interactive map
class TileLayers:
    """Base tile providers, in the order they are added to the map."""

    OPENSTREETMAP = {
        "tiles": "OpenStreetMap",
        "name": "OpenStreetMap",
        "attr": None,
    }
    ESRI_WORLD_IMAGERY = {
        "tiles": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "name": "Esri World Imagery",
        "attr": "Tiles &copy; Esri",
    }
    OPENTOPOMAP = {
        "tiles": "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
        "name": "OpenTopoMap",
        "attr": "Map data &copy; OpenStreetMap contributors, SRTM | Map style &copy; OpenTopoMap (CC-BY-SA)",
    }

    @classmethod
    def all(cls) -> list[dict]:
        """
        Get every base layer definition.

        Returns:
            List of tile layer keyword dictionaries
        """
        return [cls.OPENSTREETMAP, cls.ESRI_WORLD_IMAGERY, cls.OPENTOPOMAP]


# Coordinate reference systems
class CRS:
    """Coordinate reference system identifiers."""

    WGS84 = "EPSG:4326"
