"""
Geospatial projection utilities for coordinate transformations.
"""
import logging
import math
from typing import Tuple, List

import geopandas as gpd
import pandas as pd
from pyproj import Transformer
from shapely.geometry import Point

from girth_survey.domain.exceptions import CoordinateRangeError
from girth_survey.domain.models import TreeRecord
from girth_survey.infrastructure.constants import CRS

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["file_name", "timestamp", "girth_mm", "longitude", "latitude"]


def validate_coordinate(longitude: float, latitude: float, file_name: str = "") -> None:
    """
    Check that a coordinate lies inside the WGS84 range.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees
        file_name: Photograph the coordinate belongs to, for the error message

    Raises:
        CoordinateRangeError: If |lat| > 90, |lon| > 180 or a value is not finite
    """
    if not (math.isfinite(longitude) and math.isfinite(latitude)):
        raise CoordinateRangeError(longitude, latitude, file_name)
    if abs(latitude) > 90 or abs(longitude) > 180:
        raise CoordinateRangeError(longitude, latitude, file_name)


def to_point(longitude: float, latitude: float) -> Point:
    """
    Lift a longitude/latitude pair into a point geometry.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        Point with x = longitude, y = latitude
    """
    validate_coordinate(longitude, latitude)
    return Point(longitude, latitude)


def from_point(point: Point) -> Tuple[float, float]:
    """
    Read a point geometry back as (longitude, latitude).
    """
    return (point.x, point.y)


def project_records(
    records: List[TreeRecord],
    skip_invalid: bool = False,
) -> gpd.GeoDataFrame:
    """
    Build a point GeoDataFrame in EPSG:4326 from tree records.

    Records without GPS are left out with a warning. Out-of-range
    coordinates abort the projection unless skip_invalid is set, in which
    case they are left out as well.

    Args:
        records: Joined tree records
        skip_invalid: Drop out-of-range coordinates instead of raising

    Returns:
        GeoDataFrame with one row per mappable record

    Raises:
        CoordinateRangeError: On an out-of-range coordinate when skip_invalid is False
    """
    rows = []
    geometries = []

    for record in records:
        if not record.has_gps:
            logger.warning(f"Skipping {record.file_name} on the map: no GPS position")
            continue

        try:
            point = to_point(record.longitude, record.latitude)
        except CoordinateRangeError:
            if not skip_invalid:
                raise CoordinateRangeError(record.longitude, record.latitude, record.file_name) from None
            logger.warning(f"Skipping {record.file_name} on the map: coordinate out of range "
                           f"({record.longitude}, {record.latitude})")
            continue

        rows.append(record.model_dump(include=set(RECORD_COLUMNS)))
        geometries.append(point)

    gdf = gpd.GeoDataFrame(rows, columns=RECORD_COLUMNS, geometry=geometries, crs=CRS.WGS84)
    gdf["girth_mm"] = gdf["girth_mm"].astype("Int64")
    gdf["timestamp"] = pd.to_datetime(gdf["timestamp"])

    logger.info(f"Projected {len(gdf)}/{len(records)} records to {CRS.WGS84}")
    return gdf


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return min(int((longitude + 180) / 6) + 1, 60)


def get_utm_crs(longitude: float, latitude: float) -> str:
    """
    Get the appropriate UTM CRS (Coordinate Reference System) for a location.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        EPSG code for the UTM zone
    """
    zone = get_utm_zone(longitude)
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if latitude >= 0 else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


def project_to_meters(
    coordinates: List[Tuple[float, float]]
) -> List[Tuple[float, float]]:
    """
    Project lat/lon coordinates to a planar coordinate system (UTM) in meters.

    Args:
        coordinates: List of (latitude, longitude) tuples in degrees

    Returns:
        List of (x, y) coordinates in meters
    """
    if not coordinates:
        raise ValueError("Coordinates list cannot be empty")

    # Use the first coordinate to determine the UTM zone
    lat, lon = coordinates[0]
    utm_crs = get_utm_crs(lon, lat)

    transformer = Transformer.from_crs(
        CRS.WGS84,
        utm_crs,
        always_xy=True  # Ensure (lon, lat) -> (x, y) order
    )

    projected = []
    for lat, lon in coordinates:
        x, y = transformer.transform(lon, lat)
        projected.append((x, y))

    return projected
