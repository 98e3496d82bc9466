"""
Spatial analysis helper functions.

Provides utilities for:
- KD-Tree spatial indexing
- Tree spacing estimation
- Extent of the mapped trees
"""
from typing import Optional
import numpy as np
import pandas as pd
import geopandas as gpd
from scipy.spatial import KDTree
import logging

from girth_survey.domain.models import SpatialSummary
from girth_survey.utils.geo_projection import project_to_meters

logger = logging.getLogger(__name__)


def build_kdtree(coordinates: list[tuple[float, float]]) -> KDTree:
    """
    Build a KD-Tree for efficient spatial queries.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        KDTree instance
    """
    points = np.array(coordinates)
    return KDTree(points)


def calculate_nearest_neighbor_distances(
    kdtree: KDTree,
    coordinates: list[tuple[float, float]]
) -> np.ndarray:
    """
    Calculate the distance to the nearest neighbor for each point.

    Args:
        kdtree: KDTree built from coordinates
        coordinates: List of (x, y) coordinate tuples

    Returns:
        Array of distances to nearest neighbors
    """
    points = np.array(coordinates)
    # Query for 2 nearest neighbors (first is the point itself, second is nearest)
    distances, _ = kdtree.query(points, k=2)
    return distances[:, 1]


def estimate_tree_spacing(
    coordinates: list[tuple[float, float]]
) -> Optional[float]:
    """
    Estimate tree spacing using median nearest-neighbor distance.

    Args:
        coordinates: List of (x, y) coordinate tuples in meters

    Returns:
        Estimated tree spacing in meters, or None with fewer than two trees
    """
    if len(coordinates) < 2:
        return None

    kdtree = build_kdtree(coordinates)
    distances = calculate_nearest_neighbor_distances(kdtree, coordinates)
    spacing = float(np.median(distances))
    logger.debug(f"Estimated tree spacing: {spacing:.2f}m (median of {len(distances)} distances)")
    return spacing


def summarize_extent(gdf: gpd.GeoDataFrame, n_records: int) -> SpatialSummary:
    """
    Summarize where and when the mapped trees were photographed.

    Args:
        gdf: Projected records (EPSG:4326)
        n_records: Number of records before projection

    Returns:
        SpatialSummary instance
    """
    n_mapped = len(gdf)
    summary = {"n_mapped": n_mapped, "n_unmapped": n_records - n_mapped}

    if n_mapped:
        min_lon, min_lat, max_lon, max_lat = (float(v) for v in gdf.total_bounds)
        lat_lon = list(zip(gdf.geometry.y, gdf.geometry.x))
        summary.update(
            min_longitude=min_lon,
            min_latitude=min_lat,
            max_longitude=max_lon,
            max_latitude=max_lat,
            median_spacing_m=estimate_tree_spacing(project_to_meters(lat_lon)),
        )

        timestamps = gdf["timestamp"].dropna()
        if len(timestamps):
            summary.update(
                first_timestamp=pd.Timestamp(timestamps.min()).to_pydatetime(),
                last_timestamp=pd.Timestamp(timestamps.max()).to_pydatetime(),
            )

    return SpatialSummary(**summary)
