"""
Domain service: interactive tree map rendering.

Builds a folium map with:
- Three selectable base tile layers
- One toggleable overlay of circle markers, coloured and sized by girth
- A continuous colour legend fitted to the girth range
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import html
import logging

import folium
import geopandas as gpd
import pandas as pd
from branca.colormap import LinearColormap

from girth_survey.config import settings
from girth_survey.domain.exceptions import EmptyMapError
from girth_survey.infrastructure.constants import TileLayers

logger = logging.getLogger(__name__)

MISSING_GIRTH_COLOR = "#808080"


@dataclass
class RenderConfig:
    """Configuration for map rendering."""

    min_marker_radius: float = 3.0
    """Smallest marker radius in pixels (also used for missing girths)"""

    max_marker_radius: float = 15.0
    """Marker radius in pixels for the largest girth"""

    colors: list[str] = field(
        default_factory=lambda: ["#ffffcc", "#a1dab4", "#41b6c4", "#2c7fb8", "#253494"]
    )
    """Palette of the continuous girth scale, low to high"""

    zoom_start: int = 16
    """Initial zoom before fitting the view to the markers"""

    overlay_name: str = "Trees"
    """Name of the marker layer in the layer control"""

    legend_caption: str = "Girth (mm)"


class GeoRenderer:
    """
    Renders projected tree records to an interactive map.

    Stateless apart from its configuration: render() can be called on
    any number of GeoDataFrames.
    """

    def __init__(self, config: Optional[RenderConfig] = None):
        """
        Initialize the renderer.

        Args:
            config: Full configuration object, defaults taken from settings
        """
        if config:
            self.config = config
        else:
            self.config = RenderConfig(
                min_marker_radius=settings.min_marker_radius,
                max_marker_radius=settings.max_marker_radius,
                colors=list(settings.colormap_colors),
                zoom_start=settings.map_zoom_start,
            )

        logger.debug(f"Initialized GeoRenderer with radius range "
                     f"{self.config.min_marker_radius}-{self.config.max_marker_radius}px")

    def build_colormap(self, girths: pd.Series) -> LinearColormap:
        """
        Fit a continuous colour scale to the min/max of the girths.

        Args:
            girths: Girth values, missing values ignored

        Returns:
            LinearColormap spanning the girth range
        """
        values = girths.dropna()
        if values.empty:
            vmin, vmax = 0.0, 1.0
        else:
            vmin, vmax = float(values.min()), float(values.max())
        if vmin == vmax:
            # Single value: widen so the legend still has a range
            vmax = vmin + 1.0

        return LinearColormap(
            self.config.colors,
            vmin=vmin,
            vmax=vmax,
            caption=self.config.legend_caption,
        )

    def marker_radius(self, girth: Optional[float], max_girth: Optional[float]) -> float:
        """
        Scale a marker radius linearly with girth, normalised by the largest girth.

        Args:
            girth: Girth of the tree, None if missing
            max_girth: Largest girth on the map

        Returns:
            Radius in pixels, never below min_marker_radius
        """
        if girth is None or pd.isna(girth) or not max_girth:
            return self.config.min_marker_radius
        radius = self.config.max_marker_radius * float(girth) / float(max_girth)
        return max(self.config.min_marker_radius, radius)

    def _popup_html(self, row: pd.Series) -> str:
        girth = "missing" if pd.isna(row["girth_mm"]) else f"{int(row['girth_mm'])} mm"
        taken = "unknown" if pd.isna(row["timestamp"]) else row["timestamp"].strftime("%Y-%m-%d %H:%M")
        return (
            f"<b>{html.escape(row['file_name'])}</b><br>"
            f"Girth: {girth}<br>"
            f"Taken: {taken}<br>"
            f"{row.geometry.y:.6f}, {row.geometry.x:.6f}"
        )

    def render(self, gdf: gpd.GeoDataFrame) -> folium.Map:
        """
        Render the tree map.

        Args:
            gdf: Projected tree records (EPSG:4326)

        Returns:
            folium.Map with base layers, marker overlay, legend and layer control

        Raises:
            EmptyMapError: If there is nothing to map
        """
        if gdf.empty:
            raise EmptyMapError("No tree records with a GPS position to map")

        min_lon, min_lat, max_lon, max_lat = (float(v) for v in gdf.total_bounds)
        center = [(min_lat + max_lat) / 2, (min_lon + max_lon) / 2]

        fmap = folium.Map(location=center, zoom_start=self.config.zoom_start, tiles=None)

        for layer in TileLayers.all():
            folium.TileLayer(
                tiles=layer["tiles"],
                name=layer["name"],
                attr=layer["attr"],
            ).add_to(fmap)

        colormap = self.build_colormap(gdf["girth_mm"])
        girths = gdf["girth_mm"].dropna()
        max_girth = float(girths.max()) if not girths.empty else None

        markers = folium.FeatureGroup(name=self.config.overlay_name, overlay=True, control=True, show=True)
        for _, row in gdf.iterrows():
            girth = row["girth_mm"]
            color = MISSING_GIRTH_COLOR if pd.isna(girth) else colormap(float(girth))
            folium.CircleMarker(
                location=[row.geometry.y, row.geometry.x],
                radius=self.marker_radius(girth, max_girth),
                color=color,
                weight=1,
                fill=True,
                fill_color=color,
                fill_opacity=0.8,
                popup=folium.Popup(self._popup_html(row), max_width=250),
                tooltip=html.escape(row["file_name"]),
            ).add_to(markers)
        markers.add_to(fmap)

        colormap.add_to(fmap)
        folium.LayerControl(collapsed=False).add_to(fmap)
        fmap.fit_bounds([[min_lat, min_lon], [max_lat, max_lon]])

        logger.info(f"Rendered map with {len(gdf)} tree markers")
        return fmap

    def save(self, fmap: folium.Map, path: Path) -> Path:
        """
        Write the map to a standalone HTML document.

        Args:
            fmap: Rendered map
            path: Destination file

        Returns:
            The written path
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fmap.save(str(path))
        logger.info(f"Map written to {path}")
        return path
