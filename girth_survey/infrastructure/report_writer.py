"""
Infrastructure layer: static HTML report writer.
"""
import html
import logging
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd

from girth_survey.domain.models import SpatialSummary

logger = logging.getLogger(__name__)

BOXPLOT_FILE_NAME = "girth_boxplot.png"
HISTOGRAM_FILE_NAME = "girth_histogram.png"


class ReportWriter:
    """Writes the figures and the summary table into an output directory."""

    def __init__(self, output_dir: Path, title: str = "Tree Girth Survey"):
        self.output_dir = Path(output_dir)
        self.title = title

    def save_figure(self, fig: plt.Figure, file_name: str) -> Path:
        """
        Save a figure as PNG and release it.

        Args:
            fig: Matplotlib figure
            file_name: File name inside the output directory

        Returns:
            Path of the written image
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / file_name
        fig.savefig(path, dpi=150)
        plt.close(fig)
        logger.debug(f"Figure written to {path}")
        return path

    def _spatial_html(self, spatial: SpatialSummary) -> str:
        items = [
            f"<li>Trees on the map: {spatial.n_mapped}</li>",
            f"<li>Trees without a usable GPS position: {spatial.n_unmapped}</li>",
        ]
        if spatial.first_timestamp and spatial.last_timestamp:
            items.append(
                f"<li>Photographed: {spatial.first_timestamp:%Y-%m-%d %H:%M} "
                f"to {spatial.last_timestamp:%Y-%m-%d %H:%M}</li>"
            )
        if spatial.min_latitude is not None:
            items.append(
                f"<li>Extent: {spatial.min_latitude:.6f}, {spatial.min_longitude:.6f} "
                f"to {spatial.max_latitude:.6f}, {spatial.max_longitude:.6f}</li>"
            )
        if spatial.median_spacing_m is not None:
            items.append(f"<li>Median nearest-neighbour spacing: {spatial.median_spacing_m:.1f} m</li>")
        return "<ul>\n" + "\n".join(items) + "\n</ul>"

    def write(
        self,
        table: pd.DataFrame,
        spatial: SpatialSummary,
        boxplot: plt.Figure,
        histogram: plt.Figure,
        file_name: str = "report.html",
        map_path: Optional[Path] = None,
    ) -> Path:
        """
        Write the report document.

        Args:
            table: Summary statistics table
            spatial: Extent of the mapped trees
            boxplot: Boxplot figure
            histogram: Histogram figure
            file_name: Report file name inside the output directory
            map_path: Map document to link to

        Returns:
            Path of the written report
        """
        boxplot_path = self.save_figure(boxplot, BOXPLOT_FILE_NAME)
        histogram_path = self.save_figure(histogram, HISTOGRAM_FILE_NAME)

        map_link = ""
        if map_path is not None:
            map_link = f'<p><a href="{html.escape(Path(map_path).name)}">Open the tree map</a></p>'

        document = f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{html.escape(self.title)}</title>
<style>
body {{ font-family: sans-serif; max-width: 900px; margin: 2em auto; }}
table {{ border-collapse: collapse; }}
td, th {{ border: 1px solid #ccc; padding: 4px 10px; text-align: left; }}
</style>
</head>
<body>
<h1>{html.escape(self.title)}</h1>
{map_link}
<h2>Survey</h2>
{self._spatial_html(spatial)}
<h2>Summary statistics</h2>
{table.to_html(index=False, border=0)}
<h2>Boxplot</h2>
<img src="{boxplot_path.name}" alt="Girth boxplot">
<h2>Histogram</h2>
<img src="{histogram_path.name}" alt="Girth histogram">
</body>
</html>
"""
        path = self.output_dir / file_name
        path.write_text(document, encoding="utf-8")
        logger.info(f"Report written to {path}")
        return path
