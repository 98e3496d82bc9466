"""
Application service: Orchestration layer for the girth survey.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import logging

import geopandas as gpd

from girth_survey.config import Settings
from girth_survey.domain.models import (
    BoxplotStatistics,
    HistogramBin,
    SpatialSummary,
    SummaryStatistics,
    TreeRecord,
)
from girth_survey.infrastructure.exif_reader import ExifReader
from girth_survey.infrastructure.measurement_loader import load_measurements
from girth_survey.infrastructure.photo_enumerator import list_photos
from girth_survey.infrastructure.report_writer import ReportWriter
from girth_survey.services.domain import descriptive_reporter
from girth_survey.services.domain.map_renderer import GeoRenderer
from girth_survey.services.domain.measurement_joiner import join_measurements
from girth_survey.utils.geo_projection import project_records
from girth_survey.utils.spatial_helpers import summarize_extent

logger = logging.getLogger(__name__)


@dataclass
class SurveyResult:
    """Everything a survey run produces."""
    records: List[TreeRecord]
    mapped: gpd.GeoDataFrame
    summary: SummaryStatistics
    boxplot: Optional[BoxplotStatistics]
    histogram: List[HistogramBin]
    spatial: SpatialSummary
    map_path: Optional[Path]
    report_path: Path


class SurveyService:
    """
    Application service for the girth survey.

    Orchestrates the pipeline: photographs -> EXIF metadata -> join with
    girths -> point geometries -> {map, statistics report}.
    No business logic here, only coordination between infrastructure
    and domain layers.
    """

    def __init__(
        self,
        settings: Settings,
        exif_reader: ExifReader,
        renderer: GeoRenderer,
    ):
        """
        Initialize the service with dependencies.

        Args:
            settings: Input/output locations and analysis parameters
            exif_reader: Reader for photograph metadata
            renderer: Map renderer
        """
        self.settings = settings
        self.exif_reader = exif_reader
        self.renderer = renderer

    def load_records(self) -> List[TreeRecord]:
        """
        Read the photographs and the girth CSV and join them.

        Raises:
            MissingPhotosError: If there are no photographs
            MeasurementFileError: If the CSV cannot be used
            MeasurementMismatchError: If girths and photographs do not pair up
        """
        photos = list_photos(self.settings.photo_dir, self.settings.photo_pattern)
        metadata = self.exif_reader.read_all(photos)
        measurements = load_measurements(
            self.settings.girth_csv_path,
            girth_column=self.settings.girth_column,
            file_name_column=self.settings.file_name_column,
        )
        return join_measurements(measurements, metadata)

    def run(self) -> SurveyResult:
        """
        Run the whole survey analysis and write its documents.

        A survey without any GPS position still gets its statistics report;
        only the map is left out.

        Returns:
            SurveyResult with the computed statistics and written paths

        Raises:
            GirthSurveyError: On any data error, see load_records and project_records
        """
        logger.info("Starting girth survey")

        # Steps 1-3: enumerate, read EXIF, join girths
        records = self.load_records()

        # Step 4: lift coordinates to EPSG:4326 points
        mapped = project_records(records, skip_invalid=self.settings.skip_invalid_coordinates)

        # Step 5: map, skipped when no record has a position
        output_dir = Path(self.settings.output_dir)
        map_path = None
        if mapped.empty:
            logger.warning("No tree records with a GPS position, map not written")
        else:
            fmap = self.renderer.render(mapped)
            map_path = self.renderer.save(fmap, output_dir / self.settings.map_file_name)

        # Step 6: statistics over every record, mapped or not
        girths = [r.girth_mm for r in records]
        summary = descriptive_reporter.summarize(
            girths,
            quantile_method=self.settings.quantile_method,
            ddof=self.settings.sd_ddof,
        )
        logger.info(f"Girth summary: n={summary.n}, missing={summary.n_missing}, "
                    f"mean={summary.mean}, median={summary.median}")

        boxplot = None
        if summary.n > summary.n_missing:
            boxplot = descriptive_reporter.boxplot_statistics(girths)
        histogram = descriptive_reporter.histogram_bins(girths, bins=self.settings.histogram_bins)
        spatial = summarize_extent(mapped, len(records))

        writer = ReportWriter(output_dir, title=self.settings.app_name)
        report_path = writer.write(
            table=descriptive_reporter.summary_table(summary),
            spatial=spatial,
            boxplot=descriptive_reporter.plot_boxplot(girths),
            histogram=descriptive_reporter.plot_histogram(girths, bins=self.settings.histogram_bins),
            file_name=self.settings.report_file_name,
            map_path=map_path,
        )

        logger.info("Girth survey complete")
        return SurveyResult(
            records=records,
            mapped=mapped,
            summary=summary,
            boxplot=boxplot,
            histogram=histogram,
            spatial=spatial,
            map_path=map_path,
            report_path=report_path,
        )
