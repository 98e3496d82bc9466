"""
Tests for loading, joining and the end-to-end survey run.

Tests the full pipeline against temporary photographs (with faked EXIF
decoding) and girth CSV files.
"""
import pytest
import pandas as pd
import matplotlib.pyplot as plt

from girth_survey.config import Settings
from girth_survey.dependencies import get_survey_service
from girth_survey.domain.exceptions import (
    CoordinateRangeError,
    MeasurementFileError,
    MeasurementMismatchError,
    MissingPhotosError,
)
from girth_survey.error_handler import (
    EXIT_DATA_ERROR,
    EXIT_OK,
    EXIT_UNEXPECTED,
    ErrorHandler,
)
from girth_survey.infrastructure.exif_reader import ExifReader
from girth_survey.infrastructure.measurement_loader import load_measurements
from girth_survey.infrastructure.report_writer import ReportWriter
from girth_survey.services.application.survey_service import SurveyService
from girth_survey.services.domain.map_renderer import GeoRenderer
from girth_survey.services.domain.measurement_joiner import join_measurements


THREE_TREES = [
    ("tree_01.jpg", 51.5001, -0.1199),
    ("tree_02.jpg", 51.5002, -0.1198),
    ("tree_03.jpg", 51.5003, -0.1197),
]


@pytest.fixture
def service(survey_settings) -> SurveyService:
    return SurveyService(
        settings=survey_settings,
        exif_reader=ExifReader(),
        renderer=GeoRenderer(),
    )


# ============================================================
# Measurement Loader Tests
# ============================================================

class TestLoadMeasurements:
    """Tests for reading the girth CSV."""

    def test_girth_only(self, write_girth_csv):
        """A bare Girth_mm column loads without a join key."""
        path = write_girth_csv([450, 1330, 2410])

        measurements = load_measurements(path)

        assert list(measurements["girth_mm"]) == [450, 1330, 2410]
        assert "file_name" not in measurements.columns

    def test_with_file_names(self, write_girth_csv):
        """A FileName column becomes the join key."""
        path = write_girth_csv([450, 1330], file_names=["a.jpg", " b.jpg "])

        measurements = load_measurements(path)

        assert list(measurements["file_name"]) == ["a.jpg", "b.jpg"]

    def test_empty_cell_is_missing(self, write_girth_csv):
        """Empty girth cells load as missing values."""
        path = write_girth_csv([450, None, 2410])

        measurements = load_measurements(path)

        assert measurements["girth_mm"].isna().tolist() == [False, True, False]
        assert str(measurements["girth_mm"].dtype) == "Int64"

    def test_missing_file(self, tmp_path):
        with pytest.raises(MeasurementFileError, match="not found"):
            load_measurements(tmp_path / "absent.csv")

    def test_missing_column(self, tmp_path):
        """A CSV without the girth column is rejected."""
        path = tmp_path / "girths.csv"
        path.write_text("Circumference\n450\n")

        with pytest.raises(MeasurementFileError, match="Girth_mm"):
            load_measurements(path)

    def test_non_positive_girth(self, write_girth_csv):
        """Girths must be positive millimetres."""
        path = write_girth_csv([450, 0])

        with pytest.raises(MeasurementFileError, match="positive"):
            load_measurements(path)

    def test_non_numeric_girth(self, tmp_path):
        path = tmp_path / "girths.csv"
        path.write_text("Girth_mm\n450\nbig\n")

        with pytest.raises(MeasurementFileError, match="Non-numeric"):
            load_measurements(path)


# ============================================================
# Measurement Joiner Tests
# ============================================================

class TestJoinMeasurements:
    """Tests for pairing girths with photographs."""

    def test_positional_identity(self, sample_metadata):
        """The i-th record carries the i-th girth."""
        girths = [450, 1330, 2410]
        measurements = pd.DataFrame({"girth_mm": pd.array(girths, dtype="Int64")})

        records = join_measurements(measurements, sample_metadata)

        assert [r.girth_mm for r in records] == girths
        assert [r.file_name for r in records] == [m.file_name for m in sample_metadata]
        assert records[0].latitude == sample_metadata[0].latitude

    def test_positional_length_mismatch(self, sample_metadata):
        """Differing counts must fail loudly instead of truncating."""
        measurements = pd.DataFrame({"girth_mm": pd.array([450, 1330], dtype="Int64")})

        with pytest.raises(MeasurementMismatchError, match="2 measurements for 3 photographs"):
            join_measurements(measurements, sample_metadata)

    def test_key_join_ignores_row_order(self, sample_metadata):
        """With file names, CSV order does not matter."""
        measurements = pd.DataFrame({
            "girth_mm": pd.array([2410, 450, 1330], dtype="Int64"),
            "file_name": ["tree_03.jpg", "tree_01.jpg", "tree_02.jpg"],
        })

        records = join_measurements(measurements, sample_metadata)

        assert [(r.file_name, r.girth_mm) for r in records] == [
            ("tree_01.jpg", 450),
            ("tree_02.jpg", 1330),
            ("tree_03.jpg", 2410),
        ]

    def test_key_join_mismatch(self, sample_metadata):
        """Unknown and missing keys are both reported."""
        measurements = pd.DataFrame({
            "girth_mm": pd.array([450, 1330, 2410], dtype="Int64"),
            "file_name": ["tree_01.jpg", "tree_02.jpg", "tree_99.jpg"],
        })

        with pytest.raises(MeasurementMismatchError) as exc_info:
            join_measurements(measurements, sample_metadata)

        assert exc_info.value.missing_measurements == ["tree_03.jpg"]
        assert exc_info.value.unmatched_measurements == ["tree_99.jpg"]

    def test_key_join_duplicates(self, sample_metadata):
        """Two rows for one photograph are a mismatch."""
        measurements = pd.DataFrame({
            "girth_mm": pd.array([450, 1330, 2410], dtype="Int64"),
            "file_name": ["tree_01.jpg", "tree_01.jpg", "tree_02.jpg"],
        })

        with pytest.raises(MeasurementMismatchError, match="Duplicate"):
            join_measurements(measurements, sample_metadata)

    def test_missing_girth_kept(self, sample_metadata):
        """A missing girth joins as None."""
        measurements = pd.DataFrame({"girth_mm": pd.array([450, None, 2410], dtype="Int64")})

        records = join_measurements(measurements, sample_metadata)

        assert records[1].girth_mm is None


# ============================================================
# End-to-End Survey Tests
# ============================================================

class TestSurveyService:
    """Tests for the whole pipeline."""

    def test_three_tree_scenario(self, service, make_photos, write_girth_csv):
        """Three geotagged trees give N=3, min 450, median 1330, max 2410."""
        make_photos(THREE_TREES)
        write_girth_csv([450, 1330, 2410])

        result = service.run()

        assert result.summary.n == 3
        assert result.summary.min == 450
        assert result.summary.median == 1330
        assert result.summary.max == 2410
        assert len(result.mapped) == 3
        assert result.map_path.exists()
        assert result.report_path.exists()
        assert (result.report_path.parent / "girth_boxplot.png").exists()
        assert (result.report_path.parent / "girth_histogram.png").exists()

    def test_report_contents(self, service, make_photos, write_girth_csv):
        """The report holds the table and links the map."""
        make_photos(THREE_TREES)
        write_girth_csv([450, 1330, 2410])

        result = service.run()

        report = result.report_path.read_text(encoding="utf-8")
        assert "Median" in report
        assert "2410" in report
        assert 'href="tree_map.html"' in report
        assert "girth_histogram.png" in report

    def test_gps_less_photo_counted_not_mapped(self, service, make_photos, write_girth_csv):
        """A photograph without GPS is left off the map but kept in the statistics."""
        make_photos([
            ("tree_01.jpg", 51.5001, -0.1199),
            ("tree_02.jpg", None, None),
            ("tree_03.jpg", 51.5003, -0.1197),
        ])
        write_girth_csv([450, 1330, 2410])

        result = service.run()

        assert list(result.mapped["file_name"]) == ["tree_01.jpg", "tree_03.jpg"]
        assert result.summary.n == 3
        assert result.summary.median == 1330
        assert result.spatial.n_unmapped == 1

    def test_key_join_end_to_end(self, service, make_photos, write_girth_csv):
        """A FileName column pairs rows regardless of their order."""
        make_photos(THREE_TREES)
        write_girth_csv([2410, 450, 1330], file_names=["tree_03.jpg", "tree_01.jpg", "tree_02.jpg"])

        result = service.run()

        assert [r.girth_mm for r in result.records] == [450, 1330, 2410]

    def test_empty_directory(self, service, write_girth_csv):
        """No photographs aborts the run."""
        write_girth_csv([450])

        with pytest.raises(MissingPhotosError):
            service.run()

    def test_row_count_mismatch(self, service, make_photos, write_girth_csv):
        make_photos(THREE_TREES)
        write_girth_csv([450, 1330])

        with pytest.raises(MeasurementMismatchError):
            service.run()

    def test_no_gps_anywhere(self, service, make_photos, write_girth_csv, caplog):
        """Without any position the map is skipped but the report is still written."""
        make_photos([("tree_01.jpg", None, None), ("tree_02.jpg", None, None)])
        write_girth_csv([450, 1330])

        result = service.run()

        assert result.map_path is None
        assert not (result.report_path.parent / "tree_map.html").exists()
        assert result.report_path.exists()
        assert result.summary.n == 2
        assert result.spatial.n_unmapped == 2
        assert "tree_map.html" not in result.report_path.read_text(encoding="utf-8")
        assert "map not written" in caplog.text

    def test_out_of_range_skipped_when_configured(self, survey_settings, make_photos,
                                                  write_girth_csv, monkeypatch):
        """skip_invalid_coordinates drops the bad tree from the map only."""
        make_photos(THREE_TREES)
        write_girth_csv([450, 1330, 2410])
        survey_settings.skip_invalid_coordinates = True
        original = ExifReader.read

        def read_with_bad_longitude(self, path):
            metadata = original(self, path)
            if metadata.file_name == "tree_02.jpg":
                metadata = metadata.model_copy(update={"longitude": 200.0})
            return metadata

        monkeypatch.setattr(ExifReader, "read", read_with_bad_longitude)

        result = get_survey_service(settings=survey_settings, exif_reader=ExifReader()).run()

        assert len(result.mapped) == 2
        assert result.summary.n == 3


# ============================================================
# Error Handler Tests
# ============================================================

class TestErrorHandler:
    """Tests for mapping failures to exit codes."""

    def test_success(self):
        assert ErrorHandler().run(lambda: None) == EXIT_OK

    def test_data_errors(self, caplog):
        """Survey errors are logged and give the data error code."""
        def fail():
            raise MissingPhotosError("No photographs matching '*.jpg'")

        assert ErrorHandler().run(fail) == EXIT_DATA_ERROR
        assert "Survey aborted" in caplog.text

    def test_mismatch_lists_keys(self, caplog):
        """Mismatched keys are listed one per line."""
        def fail():
            raise MeasurementMismatchError(
                "Measurements do not match photographs",
                missing_measurements=["tree_03.jpg"],
                unmatched_measurements=["tree_99.jpg"],
            )

        assert ErrorHandler().run(fail) == EXIT_DATA_ERROR
        assert "no measurement for photograph tree_03.jpg" in caplog.text
        assert "no photograph for measurement tree_99.jpg" in caplog.text

    def test_coordinate_error(self):
        def fail():
            raise CoordinateRangeError(200.0, 0.0, "tree_02.jpg")

        assert ErrorHandler().run(fail) == EXIT_DATA_ERROR

    def test_unexpected_error(self, caplog):
        """Anything else is logged with a traceback."""
        def fail():
            raise RuntimeError("boom")

        assert ErrorHandler().run(fail) == EXIT_UNEXPECTED
        assert "Unhandled exception: boom" in caplog.text


# ============================================================
# Settings Tests
# ============================================================

class TestSettings:
    """Tests for environment-driven configuration."""

    def test_numeric_histogram_bins_from_env(self, monkeypatch):
        """A digit string from the environment becomes a bin count."""
        monkeypatch.setenv("GIRTH_SURVEY_HISTOGRAM_BINS", "12")

        assert Settings().histogram_bins == 12

    def test_named_histogram_rule(self, monkeypatch):
        monkeypatch.setenv("GIRTH_SURVEY_HISTOGRAM_BINS", "fd")

        assert Settings().histogram_bins == "fd"


# ============================================================
# Report Writer Tests
# ============================================================

class TestReportWriter:
    """Tests for the figure and report documents."""

    def test_save_figure_releases_figure(self, tmp_path):
        """Figures are only written to disk, never left open."""
        fig, _ = plt.subplots()

        path = ReportWriter(tmp_path).save_figure(fig, "figure.png")

        assert path.exists()
        assert not plt.fignum_exists(fig.number)

    def test_plotting_modules_do_not_force_a_backend(self):
        """The backend is left to matplotlib instead of being switched on import."""
        from girth_survey.services.domain import descriptive_reporter
        from girth_survey.infrastructure import report_writer

        for module in (descriptive_reporter, report_writer):
            with open(module.__file__, encoding="utf-8") as source:
                assert "matplotlib.use(" not in source.read()
