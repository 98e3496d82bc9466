"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Fake EXIF tags in the shape exifread returns them
- Temporary photo directories and girth CSV files
- Sample metadata, measurements and tree records
- Settings pointing at temporary inputs and outputs
"""
import pytest
import pandas as pd
from datetime import datetime
from fractions import Fraction
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Optional

from girth_survey.config import Settings
from girth_survey.domain.models import PhotoMetadata, TreeRecord
from girth_survey.infrastructure import exif_reader


# ============================================================
# Fake EXIF Fixtures
# ============================================================

def _tag(values):
    """Mimic an exifread IfdTag: only .values is read."""
    return SimpleNamespace(values=values)


def _dms(decimal: float) -> list[Fraction]:
    value = abs(decimal)
    degrees = int(value)
    minutes = int((value - degrees) * 60)
    seconds = (value - degrees - minutes / 60) * 3600
    return [Fraction(degrees), Fraction(minutes), Fraction(seconds).limit_denominator(10**6)]


@pytest.fixture
def make_exif_tags() -> Callable[..., dict]:
    """Factory building an exifread-style tag mapping."""

    def factory(
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        timestamp: Optional[str] = "2021:05:01 10:00:00",
    ) -> dict:
        tags = {}
        if timestamp is not None:
            tags["EXIF DateTimeOriginal"] = _tag(timestamp)
        if latitude is not None:
            tags["GPS GPSLatitude"] = _tag(_dms(latitude))
            tags["GPS GPSLatitudeRef"] = _tag("N" if latitude >= 0 else "S")
        if longitude is not None:
            tags["GPS GPSLongitude"] = _tag(_dms(longitude))
            tags["GPS GPSLongitudeRef"] = _tag("E" if longitude >= 0 else "W")
        return tags

    return factory


@pytest.fixture
def fake_exif(monkeypatch) -> dict:
    """
    Replace exifread.process_file with a lookup by file name.

    Tests fill the returned dict with {file_name: tags}.
    """
    tags_by_name: dict = {}

    def process_file(f, details=False):
        return tags_by_name.get(Path(f.name).name, {})

    monkeypatch.setattr(exif_reader.exifread, "process_file", process_file)
    return tags_by_name


# ============================================================
# Input File Fixtures
# ============================================================

@pytest.fixture
def photo_dir(tmp_path) -> Path:
    """Empty photo directory."""
    directory = tmp_path / "photos"
    directory.mkdir()
    return directory


@pytest.fixture
def make_photos(photo_dir, fake_exif, make_exif_tags) -> Callable[[list], list[Path]]:
    """
    Factory writing placeholder photographs with fake EXIF tags.

    Takes a list of (file_name, latitude, longitude) tuples; None
    coordinates produce a photograph without GPS tags.
    """

    def factory(photos: list) -> list[Path]:
        paths = []
        for i, (name, lat, lon) in enumerate(photos):
            path = photo_dir / name
            path.write_bytes(b"\xff\xd8\xff\xd9")
            fake_exif[name] = make_exif_tags(
                latitude=lat,
                longitude=lon,
                timestamp=f"2021:05:01 10:{i:02d}:00",
            )
            paths.append(path)
        return paths

    return factory


@pytest.fixture
def write_girth_csv(tmp_path) -> Callable[..., Path]:
    """Factory writing a girth CSV, optionally with a FileName column."""

    def factory(girths: list, file_names: Optional[list] = None) -> Path:
        frame = pd.DataFrame({"Girth_mm": girths})
        if file_names is not None:
            frame.insert(0, "FileName", file_names)
        path = tmp_path / "girths.csv"
        frame.to_csv(path, index=False)
        return path

    return factory


@pytest.fixture
def survey_settings(tmp_path, photo_dir) -> Settings:
    """Settings reading from and writing to the temporary directory."""
    return Settings(
        photo_dir=photo_dir,
        girth_csv_path=tmp_path / "girths.csv",
        output_dir=tmp_path / "output",
    )


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def sample_metadata() -> list[PhotoMetadata]:
    """Three geotagged photographs in enumeration order."""
    return [
        PhotoMetadata(
            file_name=f"tree_{i:02d}.jpg",
            timestamp=datetime(2021, 5, 1, 10, i),
            latitude=51.5 + i * 0.0001,
            longitude=-0.12 + i * 0.0001,
        )
        for i in range(1, 4)
    ]


@pytest.fixture
def sample_records() -> list[TreeRecord]:
    """Three joined tree records, the middle one without GPS."""
    return [
        TreeRecord(file_name="tree_01.jpg", timestamp=datetime(2021, 5, 1, 10, 1),
                   girth_mm=450, longitude=-0.1199, latitude=51.5001),
        TreeRecord(file_name="tree_02.jpg", timestamp=datetime(2021, 5, 1, 10, 2),
                   girth_mm=1330),
        TreeRecord(file_name="tree_03.jpg", timestamp=datetime(2021, 5, 1, 10, 3),
                   girth_mm=2410, longitude=-0.1197, latitude=51.5003),
    ]
