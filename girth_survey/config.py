"""
Application configuration using Pydantic settings.
"""
from pathlib import Path
from typing import Union

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Input data
    photo_dir: Path = Field(
        default=Path("data/photos"),
        description="Directory holding the tree photographs"
    )
    photo_pattern: str = Field(
        default="*.jpg",
        description="Glob pattern selecting photographs inside photo_dir (case-insensitive)"
    )
    girth_csv_path: Path = Field(
        default=Path("data/girths.csv"),
        description="CSV file with one girth measurement per tree"
    )
    girth_column: str = Field(
        default="Girth_mm",
        description="CSV column holding the girth in millimetres"
    )
    file_name_column: str = Field(
        default="FileName",
        description="Optional CSV column naming the photograph each row belongs to"
    )

    # Output
    output_dir: Path = Field(
        default=Path("output"),
        description="Directory receiving the map, report and figures"
    )
    map_file_name: str = Field(
        default="tree_map.html",
        description="File name of the interactive map document"
    )
    report_file_name: str = Field(
        default="report.html",
        description="File name of the statistics report document"
    )

    # Coordinate validation
    skip_invalid_coordinates: bool = Field(
        default=False,
        description="Drop out-of-range coordinates from the map instead of aborting"
    )

    # Descriptive statistics
    quantile_method: str = Field(
        default="linear",
        description="numpy percentile method used for quartiles"
    )
    sd_ddof: int = Field(
        default=1,
        description="Delta degrees of freedom for the standard deviation (1 = sample sd)"
    )
    histogram_bins: Union[int, str] = Field(
        default="sturges",
        description="Bin count or numpy bin rule for the girth histogram"
    )

    # Map rendering
    min_marker_radius: float = Field(
        default=3.0,
        description="Smallest marker radius in pixels"
    )
    max_marker_radius: float = Field(
        default=15.0,
        description="Marker radius in pixels for the largest girth"
    )
    colormap_colors: list[str] = Field(
        default=["#ffffcc", "#a1dab4", "#41b6c4", "#2c7fb8", "#253494"],
        description="Colours of the continuous girth palette, low to high"
    )
    map_zoom_start: int = Field(
        default=16,
        description="Initial zoom level before fitting to the markers"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # Application Settings
    app_name: str = Field(
        default="Tree Girth Survey",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    @field_validator("histogram_bins", mode="before")
    @classmethod
    def _numeric_bins(cls, value):
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value

    class Config:
        env_file = ".env"
        env_prefix = "GIRTH_SURVEY_"
        case_sensitive = False


# Global settings instance
settings = Settings()
