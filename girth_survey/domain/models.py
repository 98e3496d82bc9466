"""
Domain models for photographs, trees and survey statistics.

These models represent the core domain entities and should be independent
of any infrastructure concerns (EXIF decoding, CSV parsing, rendering, etc.).
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class PhotoMetadata(BaseModel):
    """EXIF fields read from a single photograph."""
    file_name: str
    timestamp: Optional[datetime] = Field(
        default=None,
        description="Capture time (DateTimeOriginal)"
    )
    latitude: Optional[float] = Field(default=None, description="Latitude in decimal degrees")
    longitude: Optional[float] = Field(default=None, description="Longitude in decimal degrees")

    @property
    def has_gps(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class TreeRecord(BaseModel):
    """One measured tree: photograph metadata joined with its girth."""
    model_config = ConfigDict(frozen=True)

    file_name: str
    timestamp: Optional[datetime] = None
    girth_mm: Optional[PositiveInt] = Field(
        default=None,
        description="Trunk circumference at 1.4 m in millimetres"
    )
    longitude: Optional[float] = None
    latitude: Optional[float] = None

    @property
    def has_gps(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class SummaryStatistics(BaseModel):
    """Descriptive statistics over the girth values."""
    n: int = Field(description="Number of records, missing values included")
    n_missing: int
    prop_missing: float
    mean: Optional[float] = None
    sd: Optional[float] = None
    min: Optional[float] = None
    q1: Optional[float] = None
    median: Optional[float] = None
    q3: Optional[float] = None
    max: Optional[float] = None


class BoxplotStatistics(BaseModel):
    """Tukey boxplot statistics (1.5 x IQR whiskers)."""
    whisker_low: float
    q1: float
    median: float
    q3: float
    whisker_high: float
    outliers: List[float] = Field(default_factory=list)


class HistogramBin(BaseModel):
    """Single histogram bin, closed on the left."""
    lower: float
    upper: float
    count: int


class SpatialSummary(BaseModel):
    """Extent and spacing of the mapped trees."""
    n_mapped: int
    n_unmapped: int
    min_longitude: Optional[float] = None
    min_latitude: Optional[float] = None
    max_longitude: Optional[float] = None
    max_latitude: Optional[float] = None
    median_spacing_m: Optional[float] = Field(
        default=None,
        description="Median nearest-neighbour distance between mapped trees"
    )
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None
