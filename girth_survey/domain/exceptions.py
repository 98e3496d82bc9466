"""
Domain exceptions raised by the survey pipeline.
"""
from typing import Iterable


class GirthSurveyError(Exception):
    """Base class for data errors that abort a survey run."""
    pass


class MissingPhotosError(GirthSurveyError):
    """Photo directory is absent or holds no matching photographs."""
    pass


class MeasurementFileError(GirthSurveyError):
    """Girth CSV is absent, unreadable or lacks the girth column."""
    pass


class MeasurementMismatchError(GirthSurveyError):
    """Girth measurements cannot be paired with the photographs."""

    def __init__(
        self,
        message: str,
        missing_measurements: Iterable[str] = (),
        unmatched_measurements: Iterable[str] = (),
    ):
        self.message = message
        self.missing_measurements = sorted(missing_measurements)
        self.unmatched_measurements = sorted(unmatched_measurements)
        super().__init__(message)


class CoordinateRangeError(GirthSurveyError):
    """A coordinate lies outside the WGS84 longitude/latitude range."""

    def __init__(self, longitude: float, latitude: float, file_name: str = ""):
        self.longitude = longitude
        self.latitude = latitude
        self.file_name = file_name
        where = f" in {file_name}" if file_name else ""
        super().__init__(
            f"Coordinate out of range{where}: longitude={longitude}, latitude={latitude}"
        )


class EmptyMapError(GirthSurveyError):
    """No record carries a usable coordinate, so there is nothing to map."""
    pass
