"""
Global error handling for pipeline runs.
"""
import logging
from typing import Callable, Any

from girth_survey.domain.exceptions import (
    CoordinateRangeError,
    GirthSurveyError,
    MeasurementMismatchError,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_DATA_ERROR = 2


class ErrorHandler:
    """
    Global error handler.

    Runs a pipeline callable, catches its exceptions and turns them into
    consistent log records and process exit codes.
    """

    def run(self, func: Callable[[], Any]) -> int:
        """
        Run the callable and handle any exceptions.

        Args:
            func: Zero-argument pipeline entry

        Returns:
            Process exit code
        """
        try:
            func()
            return EXIT_OK

        except MeasurementMismatchError as e:
            logger.error(
                f"Measurement mismatch: {e.message}",
                extra={
                    "missing_measurements": e.missing_measurements,
                    "unmatched_measurements": e.unmatched_measurements,
                }
            )
            for name in e.missing_measurements:
                logger.error(f"  no measurement for photograph {name}")
            for name in e.unmatched_measurements:
                logger.error(f"  no photograph for measurement {name}")
            return EXIT_DATA_ERROR

        except CoordinateRangeError as e:
            logger.error(
                f"Invalid coordinate: {str(e)}",
                extra={"file_name": e.file_name}
            )
            logger.error("Set GIRTH_SURVEY_SKIP_INVALID_COORDINATES=true to leave such trees off the map")
            return EXIT_DATA_ERROR

        except GirthSurveyError as e:
            logger.error(f"Survey aborted: {str(e)}")
            return EXIT_DATA_ERROR

        except Exception as e:
            # Log unexpected errors
            logger.exception(f"Unhandled exception: {str(e)}")
            return EXIT_UNEXPECTED
