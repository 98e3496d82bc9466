"""
Pipeline entry point.
"""
import logging
import sys

from girth_survey.config import settings
from girth_survey.dependencies import get_survey_service
from girth_survey.error_handler import ErrorHandler

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging with the project format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """
    Run the survey once with the configured inputs.

    Returns:
        Process exit code
    """
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Photos: {settings.photo_dir} ({settings.photo_pattern}), "
                f"girths: {settings.girth_csv_path}, output: {settings.output_dir}")

    service = get_survey_service()
    return ErrorHandler().run(service.run)


if __name__ == "__main__":
    sys.exit(main())
