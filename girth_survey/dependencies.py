"""
Dependency wiring for the survey pipeline.
"""
from typing import Optional

from girth_survey.config import Settings, settings as default_settings
from girth_survey.infrastructure.exif_reader import ExifReader, get_exif_reader
from girth_survey.services.domain.map_renderer import GeoRenderer
from girth_survey.services.application.survey_service import SurveyService


def get_geo_renderer() -> GeoRenderer:
    """
    Factory for GeoRenderer.

    Returns:
        GeoRenderer configured from settings
    """
    return GeoRenderer()


def get_survey_service(
    settings: Optional[Settings] = None,
    exif_reader: Optional[ExifReader] = None,
    renderer: Optional[GeoRenderer] = None,
) -> SurveyService:
    """
    Factory for SurveyService.

    Args:
        settings: Settings override (defaults to the global settings)
        exif_reader: EXIF reader override
        renderer: Map renderer override

    Returns:
        SurveyService instance
    """
    return SurveyService(
        settings=settings or default_settings,
        exif_reader=exif_reader or get_exif_reader(),
        renderer=renderer or get_geo_renderer(),
    )
