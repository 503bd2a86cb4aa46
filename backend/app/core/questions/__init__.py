"""
Survey question bank.

Exposes the current survey version and a registry of all published
versions. Import from this package rather than from a version module:

    from app.core.questions import CURRENT_VERSION, get_survey

    survey = get_survey(CURRENT_VERSION)
"""
from typing import Dict, List

from .schema import (
    AnswerValidation,
    Category,
    Question,
    SurveyDefinition,
    SurveyVersion,
)
from .v1_0 import SURVEY as SURVEY_1_0

CURRENT_VERSION = "1.0"

_SURVEYS: Dict[str, SurveyDefinition] = {
    SURVEY_1_0.version.version: SURVEY_1_0,
}


class UnknownSurveyVersionError(KeyError):
    """Raised when a survey version has not been published."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(version)

    def __str__(self) -> str:
        return f"Unknown survey version: {self.version}"


def get_survey(version: str = CURRENT_VERSION) -> SurveyDefinition:
    """
    Look up a published survey version.

    Raises:
        UnknownSurveyVersionError: If the version does not exist
    """
    try:
        return _SURVEYS[version]
    except KeyError:
        raise UnknownSurveyVersionError(version) from None


def available_versions() -> List[str]:
    return sorted(_SURVEYS)


__all__ = [
    "AnswerValidation",
    "Category",
    "CURRENT_VERSION",
    "Question",
    "SURVEY_1_0",
    "SurveyDefinition",
    "SurveyVersion",
    "UnknownSurveyVersionError",
    "available_versions",
    "get_survey",
]
