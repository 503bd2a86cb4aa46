"""
Pydantic schemas for survey submission.
"""
from typing import Dict, Optional, Self

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    StrictBool,
    field_validator,
    model_validator,
)

from libs.domain_types import AgencySize, PrimarySetting, UserRole

from app.core.error_responses import ErrorMessages
from app.core.questions import CURRENT_VERSION, UnknownSurveyVersionError, get_survey
from app.core.validators import (
    SURVEY_VERSION_PATTERN,
    EmailValidator,
    StringSanitizer,
    is_valid_question_id,
    normalize_state_code,
)
from app.schemas.results import ScoreSummarySchema


class LeadInput(BaseModel):
    """Respondent details collected with the survey."""

    email: EmailStr = Field(..., description="Respondent email address")
    name: Optional[str] = Field(
        None, max_length=100, description="Respondent name (optional)"
    )
    role: Optional[UserRole] = Field(None, description="Respondent role (optional)")
    agency_size: Optional[AgencySize] = Field(
        None, description="Agency size by number of BCBAs (optional)"
    )
    primary_setting: Optional[PrimarySetting] = Field(
        None, description="Primary service setting (optional)"
    )
    state: Optional[str] = Field(
        None, max_length=2, description="Two-letter US state code (optional)"
    )
    marketing_consent: bool = Field(
        False, description="Whether the respondent opted into marketing email"
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return EmailValidator.normalize_email(v)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: Optional[str]) -> Optional[str]:
        """Sanitize the name; a name with nothing left is treated as absent."""
        if v is None:
            return v
        return StringSanitizer.sanitize_name(v) or None

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        code = normalize_state_code(v)
        if code is None:
            raise ValueError(f"Unknown US state code: {v}")
        return code


class SurveySubmission(BaseModel):
    """Schema for submitting a completed survey."""

    lead: LeadInput
    answers: Dict[str, StrictBool] = Field(
        ..., description="Mapping of question ID to yes (true) / no (false)"
    )
    version: str = Field(
        CURRENT_VERSION,
        pattern=SURVEY_VERSION_PATTERN.pattern,
        description="Survey version the answers belong to",
    )

    @field_validator("answers")
    @classmethod
    def validate_question_ids(cls, v: Dict[str, bool]) -> Dict[str, bool]:
        invalid = sorted(qid for qid in v if not is_valid_question_id(qid))
        if invalid:
            raise ValueError(f"Invalid question IDs: {', '.join(invalid)}")
        return v

    @model_validator(mode="after")
    def validate_complete(self) -> Self:
        """Every question of the version must be answered, and nothing else."""
        try:
            survey = get_survey(self.version)
        except UnknownSurveyVersionError:
            raise ValueError(
                ErrorMessages.unknown_survey_version(self.version)
            ) from None

        validation = survey.validate_answers(self.answers)
        if validation.missing:
            raise ValueError(ErrorMessages.incomplete_answers(survey.total_questions))
        if validation.extra:
            raise ValueError(
                f"Unknown question IDs for version {self.version}: "
                f"{', '.join(validation.extra)}"
            )
        return self


class SubmitSurveyResponse(BaseModel):
    """Response after a survey is stored."""

    results_token: str = Field(..., description="Handle of the stored results")
    magic_link_token: str = Field(
        ..., description="Signed token granting access to the results page"
    )
    results_url: str = Field(..., description="Results page URL")
    survey_version: str
    summary: ScoreSummarySchema
