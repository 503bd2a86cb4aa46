"""
Survey results storage: saving submissions and finding stored results.
"""
import logging
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from libs.domain_types import AgencySize, PrimarySetting, UserRole

from app.core.db_error_handling import handle_store_error
from app.core.scoring import SurveyScores
from app.core.validators import EmailValidator
from app.models import Lead, SurveyResponse

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Emails are stored and matched lower-cased and trimmed."""
    return EmailValidator.normalize_email(email)


def save_submission(
    db: Session,
    *,
    email: str,
    survey_version: str,
    answers: Mapping[str, bool],
    scores: SurveyScores,
    name: Optional[str] = None,
    role: Optional[UserRole] = None,
    agency_size: Optional[AgencySize] = None,
    primary_setting: Optional[PrimarySetting] = None,
    state: Optional[str] = None,
    marketing_consent: bool = False,
) -> SurveyResponse:
    """
    Store a completed survey, creating or updating the respondent's lead.

    A returning respondent keeps one lead row; profile fields are only
    overwritten when the new submission provides them. The response keeps
    its own copy of the segmenting fields exactly as submitted.

    Args:
        db: Database session
        email: Respondent email (normalized before storage)
        survey_version: Version the answers belong to
        answers: Validated answers
        scores: Scores calculated from the answers
        name: Optional respondent name
        role: Optional respondent role
        agency_size: Optional agency size
        primary_setting: Optional primary service setting
        state: Optional two-letter US state code
        marketing_consent: Whether the respondent opted into marketing email

    Returns:
        The stored SurveyResponse, including its generated results_token

    Raises:
        ResultsStoreError: If the database write fails
    """
    normalized = normalize_email(email)
    is_test = EmailValidator.is_test_email(normalized)
    email_domain = EmailValidator.get_agency_domain(normalized)
    with handle_store_error(db, "save survey response"):
        lead = db.query(Lead).filter(Lead.email == normalized).first()
        if lead is None:
            lead = Lead(email=normalized, is_test=is_test)
            db.add(lead)
        lead.email_domain = email_domain  # type: ignore[assignment]
        if name:
            lead.name = name  # type: ignore[assignment]
        if role is not None:
            lead.role = role  # type: ignore[assignment]
        if agency_size is not None:
            lead.agency_size = agency_size  # type: ignore[assignment]
        if primary_setting is not None:
            lead.primary_setting = primary_setting  # type: ignore[assignment]
        if state:
            lead.state = state  # type: ignore[assignment]
        if marketing_consent:
            lead.marketing_consent = True  # type: ignore[assignment]

        response = SurveyResponse(
            lead=lead,
            survey_version=survey_version,
            answers=dict(answers),
            total_score=scores.total,
            percentage=scores.percentage,
            agency_size=agency_size,
            role=role,
            primary_setting=primary_setting,
            state=state,
            is_test=is_test,
        )
        db.add(response)
        db.commit()
        db.refresh(response)

    logger.info(
        f"Stored survey response {response.id} "
        f"(version {survey_version}, score {scores.total}/{scores.max_possible})"
    )
    return response


def find_lead_by_email(db: Session, email: str) -> Optional[Lead]:
    """
    Find a non-test lead by email address.

    Raises:
        ResultsStoreError: If the lookup fails
    """
    normalized = normalize_email(email)
    with handle_store_error(db, "look up lead"):
        return (
            db.query(Lead)
            .filter(Lead.email == normalized, Lead.is_test.is_(False))
            .first()
        )


def find_latest_response_for_email(
    db: Session, email: str
) -> Optional[SurveyResponse]:
    """
    Find the most recent non-test survey response for an email address.

    Raises:
        ResultsStoreError: If the lookup fails
    """
    normalized = normalize_email(email)
    with handle_store_error(db, "look up survey results"):
        return (
            db.query(SurveyResponse)
            .join(Lead, SurveyResponse.lead_id == Lead.id)
            .filter(
                Lead.email == normalized,
                Lead.is_test.is_(False),
                SurveyResponse.is_test.is_(False),
            )
            .order_by(SurveyResponse.completed_at.desc(), SurveyResponse.id.desc())
            .first()
        )


def get_response_by_results_token(
    db: Session, results_token: str
) -> Optional[SurveyResponse]:
    """
    Fetch a survey response by its results handle.

    Raises:
        ResultsStoreError: If the lookup fails
    """
    with handle_store_error(db, "load survey results"):
        return (
            db.query(SurveyResponse)
            .filter(SurveyResponse.results_token == results_token)
            .first()
        )
