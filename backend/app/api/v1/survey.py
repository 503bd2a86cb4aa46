"""
Survey submission endpoint.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.core.auth import MagicLinkTokenService
from app.core.auth.dependencies import get_magic_link_service
from app.core.error_responses import ErrorMessages, raise_server_error
from app.core.exceptions import UpstreamServiceError
from app.core.questions import get_survey
from app.core.scoring import calculate_scores, get_score_summary
from app.core.validators import EmailValidator
from app.models import get_db
from app.schemas.results import ScoreSummarySchema
from app.schemas.survey import SubmitSurveyResponse, SurveySubmission
from app.services.email_service import build_results_url, send_results_link_email
from app.services.results_service import save_submission

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/submit",
    response_model=SubmitSurveyResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_survey(
    submission: SurveySubmission,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    token_service: MagicLinkTokenService = Depends(get_magic_link_service),
):
    """
    Submit a completed survey.

    Stores the respondent (one lead per email) and the response, then returns
    the scores together with a magic-link token for the results page. The
    same link is emailed to the respondent unless the address is test
    traffic.

    Args:
        submission: Lead details and one answer per question of the version
        background_tasks: Used to send the results email after responding
        db: Database session
        token_service: Magic-link token service

    Returns:
        Results handle, magic-link token, results URL and score summary

    Raises:
        HTTPException: 500 if the response cannot be stored or signed
    """
    survey = get_survey(submission.version)
    scores = calculate_scores(submission.answers, survey)
    lead = submission.lead

    try:
        response = save_submission(
            db,
            email=lead.email,
            survey_version=submission.version,
            answers=submission.answers,
            scores=scores,
            name=lead.name,
            role=lead.role,
            agency_size=lead.agency_size,
            primary_setting=lead.primary_setting,
            state=lead.state,
            marketing_consent=lead.marketing_consent,
        )
        magic_link_token = token_service.create(lead.email, response.results_token)
    except UpstreamServiceError as e:
        logger.error(
            f"Survey submission failed: {e}",
            extra={"operation": e.operation_name, "survey_version": submission.version},
        )
        raise_server_error(ErrorMessages.SUBMISSION_FAILED)

    results_url = build_results_url(magic_link_token)

    if not EmailValidator.is_test_email(lead.email):
        background_tasks.add_task(
            send_results_link_email, lead.email, results_url, token_service.default_ttl
        )

    return SubmitSurveyResponse(
        results_token=response.results_token,
        magic_link_token=magic_link_token,
        results_url=results_url,
        survey_version=submission.version,
        summary=ScoreSummarySchema.model_validate(get_score_summary(scores)),
    )
