"""
Results endpoints: lookup by email, magic-link requests and the results page.

The results page accepts two identifier formats in the same path segment: a
signed magic-link token, or the UUID results handle embedded in older links.
Any problem with a token (forged, expired, tampered, issued for another
address) produces one 401 response with one message.
"""
import logging
from dataclasses import asdict
from typing import Optional, Tuple

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from app.core.auth import MagicLinkTokenService, looks_like_token
from app.core.auth.dependencies import get_magic_link_service
from app.core.error_responses import (
    ErrorMessages,
    raise_not_found,
    raise_server_error,
    raise_unauthorized,
    raise_validation_error,
)
from app.core.exceptions import UpstreamServiceError
from app.core.questions import UnknownSurveyVersionError, get_survey
from app.core.scoring import (
    calculate_scores,
    get_gaps,
    get_gaps_by_category,
    get_score_summary,
)
from app.core.validators import EmailValidator, parse_results_handle
from app.models import SurveyResponse, get_db
from app.schemas.results import (
    GapSchema,
    MagicLinkRequest,
    MagicLinkRequestResponse,
    ResultsLookupResponse,
    ScoreSummarySchema,
    SurveyResultsResponse,
)
from app.services.email_service import build_results_url, send_results_link_email
from app.services.results_service import (
    find_latest_response_for_email,
    find_lead_by_email,
    get_response_by_results_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

_email_adapter = TypeAdapter(EmailStr)


@router.get("/lookup", response_model=ResultsLookupResponse)
def lookup_results(
    email: str = Query(..., description="Email used when taking the survey"),
    db: Session = Depends(get_db),
):
    """
    Look up the most recent results handle for an email address.

    Test leads and test responses are never returned.

    Raises:
        HTTPException: 422 for an invalid email, 500 if the lookup fails
    """
    try:
        normalized = EmailValidator.normalize_email(_email_adapter.validate_python(email))
    except ValidationError:
        raise_validation_error(ErrorMessages.INVALID_EMAIL)

    try:
        lead = find_lead_by_email(db, normalized)
        if lead is None:
            return ResultsLookupResponse(
                found=False, message=ErrorMessages.NO_SURVEY_FOR_EMAIL
            )
        response = find_latest_response_for_email(db, normalized)
    except UpstreamServiceError as e:
        logger.error(f"Results lookup failed: {e}", extra={"operation": e.operation_name})
        raise_server_error(ErrorMessages.LOOKUP_FAILED)

    if response is None:
        return ResultsLookupResponse(
            found=False, message=ErrorMessages.NO_COMPLETED_SURVEY
        )
    return ResultsLookupResponse(found=True, results_token=response.results_token)


@router.post("/magic-link", response_model=MagicLinkRequestResponse)
def request_magic_link(
    request: MagicLinkRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    token_service: MagicLinkTokenService = Depends(get_magic_link_service),
):
    """
    Email a fresh magic link to the respondent's latest results.

    The response body is identical whether or not the email has results, so
    the endpoint cannot be used to find out who took the survey.

    Raises:
        HTTPException: 500 if the lookup or signing fails
    """
    try:
        response = find_latest_response_for_email(db, request.email)
        token = (
            token_service.create(request.email, response.results_token)
            if response is not None
            else None
        )
    except UpstreamServiceError as e:
        logger.error(
            f"Magic link request failed: {e}", extra={"operation": e.operation_name}
        )
        raise_server_error(ErrorMessages.LOOKUP_FAILED)

    if token is not None:
        background_tasks.add_task(
            send_results_link_email,
            request.email,
            build_results_url(token),
            token_service.default_ttl,
        )
    else:
        logger.info("Magic link requested for an email without results")

    return MagicLinkRequestResponse(message=ErrorMessages.MAGIC_LINK_REQUESTED)


def _resolve_results_token(
    identifier: str, token_service: MagicLinkTokenService
) -> Tuple[str, Optional[str]]:
    """
    Resolve a path identifier to a results handle.

    Returns:
        (results handle, email bound by the token or None for a bare handle)
    """
    if looks_like_token(identifier):
        payload = token_service.verify(identifier)
        if payload is None:
            raise_unauthorized(ErrorMessages.INVALID_RESULTS_LINK)
        return payload.results_token, payload.email

    handle = parse_results_handle(identifier)
    if handle is None:
        raise_validation_error(ErrorMessages.INVALID_RESULTS_IDENTIFIER)
    return handle, None


def _build_results(response: SurveyResponse) -> SurveyResultsResponse:
    try:
        survey = get_survey(response.survey_version)
    except UnknownSurveyVersionError:
        logger.error(
            f"Stored response {response.id} has unknown survey version",
            extra={"survey_version": response.survey_version},
        )
        raise_server_error(ErrorMessages.INTERNAL_ERROR)

    answers = response.answers or {}
    scores = calculate_scores(answers, survey)
    return SurveyResultsResponse(
        results_token=response.results_token,
        survey_version=response.survey_version,
        completed_at=response.completed_at,
        name=response.lead.name if response.lead else None,
        summary=ScoreSummarySchema.model_validate(get_score_summary(scores)),
        gaps=[GapSchema(**asdict(gap)) for gap in get_gaps(answers, survey)],
        gaps_by_category=get_gaps_by_category(answers, survey),
    )


@router.get("/{identifier}", response_model=SurveyResultsResponse)
def get_results(
    identifier: str,
    db: Session = Depends(get_db),
    token_service: MagicLinkTokenService = Depends(get_magic_link_service),
):
    """
    Get stored results by magic-link token or results handle.

    Args:
        identifier: Magic-link token or UUID results handle
        db: Database session
        token_service: Magic-link token service

    Returns:
        Score summary, gaps and gaps grouped by category

    Raises:
        HTTPException: 401 for an invalid or expired magic link, 422 for a
            malformed handle, 404 if no results match, 500 on store failure
    """
    results_token, bound_email = _resolve_results_token(identifier, token_service)

    try:
        response = get_response_by_results_token(db, results_token)
    except UpstreamServiceError as e:
        logger.error(f"Results fetch failed: {e}", extra={"operation": e.operation_name})
        raise_server_error(ErrorMessages.LOOKUP_FAILED)

    if bound_email is not None and (
        response is None
        or response.lead is None
        or response.lead.email != EmailValidator.normalize_email(bound_email)
    ):
        # A valid signature for results that are gone or belong to someone
        # else is reported like any other bad link
        raise_unauthorized(ErrorMessages.INVALID_RESULTS_LINK)

    if response is None:
        raise_not_found(ErrorMessages.RESULTS_NOT_FOUND)

    return _build_results(response)
