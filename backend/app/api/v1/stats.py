"""
Population statistics endpoints: percentile rank and comparison data.

All endpoints read pre-aggregated views only. Missing or insufficient data
is a normal 200 response; a failure to read the views is a 500.
"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.datetime_utils import is_stale
from app.core.error_responses import (
    ErrorMessages,
    raise_server_error,
    raise_validation_error,
)
from app.core.exceptions import DistributionSourceError
from app.core.percentile import build_percentile_result, meets_minimum_sample
from app.core.population import build_agency_size_stats, build_population_stats
from app.core.questions import CURRENT_VERSION, UnknownSurveyVersionError, get_survey
from app.core.validators import SURVEY_VERSION_PATTERN
from app.models import get_db
from app.schemas.stats import (
    AgencySizeStatsResponse,
    PercentileDataMeta,
    PercentileNoDataMeta,
    PercentileResponse,
    PopulationStatsResponse,
)
from app.services.distribution_source import (
    PopulationStatsSource,
    SQLAlchemyDistributionSource,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_distribution_source(db: Session = Depends(get_db)) -> PopulationStatsSource:
    """Aggregate source for the request. Tests override this dependency."""
    return SQLAlchemyDistributionSource(db)


def _max_score_for(version: str) -> int:
    """Upper bound for a score query; unpublished versions use the current one."""
    try:
        return get_survey(version).max_score
    except UnknownSurveyVersionError:
        return get_survey(CURRENT_VERSION).max_score


@router.get("/percentile", response_model=PercentileResponse)
def get_percentile(
    score: int = Query(..., ge=0, description="Total survey score"),
    version: str = Query(
        CURRENT_VERSION,
        pattern=SURVEY_VERSION_PATTERN.pattern,
        description="Survey version",
    ),
    source: PopulationStatsSource = Depends(get_distribution_source),
):
    """
    Get the percentile rank of a score.

    The percentile is the share of respondents with a strictly lower score,
    rounded half-up. With no responses yet, percentile is null.

    Args:
        score: Total score, 0 to the version's maximum
        version: Survey version (defaults to the current version)
        source: Aggregate statistics source

    Returns:
        Percentile, interpretation message and metadata

    Raises:
        HTTPException: 422 for a score above the maximum, 500 if the
            histogram cannot be read
    """
    max_score = _max_score_for(version)
    if score > max_score:
        raise_validation_error(f"Score cannot exceed {max_score}.")

    try:
        snapshot = source.get_distribution(version)
    except DistributionSourceError as e:
        logger.error(
            f"Percentile lookup failed: {e}",
            extra={"operation": e.operation_name, "survey_version": version},
        )
        raise_server_error(ErrorMessages.PERCENTILE_FAILED)

    result = build_percentile_result(score, snapshot)

    if not result.has_data:
        return PercentileResponse(
            score=score,
            percentile=None,
            message=result.message,
            meta=PercentileNoDataMeta(current_count=0),
        )

    return PercentileResponse(
        score=score,
        percentile=result.percentile,
        message=result.message,
        meta=PercentileDataMeta(
            survey_version=version,
            total_responses=result.total_responses,
            as_of=result.as_of,
            sufficient_data=meets_minimum_sample(
                result.total_responses, settings.MIN_RESPONSES_FOR_STATS
            ),
            stale=is_stale(result.as_of, timedelta(hours=settings.STATS_STALE_HOURS)),
        ),
    )


@router.get("", response_model=PopulationStatsResponse)
def get_population_stats(
    version: str = Query(
        CURRENT_VERSION,
        pattern=SURVEY_VERSION_PATTERN.pattern,
        description="Survey version",
    ),
    source: PopulationStatsSource = Depends(get_distribution_source),
):
    """
    Get population statistics for comparison display.

    Statistics are only returned once the version has at least
    MIN_RESPONSES_FOR_STATS responses; below that, available is false and
    the response carries the current count.

    Raises:
        HTTPException: 500 if the aggregate views cannot be read
    """
    try:
        aggregates = source.get_population_aggregates(version)
        snapshot = source.get_distribution(version)
    except DistributionSourceError as e:
        logger.error(
            f"Population statistics failed: {e}",
            extra={"operation": e.operation_name, "survey_version": version},
        )
        raise_server_error(ErrorMessages.STATS_FAILED)

    stats = build_population_stats(
        version, aggregates, snapshot, settings.MIN_RESPONSES_FOR_STATS
    )
    return PopulationStatsResponse.model_validate(stats)


@router.get("/by-agency-size", response_model=AgencySizeStatsResponse)
def get_agency_size_stats(
    version: str = Query(
        CURRENT_VERSION,
        pattern=SURVEY_VERSION_PATTERN.pattern,
        description="Survey version",
    ),
    source: PopulationStatsSource = Depends(get_distribution_source),
):
    """
    Get score statistics segmented by agency size.

    Only responses that recorded an agency size are counted. With none yet,
    available is false and data is empty.

    Raises:
        HTTPException: 500 if the agency size view cannot be read
    """
    try:
        segments = source.get_agency_size_stats(version)
    except DistributionSourceError as e:
        logger.error(
            f"Agency size statistics failed: {e}",
            extra={"operation": e.operation_name, "survey_version": version},
        )
        raise_server_error(ErrorMessages.AGENCY_STATS_FAILED)

    data = build_agency_size_stats(segments)
    return AgencySizeStatsResponse(
        available=bool(data), survey_version=version, data=data
    )
