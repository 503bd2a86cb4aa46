"""
Read-only sources for the aggregate population statistics.

The score histogram and the summary views are produced outside the API by
materialized views over completed, non-test responses, refreshed roughly
hourly. Sources here only read a snapshot of them: they never trigger a
refresh and never retry. Storage failures surface as DistributionSourceError
so the HTTP layer can tell them apart from "no data yet".

Usage:
    source = SQLAlchemyDistributionSource(db)
    snapshot = source.get_distribution("1.0")
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.datetime_utils import ensure_timezone_aware
from app.core.exceptions import DistributionSourceError
from app.core.percentile import DistributionSnapshot, ScoreBucket
from app.core.population import (
    AgencySizeSegment,
    OverallStats,
    PopulationAggregates,
    QuestionStat,
)
from app.models import (
    AgencySizeStats,
    CategoryStats,
    QuestionStats,
    ScoreDistribution,
    SurveyStats,
)

logger = logging.getLogger(__name__)


class ScoreDistributionSource(Protocol):
    """Provides the score histogram for a survey version."""

    def get_distribution(self, survey_version: str) -> DistributionSnapshot:
        ...


class PopulationStatsSource(ScoreDistributionSource, Protocol):
    """Provides the histogram plus the summary and segment views for a version."""

    def get_population_aggregates(self, survey_version: str) -> PopulationAggregates:
        ...

    def get_agency_size_stats(self, survey_version: str) -> List[AgencySizeSegment]:
        ...


class SQLAlchemyDistributionSource:
    """Reads the aggregate views through a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _last_updated(self, survey_version: str) -> Optional[datetime]:
        last_updated = self.db.execute(
            select(SurveyStats.last_updated).where(
                SurveyStats.survey_version == survey_version
            )
        ).scalar_one_or_none()
        return ensure_timezone_aware(last_updated) if last_updated else None

    def get_distribution(self, survey_version: str) -> DistributionSnapshot:
        """
        Read the score histogram for a survey version.

        Null scores or frequencies in the view are read as 0.

        Args:
            survey_version: Survey version (e.g. "1.0")

        Returns:
            DistributionSnapshot stamped with the view's last refresh time

        Raises:
            DistributionSourceError: If the views cannot be read
        """
        try:
            rows = self.db.execute(
                select(ScoreDistribution.total_score, ScoreDistribution.frequency).where(
                    ScoreDistribution.survey_version == survey_version
                )
            ).all()
            as_of = self._last_updated(survey_version)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to read score distribution for version {survey_version}: {e}"
            )
            raise DistributionSourceError("fetch score distribution", e) from e

        buckets = tuple(
            ScoreBucket(score=score or 0, count=frequency or 0)
            for score, frequency in rows
        )
        return DistributionSnapshot(
            survey_version=survey_version, buckets=buckets, as_of=as_of
        )

    def get_population_aggregates(self, survey_version: str) -> PopulationAggregates:
        """
        Read the overall, per-category and per-question views.

        Raises:
            DistributionSourceError: If the views cannot be read
        """
        try:
            overall_row = self.db.execute(
                select(SurveyStats).where(SurveyStats.survey_version == survey_version)
            ).scalar_one_or_none()
            category_rows = self.db.execute(
                select(CategoryStats.category, CategoryStats.avg_percentage).where(
                    CategoryStats.survey_version == survey_version
                )
            ).all()
            question_rows = self.db.execute(
                select(
                    QuestionStats.question_id,
                    QuestionStats.yes_percentage,
                    QuestionStats.total_responses,
                ).where(QuestionStats.survey_version == survey_version)
            ).all()
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to read population statistics for version {survey_version}: {e}"
            )
            raise DistributionSourceError("fetch population statistics", e) from e

        overall = None
        if overall_row is not None:
            overall = OverallStats(
                total_responses=overall_row.total_responses or 0,
                avg_score=overall_row.avg_score,
                avg_percentage=overall_row.avg_percentage,
                median_score=overall_row.median_score,
                p25_score=overall_row.p25_score,
                p75_score=overall_row.p75_score,
                last_updated=(
                    ensure_timezone_aware(overall_row.last_updated)
                    if overall_row.last_updated
                    else None
                ),
            )

        return PopulationAggregates(
            overall=overall,
            categories={category: avg for category, avg in category_rows},
            questions={
                question_id: QuestionStat(
                    yes_percentage=yes_percentage, total_responses=total
                )
                for question_id, yes_percentage, total in question_rows
            },
        )

    def get_agency_size_stats(self, survey_version: str) -> List[AgencySizeSegment]:
        """
        Read the per-agency-size view.

        Raises:
            DistributionSourceError: If the view cannot be read
        """
        try:
            rows = self.db.execute(
                select(
                    AgencySizeStats.agency_size,
                    AgencySizeStats.total_responses,
                    AgencySizeStats.avg_percentage,
                    AgencySizeStats.median_score,
                ).where(AgencySizeStats.survey_version == survey_version)
            ).all()
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to read agency size statistics for version "
                f"{survey_version}: {e}"
            )
            raise DistributionSourceError("fetch agency size statistics", e) from e

        return [
            AgencySizeSegment(
                agency_size=agency_size,
                total_responses=total or 0,
                avg_percentage=avg_percentage,
                median_score=median_score,
            )
            for agency_size, total, avg_percentage, median_score in rows
        ]


class StaticDistributionSource:
    """
    In-memory source for non-production contexts and tests.

    Args:
        histograms: Mapping of survey version to (score, count) pairs
        aggregates: Optional summary views per survey version
        agency_sizes: Optional agency size segments per survey version
        as_of: Freshness stamp applied to every snapshot
    """

    def __init__(
        self,
        histograms: Mapping[str, Iterable[Tuple[int, int]]],
        aggregates: Optional[Mapping[str, PopulationAggregates]] = None,
        as_of: Optional[datetime] = None,
        agency_sizes: Optional[Mapping[str, Iterable[AgencySizeSegment]]] = None,
    ):
        self._histograms: Dict[str, Tuple[ScoreBucket, ...]] = {
            version: tuple(ScoreBucket(score=s, count=c) for s, c in pairs)
            for version, pairs in histograms.items()
        }
        self._aggregates = dict(aggregates or {})
        self._agency_sizes: Dict[str, List[AgencySizeSegment]] = {
            version: list(segments)
            for version, segments in (agency_sizes or {}).items()
        }
        self._as_of = as_of

    def get_distribution(self, survey_version: str) -> DistributionSnapshot:
        return DistributionSnapshot(
            survey_version=survey_version,
            buckets=self._histograms.get(survey_version, ()),
            as_of=self._as_of,
        )

    def get_population_aggregates(self, survey_version: str) -> PopulationAggregates:
        return self._aggregates.get(survey_version, PopulationAggregates())

    def get_agency_size_stats(self, survey_version: str) -> List[AgencySizeSegment]:
        return list(self._agency_sizes.get(survey_version, ()))
