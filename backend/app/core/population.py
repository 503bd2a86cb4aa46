"""
Population statistics for comparison display.

Assembles the aggregate views (overall, per-category, per-question) and the
score histogram into the payload shown next to a respondent's results.
Nothing here reads per-respondent rows: the performance-tier counts are
derived from the pre-aggregated histogram.

Statistics are withheld until a survey version has at least
MIN_RESPONSES_FOR_STATS responses. That gate protects early respondents'
privacy and avoids comparisons against a handful of data points.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from libs.domain_types import AgencySize

from app.core.percentile import DistributionSnapshot, ScoreBucket, meets_minimum_sample

# Performance tiers over total score (27-question survey):
# strong 24+, moderate 17-23, needs improvement 16 and below
STRONG_TIER_MIN_SCORE = 24
MODERATE_TIER_MIN_SCORE = 17

NOT_ENOUGH_RESPONSES_MESSAGE = "Not enough responses for comparison data"


@dataclass(frozen=True)
class TierDistribution:
    """Respondent counts per performance tier."""

    strong: int = 0
    moderate: int = 0
    needs_improvement: int = 0


@dataclass(frozen=True)
class OverallStats:
    """A row of the survey_stats view."""

    total_responses: int
    avg_score: Optional[float] = None
    avg_percentage: Optional[float] = None
    median_score: Optional[float] = None
    p25_score: Optional[float] = None
    p75_score: Optional[float] = None
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class QuestionStat:
    yes_percentage: Optional[float]
    total_responses: Optional[int]


@dataclass(frozen=True)
class PopulationAggregates:
    """Everything the aggregate source holds for one survey version."""

    overall: Optional[OverallStats] = None
    categories: Dict[str, Optional[float]] = field(default_factory=dict)
    questions: Dict[str, QuestionStat] = field(default_factory=dict)


@dataclass(frozen=True)
class AgencySizeSegment:
    """A row of the stats_by_agency_size view."""

    agency_size: str
    total_responses: int
    avg_percentage: Optional[float] = None
    median_score: Optional[float] = None


@dataclass(frozen=True)
class PopulationStats:
    """Population comparison outcome for one survey version."""

    available: bool
    survey_version: str
    min_required: int
    current_count: int
    message: Optional[str] = None
    overall: Optional[Dict[str, Optional[float]]] = None
    questions: Dict[str, Dict[str, Optional[int]]] = field(default_factory=dict)
    categories: Dict[str, Dict[str, int]] = field(default_factory=dict)
    distribution: Optional[TierDistribution] = None
    last_updated: Optional[datetime] = None


def round_half_up(value: Optional[float], ndigits: int = 0) -> Optional[float]:
    """Round like the results page does (0.5 rounds up); None passes through."""
    if value is None:
        return None
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _round_int(value: Optional[float]) -> int:
    rounded = round_half_up(value or 0.0)
    return int(rounded or 0)


def tier_distribution(buckets: Iterable[ScoreBucket]) -> TierDistribution:
    """
    Count respondents per performance tier from a score histogram.

    Args:
        buckets: Histogram entries

    Returns:
        TierDistribution with strong, moderate and needs_improvement counts
    """
    strong = moderate = needs_improvement = 0
    for bucket in buckets:
        if bucket.score >= STRONG_TIER_MIN_SCORE:
            strong += bucket.count
        elif bucket.score >= MODERATE_TIER_MIN_SCORE:
            moderate += bucket.count
        else:
            needs_improvement += bucket.count
    return TierDistribution(
        strong=strong, moderate=moderate, needs_improvement=needs_improvement
    )


def build_population_stats(
    survey_version: str,
    aggregates: PopulationAggregates,
    snapshot: DistributionSnapshot,
    min_responses: int,
) -> PopulationStats:
    """
    Build the population comparison payload, applying the minimum-responses gate.

    Args:
        survey_version: Survey version being compared
        aggregates: Rows read from the aggregate views
        snapshot: Score histogram for the same version
        min_responses: Minimum total responses before statistics are shown

    Returns:
        PopulationStats; available is False (with a message and the current
        count) when the gate is not met
    """
    overall = aggregates.overall
    current_count = overall.total_responses if overall else 0

    if overall is None or not meets_minimum_sample(current_count, min_responses):
        return PopulationStats(
            available=False,
            survey_version=survey_version,
            min_required=min_responses,
            current_count=current_count,
            message=NOT_ENOUGH_RESPONSES_MESSAGE,
        )

    return PopulationStats(
        available=True,
        survey_version=survey_version,
        min_required=min_responses,
        current_count=current_count,
        overall={
            "total_responses": overall.total_responses,
            "avg_score": round_half_up(overall.avg_score or 0.0, 1),
            "avg_percentage": _round_int(overall.avg_percentage),
            "median_score": overall.median_score,
            "p25_score": overall.p25_score,
            "p75_score": overall.p75_score,
        },
        questions={
            question_id: {
                "yes_percentage": _round_int(stat.yes_percentage),
                "total_responses": stat.total_responses,
            }
            for question_id, stat in aggregates.questions.items()
        },
        categories={
            category: {"avg_percentage": _round_int(avg)}
            for category, avg in aggregates.categories.items()
        },
        distribution=tier_distribution(snapshot.buckets),
        last_updated=overall.last_updated or snapshot.as_of,
    )


def _agency_size_order(segment: AgencySizeSegment) -> tuple:
    sizes = [size.value for size in AgencySize]
    if segment.agency_size in sizes:
        return (sizes.index(segment.agency_size), "")
    return (len(sizes), segment.agency_size)


def build_agency_size_stats(segments: Iterable[AgencySizeSegment]) -> List[Dict]:
    """
    Per-agency-size comparison rows, smallest agencies first.

    Segments are shown whatever their size; the view only holds sizes with
    at least one response.
    """
    return [
        {
            "agency_size": segment.agency_size,
            "total_responses": segment.total_responses or 0,
            "avg_percentage": _round_int(segment.avg_percentage),
            "median_score": segment.median_score,
        }
        for segment in sorted(segments, key=_agency_size_order)
    ]
