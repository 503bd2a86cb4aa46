"""
Population percentile calculation.

Converts a respondent's total score into a percentile rank against the
aggregate score histogram of one survey version.

Method
======
**Formula:** percentile = round(100 * below / total)

- ``below``: respondents with a strictly lower score
- ``total``: all respondents in the histogram, including the respondent's
  own bucket when present
- Reads as "higher than X% of respondents"; ties count as not-higher
- Rounding is half-up, done in integer arithmetic so results never depend on
  float representation: 1 of 8 below -> 12.5 -> 13

**No data:** an empty histogram (or one whose counts sum to zero) yields
``None``, never 0, so callers can tell "no data yet" from "0th percentile".

**Data sufficiency:** the engine returns a number whenever total > 0. Whether
a small sample is shown to end users is a presentation decision made with
meets_minimum_sample(), outside calculate_percentile().

The histogram is pre-aggregated elsewhere and may lag live submissions by the
aggregate refresh interval; DistributionSnapshot.as_of carries that
freshness stamp through to the result.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Tuple

NO_DATA_MESSAGE = "No data for percentile calculation"


@dataclass(frozen=True)
class ScoreBucket:
    """One histogram entry: how many respondents achieved a total score."""

    score: int
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Bucket count must be non-negative, got {self.count}")


@dataclass(frozen=True)
class DistributionSnapshot:
    """Score histogram for one survey version as read from the aggregate source."""

    survey_version: str
    buckets: Tuple[ScoreBucket, ...] = field(default_factory=tuple)
    as_of: Optional[datetime] = None

    @property
    def total_responses(self) -> int:
        return total_responses(self.buckets)


@dataclass(frozen=True)
class PercentileResult:
    """Percentile lookup outcome. Computed per request, never stored."""

    score: int
    percentile: Optional[int]
    total_responses: int
    message: str
    survey_version: Optional[str] = None
    as_of: Optional[datetime] = None

    @property
    def has_data(self) -> bool:
        return self.percentile is not None


def total_responses(distribution: Iterable[ScoreBucket]) -> int:
    """Sum of all bucket counts."""
    return sum(bucket.count for bucket in distribution)


def calculate_percentile(
    score: int, distribution: Iterable[ScoreBucket]
) -> Optional[int]:
    """
    Calculate the percentile rank of a score within a histogram.

    The score does not need to appear in the histogram, and scores outside
    the survey's range are handled like any other value.

    Args:
        score: The respondent's total score
        distribution: Histogram buckets in any order

    Returns:
        Integer percentile in [0, 100], or None if the histogram is empty

    Example:
        >>> buckets = [ScoreBucket(10, 1), ScoreBucket(20, 1),
        ...            ScoreBucket(30, 1), ScoreBucket(40, 1)]
        >>> calculate_percentile(20, buckets)
        25
        >>> calculate_percentile(30, buckets)
        50
        >>> calculate_percentile(5, []) is None
        True
    """
    total = 0
    below = 0
    for bucket in distribution:
        total += bucket.count
        if bucket.score < score:
            below += bucket.count

    if total == 0:
        return None

    return (200 * below + total) // (2 * total)


def get_percentile_interpretation(percentile: int) -> str:
    """
    Get human-readable interpretation of a percentile rank.

    Example:
        >>> get_percentile_interpretation(84)
        'Higher than 84% of respondents'
    """
    return f"Higher than {percentile}% of respondents"


def meets_minimum_sample(total: int, minimum: int) -> bool:
    """Data-sufficiency gate applied by the presentation layer."""
    return total >= minimum


def build_percentile_result(
    score: int, snapshot: DistributionSnapshot
) -> PercentileResult:
    """
    Compute a percentile result for a score against a histogram snapshot.

    Args:
        score: The respondent's total score
        snapshot: Histogram and freshness stamp for one survey version

    Returns:
        PercentileResult; percentile is None with an explanatory message when
        the snapshot holds no responses
    """
    total = snapshot.total_responses
    percentile = calculate_percentile(score, snapshot.buckets)

    if percentile is None:
        message = NO_DATA_MESSAGE
    else:
        message = get_percentile_interpretation(percentile)

    return PercentileResult(
        score=score,
        percentile=percentile,
        total_responses=total,
        message=message,
        survey_version=snapshot.survey_version,
        as_of=snapshot.as_of,
    )
