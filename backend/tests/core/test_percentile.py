"""
Tests for the population percentile calculation.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from app.core.percentile import (
    NO_DATA_MESSAGE,
    DistributionSnapshot,
    ScoreBucket,
    build_percentile_result,
    calculate_percentile,
    get_percentile_interpretation,
    meets_minimum_sample,
    total_responses,
)


def buckets(*pairs):
    return [ScoreBucket(score=s, count=c) for s, c in pairs]


FOUR_EVEN = buckets((10, 1), (20, 1), (30, 1), (40, 1))


class TestCalculatePercentile:
    """Tests for calculate_percentile."""

    def test_reference_histogram(self):
        assert calculate_percentile(20, FOUR_EVEN) == 25
        assert calculate_percentile(30, FOUR_EVEN) == 50

    def test_lowest_bucket_is_zero(self):
        """Nobody scored strictly below the lowest score."""
        assert calculate_percentile(10, FOUR_EVEN) == 0

    def test_score_below_all_buckets_is_zero(self):
        assert calculate_percentile(0, FOUR_EVEN) == 0

    def test_score_above_all_buckets_is_hundred(self):
        assert calculate_percentile(50, FOUR_EVEN) == 100

    def test_highest_bucket_excludes_own_ties(self):
        """Ties are not counted as 'higher than'."""
        assert calculate_percentile(40, FOUR_EVEN) == 75

    def test_score_between_buckets(self):
        assert calculate_percentile(25, FOUR_EVEN) == 50

    def test_empty_histogram_returns_none(self):
        assert calculate_percentile(15, []) is None

    def test_zero_counts_return_none(self):
        assert calculate_percentile(15, buckets((10, 0), (20, 0))) is None

    def test_empty_is_none_not_zero(self):
        """'No data' must be distinguishable from the 0th percentile."""
        result = calculate_percentile(0, [])
        assert result is None
        assert result != 0

    def test_half_rounds_up(self):
        """1 of 8 below is 12.5%, which rounds to 13."""
        histogram = buckets((5, 1), (10, 7))
        assert calculate_percentile(10, histogram) == 13

    def test_below_half_rounds_down(self):
        """1 of 3 below is 33.33%."""
        histogram = buckets((5, 1), (10, 2))
        assert calculate_percentile(10, histogram) == 33

    def test_above_half_rounds_up(self):
        """2 of 3 below is 66.67%."""
        histogram = buckets((5, 2), (10, 1))
        assert calculate_percentile(10, histogram) == 67

    def test_bucket_order_does_not_matter(self):
        shuffled = [FOUR_EVEN[2], FOUR_EVEN[0], FOUR_EVEN[3], FOUR_EVEN[1]]
        assert calculate_percentile(30, shuffled) == 50

    def test_accepts_generator(self):
        assert calculate_percentile(30, (b for b in FOUR_EVEN)) == 50

    def test_weighted_counts(self):
        histogram = buckets((10, 30), (20, 60), (27, 10))
        assert calculate_percentile(20, histogram) == 30
        assert calculate_percentile(27, histogram) == 90

    def test_returns_int(self):
        assert isinstance(calculate_percentile(20, FOUR_EVEN), int)

    @pytest.mark.parametrize("score", range(-2, 30))
    def test_always_within_bounds(self, score):
        histogram = buckets((0, 3), (7, 11), (13, 2), (19, 40), (27, 9))
        result = calculate_percentile(score, histogram)
        assert 0 <= result <= 100

    def test_monotone_in_score(self):
        histogram = buckets((3, 4), (9, 1), (14, 17), (21, 6), (27, 2))
        results = [calculate_percentile(s, histogram) for s in range(0, 28)]
        assert results == sorted(results)

    def test_single_respondent(self):
        histogram = buckets((12, 1))
        assert calculate_percentile(12, histogram) == 0
        assert calculate_percentile(13, histogram) == 100


class TestScoreBucket:
    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            ScoreBucket(score=10, count=-1)

    def test_zero_count_allowed(self):
        assert ScoreBucket(score=10, count=0).count == 0


class TestHelpers:
    def test_total_responses(self):
        assert total_responses(FOUR_EVEN) == 4
        assert total_responses([]) == 0

    def test_interpretation(self):
        assert get_percentile_interpretation(84) == "Higher than 84% of respondents"

    @pytest.mark.parametrize(
        "total,minimum,expected",
        [(0, 10, False), (9, 10, False), (10, 10, True), (250, 10, True)],
    )
    def test_meets_minimum_sample(self, total, minimum, expected):
        assert meets_minimum_sample(total, minimum) is expected


class TestBuildPercentileResult:
    def test_with_data(self):
        as_of = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        snapshot = DistributionSnapshot(
            survey_version="1.0", buckets=tuple(FOUR_EVEN), as_of=as_of
        )

        result = build_percentile_result(30, snapshot)

        assert result.has_data
        assert result.percentile == 50
        assert result.total_responses == 4
        assert result.message == "Higher than 50% of respondents"
        assert result.survey_version == "1.0"
        assert result.as_of == as_of

    def test_without_data(self):
        snapshot = DistributionSnapshot(survey_version="1.0")

        result = build_percentile_result(18, snapshot)

        assert not result.has_data
        assert result.percentile is None
        assert result.total_responses == 0
        assert result.message == NO_DATA_MESSAGE

    def test_snapshot_total(self):
        snapshot = DistributionSnapshot(survey_version="1.0", buckets=tuple(FOUR_EVEN))
        assert snapshot.total_responses == 4


class TestConcurrency:
    def test_concurrent_calls_use_their_own_histogram(self):
        def percentile_for(i):
            # i of 100 respondents scored below 15
            histogram = buckets((3, i), (15, 100 - i))
            return i, calculate_percentile(15, histogram)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(percentile_for, range(1, 100)))

        for i, percentile in results:
            assert percentile == i

    def test_concurrent_reads_of_shared_snapshot(self):
        histogram = buckets((3, 4), (9, 1), (14, 17), (21, 6), (27, 2))
        expected = {s: calculate_percentile(s, histogram) for s in range(0, 28)}
        snapshot = DistributionSnapshot(survey_version="1.0", buckets=tuple(histogram))

        def lookup(score):
            return score, build_percentile_result(score, snapshot).percentile

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lookup, list(range(0, 28)) * 8))

        for score, percentile in results:
            assert percentile == expected[score]
