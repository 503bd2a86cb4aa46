"""
Tests for survey score calculation and performance levels.
"""
import pytest

from libs.domain_types import CategoryId, PerformanceLevel

from app.core.questions import SURVEY_1_0
from app.core.scoring import (
    calculate_category_score,
    calculate_scores,
    get_gaps,
    get_gaps_by_category,
    get_performance_color,
    get_performance_label,
    get_performance_level,
    get_score_summary,
    percentage_of,
)


def all_answers(value: bool):
    return {qid: value for qid in SURVEY_1_0.version.question_ids}


class TestPercentageOf:
    @pytest.mark.parametrize(
        "part,whole,expected",
        [(0, 27, 0), (27, 27, 100), (1, 8, 13), (1, 3, 33), (2, 3, 67), (20, 27, 74)],
    )
    def test_rounds_half_up(self, part, whole, expected):
        assert percentage_of(part, whole) == expected

    def test_zero_whole(self):
        assert percentage_of(3, 0) == 0


class TestCalculateScores:
    def test_all_yes(self):
        scores = calculate_scores(all_answers(True), SURVEY_1_0)
        assert scores.total == 27
        assert scores.max_possible == 27
        assert scores.percentage == 100
        assert all(c.percentage == 100 for c in scores.categories)

    def test_all_no(self):
        scores = calculate_scores(all_answers(False), SURVEY_1_0)
        assert scores.total == 0
        assert scores.percentage == 0

    def test_category_breakdown(self):
        answers = all_answers(False)
        for qid in ("ds_001", "ds_002", "sup_004"):
            answers[qid] = True

        scores = calculate_scores(answers, SURVEY_1_0)
        by_id = {c.category_id: c for c in scores.categories}

        assert scores.total == 3
        assert by_id[CategoryId.DAILY_SESSIONS].score == 2
        assert by_id[CategoryId.DAILY_SESSIONS].max_score == 7
        assert by_id[CategoryId.DAILY_SESSIONS].percentage == 29
        assert by_id[CategoryId.SUPERVISION].score == 1
        assert by_id[CategoryId.SUPERVISION].percentage == 25
        assert by_id[CategoryId.TREATMENT_FIDELITY].score == 0

    def test_categories_in_survey_order(self):
        scores = calculate_scores(all_answers(True), SURVEY_1_0)
        assert [c.category_id for c in scores.categories] == [
            c.id for c in SURVEY_1_0.categories
        ]

    def test_unknown_questions_ignored(self):
        answers = all_answers(False)
        answers["zz_999"] = True
        assert calculate_scores(answers, SURVEY_1_0).total == 0

    def test_only_true_counts(self):
        answers = all_answers(False)
        answers["ds_001"] = 1  # truthy but not True
        assert calculate_scores(answers, SURVEY_1_0).total == 0

    def test_category_score_for_missing_category(self):
        assert calculate_category_score({}, "not_a_category", SURVEY_1_0) is None


class TestGaps:
    def test_gaps_in_question_order(self):
        answers = all_answers(True)
        answers["cg_002"] = False
        answers["ds_003"] = False

        gaps = get_gaps(answers, SURVEY_1_0)

        assert [g.question_id for g in gaps] == ["ds_003", "cg_002"]
        assert gaps[0].category_id == CategoryId.DAILY_SESSIONS
        assert gaps[0].category_name == "Daily Sessions"
        assert gaps[0].question_text == SURVEY_1_0.question_by_id("ds_003").text

    def test_unanswered_is_not_a_gap(self):
        assert get_gaps({"ds_001": False}, SURVEY_1_0)[0].question_id == "ds_001"
        assert len(get_gaps({"ds_001": False}, SURVEY_1_0)) == 1

    def test_gaps_by_category_has_every_category(self):
        answers = all_answers(True)
        answers["tf_001"] = False

        grouped = get_gaps_by_category(answers, SURVEY_1_0)

        assert set(grouped) == {c.id for c in SURVEY_1_0.categories}
        assert grouped[CategoryId.TREATMENT_FIDELITY] == [
            SURVEY_1_0.question_by_id("tf_001").text
        ]
        assert grouped[CategoryId.DAILY_SESSIONS] == []


class TestPerformanceLevels:
    @pytest.mark.parametrize(
        "percentage,level,label,color",
        [
            (100, PerformanceLevel.STRONG, "Strong Alignment", "emerald"),
            (90, PerformanceLevel.STRONG, "Strong Alignment", "emerald"),
            (89, PerformanceLevel.MODERATE, "Moderate Alignment", "amber"),
            (70, PerformanceLevel.MODERATE, "Moderate Alignment", "amber"),
            (69, PerformanceLevel.NEEDS_IMPROVEMENT, "Needs Improvement", "rose"),
            (0, PerformanceLevel.NEEDS_IMPROVEMENT, "Needs Improvement", "rose"),
        ],
    )
    def test_thresholds(self, percentage, level, label, color):
        assert get_performance_level(percentage) == level
        assert get_performance_label(percentage) == label
        assert get_performance_color(percentage) == color

    def test_score_summary(self):
        answers = all_answers(True)
        answers["ds_001"] = False
        summary = get_score_summary(calculate_scores(answers, SURVEY_1_0))

        assert summary["total"] == 26
        assert summary["percentage"] == 96
        assert summary["level"] == PerformanceLevel.STRONG
        assert len(summary["categories"]) == 5
        sessions = summary["categories"][0]
        assert sessions["id"] == CategoryId.DAILY_SESSIONS
        assert sessions["percentage"] == 86
        assert sessions["label"] == "Moderate Alignment"
