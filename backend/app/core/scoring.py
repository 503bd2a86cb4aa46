"""
Survey score calculation.

A respondent's score is the number of "Yes" answers. Scores are reported as a
total, as a percentage of the maximum, and per category. Performance levels
translate a percentage into the alignment label shown on the results page.

Percentages are rounded half-up so that 12.5% reads as 13%, matching how the
results page and the PDF report present them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from libs.domain_types import CategoryId, PerformanceLevel

from app.core.questions import SurveyDefinition


SurveyAnswers = Mapping[str, bool]

# Minimum percentage for each level, highest first
PERFORMANCE_THRESHOLDS: Dict[PerformanceLevel, Dict[str, Any]] = {
    PerformanceLevel.STRONG: {"min": 90, "label": "Strong Alignment", "color": "emerald"},
    PerformanceLevel.MODERATE: {
        "min": 70,
        "label": "Moderate Alignment",
        "color": "amber",
    },
    PerformanceLevel.NEEDS_IMPROVEMENT: {
        "min": 0,
        "label": "Needs Improvement",
        "color": "rose",
    },
}


@dataclass(frozen=True)
class CategoryScore:
    """Score for a single category."""

    category_id: CategoryId
    category_name: str
    score: int
    max_score: int
    percentage: int


@dataclass(frozen=True)
class SurveyScores:
    """Calculated scores for a survey response."""

    total: int
    max_possible: int
    percentage: int
    categories: List[CategoryScore] = field(default_factory=list)


@dataclass(frozen=True)
class Gap:
    """A question answered "No"."""

    question_id: str
    question_text: str
    category_id: CategoryId
    category_name: str


def percentage_of(part: int, whole: int) -> int:
    """
    Integer percentage rounded half-up.

    Returns 0 when whole is 0 rather than dividing by zero.
    """
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def _count_yes(answers: SurveyAnswers, question_ids: List[str]) -> int:
    return sum(1 for qid in question_ids if answers.get(qid) is True)


def calculate_category_score(
    answers: SurveyAnswers, category_id: CategoryId, survey: SurveyDefinition
) -> Optional[CategoryScore]:
    """
    Calculate the score for one category.

    Args:
        answers: Mapping of question ID to answer
        category_id: Category to score
        survey: Survey version the answers belong to

    Returns:
        CategoryScore, or None if the category is not part of the survey
    """
    category = survey.category_by_id(category_id)
    if category is None:
        return None

    question_ids = [q.id for q in survey.questions_by_category(category_id)]
    score = _count_yes(answers, question_ids)
    return CategoryScore(
        category_id=category.id,
        category_name=category.name,
        score=score,
        max_score=category.max_score,
        percentage=percentage_of(score, category.max_score),
    )


def calculate_scores(answers: SurveyAnswers, survey: SurveyDefinition) -> SurveyScores:
    """
    Calculate complete survey scores from answers.

    Only questions of the given survey version count; unknown question IDs
    are ignored.

    Args:
        answers: Mapping of question ID to answer
        survey: Survey version the answers belong to

    Returns:
        SurveyScores with total, percentage and per-category breakdown

    Example:
        >>> scores = calculate_scores({"ds_001": True, "ds_002": False}, survey)
        >>> scores.total
        1
    """
    total = _count_yes(answers, list(survey.version.question_ids))
    categories = [
        score
        for score in (
            calculate_category_score(answers, category.id, survey)
            for category in survey.categories
        )
        if score is not None
    ]
    return SurveyScores(
        total=total,
        max_possible=survey.max_score,
        percentage=percentage_of(total, survey.max_score),
        categories=categories,
    )


def get_gaps(answers: SurveyAnswers, survey: SurveyDefinition) -> List[Gap]:
    """
    List the questions answered "No", in survey order.

    Unanswered questions are not gaps.
    """
    gaps: List[Gap] = []
    for question in survey.questions:
        if answers.get(question.id) is not False:
            continue
        category = survey.category_by_id(question.category)
        gaps.append(
            Gap(
                question_id=question.id,
                question_text=question.text,
                category_id=question.category,
                category_name=category.name if category else question.category.value,
            )
        )
    return gaps


def get_gaps_by_category(
    answers: SurveyAnswers, survey: SurveyDefinition
) -> Dict[CategoryId, List[str]]:
    """Gap question texts grouped by category; every category is present."""
    grouped: Dict[CategoryId, List[str]] = {c.id: [] for c in survey.categories}
    for gap in get_gaps(answers, survey):
        grouped.setdefault(gap.category_id, []).append(gap.question_text)
    return grouped


def get_performance_level(percentage: int) -> PerformanceLevel:
    """Map a score percentage to a performance level."""
    for level, threshold in PERFORMANCE_THRESHOLDS.items():
        if percentage >= threshold["min"]:
            return level
    return PerformanceLevel.NEEDS_IMPROVEMENT


def get_performance_label(percentage: int) -> str:
    return PERFORMANCE_THRESHOLDS[get_performance_level(percentage)]["label"]


def get_performance_color(percentage: int) -> str:
    return PERFORMANCE_THRESHOLDS[get_performance_level(percentage)]["color"]


def get_score_summary(scores: SurveyScores) -> Dict[str, Any]:
    """
    Build the results-page summary: scores with level, label and color.

    Args:
        scores: Calculated survey scores

    Returns:
        Dictionary with overall and per-category presentation fields
    """
    return {
        "total": scores.total,
        "max_possible": scores.max_possible,
        "percentage": scores.percentage,
        "level": get_performance_level(scores.percentage),
        "label": get_performance_label(scores.percentage),
        "color": get_performance_color(scores.percentage),
        "categories": [
            {
                "id": cat.category_id,
                "name": cat.category_name,
                "score": cat.score,
                "max_score": cat.max_score,
                "percentage": cat.percentage,
                "level": get_performance_level(cat.percentage),
                "label": get_performance_label(cat.percentage),
                "color": get_performance_color(cat.percentage),
            }
            for cat in scores.categories
        ],
    }
