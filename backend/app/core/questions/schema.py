"""
Survey definition types.

A survey version is a fixed, ordered list of yes/no questions grouped into
categories. Question IDs are stable across versions and never reused.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from libs.domain_types import CategoryId


@dataclass(frozen=True)
class Category:
    """Category metadata."""

    id: CategoryId
    name: str
    short_name: str
    description: str
    question_count: int
    max_score: int


@dataclass(frozen=True)
class Question:
    """A single yes/no survey question."""

    id: str
    category: CategoryId
    text: str
    version_added: str
    version_deprecated: Optional[str] = None
    # Set when the question was significantly reworded into a new ID
    replaced_by: Optional[str] = None


@dataclass(frozen=True)
class SurveyVersion:
    """Version metadata."""

    version: str
    released_at: str
    question_ids: Tuple[str, ...]
    max_score: int
    changelog: Optional[str] = None


@dataclass(frozen=True)
class AnswerValidation:
    """Result of checking a set of answers against a survey version."""

    valid: bool
    missing: List[str] = field(default_factory=list)
    extra: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SurveyDefinition:
    """A complete survey version: metadata, categories and questions."""

    version: SurveyVersion
    categories: Tuple[Category, ...]
    questions: Tuple[Question, ...]

    @property
    def max_score(self) -> int:
        return self.version.max_score

    @property
    def total_questions(self) -> int:
        return len(self.version.question_ids)

    def questions_by_category(self, category_id: CategoryId) -> List[Question]:
        return [q for q in self.questions if q.category == category_id]

    def category_by_id(self, category_id: CategoryId) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def question_by_id(self, question_id: str) -> Optional[Question]:
        return next((q for q in self.questions if q.id == question_id), None)

    def category_for_question(self, question_id: str) -> Optional[Category]:
        question = self.question_by_id(question_id)
        if question is None:
            return None
        return self.category_by_id(question.category)

    def validate_answers(self, answers: Mapping[str, bool]) -> AnswerValidation:
        """
        Check that every question of this version is answered exactly once.

        Args:
            answers: Mapping of question ID to answer

        Returns:
            AnswerValidation listing missing and unexpected question IDs,
            each in a stable order
        """
        required = self.version.question_ids
        missing = [qid for qid in required if qid not in answers]
        extra = sorted(qid for qid in answers if qid not in set(required))
        return AnswerValidation(
            valid=not missing and not extra, missing=missing, extra=extra
        )

    def category_max_scores(self) -> Dict[CategoryId, int]:
        return {c.id: c.max_score for c in self.categories}
