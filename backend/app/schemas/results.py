"""
Pydantic schemas for survey results, lookup and magic links.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from libs.domain_types import CategoryId, PerformanceLevel

from app.core.validators import EmailValidator


class CategorySummarySchema(BaseModel):
    """Score and performance level for one category."""

    id: CategoryId
    name: str
    score: int
    max_score: int
    percentage: int
    level: PerformanceLevel
    label: str
    color: str


class ScoreSummarySchema(BaseModel):
    """Overall score with performance level and per-category breakdown."""

    total: int
    max_possible: int
    percentage: int
    level: PerformanceLevel
    label: str
    color: str
    categories: List[CategorySummarySchema]


class GapSchema(BaseModel):
    """A question answered "No"."""

    question_id: str
    question_text: str
    category_id: CategoryId
    category_name: str


class SurveyResultsResponse(BaseModel):
    """Stored results for the results page."""

    results_token: str
    survey_version: str
    completed_at: datetime
    name: Optional[str] = None
    summary: ScoreSummarySchema
    gaps: List[GapSchema]
    gaps_by_category: Dict[CategoryId, List[str]]


class ResultsLookupResponse(BaseModel):
    """Outcome of looking up results by email."""

    found: bool
    results_token: Optional[str] = None
    message: Optional[str] = None


class MagicLinkRequest(BaseModel):
    """Request a results link by email."""

    email: EmailStr = Field(..., description="Email used when taking the survey")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return EmailValidator.normalize_email(v)


class MagicLinkRequestResponse(BaseModel):
    """Identical whether or not the email has stored results."""

    message: str
