"""
Models package for the survey backend.
"""
from .base import Base, engine, SessionLocal, get_db
from .models import (
    AGGREGATE_VIEWS,
    AgencySizeStats,
    CategoryStats,
    Lead,
    QuestionStats,
    ScoreDistribution,
    SurveyResponse,
    SurveyStats,
)

__all__ = [
    "AGGREGATE_VIEWS",
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "AgencySizeStats",
    "CategoryStats",
    "Lead",
    "QuestionStats",
    "ScoreDistribution",
    "SurveyResponse",
    "SurveyStats",
]
