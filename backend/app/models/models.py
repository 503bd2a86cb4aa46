"""
Database models for the survey store and its aggregate views.
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from libs.domain_types import AgencySize, PrimarySetting, UserRole

from .base import Base


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _value_enum(enum_cls, name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


# Shared by leads and survey_responses so each maps to one database type
user_role_type = _value_enum(UserRole, "user_role")
agency_size_type = _value_enum(AgencySize, "agency_size")
primary_setting_type = _value_enum(PrimarySetting, "primary_setting")


class Lead(Base):
    """A respondent, identified by email. No password, no account."""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100))
    role = Column(user_role_type, nullable=True)
    # Organization domain; null for personal mail providers
    email_domain = Column(String(255), index=True)
    agency_size = Column(agency_size_type, nullable=True)
    primary_setting = Column(primary_setting_type, nullable=True)
    state = Column(String(2))
    marketing_consent = Column(Boolean, default=False, nullable=False)
    # Test leads are excluded from lookups and population statistics
    is_test = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    responses = relationship(
        "SurveyResponse", back_populates="lead", cascade="all, delete-orphan"
    )


class SurveyResponse(Base):
    """A completed survey submission."""

    __tablename__ = "survey_responses"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(
        Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False
    )
    survey_version = Column(String(10), nullable=False, default="1.0")
    answers = Column(JSON, nullable=False)  # {question_id: bool}
    total_score = Column(Integer, nullable=False)
    percentage = Column(Integer, nullable=False)
    # Respondent details as they were at submission, for segmenting
    agency_size = Column(agency_size_type, nullable=True)
    role = Column(user_role_type, nullable=True)
    primary_setting = Column(primary_setting_type, nullable=True)
    state = Column(String(2))
    # Opaque handle used in result URLs and magic-link tokens
    results_token = Column(
        String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )
    is_test = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime(timezone=True), default=_utc_now, nullable=False)

    lead = relationship("Lead", back_populates="responses")

    __table_args__ = (
        Index("ix_survey_responses_lead_completed", "lead_id", "completed_at"),
    )


# ---------------------------------------------------------------------------
# Read-only aggregate views. In production these are materialized views over
# non-test completed responses, refreshed on a schedule. They are mapped as
# tables so the ORM can query them; the API never writes to them.
# ---------------------------------------------------------------------------


class ScoreDistribution(Base):
    """Score histogram: respondents per total score, per survey version."""

    __tablename__ = "score_distribution"
    __table_args__ = {"info": {"is_view": True}}

    survey_version = Column(String(10), primary_key=True)
    total_score = Column(Integer, primary_key=True)
    frequency = Column(Integer)


class SurveyStats(Base):
    """Overall statistics per survey version."""

    __tablename__ = "survey_stats"
    __table_args__ = {"info": {"is_view": True}}

    survey_version = Column(String(10), primary_key=True)
    total_responses = Column(Integer)
    avg_score = Column(Float)
    avg_percentage = Column(Float)
    median_score = Column(Float)
    p25_score = Column(Float)
    p75_score = Column(Float)
    last_updated = Column(DateTime(timezone=True))


class CategoryStats(Base):
    """Average category percentage per survey version."""

    __tablename__ = "category_stats"
    __table_args__ = {"info": {"is_view": True}}

    survey_version = Column(String(10), primary_key=True)
    category = Column(String(50), primary_key=True)
    avg_percentage = Column(Float)


class QuestionStats(Base):
    """Share of "Yes" answers per question and survey version."""

    __tablename__ = "question_stats"
    __table_args__ = {"info": {"is_view": True}}

    survey_version = Column(String(10), primary_key=True)
    question_id = Column(String(10), primary_key=True)
    yes_percentage = Column(Float)
    total_responses = Column(Integer)


class AgencySizeStats(Base):
    """Score summary per agency size and survey version."""

    __tablename__ = "stats_by_agency_size"
    __table_args__ = {"info": {"is_view": True}}

    survey_version = Column(String(10), primary_key=True)
    agency_size = Column(String(20), primary_key=True)
    total_responses = Column(Integer)
    avg_percentage = Column(Float)
    median_score = Column(Float)


AGGREGATE_VIEWS = (
    ScoreDistribution.__tablename__,
    SurveyStats.__tablename__,
    CategoryStats.__tablename__,
    QuestionStats.__tablename__,
    AgencySizeStats.__tablename__,
)
