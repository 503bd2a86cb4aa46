"""Shared domain types for the Quick Quality Assessment services.

This package is the single source of truth for domain enums used by the
backend API, its scoring code and its storage models.

Usage:
    from libs.domain_types import AgencySize, CategoryId, PerformanceLevel
"""

import enum


class CategoryId(str, enum.Enum):
    """Survey categories (one per clinical quality domain)."""

    DAILY_SESSIONS = "daily_sessions"
    TREATMENT_FIDELITY = "treatment_fidelity"
    DATA_ANALYSIS = "data_analysis"
    CAREGIVER_GUIDANCE = "caregiver_guidance"
    SUPERVISION = "supervision"


class PerformanceLevel(str, enum.Enum):
    """Performance level derived from a score percentage."""

    STRONG = "strong"
    MODERATE = "moderate"
    NEEDS_IMPROVEMENT = "needs_improvement"


class UserRole(str, enum.Enum):
    """Self-reported role of a respondent."""

    CLINICAL_DIRECTOR = "clinical_director"
    BCBA = "bcba"
    BCABA = "bcaba"
    RBT = "rbt"
    OWNER = "owner"
    QA_MANAGER = "qa_manager"
    CONSULTANT = "consultant"
    OTHER = "other"


class AgencySize(str, enum.Enum):
    """Self-reported agency size, by number of BCBAs."""

    SOLO_SMALL = "solo_small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class PrimarySetting(str, enum.Enum):
    """Setting where the respondent's agency mostly delivers services."""

    IN_HOME = "in_home"
    CLINIC = "clinic"
    SCHOOL = "school"
    HYBRID = "hybrid"
