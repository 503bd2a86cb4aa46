"""
Services package: storage and transport adapters used by the API layer.
"""

from .distribution_source import (
    PopulationStatsSource,
    ScoreDistributionSource,
    SQLAlchemyDistributionSource,
    StaticDistributionSource,
)
from .email_service import send_results_link_email

__all__ = [
    "PopulationStatsSource",
    "ScoreDistributionSource",
    "SQLAlchemyDistributionSource",
    "StaticDistributionSource",
    "send_results_link_email",
]
