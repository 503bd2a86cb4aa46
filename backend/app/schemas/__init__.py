"""
Pydantic schemas for request/response validation.
"""
from .results import (
    CategorySummarySchema,
    GapSchema,
    MagicLinkRequest,
    MagicLinkRequestResponse,
    ResultsLookupResponse,
    ScoreSummarySchema,
    SurveyResultsResponse,
)
from .stats import (
    PercentileDataMeta,
    PercentileNoDataMeta,
    PercentileResponse,
    PopulationStatsResponse,
    TierDistributionSchema,
)
from .survey import LeadInput, SubmitSurveyResponse, SurveySubmission

__all__ = [
    "CategorySummarySchema",
    "GapSchema",
    "LeadInput",
    "MagicLinkRequest",
    "MagicLinkRequestResponse",
    "PercentileDataMeta",
    "PercentileNoDataMeta",
    "PercentileResponse",
    "PopulationStatsResponse",
    "ResultsLookupResponse",
    "ScoreSummarySchema",
    "SubmitSurveyResponse",
    "SurveyResultsResponse",
    "SurveySubmission",
    "TierDistributionSchema",
]
