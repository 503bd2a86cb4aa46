"""
Pydantic schemas for population statistics endpoints.
"""
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PercentileDataMeta(BaseModel):
    """Metadata returned alongside a computed percentile."""

    survey_version: str
    total_responses: int
    as_of: Optional[datetime] = Field(
        None, description="When the aggregate histogram was last refreshed"
    )
    sufficient_data: bool = Field(
        ..., description="Whether the sample meets the minimum for display"
    )
    stale: bool = Field(
        False, description="Whether the histogram is older than its refresh interval"
    )


class PercentileNoDataMeta(BaseModel):
    """Metadata returned when there is no histogram data yet."""

    current_count: int = 0


class PercentileResponse(BaseModel):
    """Percentile rank of a score. percentile is null when there is no data."""

    score: int
    percentile: Optional[int] = Field(None, ge=0, le=100)
    message: str
    meta: Union[PercentileDataMeta, PercentileNoDataMeta]


class TierDistributionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    strong: int
    moderate: int
    needs_improvement: int


class PopulationStatsResponse(BaseModel):
    """Population comparison data, or the reason it is not available."""

    model_config = ConfigDict(from_attributes=True)

    available: bool
    survey_version: str
    min_required: int
    current_count: int
    message: Optional[str] = None
    overall: Optional[Dict[str, Optional[float]]] = None
    questions: Dict[str, Dict[str, Optional[int]]] = Field(default_factory=dict)
    categories: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    distribution: Optional[TierDistributionSchema] = None
    last_updated: Optional[datetime] = None


class AgencySizeSegmentSchema(BaseModel):
    agency_size: str
    total_responses: int
    avg_percentage: int = Field(..., description="Average score percentage, rounded")
    median_score: Optional[float] = None


class AgencySizeStatsResponse(BaseModel):
    """Score summary per agency size. available is false with no segments."""

    available: bool
    survey_version: str
    data: List[AgencySizeSegmentSchema] = Field(default_factory=list)
