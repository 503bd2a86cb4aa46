"""
API v1 router combining all v1 endpoints.
"""
from fastapi import APIRouter

from app.api.v1 import health, results, stats, survey

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
api_router.include_router(survey.router, prefix="/survey", tags=["survey"])
api_router.include_router(results.router, prefix="/results", tags=["results"])
