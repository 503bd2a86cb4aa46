"""
Health check and status endpoints.
"""
from fastapi import APIRouter

from app.core import settings
from app.core.datetime_utils import utc_now
from app.core.questions import available_versions

router = APIRouter()


@router.get("/health")
def health_check():
    """
    Health check endpoint.

    Reports service identity and the survey versions this build can score.
    Does not touch the database.
    """
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENV,
        "survey_version": settings.CURRENT_SURVEY_VERSION,
        "survey_versions": available_versions(),
    }


@router.get("/ping")
def ping():
    return {"message": "pong"}
