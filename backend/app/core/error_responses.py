"""
Standardized error response messages and builders.

This module provides consistent error messages, error codes and
HTTPException builders for the API. Using these utilities ensures:

1. Consistent message format across all endpoints
2. User-facing messages that never reveal which check failed (in particular,
   an expired magic link and a forged one produce the same response)
3. Clear separation of user-facing messages from log messages

Every error response body has the shape::

    {"error": {"code": "VALIDATION_ERROR", "message": "...", "details": ...}}

Error Message Format Guidelines:
- Use sentence case (capitalize first letter only)
- End with a period for complete sentences
- Use "Please try again later." for transient server errors

Usage:
    from app.core.error_responses import ErrorMessages, raise_not_found

    if response is None:
        raise_not_found(ErrorMessages.RESULTS_NOT_FOUND)
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status


class ErrorCodes:
    """Machine-readable error codes returned in the ``error.code`` field."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_TOKEN = "INVALID_TOKEN"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    HTTP_ERROR = "HTTP_ERROR"

    _BY_STATUS = {
        status.HTTP_400_BAD_REQUEST: BAD_REQUEST,
        status.HTTP_401_UNAUTHORIZED: INVALID_TOKEN,
        status.HTTP_404_NOT_FOUND: NOT_FOUND,
        status.HTTP_422_UNPROCESSABLE_ENTITY: VALIDATION_ERROR,
        status.HTTP_500_INTERNAL_SERVER_ERROR: INTERNAL_ERROR,
    }

    @classmethod
    def for_status(cls, status_code: int) -> str:
        """Error code for an HTTP status."""
        if status_code >= 500:
            return cls.INTERNAL_ERROR
        return cls._BY_STATUS.get(status_code, cls.HTTP_ERROR)


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Validation Errors (422)
    # ==========================================================================
    INVALID_QUERY_PARAMETERS = "Invalid query parameters."
    INVALID_REQUEST = "Invalid request."
    INVALID_RESULTS_IDENTIFIER = "Invalid results token."
    INVALID_EMAIL = "Please enter a valid email address."

    # ==========================================================================
    # Credential Errors (401)
    # ==========================================================================
    # Deliberately identical for expired, forged and malformed tokens
    INVALID_RESULTS_LINK = "Invalid or expired results link."

    # ==========================================================================
    # Not Found Errors (404)
    # ==========================================================================
    RESULTS_NOT_FOUND = "Survey results not found."

    # ==========================================================================
    # Lookup messages (200, found=false)
    # ==========================================================================
    NO_SURVEY_FOR_EMAIL = (
        "No survey found for this email. Would you like to take the survey?"
    )
    NO_COMPLETED_SURVEY = "No completed survey found for this email."
    MAGIC_LINK_REQUESTED = (
        "If a completed survey exists for this email, a link to your results "
        "has been sent."
    )

    # ==========================================================================
    # Server Errors (500)
    # ==========================================================================
    PERCENTILE_FAILED = "Failed to calculate percentile. Please try again later."
    STATS_FAILED = "Failed to fetch statistics. Please try again later."
    AGENCY_STATS_FAILED = (
        "Failed to fetch agency size statistics. Please try again later."
    )
    SUBMISSION_FAILED = "Failed to save your survey. Please try again later."
    LOOKUP_FAILED = "An error occurred. Please try again later."
    INTERNAL_ERROR = "An unexpected error occurred. Please try again later."

    # ==========================================================================
    # Template Methods for Dynamic Messages
    # ==========================================================================
    @staticmethod
    def unknown_survey_version(version: str) -> str:
        """Message for a survey version that has not been published."""
        return f"Unknown survey version: {version}."

    @staticmethod
    def incomplete_answers(total_questions: int) -> str:
        """Message when a submission does not answer every question."""
        return f"All {total_questions} questions must be answered."


def error_body(
    code: str, message: str, details: Optional[Any] = None
) -> Dict[str, Any]:
    """Build the standard error response body."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return {"error": error}


# ==============================================================================
# HTTPException Builder Functions
# ==============================================================================


def raise_bad_request(detail: str) -> NoReturn:
    """Raise a 400 Bad Request exception.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 400 Bad Request
    """
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def raise_validation_error(detail: str) -> NoReturn:
    """Raise a 422 exception for input that passed parsing but is out of domain.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 422 Unprocessable Entity
    """
    raise HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=detail,
    )


def raise_unauthorized(detail: str) -> NoReturn:
    """Raise a 401 Unauthorized exception.

    Use for any magic-link verification failure.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 401 Unauthorized
    """
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )


def raise_not_found(detail: str) -> NoReturn:
    """Raise a 404 Not Found exception.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 404 Not Found
    """
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def raise_server_error(
    detail: str,
    error_id: Optional[str] = None,
) -> NoReturn:
    """Raise a 500 Internal Server Error exception.

    Always use user-friendly messages; log technical details separately.

    Args:
        detail: User-facing error message (should be generic and friendly)
        error_id: Optional error tracking ID to include in response

    Raises:
        HTTPException: 500 Internal Server Error
    """
    if error_id:
        detail = f"{detail} (Error ID: {error_id})"

    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )
