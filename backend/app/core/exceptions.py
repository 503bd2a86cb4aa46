"""
Upstream failure exceptions.

These represent failures of a collaborator the core depends on (the
aggregate statistics source, the results store, the signing library) as
opposed to bad input or missing data. They carry the name of the failed
operation and the underlying error so the HTTP layer can log the cause and
return a generic internal error. Nothing in the core retries them.

Usage:
    from app.core.exceptions import DistributionSourceError

    try:
        rows = db.execute(stmt).all()
    except SQLAlchemyError as e:
        raise DistributionSourceError("fetch score distribution", e) from e
"""

from typing import Optional


class UpstreamServiceError(Exception):
    """Base class for failures of an external collaborator.

    Attributes:
        operation_name: Human-readable name of the operation that failed
        original_error: The underlying exception that caused the failure
        message: The formatted error message
    """

    def __init__(
        self,
        operation_name: str,
        original_error: Exception,
        message: Optional[str] = None,
    ):
        self.operation_name = operation_name
        self.original_error = original_error
        self.message = message or f"Failed to {operation_name}: {str(original_error)}"
        super().__init__(self.message)


class DistributionSourceError(UpstreamServiceError):
    """The aggregate statistics source could not be read."""


class ResultsStoreError(UpstreamServiceError):
    """Stored leads or survey responses could not be read or written."""


class TokenSigningError(UpstreamServiceError):
    """The signing library failed to produce a token."""
