"""
Database error handling for the survey store.

Centralizes the pattern used around every write or lookup on leads and
survey responses:
1. Rolling back the session on a database error
2. Logging the error with the operation name
3. Raising ResultsStoreError so the HTTP layer returns a generic 500

Only SQLAlchemy errors are translated. Anything else (validation errors,
HTTPExceptions, programming errors) propagates unchanged.

Usage:
    from app.core.db_error_handling import handle_store_error

    with handle_store_error(db, "save survey response"):
        db.add(response)
        db.commit()
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ResultsStoreError

logger = logging.getLogger(__name__)


@contextmanager
def handle_store_error(
    db: Session,
    operation_name: str,
    *,
    log_level: int = logging.ERROR,
) -> Generator[None, None, None]:
    """Context manager translating database errors into ResultsStoreError.

    Args:
        db: The SQLAlchemy session to roll back on error.
        operation_name: Human-readable name of the operation for error messages
            and logging (e.g., "save survey response").
        log_level: Logging level for error messages. Defaults to logging.ERROR.

    Raises:
        ResultsStoreError: On any SQLAlchemyError, with the session rolled back.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.log(
            log_level,
            f"Database error during {operation_name}: {e}",
            exc_info=True,
        )
        raise ResultsStoreError(operation_name, e) from e
