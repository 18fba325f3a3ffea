"""
Async error handling utilities for database operations.

Classifies SQLAlchemy exceptions into store *rejections* (the store refused
the row: constraint or data errors) and *failures* (connectivity, driver,
anything else). Rejections are reported by the weight gateway as a
structured result; failures are wrapped in ``AsyncDatabaseError`` and
propagate to the request boundary.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import (
    DatabaseError,
    DataError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as SQLTimeoutError,
)

logger = logging.getLogger(__name__)


class AsyncDatabaseError(Exception):
    """Base exception for async database operations."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)


class AsyncConnectionError(AsyncDatabaseError):
    """Exception for database connection issues."""
    pass


class AsyncErrorHandler:
    """Classifies database errors raised during async operations."""

    # Order matters: subclasses before DatabaseError
    ERROR_MAPPINGS = (
        (IntegrityError, {'kind': 'rejected', 'detail': 'Data integrity constraint violation'}),
        (DataError, {'kind': 'rejected', 'detail': 'Invalid data format'}),
        (OperationalError, {'kind': 'connection', 'detail': 'Database operation failed'}),
        (InterfaceError, {'kind': 'connection', 'detail': 'Database interface error'}),
        (DisconnectionError, {'kind': 'connection', 'detail': 'Database connection lost'}),
        (SQLTimeoutError, {'kind': 'connection', 'detail': 'Database operation timed out'}),
        (DatabaseError, {'kind': 'failure', 'detail': 'Database error occurred'}),
    )

    @classmethod
    def classify_error(cls, error: Exception) -> Dict[str, Any]:
        """
        Classify a database error.

        Returns:
            Dictionary with ``kind`` (rejected, connection or failure) and ``detail``
        """
        for exc_type, mapping in cls.ERROR_MAPPINGS:
            if isinstance(error, exc_type):
                return dict(mapping)

        return {'kind': 'failure', 'detail': 'An unexpected database error occurred'}

    @classmethod
    def is_rejection(cls, error: Exception) -> bool:
        """True when the store refused the data rather than failing to run."""
        return cls.classify_error(error)['kind'] == 'rejected'

    @classmethod
    def wrap_error(cls, error: Exception, operation_name: str = "database operation") -> AsyncDatabaseError:
        """
        Wrap ``error`` in the matching ``AsyncDatabaseError`` subclass,
        keeping the underlying message attached.
        """
        error_info = cls.classify_error(error)
        message = f"{operation_name} failed: {error}"
        logger.error(f"{error_info['detail']} in {operation_name}: {error}")

        if error_info['kind'] == 'connection':
            return AsyncConnectionError(message, original_error=error)
        return AsyncDatabaseError(message, original_error=error)
