"""
Async error handling utilities for service operations.

Maps database failures to HTTP status codes, converts unexpected errors into
the API's 500 response (raw cause included in ``message``) and provides the
commit/rollback context manager used by every multi-statement write.
"""

import logging
from typing import Any, Callable, Optional, Dict
from functools import wraps
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import (
    IntegrityError,
    OperationalError,
    DisconnectionError,
    TimeoutError as SQLTimeoutError,
    DataError,
    DatabaseError
)
from fastapi import HTTPException, status
import asyncpg

logger = logging.getLogger(__name__)


class AsyncServiceError(HTTPException):
    """
    HTTP error carrying a short summary and the underlying cause.

    ``detail`` holds the summary rendered as ``error`` in the response
    envelope; ``message`` holds the raw cause rendered as ``message``.
    """

    def __init__(self, status_code: int, error: str, message: Optional[str] = None):
        super().__init__(status_code=status_code, detail=error)
        self.error = error
        self.message = message


def bad_request(error: str, message: Optional[str] = None) -> AsyncServiceError:
    return AsyncServiceError(status.HTTP_400_BAD_REQUEST, error, message)


def not_found(error: str) -> AsyncServiceError:
    return AsyncServiceError(status.HTTP_404_NOT_FOUND, error)


def conflict(error: str, message: Optional[str] = None) -> AsyncServiceError:
    return AsyncServiceError(status.HTTP_409_CONFLICT, error, message)


def reject_null_fields(update_data: Dict[str, Any], *nullable: str) -> None:
    """Raise 400 when a partial update sets a required field to null."""
    nulled = sorted(field for field, value in update_data.items() if value is None and field not in nullable)
    if nulled:
        raise bad_request(f"Missing or invalid fields: {', '.join(nulled)}", "Field cannot be null")


class AsyncErrorHandler:
    """Classifies database errors for logging and health reporting."""

    # Mapping of SQLAlchemy errors to HTTP status codes and messages
    ERROR_MAPPINGS = {
        IntegrityError: {
            'status_code': status.HTTP_409_CONFLICT,
            'detail': 'Data integrity constraint violation',
        },
        OperationalError: {
            'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
            'detail': 'Database operation failed',
        },
        DisconnectionError: {
            'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
            'detail': 'Database connection lost',
        },
        SQLTimeoutError: {
            'status_code': status.HTTP_504_GATEWAY_TIMEOUT,
            'detail': 'Database operation timed out',
        },
        DataError: {
            'status_code': status.HTTP_400_BAD_REQUEST,
            'detail': 'Invalid data format',
        },
        DatabaseError: {
            'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR,
            'detail': 'Database error occurred',
        }
    }

    @classmethod
    def classify_error(cls, error: Exception) -> Dict[str, Any]:
        """
        Classify an error and return status code and summary.

        Args:
            error: The exception that occurred

        Returns:
            Dictionary with status_code and detail
        """
        for exc_type, mapping in cls.ERROR_MAPPINGS.items():
            if isinstance(error, exc_type):
                return mapping.copy()

        if isinstance(error, asyncpg.PostgresError):
            return cls._handle_postgres_error(error)

        return {
            'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR,
            'detail': 'An unexpected error occurred',
        }

    @classmethod
    def _handle_postgres_error(cls, error: asyncpg.PostgresError) -> Dict[str, Any]:
        """Handle PostgreSQL-specific errors raised by asyncpg."""
        if isinstance(error, (asyncpg.ConnectionDoesNotExistError,
                              asyncpg.ConnectionFailureError)):
            return {
                'status_code': status.HTTP_503_SERVICE_UNAVAILABLE,
                'detail': 'Database connection failed',
            }

        if isinstance(error, (asyncpg.UniqueViolationError, asyncpg.ForeignKeyViolationError)):
            return {
                'status_code': status.HTTP_409_CONFLICT,
                'detail': 'Constraint violation',
            }

        return {
            'status_code': status.HTTP_500_INTERNAL_SERVER_ERROR,
            'detail': f'PostgreSQL error: {error.sqlstate}',
        }


# Decorator for automatic error handling
def handle_async_db_errors(operation_name: str):
    """
    Convert unexpected failures of a service operation into a 500 response.

    HTTP errors raised on purpose (400/404/409) pass through untouched. Any
    other exception becomes ``AsyncServiceError(500, "Failed to <operation>",
    str(exc))`` so the client sees the raw cause.

    Args:
        operation_name: Human readable operation, e.g. "create package"
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as e:
                error_info = AsyncErrorHandler.classify_error(e)
                logger.error(f"Error in {operation_name} ({error_info['detail']}): {e}")
                raise AsyncServiceError(
                    status.HTTP_500_INTERNAL_SERVER_ERROR,
                    f"Failed to {operation_name}",
                    str(e)
                )
        return wrapper
    return decorator


@asynccontextmanager
async def async_transaction_rollback(db: AsyncSession):
    """
    Context manager for a request-scoped write transaction.

    Commits when the block succeeds; on any exception rolls back and
    re-raises.

    Usage:
        async with async_transaction_rollback(db):
            db.add(package)
            ...
    """
    try:
        yield db
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.error(f"Transaction rolled back due to error: {e}")
        raise
