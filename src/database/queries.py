"""
Database query utilities
"""
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.services.errors import DuplicateError, PersistenceError


def describe_database_error(error: Exception) -> str:
    """
    Classify a driver error for log output

    Returns:
        One of "pool_exhausted", "connection", "timeout", "other"
    """
    error_str = str(error).lower()
    error_type = type(error).__name__

    if (
        "maxclientsinsessionmode" in error_str or
        "max clients reached" in error_str or
        "connection pool" in error_str
    ):
        return "pool_exhausted"
    if "connection" in error_str and (
        "closed" in error_str or "lost" in error_str or "reset" in error_str
    ):
        return "connection"
    if error_type == "TimeoutError" or "timeout" in error_str or "CancelledError" in error_type:
        return "timeout"
    return "other"


async def execute_query(
    session: AsyncSession,
    query: Any,
    operation: str,
    duplicate_message: Optional[str] = None
) -> Any:
    """
    Execute query once; the logbook never retries

    Args:
        session: Database session
        query: SQLAlchemy query object
        operation: Repository operation name, used in log output
        duplicate_message: When set, a unique-constraint violation raises
            DuplicateError with this message instead of PersistenceError

    Returns:
        Query result

    Raises:
        DuplicateError: On integrity violation when duplicate_message is set
        PersistenceError: If the database call fails for any other reason
    """
    try:
        return await session.execute(query)
    except IntegrityError as e:
        print(f"Integrity error in {operation}: {str(e.orig)[:200]}")
        if duplicate_message:
            raise DuplicateError(duplicate_message) from e
        raise PersistenceError(f"{operation} failed: constraint violation") from e
    except Exception as e:
        kind = describe_database_error(e)
        error_type = type(e).__name__
        print(f"Database error in {operation} ({kind}): {error_type}: {str(e)[:200]}")
        raise PersistenceError(f"{operation} failed: {error_type}") from e
