"""
Error responses shared by the routers
"""
import traceback

from fastapi.responses import JSONResponse

from src.services.errors import (
    DuplicateError,
    LogbookError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateError: 409,
    PersistenceError: 503,
}


def logbook_error_response(error: LogbookError, operation: str) -> JSONResponse:
    """JSON error body for a domain error"""
    status_code = STATUS_CODES.get(type(error), 500)
    print(f"{operation}: {type(error).__name__}: {error}")
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "detail": str(error), "error_type": type(error).__name__},
    )


def internal_error_response(error: Exception, operation: str) -> JSONResponse:
    """JSON error body for an unexpected exception, with traceback logged"""
    error_msg = str(error)
    error_type = type(error).__name__
    print(f"Error in {operation}: {error_type}: {error_msg}")
    traceback.print_exc()
    return JSONResponse(
        status_code=500,
        content={"status": "error", "detail": error_msg, "error_type": error_type},
    )
