# core/errors.py

from fastapi import HTTPException

from core.logging_config import logger


def extract_supabase_error(error: Exception) -> str:
    """
    Pull a readable message out of Supabase Python client errors.
    Handles:
      • PostgREST APIError (message / details)
      • GoTrue AuthApiError (message)
      • StorageException (dict payload in args)
      • Generic Python exceptions
    """

    message = getattr(error, "message", None)
    if message:
        return str(message)

    if getattr(error, "args", None):
        first = error.args[0]
        if isinstance(first, dict):
            return str(first.get("message") or first.get("error") or first)
        return str(first)

    text = str(error)
    return text or "Unknown Supabase error"


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Log a failed remote call and translate it into an HTTPException.
    Returns the exception (doesn't raise) so callers can `raise handle_supabase_error(...)`.

    Args:
        error: The exception that occurred
        operation: What failed (e.g. "Failed to create supplier")
        status_code: HTTP status used when nothing more specific applies
    """
    if isinstance(error, HTTPException):
        return error

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    error_lower = error_detail.lower()
    if "duplicate" in error_lower or "unique" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")
