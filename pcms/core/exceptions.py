from typing import Dict, Any, Optional
from datetime import datetime, timezone

from fastapi import status


class BaseCustomException(Exception):
    """Application error carrying its HTTP status and a machine-readable code"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code
        super().__init__(self.message)


class ValidationError(BaseCustomException):
    """Invalid request data: bad document types, file/type count mismatch"""

    def __init__(
        self,
        message: str = "Validation failed",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code=error_code or "VALIDATION_ERROR"
        )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_error_response(exception: BaseCustomException) -> Dict[str, Any]:
    """Body for a raised application error"""
    response = {
        "error": exception.__class__.__name__.replace("Error", " Error"),
        "message": exception.message,
        "error_code": exception.error_code,
        "timestamp": _timestamp(),
    }
    if exception.details:
        response["details"] = exception.details
    return response


def create_validation_error_response(
    exception: ValidationError,
    validation_errors: Optional[Dict[str, list]] = None
) -> Dict[str, Any]:
    """Body for rejected request parameters, with messages grouped by field"""
    response = create_error_response(exception)
    if validation_errors:
        response["validation_errors"] = validation_errors
    return response


def collect_validation_errors(errors: list) -> Dict[str, list]:
    """Group pydantic/FastAPI error entries by their dotted location"""
    grouped: Dict[str, list] = {}
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()))
        grouped.setdefault(location or "__root__", []).append(error.get("msg", "invalid value"))
    return grouped
