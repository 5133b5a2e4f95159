"""Translate restoration errors into HTTP responses."""

from fastapi import HTTPException

from ..errors import (
    InvalidTransition,
    ProjectNotFound,
    RequestConflict,
    RequestNotFound,
    ResurrectionError,
    UnsupportedRestorationCombination,
    ValidationError,
    VersionConflict,
)

STATUS_CODES = {
    ValidationError: 422,
    UnsupportedRestorationCombination: 422,
    RequestNotFound: 404,
    ProjectNotFound: 404,
    RequestConflict: 409,
    InvalidTransition: 409,
    VersionConflict: 409,
}


def http_error(exc: ResurrectionError) -> HTTPException:
    status_code = 500
    for error_type, code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            status_code = code
            break
    detail = {"kind": exc.kind, "message": str(exc)}
    if isinstance(exc, ValidationError):
        detail["errors"] = exc.errors
    return HTTPException(status_code=status_code, detail=detail)
