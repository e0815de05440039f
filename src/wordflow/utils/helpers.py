"""Utility functions for the HTTP layer."""

from fastapi import HTTPException

from ..errors import (
    CapabilityNotSupportedError,
    InvalidTransitionError,
    MissingTemplateError,
    ProviderNotConfiguredError,
    UnknownProviderError,
)
from ..store import RowNotFoundError


def http_status_for(error: Exception) -> int:
    if isinstance(error, HTTPException):
        return error.status_code
    if isinstance(error, RowNotFoundError):
        return 404
    if isinstance(error, InvalidTransitionError):
        return 409
    if isinstance(error, (ProviderNotConfiguredError, UnknownProviderError, CapabilityNotSupportedError,
                          MissingTemplateError, ValueError)):
        return 400
    return 500


def to_http_exception(error: Exception) -> HTTPException:
    """Map a pipeline error to the HTTPException a route should raise."""
    if isinstance(error, HTTPException):
        return error
    status = http_status_for(error)
    # KeyError wraps its message in quotes
    message = error.args[0] if isinstance(error, KeyError) and error.args else str(error)
    if status == 500:
        return HTTPException(status_code=500, detail=f"Internal server error: {message}")
    return HTTPException(status_code=status, detail=message)
