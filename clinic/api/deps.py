from typing import TypeVar

from fastapi import HTTPException, status

from clinic.core.db import get_session
from clinic.core.errors import ErrorKind, ServiceError

__all__ = ["get_session", "unwrap", "to_http_exception"]

T = TypeVar("T")

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.ILLEGAL_STATE: 422,  # Unprocessable Entity
}


def to_http_exception(error: ServiceError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_KIND[error.kind],
        detail=error.detail,
        headers={"X-Error-Kind": error.kind.value, "X-Retryable": str(error.retryable).lower()},
    )


def unwrap(result: T | ServiceError) -> T:
    """Return a service result, or raise its HTTP error. Raising also rolls back the
    request transaction in get_session."""
    if isinstance(result, ServiceError):
        raise to_http_exception(result)
    return result
