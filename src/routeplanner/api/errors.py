"""Translate service failures into HTTP errors carrying one displayable message."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import (
    InvariantViolationError,
    MalformedResponseError,
    MissingCredentialError,
    PayloadTooLargeError,
    RequestInProgressError,
    RequestTimeoutError,
    RoutePlannerError,
    UpstreamFailureError,
)

_STATUS_BY_ERROR: tuple[tuple[type[RoutePlannerError], int], ...] = (
    (MissingCredentialError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PayloadTooLargeError, 413),  # Content Too Large
    (RequestInProgressError, status.HTTP_409_CONFLICT),
    (RequestTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (MalformedResponseError, status.HTTP_502_BAD_GATEWAY),
    (UpstreamFailureError, status.HTTP_502_BAD_GATEWAY),
    (InvariantViolationError, status.HTTP_502_BAD_GATEWAY),
)


def to_http_exception(exc: RoutePlannerError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
