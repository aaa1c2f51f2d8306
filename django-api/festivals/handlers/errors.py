"""Mapping of domain errors to HTTP responses.

Every error body has the shape {"error": {"code", "message", "details"}}.
Unexpected exceptions are logged and reported without internals.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from festivals.domain.errors import BulkTransitionError, DomainError, ErrorCode

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    ErrorCode.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REFERENCE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.STATE_GUARD: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.FESTIVAL_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PERFORMANCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NO_SCHEDULED_PERFORMANCES: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_NAME: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_MEMBER: status.HTTP_409_CONFLICT,
    ErrorCode.BULK_TRANSITION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(code: str, message: str, details=()) -> dict:
    return {"error": {"code": code, "message": message, "details": list(details)}}


def domain_exception_handler(exc: Exception, context: dict) -> Response:
    """DRF exception handler that understands DomainError."""
    if isinstance(exc, DomainError):
        status_code = STATUS_BY_CODE[exc.code]
        if status_code >= 500:
            logger.error("Request failed: %s", exc)
        body = error_body(exc.code.value, exc.message, exc.details)
        if isinstance(exc, BulkTransitionError):
            # details lists the failed records
            body["error"]["succeeded"] = list(exc.succeeded)
        return Response(body, status=status_code)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, exceptions.ValidationError):
            details = sorted(response.data) if isinstance(response.data, dict) else []
            response.data = error_body(
                ErrorCode.VALIDATION_FAILED.value, "Malformed request", details
            )
        else:
            response.data = error_body(str(exc.default_code).upper(), str(exc.detail))
        return response

    logger.exception("Unhandled error in %s", context["view"].__class__.__name__)
    return Response(
        error_body("INTERNAL_ERROR", "An unexpected error occurred"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
