"""Maps domain errors and framework exceptions to HTTP responses.

Every error body has the shape {"error": {"code": ..., "message": ...}}.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from events.domain.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def api_exception_handler(exc, context):
    """DRF EXCEPTION_HANDLER: domain errors first, then DRF's own exceptions."""
    if isinstance(exc, DomainError):
        if exc.kind is ErrorKind.INTERNAL:
            logger.error(f"Internal error in {context.get('view')}: {exc}")
        return Response(error_body(exc.code.value, exc.message), status=STATUS_BY_KIND[exc.kind])

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = error_body("INVALID_INPUT", "Invalid input", fields=exc.detail)
    elif isinstance(exc, exceptions.APIException):
        response.data = error_body(exc.default_code.upper(), str(exc.detail))
    return response
