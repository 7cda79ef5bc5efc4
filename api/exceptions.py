"""
API exception handlers.

Renders every error raised from a DRF view as
``{"error": {"code": ..., "message": ...}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    DomainException,
    KeyNotFoundError,
    StoreUnavailableError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

# Checked in order; anything else derived from DomainException is a 400.
DOMAIN_STATUS_CODES = (
    (KeyNotFoundError, status.HTTP_404_NOT_FOUND),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)

STORE_RETRY_AFTER_SECONDS = "5"


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
    elif isinstance(exc, Http404):
        response = _error_response("NOT_FOUND", "Resource not found", status.HTTP_404_NOT_FOUND)
    elif isinstance(exc, APIException):
        response = _handle_api_exception(exc, context)
    else:
        response = _handle_unexpected_exception(exc, trace_id)

    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _error_response(code: str, message: Any, status_code: int) -> Response:
    return Response({"error": {"code": code, "message": message}}, status=status_code)


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle key service domain exceptions."""
    status_code = status.HTTP_400_BAD_REQUEST
    for exception_class, mapped_status in DOMAIN_STATUS_CODES:
        if isinstance(exc, exception_class):
            status_code = mapped_status
            break

    log = logger.error if status_code >= 500 else logger.warning
    log("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})

    response = _error_response(exc.code, exc.message, status_code)
    if isinstance(exc, StoreUnavailableError):
        response["Retry-After"] = STORE_RETRY_AFTER_SECONDS
    return response


def _handle_api_exception(exc: APIException, context: Dict[str, Any]) -> Response:
    """Handle DRF exceptions (parse errors, unsupported media type, ...)."""
    response = exception_handler(exc, context)
    detail = response.data.get("detail", exc.detail) if isinstance(response.data, dict) else response.data
    code = str(exc.default_code).upper().replace("-", "_")
    response.data = {"error": {"code": code, "message": detail}}
    return response


def _handle_unexpected_exception(exc: Exception, trace_id: Optional[str]) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return _error_response(
        "INTERNAL_ERROR",
        "An internal error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
