"""
Unified exception handling: turns BaseAppException into the common JSON shape
"""
import logging

from django.http import JsonResponse

from .exceptions import BaseAppException

logger = logging.getLogger(__name__)


def app_exception_handler(request, exception):
    """
    Handle BaseAppException and subclasses, return None for anything else
    so Django's own 500 handling takes over.
    """
    if not isinstance(exception, BaseAppException):
        return None

    logger.info(
        "%s %s -> %s %s: %s",
        request.method, request.path, exception.http_status, exception.code, exception.message,
    )
    _record_exception_metric(exception)
    return JsonResponse(
        exception.to_dict(),
        status=exception.http_status,
        json_dumps_params={"ensure_ascii": False},
    )


def _record_exception_metric(exception):
    """Count the error by kind (imported lazily to avoid a circular import)"""
    from clinic.metrics import (
        VALIDATION_ERROR,
        BLOCK_ERROR,
        DUPLICATION_BLOCK,
    )
    from .exceptions import ValidationError, BlockError

    if isinstance(exception, ValidationError):
        VALIDATION_ERROR.inc()
    elif isinstance(exception, BlockError):
        code = getattr(exception, "code", "UNKNOWN")
        BLOCK_ERROR.labels(code=code).inc()
        if code in ("DUPLICATE_RESIDENT_ID", "EMAIL_ALREADY_REGISTERED"):
            DUPLICATION_BLOCK.labels(code=code).inc()
