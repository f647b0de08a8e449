"""
Translates domain errors into API responses.
Anything else is left to DRF's default handler.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.exchange.domain.errors import (
    BusinessRuleViolationError,
    CurrencyMismatchError,
    DomainError,
    ExternalServiceError,
    InvalidRateError,
    NotFoundError,
    RateNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
DOMAIN_ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (CurrencyMismatchError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BusinessRuleViolationError, status.HTTP_409_CONFLICT),
    (RateNotFoundError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidRateError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ExternalServiceError, status.HTTP_502_BAD_GATEWAY),
)


def domain_exception_handler(exc, context):
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    for error_class, http_status in DOMAIN_ERROR_STATUS:
        if isinstance(exc, error_class):
            break
    else:
        http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    if http_status >= 500:
        logger.error("Domain error in %s: %s", context.get("view").__class__.__name__, exc)

    payload = {"error": str(exc), "type": exc.__class__.__name__}
    field = getattr(exc, "field", None)
    if field:
        payload["field"] = field
    return Response(payload, status=http_status)
