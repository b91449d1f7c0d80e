# apps/core/exceptions.py
"""
Domain error taxonomy and the DRF exception handler that turns it into
HTTP responses.

Services raise the domain errors below; views never catch them. The handler
maps each one to its status code and a ``{"error": message}`` body, and makes
sure nothing unexpected leaks internal text to the client.
"""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base class for expected, client-facing failures."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(DomainError):
    """A state-machine precondition was violated (already reviewed, duplicate...)."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InvalidState(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Operation not allowed in the current state"


class ValidationFailed(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_message = "Validation failed"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


def api_exception_handler(exc, context):
    """REST_FRAMEWORK['EXCEPTION_HANDLER']"""
    if isinstance(exc, DomainError):
        return Response({"error": exc.message}, status=exc.status_code)

    if isinstance(exc, drf_exceptions.ValidationError):
        return Response(
            {"error": "Validation failed", "details": exc.detail},
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        response = exception_handler(exc, context)
        response.data = {"error": "Authentication credentials were not provided or are invalid"}
        return response

    # django_ratelimit raises Ratelimited, a subclass of Django's PermissionDenied
    if isinstance(exc, (drf_exceptions.PermissionDenied, DjangoPermissionDenied)):
        return Response({"error": "Insufficient permissions"}, status=status.HTTP_403_FORBIDDEN)

    if isinstance(exc, Http404):
        return Response({"error": "Not found"}, status=status.HTTP_404_NOT_FOUND)

    response = exception_handler(exc, context)
    if response is not None:
        detail = response.data.get("detail") if isinstance(response.data, dict) else None
        response.data = {"error": str(detail) if detail else "Request could not be processed"}
        return response

    view = context.get("view")
    logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'unknown view'}")
    return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
