"""
Error taxonomy shared by every app.

Services raise these exceptions; views let them propagate and the DRF
exception handler at the bottom of this module turns them into the
``{"success": False, "error": <kind>, "message": ...}`` envelope.
"""
import logging

from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class LearnHubError(Exception):
    """Base exception for all domain errors."""

    kind = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)


class ValidationError(LearnHubError):
    """Malformed input, structural or semantic."""

    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed."


class NotFoundError(LearnHubError):
    """Entity absent, or not owned by the caller."""

    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class AccessDeniedError(LearnHubError):
    kind = "access_denied"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied."


class OwnershipError(AccessDeniedError):
    kind = "ownership_error"
    default_message = "Access denied. Invalid attempt ownership."


class AlreadySubmittedError(LearnHubError):
    kind = "already_submitted"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Quiz attempt has already been submitted."


class PrerequisiteNotMetError(LearnHubError):
    kind = "prerequisite_not_met"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You must complete the corresponding lecture before attempting this quiz."


class AttemptLimitExceededError(LearnHubError):
    kind = "attempt_limit_exceeded"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Maximum attempts reached for this quiz."


class TimeLimitExceededError(LearnHubError):
    kind = "time_limit_exceeded"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Time limit exceeded. Quiz submission rejected."


class InvalidQuestionTypeError(LearnHubError):
    kind = "invalid_question_type"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid question type. Only manual-review questions can be reviewed."


class DependencyError(LearnHubError):
    """A collaborator (database, enrollment store, catalog, sink) failed."""

    kind = "dependency_error"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "A required service is temporarily unavailable. Please try again."


def error_payload(kind, message, errors=None):
    payload = {
        "success": False,
        "error": kind,
        "message": message,
    }
    if errors:
        payload["errors"] = errors
    return payload


def _kind_for_drf_exception(exc):
    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        return "not_authenticated"
    if isinstance(exc, drf_exceptions.PermissionDenied):
        return "access_denied"
    if isinstance(exc, drf_exceptions.NotFound):
        return "not_found"
    if isinstance(exc, (drf_exceptions.ValidationError, drf_exceptions.ParseError)):
        return "validation_error"
    if isinstance(exc, drf_exceptions.MethodNotAllowed):
        return "method_not_allowed"
    return "error"


def api_exception_handler(exc, context):
    """
    DRF ``EXCEPTION_HANDLER``.

    Domain errors keep their kind and status; DRF errors are wrapped into the
    same envelope; database errors are reported as ``dependency_error``.
    Anything else falls through to Django's 500 handling.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, LearnHubError):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.kind}: {exc.message}")
        return Response(error_payload(exc.kind, exc.message, exc.errors), status=exc.status_code)

    if isinstance(exc, DatabaseError):
        logger.error(f"{view_name}: database error", exc_info=True)
        wrapped = DependencyError()
        return Response(error_payload(wrapped.kind, wrapped.message), status=wrapped.status_code)

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    if isinstance(exc, drf_exceptions.APIException):
        detail = exc.detail
        errors = None
        if isinstance(detail, (dict, list)):
            errors = detail if isinstance(detail, dict) else {"non_field_errors": detail}
            message = "Validation failed."
        else:
            message = str(detail)
        response = Response(error_payload(_kind_for_drf_exception(exc), message, errors), status=exc.status_code)
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            response["WWW-Authenticate"] = auth_header
        wait = getattr(exc, "wait", None)
        if wait:
            response["Retry-After"] = "%d" % wait
        return response

    return None
