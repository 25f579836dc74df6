# trackvault/common/api/exceptions.py
from __future__ import annotations

import logging
import uuid
from typing import Any

from django.core.exceptions import ObjectDoesNotExist
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Request failed."

# DRF sets these on auth and throttling errors; keep them on the enveloped response
_FORWARDED_HEADERS = ("WWW-Authenticate", "Retry-After")


def ensure_request_id(request) -> str:
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            request.request_id = rid
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    {"error": {"code", "message", "details", "request_id"}} for every non-2xx response.
    """
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": ensure_request_id(request),
        }
    }


class DomainError(APIException):
    """
    Base for errors raised from services and the rate resolver.
    `detail` may be a string or a dict with a "detail" key plus extra context.
    """

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class NotFoundError(DomainError):
    """
    Referenced entity missing, or a lookup (current rate on a date) that resolves to nothing.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(DomainError):
    """
    Business rule blocks the write, e.g. overlapping active rates or a delete
    of a row that collections still reference.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"


class PersistenceError(DomainError):
    """
    Storage failure. Raise with `from exc` so the database error stays on __cause__.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage failure."
    default_code = "persistence_error"


_CODES_BY_TYPE = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (PermissionDenied, "permission_denied"),
    (Http404, "not_found"),
)


def _code_for(exc: Exception) -> str:
    for exc_type, code in _CODES_BY_TYPE:
        if isinstance(exc, exc_type):
            return code
    return getattr(exc, "default_code", None) or "api_error"


def _split_message(data: Any) -> tuple[str, Any]:
    """
    {"detail": "..."}            -> ("...", None)
    {"detail": "...", **extra}   -> ("...", extra)
    ["..."]                      -> ("...", None)
    anything else (field errors) -> (FALLBACK_MESSAGE, data)
    """
    if isinstance(data, dict) and "detail" in data:
        extra = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), extra or None
    if isinstance(data, list) and len(data) == 1 and isinstance(data[0], str):
        return str(data[0]), None
    return FALLBACK_MESSAGE, data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    # Model.objects.get() misses surface as 404 instead of 500
    if isinstance(exc, ObjectDoesNotExist):
        exc = NotFoundError(str(exc) or None)

    response = drf_exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled API error", exc_info=exc)
        return Response(
            build_error_envelope(request=request, code="server_error", message="Unexpected server error."),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, PersistenceError):
        logger.error("Persistence failure: %s", exc.detail, exc_info=exc)

    message, details = _split_message(response.data)
    headers = {name: response[name] for name in _FORWARDED_HEADERS if response.has_header(name)}

    return Response(
        build_error_envelope(request=request, code=_code_for(exc), message=message, details=details),
        status=response.status_code,
        headers=headers,
    )
