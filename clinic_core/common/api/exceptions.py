# clinic_core/common/api/exceptions.py

from __future__ import annotations

import logging
import uuid
from typing import Any

from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Honours an inbound X-Request-Id header so callers can correlate logs.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid and request is not None:
        rid = request.META.get("HTTP_X_REQUEST_ID") or None
    if not rid:
        rid = uuid.uuid4().hex
    if request is not None:
        setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical failure body:
      {"success": false, "error": {"code", "message", "details", "request_id"}}

    `code` is the stable machine-readable reason, `message` is for humans.
    """
    rid = ensure_request_id(request)
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        },
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when a unique business field is already taken (e.g. patient email).
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class AuditWriteError(APIException):
    """
    The primary effect was committed but its compliance record was not.
    Kept distinct from generic server errors so operators can alert on it.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "The operation completed but its audit record could not be written."
    default_code = "audit_failure"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def _passthrough_headers(response) -> dict[str, str]:
    # WWW-Authenticate drives the 401 vs 403 decision in clients; Retry-After comes from throttling.
    return {k: v for k, v in response.items() if k in ("WWW-Authenticate", "Retry-After")}


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        view_name = type(view).__name__ if view is not None else "-"

        if isinstance(exc, DatabaseError):
            logger.error("Persistence failure in %s", view_name, exc_info=exc)
            return Response(
                build_error_envelope(
                    request=request,
                    code="persistence_failure",
                    message="A storage error occurred. Please retry later.",
                ),
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        # Truly unhandled error
        logger.error("Unhandled error in %s", view_name, exc_info=exc)
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    # DRF standardizes errors into response.data
    data = response.data

    # Message + details rules:
    # 1) If {"detail": "..."} only -> message=detail, details=None
    # 2) If {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) Otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and len(data) == 1:
        message = str(data[0])
        details = None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=_passthrough_headers(response),
    )
