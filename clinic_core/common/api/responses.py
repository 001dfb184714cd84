from __future__ import annotations

from typing import Any

from rest_framework import status
from rest_framework.response import Response

_MISSING = object()


def success_response(data: Any = _MISSING, *, message: str | None = None, status_code: int = status.HTTP_200_OK) -> Response:
    """
    Success counterpart of build_error_envelope():
      {"success": true, "data": ..., "message": ...}
    `data` / `message` are omitted when not given.
    """
    body: dict[str, Any] = {"success": True}
    if data is not _MISSING:
        body["data"] = data
    if message:
        body["message"] = message
    return Response(body, status=status_code)
