"""DRF exception handler producing the ``{"ok": false, "error": ...}`` envelope."""

from __future__ import annotations

import logging

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def _first_message(detail) -> str:
    """Flatten DRF error details into a single readable message."""

    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_message(value)
            if field in ("detail", "non_field_errors"):
                return message
            return f"{field}: {message}"
        return ""
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        if exc.status_code >= 500:
            logger.error(f"Domain error in {context.get('view')}: {exc.message}", exc_info=exc)
        return Response({"ok": False, "error": exc.message}, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is not None:
        payload = {"ok": False, "error": _first_message(response.data)}
        if isinstance(response.data, dict) and set(response.data) - {"detail"}:
            payload["details"] = response.data
        response.data = payload
        return response

    logger.error(f"Unhandled error in {context.get('view')}: {exc}", exc_info=exc)
    return Response(
        {"ok": False, "error": "Internal server error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
