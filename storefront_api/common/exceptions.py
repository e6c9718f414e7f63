# common/exceptions.py
"""
Project-wide DRF exception handler.

Every API error is rendered as {"message": ..., "error": ...}.
Views may set ``error_message`` to control the public message for 4xx errors.
"""

import traceback

import structlog
from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler


logger = structlog.get_logger(__name__)

DEFAULT_CLIENT_MESSAGE = "Invalid request"
DEFAULT_SERVER_MESSAGE = "Server error"


def _flatten_errors(detail) -> str:
    """Collapse DRF error details (str, list or field dict) into one line."""
    if isinstance(detail, dict):
        if set(detail) == {"detail"}:
            return _flatten_errors(detail["detail"])
        return "; ".join(
            f"{field}: {_flatten_errors(errors)}" for field, errors in detail.items()
        )
    if isinstance(detail, (list, tuple)):
        return " ".join(_flatten_errors(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None
    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            "api_unhandled_exception",
            view=view_name,
            error=str(exc),
            exc_info=exc,
        )
        data = {"message": DEFAULT_SERVER_MESSAGE, "error": str(exc)}
        if settings.DEBUG:
            data["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        return Response(data, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    error = _flatten_errors(response.data)
    if response.status_code >= 500:
        logger.error("api_error", view=view_name, status=response.status_code, error=error)
        message = DEFAULT_SERVER_MESSAGE
    else:
        logger.warning("api_client_error", view=view_name, status=response.status_code, error=error)
        message = getattr(view, "error_message", None) or DEFAULT_CLIENT_MESSAGE

    response.data = {"message": message, "error": error}
    return response
