"""Project-wide DRF exception handler.

Every error body the API returns has the same shape::

    {"message": "<user-facing text>"}

Framework errors (authentication, permission, parse and serializer
validation errors) are reshaped into that body.  Anything DRF does not
recognise is logged with full detail and collapsed into a generic 500 so
that no SQL text or stack trace ever reaches the client.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error occurred."


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "api.unhandled_exception",
            view=type(view).__name__ if view else None,
            error=str(exc),
        )
        return Response(
            {"message": SERVER_ERROR_MESSAGE},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        response.data = {"message": _first_message(exc.detail)}
    else:
        detail = getattr(exc, "detail", None)
        response.data = {"message": str(detail) if detail else str(exc)}
    return response


def pydantic_error_message(exc: PydanticValidationError) -> str:
    """First validation error of a DTO as a single user-facing line."""
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    message = str(first.get("msg", "Invalid request.")).removeprefix("Value error, ")
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {message}" if loc else message


def _first_message(detail: Any, field: str | None = None) -> str:
    """Flatten a nested DRF error ``detail`` to its first message."""
    if isinstance(detail, dict):
        for key, value in detail.items():
            label = None if key == "non_field_errors" else key
            return _first_message(value, label)
        return "Invalid request."
    if isinstance(detail, list):
        if not detail:
            return "Invalid request."
        return _first_message(detail[0], field)
    if field:
        return f"{field}: {detail}"
    return str(detail)


class EmailAlreadyRegistered(Exception):
    """Another account already uses the email address."""


class IncorrectPassword(Exception):
    """The current password supplied for a password change is wrong."""
