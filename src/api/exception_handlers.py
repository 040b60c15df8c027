"""Exception handlers for the API."""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja.responses import Response

from common.object_storage import BlobStoreError
from events.exceptions import TicketAlreadyValidatedError, TicketNotFoundError, TicketPdfUnavailableError

logger = structlog.get_logger(__name__)


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            json_payload = obfuscate(orjson.loads(request.body))
        except orjson.JSONDecodeError:  # pragma: no cover
            json_payload = None
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        path=f"{request.method} {request.path}",
        query=obfuscate(request.GET.dict()),
        payload=json_payload,
    )

    data: dict[str, t.Any] = {"success": False, "error": "Internal Server Error."}
    is_staff = getattr(request, "user", None) and request.user.is_staff
    if settings.DEBUG or is_staff:  # pragma: no cover
        data["message"] = str(exc)
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.error("VALIDATION_ERROR", exc_info=True)
    if hasattr(exc, "error_dict"):
        errors = {k: [ee for e in v for ee in e] for k, v in exc.error_dict.items()}
    else:
        errors = {"__all__": list(exc.messages)}  # type: ignore[union-attr]
    return Response(status=400, data={"success": False, "error": "Validation failed", "errors": errors})


def handle_ticket_not_found_error(
    request: HttpRequest, exc: TicketNotFoundError | t.Type[TicketNotFoundError]
) -> Response:
    """Handle a ticket not found error."""
    return Response(status=404, data={"success": False, "error": "Ticket not found"})


def handle_ticket_already_validated_error(
    request: HttpRequest, exc: TicketAlreadyValidatedError | t.Type[TicketAlreadyValidatedError]
) -> Response:
    """Handle a second scan of the same ticket."""
    validation_time = exc.ticket.validation_time  # type: ignore[union-attr]
    return Response(
        status=400,
        data={
            "success": False,
            "error": "Ticket already validated",
            "validation_time": validation_time.isoformat() if validation_time else None,
        },
    )


def handle_ticket_pdf_unavailable_error(
    request: HttpRequest, exc: TicketPdfUnavailableError | t.Type[TicketPdfUnavailableError]
) -> Response:
    """Handle a download request for a ticket without a PDF."""
    return Response(status=404, data={"success": False, "error": "PDF not available for this ticket"})


def handle_blob_store_error(request: HttpRequest, exc: BlobStoreError | t.Type[BlobStoreError]) -> Response:
    """Handle a failed object storage request."""
    logger.warning("OBJECT_STORAGE_ERROR", path=request.path, error=str(exc))
    return Response(status=502, data={"success": False, "error": "Storage unavailable"})


SENSITIVE_KEYS = {"password", "token", "x-api-key", "authorization", "authentication"}


def obfuscate(data: dict[str, t.Any]) -> dict[str, t.Any]:
    """Obfuscate sensitive data in payloads and headers."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
