from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import HttpRequest
from ninja_extra import NinjaExtraAPI

from common.object_storage import BlobStoreError
from common.schema import ResponseOk, VersionResponse
from events.controllers.tickets import TicketController
from events.exceptions import TicketAlreadyValidatedError, TicketNotFoundError, TicketPdfUnavailableError

from .exception_handlers import (
    handle_blob_store_error,
    handle_django_validation_error,
    handle_general_exception,
    handle_ticket_already_validated_error,
    handle_ticket_not_found_error,
    handle_ticket_pdf_unavailable_error,
)

api = NinjaExtraAPI(
    title="Boxoffice API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Boxoffice ticketing API {settings.VERSION}",
    app_name=f"boxoffice-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, ResponseOk()


api.register_controllers(
    TicketController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    TicketNotFoundError: handle_ticket_not_found_error,
    TicketAlreadyValidatedError: handle_ticket_already_validated_error,
    TicketPdfUnavailableError: handle_ticket_pdf_unavailable_error,
    BlobStoreError: handle_blob_store_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
