from django.conf import settings
from django.http import HttpResponse
from ninja import Query
from ninja_extra import ControllerBase, api_controller, route

from common.schema import ErrorResponse
from events import schema
from events.service import ticket_service
from events.service.ticket_generation import GenerationErrorCode, TicketGenerationResult, generate_tickets_for_order

GENERIC_STORAGE_ERROR_MESSAGE = "An unexpected error occurred while generating tickets."

GENERATION_ERROR_STATUS = {
    GenerationErrorCode.NOT_FOUND: 404,
    GenerationErrorCode.STORAGE_ERROR: 500,
}


@api_controller("/tickets", tags=["Tickets"])
class TicketController(ControllerBase):
    """Issue, look up, validate and download tickets."""

    @route.post(
        "",
        url_name="tickets",
        response={
            201: TicketGenerationResult,
            400: TicketGenerationResult,
            404: TicketGenerationResult,
            500: ErrorResponse,
        },
    )
    def generate_tickets(
        self, payload: schema.GenerateTicketsPayload
    ) -> tuple[int, TicketGenerationResult | ErrorResponse]:
        """Issue the tickets of a paid order.

        Creates one ticket per purchased unit, each with a pass id and a PDF.
        Calling this again for the same order returns the tickets issued the
        first time. Tickets whose PDF could not be produced are still issued;
        the failures are listed in `warnings`.

        Returns 404 if the order does not exist and 400 if the order id is
        missing, the payment is not completed, or no ticket could be issued.
        """
        result = generate_tickets_for_order(payload.order_id)
        if result.success:
            return 201, result

        status = GENERATION_ERROR_STATUS.get(result.error_code, 400)  # type: ignore[arg-type]
        if status == 500:
            user = getattr(self.context.request, "user", None)  # type: ignore[union-attr]
            # Storage error details only go to staff and DEBUG deployments.
            message = GENERIC_STORAGE_ERROR_MESSAGE
            if settings.DEBUG or getattr(user, "is_staff", False):
                message = result.message or message
            return 500, ErrorResponse(error=result.error or "Failed to generate tickets", message=message)
        return status, result

    @route.get(
        "",
        url_name="tickets",
        response={200: schema.TicketListResponse, 400: ErrorResponse},
    )
    def list_tickets(
        self,
        order_id: int | None = Query(None, alias="orderId"),  # type: ignore[type-arg]
        user_id: int | None = Query(None, alias="userId"),  # type: ignore[type-arg]
        pass_id: str | None = Query(None, alias="passId"),  # type: ignore[type-arg]
    ) -> tuple[int, schema.TicketListResponse | ErrorResponse]:
        """List tickets by order, by user or by pass id.

        Exactly one of `orderId`, `userId` or `passId` is required. Tickets
        are returned newest first with the event title, category and ticket
        type names resolved.
        """
        if not pass_id and order_id is None and user_id is None:
            return 400, ErrorResponse(
                error="Missing required parameter",
                message="Please provide orderId, userId, or passId parameter",
            )
        tickets = ticket_service.list_tickets(order_id=order_id, user_id=user_id, pass_id=pass_id)
        return 200, schema.TicketListResponse(count=len(tickets), tickets=tickets)

    @route.put(
        "",
        url_name="tickets",
        response={
            200: schema.TicketValidationResponse,
            400: ErrorResponse | schema.AlreadyValidatedResponse,
            404: ErrorResponse,
        },
    )
    def validate_ticket(
        self, payload: schema.ValidateTicketPayload
    ) -> tuple[int, schema.TicketValidationResponse | ErrorResponse]:
        """Validate a ticket at the door.

        A ticket can be validated once. Returns 404 for an unknown pass id and
        400 if the ticket was already validated, with the time of the first scan.
        """
        if not payload.pass_id:
            return 400, ErrorResponse(error="Pass ID is required")
        ticket = ticket_service.validate_ticket(payload.pass_id)
        return 200, schema.TicketValidationResponse(
            ticket=schema.ValidatedTicketSchema(
                ticket_id=ticket.pk,
                pass_id=ticket.pass_id,
                is_validated=ticket.is_validated,
                validation_time=ticket.validation_time,
                attendee_name=ticket.attendee_name,
            )
        )

    @route.get(
        "/{int:ticket_id}/pdf",
        url_name="download_ticket_pdf",
        response={404: ErrorResponse, 502: ErrorResponse},
    )
    def download_pdf(self, ticket_id: int) -> HttpResponse:
        """Download the PDF of a ticket."""
        filename, content = ticket_service.get_ticket_pdf(ticket_id)
        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
