"""Ticket lookups, door validation and PDF downloads."""

import structlog
from django.conf import settings
from django.db import transaction

from common import object_storage
from common.object_storage import BlobStore
from events.exceptions import TicketNotFoundError, TicketPdfUnavailableError
from events.models import Event, Order, Ticket
from events.schema import EnrichedTicketSchema

logger = structlog.get_logger(__name__)

UNKNOWN_EVENT_TITLE = "Unknown Event"
UNKNOWN_NAME = "Unknown"


def list_tickets(
    *,
    order_id: int | None = None,
    user_id: int | None = None,
    pass_id: str | None = None,
) -> list[EnrichedTicketSchema]:
    """List tickets, newest first, with event and catalog names joined in.

    Exactly one filter is used. A pass id wins over an order id, which wins
    over a user id. A user id selects the tickets of the user's completed
    orders.

    Raises:
        ValueError: If no filter is given.
    """
    qs = Ticket.objects.all()
    if pass_id:
        qs = qs.filter(pass_id=pass_id)
    elif order_id is not None:
        qs = qs.filter(order_id=order_id)
    elif user_id is not None:
        qs = qs.filter(order__user_id=user_id, order__payment_status=Order.PaymentStatus.COMPLETED)
    else:
        raise ValueError("One of order_id, user_id or pass_id is required.")

    tickets = list(qs.order_by("-created_at", "-pk")[: settings.TICKET_LIST_MAX_RESULTS])
    events = Event.objects.prefetch_related("categories__ticket_types").in_bulk({ticket.event_id for ticket in tickets})
    return [enrich_ticket(ticket, events.get(ticket.event_id)) for ticket in tickets]


def enrich_ticket(ticket: Ticket, event: Event | None) -> EnrichedTicketSchema:
    event_title = UNKNOWN_EVENT_TITLE
    ticket_type_name = category_name = UNKNOWN_NAME
    if event is not None:
        event_title = event.title
        match = event.find_ticket_type(ticket.ticket_type_id)
        if match is not None:
            ticket_type_name, category_name = match[0].name, match[1].name

    return EnrichedTicketSchema(
        ticket_id=ticket.pk,
        order_id=ticket.order_id,
        event_id=ticket.event_id,
        event_title=event_title,
        category=category_name,
        ticket_type=ticket_type_name,
        pass_id=ticket.pass_id,
        is_validated=ticket.is_validated,
        validation_time=ticket.validation_time,
        attendee_name=ticket.attendee_name,
        attendee_email=ticket.attendee_email,
        attendee_phone=ticket.attendee_phone,
        pdf_path=ticket.pdf_path,
        created_at=ticket.created_at,
    )


@transaction.atomic
def validate_ticket(pass_id: str) -> Ticket:
    """Mark the ticket with this pass id as used.

    Args:
        pass_id: The scanned pass id.

    Returns:
        The validated ticket.

    Raises:
        TicketNotFoundError: If no ticket has this pass id.
        TicketAlreadyValidatedError: If the ticket was scanned before.
    """
    ticket = Ticket.objects.select_for_update().filter(pass_id=pass_id).first()
    if ticket is None:
        logger.info("ticket_validation_not_found", pass_id=pass_id)
        raise TicketNotFoundError(f"No ticket with pass id {pass_id}.")

    ticket.mark_validated()
    logger.info("ticket_validated", ticket_id=ticket.pk, order_id=ticket.order_id, event_id=ticket.event_id)
    return ticket


def get_ticket_pdf(ticket_id: int, *, blob_store: BlobStore | None = None) -> tuple[str, bytes]:
    """Fetch the stored PDF of a ticket.

    Returns:
        The download filename and the PDF bytes.

    Raises:
        TicketNotFoundError: If the ticket does not exist.
        TicketPdfUnavailableError: If the ticket has no stored PDF.
        BlobStoreError: If the download fails.
    """
    ticket = Ticket.objects.filter(pk=ticket_id).first()
    if ticket is None:
        raise TicketNotFoundError(f"Ticket {ticket_id} does not exist.")
    if not ticket.pdf_path:
        raise TicketPdfUnavailableError(f"Ticket {ticket_id} has no PDF.")

    store = blob_store or object_storage.get_blob_store()
    return f"ticket-{ticket.pk}.pdf", store.download(ticket.pdf_path)
