"""Ticket issuance for paid orders.

``generate_tickets_for_order`` expands a completed order into one ticket per
admission unit: every unit gets a sequential ticket id, a pass id, a PDF
rendered from the default template and uploaded to object storage, and a
``Ticket`` row.

Issuing runs in two phases:

1. Inside one transaction holding a row lock on the order, the ticket rows are
   created. Two concurrent calls for the same order cannot both issue tickets:
   the second one waits, then finds the tickets of the first and returns them.
   No storage call happens while the lock is held.
2. After commit, every ticket's PDF is rendered and uploaded. A failure here
   leaves ``pdf_path`` empty and queues a repair task.

Per-ticket degradations (missing event, failed PDF) do not stop the run; they
are reported in ``TicketGenerationResult.warnings``.
"""

import typing as t
from dataclasses import dataclass
from enum import StrEnum

import structlog
from django.conf import settings
from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone
from pydantic import BaseModel, Field

from common import object_storage
from common.object_storage import BlobStore
from events.models import Event, Order, OrderAttendee, OrderItem, Ticket
from events.service.pass_ids import generate_pass_id
from events.service.ticket_ids import allocate_ticket_ids
from events.service.ticket_pdf import PDF_CONTENT_TYPE, TicketPdfRenderer, ticket_pdf_path
from events.tasks import regenerate_missing_ticket_pdfs

logger = structlog.get_logger(__name__)

MAX_PASS_ID_ATTEMPTS = 5


class GenerationErrorCode(StrEnum):
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"
    NO_TICKETS_GENERATED = "no_tickets_generated"
    STORAGE_ERROR = "storage_error"


class GeneratedTicket(BaseModel):
    ticket_id: int
    pass_id: str
    attendee_name: str
    pdf_path: str | None = None


class TicketGenerationResult(BaseModel):
    """Outcome of a ticket generation run."""

    success: bool
    message: str | None = None
    error: str | None = None
    error_code: GenerationErrorCode | None = None
    order_id: int | None = None
    tickets: list[GeneratedTicket] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    already_processed: bool = False


@dataclass(frozen=True)
class AttendeeDetails:
    name: str
    email: str
    phone: str


PLACEHOLDER_ATTENDEE = AttendeeDetails(name="Guest", email="guest@example.com", phone="N/A")


class PassIdCollisionError(Exception):
    """Raised when no unused pass id could be generated."""


def generate_tickets_for_order(order_id: int | None, *, blob_store: BlobStore | None = None) -> TicketGenerationResult:
    """Issue the tickets of a paid order.

    Safe to call repeatedly: once an order has tickets, later calls return
    them unchanged.

    Args:
        order_id: The order to issue tickets for.
        blob_store: Storage for the template and the rendered PDFs. Defaults to
            the configured object storage.

    Returns:
        The result. Failures are returned, not raised.
    """
    if not order_id:
        return _failure(
            GenerationErrorCode.INVALID_INPUT,
            error="Order ID is required",
            message="Order ID parameter is missing",
        )

    events: dict[int, Event | None] = {}
    try:
        result, issued = _issue_tickets(order_id, events)
    except Exception as e:
        logger.exception("ticket_generation_failed", order_id=order_id)
        return _failure(
            GenerationErrorCode.STORAGE_ERROR,
            error="Failed to generate tickets",
            message=str(e),
            order_id=order_id,
        )
    if not issued:
        return result

    # The tickets are committed; from here on failures only cost PDFs.
    try:
        failures = store_ticket_pdfs(issued, blob_store, events)
    except Exception as e:
        logger.exception("ticket_pdf_batch_failed", order_id=result.order_id)
        failures = {ticket.pk: str(e) for ticket in issued if not ticket.pdf_path}

    for ticket_id, error in failures.items():
        result.warnings.append(f"PDF generation failed for ticket {ticket_id}: {error}")
    if failures:
        _schedule_pdf_repair(result.order_id)  # type: ignore[arg-type]

    result.tickets = [_summary(ticket) for ticket in issued]
    logger.info(
        "tickets_generated",
        order_id=result.order_id,
        ticket_count=len(issued),
        first_ticket_id=issued[0].pk,
        last_ticket_id=issued[-1].pk,
        warning_count=len(result.warnings),
    )
    return result


@transaction.atomic
def _issue_tickets(order_id: int, events: dict[int, Event | None]) -> tuple[TicketGenerationResult, list[Ticket]]:
    """Create the ticket rows of an order without PDFs.

    Returns the result so far and the tickets created by this call, which is
    empty when the call failed or the order already had tickets.
    """
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        return _failure(
            GenerationErrorCode.NOT_FOUND,
            error="Order not found",
            message=f"Order with ID {order_id} does not exist",
            order_id=order_id,
        ), []

    if not order.is_paid:
        logger.info("ticket_generation_payment_incomplete", order_id=order.pk, payment_status=order.payment_status)
        return _failure(
            GenerationErrorCode.PRECONDITION_FAILED,
            error="Payment not completed",
            message=f"Order payment status is {order.payment_status}, must be completed",
            order_id=order.pk,
        ), []

    existing = list(order.tickets.order_by("pk"))
    if existing:
        logger.info("ticket_generation_already_processed", order_id=order.pk, ticket_count=len(existing))
        return TicketGenerationResult(
            success=True,
            message=f"Tickets already exist for order {order.pk}",
            order_id=order.pk,
            tickets=[_summary(ticket) for ticket in existing],
            already_processed=True,
        ), []

    attendees = list(order.attendees.all())
    warnings: list[str] = []
    units: list[tuple[OrderItem, AttendeeDetails]] = []
    attendee_index = 0

    for item in order.items.all():
        if _load_event(item.event_id, events) is None:
            logger.warning(
                "ticket_generation_event_missing", order_id=order.pk, event_id=item.event_id, quantity=item.quantity
            )
            warnings.append(f"Event {item.event_id} not found; skipped {item.quantity} ticket(s)")
            # Keep later items aligned with their attendee entries.
            attendee_index += item.quantity
            continue

        for _ in range(item.quantity):
            units.append((item, _attendee_at(attendees, attendee_index)))
            attendee_index += 1

    if not units:
        return _failure(
            GenerationErrorCode.NO_TICKETS_GENERATED,
            error="No tickets generated",
            message="Failed to generate any tickets for this order",
            order_id=order.pk,
            warnings=warnings,
        ), []

    # Locks the ticket counter until commit, so only inserts follow.
    ticket_ids = allocate_ticket_ids(len(units))
    issued = []
    for (item, attendee), ticket_id in zip(units, ticket_ids):
        ticket = _build_ticket(order, item, attendee, ticket_id)
        ticket.save(force_insert=True)
        issued.append(ticket)

    return TicketGenerationResult(
        success=True,
        message=f"Successfully generated {len(issued)} ticket(s)",
        order_id=order.pk,
        warnings=warnings,
    ), issued


def _schedule_pdf_repair(order_id: int) -> None:
    def schedule() -> None:
        regenerate_missing_ticket_pdfs.apply_async(
            kwargs={"order_id": order_id}, countdown=settings.TICKET_PDF_REPAIR_DELAY
        )

    transaction.on_commit(schedule)
    logger.info("ticket_pdf_repair_scheduled", order_id=order_id, delay=settings.TICKET_PDF_REPAIR_DELAY)


def _build_ticket(order: Order, item: OrderItem, attendee: AttendeeDetails, ticket_id: int) -> Ticket:
    return Ticket(
        id=ticket_id,
        order=order,
        event_id=item.event_id,
        ticket_type_id=item.ticket_type_id,
        pass_id=_unused_pass_id(item.event_id, ticket_id, item.ticket_type_id),
        attendee_name=attendee.name,
        attendee_email=attendee.email,
        attendee_phone=attendee.phone,
    )


def _unused_pass_id(event_id: int, ticket_id: int, ticket_type_id: int) -> str:
    for attempt in range(1, MAX_PASS_ID_ATTEMPTS + 1):
        pass_id = generate_pass_id(event_id, ticket_id, ticket_type_id)
        if not Ticket.objects.filter(pass_id=pass_id).exists():
            return pass_id
        logger.warning("pass_id_collision", ticket_id=ticket_id, attempt=attempt)
    raise PassIdCollisionError(f"Could not generate an unused pass id for ticket {ticket_id}.")


def _attendee_at(attendees: list[OrderAttendee], index: int) -> AttendeeDetails:
    if index >= len(attendees):
        return PLACEHOLDER_ATTENDEE
    attendee = attendees[index]
    # Tickets require a name and an email; blank ones take the placeholder value.
    return AttendeeDetails(
        name=attendee.attendee_name.strip() or PLACEHOLDER_ATTENDEE.name,
        email=attendee.attendee_email.strip() or PLACEHOLDER_ATTENDEE.email,
        phone=attendee.attendee_phone,
    )


def _load_event(event_id: int, cache: dict[int, Event | None]) -> Event | None:
    if event_id not in cache:
        cache[event_id] = Event.objects.prefetch_related("categories__ticket_types").filter(pk=event_id).first()
    return cache[event_id]


def _summary(ticket: Ticket) -> GeneratedTicket:
    return GeneratedTicket(
        ticket_id=ticket.pk,
        pass_id=ticket.pass_id,
        attendee_name=ticket.attendee_name,
        pdf_path=ticket.pdf_path,
    )


def _failure(code: GenerationErrorCode, **kwargs: t.Any) -> TicketGenerationResult:
    return TicketGenerationResult(success=False, error_code=code, **kwargs)


def render_and_store_pdf(
    renderer: TicketPdfRenderer,
    blob_store: BlobStore,
    ticket: Ticket,
    event: Event,
    ticket_type_name: str,
    category_name: str,
) -> str:
    """Render a ticket PDF and upload it.

    Returns:
        The storage path of the uploaded PDF.
    """
    pdf_bytes = renderer.render(ticket, event, ticket_type_name, category_name)
    return blob_store.upload(ticket_pdf_path(ticket.pk), pdf_bytes, PDF_CONTENT_TYPE)


def store_ticket_pdfs(
    tickets: t.Iterable[Ticket],
    blob_store: BlobStore | None = None,
    events: dict[int, Event | None] | None = None,
) -> dict[int, str]:
    """Render, upload and record the PDF of each ticket.

    Each stored path is saved on the ticket row right away, so a later failure
    does not lose earlier uploads.

    Args:
        tickets: Committed tickets to render.
        blob_store: Storage for the template and the PDFs.
        events: Event cache keyed by id, shared with the caller.

    Returns:
        Error messages keyed by the id of each ticket that got no PDF.
    """
    store = blob_store or object_storage.get_blob_store()
    renderer = TicketPdfRenderer(store)
    events = {} if events is None else events
    failures: dict[int, str] = {}

    for ticket in tickets:
        event = _load_event(ticket.event_id, events)
        if event is None:
            logger.warning("ticket_pdf_event_missing", ticket_id=ticket.pk, event_id=ticket.event_id)
            failures[ticket.pk] = f"Event {ticket.event_id} not found"
            continue

        ticket_type_name, category_name = event.resolve_ticket_type_names(ticket.ticket_type_id)
        try:
            path = render_and_store_pdf(renderer, store, ticket, event, ticket_type_name, category_name)
        except Exception as e:
            logger.warning("ticket_pdf_generation_failed", ticket_id=ticket.pk, exc_info=True)
            failures[ticket.pk] = str(e)
            continue

        ticket.pdf_path = path
        Ticket.objects.filter(pk=ticket.pk).update(pdf_path=path, updated_at=timezone.now())

    return failures


@dataclass
class PdfRegenerationStats:
    processed: int = 0
    regenerated: int = 0
    failed: int = 0


def tickets_missing_pdf(order_id: int | None = None) -> QuerySet[Ticket]:
    """Tickets whose PDF was never stored, oldest first."""
    qs = Ticket.objects.filter(Q(pdf_path__isnull=True) | Q(pdf_path=""))
    if order_id is not None:
        qs = qs.filter(order_id=order_id)
    return qs.order_by("pk")


def regenerate_missing_pdfs(
    *,
    order_id: int | None = None,
    limit: int | None = None,
    blob_store: BlobStore | None = None,
) -> PdfRegenerationStats:
    """Render and upload PDFs for tickets that have none.

    Failures are logged and counted; the remaining tickets are still processed.

    Args:
        order_id: Only repair the tickets of this order.
        limit: Process at most this many tickets.
        blob_store: Storage for the template and the PDFs.

    Returns:
        Counts of processed, regenerated and failed tickets.
    """
    qs = tickets_missing_pdf(order_id)
    if limit is not None:
        qs = qs[:limit]
    tickets = list(qs)

    failures = store_ticket_pdfs(tickets, blob_store)
    stats = PdfRegenerationStats(
        processed=len(tickets),
        regenerated=len(tickets) - len(failures),
        failed=len(failures),
    )
    logger.info(
        "ticket_pdf_regeneration_finished",
        order_id=order_id,
        processed=stats.processed,
        regenerated=stats.regenerated,
        failed=stats.failed,
    )
    return stats
