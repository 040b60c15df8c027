"""Sequential ticket number allocation."""

from django.db import transaction
from django.db.models import F, Max

from events.models import Ticket, TicketSequence


@transaction.atomic
def allocate_ticket_ids(count: int) -> range:
    """Allocate a block of consecutive ticket ids.

    Ids start at 1 and strictly increase. The counter row is locked for the
    rest of the surrounding transaction, so concurrent allocators queue up
    instead of handing out the same numbers; callers should allocate as late
    as possible in their transaction. A missing counter is seeded with the
    highest ticket id already stored.

    Raises:
        ValueError: If count is less than 1.
    """
    if count < 1:
        raise ValueError("count must be at least 1.")

    sequence = TicketSequence.objects.select_for_update().filter(name=TicketSequence.TICKETS).first()
    if sequence is None:
        current_max = Ticket.objects.aggregate(current_max=Max("id"))["current_max"] or 0
        sequence, _ = TicketSequence.objects.select_for_update().get_or_create(
            name=TicketSequence.TICKETS, defaults={"value": current_max}
        )

    TicketSequence.objects.filter(pk=sequence.pk).update(value=F("value") + count)
    sequence.refresh_from_db(fields=["value"])
    return range(sequence.value - count + 1, sequence.value + 1)


def next_ticket_id() -> int:
    """Allocate the next ticket id."""
    return allocate_ticket_ids(1)[0]
