import pytest

from events.models import Order, Ticket, TicketSequence
from events.service.ticket_ids import allocate_ticket_ids, next_ticket_id

pytestmark = pytest.mark.django_db


def test_first_ticket_id_is_one() -> None:
    assert next_ticket_id() == 1
    assert next_ticket_id() == 2
    assert TicketSequence.objects.get(name=TicketSequence.TICKETS).value == 2


def test_ids_strictly_increase() -> None:
    ids = [next_ticket_id() for _ in range(10)]

    assert ids == list(range(1, 11))


def test_counter_is_seeded_from_existing_tickets(paid_order: Order) -> None:
    Ticket.objects.create(
        id=41,
        order=paid_order,
        event_id=5,
        ticket_type_id=2,
        pass_id="EXISTING0041",
        attendee_name="Ada Lovelace",
        attendee_email="ada@example.com",
    )

    assert next_ticket_id() == 42


def test_existing_counter_wins_over_ticket_max() -> None:
    TicketSequence.objects.create(name=TicketSequence.TICKETS, value=100)

    assert next_ticket_id() == 101


def test_block_allocation_is_consecutive() -> None:
    assert list(allocate_ticket_ids(3)) == [1, 2, 3]
    assert next_ticket_id() == 4
    assert list(allocate_ticket_ids(2)) == [5, 6]
    assert TicketSequence.objects.get(name=TicketSequence.TICKETS).value == 6


def test_block_allocation_rejects_empty_blocks() -> None:
    with pytest.raises(ValueError):
        allocate_ticket_ids(0)

    assert not TicketSequence.objects.exists()
