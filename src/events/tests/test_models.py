import pytest
from django.utils import timezone

from events.exceptions import TicketAlreadyValidatedError
from events.models import Event, Order, Ticket, TicketType

pytestmark = pytest.mark.django_db


def _ticket(order: Order) -> Ticket:
    return Ticket.objects.create(
        id=1,
        order=order,
        event_id=5,
        ticket_type_id=2,
        pass_id="PASS00000001",
        attendee_name="Ada Lovelace",
        attendee_email="ada@example.com",
    )


def test_mark_validated_sets_flag_and_time(paid_order: Order) -> None:
    ticket = _ticket(paid_order)
    before = timezone.now()

    ticket.mark_validated()

    ticket.refresh_from_db()
    assert ticket.is_validated is True
    assert ticket.validation_time is not None
    assert ticket.validation_time >= before


def test_mark_validated_twice_raises_and_keeps_first_time(paid_order: Order) -> None:
    ticket = _ticket(paid_order)
    ticket.mark_validated()
    first_time = ticket.validation_time

    with pytest.raises(TicketAlreadyValidatedError) as exc_info:
        ticket.mark_validated()

    assert exc_info.value.ticket is ticket
    ticket.refresh_from_db()
    assert ticket.is_validated is True
    assert ticket.validation_time == first_time


def test_resolve_ticket_type_names(event: Event, standard_ticket_type: TicketType, vip_ticket_type: TicketType) -> None:
    assert event.resolve_ticket_type_names(standard_ticket_type.pk) == ("Early Bird", "General Admission")
    assert event.resolve_ticket_type_names(vip_ticket_type.pk) == ("Backstage", "VIP")


def test_resolve_unknown_ticket_type_falls_back_to_defaults(event: Event, standard_ticket_type: TicketType) -> None:
    assert event.resolve_ticket_type_names(999) == ("Standard Ticket", "General")
    assert event.find_ticket_type(999) is None


def test_order_totals(paid_order: Order) -> None:
    assert paid_order.is_paid is True
    assert paid_order.total_units == 2
    assert str(paid_order.total_amount) == "50.00"
