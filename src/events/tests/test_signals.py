import typing as t
from unittest.mock import MagicMock, patch

import pytest

from events.models import Event, Order, Ticket, TicketType
from events.service.ticket_generation import generate_tickets_for_order
from events.tests.conftest import OrderFactory

pytestmark = pytest.mark.django_db


@patch("events.signals.generate_order_tickets.delay")
def test_completing_payment_schedules_ticket_generation(
    mock_delay: MagicMock, pending_order: Order, django_capture_on_commit_callbacks: t.Any
) -> None:
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        pending_order.payment_status = Order.PaymentStatus.COMPLETED
        pending_order.save()

    assert len(callbacks) == 1
    mock_delay.assert_called_once_with(pending_order.pk)


@patch("events.signals.generate_order_tickets.delay")
def test_order_created_as_completed_does_not_schedule(
    mock_delay: MagicMock, make_order: OrderFactory, django_capture_on_commit_callbacks: t.Any
) -> None:
    """Items are added after the order row, so generation at creation would find none."""
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        make_order([(5, 2, 1)], [("Ada", "ada@example.com", "")])

    assert callbacks == []
    mock_delay.assert_not_called()


@patch("events.signals.generate_order_tickets.delay")
def test_saving_a_completed_order_again_does_not_reschedule(
    mock_delay: MagicMock, paid_order: Order, django_capture_on_commit_callbacks: t.Any
) -> None:
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        paid_order.payment_method = "card"
        paid_order.save()

    assert callbacks == []
    mock_delay.assert_not_called()


@patch("events.signals.generate_order_tickets.delay")
def test_non_completed_status_does_not_schedule(
    mock_delay: MagicMock, pending_order: Order, django_capture_on_commit_callbacks: t.Any
) -> None:
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        pending_order.payment_status = Order.PaymentStatus.FAILED
        pending_order.save()

    assert callbacks == []
    mock_delay.assert_not_called()


def test_completing_payment_issues_tickets_end_to_end(
    pending_order: Order, django_capture_on_commit_callbacks: t.Any
) -> None:
    """With eager Celery, the commit hook runs generation in-process."""
    with django_capture_on_commit_callbacks(execute=True):
        pending_order.payment_status = Order.PaymentStatus.COMPLETED
        pending_order.save()

    assert pending_order.tickets.count() == pending_order.total_units


@pytest.mark.django_db(transaction=True)
def test_payment_completed_outside_a_transaction_issues_tickets(
    make_order: OrderFactory, event: Event, standard_ticket_type: TicketType
) -> None:
    """In autocommit mode the commit hook fires on save, after items were added."""
    order = make_order(
        [(event.pk, standard_ticket_type.pk, 2)],
        [("Ada Lovelace", "ada@example.com", ""), ("Alan Turing", "alan@example.com", "")],
        payment_status=Order.PaymentStatus.PENDING,
    )
    assert not Ticket.objects.exists()

    order.payment_status = Order.PaymentStatus.COMPLETED
    order.save()

    assert list(order.tickets.order_by("pk").values_list("attendee_name", flat=True)) == [
        "Ada Lovelace",
        "Alan Turing",
    ]


@pytest.mark.django_db(transaction=True)
def test_order_created_as_completed_is_left_for_explicit_generation(
    make_order: OrderFactory, event: Event, standard_ticket_type: TicketType
) -> None:
    """No task runs before the items exist; the explicit call issues every ticket."""
    with patch("events.signals.generate_order_tickets.delay") as delay:
        order = make_order([(event.pk, standard_ticket_type.pk, 1)], [("Ada Lovelace", "ada@example.com", "")])
    delay.assert_not_called()

    result = generate_tickets_for_order(order.pk)

    assert result.success is True
    assert order.tickets.count() == 1
