import typing as t
from decimal import Decimal

import pytest
from django.contrib.auth.models import AbstractUser

from events.models import Event, Order, OrderAttendee, OrderItem, TicketCategory, TicketType

EVENT_POLICY = (
    "No refunds after the event starts. Please bring a valid photo ID matching the name on this ticket. "
    "Doors open one hour before the show. Re-entry is not permitted once you leave the venue. "
    "Outside food and drinks are not allowed."
)


class OrderFactory(t.Protocol):
    def __call__(
        self,
        items: list[tuple[int, int, int]],
        attendees: list[tuple[str, str, str]] | None = None,
        payment_status: str = ...,
        pk: int | None = None,
    ) -> Order: ...


@pytest.fixture
def buyer(django_user_model: type[AbstractUser]) -> AbstractUser:
    return django_user_model.objects.create_user(username="buyer", email="buyer@example.com", password="pass")


@pytest.fixture
def other_buyer(django_user_model: type[AbstractUser]) -> AbstractUser:
    return django_user_model.objects.create_user(username="other", email="other@example.com", password="pass")


@pytest.fixture
def event() -> Event:
    return Event.objects.create(id=5, title="Summer Festival", venue_name="Main Park", event_policy=EVENT_POLICY)


@pytest.fixture
def general_category(event: Event) -> TicketCategory:
    return TicketCategory.objects.create(event=event, name="General Admission")


@pytest.fixture
def vip_category(event: Event) -> TicketCategory:
    return TicketCategory.objects.create(event=event, name="VIP")


@pytest.fixture
def standard_ticket_type(general_category: TicketCategory) -> TicketType:
    return TicketType.objects.create(
        id=2, category=general_category, name="Early Bird", price=Decimal("25.00"), quantity_available=100
    )


@pytest.fixture
def vip_ticket_type(vip_category: TicketCategory) -> TicketType:
    return TicketType.objects.create(
        id=3, category=vip_category, name="Backstage", price=Decimal("120.00"), quantity_available=10
    )


@pytest.fixture
def make_order(buyer: AbstractUser) -> OrderFactory:
    """Create an order from (event id, ticket type id, quantity) items and attendee tuples."""

    def _make_order(
        items: list[tuple[int, int, int]],
        attendees: list[tuple[str, str, str]] | None = None,
        payment_status: str = Order.PaymentStatus.COMPLETED,
        pk: int | None = None,
    ) -> Order:
        order = Order.objects.create(id=pk, user=buyer, payment_status=payment_status)
        for event_id, ticket_type_id, quantity in items:
            OrderItem.objects.create(
                order=order,
                event_id=event_id,
                ticket_type_id=ticket_type_id,
                quantity=quantity,
                unit_price=Decimal("25.00"),
            )
        for position, (name, email, phone) in enumerate(attendees or []):
            OrderAttendee.objects.create(
                order=order, position=position, attendee_name=name, attendee_email=email, attendee_phone=phone
            )
        return order

    return _make_order


@pytest.fixture
def paid_order(make_order: OrderFactory, event: Event, standard_ticket_type: TicketType) -> Order:
    """Order 1001: two Early Bird tickets for event 5, both attendees named."""
    return make_order(
        [(event.pk, standard_ticket_type.pk, 2)],
        attendees=[
            ("Ada Lovelace", "ada@example.com", "+44 20 7946 0000"),
            ("Alan Turing", "alan@example.com", "+44 20 7946 0001"),
        ],
        pk=1001,
    )


@pytest.fixture
def pending_order(make_order: OrderFactory, event: Event, standard_ticket_type: TicketType) -> Order:
    return make_order(
        [(event.pk, standard_ticket_type.pk, 1)],
        attendees=[("Grace Hopper", "grace@example.com", "")],
        payment_status=Order.PaymentStatus.PENDING,
        pk=1002,
    )
