from .event import DEFAULT_CATEGORY_NAME, DEFAULT_TICKET_TYPE_NAME, Event, TicketCategory, TicketType
from .order import Order, OrderAttendee, OrderItem
from .ticket import Ticket, TicketSequence

__all__ = [
    # Events
    "DEFAULT_CATEGORY_NAME",
    "DEFAULT_TICKET_TYPE_NAME",
    "Event",
    "TicketCategory",
    "TicketType",
    # Orders
    "Order",
    "OrderAttendee",
    "OrderItem",
    # Tickets
    "Ticket",
    "TicketSequence",
]
