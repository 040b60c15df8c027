import typing as t

if t.TYPE_CHECKING:
    from events.models import Ticket


class TicketNotFoundError(Exception):
    """Raised when no ticket matches the given pass id or ticket id."""


class TicketAlreadyValidatedError(Exception):
    """Raised when a ticket that was already scanned is validated again."""

    def __init__(self, ticket: "Ticket") -> None:
        super().__init__(f"Ticket {ticket.pk} was already validated at {ticket.validation_time}.")
        self.ticket = ticket


class TicketPdfUnavailableError(Exception):
    """Raised when a ticket has no stored PDF."""


class TicketPdfError(Exception):
    """Raised when a ticket PDF cannot be rendered."""
