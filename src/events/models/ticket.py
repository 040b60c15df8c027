from django.db import models
from django.utils import timezone

from common.models import TimeStampedModel
from events.exceptions import TicketAlreadyValidatedError

from .order import Order


class Ticket(TimeStampedModel):
    """One admission unit of a paid order.

    The primary key is allocated by ``events.service.ticket_ids`` rather than
    by the database, so ticket numbers stay sequential across orders.
    """

    id = models.PositiveBigIntegerField(primary_key=True)
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="tickets")
    event_id = models.PositiveBigIntegerField(db_index=True)
    ticket_type_id = models.PositiveBigIntegerField()
    pass_id = models.CharField(max_length=64, unique=True)
    is_validated = models.BooleanField(default=False)
    validation_time = models.DateTimeField(null=True, blank=True)
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.CharField(max_length=255)
    attendee_phone = models.CharField(max_length=50, blank=True, default="")
    pdf_path = models.CharField(max_length=512, null=True, blank=True)

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"Ticket {self.pk} ({self.pass_id})"

    def mark_validated(self) -> None:
        """Record the entry scan. A ticket can only be validated once."""
        if self.is_validated:
            raise TicketAlreadyValidatedError(self)
        self.is_validated = True
        self.validation_time = timezone.now()
        self.save(update_fields=["is_validated", "validation_time", "updated_at"])


class TicketSequence(models.Model):
    """Named counter holding the last issued value."""

    TICKETS = "tickets"

    name = models.CharField(max_length=64, primary_key=True)
    value = models.PositiveBigIntegerField(default=0)

    def __str__(self) -> str:
        return f"{self.name}={self.value}"
