from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel

DEFAULT_TICKET_TYPE_NAME = "Standard Ticket"
DEFAULT_CATEGORY_NAME = "General"


class Event(TimeStampedModel):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    venue_name = models.CharField(max_length=255, blank=True, default="")
    start_date = models.DateTimeField(null=True, blank=True)
    event_policy = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title

    def find_ticket_type(self, ticket_type_id: int) -> "tuple[TicketType, TicketCategory] | None":
        """Find a ticket type of this event, searching the catalog in category order."""
        for category in self.categories.all():
            for ticket_type in category.ticket_types.all():
                if ticket_type.pk == ticket_type_id:
                    return ticket_type, category
        return None

    def resolve_ticket_type_names(self, ticket_type_id: int) -> tuple[str, str]:
        """Return the (ticket type name, category name) printed on a ticket.

        Unknown ids resolve to the default names so a missing catalog entry
        never blocks ticket issuance.
        """
        match = self.find_ticket_type(ticket_type_id)
        if match is None:
            return DEFAULT_TICKET_TYPE_NAME, DEFAULT_CATEGORY_NAME
        ticket_type, category = match
        return ticket_type.name, category.name


class TicketCategory(TimeStampedModel):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="categories")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["pk"]
        verbose_name_plural = "ticket categories"

    def __str__(self) -> str:
        return f"{self.event.title} - {self.name}"


class TicketType(TimeStampedModel):
    category = models.ForeignKey(TicketCategory, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    quantity_available = models.PositiveIntegerField(default=0)
    max_per_order = models.PositiveIntegerField(default=10, validators=[MinValueValidator(1)])
    # Stored for organizers; rendering always uses the default template.
    pdf_template = models.CharField(max_length=512, blank=True, default="")

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return self.name
