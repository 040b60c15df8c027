from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from common.models import TimeStampedModel


class Order(TimeStampedModel):
    class PaymentStatus(models.TextChoices):
        PENDING = "pending"
        COMPLETED = "completed"
        FAILED = "failed"
        REFUNDED = "refunded"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="orders")
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )
    payment_method = models.CharField(max_length=50, blank=True, default="")
    transaction_id = models.CharField(max_length=255, blank=True, default="")
    additional_fees = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.payment_status})"

    @property
    def is_paid(self) -> bool:
        return self.payment_status == self.PaymentStatus.COMPLETED

    @property
    def total_amount(self) -> Decimal:
        subtotal = sum((item.unit_price * item.quantity for item in self.items.all()), Decimal("0"))
        return subtotal + self.additional_fees

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self.items.all())


class OrderItem(models.Model):
    """A line of an order.

    Event and ticket type are referenced by id only: an item keeps describing
    the purchase even if the catalog entry it points at is removed later.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    event_id = models.PositiveBigIntegerField(db_index=True)
    ticket_type_id = models.PositiveBigIntegerField()
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])

    class Meta:
        ordering = ["pk"]

    def __str__(self) -> str:
        return f"{self.quantity} x ticket type {self.ticket_type_id} (event {self.event_id})"


class OrderAttendee(models.Model):
    """Contact details for one ticket unit.

    Positions are 0-based and follow the expansion of the order items'
    quantities, in item order.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="attendees")
    position = models.PositiveIntegerField()
    ticket_type_id = models.PositiveBigIntegerField(null=True, blank=True)
    attendee_name = models.CharField(max_length=255)
    attendee_email = models.EmailField()
    attendee_phone = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["order", "position"], name="unique_attendee_position_per_order"),
        ]

    def __str__(self) -> str:
        return f"{self.attendee_name} <{self.attendee_email}>"
