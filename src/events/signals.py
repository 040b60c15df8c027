# src/events/signals.py

import typing as t

import structlog
from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from events.models import Order
from events.tasks import generate_order_tickets

logger = structlog.get_logger(__name__)


@receiver(pre_save, sender=Order)
def capture_previous_payment_status(sender: type[Order], instance: Order, **kwargs: t.Any) -> None:
    """Remember the stored payment status so post_save can detect a transition."""
    if instance.pk is None:
        instance._previous_payment_status = None  # type: ignore[attr-defined]
        return
    instance._previous_payment_status = (  # type: ignore[attr-defined]
        Order.objects.filter(pk=instance.pk).values_list("payment_status", flat=True).first()
    )


@receiver(post_save, sender=Order)
def handle_order_payment_completed(sender: type[Order], instance: Order, created: bool, **kwargs: t.Any) -> None:
    """Schedule ticket generation once a stored order becomes paid.

    Only a status change of an existing row counts: an order saved as
    completed on creation has no items yet, so its tickets are issued through
    the API. The task is queued after the surrounding transaction commits, so
    the worker always sees the completed status. Generation is idempotent, so
    a redelivered task issues nothing new.
    """
    if created:
        return

    previous_status = getattr(instance, "_previous_payment_status", None)
    if instance.payment_status != Order.PaymentStatus.COMPLETED or previous_status == Order.PaymentStatus.COMPLETED:
        return

    order_id = instance.pk

    def schedule_generation() -> None:
        generate_order_tickets.delay(order_id)

    transaction.on_commit(schedule_generation)
    logger.info("ticket_generation_scheduled", order_id=order_id, previous_status=previous_status)
