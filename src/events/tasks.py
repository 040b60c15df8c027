"""Celery tasks for ticket issuance.

This module contains asynchronous tasks for:
- Generating the tickets of an order once its payment completes
- Regenerating ticket PDFs that failed to render
"""

import typing as t

import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task(name="events.generate_order_tickets")
def generate_order_tickets(order_id: int) -> dict[str, t.Any]:
    """Issue the tickets of a paid order.

    Returns:
        The generation result as a JSON-serializable dict.
    """
    from events.service.ticket_generation import generate_tickets_for_order

    result = generate_tickets_for_order(order_id)
    if not result.success:
        logger.warning(
            "order_ticket_generation_failed",
            order_id=order_id,
            error=result.error,
            error_code=result.error_code,
        )
    return result.model_dump(mode="json")


@shared_task(name="events.regenerate_missing_ticket_pdfs")
def regenerate_missing_ticket_pdfs(order_id: int | None = None, limit: int | None = None) -> dict[str, int]:
    """Render and upload PDFs for tickets that have none."""
    from events.service.ticket_generation import regenerate_missing_pdfs

    stats = regenerate_missing_pdfs(order_id=order_id, limit=limit)
    return {"processed": stats.processed, "regenerated": stats.regenerated, "failed": stats.failed}
