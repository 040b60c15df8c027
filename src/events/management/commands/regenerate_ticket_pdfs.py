"""Management command to regenerate PDFs for tickets that have none.

Usage:
    python manage.py regenerate_ticket_pdfs                 # All tickets without a PDF
    python manage.py regenerate_ticket_pdfs --dry-run       # Preview only
    python manage.py regenerate_ticket_pdfs --order 1001    # One order
    python manage.py regenerate_ticket_pdfs --limit 100     # Process only 100 tickets
    python manage.py regenerate_ticket_pdfs --async         # Queue a Celery task instead
"""

import typing as t

from django.core.management.base import BaseCommand, CommandParser

from events.service.ticket_generation import regenerate_missing_pdfs, tickets_missing_pdf
from events.tasks import regenerate_missing_ticket_pdfs


class Command(BaseCommand):
    """Management command to regenerate missing ticket PDFs."""

    help = "Render and upload PDFs for tickets whose PDF is missing"

    def add_arguments(self, parser: CommandParser) -> None:
        """Add command-line arguments."""
        parser.add_argument(
            "--order",
            type=int,
            help="Only process the tickets of this order",
        )
        parser.add_argument(
            "--limit",
            type=int,
            help="Maximum number of tickets to process",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show how many tickets would be processed without rendering anything",
        )
        parser.add_argument(
            "--async",
            action="store_true",
            dest="run_async",
            help="Queue a Celery task instead of running in this process",
        )

    def handle(self, *args: t.Any, **options: t.Any) -> None:
        """Execute the command."""
        order_id = options.get("order")
        limit = options.get("limit")

        count = tickets_missing_pdf(order_id).count()
        effective_count = min(count, limit) if limit is not None else count
        limit_msg = f" (limited to {effective_count})" if limit is not None else ""
        self.stdout.write(f"Found {count} tickets without a PDF{limit_msg}")

        if options.get("dry_run"):
            self.stdout.write(self.style.WARNING("DRY RUN MODE - no PDFs were generated"))
            return

        if not effective_count:
            return

        if options.get("run_async"):
            regenerate_missing_ticket_pdfs.delay(order_id=order_id, limit=limit)
            self.stdout.write(self.style.SUCCESS("Queued PDF regeneration task"))
            return

        stats = regenerate_missing_pdfs(order_id=order_id, limit=limit)
        self.stdout.write(f"Processed: {stats.processed}")
        self.stdout.write(self.style.SUCCESS(f"Regenerated: {stats.regenerated}"))
        if stats.failed:
            self.stdout.write(self.style.ERROR(f"Failed: {stats.failed}"))
