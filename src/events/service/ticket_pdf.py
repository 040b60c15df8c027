"""Ticket PDF rendering.

Ticket data is drawn on top of a fixed PDF template fetched from object
storage. Offsets below are measured from the top edge of the first page; PyMuPDF
places the origin in the top-left corner, so they map to y coordinates directly.
"""

import time
import typing as t
from dataclasses import dataclass

import pymupdf
import structlog
from django.conf import settings

from common.object_storage import BlobStore
from events.exceptions import TicketPdfError
from events.service.pass_ids import decode_pass_id

if t.TYPE_CHECKING:
    from events.models import Event, Ticket

logger = structlog.get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

REGULAR_FONT = "helv"  # Helvetica
BOLD_FONT = "hebo"  # Helvetica-Bold
TEXT_COLOR = (0, 0, 0)

POLICY_LINE_WIDTH = 60
POLICY_MAX_LINES = 5
POLICY_LINE_STEP = 15

MISSING_VALUE = "N/A"


@dataclass(frozen=True)
class TextSlot:
    x: float
    offset: float
    font_size: float
    font_name: str = REGULAR_FONT


TICKET_TYPE_SLOT = TextSlot(x=130, offset=291, font_size=10)
ATTENDEE_NAME_SLOT = TextSlot(x=90, offset=621, font_size=9)
ATTENDEE_EMAIL_SLOT = TextSlot(x=90, offset=639, font_size=9)
ATTENDEE_PHONE_SLOT = TextSlot(x=90, offset=657, font_size=9)
POLICY_SLOT = TextSlot(x=50, offset=350, font_size=9)
PASS_ID_LABEL_SLOT = TextSlot(x=390, offset=765, font_size=10, font_name=BOLD_FONT)
PASS_ID_SLOT = TextSlot(x=390, offset=790, font_size=14)


def wrap_text(text: str, max_chars: int) -> list[str]:
    """Greedy word wrap.

    Words are collected into a line until the next word, plus the separating
    space, would push it past ``max_chars``. Whitespace runs are normalized to
    single spaces. A word longer than ``max_chars`` is split into chunks of
    ``max_chars`` so no line ever exceeds the limit.

    Args:
        text: Text to wrap.
        max_chars: Maximum line length, at least 1.

    Returns:
        The wrapped lines. Empty text yields no lines.
    """
    if max_chars < 1:
        raise ValueError("max_chars must be at least 1.")

    lines: list[str] = []
    current = ""
    for word in text.split():
        while len(word) > max_chars:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:max_chars])
            word = word[max_chars:]
        if not word:
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= max_chars:
            current = f"{current} {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def ticket_pdf_path(ticket_id: int, timestamp_ms: int | None = None) -> str:
    """Storage path for a ticket PDF. The timestamp keeps re-renders apart."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{settings.TICKET_PDF_PREFIX}/ticket-{ticket_id}-{timestamp_ms}.pdf"


class TicketPdfRenderer:
    """Render ticket PDFs from the default template.

    The template is downloaded on first use and reused for every ticket
    rendered by the same instance. Create one renderer per batch so template
    updates are picked up by the next batch.
    """

    def __init__(self, blob_store: BlobStore, template_path: str | None = None) -> None:
        self.blob_store = blob_store
        self.template_path = template_path or settings.TICKET_PDF_TEMPLATE_PATH
        self._template: bytes | None = None

    def get_template(self) -> bytes:
        """Return the template bytes, downloading them once.

        Raises:
            BlobStoreError: If the template cannot be downloaded.
        """
        if self._template is None:
            self._template = self.blob_store.download(self.template_path)
            logger.debug("ticket_pdf_template_loaded", path=self.template_path, size=len(self._template))
        return self._template

    def render(
        self,
        ticket: "Ticket",
        event: "Event",
        ticket_type_name: str,
        category_name: str,
    ) -> bytes:
        """Render the PDF for one ticket.

        Args:
            ticket: The ticket, saved or not. Attendee fields and pass id are read.
            event: The event, for its policy text.
            ticket_type_name: Display name of the ticket type.
            category_name: Display name of the ticket category.

        Returns:
            The PDF document as bytes.

        Raises:
            BlobStoreError: If the template cannot be downloaded.
            TicketPdfError: If the template is unusable or rendering fails.
        """
        template = self.get_template()
        try:
            with pymupdf.open(stream=template, filetype="pdf") as doc:
                if doc.page_count == 0:
                    raise TicketPdfError(f"Template {self.template_path} has no pages.")
                page = doc[0]

                heading = f"{category_name or 'Category'} - {ticket_type_name or 'Ticket'}"
                self._draw(page, TICKET_TYPE_SLOT, heading)
                self._draw(page, ATTENDEE_NAME_SLOT, ticket.attendee_name or MISSING_VALUE)
                self._draw(page, ATTENDEE_EMAIL_SLOT, ticket.attendee_email or MISSING_VALUE)
                self._draw(page, ATTENDEE_PHONE_SLOT, ticket.attendee_phone or MISSING_VALUE)

                policy_lines = wrap_text(event.event_policy or "", POLICY_LINE_WIDTH)[:POLICY_MAX_LINES]
                for index, line in enumerate(policy_lines):
                    self._draw(page, POLICY_SLOT, line, extra_offset=index * POLICY_LINE_STEP)

                self._draw(page, PASS_ID_LABEL_SLOT, "Pass ID:")
                self._draw(page, PASS_ID_SLOT, decode_pass_id(ticket.pass_id))

                return doc.tobytes()
        except TicketPdfError:
            raise
        except Exception as e:
            raise TicketPdfError(f"Could not render PDF for ticket {ticket.pk}: {e}") from e

    @staticmethod
    def _draw(page: pymupdf.Page, slot: TextSlot, text: str, extra_offset: float = 0) -> None:
        page.insert_text(
            pymupdf.Point(slot.x, slot.offset + extra_offset),
            text,
            fontsize=slot.font_size,
            fontname=slot.font_name,
            color=TEXT_COLOR,
        )
