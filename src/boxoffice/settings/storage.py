"""Object storage settings.

Ticket PDFs and the PDF template live in a bucket exposed through a
Supabase Storage compatible HTTP API.
"""

from decouple import config

OBJECT_STORAGE_URL = config("OBJECT_STORAGE_URL", default="")
OBJECT_STORAGE_SERVICE_KEY = config("OBJECT_STORAGE_SERVICE_KEY", default="")
OBJECT_STORAGE_BUCKET = config("OBJECT_STORAGE_BUCKET", default="assets")
OBJECT_STORAGE_TIMEOUT = config("OBJECT_STORAGE_TIMEOUT", default=30.0, cast=float)
OBJECT_STORAGE_CACHE_CONTROL = config("OBJECT_STORAGE_CACHE_CONTROL", default="3600")

TICKET_PDF_TEMPLATE_PATH = config(
    "TICKET_PDF_TEMPLATE_PATH", default="ticket-type-pdf-templates/default-template.pdf"
)
TICKET_PDF_PREFIX = config("TICKET_PDF_PREFIX", default="ticket-pdfs")

# Seconds to wait before retrying PDFs that failed during ticket generation.
TICKET_PDF_REPAIR_DELAY = config("TICKET_PDF_REPAIR_DELAY", default=300, cast=int)
