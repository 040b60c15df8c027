"""Pass identifiers printed on tickets and scanned at the door.

A pass id is a 12 character, uppercase, URL-safe token built from the current
time and randomness. It is not derived from the ticket it belongs to and is
only unique on a best-effort basis; the unique index on ``Ticket.pass_id`` is
what actually guarantees uniqueness.
"""

import secrets
import string
import time
from urllib.parse import quote, unquote

PASS_ID_LENGTH = 12
RANDOM_PART_LENGTH = 6
BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if number < 0:
        raise ValueError("Only non-negative integers can be encoded.")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def _random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_pass_id(
    event_id: int,
    ticket_id: int,
    ticket_type_id: int | None = None,
    *,
    timestamp_ms: int | None = None,
) -> str:
    """Generate a pass id for a ticket.

    Args:
        event_id: Event the ticket admits to, used only to pad short tokens.
        ticket_id: Ticket number, used only to pad short tokens.
        ticket_type_id: Accepted for call-site symmetry, not used.
        timestamp_ms: Milliseconds since the epoch. Defaults to now.

    Returns:
        The URL-encoded pass id, always ``PASS_ID_LENGTH`` characters long.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000

    token = (to_base36(timestamp_ms) + _random_base36(RANDOM_PART_LENGTH))[:PASS_ID_LENGTH].upper()
    if len(token) < PASS_ID_LENGTH:
        padding = f"{event_id}{ticket_id}"[: PASS_ID_LENGTH - len(token)]
        token += padding.upper()
    if len(token) < PASS_ID_LENGTH:
        token += _random_base36(PASS_ID_LENGTH - len(token)).upper()

    return quote(token, safe="")


def decode_pass_id(pass_id: str) -> str:
    """Return the human-readable form of a pass id."""
    return unquote(pass_id)
