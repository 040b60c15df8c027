import typing as t
from datetime import datetime

from ninja import Schema
from pydantic import Field


class GenerateTicketsPayload(Schema):
    order_id: int | None = Field(None, alias="orderId")


class ValidateTicketPayload(Schema):
    pass_id: str | None = Field(None, alias="passId")


class EnrichedTicketSchema(Schema):
    ticket_id: int
    order_id: int
    event_id: int
    event_title: str
    category: str
    ticket_type: str
    pass_id: str
    is_validated: bool
    validation_time: datetime | None = None
    attendee_name: str
    attendee_email: str
    attendee_phone: str
    pdf_path: str | None = None
    created_at: datetime


class TicketListResponse(Schema):
    success: t.Literal[True] = True
    count: int
    tickets: list[EnrichedTicketSchema]


class ValidatedTicketSchema(Schema):
    ticket_id: int
    pass_id: str
    is_validated: bool
    validation_time: datetime | None = None
    attendee_name: str


class TicketValidationResponse(Schema):
    success: t.Literal[True] = True
    message: str = "Ticket validated successfully"
    ticket: ValidatedTicketSchema


class AlreadyValidatedResponse(Schema):
    success: t.Literal[False] = False
    error: str = "Ticket already validated"
    validation_time: datetime | None = None
