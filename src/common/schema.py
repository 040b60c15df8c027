"""Common schemas for the API."""

import typing as t

from ninja import Schema


class VersionResponse(Schema):
    version: str


class ResponseOk(Schema):
    status: t.Literal["ok"] = "ok"


class ErrorResponse(Schema):
    success: t.Literal[False] = False
    error: str
    message: str | None = None


class ValidationErrorResponse(Schema):
    success: t.Literal[False] = False
    error: str = "Validation failed"
    errors: dict[str, str | list[str]]
