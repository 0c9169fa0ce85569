"""Response envelopes shared by every profile endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """One rejected request field."""

    field: str
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error_code: str = Field(examples=["USERNAME_TAKEN"])
    message: str = Field(examples=["Username is already taken."])
    details: Any | None = None


class MessageResponse(BaseModel):
    """Acknowledgement carrying only a human readable message."""

    message: str = Field(examples=["Profile deleted successfully"])
