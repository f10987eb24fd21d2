"""Pydantic schemas for the coach chat endpoint."""
from pydantic import Field, field_validator

from schemas.base import CamelModel


class ChatMessage(CamelModel):
    """A prior turn in the conversation."""

    role: str
    content: str


class ChatRequest(CamelModel):
    """A new user message plus optional prior turns."""

    message: str | None = Field(default=None, validate_default=True)
    history: list[ChatMessage] = Field(default_factory=list)

    @field_validator("message")
    @classmethod
    def message_must_not_be_blank(cls, value: str | None) -> str:
        if not value or not value.strip():
            raise ValueError("Message is required.")
        return value.strip()


class ChatResponse(CamelModel):
    """The coach's reply."""

    reply: str
