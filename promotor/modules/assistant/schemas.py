"""Pydantic schemas for the AI assistant."""

from enum import StrEnum

from pydantic import Field

from promotor.shared.schemas import BaseSchema


class MessageRole(StrEnum):
    """Speaker of a chat turn."""

    USER = "user"
    MODEL = "model"


class ChatMessage(BaseSchema):
    """One turn of the conversation.

    Attributes:
        role: Who wrote the turn.
        text: Turn text.
    """

    role: MessageRole
    text: str


class ChatRequest(BaseSchema):
    """A new user message plus the conversation so far.

    The assistant keeps no state; the client sends the whole history.
    """

    history: list[ChatMessage] = Field(
        default_factory=list,
        description="Previous turns, oldest first",
    )
    message: str = Field(
        ...,
        max_length=20_000,
        description="New user message",
    )


class ChatReply(BaseSchema):
    """Assistant answer."""

    role: MessageRole = MessageRole.MODEL
    text: str
    model: str | None = None


class Greeting(BaseSchema):
    """Opening message shown before the first turn."""

    role: MessageRole = MessageRole.MODEL
    text: str
