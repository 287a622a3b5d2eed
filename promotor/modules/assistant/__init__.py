"""Assistant module: stateless chat with the AI assistant."""

from .schemas import ChatMessage, ChatReply, ChatRequest, Greeting, MessageRole
from .service import AssistantService

__all__ = [
    "AssistantService",
    "ChatMessage",
    "ChatReply",
    "ChatRequest",
    "Greeting",
    "MessageRole",
]
