"""Stateless AI assistant for real-estate questions."""

import logging

from promotor.core.exceptions import InvalidInputError
from promotor.services.llm import ChatTurn, GeminiClient
from promotor.services.llm.prompts import ASSISTANT_GREETING, CHAT_SYSTEM_INSTRUCTION

from .schemas import ChatMessage, ChatReply, Greeting

logger = logging.getLogger(__name__)

EMPTY_REPLY = "No pude generar una respuesta."


class AssistantService:
    """Chat with the assistant persona.

    Attributes:
        llm: Client used for the chat model.
    """

    def __init__(self, llm: GeminiClient) -> None:
        """Initialize the assistant.

        Args:
            llm: Gemini client.
        """
        self.llm = llm

    def greeting(self) -> Greeting:
        """Opening message of a new conversation."""
        return Greeting(text=ASSISTANT_GREETING)

    async def send_message(self, history: list[ChatMessage], message: str) -> ChatReply:
        """Send a message in the context of the given history.

        Args:
            history: Previous turns, oldest first.
            message: New user message.

        Returns:
            ChatReply with the answer (a fixed apology when the model is silent).

        Raises:
            InvalidInputError: Blank message.
            LLMConfigurationError: No API key configured.
            LLMServiceError: The model call failed.
        """
        if not message.strip():
            raise InvalidInputError("Message must not be empty", field="message")

        turns = [ChatTurn(role=m.role.value, text=m.text) for m in history]
        response = await self.llm.chat(turns, message, system_instruction=CHAT_SYSTEM_INSTRUCTION)

        text = response.content.strip()
        if not text:
            logger.warning("Chat model returned an empty answer (finish=%s)", response.finish_reason)
            text = EMPTY_REPLY

        return ChatReply(text=text, model=response.model)
