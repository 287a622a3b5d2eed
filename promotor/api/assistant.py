"""FastAPI router for the AI assistant."""

from typing import Annotated

from fastapi import APIRouter, Depends

from promotor.core.dependencies import LLMClient
from promotor.modules.assistant.schemas import ChatReply, ChatRequest, Greeting
from promotor.modules.assistant.service import AssistantService

router = APIRouter(prefix="/assistant", tags=["Assistant"])


def get_assistant_service(llm: LLMClient) -> AssistantService:
    """Build the assistant service."""
    return AssistantService(llm)


Assistant = Annotated[AssistantService, Depends(get_assistant_service)]


@router.get("/greeting", response_model=Greeting, summary="Opening message")
async def greeting(service: Assistant) -> Greeting:
    return service.greeting()


@router.post(
    "/messages",
    response_model=ChatReply,
    summary="Send a message",
    responses={
        422: {"description": "Blank message"},
        502: {"description": "AI service error"},
        503: {"description": "AI service not configured"},
    },
)
async def send_message(data: ChatRequest, service: Assistant) -> ChatReply:
    """
    Answer a message given the conversation so far.

    The server keeps no conversation state; send the full history each time.
    """
    return await service.send_message(data.history, data.message)
