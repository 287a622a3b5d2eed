"""
FastAPI dependencies shared by the routers.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from promotor.modules.documents.storage import LocalFileStore, get_file_store
from promotor.services.llm.client import GeminiClient, get_llm_client

from .database import get_db

# ==================== Database Dependency ====================

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


# ==================== LLM Dependency ====================


def get_llm() -> GeminiClient:
    """
    Dependency providing the shared LLM client.

    Returns:
        GeminiClient: process-wide client instance.
    """
    return get_llm_client()


LLMClient = Annotated[GeminiClient, Depends(get_llm)]


# ==================== File Storage Dependency ====================

FileStore = Annotated[LocalFileStore, Depends(get_file_store)]
