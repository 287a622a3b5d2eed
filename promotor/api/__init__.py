"""API routers package."""

from promotor.api import (
    assistant,
    dashboard,
    data,
    documents,
    feasibility,
    projects,
    session,
    stakeholders,
    system,
)

__all__ = [
    "assistant",
    "dashboard",
    "data",
    "documents",
    "feasibility",
    "projects",
    "session",
    "stakeholders",
    "system",
]
