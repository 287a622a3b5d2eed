"""
Name matching between extracted document fields and stored records.

A candidate matches when its name contains the extracted name or the
extracted name contains it, ignoring case. Candidates are scanned in the
order given and the first hit wins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, TypeVar

from .schemas import DocumentAnalysis


class Named(Protocol):
    """Anything with a ``name``."""

    name: str


N = TypeVar("N", bound=Named)


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def find_best_match(name: str | None, candidates: Iterable[N]) -> N | None:
    """
    First candidate whose name overlaps the extracted name.

    Args:
        name: Extracted name (may be missing)
        candidates: Records in their stored order

    Returns:
        The matching candidate, or None when the name is blank or nothing
        matches. Candidates with blank names never match.
    """
    needle = _normalize(name)
    if not needle:
        return None

    for candidate in candidates:
        candidate_name = _normalize(candidate.name)
        if not candidate_name:
            continue
        if needle in candidate_name or candidate_name in needle:
            return candidate

    return None


@dataclass(frozen=True, slots=True)
class Association:
    """Project and contact detected for a document."""

    project: Named | None = None
    stakeholder: Named | None = None


def auto_associate(
    analysis: DocumentAnalysis,
    projects: Iterable[Named],
    stakeholders: Iterable[Named],
) -> Association:
    """Match the extracted project and provider names against stored records."""
    return Association(
        project=find_best_match(analysis.project_name, projects),
        stakeholder=find_best_match(analysis.provider_name, stakeholders),
    )
