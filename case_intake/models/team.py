from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Staff identity models: roles, extracted team members and directory entries."""

__all__ = [
    "StaffMember",
    "StaffRole",
    "TeamMemberInfo",
]


class StaffRole(Enum):
    """Closed set of firm roles (values match the users_metadata.role check constraint)."""
    LAWYER = "Lawyer"
    BENEFITS_COORDINATOR = "AccidentBenefitsCoordinator"
    LAW_CLERK = "LawClerk"
    LEGAL_ASSISTANT = "LegalAssistant"


@dataclass(frozen=True)
class TeamMemberInfo:
    """A canonicalized person referenced by the roster's assigned-person column.

    Built fresh per run and never persisted directly; it feeds directory matching
    and the enrollment SQL for names the directory does not know.
    """
    name: str  # Display name (clean name of the first occurrence)
    clean_name: str  # Parenthetical annotations stripped
    role: StaffRole
    context: str  # Richest original value seen, e.g. "George (AB ONLY)"
    count: int  # Number of rows referencing this person


@dataclass(frozen=True)
class StaffMember:
    """One active row of the tenant's staff directory snapshot."""
    id: str
    name: str
    role: str | None = None
