from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..models.case_record import ParsedCaseRecord
from ..models.team import StaffRole, TeamMemberInfo

"""Team extractor: recover the firm's staff roster from the assigned-person column.

Runs over every mapped record, rejected ones included. Values such as
"George (AB ONLY)" carry the role as an inline annotation; the annotation is
stripped for identity and kept as context for role inference.

Identity: exact case-insensitive clean-name match, else the first previously
seen person sharing any whitespace token (first or last name). No scoring.
"""

__all__ = [
    "ROLE_RULES",
    "clean_person_name",
    "extract_team_members",
    "infer_role",
    "name_tokens",
]

_PARENTHETICAL = re.compile(r"\s*\(.*?\)\s*")
_WS = re.compile(r"\s+")

# (markers, role): first rule whose marker occurs in the lowercased context wins.
ROLE_RULES: list[tuple[tuple[str, ...], StaffRole]] = [
    (("ab only", "ab-only", "(ab)", "paralegal"), StaffRole.BENEFITS_COORDINATOR),
    (("clerk",), StaffRole.LAW_CLERK),
    (("assistant",), StaffRole.LEGAL_ASSISTANT),
]
DEFAULT_ROLE = StaffRole.LAWYER


def clean_person_name(text: str) -> str:
    """Strip parenthetical annotations and collapse whitespace."""
    return _WS.sub(" ", _PARENTHETICAL.sub(" ", text)).strip()


def name_tokens(clean_name: str) -> list[str]:
    return clean_name.lower().split()


def infer_role(context: str) -> StaffRole:
    lowered = context.lower()
    for markers, role in ROLE_RULES:
        if any(m in lowered for m in markers):
            return role
    return DEFAULT_ROLE


@dataclass
class _Tally:
    name: str
    clean_name: str
    role: StaffRole
    context: str
    count: int
    tokens: frozenset[str]

    def freeze(self) -> TeamMemberInfo:
        return TeamMemberInfo(
            name=self.name,
            clean_name=self.clean_name,
            role=self.role,
            context=self.context,
            count=self.count,
        )


def _find_existing(tallies: Sequence[_Tally], clean: str) -> _Tally | None:
    lowered = clean.lower()
    tokens = set(name_tokens(clean))
    for tally in tallies:
        if tally.clean_name.lower() == lowered:
            return tally
        if tokens & tally.tokens:
            return tally
    return None


def extract_team_members(
    records: Iterable[ParsedCaseRecord | str | None],
) -> list[TeamMemberInfo]:
    """Build the run's roster, most frequently referenced people first.

    Accepts mapped records or bare assigned-person strings. When a repeat
    occurrence carries a longer (richer) context, that context replaces the
    stored one and the role is re-inferred from it.
    """
    tallies: list[_Tally] = []
    for item in records:
        value = item.assigned_person if isinstance(item, ParsedCaseRecord) else item
        if not value:
            continue
        original = value.strip()
        clean = clean_person_name(original)
        if not clean:
            continue

        existing = _find_existing(tallies, clean)
        if existing is None:
            tallies.append(_Tally(
                name=clean,
                clean_name=clean,
                role=infer_role(original),
                context=original,
                count=1,
                tokens=frozenset(name_tokens(clean)),
            ))
            continue

        existing.count += 1
        if len(original) > len(existing.context):
            existing.context = original
            existing.role = infer_role(original)

    # sorted() は安定ソート: 同数なら初出順
    ordered = sorted(tallies, key=lambda t: t.count, reverse=True)
    return [t.freeze() for t in ordered]
