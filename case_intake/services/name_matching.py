from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..models.team import StaffMember, TeamMemberInfo
from .team_extractor import name_tokens

"""Two-phase name matching between the roster and the staff directory.

Phase 1 builds immutable indexes: a StaffIndex from the directory snapshot,
then a RosterResolver that resolves every extracted roster member against it
exactly once. Phase 2 folds individual assigned-person values over the
resolver: the value is first mapped onto its roster member (same exact /
shared-token rule as extraction), then onto that member's staff id.

Both indexes are built per run from a fresh snapshot and never mutated.
"""

__all__ = [
    "RosterResolver",
    "StaffIndex",
]


def _first_last(tokens: Sequence[str]) -> frozenset[str]:
    if len(tokens) > 1:
        return frozenset((tokens[0], tokens[-1]))
    return frozenset(tokens)


@dataclass(frozen=True)
class StaffIndex:
    """Exact and first/last-name lookup over a directory snapshot."""
    exact: dict[str, str]
    token_entries: tuple[tuple[frozenset[str], str], ...]

    @classmethod
    def build(cls, staff: Iterable[StaffMember]) -> StaffIndex:
        exact: dict[str, str] = {}
        entries: list[tuple[frozenset[str], str]] = []
        for member in staff:
            full = " ".join(name_tokens(member.name))
            if not full:
                continue
            exact.setdefault(full, member.id)
            entries.append((_first_last(full.split()), member.id))
        return cls(exact=exact, token_entries=tuple(entries))

    def resolve(self, clean_name: str) -> str | None:
        tokens = name_tokens(clean_name)
        if not tokens:
            return None
        hit = self.exact.get(" ".join(tokens))
        if hit is not None:
            return hit
        wanted = set(tokens)
        for entry_tokens, staff_id in self.token_entries:
            if entry_tokens & wanted:
                return staff_id
        return None

    def __len__(self) -> int:
        return len(self.exact)


@dataclass(frozen=True)
class _ResolvedMember:
    member: TeamMemberInfo
    tokens: frozenset[str]
    staff_id: str | None


@dataclass(frozen=True)
class RosterResolver:
    """Roster members resolved once against a StaffIndex."""
    index: StaffIndex
    members: tuple[_ResolvedMember, ...]

    @classmethod
    def build(cls, index: StaffIndex, roster: Iterable[TeamMemberInfo]) -> RosterResolver:
        resolved = tuple(
            _ResolvedMember(
                member=m,
                tokens=frozenset(name_tokens(m.clean_name)),
                staff_id=index.resolve(m.clean_name),
            )
            for m in roster
        )
        return cls(index=index, members=resolved)

    @property
    def unmatched_names(self) -> list[str]:
        """Display names of roster members with no directory match, roster order."""
        return [r.member.name for r in self.members if r.staff_id is None]

    def _find(self, clean_name: str) -> _ResolvedMember | None:
        lowered = clean_name.lower()
        wanted = set(name_tokens(clean_name))
        for r in self.members:
            if r.member.clean_name.lower() == lowered:
                return r
        for r in self.members:
            if wanted & r.tokens:
                return r
        return None

    def member_for(self, clean_name: str) -> TeamMemberInfo | None:
        found = self._find(clean_name)
        return found.member if found is not None else None

    def resolve(self, clean_name: str) -> str | None:
        """Staff id for one assigned-person value (annotations already stripped)."""
        found = self._find(clean_name)
        if found is not None:
            return found.staff_id
        # 名簿外の名前 (抽出対象外の行) はディレクトリに直接問い合わせる
        return self.index.resolve(clean_name)
