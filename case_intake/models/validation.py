from __future__ import annotations

from dataclasses import dataclass, field

from .case_record import ParsedCaseRecord
from .row_data import RowData
from .team import TeamMemberInfo

"""Validation outcome and parse report models."""

__all__ = [
    "ParseReport",
    "ValidationOutcome",
    "ValidationReport",
]


@dataclass(frozen=True)
class ValidationOutcome:
    """A mapped record plus its verdict.

    ``errors`` is empty for accepted records. ``row_number`` is the physical
    line of the source file, so it matches what the operator counts in a
    spreadsheet viewer.
    """
    row_number: int
    record: ParsedCaseRecord
    errors: tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ValidationReport:
    accepted: list[ValidationOutcome]
    rejected: list[ValidationOutcome]


@dataclass(frozen=True)
class ParseReport:
    """Everything the parsing half of a run produces, before any store access.

    Counts follow the upload screen: ``total_rows`` data lines after the header,
    ``skipped_rows`` lines dropped by the mapper (no client name or no date of
    loss text), the rest split into accepted/rejected.
    """
    header: list[str]
    accepted: list[ValidationOutcome]
    rejected: list[ValidationOutcome]
    skipped_rows: int
    total_rows: int
    team_members: list[TeamMemberInfo] = field(default_factory=list)
    realignments: list[RowData] = field(default_factory=list)  # 補正された行 (監査用)
    header_row_number: int | None = None
    skipped_row_numbers: list[int] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)
