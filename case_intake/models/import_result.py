from __future__ import annotations

from dataclasses import dataclass, field

from .case_record import ParsedCaseRecord
from .team import TeamMemberInfo

"""Import run result models.

ImportResult aggregates one orchestrator run; NewCase is the payload handed to
the case store for a single row.
"""

__all__ = [
    "ImportFailure",
    "ImportResult",
    "NewCase",
]


@dataclass(frozen=True)
class ImportFailure:
    row: int  # Physical line number of the failed row
    error: str


@dataclass(frozen=True)
class ImportResult:
    """Aggregated outcome of one import run.

    A cancelled run is still a valid result: it reflects only the rows that
    completed before the stop was observed.
    """
    success: int
    failed: int
    errors: list[ImportFailure] = field(default_factory=list)
    team_members: list[TeamMemberInfo] = field(default_factory=list)
    unmatched_names: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def attempted(self) -> int:
        return self.success + self.failed


@dataclass(frozen=True)
class NewCase:
    """Everything the case store needs to create one case row."""
    firm_id: str
    client_id: str
    record: ParsedCaseRecord
    limitation_date: str
    notes: tuple[str, ...] = ()
    assigned_person_id: str | None = None
    tags: tuple[str, ...] = ()
    status: str = "Active"  # cases.status default
    stage: str = "Intake"  # cases.stage default

    @property
    def title(self) -> str:
        return self.record.title

    @property
    def date_opened(self) -> str | None:
        # 開始日は名簿に無いので事故日で代用
        return self.record.date_of_loss
