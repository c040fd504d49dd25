from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""ParsedCaseRecord domain model and its categorical enums.

A ParsedCaseRecord is the normalized, domain-shaped view of one roster line.
Date fields, when present, are canonical ``YYYY-MM-DD`` strings; the raw date
texts are kept alongside so validation messages can quote what the operator typed.
"""

__all__ = [
    "BenefitType",
    "CaseStatus",
    "ParsedCaseRecord",
]


class CaseStatus(Enum):
    """MIG status of a claim (closed set).

    - MIG: Minor Injury Guideline
    - NON_MIG: outside the guideline (fractures etc.)
    - CAT: catastrophic designation
    - SETTLED / TRANSFERRED: file no longer actively managed
    """
    MIG = "MIG"
    NON_MIG = "Non-MIG"
    CAT = "CAT"
    SETTLED = "Settled"
    TRANSFERRED = "Transferred"


class BenefitType(Enum):
    IRB = "IRB"  # Income Replacement Benefit
    NEB = "NEB"  # Non-Earner Benefit
    RTW = "RTW"  # Return to work
    CAREGIVER = "Caregiver"


@dataclass(frozen=True)
class ParsedCaseRecord:
    """Normalized case data mapped from one roster line."""
    client_name: str
    date_of_loss: str | None  # Canonical date, None if the text could not be normalized
    file_number: str | None = None
    assigned_person: str | None = None  # Free text, annotations included ("George (AB ONLY)")
    birth_date: str | None = None
    insurance_company: str | None = None
    policy_number: str | None = None
    claim_number: str | None = None
    adjuster: str | None = None
    status: CaseStatus | None = None
    benefit_type: BenefitType | None = None
    notes: tuple[str, ...] = field(default_factory=tuple)
    date_of_loss_raw: str | None = None  # 元の入力値 (エラーメッセージ用)
    birth_date_raw: str | None = None

    @property
    def title(self) -> str:
        """Case title as shown in the case list: client name and file number."""
        if self.file_number:
            return f"{self.client_name} - {self.file_number}"
        return self.client_name
