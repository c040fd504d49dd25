from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from ..models.case_record import BenefitType, CaseStatus, ParsedCaseRecord
from ..models.row_data import RowData
from .dates import normalize_date

"""Field mapper: arbitrary roster headers -> ParsedCaseRecord.

Headers are matched to canonical fields by comparing spellings with
punctuation, underscores and whitespace removed and case folded, so
"FILE NO#", "file_no" and "File No." all land on ``file_number``.

Rows with no client name or no date-of-loss text are dropped here (counted as
skipped by the caller); a date-of-loss that is present but unreadable is kept
as None so the validator can report it against the row.
"""

__all__ = [
    "FIELD_ALIASES",
    "REQUIRED_FIELDS",
    "build_row",
    "clean_client_name",
    "map_row",
    "merge_aliases",
    "normalize_benefit_type",
    "normalize_header",
    "normalize_status",
]

FIELD_ALIASES: dict[str, list[str]] = {
    "client_name": ["CLIENT NAME", "client_name", "client", "name"],
    "file_number": ["FILE NO#", "file_no", "file_number", "file"],
    "assigned_person": ["Lawyer", "attorney", "assigned_lawyer", "assigned_to"],
    "birth_date": ["DOB", "date_of_birth", "birthdate"],
    "date_of_loss": ["Date Of Loss", "dol", "accident_date"],
    "insurance_company": ["Insurance Co.", "insurance", "insurer"],
    "policy_number": ["Policy No.", "policy_number", "policy"],
    "claim_number": ["Claim No.", "claim_number", "claim"],
    "adjuster": ["Adjuster", "adjuster_name"],
    "status": ["MIG Status", "mig"],
    "benefit_type": ["IRB /NEB", "benefit_type", "benefits"],
    "notes": ["Notes", "note", "comments"],
}
REQUIRED_FIELDS = ("client_name", "date_of_loss")

ADJUSTER_DETAIL_THRESHOLD = 50  # 長い担当者欄は連絡先入り -> notes にも残す

_HEADER_STRIP = re.compile(r"[\W_]+", re.UNICODE)

# Ordered rule tables: first matching pattern wins. A None target means
# "recognized, but not a status".
STATUS_RULES: list[tuple[re.Pattern[str], CaseStatus | None]] = [
    (re.compile(r"non[-\s]?retainer"), None),
    (re.compile(r"non[-\s]?mig|fracture"), CaseStatus.NON_MIG),
    (re.compile(r"\bcat\b|catastrophic"), CaseStatus.CAT),
    (re.compile(r"settled"), CaseStatus.SETTLED),
    (re.compile(r"transferred"), CaseStatus.TRANSFERRED),
    (re.compile(r"mig"), CaseStatus.MIG),
]
BENEFIT_RULES: list[tuple[re.Pattern[str], BenefitType]] = [
    (re.compile(r"irb"), BenefitType.IRB),
    (re.compile(r"neb|non[-\s]?earner"), BenefitType.NEB),
    (re.compile(r"rtw|return to work"), BenefitType.RTW),
    (re.compile(r"caregiver"), BenefitType.CAREGIVER),
]


def normalize_header(text: str) -> str:
    return _HEADER_STRIP.sub("", text).casefold()


def merge_aliases(extra: Mapping[str, Sequence[str]] | None) -> dict[str, list[str]]:
    """Built-in aliases with configured spellings tried first."""
    merged = {name: list(spellings) for name, spellings in FIELD_ALIASES.items()}
    for name, spellings in (extra or {}).items():
        merged[name] = [*spellings, *merged.get(name, [])]
    return merged


def build_row(
    row_number: int,
    header: Sequence[str],
    fields: Sequence[str],
    original_fields: Sequence[str] | None = None,
    realigned_by: str | None = None,
) -> RowData:
    """Map fields onto header positions. Missing trailing cells become ''."""
    values: dict[str, str] = {}
    for idx, col in enumerate(header):
        if not col or col in values:
            continue
        values[col] = fields[idx].strip() if idx < len(fields) else ""
    return RowData(
        row_number=row_number,
        values=values,
        original_fields=tuple(original_fields) if original_fields is not None else None,
        realigned_by=realigned_by,
    )


def clean_client_name(name: str) -> str:
    cleaned = re.sub(r"\s+", " ", name.strip())
    cleaned = re.sub(r",\s*,", ",", cleaned)
    return cleaned.strip(" ,")


def normalize_status(text: str | None) -> CaseStatus | None:
    if not text:
        return None
    lowered = text.strip().lower()
    for pattern, status in STATUS_RULES:
        if pattern.search(lowered):
            return status
    return None


def normalize_benefit_type(text: str | None) -> BenefitType | None:
    if not text:
        return None
    lowered = text.strip().lower()
    for pattern, benefit in BENEFIT_RULES:
        if pattern.search(lowered):
            return benefit
    return None


class _RowView:
    """Alias lookup over one row (header normalization done once per row)."""

    def __init__(self, values: Mapping[str, str], aliases: Mapping[str, Sequence[str]]) -> None:
        self._values = values
        self._aliases = aliases
        self._normalized = [(normalize_header(h), h) for h in values]
        self.claimed: set[str] = set()
        for spellings in aliases.values():
            wanted = {normalize_header(s) for s in spellings}
            self.claimed.update(h for norm, h in self._normalized if norm in wanted)

    def get(self, field_name: str) -> str:
        for spelling in self._aliases.get(field_name, []):
            target = normalize_header(spelling)
            for norm, header in self._normalized:
                if norm == target and self._values[header].strip():
                    return self._values[header].strip()
        return ""

    def unclaimed(self) -> list[tuple[str, str]]:
        return [
            (h, v.strip()) for h, v in self._values.items()
            if h not in self.claimed and v.strip()
        ]


def map_row(
    row: RowData,
    aliases: Mapping[str, Sequence[str]] | None = None,
    keep_unmapped_columns: bool = True,
) -> ParsedCaseRecord | None:
    """Map a RowData onto the case schema; None when a required field is absent."""
    view = _RowView(row.values, aliases if aliases is not None else FIELD_ALIASES)

    client_name = clean_client_name(view.get("client_name"))
    dol_raw = view.get("date_of_loss")
    if not client_name or not dol_raw:
        return None

    dob_raw = view.get("birth_date")
    birth_date = normalize_date(dob_raw)
    benefit_raw = view.get("benefit_type")
    benefit_type = normalize_benefit_type(benefit_raw)
    adjuster = view.get("adjuster")

    notes: list[str] = []
    extra_notes = view.get("notes")
    if extra_notes:
        notes.append(extra_notes)
    if benefit_raw and benefit_type is None:
        notes.append(f"Benefit Info: {benefit_raw}")
    if adjuster and len(adjuster) > ADJUSTER_DETAIL_THRESHOLD:
        notes.append(f"Adjuster Details: {adjuster}")
    if dob_raw and birth_date is None:
        notes.append(f"DOB (unrecognized): {dob_raw}")
    if keep_unmapped_columns:
        notes.extend(f"{header}: {value}" for header, value in view.unclaimed())

    return ParsedCaseRecord(
        client_name=client_name,
        date_of_loss=normalize_date(dol_raw),
        file_number=view.get("file_number") or None,
        assigned_person=view.get("assigned_person") or None,
        birth_date=birth_date,
        insurance_company=view.get("insurance_company") or None,
        policy_number=view.get("policy_number") or None,
        claim_number=view.get("claim_number") or None,
        adjuster=adjuster or None,
        status=normalize_status(view.get("status")),
        benefit_type=benefit_type,
        notes=tuple(notes),
        date_of_loss_raw=dol_raw,
        birth_date_raw=dob_raw or None,
    )
