from __future__ import annotations

from collections.abc import Iterable

from ..models.case_record import ParsedCaseRecord
from ..models.validation import ValidationOutcome, ValidationReport
from ..parsing.dates import is_canonical_date, is_valid_canonical_date

"""Record validator.

Checks structural well-formedness only (required fields present, dates in
canonical form); it does not judge whether the case data is plausible.
Every violated rule is reported, not just the first. Validation failures are
returned, never raised or logged.
"""

__all__ = [
    "partition",
    "validate_record",
]


def _date_errors(label: str, value: str) -> list[str]:
    if not is_canonical_date(value):
        return [f"Invalid {label} format: {value} (expected YYYY-MM-DD)"]
    if not is_valid_canonical_date(value):
        return [f"Invalid {label}: {value} is not a calendar date"]
    return []


def validate_record(record: ParsedCaseRecord) -> list[str]:
    """Return every rule the record violates (empty list = accepted)."""
    errors: list[str] = []

    if not record.client_name or not record.client_name.strip():
        errors.append("Client name is required")

    if record.date_of_loss is None:
        if record.date_of_loss_raw:
            errors.append(f"Date of loss is required (could not read '{record.date_of_loss_raw}')")
        else:
            errors.append("Date of loss is required")
    else:
        errors.extend(_date_errors("date of loss", record.date_of_loss))

    if record.birth_date is not None:
        errors.extend(_date_errors("date of birth", record.birth_date))

    return errors


def partition(rows: Iterable[tuple[int, ParsedCaseRecord]]) -> ValidationReport:
    """Split (row_number, record) pairs into accepted and rejected outcomes."""
    accepted: list[ValidationOutcome] = []
    rejected: list[ValidationOutcome] = []
    for row_number, record in rows:
        errors = validate_record(record)
        outcome = ValidationOutcome(row_number=row_number, record=record, errors=tuple(errors))
        if errors:
            rejected.append(outcome)
        else:
            accepted.append(outcome)
    return ValidationReport(accepted=accepted, rejected=rejected)
