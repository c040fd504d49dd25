from __future__ import annotations

from dataclasses import dataclass

"""RowData model for the case roster importer.

RowData is the RawRow of a single data line: verbatim header -> verbatim cell,
in header order, plus the line number the operator would see in a spreadsheet
viewer and the audit trail of any realignment applied to the line.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single roster line after tokenizing and realignment.

    The row_number is the 1-based physical line of the source file where the
    record starts (header line and any preamble included in the count).
    """
    row_number: int  # Physical line number in the source file
    values: dict[str, str]  # Header -> cell value (header order preserved)
    original_fields: tuple[str, ...] | None = None  # Fields before realignment (audit)
    realigned_by: str | None = None  # Name of the realignment rule applied, if any

    @property
    def realigned(self) -> bool:
        return self.realigned_by is not None
