from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..models.config_models import DEFAULT_ASSIGNED_PERSON_KEYWORDS

"""Row realigner: repairs column drift from an unquoted comma in the first column.

Roster exports keep client names as "Last, First" without quoting, which splits
one logical field in two and shifts every later column right by one. The
repair is a narrow positional heuristic for exactly that pattern, not a general
CSV dialect fixer. Rules, evaluated in order, at most one merge per row:

1. assigned-person column holds a file number -> shifted, merge fields 0 and 1
2. file-number column does not hold a file number but the next field does
   -> shifted, merge fields 0 and 1
3. still over-length and field 1 is not a file number -> merge fields 0 and 1

Rows that are still over-length afterwards pass through unchanged; the extra
cells are mapped positionally and usually surface as validation errors.
"""

__all__ = [
    "FILE_NUMBER_PATTERN",
    "ColumnLayout",
    "Realignment",
    "looks_like_file_number",
    "realign",
]

# File numbers: 2+ uppercase letters followed by digits (MAT11343, MAMU002, AVGI100)
FILE_NUMBER_PATTERN = re.compile(r"^[A-Z]{2,}\d+")

RULE_ASSIGNED_PERSON_SHIFT = "assigned_person_shift"
RULE_FILE_NUMBER_SHIFT = "file_number_shift"
RULE_LAST_RESORT = "last_resort_merge"


def looks_like_file_number(value: str | None) -> bool:
    return bool(value) and FILE_NUMBER_PATTERN.match(value.strip()) is not None


@dataclass(frozen=True)
class ColumnLayout:
    """Header positions the realigner keys on (-1 when the header lacks the column)."""
    expected_count: int
    assigned_person_index: int = -1
    file_number_index: int = -1

    @classmethod
    def from_header(
        cls,
        header: Sequence[str],
        assigned_person_keywords: Sequence[str] = DEFAULT_ASSIGNED_PERSON_KEYWORDS,
    ) -> ColumnLayout:
        assigned_idx = -1
        file_idx = -1
        for idx, raw in enumerate(header):
            h = raw.lower()
            if assigned_idx < 0 and any(k in h for k in assigned_person_keywords):
                assigned_idx = idx
            if file_idx < 0 and "file" in h and ("no" in h or "number" in h):
                file_idx = idx
        return cls(
            expected_count=len(header),
            assigned_person_index=assigned_idx,
            file_number_index=file_idx,
        )


@dataclass(frozen=True)
class Realignment:
    fields: list[str]
    original: tuple[str, ...]
    rule: str | None = None  # None = row left untouched

    @property
    def changed(self) -> bool:
        return self.rule is not None


def _merge_first_two(fields: list[str]) -> list[str]:
    merged = f"{fields[0].strip()}, {fields[1].strip()}"
    return [merged, *fields[2:]]


def _value_at(fields: Sequence[str], idx: int) -> str:
    if 0 <= idx < len(fields):
        return fields[idx].strip()
    return ""


def _pick_rule(fields: list[str], layout: ColumnLayout) -> str | None:
    first, second = fields[0].strip(), fields[1].strip()
    if not first or not second:
        # 空セルを結合すると別の列ずれを隠してしまう
        return None

    if layout.assigned_person_index >= 0 and looks_like_file_number(
        _value_at(fields, layout.assigned_person_index)
    ):
        return RULE_ASSIGNED_PERSON_SHIFT

    fidx = layout.file_number_index
    if (
        fidx >= 0
        and fidx + 1 < len(fields)
        and not looks_like_file_number(_value_at(fields, fidx))
        and looks_like_file_number(_value_at(fields, fidx + 1))
    ):
        return RULE_FILE_NUMBER_SHIFT

    if not looks_like_file_number(second):
        return RULE_LAST_RESORT
    return None


def realign(fields: Sequence[str], layout: ColumnLayout) -> Realignment:
    """Restore the header's field count for one over-length row.

    Rows whose field count does not exceed the header's are returned unchanged.
    The pre-realignment fields are always kept in ``original`` for audit.
    """
    original = tuple(fields)
    current = list(fields)
    if len(current) <= layout.expected_count or len(current) < 2:
        return Realignment(fields=current, original=original)

    rule = _pick_rule(current, layout)
    if rule is None:
        return Realignment(fields=current, original=original)
    return Realignment(fields=_merge_first_two(current), original=original, rule=rule)
