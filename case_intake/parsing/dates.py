from __future__ import annotations

import re
from datetime import date

"""Date normalizer for roster date cells.

Returns a canonical ``YYYY-MM-DD`` string or None ("could not determine").
Dialects, tried in this order:

  (a) placeholder text ("TBD", "waiting on retainer", "settled", ...) -> None
  (b) D[D]-MMM-YY      17-Jul-96     (also the "Aprl" typo seen in exports)
  (c) D[D]-MM-YY       23-12-15
  (d) YYYY-MM-DD       1966-08-03    (passed through unchanged)
  (e) D[D]-MM-YYYY     17-12-1971
  (f) MMM D[D], YYYY   Feb 6, 2014

Two-digit years pivot at 50: 00-49 -> 2000s, 50-99 -> 1900s. Anything else
returns None; it is up to the caller to decide whether a missing date is an error.
"""

__all__ = [
    "PLACEHOLDER_PATTERN",
    "CANONICAL_DATE",
    "is_canonical_date",
    "is_valid_canonical_date",
    "normalize_date",
    "expand_two_digit_year",
]

PLACEHOLDER_PATTERN = re.compile(
    r"tbd|waiting|settled|transferred|non[-\s]?retainer",
    re.IGNORECASE,
)
CANONICAL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_DAY_MON_YY = re.compile(r"^(\d{1,2})-([A-Za-z]{3,4})-(\d{2})$")
_DAY_MM_YY = re.compile(r"^(\d{1,2})-(\d{2})-(\d{2})$")
_DAY_MM_YYYY = re.compile(r"^(\d{1,2})-(\d{2})-(\d{4})$")
_MON_DAY_YYYY = re.compile(r"^([A-Za-z]{3})\s+(\d{1,2}),\s*(\d{4})$")

MONTHS: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
# 4-letter abbreviations only accepted for known typos in the day-month-year dialect
MONTH_TYPOS: dict[str, int] = {"aprl": 4}

PIVOT_YEAR = 50


def expand_two_digit_year(yy: str | int) -> int:
    value = int(yy)
    return 2000 + value if value < PIVOT_YEAR else 1900 + value


def _format(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def is_canonical_date(value: str | None) -> bool:
    return bool(value) and CANONICAL_DATE.match(value) is not None


def is_valid_canonical_date(value: str | None) -> bool:
    """Canonical shape and an existing calendar day."""
    if not is_canonical_date(value):
        return False
    try:
        date.fromisoformat(value)  # type: ignore[arg-type]
    except ValueError:
        return False
    return True


def normalize_date(value: str | None) -> str | None:
    """Normalize a roster date cell to ``YYYY-MM-DD`` (None if not recognizable)."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None

    if PLACEHOLDER_PATTERN.search(cleaned):
        return None

    m = _DAY_MON_YY.match(cleaned)
    if m:
        day, mon, yy = m.groups()
        key = mon.lower()
        month = MONTHS.get(key) if len(key) == 3 else MONTH_TYPOS.get(key)
        if month is None:
            return None
        return _format(expand_two_digit_year(yy), month, int(day))

    m = _DAY_MM_YY.match(cleaned)
    if m:
        day, month, yy = m.groups()
        return _format(expand_two_digit_year(yy), int(month), int(day))

    if CANONICAL_DATE.match(cleaned):
        return cleaned

    m = _DAY_MM_YYYY.match(cleaned)
    if m:
        day, month, year = m.groups()
        return _format(int(year), int(month), int(day))

    m = _MON_DAY_YYYY.match(cleaned)
    if m:
        mon, day, year = m.groups()
        month = MONTHS.get(mon.lower())
        if month is None:
            return None
        return _format(int(year), month, int(day))

    return None
