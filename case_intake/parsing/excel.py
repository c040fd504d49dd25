from __future__ import annotations

import zipfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

"""Excel workbook source for roster exports.

Some firms hand over the roster as the original .xlsx instead of a CSV export.
The workbook is read raw (no header inference, no NA conversion) and every cell
is rendered as the text a CSV export would have contained, so the same header
location, realignment and mapping steps apply unchanged.
"""

__all__ = [
    "SourceReadError",
    "read_roster_workbook",
    "cell_to_text",
]


class SourceReadError(Exception):
    """Raised when a roster file cannot be opened or decoded."""


def cell_to_text(value: Any) -> str:
    """Render one workbook cell as CSV-export text."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # 数値セルのファイル番号などが "123.0" にならないように
        return str(int(value))
    return str(value)


def read_roster_workbook(path: Path, sheet: str | None = None) -> list[tuple[int, list[str]]]:
    """Read one sheet as (line_number, fields) records.

    Parameters
    ----------
    path: workbook path (.xlsx)
    sheet: sheet name; None reads the first sheet

    Line numbers are the 1-based spreadsheet row numbers, matching what the
    operator sees in Excel.
    """
    try:
        df = pd.read_excel(
            path,
            sheet_name=sheet if sheet is not None else 0,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[],
        )
    except (OSError, ValueError, KeyError, zipfile.BadZipFile) as e:
        raise SourceReadError(f"cannot read workbook {path}: {e}") from e

    records: list[tuple[int, list[str]]] = []
    for idx, raw in enumerate(df.itertuples(index=False, name=None)):
        fields = [cell_to_text(v) for v in raw]
        # 末尾の空セルは CSV 出力には現れないので落とす
        while fields and not fields[-1].strip():
            fields.pop()
        records.append((idx + 1, fields))
    return records
