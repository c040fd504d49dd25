from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models.config_models import ParsingConfig
from ..models.case_record import ParsedCaseRecord
from ..models.row_data import RowData
from ..models.validation import ParseReport
from ..parsing.mapper import build_row, map_row, merge_aliases
from ..parsing.realigner import ColumnLayout, realign
from ..parsing.tokenizer import TokenizedSheet, locate_header, split_records
from .team_extractor import extract_team_members
from .validator import partition

logger = logging.getLogger(__name__)

"""Parsing half of an import run: text -> ParseReport.

tokenize -> realign -> map -> validate -> extract team. No store access and
no operator-facing output; the CLI decides what to print.
"""

__all__ = [
    "parse_roster",
    "parse_roster_rows",
    "parse_sheet",
]


def parse_sheet(sheet: TokenizedSheet, settings: ParsingConfig | None = None) -> ParseReport:
    """Run realignment, mapping, validation and team extraction over a tokenized sheet."""
    settings = settings or ParsingConfig()
    header = sheet.header
    if not header:
        return ParseReport(header=[], accepted=[], rejected=[], skipped_rows=0, total_rows=0)

    layout = ColumnLayout.from_header(header, settings.assigned_person_keywords)
    aliases = merge_aliases(settings.column_aliases)

    realignments: list[RowData] = []
    mapped: list[tuple[int, ParsedCaseRecord]] = []
    skipped: list[int] = []
    for tokenized in sheet.rows:
        fixed = realign(tokenized.fields, layout)
        row = build_row(
            tokenized.row_number,
            header,
            fixed.fields,
            original_fields=fixed.original if fixed.changed else None,
            realigned_by=fixed.rule,
        )
        if row.realigned:
            realignments.append(row)
            logger.debug("row %d realigned (%s)", row.row_number, fixed.rule)

        record = map_row(row, aliases, settings.keep_unmapped_columns)
        if record is None:
            skipped.append(row.row_number)
            continue
        mapped.append((row.row_number, record))

    report = partition(mapped)
    team = extract_team_members(record for _, record in mapped)
    logger.debug(
        "parsed rows=%d accepted=%d rejected=%d skipped=%d realigned=%d team=%d",
        len(sheet.rows), len(report.accepted), len(report.rejected), len(skipped),
        len(realignments), len(team),
    )
    return ParseReport(
        header=list(header),
        accepted=report.accepted,
        rejected=report.rejected,
        skipped_rows=len(skipped),
        total_rows=len(sheet.rows),
        team_members=team,
        realignments=realignments,
        header_row_number=sheet.header_row_number,
        skipped_row_numbers=skipped,
    )


def parse_roster(text: str, settings: ParsingConfig | None = None) -> ParseReport:
    """Parse a CSV roster export held in memory."""
    settings = settings or ParsingConfig()
    return parse_roster_rows(split_records(text), settings)


def parse_roster_rows(
    records: Iterable[tuple[int, list[str]]],
    settings: ParsingConfig | None = None,
) -> ParseReport:
    """Parse pre-split (line_number, fields) records, e.g. from a workbook."""
    settings = settings or ParsingConfig()
    return parse_sheet(locate_header(records, settings.header_tokens), settings)
