from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..models.config_models import DEFAULT_HEADER_TOKENS

"""Line tokenizer for hand-maintained roster exports.

Splits raw file text into rows and fields:
- leading BOM stripped (Excel "CSV UTF-8" exports carry one)
- blank lines and '#' comment lines skipped
- header = first line containing an identifying token ("client"), falling back
  to the first non-comment line; everything above it is preamble and dropped
- quoted fields keep embedded commas/newlines, doubled quotes are un-escaped;
  a quote only opens a quoted field as the field's first character
- an unterminated quote is closed at end of line instead of failing the file

The tokenizer never raises on malformed content; every line it can see becomes
a row, and structural damage is left to the realigner and validator.
"""

__all__ = [
    "TokenizedRow",
    "TokenizedSheet",
    "parse_line",
    "split_records",
    "locate_header",
    "tokenize",
]

BOM = "\ufeff"
QUOTE = '"'
DELIMITER = ","
COMMENT_MARKER = "#"
# A quoted field may continue on following lines only if its closing quote
# shows up within this many lines; otherwise end-of-line closes it.
MAX_CONTINUATION_LINES = 10


@dataclass(frozen=True)
class TokenizedRow:
    row_number: int  # 1-based physical line where the record starts
    fields: list[str]


@dataclass(frozen=True)
class TokenizedSheet:
    header: list[str]
    rows: list[TokenizedRow] = field(default_factory=list)
    header_row_number: int | None = None
    preamble_lines: int = 0  # Non-blank lines discarded above the header

    @property
    def expected_field_count(self) -> int:
        return len(self.header)


def _scan(line: str, in_quotes: bool = False) -> tuple[list[str], bool]:
    # 引用符はフィールド先頭でのみクォート開始; 途中の " は文字として扱う
    values: list[str] = []
    current: list[str] = []
    at_field_start = not in_quotes
    i = 0
    length = len(line)
    while i < length:
        char = line[i]
        if in_quotes:
            if char == QUOTE:
                if i + 1 < length and line[i + 1] == QUOTE:
                    current.append(QUOTE)
                    i += 2
                    continue
                in_quotes = False
            else:
                current.append(char)
        elif char == QUOTE and at_field_start:
            in_quotes = True
            at_field_start = False
        elif char == DELIMITER:
            values.append("".join(current))
            current = []
            at_field_start = True
        else:
            current.append(char)
            at_field_start = False
        i += 1
    values.append("".join(current))
    return values, in_quotes


def parse_line(line: str) -> list[str]:
    """Split one logical line into fields.

    A ``"`` opens a quoted section only as the first character of a field; a
    stray quote in the middle of a field (``Doe "JJ``) is kept as data. Inside
    a quoted section ``""`` is a literal quote and delimiters are data.
    Reaching the end of the line with a quote still open simply ends the field.
    """
    return _scan(line)[0]


def _opens_quote(line: str) -> bool:
    return _scan(line)[1]


def _closes_quote(line: str) -> bool:
    # 前行から続くクォートがこの行で閉じるか
    return not _scan(line, in_quotes=True)[1]


def split_records(text: str) -> list[tuple[int, list[str]]]:
    """Split file text into (line_number, fields) records.

    Physical lines are joined into one record only when a quoted field is left
    open and a line with the matching closing quote follows within
    MAX_CONTINUATION_LINES. Otherwise the open quote is treated as closed at end
    of line, so a single bad line cannot swallow the rest of the file.
    """
    if text.startswith(BOM):
        text = text[len(BOM):]
    lines = [ln[:-1] if ln.endswith("\r") else ln for ln in text.split("\n")]

    records: list[tuple[int, list[str]]] = []
    i = 0
    total = len(lines)
    while i < total:
        line = lines[i]
        start = i
        if _opens_quote(line):
            limit = min(total, i + 1 + MAX_CONTINUATION_LINES)
            for j in range(i + 1, limit):
                if _closes_quote(lines[j]):
                    line = "\n".join(lines[i:j + 1])
                    i = j
                    break
        records.append((start + 1, parse_line(line)))
        i += 1
    return records


def _is_blank(fields: Sequence[str]) -> bool:
    return all(not f.strip() for f in fields)


def _is_comment(fields: Sequence[str]) -> bool:
    return bool(fields) and fields[0].lstrip().startswith(COMMENT_MARKER)


def locate_header(
    records: Iterable[tuple[int, list[str]]],
    header_tokens: Sequence[str] = DEFAULT_HEADER_TOKENS,
) -> TokenizedSheet:
    """Find the header record and split the remaining records into data rows.

    Parameters
    ----------
    records: (line_number, fields) pairs, from split_records() or a workbook reader
    header_tokens: identifying tokens matched case-insensitively against each line
    """
    content = [(n, f) for n, f in records if not _is_blank(f) and not _is_comment(f)]
    if not content:
        return TokenizedSheet(header=[])

    tokens = [t.lower() for t in header_tokens if t]
    header_pos = 0
    for pos, (_, fields) in enumerate(content):
        joined = DELIMITER.join(fields).lower()
        if any(t in joined for t in tokens):
            header_pos = pos
            break

    header_line, header_fields = content[header_pos]
    header = [h.strip() for h in header_fields]
    rows = [TokenizedRow(row_number=n, fields=f) for n, f in content[header_pos + 1:]]
    return TokenizedSheet(
        header=header,
        rows=rows,
        header_row_number=header_line,
        preamble_lines=header_pos,
    )


def tokenize(text: str, header_tokens: Sequence[str] = DEFAULT_HEADER_TOKENS) -> TokenizedSheet:
    """Tokenize raw roster text into a header and data rows."""
    return locate_header(split_records(text), header_tokens)
