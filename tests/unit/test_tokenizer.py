from __future__ import annotations

from case_intake.parsing.tokenizer import (
    MAX_CONTINUATION_LINES,
    locate_header,
    parse_line,
    split_records,
    tokenize,
)

"""Unit tests for the line tokenizer."""


def test_parse_line_plain_fields():
    assert parse_line("a,b,,c") == ["a", "b", "", "c"]


def test_parse_line_quoted_delimiter_and_escaped_quote():
    assert parse_line('"Doe, Jane","say ""hi""",x') == ["Doe, Jane", 'say "hi"', "x"]


def test_parse_line_unterminated_quote_closes_at_end_of_line():
    assert parse_line('a,"open, still open') == ["a", "open, still open"]


def test_split_records_strips_bom_and_crlf():
    records = split_records("\ufeffClient,DOL\r\nDoe,2020-01-01\r\n")
    assert records[0] == (1, ["Client", "DOL"])
    assert records[1] == (2, ["Doe", "2020-01-01"])


def test_split_records_joins_multiline_quoted_field():
    text = 'Client,Notes\nDoe,"first line\nsecond line"\nRoe,x\n'
    records = split_records(text)
    assert records[1] == (2, ["Doe", "first line\nsecond line"])
    # line numbers keep counting physical lines
    assert records[2] == (4, ["Roe", "x"])


def test_split_records_unclosed_quote_beyond_window_does_not_swallow_file():
    lines = ['Client,Notes', 'Doe,"never closed']
    lines += [f"Row{i},x" for i in range(MAX_CONTINUATION_LINES + 2)]
    lines.append('Late,"x')
    records = split_records("\n".join(lines))
    assert records[1] == (2, ["Doe", "never closed"])
    assert records[2] == (3, ["Row0", "x"])


def test_split_records_stray_quotes_inside_fields_stay_on_their_line():
    text = (
        "CLIENT NAME,FILE NO#,Lawyer,Date Of Loss\n"
        'Doe "JJ,LL1,John Smith,17-Jul-96\n'
        "Roe,LL2,John Smith,17-Jul-96\n"
        "Poe,LL3,John Smith,17-Jul-96\n"
        'Moe "MM,LL4,John Smith,17-Jul-96\n'
    )
    records = split_records(text)
    assert [n for n, _ in records[:5]] == [1, 2, 3, 4, 5]
    assert records[1] == (2, ['Doe "JJ', "LL1", "John Smith", "17-Jul-96"])
    assert records[4] == (5, ['Moe "MM', "LL4", "John Smith", "17-Jul-96"])


def test_parse_line_quote_inside_field_is_data():
    assert parse_line('Doe "JJ,LL1') == ['Doe "JJ', "LL1"]
    assert parse_line('"Doe, Jane" (AB),x') == ["Doe, Jane (AB)", "x"]


def test_locate_header_skips_preamble_blank_and_comment_lines():
    records = [
        (1, ["Exported roster"]),
        (2, ["", "", ""]),
        (3, ["# generated by hand"]),
        (4, ["CLIENT NAME", "Date Of Loss"]),
        (5, ["Doe", "2020-01-01"]),
        (6, [""]),
        (7, ["# trailing comment"]),
        (8, ["Roe", "2021-02-02"]),
    ]
    sheet = locate_header(records)
    assert sheet.header == ["CLIENT NAME", "Date Of Loss"]
    assert sheet.header_row_number == 4
    assert sheet.preamble_lines == 1
    assert [r.row_number for r in sheet.rows] == [5, 8]
    assert sheet.expected_field_count == 2


def test_locate_header_falls_back_to_first_content_line():
    sheet = locate_header([(1, ["Name", "DOL"]), (2, ["Doe", "2020-01-01"])])
    assert sheet.header == ["Name", "DOL"]
    assert len(sheet.rows) == 1


def test_locate_header_custom_tokens():
    records = [(1, ["Claimant list"]), (2, ["Claimant", "Loss"]), (3, ["Doe", "x"])]
    sheet = locate_header(records, header_tokens=("loss",))
    assert sheet.header_row_number == 2


def test_tokenize_empty_text_never_raises():
    sheet = tokenize("")
    assert sheet.header == []
    assert sheet.rows == []


def test_tokenize_sample_roster(sample_roster_text: str):
    sheet = tokenize(sample_roster_text)
    assert sheet.header_row_number == 3
    assert sheet.header[0] == "CLIENT NAME"
    assert [r.row_number for r in sheet.rows] == [4, 5, 6, 7, 8]
    # "Last, First" without quotes arrives one field too long
    assert len(sheet.rows[1].fields) == sheet.expected_field_count + 1
