from __future__ import annotations

import re
from pathlib import Path

from case_intake.cli import main as cli_main
from case_intake.models.import_result import ImportResult
from case_intake.models.validation import ParseReport
from case_intake.services.summary import render_summary_line

"""SUMMARY line format contract.

SUMMARY rows=<n> accepted=<n> rejected=<n> skipped=<n> imported=<n> failed=<n>
team=<n> unmatched=<n> elapsed_sec=<decimal>
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY rows=\d+ accepted=\d+ rejected=\d+ skipped=\d+ imported=\d+ failed=\d+ "
    r"team=\d+ unmatched=\d+ elapsed_sec=[0-9]+\.?[0-9]*$"
)


def test_summary_pattern_example_line():
    line = "SUMMARY rows=5 accepted=3 rejected=1 skipped=1 imported=3 failed=0 team=3 unmatched=2 elapsed_sec=0.042"
    assert SUMMARY_PATTERN.match(line)


def test_rendered_lines_match_pattern():
    report = ParseReport([], [], [], 0, 0)
    for elapsed in (0.0, 0.0000123, 1.5, 12.0, 3600.25):
        assert SUMMARY_PATTERN.match(render_summary_line(report, None, elapsed))
    assert SUMMARY_PATTERN.match(render_summary_line(report, ImportResult(success=2, failed=1), 0.5))


def test_cli_emits_exactly_one_summary_line(write_config, roster_csv: Path, capsys):
    cli_main([str(roster_csv), "--dry-run"])
    lines = [ln for ln in capsys.readouterr().out.splitlines() if ln.startswith("SUMMARY")]
    assert len(lines) == 1
    assert SUMMARY_PATTERN.match(lines[0])
