from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from case_intake.cli import main as cli_main
from case_intake.logging.error_log import ErrorLogBuffer
from case_intake.models.error_record import FILE_ERROR, ErrorRecord

"""Error log (JSON Lines) contract: one object per line, fixed keys only."""

ERROR_RECORD_SCHEMA = {
    "type": "object",
    "required": ["timestamp", "file", "row", "error_type", "message"],
    "additionalProperties": False,
    "properties": {
        "timestamp": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"},
        "file": {"type": "string", "minLength": 1},
        "row": {"type": "integer", "minimum": -1},
        "error_type": {"enum": ["VALIDATION_ERROR", "SKIPPED_ROW", "IMPORT_ERROR", "FILE_ERROR"]},
        "message": {"type": "string"},
    },
}


def test_error_record_matches_schema():
    rec = ErrorRecord.create("roster.csv", -1, FILE_ERROR, "roster file not found")
    jsonschema.validate(json.loads(rec.to_json_line()), ERROR_RECORD_SCHEMA)


def test_schema_rejects_extra_keys():
    line = json.loads(ErrorRecord.create("roster.csv", 3, FILE_ERROR, "x").to_json_line())
    line["sheet"] = "Cases"
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(line, ERROR_RECORD_SCHEMA)


def test_cli_error_log_lines_match_schema(write_config, roster_csv: Path, temp_workdir: Path, capsys):
    cli_main([str(roster_csv), "--dry-run"])
    capsys.readouterr()
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    lines = logs[0].read_text(encoding="utf-8").splitlines()
    assert lines
    for ln in lines:
        jsonschema.validate(json.loads(ln), ERROR_RECORD_SCHEMA)


def test_empty_buffer_writes_no_file(temp_workdir: Path):
    assert ErrorLogBuffer(temp_workdir / "logs").flush() is None
    assert not list((temp_workdir / "logs").iterdir())
