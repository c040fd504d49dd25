from __future__ import annotations

import json
from pathlib import Path

from case_intake.logging.error_log import ErrorLogBuffer
from case_intake.models.error_record import IMPORT_ERROR, VALIDATION_ERROR, ErrorRecord


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.add("roster.csv", 6, VALIDATION_ERROR, "Date of loss is required (could not read 'TBD')")
    buf.append(ErrorRecord.create("roster.csv", 8, IMPORT_ERROR, "Failed to create case: boom"))
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(ln)["row"] for ln in lines] == [6, 8]
    assert json.loads(lines[0])["error_type"] == VALIDATION_ERROR
    assert len(buf) == 0


def test_flush_without_records_creates_no_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_repeated_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.add("r.csv", 2, VALIDATION_ERROR, "a")
    first = buf.flush()
    buf.add("r.csv", 3, VALIDATION_ERROR, "b")
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
