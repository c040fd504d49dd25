from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from case_intake.cli import main as cli_main
from case_intake.db.memory import InMemoryStore
from case_intake.db.store import StoreError
from case_intake.models.team import StaffMember

CLEAN_ROSTER = (
    "CLIENT NAME,FILE NO#,Lawyer,Date Of Loss\n"
    '"Doe, Jane",LL1001,John Smith,17-Jul-96\n'
    '"Roe, Richard",LL1002,John Smith,2020-01-15\n'
)


def _error_log_lines(workdir: Path) -> list[dict]:
    files = sorted((workdir / "logs").glob("errors-*.log"))
    return [json.loads(ln) for f in files for ln in f.read_text(encoding="utf-8").splitlines()]


def test_cli_dry_run_reports_rejected_rows(write_config, roster_csv: Path, temp_workdir: Path, capsys):
    code = cli_main([str(roster_csv), "--dry-run"])
    out = capsys.readouterr().out

    assert code == 2
    assert "WARN row 6 rejected: Date of loss is required (could not read 'TBD')" in out
    assert "SUMMARY rows=5 accepted=3 rejected=1 skipped=1 imported=0 failed=0 team=3 unmatched=0" in out
    records = _error_log_lines(temp_workdir)
    assert [(r["row"], r["error_type"]) for r in records] == [(6, "VALIDATION_ERROR"), (7, "SKIPPED_ROW")]
    assert all(r["file"] == "roster.csv" for r in records)


def test_cli_dry_run_clean_roster_exits_zero(temp_workdir: Path, capsys):
    roster = temp_workdir / "data" / "clean.csv"
    roster.write_text(CLEAN_ROSTER, encoding="utf-8")
    code = cli_main([str(roster), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY rows=2 accepted=2 rejected=0" in out
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_cli_import_into_memory_store(write_config, roster_csv: Path, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    code = cli_main([str(roster_csv)])
    out = capsys.readouterr().out

    assert code == 2  # row 6 was rejected
    assert "WARN unmatched assigned persons: John Smith, Mary Jones, Peter Unknown" in out
    assert "imported=3 failed=0 team=3 unmatched=3" in out


def test_cli_firm_id_required_for_import(roster_csv: Path, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    code = cli_main([str(roster_csv)])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR firm id missing" in out


def test_cli_firm_id_flag_overrides_config(write_config, temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    roster = temp_workdir / "data" / "clean.csv"
    roster.write_text(CLEAN_ROSTER, encoding="utf-8")
    store = InMemoryStore()
    with patch("case_intake.cli.__main__.InMemoryStore", return_value=store):
        code = cli_main([str(roster), "--firm-id", "firm-override"])
    assert code == 0
    assert {c.firm_id for c in store.cases.values()} == {"firm-override"}


def test_cli_missing_roster_is_fatal(temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "nope.csv"), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR source: roster file not found" in out
    records = _error_log_lines(temp_workdir)
    assert records[0]["row"] == -1
    assert records[0]["error_type"] == "FILE_ERROR"


def test_cli_invalid_config_is_fatal(write_config: Path, roster_csv: Path, capsys):
    write_config.write_text("progress_every: 0\n", encoding="utf-8")
    code = cli_main([str(roster_csv), "--dry-run"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config validation failed" in out


def test_cli_explicit_config_must_exist(roster_csv: Path, temp_workdir: Path, capsys):
    code = cli_main([str(roster_csv), "--config", str(temp_workdir / "missing.yml"), "--dry-run"])
    assert code == 1
    assert "config file not found" in capsys.readouterr().out


def test_cli_inspect_data(roster_csv: Path, capsys):
    code = cli_main([str(roster_csv), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "HEADER (line 3)" in out
    assert "REALIGNED line 5 (assigned_person_shift)" in out
    assert "TEAM John Smith role=AccidentBenefitsCoordinator count=2" in out
    assert "SUMMARY" not in out


def test_cli_no_header_is_fatal(temp_workdir: Path, capsys):
    empty = temp_workdir / "data" / "empty.csv"
    empty.write_text("\n\n", encoding="utf-8")
    code = cli_main([str(empty), "--dry-run"])
    assert code == 1
    assert "no header row found" in capsys.readouterr().out


def test_cli_live_mode_uses_postgres_store(write_config, temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    roster = temp_workdir / "data" / "clean.csv"
    roster.write_text(CLEAN_ROSTER, encoding="utf-8")
    conn = MagicMock()
    store = InMemoryStore(staff=[("firm-1", StaffMember(id="u1", name="John Smith"))])
    with patch("case_intake.cli.__main__.connect", return_value=conn) as connect_mock, \
         patch("case_intake.cli.__main__.PostgresStore", return_value=store) as store_cls:
        code = cli_main([str(roster)])
    out = capsys.readouterr().out

    assert code == 0
    connect_mock.assert_called_once()
    store_cls.assert_called_once_with(conn)
    conn.close.assert_called_once()
    assert {c.assigned_person_id for c in store.cases.values()} == {"u1"}
    assert "imported=2 failed=0 team=1 unmatched=0" in out


def test_cli_db_connection_failure_is_fatal(write_config, roster_csv: Path, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)
    with patch("case_intake.cli.__main__.connect", side_effect=StoreError("cannot connect to database: refused")):
        code = cli_main([str(roster_csv)])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR store: cannot connect to database: refused" in out


def test_cli_import_failures_exit_partial(write_config, temp_workdir: Path, monkeypatch, capsys):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    roster = temp_workdir / "data" / "clean.csv"
    roster.write_text(CLEAN_ROSTER, encoding="utf-8")
    store = InMemoryStore()
    real_create = store.create_case

    def create_case(new_case):
        if new_case.record.file_number == "LL1002":
            raise StoreError("Failed to create case: boom")
        return real_create(new_case)

    store.create_case = create_case  # type: ignore[method-assign]
    with patch("case_intake.cli.__main__.InMemoryStore", return_value=store):
        code = cli_main([str(roster)])
    out = capsys.readouterr().out

    assert code == 2
    assert "ERROR row 3 import failed: Failed to create case: boom" in out
    assert "imported=1 failed=1" in out
    records = _error_log_lines(temp_workdir)
    assert [(r["row"], r["error_type"]) for r in records] == [(3, "IMPORT_ERROR")]


def test_cli_writes_enrollment_sql(write_config, roster_csv: Path, temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    target = temp_workdir / "out" / "enroll.sql"
    cli_main([str(roster_csv), "--enrollment-sql", str(target)])

    sql = target.read_text(encoding="utf-8")
    assert "-- Firm: Example Injury Law (firm-1)" in sql
    assert sql.count("INSERT INTO users_metadata") == 3
    assert "'Mary Jones', 'LawClerk'" in sql


def test_cli_debug_mode_shows_pipeline_diagnostics(write_config, roster_csv: Path, capsys):
    cli_main([str(roster_csv), "--dry-run", "--debug"])
    out = capsys.readouterr().out
    assert "DEBUG row 5 realigned (assigned_person_shift)" in out
    assert "DEBUG row 7 skipped" in out
