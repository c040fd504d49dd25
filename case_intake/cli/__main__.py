from __future__ import annotations

import argparse
import os
import signal
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from case_intake.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from case_intake.db.memory import InMemoryStore
from case_intake.db.postgres import PostgresStore, connect
from case_intake.db.store import StoreError
from case_intake.logging.error_log import ErrorLogBuffer
from case_intake.logging.init import log_summary, setup_logging
from case_intake.models.config_models import ImportConfig
from case_intake.models.error_record import (
    FILE_ERROR,
    IMPORT_ERROR,
    SKIPPED_ROW,
    VALIDATION_ERROR,
)
from case_intake.models.import_result import ImportResult
from case_intake.models.validation import ParseReport
from case_intake.parsing.excel import SourceReadError, read_roster_workbook
from case_intake.services.enrollment import generate_enrollment_sql
from case_intake.services.orchestrator import import_cases
from case_intake.services.pipeline import parse_roster, parse_roster_rows
from case_intake.services.progress import ImportProgressBar
from case_intake.services.summary import render_summary_line

"""CLI entrypoint: python -m case_intake.cli ROSTER [options].

Flow:
- load .env, then config (YAML + schema)
- read the roster (CSV text or .xlsx workbook) and parse it
- report rejected / skipped rows, optionally stop there (--dry-run)
- import accepted rows into the store (PostgreSQL, or in-memory with
  DISABLE_DB_CONNECT=1)
- write the JSON Lines error log and the SUMMARY line

Exit codes: 0 every row imported, 2 some rows rejected or failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

WORKBOOK_SUFFIXES = {".xlsx", ".xlsm"}
INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env with python-dotenv; .env values win over the inherited environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="case_intake",
        description="Import a case roster export (CSV or .xlsx) into the firm database",
    )
    p.add_argument("roster", type=Path, help="Roster file (.csv or .xlsx)")
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--firm-id", default=None, help="Tenant id (overrides config firm_id)")
    p.add_argument("--sheet", default=None, help="Worksheet name for .xlsx input (default: first sheet)")
    p.add_argument("--dry-run", action="store_true", help="Parse and validate only; no store access")
    p.add_argument("--inspect-data", action="store_true", help="Print header, realignments and first rows then exit")
    p.add_argument("--enrollment-sql", type=Path, default=None, help="Write staff enrollment SQL for unmatched names")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _read_roster(path: Path, cfg: ImportConfig, sheet: str | None) -> ParseReport:
    if not path.exists():
        raise SourceReadError(f"roster file not found: {path}")
    if path.suffix.lower() in WORKBOOK_SUFFIXES:
        return parse_roster_rows(read_roster_workbook(path, sheet), cfg.parsing)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"cannot read roster {path}: {e}") from e
    return parse_roster(text, cfg.parsing)


def _inspect_data(report: ParseReport) -> int:
    print(f"HEADER (line {report.header_row_number}): {report.header}")
    print(
        f"rows={report.total_rows} accepted={report.accepted_count} "
        f"rejected={report.rejected_count} skipped={report.skipped_rows}"
    )
    for row in report.realignments:
        print(f"  REALIGNED line {row.row_number} ({row.realigned_by}): {list(row.original_fields or ())}")
    for outcome in (report.accepted + report.rejected)[:INSPECT_SAMPLE_ROWS]:
        r = outcome.record
        print(
            f"  line {outcome.row_number}: client={r.client_name!r} file={r.file_number!r} "
            f"assigned={r.assigned_person!r} dol={r.date_of_loss!r} dob={r.birth_date!r} "
            f"status={r.status.value if r.status else None} "
            f"benefit={r.benefit_type.value if r.benefit_type else None}"
        )
    for member in report.team_members:
        print(f"  TEAM {member.name} role={member.role.value} count={member.count}")
    return EXIT_SUCCESS_ALL


def _report_parse_problems(report: ParseReport, file_name: str, error_log: ErrorLogBuffer, logger: Any) -> None:
    for outcome in report.rejected:
        message = "; ".join(outcome.errors)
        logger.warning(f"row {outcome.row_number} rejected: {message}")
        error_log.add(file_name, outcome.row_number, VALIDATION_ERROR, message)
    for row_number in report.skipped_row_numbers:
        logger.debug(f"row {row_number} skipped: no client name or date of loss")
        error_log.add(file_name, row_number, SKIPPED_ROW, "missing client name or date of loss")


@contextmanager
def _open_store(cfg: ImportConfig, logger: Any) -> Iterator[Any]:
    """Yield the store to import into; DISABLE_DB_CONNECT=1 selects the in-memory store."""
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> in-memory store")
        yield InMemoryStore()
        return
    conn = connect(cfg.database)
    try:
        yield PostgresStore(conn)
    finally:
        conn.close()


class _StopFlag:
    """Ctrl-C during the import loop finishes the current row, then stops."""

    def __init__(self) -> None:
        self.requested = False

    def __call__(self) -> bool:
        return self.requested

    def _handle(self, signum: int, frame: Any) -> None:
        self.requested = True

    @contextmanager
    def installed(self) -> Iterator[_StopFlag]:
        previous = signal.signal(signal.SIGINT, self._handle)
        try:
            yield self
        finally:
            signal.signal(signal.SIGINT, previous)


def _write_enrollment_sql(
    path: Path, result: ImportResult, firm_id: str, cfg: ImportConfig, logger: Any
) -> None:
    unmatched = set(result.unmatched_names)
    members = [m for m in result.team_members if m.name in unmatched]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(generate_enrollment_sql(members, firm_id, cfg.firm_name), encoding="utf-8")
    logger.info(f"enrollment SQL for {len(members)} member(s) written to {path}")


def main(argv: list[str] | None = None) -> int:
    # NOTE: 空リスト [] の場合に sys.argv[1:] が混入しないよう None のときのみ読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    started = time.perf_counter()

    # .env を最優先で読み込む (DB 接続パラメータ優先順位保証)
    _load_env_file(Path(".env"), override=True)
    config_path = args.config or DEFAULT_CONFIG_PATH
    try:
        cfg = load_config(config_path, required=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    file_name = args.roster.name
    try:
        report = _read_roster(args.roster, cfg, args.sheet)
    except SourceReadError as e:
        logger.error(f"source: {e}")
        error_log.add(file_name, -1, FILE_ERROR, str(e))
        error_log.flush()
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(report)

    if not report.header:
        logger.error(f"source: no header row found in {args.roster}")
        return EXIT_FATAL

    logger.info(
        f"parsed {file_name}: rows={report.total_rows} accepted={report.accepted_count} "
        f"rejected={report.rejected_count} skipped={report.skipped_rows} "
        f"realigned={len(report.realignments)}"
    )
    _report_parse_problems(report, file_name, error_log, logger)

    result: ImportResult | None = None
    if not args.dry_run:
        firm_id = args.firm_id or cfg.firm_id
        if not firm_id:
            logger.error("firm id missing: pass --firm-id or set firm_id in the config")
            error_log.flush()
            return EXIT_FATAL
        try:
            with _open_store(cfg, logger) as store, ImportProgressBar() as bar, _StopFlag().installed() as stop:
                result = import_cases(
                    report.accepted,
                    firm_id,
                    directory=store,
                    clients=store,
                    cases=store,
                    roster=report.team_members,
                    on_progress=bar,
                    progress_every=cfg.progress_every,
                    should_stop=stop,
                    limitation=cfg.limitation,
                )
        except StoreError as e:
            logger.error(f"store: {e}")
            error_log.add(file_name, -1, FILE_ERROR, str(e))
            error_log.flush()
            return EXIT_FATAL

        for failure in result.errors:
            logger.error(f"row {failure.row} import failed: {failure.error}")
            error_log.add(file_name, failure.row, IMPORT_ERROR, failure.error)
        if result.unmatched_names:
            logger.warning(f"unmatched assigned persons: {', '.join(result.unmatched_names)}")
        if result.cancelled:
            logger.warning(f"import cancelled after {result.attempted} of {report.accepted_count} row(s)")
        if args.enrollment_sql is not None:
            _write_enrollment_sql(args.enrollment_sql, result, firm_id, cfg, logger)

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written to {log_path}")

    summary_line = render_summary_line(report, result, time.perf_counter() - started)
    # log_summary が "SUMMARY " を付けるので先頭を落とす
    log_summary(summary_line[len("SUMMARY "):])

    incomplete = result is not None and (result.failed > 0 or result.cancelled)
    if report.rejected_count > 0 or incomplete:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
