# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from case_intake.db.memory import InMemoryStore
from case_intake.logging.init import reset_logging
from case_intake.models.case_record import ParsedCaseRecord
from case_intake.models.team import StaffMember
from case_intake.models.validation import ValidationOutcome

FIRM_ID = "firm-1"

# Physical lines:
#  1 preamble, 2 blank-ish, 3 header,
#  4 quoted client, 5 unquoted "Last, First" (realigned), 6 placeholder DOL (rejected),
#  7 no client (skipped), 8 unmatched lawyer with quoted "MMM D, YYYY"
SAMPLE_ROSTER = (
    "Roster export 2024-03-01\n"
    ",,,\n"
    "CLIENT NAME,FILE NO#,Lawyer,DOB,Date Of Loss,Insurance Co.,Policy No.,Claim No.,Adjuster,MIG Status,IRB /NEB,Notes\n"
    '"Doe, Jane",LL1001,John Smith,12-05-1980,17-Jul-96,Aviva,P-1,C-1,Ann Lee,MIG,IRB,\n'
    "Roe, Richard,LL1002,J. Smith (AB ONLY),2010-03-04,23-12-15,Intact,,,,Non-MIG,NEB,\n"
    '"Brown, Alice",LL1003,Mary Jones (clerk),,TBD,,,,,,,\n'
    ",LL1004,John Smith,,01-01-20,,,,,,,\n"
    '"Green, Bob",LL1005,Peter Unknown,,"Feb 6, 2014",,,,,CAT,Caregiver,call after 5pm\n'
)


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return f"""firm_id: {FIRM_ID}
firm_name: Example Injury Law
header_tokens: [client]
column_aliases:
  file_number: ["Matter No"]
limitation:
  standard_years: 2
  minority_age: 18
  minority_deadline_age: 20
progress_every: 5
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_roster_text() -> str:
    return SAMPLE_ROSTER


@pytest.fixture()
def roster_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "roster.csv"
    f.write_text("\ufeff" + SAMPLE_ROSTER, encoding="utf-8")
    return f


@pytest.fixture()
def memory_store() -> InMemoryStore:
    return InMemoryStore(staff=[(FIRM_ID, StaffMember(id="staff-js", name="John Smith", role="Lawyer"))])


@pytest.fixture()
def make_outcome():
    """Factory for accepted outcomes: make_outcome(row_number, client, **record_fields)."""
    def _make(row_number: int, client: str = "Doe, Jane", **kwargs) -> ValidationOutcome:
        kwargs.setdefault("date_of_loss", "2020-01-15")
        record = ParsedCaseRecord(client_name=client, **kwargs)
        return ValidationOutcome(row_number=row_number, record=record)
    return _make
