from __future__ import annotations

import os
from typing import Any

import psycopg2

from ..models.case_record import BenefitType, CaseStatus
from ..models.config_models import DatabaseConfig
from ..models.import_result import NewCase
from ..models.team import StaffMember
from .store import StoreError

"""psycopg2 store adapter for the firm database.

Tables (firm-scoped): users_metadata (staff directory), clients, cases plus
the per-case sabs_claims / tort_claims rows.

Each create runs in its own transaction (``with conn:`` commits on success,
rolls back on error), so a failed row leaves no partial case behind and never
poisons the connection for the rows after it. Committed rows stay committed;
there is no run-level rollback.
"""

__all__ = [
    "PostgresStore",
    "connect",
    "resolve_dsn",
]

# sabs_claims check constraints accept a subset of the roster vocabulary
_SABS_MIG_STATUSES = {CaseStatus.MIG, CaseStatus.NON_MIG, CaseStatus.CAT}
_SABS_BENEFIT_TYPES = {BenefitType.IRB, BenefitType.NEB, BenefitType.CAREGIVER}
CAT_MEDICAL_REHAB_LIMIT = 1_000_000
DEFAULT_MEDICAL_REHAB_LIMIT = 3_500

SELECT_ACTIVE_STAFF = (
    "SELECT id, name, role FROM users_metadata "
    "WHERE firm_id = %s AND is_active = true ORDER BY created_at, id"
)
SELECT_CLIENT_BY_NAME = (
    "SELECT id FROM clients WHERE firm_id = %s AND lower(name) = lower(%s) "
    "ORDER BY created_at LIMIT 1"
)
INSERT_CLIENT = (
    "INSERT INTO clients (firm_id, name, date_of_birth, notes) "
    "VALUES (%s, %s, %s, %s) RETURNING id"
)
INSERT_CASE = (
    "INSERT INTO cases (firm_id, client_id, title, date_of_loss, date_opened, "
    "limitation_date, status, stage, primary_lawyer_id, notes, tags) "
    "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s) RETURNING id"
)
INSERT_SABS = (
    "INSERT INTO sabs_claims (case_id, mig_status, elected_benefit_type, medical_rehab_limit) "
    "VALUES (%s, %s, %s, %s)"
)
INSERT_TORT = (
    "INSERT INTO tort_claims (case_id, limitation_date, limitation_status) "
    "VALUES (%s, %s, 'Active')"
)


class PostgresStore:
    """StaffDirectory / ClientStore / CaseStore over one psycopg2 connection."""

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    def _fetchall(self, query: str, params: tuple[Any, ...]) -> list[tuple[Any, ...]]:
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(query, params)
                    return cur.fetchall()
        except psycopg2.Error as e:
            raise StoreError(str(e).strip()) from e

    def list_active_staff(self, firm_id: str) -> list[StaffMember]:
        rows = self._fetchall(SELECT_ACTIVE_STAFF, (firm_id,))
        return [StaffMember(id=str(r[0]), name=r[1], role=r[2]) for r in rows]

    def find_client_by_name(self, firm_id: str, name: str) -> str | None:
        rows = self._fetchall(SELECT_CLIENT_BY_NAME, (firm_id, name.strip()))
        return str(rows[0][0]) if rows else None

    def create_client(
        self,
        firm_id: str,
        name: str,
        date_of_birth: str | None = None,
        notes: str | None = None,
    ) -> str:
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(INSERT_CLIENT, (firm_id, name.strip(), date_of_birth, notes))
                    return str(cur.fetchone()[0])
        except psycopg2.Error as e:
            raise StoreError(f"Failed to create client: {str(e).strip()}") from e

    def create_case(self, new_case: NewCase) -> str:
        record = new_case.record
        mig_status = record.status if record.status in _SABS_MIG_STATUSES else CaseStatus.MIG
        benefit = record.benefit_type.value if record.benefit_type in _SABS_BENEFIT_TYPES else None
        rehab_limit = (
            CAT_MEDICAL_REHAB_LIMIT if mig_status is CaseStatus.CAT else DEFAULT_MEDICAL_REHAB_LIMIT
        )
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    cur.execute(
                        INSERT_CASE,
                        (
                            new_case.firm_id,
                            new_case.client_id,
                            new_case.title,
                            record.date_of_loss,
                            new_case.date_opened,
                            new_case.limitation_date,
                            new_case.status,
                            new_case.stage,
                            new_case.assigned_person_id,
                            list(new_case.notes),
                            list(new_case.tags),
                        ),
                    )
                    case_id = cur.fetchone()[0]
                    cur.execute(INSERT_SABS, (case_id, mig_status.value, benefit, rehab_limit))
                    cur.execute(INSERT_TORT, (case_id, new_case.limitation_date))
                    return str(case_id)
        except psycopg2.Error as e:
            raise StoreError(f"Failed to create case: {str(e).strip()}") from e


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string from the environment, falling back to the config section.

    Precedence: DATABASE_URL / PGDSN, then individual PGHOST / PGPORT / PGUSER /
    PGPASSWORD / PGDATABASE, then config/import.yml ``database``.
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


def connect(db_cfg: DatabaseConfig) -> Any:
    """Open a psycopg2 connection; failures surface as StoreError."""
    try:
        return psycopg2.connect(resolve_dsn(db_cfg))
    except psycopg2.Error as e:
        raise StoreError(f"cannot connect to database: {str(e).strip()}") from e
