from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..models.import_result import NewCase
from ..models.team import StaffMember

"""Store interfaces the orchestrator talks to.

Structural protocols: the psycopg2 adapter and the in-memory store both
satisfy them without inheritance. Identifiers are opaque strings.
"""

__all__ = [
    "CaseStore",
    "ClientStore",
    "StaffDirectory",
    "StoreError",
]


class StoreError(Exception):
    """A store operation failed (constraint violation, lost connection, ...)."""


@runtime_checkable
class StaffDirectory(Protocol):
    def list_active_staff(self, firm_id: str) -> list[StaffMember]: ...


@runtime_checkable
class ClientStore(Protocol):
    def find_client_by_name(self, firm_id: str, name: str) -> str | None: ...

    def create_client(
        self,
        firm_id: str,
        name: str,
        date_of_birth: str | None = None,
        notes: str | None = None,
    ) -> str: ...


@runtime_checkable
class CaseStore(Protocol):
    def create_case(self, new_case: NewCase) -> str: ...
