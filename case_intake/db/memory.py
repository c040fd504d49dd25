"""In-memory store: dict-backed StaffDirectory/ClientStore/CaseStore.

Used by dry runs with DISABLE_DB_CONNECT=1 and by the test suite.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass

from ..models.import_result import NewCase
from ..models.team import StaffMember
from .store import StoreError


@dataclass(frozen=True)
class StoredClient:
    id: str
    firm_id: str
    name: str
    date_of_birth: str | None
    notes: str | None


class InMemoryStore:
    """Dict-backed implementation of all three store protocols."""

    def __init__(self, staff: Iterable[tuple[str, StaffMember]] = ()) -> None:
        self._staff: dict[str, list[StaffMember]] = {}
        for firm_id, member in staff:
            self.add_staff(firm_id, member)
        self.clients: dict[str, StoredClient] = {}
        self.cases: dict[str, NewCase] = {}

    def add_staff(self, firm_id: str, member: StaffMember) -> None:
        self._staff.setdefault(firm_id, []).append(member)

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    # StaffDirectory
    def list_active_staff(self, firm_id: str) -> list[StaffMember]:
        return list(self._staff.get(firm_id, []))

    # ClientStore
    def find_client_by_name(self, firm_id: str, name: str) -> str | None:
        wanted = name.strip().lower()
        for client in self.clients.values():
            if client.firm_id == firm_id and client.name.lower() == wanted:
                return client.id
        return None

    def create_client(
        self,
        firm_id: str,
        name: str,
        date_of_birth: str | None = None,
        notes: str | None = None,
    ) -> str:
        if not name.strip():
            raise StoreError("client name must not be empty")
        client_id = self._new_id()
        self.clients[client_id] = StoredClient(
            id=client_id,
            firm_id=firm_id,
            name=name.strip(),
            date_of_birth=date_of_birth,
            notes=notes,
        )
        return client_id

    # CaseStore
    def create_case(self, new_case: NewCase) -> str:
        if new_case.client_id not in self.clients:
            raise StoreError(f"unknown client_id {new_case.client_id}")
        case_id = self._new_id()
        self.cases[case_id] = new_case
        return case_id
