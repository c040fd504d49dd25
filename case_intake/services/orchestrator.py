from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..db.store import CaseStore, ClientStore, StaffDirectory
from ..models.config_models import LimitationConfig
from ..models.import_result import ImportFailure, ImportResult, NewCase
from ..models.team import TeamMemberInfo
from ..models.validation import ValidationOutcome
from .limitation import compute_limitation_date
from .name_matching import RosterResolver, StaffIndex
from .team_extractor import clean_person_name, extract_team_members

logger = logging.getLogger(__name__)

"""Import orchestration: accepted records -> clients and cases in the store.

Rows are processed strictly in order, one store round-trip at a time. Each row
is isolated: any exception raised while importing it is recorded against the
row's physical line number and the loop moves on. Nothing is rolled back;
rows already created stay created, including when the caller stops the run.

Per row:
1. find the client by case-insensitive name within the firm, else create it
2. resolve the assigned person through the run's RosterResolver; an unmatched
   name is kept on the case as a note and listed once in the result
3. compute the limitation deadline (minority extension applied)
4. one create_case call
"""

__all__ = [
    "ProgressCallback",
    "STARTING_LABEL",
    "import_cases",
    "build_case_notes",
]

# (current, total, percentage, label)
ProgressCallback = Callable[[int, int, int, str], None]
StopCallback = Callable[[], bool]

STARTING_LABEL = "Starting import..."
UNMATCHED_NOTE_PREFIX = "Assigned Lawyer (from import): "


def _emit(on_progress: ProgressCallback | None, current: int, total: int, label: str) -> None:
    if on_progress is None:
        return
    # 四捨五入 (round() の偶数丸めは使わない)
    percentage = int(current * 100 / total + 0.5) if total else 0
    try:
        on_progress(current, total, percentage, label)
    except Exception as e:  # 表示側の失敗で取込を止めない
        logger.warning("progress callback failed: %s", e)


def build_case_notes(outcome: ValidationOutcome, unmatched_original: str | None) -> tuple[str, ...]:
    """Case notes in display order: record notes, unmatched lawyer, insurance details."""
    record = outcome.record
    notes = list(record.notes)
    if unmatched_original:
        notes.append(f"{UNMATCHED_NOTE_PREFIX}{unmatched_original}")
    if record.insurance_company:
        notes.append(f"Insurance: {record.insurance_company}")
    if record.policy_number:
        notes.append(f"Policy: {record.policy_number}")
    if record.claim_number:
        notes.append(f"Claim: {record.claim_number}")
    if record.adjuster:
        notes.append(f"Adjuster: {record.adjuster}")
    return tuple(n for n in notes if n)


def _resolve_client(clients: ClientStore, firm_id: str, outcome: ValidationOutcome) -> str:
    record = outcome.record
    client_id = clients.find_client_by_name(firm_id, record.client_name)
    if client_id is not None:
        return client_id
    return clients.create_client(
        firm_id,
        record.client_name,
        date_of_birth=record.birth_date,
        notes="\n".join(record.notes) or None,
    )


def import_cases(
    accepted: Sequence[ValidationOutcome],
    firm_id: str,
    *,
    directory: StaffDirectory,
    clients: ClientStore,
    cases: CaseStore,
    roster: Sequence[TeamMemberInfo] | None = None,
    on_progress: ProgressCallback | None = None,
    progress_every: int = 5,
    should_stop: StopCallback | None = None,
    limitation: LimitationConfig | None = None,
) -> ImportResult:
    """Import accepted records for one firm.

    Args:
        accepted: Accepted outcomes (row number + record), in file order
        firm_id: Tenant scope for every lookup and create
        directory: Staff directory; read once to seed name matching
        clients: Client lookup/create store
        cases: Case create store
        roster: Team members extracted for this run; extracted from ``accepted``
            when omitted
        on_progress: Optional ``(current, total, percentage, label)`` callback,
            invoked before the first row, then on the first, every
            ``progress_every``-th and the last row
        progress_every: Progress granularity
        should_stop: Polled before each row; returning True ends the run early
            with ``cancelled=True``
        limitation: Limitation deadline parameters

    Returns:
        ImportResult. The directory read is the only call allowed to raise;
        row-level failures are collected in ``errors``.
    """
    if roster is None:
        roster = extract_team_members(o.record for o in accepted)
    limitation = limitation or LimitationConfig()
    every = max(1, progress_every)

    staff = directory.list_active_staff(firm_id)
    resolver = RosterResolver.build(StaffIndex.build(staff), roster)
    unmatched: list[str] = list(dict.fromkeys(resolver.unmatched_names))
    logger.debug(
        "name matching: staff=%d roster=%d unmatched=%d", len(staff), len(roster), len(unmatched)
    )

    total = len(accepted)
    success = 0
    errors: list[ImportFailure] = []
    cancelled = False

    _emit(on_progress, 0, total, STARTING_LABEL)

    for i, outcome in enumerate(accepted):
        if should_stop is not None and should_stop():
            cancelled = True
            logger.debug("import stopped before row %d (%d/%d done)", outcome.row_number, i, total)
            break

        record = outcome.record
        if i == 0 or i % every == 0 or i == total - 1:
            _emit(on_progress, i + 1, total, record.client_name)

        try:
            client_id = _resolve_client(clients, firm_id, outcome)

            assigned_id: str | None = None
            unmatched_original: str | None = None
            if record.assigned_person:
                original = record.assigned_person.strip()
                clean = clean_person_name(original)
                assigned_id = resolver.resolve(clean) if clean else None
                if assigned_id is None:
                    unmatched_original = original
                    if clean:
                        member = resolver.member_for(clean)
                        display = member.name if member is not None else clean
                        if display not in unmatched:
                            unmatched.append(display)

            limitation_date = compute_limitation_date(
                record.date_of_loss, record.birth_date, limitation
            )
            new_case = NewCase(
                firm_id=firm_id,
                client_id=client_id,
                record=record,
                limitation_date=limitation_date,
                notes=build_case_notes(outcome, unmatched_original),
                assigned_person_id=assigned_id,
                tags=(record.file_number,) if record.file_number else (),
            )
            case_id = cases.create_case(new_case)
            success += 1
            logger.debug("row %d imported as case %s", outcome.row_number, case_id)
        except Exception as e:
            errors.append(ImportFailure(row=outcome.row_number, error=str(e) or type(e).__name__))
            logger.debug("row %d failed: %s", outcome.row_number, e)

    return ImportResult(
        success=success,
        failed=len(errors),
        errors=errors,
        team_members=list(roster),
        unmatched_names=unmatched,
        cancelled=cancelled,
    )
