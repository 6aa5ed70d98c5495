"""Confirmation persister: write finalised outcomes to the registration store.

Every record is written in its own unit of work. A failure for one
registration is logged and reported; it never stops the remaining writes and
is not retried automatically. Per-registration atomicity is the store's
single-row upsert.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from rollcall.domain.errors import (
    PendingNotFoundError,
    PersistenceError,
    ReviewIncompleteError,
)
from rollcall.domain.model import (
    ConfirmationRecord,
    ConfirmedAssociation,
    DoubtAssociation,
    NotFoundAssociation,
    PendingAttendance,
    PendingStatus,
)

if TYPE_CHECKING:
    from rollcall.domain.model import Registration
    from rollcall.domain.ports import AttendanceUnitOfWork

    from .workspace import ReviewWorkspace

type UnitOfWorkFactory = Callable[[], AttendanceUnitOfWork]
type Clock = Callable[[], datetime]

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True)
class PersistenceFailure:
    """One record that could not be written; it stays confirmed in memory."""

    participant_name: str
    registration_id: int | None
    message: str


@dataclass(slots=True)
class ConfirmationReport:
    saved: int = 0
    pending_saved: int = 0
    failures: list[PersistenceFailure] = field(default_factory=list[PersistenceFailure])

    @property
    def failed(self) -> int:
        return len(self.failures)


def confirmation_records(workspace: ReviewWorkspace) -> list[ConfirmationRecord]:
    config = workspace.config
    records: list[ConfirmationRecord] = []
    for name, association in workspace.live_associations().items():
        if not isinstance(association, ConfirmedAssociation):
            continue
        analysis = workspace.analyses[name]
        records.append(
            ConfirmationRecord(
                registration_id=association.candidate.id,
                participant_display_name=name,
                approved=analysis.approved,
                total_minutes=analysis.total_minutes,
                window_minutes=analysis.window_minutes,
                window_percentage=analysis.window_percentage,
                has_window=config.has_window,
                total_days=config.total_days,
                current_day=config.current_day,
            )
        )
    return records


def pending_records(
    workspace: ReviewWorkspace,
    *,
    created_at: datetime | None = None,
) -> list[PendingAttendance]:
    records: list[PendingAttendance] = []
    for name, association in workspace.live_associations().items():
        analysis = workspace.analyses[name]
        record = PendingAttendance(
            training_id=workspace.config.training_id,
            participant_name=name,
            status=PendingStatus.NOT_FOUND,
            approved=analysis.approved,
            total_minutes=analysis.total_minutes,
            window_minutes=analysis.window_minutes,
            window_percentage=analysis.window_percentage,
            created_at=created_at,
        )
        if isinstance(association, DoubtAssociation):
            record.status = PendingStatus.DOUBT
            record.candidate_a_id = association.candidate_a.id
            record.candidate_a_name = association.candidate_a.display_name
            record.candidate_b_id = association.candidate_b.id
            record.candidate_b_name = association.candidate_b.display_name
        elif not isinstance(association, NotFoundAssociation):
            continue
        records.append(record)
    return records


def persist_confirmations(
    workspace: ReviewWorkspace,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = _utcnow,
) -> ConfirmationReport:
    """Upsert every confirmed outcome and queue not-found/doubt participants."""

    blocking = workspace.blocking()
    if blocking:
        raise ReviewIncompleteError(blocking)

    training_id = workspace.config.training_id
    validated_at = clock()
    report = ConfirmationReport()

    for record in confirmation_records(workspace):
        try:
            with unit_of_work_factory() as uow:
                uow.repositories.registrations.upsert_attendance(
                    record,
                    training_id=training_id,
                    validated_at=validated_at,
                )
                uow.commit()
        except PersistenceError as exc:
            log.exception(
                "Failed to store attendance for registration %s (%r)",
                record.registration_id,
                record.participant_display_name,
            )
            report.failures.append(
                PersistenceFailure(
                    record.participant_display_name,
                    record.registration_id,
                    str(exc),
                )
            )
            continue
        report.saved += 1

    for pending in pending_records(workspace, created_at=validated_at):
        try:
            with unit_of_work_factory() as uow:
                uow.repositories.pending.upsert(pending)
                uow.commit()
        except PersistenceError as exc:
            log.exception("Failed to queue pending attendance for %r", pending.participant_name)
            report.failures.append(PersistenceFailure(pending.participant_name, None, str(exc)))
            continue
        report.pending_saved += 1

    log.info(
        "Stored attendance for training %s: saved=%s, pending=%s, failed=%s",
        training_id,
        report.saved,
        report.pending_saved,
        report.failed,
    )
    return report


def resolve_pending(
    pending_id: int,
    registration_id: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory,
    clock: Clock = _utcnow,
) -> Registration:
    """Attach a queued participant's figures to a registration and close the entry."""

    resolved_at = clock()
    with unit_of_work_factory() as uow:
        pending = uow.repositories.pending.get_unresolved(pending_id)
        if pending is None:
            raise PendingNotFoundError(
                f"Pending attendance {pending_id} not found or already resolved"
            )
        registration = uow.repositories.registrations.upsert_attendance(
            pending.as_confirmation(registration_id),
            training_id=pending.training_id,
            validated_at=resolved_at,
        )
        uow.repositories.pending.mark_resolved(
            pending_id,
            registration_id=registration_id,
            resolved_at=resolved_at,
        )
        uow.commit()
    return registration
