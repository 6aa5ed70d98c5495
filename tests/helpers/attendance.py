"""Reusable fakes and builders for attendance tests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Literal

from rollcall.domain.errors import PendingNotFoundError, PersistenceError
from rollcall.domain.model import (
    ConsolidatedParticipant,
    PendingAttendance,
    RawSessionRecord,
    Registration,
    SessionInterval,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from rollcall.domain.model import ConfirmationRecord

DAY = datetime(2026, 1, 7)


def at(hour: int, minute: int = 0) -> datetime:
    return DAY.replace(hour=hour, minute=minute)


def make_record(
    name: str,
    join: datetime,
    leave: datetime,
    *,
    email: str | None = None,
    duration: int | None = None,
) -> RawSessionRecord:
    minutes = duration if duration is not None else int((leave - join) / timedelta(minutes=1))
    return RawSessionRecord(
        name=name,
        email=email,
        join_time=join,
        leave_time=leave,
        duration_minutes=minutes,
    )


def make_participant(
    name: str,
    intervals: Sequence[tuple[datetime, datetime]],
    *,
    email: str | None = None,
) -> ConsolidatedParticipant:
    sessions = [
        SessionInterval(join, leave, int((leave - join) / timedelta(minutes=1)))
        for join, leave in intervals
    ]
    return ConsolidatedParticipant(
        display_name=name,
        normalized_name=name.lower(),
        email=email,
        sessions=sessions,
        total_minutes=sum(session.duration_minutes for session in sessions),
        first_join=min(session.join_time for session in sessions),
        last_leave=max(session.leave_time for session in sessions),
    )


def export_csv(rows: Iterable[tuple[str, str, datetime, datetime]]) -> str:
    """Render ``(name, email, join, leave)`` rows as an English participant export."""

    lines = ["Name (Original Name),User Email,Join Time,Leave Time,Duration (Minutes)"]
    for name, email, join, leave in rows:
        minutes = int((leave - join) / timedelta(minutes=1))
        lines.append(f"{name},{email},{join.isoformat()},{leave.isoformat()},{minutes}")
    return "\n".join(lines) + "\n"


class FakeRegistrationRepository:
    """In-memory registration store; ids listed in ``failing_ids`` raise on upsert."""

    def __init__(
        self,
        initial: Iterable[Registration] = (),
        *,
        failing_ids: Iterable[int] = (),
    ) -> None:
        self.items: dict[int, Registration] = {}
        for registration in initial:
            self.add(registration)
        self.failing_ids = set(failing_ids)

    def add(self, entity: Registration) -> None:
        if entity.id is None:
            entity.id = max(self.items, default=0) + 1
        self.items[entity.id] = entity

    def get(self, registration_id: int) -> Registration | None:
        return self.items.get(registration_id)

    def list_for_training(self, training_id: str) -> list[Registration]:
        return [item for item in self.items.values() if item.training_id == training_id]

    def search(self, query: str, *, limit: int = 20) -> list[Registration]:
        needle = query.strip().lower()
        return [
            item for item in self.items.values() if needle in item.display_name.lower()
        ][:limit]

    def upsert_attendance(
        self,
        record: ConfirmationRecord,
        *,
        training_id: str,
        validated_at: datetime,
    ) -> Registration:
        if record.registration_id in self.failing_ids:
            raise PersistenceError(f"store unavailable for {record.registration_id}")
        registration = self.items.get(record.registration_id)
        if registration is None:
            raise PersistenceError(f"Registration {record.registration_id} does not exist")
        registration.record_attendance(record, training_id=training_id, validated_at=validated_at)
        return registration

    def clear_attendance(self, registration_id: int) -> Registration:
        registration = self.items[registration_id]
        registration.clear_attendance()
        return registration

    def list_attendance(
        self,
        *,
        training_id: str | None = None,
        approved_only: bool = True,
    ) -> list[Registration]:
        return [
            item
            for item in self.items.values()
            if item.attendance_validated
            and (training_id is None or item.attendance_training_id == training_id)
            and (not approved_only or item.attendance_approved)
        ]

    def reset_training(self, training_id: str) -> int:
        cleared = 0
        for item in self.items.values():
            if item.attendance_training_id == training_id:
                item.clear_attendance()
                cleared += 1
        return cleared


class FakePendingAttendanceRepository:
    def __init__(self) -> None:
        self.items: list[PendingAttendance] = []

    def add(self, entity: PendingAttendance) -> None:
        entity.id = len(self.items) + 1
        self.items.append(entity)

    def upsert(self, record: PendingAttendance) -> PendingAttendance:
        for item in self.items:
            if (item.training_id, item.participant_name) == (
                record.training_id,
                record.participant_name,
            ):
                item.status = record.status
                item.total_minutes = record.total_minutes
                return item
        self.add(record)
        return record

    def get_unresolved(self, pending_id: int) -> PendingAttendance | None:
        for item in self.items:
            if item.id == pending_id and not item.is_resolved:
                return item
        return None

    def list_unresolved(self, *, training_id: str | None = None) -> list[PendingAttendance]:
        return [
            item
            for item in self.items
            if not item.is_resolved and (training_id is None or item.training_id == training_id)
        ]

    def mark_resolved(
        self,
        pending_id: int,
        *,
        registration_id: int,
        resolved_at: datetime,
    ) -> PendingAttendance:
        item = self.get_unresolved(pending_id)
        if item is None:
            raise PendingNotFoundError(f"Pending attendance {pending_id} not found")
        item.resolved_at = resolved_at
        item.final_registration_id = registration_id
        return item

    def delete_for_training(self, training_id: str) -> int:
        before = len(self.items)
        self.items = [item for item in self.items if item.training_id != training_id]
        return before - len(self.items)


@dataclass(slots=True)
class FakeAttendanceRepositories:
    registrations: FakeRegistrationRepository
    pending: FakePendingAttendanceRepository


class FakeAttendanceUnitOfWork:
    """Unit of work sharing one set of in-memory repositories across instances."""

    def __init__(self, repositories: FakeAttendanceRepositories) -> None:
        self.repositories = repositories
        self.commits = 0
        self.rollbacks = 0

    def __enter__(self) -> FakeAttendanceUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


if TYPE_CHECKING:
    from rollcall.domain.ports.persistence import (
        PendingAttendanceRepository,
        RegistrationRepository,
    )

    _check_registrations: RegistrationRepository = FakeRegistrationRepository()
    _check_pending: PendingAttendanceRepository = FakePendingAttendanceRepository()
