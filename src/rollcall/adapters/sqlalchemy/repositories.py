"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, or_, select, update

from rollcall.adapters.sqlalchemy.mappings import (
    pending_attendance_table,
    registration_table,
)
from rollcall.domain.errors import PendingNotFoundError, RegistrationNotFoundError
from rollcall.domain.model import ATTENDANCE_FIELDS, PendingAttendance, Registration

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy.orm import Session

    from rollcall.domain.model import ConfirmationRecord

_CLEARED_ATTENDANCE: dict[str, object] = {
    **dict.fromkeys(ATTENDANCE_FIELDS),
    "attendance_validated": False,
}


class SqlAlchemyRegistrationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Registration) -> None:
        self.session.add(entity)

    def get(self, registration_id: int) -> Registration | None:
        return self.session.get(Registration, registration_id)

    def _require(self, registration_id: int) -> Registration:
        registration = self.get(registration_id)
        if registration is None:
            raise RegistrationNotFoundError(f"Registration {registration_id} does not exist")
        return registration

    def list_for_training(self, training_id: str) -> Sequence[Registration]:
        stmt = (
            select(Registration)
            .where(registration_table.c.training_id == training_id)
            .order_by(registration_table.c.display_name, registration_table.c.id)
        )
        return self.session.execute(stmt).scalars().all()

    def search(self, query: str, *, limit: int = 20) -> Sequence[Registration]:
        pattern = f"%{query.strip()}%"
        stmt = (
            select(Registration)
            .where(
                or_(
                    registration_table.c.display_name.ilike(pattern),
                    registration_table.c.phone.ilike(pattern),
                )
            )
            .order_by(registration_table.c.display_name, registration_table.c.id)
            .limit(limit)
        )
        return self.session.execute(stmt).scalars().all()

    def upsert_attendance(
        self,
        record: ConfirmationRecord,
        *,
        training_id: str,
        validated_at: datetime,
    ) -> Registration:
        registration = self._require(record.registration_id)
        registration.record_attendance(
            record,
            training_id=training_id,
            validated_at=validated_at,
        )
        self.session.flush()
        return registration

    def clear_attendance(self, registration_id: int) -> Registration:
        registration = self._require(registration_id)
        registration.clear_attendance()
        self.session.flush()
        return registration

    def list_attendance(
        self,
        *,
        training_id: str | None = None,
        approved_only: bool = True,
    ) -> Sequence[Registration]:
        stmt = select(Registration).where(registration_table.c.attendance_validated.is_(True))
        if training_id is not None:
            stmt = stmt.where(registration_table.c.attendance_training_id == training_id)
        if approved_only:
            stmt = stmt.where(registration_table.c.attendance_approved.is_(True))
        stmt = stmt.order_by(registration_table.c.display_name, registration_table.c.id)
        return self.session.execute(stmt).scalars().all()

    def reset_training(self, training_id: str) -> int:
        stmt = (
            update(Registration)
            .where(registration_table.c.attendance_training_id == training_id)
            .values(_CLEARED_ATTENDANCE)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount


class SqlAlchemyPendingAttendanceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: PendingAttendance) -> None:
        self.session.add(entity)

    def _find(self, training_id: str, participant_name: str) -> PendingAttendance | None:
        stmt = (
            select(PendingAttendance)
            .where(pending_attendance_table.c.training_id == training_id)
            .where(pending_attendance_table.c.participant_name == participant_name)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def upsert(self, record: PendingAttendance) -> PendingAttendance:
        """Insert, or refresh the figures of the entry for the same participant and training."""

        existing = self._find(record.training_id, record.participant_name)
        if existing is None:
            self.add(record)
            self.session.flush()
            return record

        existing.status = record.status
        existing.approved = record.approved
        existing.total_minutes = record.total_minutes
        existing.window_minutes = record.window_minutes
        existing.window_percentage = record.window_percentage
        existing.candidate_a_id = record.candidate_a_id
        existing.candidate_a_name = record.candidate_a_name
        existing.candidate_b_id = record.candidate_b_id
        existing.candidate_b_name = record.candidate_b_name
        self.session.flush()
        return existing

    def get_unresolved(self, pending_id: int) -> PendingAttendance | None:
        pending = self.session.get(PendingAttendance, pending_id)
        if pending is None or pending.is_resolved:
            return None
        return pending

    def list_unresolved(self, *, training_id: str | None = None) -> Sequence[PendingAttendance]:
        stmt = select(PendingAttendance).where(pending_attendance_table.c.resolved_at.is_(None))
        if training_id is not None:
            stmt = stmt.where(pending_attendance_table.c.training_id == training_id)
        stmt = stmt.order_by(
            pending_attendance_table.c.training_id,
            pending_attendance_table.c.participant_name,
        )
        return self.session.execute(stmt).scalars().all()

    def mark_resolved(
        self,
        pending_id: int,
        *,
        registration_id: int,
        resolved_at: datetime,
    ) -> PendingAttendance:
        pending = self.get_unresolved(pending_id)
        if pending is None:
            raise PendingNotFoundError(
                f"Pending attendance {pending_id} not found or already resolved"
            )
        pending.resolved_at = resolved_at
        pending.final_registration_id = registration_id
        self.session.flush()
        return pending

    def delete_for_training(self, training_id: str) -> int:
        stmt = (
            delete(PendingAttendance)
            .where(pending_attendance_table.c.training_id == training_id)
            .execution_options(synchronize_session="fetch")
        )
        return self.session.execute(stmt).rowcount
