"""Ports for the external registration store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rollcall.domain.model import PendingAttendance, Registration

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rollcall.domain.model import ConfirmationRecord


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class RegistrationRepository(Repository[Registration], Protocol):
    """Read candidates for a training and upsert attendance outcomes by id."""

    def get(self, registration_id: int) -> Registration | None: ...

    def list_for_training(self, training_id: str) -> Sequence[Registration]: ...

    def search(self, query: str, *, limit: int = 20) -> Sequence[Registration]: ...

    def upsert_attendance(
        self,
        record: ConfirmationRecord,
        *,
        training_id: str,
        validated_at: datetime,
    ) -> Registration: ...

    def clear_attendance(self, registration_id: int) -> Registration: ...

    def list_attendance(
        self,
        *,
        training_id: str | None = None,
        approved_only: bool = True,
    ) -> Sequence[Registration]: ...

    def reset_training(self, training_id: str) -> int: ...


@runtime_checkable
class PendingAttendanceRepository(Repository[PendingAttendance], Protocol):
    """Queue of not-found/doubt participants awaiting manual resolution."""

    def upsert(self, record: PendingAttendance) -> PendingAttendance: ...

    def get_unresolved(self, pending_id: int) -> PendingAttendance | None: ...

    def list_unresolved(self, *, training_id: str | None = None) -> Sequence[PendingAttendance]: ...

    def mark_resolved(
        self,
        pending_id: int,
        *,
        registration_id: int,
        resolved_at: datetime,
    ) -> PendingAttendance: ...

    def delete_for_training(self, training_id: str) -> int: ...
