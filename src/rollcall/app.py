"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from rollcall.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    is_started,
    startup,
)
from rollcall.adapters.zoom import parse_export
from rollcall.config import get_presence_defaults
from rollcall.domain.attendance import build_workspace, build_workspace_async
from rollcall.domain.attendance.workspace import MIN_SEARCH_LENGTH
from rollcall.domain.attendance import persist as attendance_persist
from rollcall.domain.model import Registration, WindowConfig
from rollcall.domain.ports.unit_of_work import AttendanceUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rollcall.domain.attendance import ReviewWorkspace
    from rollcall.domain.attendance.persist import ConfirmationReport
    from rollcall.domain.model import PendingAttendance, RegistrationCandidate

UnitOfWorkFactory = Callable[[], AttendanceUnitOfWork]
Clock = Callable[[], datetime]


log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ResetResult:
    cleared: int
    pending_deleted: int


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _resolve_uow(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyAttendanceUnitOfWork


def build_window_config(
    *,
    training_id: str,
    live_start: datetime | None,
    window_start: datetime | None = None,
    window_end: datetime | None = None,
    live_end: datetime | None = None,
    has_window: bool = True,
    min_minutes: int | None = None,
    min_percent: int | None = None,
    total_days: int = 1,
    current_day: int = 1,
) -> WindowConfig:
    """Assemble a window config, falling back to the environment's presence defaults."""

    defaults = get_presence_defaults()
    config = WindowConfig(
        training_id=training_id,
        live_start=live_start,
        window_start=window_start,
        window_end=window_end,
        live_end=live_end,
        has_window=has_window,
        min_minutes=defaults.min_minutes if min_minutes is None else min_minutes,
        min_percent=defaults.min_percent if min_percent is None else min_percent,
        total_days=total_days,
        current_day=current_day,
    )
    config.validate()
    return config


def load_candidates(
    training_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[RegistrationCandidate]:
    """Read the registrations of a training as matcher candidates."""

    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        registrations = uow.repositories.registrations.list_for_training(training_id)
        candidates = [registration.to_candidate() for registration in registrations]
    log.info("Loaded %s candidates for training %s", len(candidates), training_id)
    return candidates


def _exclusions(exclusions: Sequence[str] | None) -> Sequence[str]:
    if exclusions is not None:
        return exclusions
    return get_presence_defaults().excluded_names


def prepare_review(
    text: str,
    config: WindowConfig,
    *,
    exclusions: Sequence[str] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReviewWorkspace:
    """Parse an export and match it against the training's registrations."""

    config.validate()
    candidates = load_candidates(config.training_id, unit_of_work_factory=unit_of_work_factory)
    return build_workspace(
        text,
        config,
        candidates,
        _exclusions(exclusions),
        parser=parse_export,
    )


async def prepare_review_async(
    text: str,
    config: WindowConfig,
    *,
    exclusions: Sequence[str] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReviewWorkspace:
    config.validate()
    candidates = await asyncio.to_thread(
        load_candidates,
        config.training_id,
        unit_of_work_factory=unit_of_work_factory,
    )
    return await build_workspace_async(
        text,
        config,
        candidates,
        _exclusions(exclusions),
        parser=parse_export,
    )


def confirm_review(
    workspace: ReviewWorkspace,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = _utcnow,
) -> ConfirmationReport:
    """Persist the confirmed links and queue unresolved participants."""

    return attendance_persist.persist_confirmations(
        workspace,
        unit_of_work_factory=_resolve_uow(unit_of_work_factory),
        clock=clock,
    )


def resolve_pending(
    pending_id: int,
    registration_id: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = _utcnow,
) -> Registration:
    registration = attendance_persist.resolve_pending(
        pending_id,
        registration_id,
        unit_of_work_factory=_resolve_uow(unit_of_work_factory),
        clock=clock,
    )
    log.info("Resolved pending entry %s to registration %s", pending_id, registration_id)
    return registration


def list_pending(
    *,
    training_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[PendingAttendance]:
    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        return list(uow.repositories.pending.list_unresolved(training_id=training_id))


def list_attendance(
    *,
    training_id: str | None = None,
    approved_only: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Registration]:
    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        return list(
            uow.repositories.registrations.list_attendance(
                training_id=training_id,
                approved_only=approved_only,
            )
        )


def unlink_attendance(
    registration_id: int,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Registration:
    """Remove a stored attendance outcome from one registration."""

    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        registration = uow.repositories.registrations.clear_attendance(registration_id)
        uow.commit()
    log.info("Cleared attendance of registration %s", registration_id)
    return registration


def reset_training(
    training_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ResetResult:
    """Clear every attendance outcome of a training and drop its pending queue."""

    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        cleared = uow.repositories.registrations.reset_training(training_id)
        pending_deleted = uow.repositories.pending.delete_for_training(training_id)
        uow.commit()
    log.info(
        "Reset training %s: cleared=%s, pending_deleted=%s",
        training_id,
        cleared,
        pending_deleted,
    )
    return ResetResult(cleared=cleared, pending_deleted=pending_deleted)


def search_registrations(
    query: str,
    *,
    limit: int = 20,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[Registration]:
    """Find registrations by a name or phone fragment of at least two characters."""

    if len(query.strip()) < MIN_SEARCH_LENGTH:
        return []
    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        return list(uow.repositories.registrations.search(query, limit=limit))


def add_registration(
    *,
    training_id: str,
    display_name: str,
    phone: str | None = None,
    city: str | None = None,
    email: str | None = None,
    recruiter_code: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = _utcnow,
) -> Registration:
    """Create a registration that later exports can be matched against."""

    if not display_name.strip():
        raise ValueError("Registration name must not be empty")

    registration = Registration(
        training_id=training_id,
        display_name=display_name.strip(),
        phone=phone,
        city=city,
        email=email,
        recruiter_code=recruiter_code,
        created_at=clock(),
    )
    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        uow.repositories.registrations.add(registration)
        uow.commit()
    log.info("Created registration %s for training %s", registration.id, training_id)
    return registration
