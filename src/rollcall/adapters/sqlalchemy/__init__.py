"""SQLAlchemy adapter package for rollcall."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyPendingAttendanceRepository, SqlAlchemyRegistrationRepository
from .unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAttendanceUnitOfWork",
    "SqlAlchemyPendingAttendanceRepository",
    "SqlAlchemyRegistrationRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
