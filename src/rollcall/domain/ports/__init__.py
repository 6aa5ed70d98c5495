"""Domain port definitions for adapters."""

from __future__ import annotations

from .parsing import ExportParser, ParseResult
from .persistence import PendingAttendanceRepository, RegistrationRepository, Repository
from .unit_of_work import (
    AttendanceRepositories,
    AttendanceUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AttendanceRepositories",
    "AttendanceUnitOfWork",
    "ExportParser",
    "ParseResult",
    "PendingAttendanceRepository",
    "RegistrationRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
]
