"""SQLAlchemy mapping metadata for registrations and the pending queue."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from rollcall.domain.model import PendingAttendance, PendingStatus, Registration

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def _day_columns(day: int) -> list[Column[Any]]:
    prefix = f"attendance_day{day}_"
    return [
        Column(f"{prefix}participant_name", String, nullable=True),
        Column(f"{prefix}approved", Boolean, nullable=True),
        Column(f"{prefix}total_minutes", Integer, nullable=True),
        Column(f"{prefix}window_minutes", Integer, nullable=True),
        Column(f"{prefix}window_percentage", Integer, nullable=True),
        Column(f"{prefix}has_window", Boolean, nullable=True),
    ]


registration_table = Table(
    "registration",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("training_id", String, nullable=False),
    Column("display_name", String, nullable=False),
    Column("phone", String, nullable=True),
    Column("city", String, nullable=True),
    Column("email", String, nullable=True),
    Column("recruiter_code", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("attendance_validated", Boolean, nullable=False, default=False),
    Column("attendance_approved", Boolean, nullable=True),
    Column("attendance_participant_name", String, nullable=True),
    Column("attendance_total_minutes", Integer, nullable=True),
    Column("attendance_window_minutes", Integer, nullable=True),
    Column("attendance_window_percentage", Integer, nullable=True),
    Column("attendance_has_window", Boolean, nullable=True),
    Column("attendance_total_days", Integer, nullable=True),
    Column("attendance_processed_day", Integer, nullable=True),
    Column("attendance_training_id", String, nullable=True),
    Column("attendance_validated_at", UTCDateTime(), nullable=True),
    *_day_columns(1),
    *_day_columns(2),
    Index("ix_registration_training_id", "training_id"),
    Index("ix_registration_attendance_training_id", "attendance_training_id"),
)

pending_attendance_table = Table(
    "pending_attendance",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("training_id", String, nullable=False),
    Column("participant_name", String, nullable=False),
    Column("status", Enum(PendingStatus, native_enum=False), nullable=False),
    Column("approved", Boolean, nullable=False, default=False),
    Column("total_minutes", Integer, nullable=False, default=0),
    Column("window_minutes", Integer, nullable=False, default=0),
    Column("window_percentage", Integer, nullable=False, default=0),
    Column("candidate_a_id", Integer, nullable=True),
    Column("candidate_a_name", String, nullable=True),
    Column("candidate_b_id", Integer, nullable=True),
    Column("candidate_b_name", String, nullable=True),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("resolved_at", UTCDateTime(), nullable=True),
    Column("final_registration_id", Integer, nullable=True),
    UniqueConstraint("participant_name", "training_id"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Registration, registration_table)
    mapper_registry.map_imperatively(PendingAttendance, pending_attendance_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
