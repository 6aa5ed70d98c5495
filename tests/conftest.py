from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rollcall.adapters.sqlalchemy import create_all_tables, start_mappers
from rollcall.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyAttendanceUnitOfWork,
    shutdown,
    startup,
)
from rollcall.domain.model import RegistrationCandidate, WindowConfig

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyAttendanceUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyAttendanceUnitOfWork:
        return SqlAlchemyAttendanceUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def window_config() -> WindowConfig:
    """Live 19:00-21:00 with the activity window 20:00-21:00."""

    return WindowConfig(
        training_id="T-2026-01",
        live_start=datetime(2026, 1, 7, 19, 0),
        window_start=datetime(2026, 1, 7, 20, 0),
        window_end=datetime(2026, 1, 7, 21, 0),
        live_end=datetime(2026, 1, 7, 21, 0),
    )


@pytest.fixture
def candidates() -> list[RegistrationCandidate]:
    return [
        RegistrationCandidate(id=1, display_name="João Pereira", phone="11999990001"),
        RegistrationCandidate(id=2, display_name="Maria Silva", phone="11999990002"),
        RegistrationCandidate(
            id=3,
            display_name="Carlos Souza",
            phone="11999990003",
            email="carlos@example.com",
        ),
    ]
