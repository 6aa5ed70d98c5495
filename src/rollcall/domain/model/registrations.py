"""Registration store entities and the projections the matcher works with."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from rollcall.domain.model.enums import PendingStatus


@dataclass(slots=True, frozen=True, kw_only=True)
class RegistrationCandidate:
    """Read-only projection of a registration offered to the matcher."""

    id: int
    display_name: str
    phone: str | None = None
    city: str | None = None
    email: str | None = None
    recruiter_code: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class ConfirmationRecord:
    """Attendance outcome for one confirmed participant on one training day."""

    registration_id: int
    participant_display_name: str
    approved: bool
    total_minutes: int
    window_minutes: int
    window_percentage: int
    has_window: bool = True
    total_days: int = 1
    current_day: int = 1


@dataclass(slots=True, frozen=True)
class CandidateRef:
    id: int
    display_name: str


DAY_FIELDS = (
    "participant_name",
    "approved",
    "total_minutes",
    "window_minutes",
    "window_percentage",
    "has_window",
)

ATTENDANCE_FIELDS = (
    "attendance_validated",
    "attendance_approved",
    "attendance_participant_name",
    "attendance_total_minutes",
    "attendance_window_minutes",
    "attendance_window_percentage",
    "attendance_has_window",
    "attendance_total_days",
    "attendance_processed_day",
    "attendance_training_id",
    "attendance_validated_at",
    *(f"attendance_day{day}_{name}" for day in (1, 2) for name in DAY_FIELDS),
)


@dataclass(eq=False, kw_only=True)
class Registration:
    """A lead/recruiter registration together with its attendance outcome.

    Single-day trainings keep their outcome in the top-level ``attendance_*``
    fields. Two-day trainings also keep one set of ``attendance_dayN_*``
    fields per day: after day 1 the top level carries day 1's figures and is
    not approved yet; after day 2 it is approved only when both days are, and
    the minute totals are the sums of both days.
    """

    id: int | None = None
    training_id: str
    display_name: str
    phone: str | None = None
    city: str | None = None
    email: str | None = None
    recruiter_code: str | None = None
    created_at: datetime | None = None

    attendance_validated: bool = False
    attendance_approved: bool | None = None
    attendance_participant_name: str | None = None
    attendance_total_minutes: int | None = None
    attendance_window_minutes: int | None = None
    attendance_window_percentage: int | None = None
    attendance_has_window: bool | None = None
    attendance_total_days: int | None = None
    attendance_processed_day: int | None = None
    attendance_training_id: str | None = None
    attendance_validated_at: datetime | None = None

    attendance_day1_participant_name: str | None = None
    attendance_day1_approved: bool | None = None
    attendance_day1_total_minutes: int | None = None
    attendance_day1_window_minutes: int | None = None
    attendance_day1_window_percentage: int | None = None
    attendance_day1_has_window: bool | None = None

    attendance_day2_participant_name: str | None = None
    attendance_day2_approved: bool | None = None
    attendance_day2_total_minutes: int | None = None
    attendance_day2_window_minutes: int | None = None
    attendance_day2_window_percentage: int | None = None
    attendance_day2_has_window: bool | None = None

    def to_candidate(self) -> RegistrationCandidate:
        if self.id is None:
            raise ValueError("Registration has not been stored yet")
        return RegistrationCandidate(
            id=self.id,
            display_name=self.display_name or f"Registration #{self.id}",
            phone=self.phone,
            city=self.city,
            email=self.email,
            recruiter_code=self.recruiter_code,
        )

    def record_attendance(
        self,
        record: ConfirmationRecord,
        *,
        training_id: str,
        validated_at: datetime,
    ) -> None:
        """Overwrite any earlier outcome of the same day; re-confirming is idempotent."""

        self.attendance_validated = True
        self.attendance_participant_name = record.participant_display_name
        self.attendance_has_window = record.has_window
        self.attendance_total_days = record.total_days
        self.attendance_processed_day = record.current_day
        self.attendance_training_id = training_id
        self.attendance_validated_at = validated_at

        if record.total_days == 1:
            self.attendance_approved = record.approved
            self.attendance_total_minutes = record.total_minutes
            self.attendance_window_minutes = record.window_minutes
            self.attendance_window_percentage = record.window_percentage
            return

        self._record_day(record)
        if record.current_day == 1:
            self.attendance_approved = False
            self.attendance_total_minutes = record.total_minutes
            self.attendance_window_minutes = record.window_minutes
            self.attendance_window_percentage = record.window_percentage
            return

        self.attendance_approved = bool(self.attendance_day1_approved) and record.approved
        self.attendance_total_minutes = (
            self.attendance_day1_total_minutes or 0
        ) + record.total_minutes
        self.attendance_window_minutes = (
            self.attendance_day1_window_minutes or 0
        ) + record.window_minutes
        if self.attendance_window_percentage is None:
            self.attendance_window_percentage = record.window_percentage

    def _record_day(self, record: ConfirmationRecord) -> None:
        prefix = f"attendance_day{record.current_day}_"
        values = {
            "participant_name": record.participant_display_name,
            "approved": record.approved,
            "total_minutes": record.total_minutes,
            "window_minutes": record.window_minutes,
            "window_percentage": record.window_percentage,
            "has_window": record.has_window,
        }
        for name, value in values.items():
            setattr(self, prefix + name, value)

    def clear_attendance(self) -> None:
        for name in ATTENDANCE_FIELDS:
            setattr(self, name, None)
        self.attendance_validated = False


@dataclass(eq=False, kw_only=True)
class PendingAttendance:
    """A not-found or doubtful participant parked for a later resolution flow."""

    id: int | None = None
    training_id: str
    participant_name: str
    status: PendingStatus
    approved: bool = False
    total_minutes: int = 0
    window_minutes: int = 0
    window_percentage: int = 0
    candidate_a_id: int | None = None
    candidate_a_name: str | None = None
    candidate_b_id: int | None = None
    candidate_b_name: str | None = None
    created_at: datetime | None = None
    resolved_at: datetime | None = None
    final_registration_id: int | None = None

    @property
    def candidates(self) -> tuple[CandidateRef, ...]:
        refs: list[CandidateRef] = []
        if self.candidate_a_id is not None:
            refs.append(CandidateRef(self.candidate_a_id, self.candidate_a_name or ""))
        if self.candidate_b_id is not None:
            refs.append(CandidateRef(self.candidate_b_id, self.candidate_b_name or ""))
        return tuple(refs)

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None

    def as_confirmation(self, registration_id: int) -> ConfirmationRecord:
        return ConfirmationRecord(
            registration_id=registration_id,
            participant_display_name=self.participant_name,
            approved=self.approved,
            total_minutes=self.total_minutes,
            window_minutes=self.window_minutes,
            window_percentage=self.window_percentage,
        )
