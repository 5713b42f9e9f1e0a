"""
Overlap Checker

Decides whether a proposed appointment collides with a practitioner's
existing bookings once the post-appointment buffer is taken into account.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterable, Protocol

from ..entities.appointment import Appointment
from ..value_objects.time_interval import TimeInterval

logger = logging.getLogger(__name__)


class ConflictCandidateSource(Protocol):
    """Anything able to prefetch a practitioner's possibly-conflicting appointments."""

    async def find_conflict_candidates(
        self,
        practitioner_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]: ...


class OverlapChecker:
    """
    Buffered conflict detection for a single practitioner.

    Two intervals conflict when, after extending both ENDS by the buffer,
    they overlap. Cancelled appointments never conflict.

    Example:
        ```python
        checker = OverlapChecker(appointment_repository, default_buffer_minutes=10)
        if await checker.has_conflict(2, start, 30):
            raise AppointmentConflictException(practitioner_id=2)
        ```
    """

    def __init__(self, source: ConflictCandidateSource, default_buffer_minutes: int = 10):
        self.source = source
        self.default_buffer_minutes = default_buffer_minutes

    @staticmethod
    def find_conflicts(
        candidate_start: datetime,
        candidate_duration: int,
        buffer_minutes: int,
        existing: Iterable[Appointment],
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """Return the appointments in ``existing`` that conflict with the candidate."""
        candidate = TimeInterval.from_duration(candidate_start, candidate_duration)

        conflicts = []
        for appointment in existing:
            if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
                continue
            if not appointment.occupies_time() or appointment.start_time is None:
                continue
            if candidate.overlaps_with_buffer(appointment.interval, buffer_minutes):
                conflicts.append(appointment)
        return conflicts

    async def has_conflict(
        self,
        practitioner_id: int | None,
        candidate_start: datetime,
        candidate_duration: int,
        buffer_minutes: int | None = None,
        exclude_appointment_id: int | None = None,
    ) -> bool:
        """
        Check the candidate against the practitioner's stored appointments.

        Args:
            practitioner_id: Practitioner to check; None never conflicts
            candidate_start: Proposed start
            candidate_duration: Proposed duration in minutes
            buffer_minutes: Gap required after each appointment (default from settings)
            exclude_appointment_id: Appointment being rescheduled

        Returns:
            True if any non-cancelled appointment conflicts
        """
        if practitioner_id is None:
            return False

        buffer_minutes = self.default_buffer_minutes if buffer_minutes is None else buffer_minutes
        buffer = timedelta(minutes=buffer_minutes)
        candidate_end = candidate_start + timedelta(minutes=candidate_duration)

        # E.start < candidate_end + buffer and candidate_start < E.end + buffer
        candidates = await self.source.find_conflict_candidates(
            practitioner_id,
            window_start=candidate_start - buffer,
            window_end=candidate_end + buffer,
            exclude_appointment_id=exclude_appointment_id,
        )
        conflicts = self.find_conflicts(
            candidate_start,
            candidate_duration,
            buffer_minutes,
            candidates,
            exclude_appointment_id,
        )
        if conflicts:
            logger.debug(
                f"Practitioner {practitioner_id} has {len(conflicts)} conflicting appointment(s) "
                f"for {candidate_start.isoformat()} (+{candidate_duration}m, buffer {buffer_minutes}m)"
            )
        return bool(conflicts)
