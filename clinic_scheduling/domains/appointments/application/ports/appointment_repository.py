"""
Appointment Repository Port

Interface for appointment data access following Clean Architecture.
"""

from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from clinic_scheduling.domains.appointments.application.dto import AppointmentFilters
from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_status import AppointmentStatus


@runtime_checkable
class IAppointmentRepository(Protocol):
    """
    Appointment repository interface.

    Write methods commit their own transaction. ``lock_practitioner`` holds a
    row lock until that commit, so a lock taken before the conflict check
    covers the following insert or update.
    """

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """
        Find appointment by ID, display names included.

        Args:
            appointment_id: Unique appointment identifier

        Returns:
            Appointment if found, None otherwise
        """
        ...

    async def find_by_practitioner_and_day(self, practitioner_id: int, day: date) -> list[Appointment]:
        """Non-cancelled appointments of one practitioner on a clinic-local day."""
        ...

    async def find_by_day(self, day: date) -> list[Appointment]:
        """Non-cancelled appointments of every practitioner on a clinic-local day."""
        ...

    async def find_conflict_candidates(
        self,
        practitioner_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """
        Non-cancelled appointments of the practitioner intersecting [window_start, window_end).

        Args:
            practitioner_id: Practitioner ID
            window_start: Candidate start minus buffer
            window_end: Candidate end plus buffer
            exclude_appointment_id: Appointment being rescheduled

        Returns:
            Appointments that may conflict
        """
        ...

    async def lock_practitioner(self, practitioner_id: int) -> None:
        """Serialize writers for this practitioner until the current transaction ends."""
        ...

    async def insert(self, appointment: Appointment) -> Appointment:
        """
        Persist a new appointment.

        Returns:
            Stored appointment with ID and display names
        """
        ...

    async def update_fields(self, appointment_id: int, fields: dict[str, Any]) -> Appointment | None:
        """Partial update; keys not in ``fields`` keep their stored value."""
        ...

    async def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        cancellation_reason: str | None = None,
    ) -> Appointment | None:
        """Persist a status change."""
        ...

    async def delete(self, appointment_id: int) -> bool:
        """
        Delete appointment.

        Returns:
            True if deleted
        """
        ...

    async def list_by_filters(
        self,
        filters: AppointmentFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Appointment], int]:
        """
        Page through appointments, newest start first.

        Returns:
            (items, total matching count)
        """
        ...
