"""
Appointment Entity for Appointments Domain

Represents a veterinary appointment with scheduling and status tracking.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from clinic_scheduling.core.domain import (
    Entity,
    InvalidOperationException,
    ValidationException,
)

from ..value_objects.appointment_status import AppointmentStatus
from ..value_objects.time_interval import TimeInterval


@dataclass(eq=False)
class Appointment(Entity[int]):
    """
    Appointment entity.

    A practitioner's time between ``start_time`` and ``end_time`` is blocked
    while the appointment is not cancelled.

    Example:
        ```python
        appointment = Appointment(
            pet_id=7,
            owner_id=3,
            practitioner_id=2,
            start_time=datetime(2024, 6, 1, 10, 0, tzinfo=UTC),
            duration_minutes=30,
        )
        appointment.confirm()
        appointment.complete()
        ```
    """

    # References
    pet_id: int = 0
    owner_id: int = 0
    practitioner_id: int | None = None

    # Scheduling
    appointment_type: str = "general consultation"
    reason: str | None = None
    start_time: datetime | None = None
    duration_minutes: int = 30

    # Status
    status: AppointmentStatus = AppointmentStatus.PENDING
    cancellation_reason: str | None = None

    created_by: int | None = None

    # Display names, resolved on read
    pet_name: str | None = None
    owner_name: str | None = None
    practitioner_name: str | None = None

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValidationException("Duration must be a positive number of minutes", field="duration_minutes")

    @property
    def end_time(self) -> datetime | None:
        """Start plus duration."""
        if self.start_time is None:
            return None
        return self.start_time + timedelta(minutes=self.duration_minutes)

    @property
    def interval(self) -> TimeInterval | None:
        if self.start_time is None:
            return None
        return TimeInterval.from_duration(self.start_time, self.duration_minutes)

    def occupies_time(self) -> bool:
        return self.status.occupies_time()

    # Status Transitions

    def _transition(self, operation: str, target: AppointmentStatus) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidOperationException(
                operation=operation,
                current_state=self.status.value,
            )
        self.status = target
        self.touch()

    def confirm(self) -> None:
        """Confirm a pending appointment."""
        self._transition("confirm", AppointmentStatus.CONFIRMED)

    def complete(self) -> None:
        """Mark a confirmed appointment as completed."""
        self._transition("complete", AppointmentStatus.COMPLETED)

    def cancel(self, reason: str | None = None) -> None:
        """Cancel a pending or confirmed appointment."""
        self._transition("cancel", AppointmentStatus.CANCELLED)
        if reason:
            self.cancellation_reason = reason

    def change_status(self, target: "AppointmentStatus | str") -> None:
        """
        Set an arbitrary status.

        Any of the four states is accepted while the appointment is not in a
        terminal state; forward-only order is not enforced here.

        Raises:
            ValidationException: Unknown status label
            InvalidOperationException: Appointment is completed or cancelled
        """
        if isinstance(target, AppointmentStatus):
            new_status = target
        else:
            try:
                new_status = AppointmentStatus.from_string(str(target))
            except ValueError as e:
                raise ValidationException(
                    f"Invalid status. Allowed values: {', '.join(AppointmentStatus.values())}",
                    field="status",
                ) from e

        if self.status.is_terminal():
            raise InvalidOperationException(
                operation="change_status",
                current_state=self.status.value,
            )

        self.status = new_status
        self.touch()
