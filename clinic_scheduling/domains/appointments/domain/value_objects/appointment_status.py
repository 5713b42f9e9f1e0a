"""
Appointment Status Value Object

Defines the lifecycle states of an appointment and their valid transitions.
"""

from clinic_scheduling.core.domain import StatusEnum

# Forward-only graph used by the dedicated confirm/complete/cancel operations.
_TRANSITIONS: dict[str, tuple[str, ...]] = {
    "pending": ("confirmed", "cancelled"),
    "confirmed": ("completed", "cancelled"),
    "completed": (),
    "cancelled": (),
}


class AppointmentStatus(StatusEnum):
    """
    Appointment lifecycle states.

    Valid transitions:
    - PENDING -> CONFIRMED, CANCELLED
    - CONFIRMED -> COMPLETED, CANCELLED
    - COMPLETED -> (terminal)
    - CANCELLED -> (terminal)
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def can_transition_to(self, new_status: "AppointmentStatus") -> bool:
        """Check if transition to new status follows the forward-only graph."""
        return new_status.value in _TRANSITIONS[self.value]

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return not _TRANSITIONS[self.value]

    def occupies_time(self) -> bool:
        """Whether an appointment in this state blocks the practitioner's time."""
        return self is not AppointmentStatus.CANCELLED
