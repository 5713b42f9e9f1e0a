"""
Appointments Application DTOs

Plain data carried between the API layer, the services and the ports.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment


class _Unset:
    """Marker for a field that was not supplied in a partial update."""

    _instance: "_Unset | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as asserted by the upstream identity provider."""

    user_id: int
    role: str


@dataclass(frozen=True)
class PetRef:
    id: int
    owner_id: int
    name: str | None = None


@dataclass(frozen=True)
class PractitionerRef:
    id: int
    name: str | None
    role: str
    is_practitioner: bool


@dataclass
class CreateAppointmentRequest:
    """Input for booking a new appointment.

    ``start_time`` accepts a datetime or an ISO 8601 string; naive values are
    read in the clinic timezone.
    """

    pet_id: int | None = None
    owner_id: int | None = None
    start_time: datetime | str | None = None
    practitioner_id: int | None = None
    appointment_type: str | None = None
    reason: str | None = None
    duration_minutes: int | None = None
    buffer_minutes: int | None = None


@dataclass
class UpdateAppointmentRequest:
    """Partial update. Fields left as UNSET keep their stored value.

    ``practitioner_id=None`` clears the assignment.
    """

    pet_id: Any = UNSET
    owner_id: Any = UNSET
    practitioner_id: Any = UNSET
    start_time: Any = UNSET
    appointment_type: Any = UNSET
    reason: Any = UNSET
    duration_minutes: Any = UNSET
    buffer_minutes: int | None = None

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not UNSET

    def value_or(self, name: str, fallback: Any) -> Any:
        value = getattr(self, name)
        return fallback if value is UNSET or value is None else value


@dataclass
class AppointmentFilters:
    pet_id: int | None = None
    owner_id: int | None = None
    practitioner_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@dataclass
class AppointmentPage:
    """One page of appointments plus the total matching count."""

    items: list[Appointment] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 50


__all__ = [
    "UNSET",
    "Actor",
    "AppointmentFilters",
    "AppointmentPage",
    "CreateAppointmentRequest",
    "PetRef",
    "PractitionerRef",
    "UpdateAppointmentRequest",
]
