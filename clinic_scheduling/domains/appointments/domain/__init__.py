"""
Appointments Domain Layer

Core scheduling rules for the appointments bounded context.

Components:
- Entities: Appointment
- Value Objects: AppointmentStatus, AppointmentTypeCatalog, OperatingWindow, TimeInterval
- Domain Services: OverlapChecker, SlotGenerator
"""

from clinic_scheduling.domains.appointments.domain.entities import Appointment
from clinic_scheduling.domains.appointments.domain.services import (
    OverlapChecker,
    Slot,
    SlotGenerator,
    SlotProposal,
)
from clinic_scheduling.domains.appointments.domain.value_objects import (
    AppointmentStatus,
    AppointmentTypeCatalog,
    AppointmentTypeProfile,
    OperatingWindow,
    TimeInterval,
    buffered_overlaps,
    get_catalog,
    overlaps,
)

__all__ = [
    # Entities
    "Appointment",
    # Value Objects
    "AppointmentStatus",
    "AppointmentTypeCatalog",
    "AppointmentTypeProfile",
    "OperatingWindow",
    "TimeInterval",
    "buffered_overlaps",
    "get_catalog",
    "overlaps",
    # Services
    "OverlapChecker",
    "Slot",
    "SlotGenerator",
    "SlotProposal",
]
