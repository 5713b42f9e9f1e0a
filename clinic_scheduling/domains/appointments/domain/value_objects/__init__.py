"""
Appointments Domain Value Objects
"""

from clinic_scheduling.domains.appointments.domain.value_objects.appointment_status import AppointmentStatus
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_type import (
    DEFAULT_PROFILES,
    AppointmentTypeCatalog,
    AppointmentTypeProfile,
    OperatingWindow,
    build_default_catalog,
    get_catalog,
)
from clinic_scheduling.domains.appointments.domain.value_objects.time_interval import (
    TimeInterval,
    buffered_overlaps,
    overlaps,
)

__all__ = [
    "AppointmentStatus",
    "AppointmentTypeCatalog",
    "AppointmentTypeProfile",
    "DEFAULT_PROFILES",
    "OperatingWindow",
    "TimeInterval",
    "build_default_catalog",
    "buffered_overlaps",
    "get_catalog",
    "overlaps",
]
