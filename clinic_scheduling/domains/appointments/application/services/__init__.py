"""
Appointments Application Services
"""

from clinic_scheduling.domains.appointments.application.services.access_policy import AppointmentAccessPolicy
from clinic_scheduling.domains.appointments.application.services.availability_service import AvailabilityService
from clinic_scheduling.domains.appointments.application.services.booking_service import (
    BookingService,
    ensure_schedulable,
    parse_start_time,
    positive_minutes,
)

__all__ = [
    "AppointmentAccessPolicy",
    "AvailabilityService",
    "BookingService",
    "ensure_schedulable",
    "parse_start_time",
    "positive_minutes",
]
