"""
Appointments Domain Ports

Interfaces (ports) for the appointments domain following Clean Architecture.
"""

from clinic_scheduling.domains.appointments.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.appointments.application.ports.pet_lookup import IPetLookup
from clinic_scheduling.domains.appointments.application.ports.practitioner_lookup import IPractitionerLookup

__all__ = [
    "IAppointmentRepository",
    "IPetLookup",
    "IPractitionerLookup",
]
