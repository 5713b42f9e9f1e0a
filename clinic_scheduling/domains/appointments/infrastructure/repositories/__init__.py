"""
Appointments Domain Repositories
"""

from clinic_scheduling.domains.appointments.infrastructure.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)
from clinic_scheduling.domains.appointments.infrastructure.repositories.lookups import (
    SQLAlchemyPetLookup,
    SQLAlchemyPractitionerLookup,
)

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyPetLookup",
    "SQLAlchemyPractitionerLookup",
]
