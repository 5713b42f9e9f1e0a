"""
Appointments Domain Entities
"""

from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment

__all__ = ["Appointment"]
