"""
Appointments Domain Services
"""

from clinic_scheduling.domains.appointments.domain.services.overlap_checker import OverlapChecker
from clinic_scheduling.domains.appointments.domain.services.slot_generator import Slot, SlotGenerator, SlotProposal

__all__ = [
    "OverlapChecker",
    "Slot",
    "SlotGenerator",
    "SlotProposal",
]
