"""
Availability Service

Read path that proposes open slots for a day. Takes no locks; the result may
be stale by the time a booking is attempted.
"""

import logging
from datetime import date

from clinic_scheduling.core.domain import ValidationException
from clinic_scheduling.domains.appointments.application.ports import IAppointmentRepository, IPractitionerLookup
from clinic_scheduling.domains.appointments.domain.services.slot_generator import SlotGenerator, SlotProposal

logger = logging.getLogger(__name__)


class AvailabilityService:
    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        practitioner_lookup: IPractitionerLookup,
        slot_generator: SlotGenerator,
        default_appointment_type: str = "general consultation",
    ):
        self.appointment_repo = appointment_repository
        self.practitioner_lookup = practitioner_lookup
        self.slot_generator = slot_generator
        self.default_appointment_type = default_appointment_type

    async def get_slots(
        self,
        target_date: date,
        appointment_type: str | None = None,
        practitioner_id: int | None = None,
    ) -> SlotProposal:
        """
        Propose slots for every practitioner, or only ``practitioner_id``.

        Args:
            target_date: Clinic-local day
            appointment_type: Catalog label, default type when omitted
            practitioner_id: Restrict to one practitioner; unknown IDs yield no entries

        Returns:
            SlotProposal keyed by practitioner ID

        Raises:
            ValidationException: Day at the edge of the supported date range
        """
        if not date.min < target_date < date.max:
            raise ValidationException(f"Invalid date: {target_date.isoformat()}", field="date")

        appointment_type = appointment_type or self.default_appointment_type
        practitioners = await self.practitioner_lookup.list_practitioners()

        if practitioner_id is not None:
            practitioner_ids = [p.id for p in practitioners if p.id == practitioner_id]
            if practitioner_ids:
                existing = await self.appointment_repo.find_by_practitioner_and_day(practitioner_id, target_date)
            else:
                existing = []
        else:
            practitioner_ids = [p.id for p in practitioners]
            existing = await self.appointment_repo.find_by_day(target_date) if practitioner_ids else []

        proposal = self.slot_generator.generate(target_date, appointment_type, practitioner_ids, existing)
        logger.debug(
            f"Generated slots for {target_date.isoformat()} type={appointment_type!r} "
            f"practitioners={practitioner_ids}"
        )
        return proposal
