"""
Slot Generator

Greedy proposal of open appointment slots per practitioner for one day.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from ..entities.appointment import Appointment
from ..value_objects.appointment_type import AppointmentTypeCatalog
from ..value_objects.time_interval import overlaps


@dataclass(frozen=True)
class Slot:
    """An open slot, valid only at generation time."""

    practitioner_id: int
    start_time: datetime
    end_time: datetime
    duration_minutes: int

    @property
    def label(self) -> str:
        return self.start_time.strftime("%H:%M")


@dataclass
class SlotProposal:
    """Slots grouped by practitioner for a single appointment type and day."""

    duration_minutes: int
    slots_by_practitioner: dict[int, list[Slot]] = field(default_factory=dict)


class SlotGenerator:
    """
    Walks each operating window with a cursor and proposes non-overlapping slots.

    An accepted slot advances the cursor by the appointment duration, a
    rejected one by ``step_minutes``. The walk is greedy, so a gap that only
    opens between two step positions can be missed.
    """

    def __init__(self, catalog: AppointmentTypeCatalog, clinic_tz: tzinfo, step_minutes: int = 15):
        self.catalog = catalog
        self.clinic_tz = clinic_tz
        self.step_minutes = step_minutes

    def generate(
        self,
        target_date: date,
        appointment_type: str | None,
        practitioner_ids: Iterable[int],
        existing_appointments: Iterable[Appointment],
    ) -> SlotProposal:
        """
        Propose slots for every requested practitioner.

        Args:
            target_date: Day to plan, interpreted in the clinic timezone
            appointment_type: Catalog label (unknown labels use clinic hours)
            practitioner_ids: Practitioners to plan for
            existing_appointments: Appointments of that day; cancelled ones are ignored

        Returns:
            SlotProposal with one entry per practitioner, possibly empty
        """
        duration = self.catalog.duration_for(appointment_type)
        windows = self.catalog.windows_for(appointment_type)
        length = timedelta(minutes=duration)
        step = timedelta(minutes=self.step_minutes)

        busy: dict[int, list[tuple[datetime, datetime]]] = {}
        for appointment in existing_appointments:
            if appointment.practitioner_id is None or appointment.start_time is None:
                continue
            if not appointment.occupies_time():
                continue
            busy.setdefault(appointment.practitioner_id, []).append(
                (appointment.start_time, appointment.end_time)
            )

        proposal = SlotProposal(duration_minutes=duration)
        for practitioner_id in practitioner_ids:
            taken = busy.get(practitioner_id, [])
            slots: list[Slot] = []
            for window in windows:
                window_start = datetime.combine(target_date, window.open_time, tzinfo=self.clinic_tz)
                window_end = datetime.combine(target_date, window.close_time, tzinfo=self.clinic_tz)
                last_start = window_end - length
                cursor = window_start
                while cursor <= last_start:
                    slot_end = cursor + length
                    if any(overlaps(cursor, slot_end, start, end) for start, end in taken):
                        cursor += step
                        continue
                    slots.append(Slot(practitioner_id, cursor, slot_end, duration))
                    cursor = slot_end
            slots.sort(key=lambda s: s.start_time)
            proposal.slots_by_practitioner[practitioner_id] = slots
        return proposal
