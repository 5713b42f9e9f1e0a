"""
Shared pytest fixtures for all tests.

Provides in-memory fakes of the appointment ports, a catalog built on the
default clinic hours, and ready-wired application services.
"""

import os
from dataclasses import replace
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

import pytest

# Ensure test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["CLINIC_TIMEZONE"] = "UTC"

from clinic_scheduling.core.domain import EntityNotFoundException  # noqa: E402
from clinic_scheduling.domains.appointments.application.dto import (  # noqa: E402
    Actor,
    AppointmentFilters,
    PetRef,
    PractitionerRef,
)
from clinic_scheduling.domains.appointments.application.services import (  # noqa: E402
    AppointmentAccessPolicy,
    AvailabilityService,
    BookingService,
)
from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment  # noqa: E402
from clinic_scheduling.domains.appointments.domain.services import OverlapChecker, SlotGenerator  # noqa: E402
from clinic_scheduling.domains.appointments.domain.value_objects import (  # noqa: E402
    DEFAULT_PROFILES,
    AppointmentStatus,
    AppointmentTypeCatalog,
)

DAY = date(2024, 6, 1)


# ============================================================================
# IN-MEMORY PORTS
# ============================================================================


class InMemoryAppointmentRepository:
    """Dict-backed IAppointmentRepository. Returns copies so callers can't mutate stored rows."""

    def __init__(self, names: dict[str, dict[int, str]] | None = None):
        self.rows: dict[int, Appointment] = {}
        self.next_id = 1
        self.locked: list[int] = []
        self.names = names or {"pet": {}, "owner": {}, "practitioner": {}}

    def _out(self, appointment: Appointment) -> Appointment:
        return replace(
            appointment,
            pet_name=self.names["pet"].get(appointment.pet_id),
            owner_name=self.names["owner"].get(appointment.owner_id),
            practitioner_name=self.names["practitioner"].get(appointment.practitioner_id),
        )

    def add(self, **fields: Any) -> Appointment:
        """Seed a stored appointment directly."""
        fields.setdefault("pet_id", 10)
        fields.setdefault("owner_id", 3)
        appointment = Appointment(id=self.next_id, **fields)
        self.rows[appointment.id] = appointment
        self.next_id += 1
        return appointment

    def _active(self):
        return [a for a in self.rows.values() if a.status != AppointmentStatus.CANCELLED]

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        appointment = self.rows.get(appointment_id)
        return self._out(appointment) if appointment else None

    async def find_by_practitioner_and_day(self, practitioner_id: int, day: date) -> list[Appointment]:
        return [
            self._out(a)
            for a in self._active()
            if a.practitioner_id == practitioner_id and a.start_time.date() == day
        ]

    async def find_by_day(self, day: date) -> list[Appointment]:
        return [self._out(a) for a in self._active() if a.start_time.date() == day]

    async def find_conflict_candidates(
        self,
        practitioner_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        return [
            self._out(a)
            for a in self._active()
            if a.practitioner_id == practitioner_id
            and a.id != exclude_appointment_id
            and a.start_time < window_end
            and a.end_time > window_start
        ]

    async def lock_practitioner(self, practitioner_id: int) -> None:
        self.locked.append(practitioner_id)

    async def insert(self, appointment: Appointment) -> Appointment:
        stored = replace(appointment, id=self.next_id)
        self.rows[stored.id] = stored
        self.next_id += 1
        return self._out(stored)

    async def update_fields(self, appointment_id: int, fields: dict[str, Any]) -> Appointment | None:
        if appointment_id not in self.rows:
            return None
        self.rows[appointment_id] = replace(self.rows[appointment_id], **fields)
        return self._out(self.rows[appointment_id])

    async def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        cancellation_reason: str | None = None,
    ) -> Appointment | None:
        if appointment_id not in self.rows:
            return None
        changes: dict[str, Any] = {"status": status}
        if cancellation_reason is not None:
            changes["cancellation_reason"] = cancellation_reason
        self.rows[appointment_id] = replace(self.rows[appointment_id], **changes)
        return self._out(self.rows[appointment_id])

    async def delete(self, appointment_id: int) -> bool:
        return self.rows.pop(appointment_id, None) is not None

    async def list_by_filters(
        self,
        filters: AppointmentFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Appointment], int]:
        items = [
            a
            for a in self.rows.values()
            if (filters.pet_id is None or a.pet_id == filters.pet_id)
            and (filters.owner_id is None or a.owner_id == filters.owner_id)
            and (filters.practitioner_id is None or a.practitioner_id == filters.practitioner_id)
            and (filters.date_from is None or a.start_time >= filters.date_from)
            and (filters.date_to is None or a.start_time <= filters.date_to)
        ]
        items.sort(key=lambda a: a.start_time, reverse=True)
        return [self._out(a) for a in items[offset : offset + limit]], len(items)


class InMemoryPetLookup:
    def __init__(self, pets: dict[int, PetRef]):
        self.pets = pets

    async def get(self, pet_id: int) -> PetRef:
        if pet_id not in self.pets:
            raise EntityNotFoundException(entity_type="Pet", entity_id=pet_id)
        return self.pets[pet_id]


class InMemoryPractitionerLookup:
    def __init__(self, users: dict[int, PractitionerRef]):
        self.users = users

    async def find(self, user_id: int) -> PractitionerRef | None:
        return self.users.get(user_id)

    async def list_practitioners(self) -> list[PractitionerRef]:
        return [u for _, u in sorted(self.users.items()) if u.is_practitioner]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def at():
    """Build an aware UTC datetime on the test day: at(10, 30)."""

    def _at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
        return datetime.combine(day, time(hour, minute), tzinfo=UTC)

    return _at


@pytest.fixture
def catalog() -> AppointmentTypeCatalog:
    return AppointmentTypeCatalog(DEFAULT_PROFILES, time(7, 0), time(17, 0))


@pytest.fixture
def pets() -> InMemoryPetLookup:
    return InMemoryPetLookup(
        {
            10: PetRef(id=10, owner_id=3, name="Rex"),
            11: PetRef(id=11, owner_id=4, name="Luna"),
        }
    )


@pytest.fixture
def practitioners() -> InMemoryPractitionerLookup:
    return InMemoryPractitionerLookup(
        {
            1: PractitionerRef(id=1, name="Dr. Vega", role="admin", is_practitioner=True),
            2: PractitionerRef(id=2, name="Dr. Paz", role="admin", is_practitioner=True),
            5: PractitionerRef(id=5, name="Front Desk", role="user", is_practitioner=False),
        }
    )


@pytest.fixture
def repository() -> InMemoryAppointmentRepository:
    return InMemoryAppointmentRepository(
        names={
            "pet": {10: "Rex", 11: "Luna"},
            "owner": {3: "Ana Gomez", 4: "Luis Ruiz"},
            "practitioner": {1: "Dr. Vega", 2: "Dr. Paz"},
        }
    )


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=1, role="admin")


@pytest.fixture
def owner() -> Actor:
    """Owner of pet 10."""
    return Actor(user_id=3, role="user")


@pytest.fixture
def booking_service(repository, pets, practitioners, catalog) -> BookingService:
    return BookingService(
        appointment_repository=repository,
        pet_lookup=pets,
        practitioner_lookup=practitioners,
        overlap_checker=OverlapChecker(repository, default_buffer_minutes=10),
        catalog=catalog,
        access_policy=AppointmentAccessPolicy(admin_role="admin"),
        clinic_tz=UTC,
    )


@pytest.fixture
def availability_service(repository, practitioners, catalog) -> AvailabilityService:
    return AvailabilityService(
        appointment_repository=repository,
        practitioner_lookup=practitioners,
        slot_generator=SlotGenerator(catalog, clinic_tz=UTC, step_minutes=15),
    )


@pytest.fixture
def slot_generator(catalog) -> SlotGenerator:
    return SlotGenerator(catalog, clinic_tz=UTC, step_minutes=15)


@pytest.fixture
def minutes():
    return lambda n: timedelta(minutes=n)
