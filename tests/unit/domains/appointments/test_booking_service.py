"""
Unit tests for BookingService.

Runs against in-memory ports (see conftest.py) so the full
validate -> authorize -> lock -> check -> persist flow is exercised.
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest

from clinic_scheduling.core.domain import (
    AppointmentConflictException,
    AuthorizationException,
    EntityNotFoundException,
    InvalidOperationException,
    OwnershipMismatchException,
    ValidationException,
)
from clinic_scheduling.domains.appointments.application.dto import (
    Actor,
    AppointmentFilters,
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
)
from clinic_scheduling.domains.appointments.application.services import (
    ensure_schedulable,
    parse_start_time,
    positive_minutes,
)
from clinic_scheduling.domains.appointments.domain.value_objects import AppointmentStatus


def _request(**overrides) -> CreateAppointmentRequest:
    data = {
        "pet_id": 10,
        "owner_id": 3,
        "start_time": "2024-06-01T10:00:00",
        "practitioner_id": 1,
    }
    data.update(overrides)
    return CreateAppointmentRequest(**data)


# ============================================================================
# HELPERS
# ============================================================================


@pytest.mark.unit
class TestParsing:
    def test_naive_string_gets_clinic_timezone(self):
        tz = ZoneInfo("America/Argentina/Buenos_Aires")

        parsed = parse_start_time("2024-06-01T10:00", tz)

        assert parsed == datetime(2024, 6, 1, 10, 0, tzinfo=tz)

    def test_offset_string_kept(self):
        parsed = parse_start_time("2024-06-01T10:00:00+02:00", UTC)

        assert parsed == datetime(2024, 6, 1, 8, 0, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["tomorrow", "", "   ", None, 1717236000])
    def test_invalid_start_time(self, value):
        with pytest.raises(ValidationException) as exc_info:
            parse_start_time(value, UTC)

        assert exc_info.value.field == "start_time"

    @pytest.mark.parametrize("value,expected", [(45, 45), ("20", 20), (30.0, 30)])
    def test_positive_minutes(self, value, expected):
        assert positive_minutes(value, "duration_minutes") == expected

    @pytest.mark.parametrize("value", [0, -5, "abc", 12.5, True, None])
    def test_positive_minutes_rejects(self, value):
        with pytest.raises(ValidationException):
            positive_minutes(value, "duration_minutes")

    def test_positive_minutes_upper_bound(self):
        assert positive_minutes(1440, "duration_minutes", maximum=1440) == 1440

        with pytest.raises(ValidationException) as exc_info:
            positive_minutes(1441, "duration_minutes", maximum=1440)

        assert exc_info.value.details["maximum"] == 1440

    def test_ensure_schedulable_rejects_end_of_calendar(self):
        with pytest.raises(ValidationException) as exc_info:
            ensure_schedulable(datetime(9999, 12, 31, 23, 50, tzinfo=UTC), 30, 10)

        assert exc_info.value.field == "start_time"

    def test_ensure_schedulable_rejects_start_of_calendar(self):
        with pytest.raises(ValidationException):
            ensure_schedulable(datetime(1, 1, 1, 0, 5, tzinfo=UTC), 30, 10)


# ============================================================================
# CREATE
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
class TestCreate:
    async def test_books_pending_appointment(self, booking_service, repository, owner):
        # Act
        appointment = await booking_service.create(_request(appointment_type="vaccination"), owner)

        # Assert
        assert appointment.id is not None
        assert appointment.status == AppointmentStatus.PENDING
        assert appointment.start_time == datetime(2024, 6, 1, 10, 0, tzinfo=UTC)
        assert appointment.duration_minutes == 20
        assert appointment.created_by == 3
        assert appointment.pet_name == "Rex"
        assert appointment.practitioner_name == "Dr. Vega"
        assert repository.locked == [1]

    async def test_default_type_and_duration(self, booking_service, owner):
        appointment = await booking_service.create(_request(), owner)

        assert appointment.appointment_type == "general consultation"
        assert appointment.duration_minutes == 30

    async def test_unknown_type_uses_default_duration(self, booking_service, owner):
        appointment = await booking_service.create(_request(appointment_type="acupuncture"), owner)

        assert appointment.appointment_type == "acupuncture"
        assert appointment.duration_minutes == 30

    async def test_explicit_duration_wins(self, booking_service, owner):
        appointment = await booking_service.create(_request(appointment_type="surgery", duration_minutes=90), owner)

        assert appointment.duration_minutes == 90

    async def test_without_practitioner_skips_conflict_check(self, booking_service, repository, owner, at):
        repository.add(start_time=at(10), practitioner_id=1)

        appointment = await booking_service.create(_request(practitioner_id=None), owner)

        assert appointment.practitioner_id is None
        assert repository.locked == []

    async def test_missing_fields(self, booking_service, owner):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create(CreateAppointmentRequest(pet_id=10), owner)

        assert exc_info.value.details["missing"] == ["owner_id", "start_time"]

    async def test_unknown_pet(self, booking_service, admin):
        with pytest.raises(EntityNotFoundException):
            await booking_service.create(_request(pet_id=999), admin)

    async def test_ownership_mismatch_reported_before_conflict(self, booking_service, repository, admin, at):
        # Arrange: practitioner 1 is busy AND pet 11 is not owner 3's
        repository.add(start_time=at(10), practitioner_id=1)

        # Act / Assert
        with pytest.raises(OwnershipMismatchException) as exc_info:
            await booking_service.create(_request(pet_id=11), admin)

        assert exc_info.value.actual_owner_id == 4

    async def test_non_admin_cannot_book_for_another_owner(self, booking_service, owner):
        with pytest.raises(AuthorizationException):
            await booking_service.create(_request(pet_id=11, owner_id=4), owner)

    async def test_admin_books_for_anyone(self, booking_service, admin):
        appointment = await booking_service.create(_request(pet_id=11, owner_id=4), admin)

        assert appointment.owner_name == "Luis Ruiz"
        assert appointment.created_by == admin.user_id

    async def test_admin_role_is_case_insensitive(self, booking_service):
        appointment = await booking_service.create(_request(pet_id=11, owner_id=4), Actor(user_id=50, role="Admin"))

        assert appointment.owner_id == 4

    @pytest.mark.parametrize("practitioner_id", [5, 42, "abc"])
    async def test_invalid_practitioner(self, booking_service, owner, practitioner_id):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create(_request(practitioner_id=practitioner_id), owner)

        assert exc_info.value.field == "practitioner_id"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"start_time": "not a date"},
            {"duration_minutes": 0},
            {"duration_minutes": -30},
            {"buffer_minutes": 0},
            {"duration_minutes": 10**10},
            {"duration_minutes": 24 * 60 + 1},
            {"buffer_minutes": 10**12},
            {"start_time": "9999-12-31T23:50:00"},
            {"start_time": "9999-12-31T23:50:00", "practitioner_id": None},
        ],
    )
    async def test_invalid_values(self, booking_service, owner, overrides):
        with pytest.raises(ValidationException):
            await booking_service.create(_request(**overrides), owner)

    async def test_conflict_within_buffer(self, booking_service, repository, owner, at):
        # Arrange
        repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        # Act / Assert
        with pytest.raises(AppointmentConflictException) as exc_info:
            await booking_service.create(_request(start_time=at(10, 35)), owner)
        assert exc_info.value.practitioner_id == 1

        booked = await booking_service.create(_request(start_time=at(10, 40)), owner)
        assert booked.start_time == at(10, 40)

    async def test_custom_buffer(self, booking_service, repository, owner, at):
        repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        booked = await booking_service.create(_request(start_time=at(10, 35), buffer_minutes=5), owner)

        assert booked.start_time == at(10, 35)

    async def test_other_practitioner_is_free(self, booking_service, repository, owner, at):
        repository.add(start_time=at(10), practitioner_id=2)

        booked = await booking_service.create(_request(start_time=at(10)), owner)

        assert booked.practitioner_id == 1

    async def test_cancelled_slot_can_be_rebooked(self, booking_service, repository, owner, at):
        repository.add(start_time=at(10), practitioner_id=1, status=AppointmentStatus.CANCELLED)

        booked = await booking_service.create(_request(start_time=at(10)), owner)

        assert booked.status == AppointmentStatus.PENDING


# ============================================================================
# UPDATE
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
class TestUpdate:
    async def test_reschedule_within_own_slot(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        updated = await booking_service.update(existing.id, UpdateAppointmentRequest(start_time=at(10, 15)), owner)

        assert updated.start_time == at(10, 15)
        assert updated.duration_minutes == 30
        assert repository.locked == [1]

    async def test_reschedule_into_conflict(self, booking_service, repository, owner, at):
        repository.add(start_time=at(11), duration_minutes=30, practitioner_id=1)
        existing = repository.add(start_time=at(9), duration_minutes=30, practitioner_id=1)

        with pytest.raises(AppointmentConflictException):
            await booking_service.update(existing.id, UpdateAppointmentRequest(start_time=at(10, 35)), owner)

        assert repository.rows[existing.id].start_time == at(9)

    async def test_longer_duration_can_conflict(self, booking_service, repository, owner, at):
        repository.add(start_time=at(11), duration_minutes=30, practitioner_id=1)
        existing = repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        with pytest.raises(AppointmentConflictException):
            await booking_service.update(existing.id, UpdateAppointmentRequest(duration_minutes=55), owner)

    async def test_reassign_practitioner(self, booking_service, repository, owner, at):
        repository.add(start_time=at(10), practitioner_id=2)
        existing = repository.add(start_time=at(10), practitioner_id=1)

        with pytest.raises(AppointmentConflictException):
            await booking_service.update(existing.id, UpdateAppointmentRequest(practitioner_id=2), owner)

    async def test_clear_practitioner(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), practitioner_id=1)

        updated = await booking_service.update(existing.id, UpdateAppointmentRequest(practitioner_id=None), owner)

        assert updated.practitioner_id is None
        assert repository.locked == []

    async def test_reason_and_type(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), duration_minutes=30)

        updated = await booking_service.update(
            existing.id,
            UpdateAppointmentRequest(reason="limping", appointment_type="checkup"),
            owner,
        )

        assert updated.reason == "limping"
        assert updated.appointment_type == "checkup"
        assert updated.duration_minutes == 30

    async def test_pet_must_match_owner(self, booking_service, repository, admin, at):
        existing = repository.add(start_time=at(10))

        with pytest.raises(OwnershipMismatchException):
            await booking_service.update(existing.id, UpdateAppointmentRequest(pet_id=11), admin)

    async def test_owner_cannot_move_appointment_to_another_owner(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10))

        with pytest.raises(AuthorizationException):
            await booking_service.update(existing.id, UpdateAppointmentRequest(pet_id=11, owner_id=4), owner)

    async def test_admin_moves_appointment_to_another_pet(self, booking_service, repository, admin, at):
        existing = repository.add(start_time=at(10))

        updated = await booking_service.update(existing.id, UpdateAppointmentRequest(pet_id=11, owner_id=4), admin)

        assert (updated.pet_id, updated.owner_id) == (11, 4)

    async def test_foreign_appointment(self, booking_service, repository, at):
        existing = repository.add(start_time=at(10), pet_id=11, owner_id=4)

        with pytest.raises(AuthorizationException):
            await booking_service.update(
                existing.id,
                UpdateAppointmentRequest(reason="x"),
                Actor(user_id=3, role="user"),
            )

    async def test_missing_appointment(self, booking_service, admin):
        with pytest.raises(EntityNotFoundException):
            await booking_service.update(404, UpdateAppointmentRequest(reason="x"), admin)


# ============================================================================
# STATUS OPERATIONS
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
class TestStatusOperations:
    async def test_confirm_and_complete(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10))

        await booking_service.confirm(existing.id, owner)
        completed = await booking_service.complete(existing.id, owner)

        assert completed.status == AppointmentStatus.COMPLETED
        assert repository.rows[existing.id].status == AppointmentStatus.COMPLETED

    async def test_complete_pending_rejected(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10))

        with pytest.raises(InvalidOperationException):
            await booking_service.complete(existing.id, owner)

        assert repository.rows[existing.id].status == AppointmentStatus.PENDING

    async def test_cancel_frees_the_slot(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), practitioner_id=1)

        cancelled = await booking_service.cancel(existing.id, owner, reason="sick")
        rebooked = await booking_service.create(_request(start_time=at(10)), owner)

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancellation_reason == "sick"
        assert rebooked.start_time == at(10)

    async def test_cancelled_is_final(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), status=AppointmentStatus.CANCELLED)

        with pytest.raises(InvalidOperationException):
            await booking_service.confirm(existing.id, owner)
        with pytest.raises(InvalidOperationException):
            await booking_service.change_status(existing.id, "pending", owner)

    async def test_change_status_is_permissive(self, booking_service, repository, admin, at):
        existing = repository.add(start_time=at(10))

        updated = await booking_service.change_status(existing.id, "completed", admin)

        assert updated.status == AppointmentStatus.COMPLETED

    async def test_change_status_rejects_unknown_label(self, booking_service, repository, admin, at):
        existing = repository.add(start_time=at(10))

        with pytest.raises(ValidationException):
            await booking_service.change_status(existing.id, "archived", admin)

    async def test_status_of_foreign_appointment(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), pet_id=11, owner_id=4)

        with pytest.raises(AuthorizationException):
            await booking_service.cancel(existing.id, owner)

    async def test_missing_appointment(self, booking_service, admin):
        with pytest.raises(EntityNotFoundException):
            await booking_service.confirm(404, admin)


# ============================================================================
# READS / DELETE
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
class TestReads:
    async def test_get_by_id(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10))

        appointment = await booking_service.get_by_id(existing.id, owner)

        assert appointment.owner_name == "Ana Gomez"

    async def test_get_foreign_appointment(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), pet_id=11, owner_id=4)

        with pytest.raises(AuthorizationException):
            await booking_service.get_by_id(existing.id, owner)

    async def test_admin_lists_everything(self, booking_service, repository, admin, at):
        repository.add(start_time=at(9))
        repository.add(start_time=at(10), pet_id=11, owner_id=4)

        page = await booking_service.list(AppointmentFilters(), admin)

        assert page.total == 2
        assert [a.start_time for a in page.items] == [at(10), at(9)]

    async def test_owner_list_is_scoped(self, booking_service, repository, owner, at):
        repository.add(start_time=at(9))
        repository.add(start_time=at(10), pet_id=11, owner_id=4)

        page = await booking_service.list(AppointmentFilters(), owner)

        assert page.total == 1
        assert page.items[0].owner_id == 3

    async def test_owner_cannot_list_another_owner(self, booking_service, owner):
        with pytest.raises(AuthorizationException):
            await booking_service.list(AppointmentFilters(owner_id=4), owner)

    async def test_filters_and_paging(self, booking_service, repository, admin, at):
        for hour in (8, 9, 10, 11, 12):
            repository.add(start_time=at(hour), practitioner_id=1)
        repository.add(start_time=at(13), practitioner_id=2)

        page = await booking_service.list(AppointmentFilters(practitioner_id=1), admin, page=2, limit=2)

        assert page.total == 5
        assert (page.page, page.limit) == (2, 2)
        assert [a.start_time for a in page.items] == [at(10), at(9)]

    async def test_limit_is_clamped(self, booking_service, admin):
        page = await booking_service.list(AppointmentFilters(), admin, page=0, limit=10_000)

        assert (page.page, page.limit) == (1, 200)

    async def test_remove(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10))

        await booking_service.remove(existing.id, owner)

        assert existing.id not in repository.rows

    async def test_remove_missing(self, booking_service, admin):
        with pytest.raises(EntityNotFoundException):
            await booking_service.remove(404, admin)


# ============================================================================
# RANGE LIMITS
# ============================================================================


@pytest.mark.unit
@pytest.mark.use_case
@pytest.mark.asyncio
class TestRangeLimits:
    async def test_oversized_duration_without_practitioner(self, booking_service, repository, owner):
        with pytest.raises(ValidationException) as exc_info:
            await booking_service.create(_request(duration_minutes=10**10, practitioner_id=None), owner)

        assert exc_info.value.field == "duration_minutes"
        assert repository.rows == {}

    async def test_update_rejects_oversized_buffer(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        with pytest.raises(ValidationException) as exc_info:
            await booking_service.update(existing.id, UpdateAppointmentRequest(buffer_minutes=10**12), owner)

        assert exc_info.value.field == "buffer_minutes"
        assert repository.locked == []

    async def test_update_rejects_start_at_end_of_calendar(self, booking_service, repository, owner, at):
        existing = repository.add(start_time=at(10), duration_minutes=30, practitioner_id=1)

        with pytest.raises(ValidationException):
            await booking_service.update(
                existing.id,
                UpdateAppointmentRequest(start_time="9999-12-31T23:50:00"),
                owner,
            )

        assert repository.rows[existing.id].start_time == at(10)

    async def test_day_long_appointment_is_accepted(self, booking_service, owner):
        booked = await booking_service.create(_request(duration_minutes=24 * 60), owner)

        assert booked.duration_minutes == 24 * 60
