"""
Booking Service

Write path for appointments: validation, authorization, conflict detection
and persistence, plus the status operations and reads.
"""

import logging
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any

from clinic_scheduling.core.domain import (
    AppointmentConflictException,
    EntityNotFoundException,
    OwnershipMismatchException,
    ValidationException,
)
from clinic_scheduling.domains.appointments.application.dto import (
    Actor,
    AppointmentFilters,
    AppointmentPage,
    CreateAppointmentRequest,
    PetRef,
    UpdateAppointmentRequest,
)
from clinic_scheduling.domains.appointments.application.ports import (
    IAppointmentRepository,
    IPetLookup,
    IPractitionerLookup,
)
from clinic_scheduling.domains.appointments.application.services.access_policy import AppointmentAccessPolicy
from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment
from clinic_scheduling.domains.appointments.domain.services.overlap_checker import OverlapChecker
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_status import AppointmentStatus
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_type import AppointmentTypeCatalog

logger = logging.getLogger(__name__)


def parse_start_time(value: Any, clinic_tz: tzinfo) -> datetime:
    """
    Parse an ISO 8601 string or datetime into an aware datetime.

    Naive values are read in ``clinic_tz``.

    Raises:
        ValidationException: Missing or unparseable value
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise ValidationException(f"Invalid start_time: {value!r}", field="start_time") from e
    else:
        raise ValidationException("Invalid start_time", field="start_time")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=clinic_tz)
    return parsed


def positive_minutes(value: Any, field: str, maximum: int | None = None) -> int:
    """Coerce to a positive integer number of minutes, at most ``maximum``, or raise ValidationException."""
    if isinstance(value, bool):
        raise ValidationException(f"Invalid {field}", field=field)
    if isinstance(value, float) and not value.is_integer():
        raise ValidationException(f"Invalid {field}: must be a whole number of minutes", field=field)
    try:
        minutes = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationException(f"Invalid {field}", field=field) from e
    if minutes <= 0:
        raise ValidationException(f"Invalid {field}: must be positive", field=field)
    if maximum is not None and minutes > maximum:
        raise ValidationException(
            f"Invalid {field}: must not exceed {maximum}",
            field=field,
            details={"maximum": maximum},
        )
    return minutes


def ensure_schedulable(start: datetime, duration: int, buffer: int) -> None:
    """
    Reject start times whose buffered window falls outside the datetime range.

    Raises:
        ValidationException: The window cannot be represented in UTC
    """
    try:
        (start - timedelta(minutes=buffer)).astimezone(UTC)
        (start + timedelta(minutes=duration + buffer)).astimezone(UTC)
    except OverflowError as e:
        raise ValidationException(f"start_time out of range: {start.isoformat()}", field="start_time") from e


class BookingService:
    """
    Orchestrates booking and rescheduling.

    Create and update lock the practitioner row before the conflict check, so
    two writers for the same practitioner never both pass the check.

    Example:
        ```python
        service = BookingService(repo, pets, practitioners, checker, catalog, policy, clinic_tz)
        appointment = await service.create(
            CreateAppointmentRequest(pet_id=7, owner_id=3, start_time="2024-06-01T10:00", practitioner_id=2),
            Actor(user_id=3, role="user"),
        )
        ```
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        pet_lookup: IPetLookup,
        practitioner_lookup: IPractitionerLookup,
        overlap_checker: OverlapChecker,
        catalog: AppointmentTypeCatalog,
        access_policy: AppointmentAccessPolicy,
        clinic_tz: tzinfo,
        default_buffer_minutes: int = 10,
        default_appointment_type: str = "general consultation",
        default_list_limit: int = 50,
        max_list_limit: int = 200,
        max_duration_minutes: int = 24 * 60,
        max_buffer_minutes: int = 24 * 60,
    ):
        self.appointment_repo = appointment_repository
        self.pet_lookup = pet_lookup
        self.practitioner_lookup = practitioner_lookup
        self.overlap_checker = overlap_checker
        self.catalog = catalog
        self.access_policy = access_policy
        self.clinic_tz = clinic_tz
        self.default_buffer_minutes = default_buffer_minutes
        self.default_appointment_type = default_appointment_type
        self.default_list_limit = default_list_limit
        self.max_list_limit = max_list_limit
        self.max_duration_minutes = max_duration_minutes
        self.max_buffer_minutes = max_buffer_minutes

    # Validation helpers

    async def _verify_pet_owner(self, pet_id: int, owner_id: int) -> PetRef:
        pet = await self.pet_lookup.get(pet_id)
        if pet.owner_id != owner_id:
            logger.warning(f"Pet {pet_id} belongs to owner {pet.owner_id}, not {owner_id}")
            raise OwnershipMismatchException(pet_id=pet_id, owner_id=owner_id, actual_owner_id=pet.owner_id)
        return pet

    async def _verify_practitioner(self, practitioner_id: Any) -> int:
        try:
            practitioner_id = int(practitioner_id)
        except (TypeError, ValueError) as e:
            raise ValidationException("Invalid practitioner_id", field="practitioner_id") from e

        practitioner = await self.practitioner_lookup.find(practitioner_id)
        if practitioner is None:
            logger.warning(f"Practitioner {practitioner_id} not found")
            raise ValidationException("Practitioner not found", field="practitioner_id")
        if not practitioner.is_practitioner:
            logger.warning(f"User {practitioner_id} ({practitioner.role}) is not a practitioner")
            raise ValidationException(
                "Selected user is not a practitioner",
                field="practitioner_id",
                details={"role": practitioner.role},
            )
        return practitioner_id

    def _buffer(self, buffer_minutes: Any) -> int:
        if buffer_minutes is None:
            return self.default_buffer_minutes
        return positive_minutes(buffer_minutes, "buffer_minutes", self.max_buffer_minutes)

    async def _ensure_free(
        self,
        practitioner_id: int,
        start: datetime,
        duration: int,
        buffer: int,
        exclude_appointment_id: int | None = None,
    ) -> None:
        await self.appointment_repo.lock_practitioner(practitioner_id)
        if await self.overlap_checker.has_conflict(
            practitioner_id,
            start,
            duration,
            buffer_minutes=buffer,
            exclude_appointment_id=exclude_appointment_id,
        ):
            logger.warning(
                f"Conflict for practitioner {practitioner_id} at {start.isoformat()} "
                f"({duration}m, buffer {buffer}m)"
            )
            raise AppointmentConflictException(
                practitioner_id=practitioner_id,
                time_slot=start.isoformat(),
            )

    async def _load(self, appointment_id: int) -> Appointment:
        appointment = await self.appointment_repo.find_by_id(appointment_id)
        if appointment is None:
            raise EntityNotFoundException(entity_type="Appointment", entity_id=appointment_id)
        return appointment

    async def _load_authorized(self, appointment_id: int, actor: Actor, operation: str) -> Appointment:
        appointment = await self._load(appointment_id)
        self.access_policy.ensure_can_act_for_owner(actor, appointment.owner_id, operation)
        return appointment

    # Write path

    async def create(self, request: CreateAppointmentRequest, actor: Actor) -> Appointment:
        """
        Book a new appointment in ``pending`` state.

        Raises:
            ValidationException: Missing or invalid fields, unknown practitioner
            EntityNotFoundException: Pet does not exist
            OwnershipMismatchException: Pet belongs to another owner
            AuthorizationException: Actor may not book for this owner
            AppointmentConflictException: Practitioner is busy (buffer included)
        """
        missing = [name for name in ("pet_id", "owner_id", "start_time") if not getattr(request, name)]
        if missing:
            raise ValidationException(
                f"{', '.join(missing)} required",
                field=missing[0],
                details={"missing": missing},
            )

        await self._verify_pet_owner(request.pet_id, request.owner_id)
        self.access_policy.ensure_can_act_for_owner(actor, request.owner_id, "create")

        practitioner_id = None
        if request.practitioner_id is not None:
            practitioner_id = await self._verify_practitioner(request.practitioner_id)

        start = parse_start_time(request.start_time, self.clinic_tz)
        appointment_type = request.appointment_type or self.default_appointment_type
        if request.duration_minutes is not None:
            duration = positive_minutes(request.duration_minutes, "duration_minutes", self.max_duration_minutes)
        else:
            duration = self.catalog.duration_for(appointment_type)
        buffer = self._buffer(request.buffer_minutes)
        ensure_schedulable(start, duration, buffer)

        if practitioner_id is not None:
            await self._ensure_free(practitioner_id, start, duration, buffer)

        appointment = Appointment(
            pet_id=request.pet_id,
            owner_id=request.owner_id,
            practitioner_id=practitioner_id,
            appointment_type=appointment_type,
            reason=request.reason or None,
            start_time=start,
            duration_minutes=duration,
            status=AppointmentStatus.PENDING,
            created_by=actor.user_id,
        )
        saved = await self.appointment_repo.insert(appointment)

        logger.info(
            f"Appointment booked: {saved.id} for pet {saved.pet_id} "
            f"with practitioner {saved.practitioner_id} at {start.isoformat()} ({duration}m)"
        )
        return saved

    async def update(self, appointment_id: int, request: UpdateAppointmentRequest, actor: Actor) -> Appointment:
        """
        Reschedule or edit an appointment.

        Omitted fields keep their stored value; ``practitioner_id=None``
        clears the assignment. The merged result is re-checked for conflicts
        against every other appointment of the practitioner.
        """
        existing = await self._load_authorized(appointment_id, actor, "update")
        fields: dict[str, Any] = {}

        if request.value_or("pet_id", None) is not None or request.value_or("owner_id", None) is not None:
            pet_id = request.value_or("pet_id", existing.pet_id)
            owner_id = request.value_or("owner_id", existing.owner_id)
            await self._verify_pet_owner(pet_id, owner_id)
            if owner_id != existing.owner_id:
                self.access_policy.ensure_can_act_for_owner(actor, owner_id, "update")
            fields["pet_id"] = pet_id
            fields["owner_id"] = owner_id

        practitioner_id = existing.practitioner_id
        if request.is_set("practitioner_id"):
            if request.practitioner_id in (None, ""):
                practitioner_id = None
            else:
                practitioner_id = await self._verify_practitioner(request.practitioner_id)
            fields["practitioner_id"] = practitioner_id

        if request.value_or("start_time", None) is not None:
            start = parse_start_time(request.start_time, self.clinic_tz)
            fields["start_time"] = start
        elif existing.start_time is not None:
            start = existing.start_time
        else:
            raise ValidationException("Invalid start_time", field="start_time")

        if request.value_or("duration_minutes", None) is not None:
            duration = positive_minutes(request.duration_minutes, "duration_minutes", self.max_duration_minutes)
            fields["duration_minutes"] = duration
        else:
            duration = existing.duration_minutes

        if request.value_or("appointment_type", None):
            fields["appointment_type"] = request.appointment_type
        if request.value_or("reason", None):
            fields["reason"] = request.reason

        buffer = self._buffer(request.buffer_minutes)
        ensure_schedulable(start, duration, buffer)

        if practitioner_id is not None:
            await self._ensure_free(practitioner_id, start, duration, buffer, exclude_appointment_id=appointment_id)

        updated = await self.appointment_repo.update_fields(appointment_id, fields)
        if updated is None:
            raise EntityNotFoundException(entity_type="Appointment", entity_id=appointment_id)

        logger.info(f"Appointment updated: {appointment_id} fields={sorted(fields)}")
        return updated

    # Status operations

    async def _persist_status(self, appointment: Appointment) -> Appointment:
        updated = await self.appointment_repo.update_status(
            appointment.id,
            appointment.status,
            cancellation_reason=appointment.cancellation_reason,
        )
        if updated is None:
            raise EntityNotFoundException(entity_type="Appointment", entity_id=appointment.id)
        logger.info(f"Appointment {appointment.id} is now {appointment.status.value}")
        return updated

    async def confirm(self, appointment_id: int, actor: Actor) -> Appointment:
        appointment = await self._load_authorized(appointment_id, actor, "confirm")
        appointment.confirm()
        return await self._persist_status(appointment)

    async def complete(self, appointment_id: int, actor: Actor) -> Appointment:
        appointment = await self._load_authorized(appointment_id, actor, "complete")
        appointment.complete()
        return await self._persist_status(appointment)

    async def cancel(self, appointment_id: int, actor: Actor, reason: str | None = None) -> Appointment:
        appointment = await self._load_authorized(appointment_id, actor, "cancel")
        appointment.cancel(reason)
        return await self._persist_status(appointment)

    async def change_status(self, appointment_id: int, target: str, actor: Actor) -> Appointment:
        """Set any status except out of a terminal state."""
        appointment = await self._load_authorized(appointment_id, actor, "change_status")
        appointment.change_status(target)
        return await self._persist_status(appointment)

    # Reads

    async def get_by_id(self, appointment_id: int, actor: Actor) -> Appointment:
        return await self._load_authorized(appointment_id, actor, "read")

    async def list(
        self,
        filters: AppointmentFilters,
        actor: Actor,
        page: int = 1,
        limit: int | None = None,
    ) -> AppointmentPage:
        """Page through appointments visible to the actor, newest first."""
        page = max(1, int(page or 1))
        limit = self.default_list_limit if not limit else int(limit)
        limit = max(1, min(self.max_list_limit, limit))

        scoped = self.access_policy.scope_filters(actor, filters)
        items, total = await self.appointment_repo.list_by_filters(scoped, offset=(page - 1) * limit, limit=limit)
        return AppointmentPage(items=items, total=total, page=page, limit=limit)

    async def remove(self, appointment_id: int, actor: Actor) -> None:
        await self._load_authorized(appointment_id, actor, "delete")
        deleted = await self.appointment_repo.delete(appointment_id)
        if not deleted:
            raise EntityNotFoundException(entity_type="Appointment", entity_id=appointment_id)
        logger.info(f"Appointment deleted: {appointment_id} by user {actor.user_id}")
