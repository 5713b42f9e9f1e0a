"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository.
"""

import logging
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from clinic_scheduling.core.domain import PersistenceException
from clinic_scheduling.domains.appointments.application.dto import AppointmentFilters
from clinic_scheduling.domains.appointments.application.ports.appointment_repository import IAppointmentRepository
from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_status import AppointmentStatus
from clinic_scheduling.domains.appointments.infrastructure.persistence.sqlalchemy.models import (
    AppointmentModel,
    UserModel,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "pet_id",
        "owner_id",
        "practitioner_id",
        "appointment_type",
        "reason",
        "start_time",
        "duration_minutes",
    }
)


class SQLAlchemyAppointmentRepository(IAppointmentRepository):
    """
    SQLAlchemy implementation of appointment repository.

    Reads join pet, owner and practitioner for display names. Writes commit
    on success and roll back on failure, which also releases any row lock
    taken by ``lock_practitioner``.
    """

    def __init__(self, session: AsyncSession, clinic_tz: tzinfo = UTC):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
            clinic_tz: Timezone that defines day boundaries
        """
        self.session = session
        self.clinic_tz = clinic_tz

    def _select_with_names(self):
        return select(AppointmentModel).options(
            joinedload(AppointmentModel.pet),
            joinedload(AppointmentModel.owner),
            joinedload(AppointmentModel.practitioner),
        )

    def _day_bounds(self, day: date) -> tuple[datetime, datetime]:
        start = datetime.combine(day, time.min, tzinfo=self.clinic_tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=self.clinic_tz)
        return start, end

    async def _fetch_all(self, query) -> list[Appointment]:
        result = await self.session.execute(query)
        models = result.scalars().unique().all()
        return [self._to_entity(m) for m in models]

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """Find appointment by ID."""
        result = await self.session.execute(
            self._select_with_names()
            .where(AppointmentModel.id == appointment_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalars().unique().one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_practitioner_and_day(self, practitioner_id: int, day: date) -> list[Appointment]:
        """Find one practitioner's active appointments on a clinic-local day."""
        start, end = self._day_bounds(day)
        query = (
            select(AppointmentModel)
            .where(
                AppointmentModel.practitioner_id == practitioner_id,
                AppointmentModel.status != AppointmentStatus.CANCELLED,
                AppointmentModel.start_time >= start,
                AppointmentModel.start_time < end,
            )
            .order_by(AppointmentModel.start_time)
        )
        return await self._fetch_all(query)

    async def find_by_day(self, day: date) -> list[Appointment]:
        """Find all active appointments on a clinic-local day."""
        start, end = self._day_bounds(day)
        query = (
            select(AppointmentModel)
            .where(
                AppointmentModel.status != AppointmentStatus.CANCELLED,
                AppointmentModel.start_time >= start,
                AppointmentModel.start_time < end,
            )
            .order_by(AppointmentModel.practitioner_id, AppointmentModel.start_time)
        )
        return await self._fetch_all(query)

    async def find_conflict_candidates(
        self,
        practitioner_id: int,
        window_start: datetime,
        window_end: datetime,
        exclude_appointment_id: int | None = None,
    ) -> list[Appointment]:
        """Find active appointments of the practitioner intersecting the buffered window."""
        query = select(AppointmentModel).where(
            AppointmentModel.practitioner_id == practitioner_id,
            AppointmentModel.status != AppointmentStatus.CANCELLED,
            AppointmentModel.start_time < window_end,
            AppointmentModel.end_time > window_start,
        )
        if exclude_appointment_id is not None:
            query = query.where(AppointmentModel.id != exclude_appointment_id)

        return await self._fetch_all(query.order_by(AppointmentModel.start_time))

    async def lock_practitioner(self, practitioner_id: int) -> None:
        """SELECT ... FOR UPDATE on the practitioner's user row."""
        await self.session.execute(
            select(UserModel.id).where(UserModel.id == practitioner_id).with_for_update()
        )

    async def insert(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment and return it with display names."""
        try:
            model = self._to_model(appointment)
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error inserting appointment for pet {appointment.pet_id}: {e}")
            raise PersistenceException("insert", e) from e

        stored = await self.find_by_id(model.id)
        return stored if stored else self._to_entity(model)

    async def update_fields(self, appointment_id: int, fields: dict[str, Any]) -> Appointment | None:
        """Apply a partial update. Unknown keys are rejected."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")

        try:
            result = await self.session.execute(
                select(AppointmentModel).where(AppointmentModel.id == appointment_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None

            for name, value in fields.items():
                setattr(model, name, value)
            model.end_time = model.start_time + timedelta(minutes=model.duration_minutes)  # type: ignore[assignment]
            model.updated_at = datetime.now(UTC)  # type: ignore[assignment]

            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating appointment {appointment_id}: {e}")
            raise PersistenceException("update", e) from e

        return await self.find_by_id(appointment_id)

    async def update_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        cancellation_reason: str | None = None,
    ) -> Appointment | None:
        """Persist a status change."""
        try:
            result = await self.session.execute(
                select(AppointmentModel).where(AppointmentModel.id == appointment_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None

            model.status = status  # type: ignore[assignment]
            if cancellation_reason is not None:
                model.cancellation_reason = cancellation_reason  # type: ignore[assignment]
            model.updated_at = datetime.now(UTC)  # type: ignore[assignment]

            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating status of appointment {appointment_id}: {e}")
            raise PersistenceException("update_status", e) from e

        return await self.find_by_id(appointment_id)

    async def delete(self, appointment_id: int) -> bool:
        """Delete appointment."""
        try:
            result = await self.session.execute(
                select(AppointmentModel).where(AppointmentModel.id == appointment_id)
            )
            model = result.scalar_one_or_none()
            if model:
                await self.session.delete(model)
                await self.session.commit()
                return True
            return False
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deleting appointment {appointment_id}: {e}")
            raise PersistenceException("delete", e) from e

    async def list_by_filters(
        self,
        filters: AppointmentFilters,
        offset: int,
        limit: int,
    ) -> tuple[list[Appointment], int]:
        """Page through appointments, newest start first."""
        conditions = []
        if filters.pet_id is not None:
            conditions.append(AppointmentModel.pet_id == filters.pet_id)
        if filters.owner_id is not None:
            conditions.append(AppointmentModel.owner_id == filters.owner_id)
        if filters.practitioner_id is not None:
            conditions.append(AppointmentModel.practitioner_id == filters.practitioner_id)
        if filters.date_from is not None:
            conditions.append(AppointmentModel.start_time >= self._aware(filters.date_from))
        if filters.date_to is not None:
            conditions.append(AppointmentModel.start_time <= self._aware(filters.date_to))

        count_result = await self.session.execute(
            select(func.count()).select_from(AppointmentModel).where(*conditions)
        )
        total = count_result.scalar_one()

        query = (
            self._select_with_names()
            .where(*conditions)
            .order_by(AppointmentModel.start_time.desc(), AppointmentModel.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return await self._fetch_all(query), total

    def _aware(self, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=self.clinic_tz)

    # Mapping methods

    def _to_entity(self, model: AppointmentModel) -> Appointment:
        """Convert model to entity."""
        # Display names come from relationships loaded by _select_with_names();
        # they are left as None when not eagerly loaded.
        loaded = model.__dict__
        pet = loaded.get("pet")
        owner = loaded.get("owner")
        practitioner = loaded.get("practitioner")

        appointment = Appointment(
            id=model.id,  # type: ignore[arg-type]
            pet_id=model.pet_id,  # type: ignore[arg-type]
            owner_id=model.owner_id,  # type: ignore[arg-type]
            practitioner_id=model.practitioner_id,  # type: ignore[arg-type]
            appointment_type=model.appointment_type or "general consultation",  # type: ignore[arg-type]
            reason=model.reason,  # type: ignore[arg-type]
            start_time=self._aware(model.start_time) if model.start_time else None,  # type: ignore[arg-type]
            duration_minutes=model.duration_minutes or 30,  # type: ignore[arg-type]
            status=model.status or AppointmentStatus.PENDING,  # type: ignore[arg-type]
            cancellation_reason=model.cancellation_reason,  # type: ignore[arg-type]
            created_by=model.created_by,  # type: ignore[arg-type]
            pet_name=pet.name if pet is not None else None,
            owner_name=owner.name if owner is not None else None,
            practitioner_name=practitioner.name if practitioner is not None else None,
        )

        if model.created_at:
            appointment.created_at = model.created_at  # type: ignore[assignment]
        if model.updated_at:
            appointment.updated_at = model.updated_at  # type: ignore[assignment]

        return appointment

    def _to_model(self, appointment: Appointment) -> AppointmentModel:
        """Convert entity to model."""
        return AppointmentModel(
            pet_id=appointment.pet_id,
            owner_id=appointment.owner_id,
            practitioner_id=appointment.practitioner_id,
            appointment_type=appointment.appointment_type,
            reason=appointment.reason,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            duration_minutes=appointment.duration_minutes,
            status=appointment.status,
            cancellation_reason=appointment.cancellation_reason,
            created_by=appointment.created_by,
        )
