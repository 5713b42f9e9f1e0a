"""
Collaborator Lookups

Read-only SQLAlchemy access to pets and users owned by other services.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.core.domain import EntityNotFoundException
from clinic_scheduling.domains.appointments.application.dto import PetRef, PractitionerRef
from clinic_scheduling.domains.appointments.application.ports import IPetLookup, IPractitionerLookup
from clinic_scheduling.domains.appointments.infrastructure.persistence.sqlalchemy.models import PetModel, UserModel


class SQLAlchemyPetLookup(IPetLookup):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, pet_id: int) -> PetRef:
        result = await self.session.execute(
            select(PetModel.id, PetModel.owner_id, PetModel.name).where(PetModel.id == pet_id)
        )
        row = result.one_or_none()
        if row is None:
            raise EntityNotFoundException(entity_type="Pet", entity_id=pet_id)
        return PetRef(id=row.id, owner_id=row.owner_id, name=row.name)


class SQLAlchemyPractitionerLookup(IPractitionerLookup):
    """Practitioners are users whose role equals ``practitioner_role`` (case-insensitive)."""

    def __init__(self, session: AsyncSession, practitioner_role: str = "admin"):
        self.session = session
        self.practitioner_role = practitioner_role

    def _to_ref(self, model: UserModel) -> PractitionerRef:
        role = model.role or ""
        return PractitionerRef(
            id=model.id,  # type: ignore[arg-type]
            name=model.name,  # type: ignore[arg-type]
            role=role,  # type: ignore[arg-type]
            is_practitioner=role.lower() == self.practitioner_role.lower(),
        )

    async def find(self, user_id: int) -> PractitionerRef | None:
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        model = result.scalar_one_or_none()
        return self._to_ref(model) if model else None

    async def list_practitioners(self) -> list[PractitionerRef]:
        result = await self.session.execute(
            select(UserModel)
            .where(func.lower(UserModel.role) == self.practitioner_role.lower())
            .order_by(UserModel.id)
        )
        return [self._to_ref(m) for m in result.scalars().all()]
