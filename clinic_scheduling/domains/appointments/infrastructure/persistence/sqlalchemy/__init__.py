from clinic_scheduling.domains.appointments.infrastructure.persistence.sqlalchemy.models import (
    AppointmentModel,
    OwnerModel,
    PetModel,
    UserModel,
)

__all__ = ["AppointmentModel", "OwnerModel", "PetModel", "UserModel"]
