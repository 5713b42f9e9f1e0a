"""
Appointments Container.

Single Responsibility: Wire all appointment scheduling dependencies.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.config.settings import Settings, get_settings
from clinic_scheduling.domains.appointments.application.services import (
    AppointmentAccessPolicy,
    AvailabilityService,
    BookingService,
)
from clinic_scheduling.domains.appointments.domain.services import OverlapChecker, SlotGenerator
from clinic_scheduling.domains.appointments.domain.value_objects import AppointmentTypeCatalog, get_catalog
from clinic_scheduling.domains.appointments.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyPetLookup,
    SQLAlchemyPractitionerLookup,
)

logger = logging.getLogger(__name__)


class AppointmentsContainer:
    """
    Appointments domain container.

    Settings, catalog and access policy are shared; repositories and
    services are created per database session.
    """

    def __init__(self, settings: Settings | None = None, catalog: AppointmentTypeCatalog | None = None):
        """
        Initialize appointments container.

        Args:
            settings: Application settings (defaults to the global instance)
            catalog: Appointment type catalog (defaults to the cached one)
        """
        self.settings = settings or get_settings()
        self.catalog = catalog or get_catalog()
        self.access_policy = AppointmentAccessPolicy(admin_role=self.settings.ADMIN_ROLE)

    # ==================== REPOSITORIES ====================

    def create_appointment_repository(self, db: AsyncSession) -> SQLAlchemyAppointmentRepository:
        """Create Appointment Repository."""
        return SQLAlchemyAppointmentRepository(session=db, clinic_tz=self.settings.clinic_tz)

    def create_pet_lookup(self, db: AsyncSession) -> SQLAlchemyPetLookup:
        """Create Pet Lookup."""
        return SQLAlchemyPetLookup(session=db)

    def create_practitioner_lookup(self, db: AsyncSession) -> SQLAlchemyPractitionerLookup:
        """Create Practitioner Lookup."""
        return SQLAlchemyPractitionerLookup(session=db, practitioner_role=self.settings.PRACTITIONER_ROLE)

    # ==================== DOMAIN SERVICES ====================

    def create_slot_generator(self) -> SlotGenerator:
        return SlotGenerator(
            catalog=self.catalog,
            clinic_tz=self.settings.clinic_tz,
            step_minutes=self.settings.SLOT_STEP_MINUTES,
        )

    # ==================== APPLICATION SERVICES ====================

    def create_booking_service(self, db: AsyncSession) -> BookingService:
        """Create BookingService with dependencies."""
        repository = self.create_appointment_repository(db)
        return BookingService(
            appointment_repository=repository,
            pet_lookup=self.create_pet_lookup(db),
            practitioner_lookup=self.create_practitioner_lookup(db),
            overlap_checker=OverlapChecker(repository, self.settings.DEFAULT_BUFFER_MINUTES),
            catalog=self.catalog,
            access_policy=self.access_policy,
            clinic_tz=self.settings.clinic_tz,
            default_buffer_minutes=self.settings.DEFAULT_BUFFER_MINUTES,
            default_appointment_type=self.settings.DEFAULT_APPOINTMENT_TYPE,
            default_list_limit=self.settings.LIST_DEFAULT_LIMIT,
            max_list_limit=self.settings.LIST_MAX_LIMIT,
            max_duration_minutes=self.settings.MAX_DURATION_MINUTES,
            max_buffer_minutes=self.settings.MAX_BUFFER_MINUTES,
        )

    def create_availability_service(self, db: AsyncSession) -> AvailabilityService:
        """Create AvailabilityService with dependencies."""
        return AvailabilityService(
            appointment_repository=self.create_appointment_repository(db),
            practitioner_lookup=self.create_practitioner_lookup(db),
            slot_generator=self.create_slot_generator(),
            default_appointment_type=self.settings.DEFAULT_APPOINTMENT_TYPE,
        )


# ============================================================
# GLOBAL CONTAINER INSTANCE
# ============================================================

_container: AppointmentsContainer | None = None


def get_container() -> AppointmentsContainer:
    """
    Get global container instance (singleton).

    Returns:
        AppointmentsContainer instance
    """
    global _container

    if _container is None:
        logger.info("Initializing global AppointmentsContainer")
        _container = AppointmentsContainer()

    return _container


def reset_container() -> None:
    """
    Reset global container instance.

    Useful for testing or reconfiguration.
    """
    global _container
    logger.info("Resetting global AppointmentsContainer")
    _container = None
