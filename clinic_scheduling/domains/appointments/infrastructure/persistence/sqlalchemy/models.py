"""
Appointments SQLAlchemy Models

Database models for appointment persistence. ``users``, ``owners`` and
``pets`` belong to the account and registry services; only the columns this
service reads are mapped.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from clinic_scheduling.database.base import Base, TimestampMixin
from clinic_scheduling.domains.appointments.domain.value_objects.appointment_status import AppointmentStatus


class UserModel(Base):
    """Staff and customer accounts. ``role`` decides practitioner capability."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    role = Column(String(50), nullable=False, default="user")


class OwnerModel(Base):
    """Pet owner record."""

    __tablename__ = "owners"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    pets = relationship("PetModel", back_populates="owner")


class PetModel(Base):
    """Pet record."""

    __tablename__ = "pets"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    species = Column(String(50), nullable=True)

    owner = relationship("OwnerModel", back_populates="pets")


class AppointmentModel(Base, TimestampMixin):
    """SQLAlchemy model for Appointment entity."""

    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_practitioner_start", "practitioner_id", "start_time"),
        CheckConstraint("duration_minutes > 0", name="ck_appointments_duration_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # References
    pet_id = Column(Integer, ForeignKey("pets.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("owners.id", ondelete="CASCADE"), nullable=False, index=True)
    practitioner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Scheduling
    appointment_type = Column(String(50), nullable=False, default="general consultation")
    reason = Column(Text, nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)

    # Status
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    cancellation_reason = Column(Text, nullable=True)

    # Audit
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # Relationships
    pet = relationship("PetModel", foreign_keys=[pet_id])
    owner = relationship("OwnerModel", foreign_keys=[owner_id])
    practitioner = relationship("UserModel", foreign_keys=[practitioner_id])
