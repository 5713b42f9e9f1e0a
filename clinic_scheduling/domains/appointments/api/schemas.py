"""
Appointments API Schemas

Pydantic schemas for API request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from clinic_scheduling.domains.appointments.application.dto import (
    UNSET,
    CreateAppointmentRequest,
    UpdateAppointmentRequest,
)
from clinic_scheduling.domains.appointments.domain.entities.appointment import Appointment
from clinic_scheduling.domains.appointments.domain.services.slot_generator import Slot, SlotProposal


class AppointmentCreate(BaseModel):
    """Appointment creation schema. Required fields are checked by the booking service."""

    pet_id: int | None = None
    owner_id: int | None = None
    practitioner_id: int | None = None
    appointment_type: str | None = Field(default=None, max_length=50)
    reason: str | None = None
    start_time: datetime | str | None = None
    duration_minutes: int | None = None
    buffer_minutes: int | None = None

    def to_request(self) -> CreateAppointmentRequest:
        return CreateAppointmentRequest(**self.model_dump())


class AppointmentUpdate(BaseModel):
    """Partial update schema. Send ``practitioner_id: null`` to unassign."""

    pet_id: int | None = None
    owner_id: int | None = None
    practitioner_id: int | None = None
    appointment_type: str | None = Field(default=None, max_length=50)
    reason: str | None = None
    start_time: datetime | str | None = None
    duration_minutes: int | None = None
    buffer_minutes: int | None = None

    def to_request(self) -> UpdateAppointmentRequest:
        supplied = self.model_fields_set
        values = {
            name: getattr(self, name) if name in supplied else UNSET
            for name in (
                "pet_id",
                "owner_id",
                "practitioner_id",
                "appointment_type",
                "reason",
                "start_time",
                "duration_minutes",
            )
        }
        return UpdateAppointmentRequest(**values, buffer_minutes=self.buffer_minutes)


class StatusChangeRequest(BaseModel):
    status: str


class CancelRequest(BaseModel):
    reason: str | None = None


class AppointmentResponse(BaseModel):
    """Appointment response schema."""

    id: int
    pet_id: int
    owner_id: int
    practitioner_id: int | None = None
    appointment_type: str
    reason: str | None = None
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    status: str
    cancellation_reason: str | None = None
    created_by: int | None = None
    pet_name: str | None = None
    owner_name: str | None = None
    practitioner_name: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id or 0,
            pet_id=appointment.pet_id,
            owner_id=appointment.owner_id,
            practitioner_id=appointment.practitioner_id,
            appointment_type=appointment.appointment_type,
            reason=appointment.reason,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            duration_minutes=appointment.duration_minutes,
            status=appointment.status.value,
            cancellation_reason=appointment.cancellation_reason,
            created_by=appointment.created_by,
            pet_name=appointment.pet_name,
            owner_name=appointment.owner_name,
            practitioner_name=appointment.practitioner_name,
            created_at=appointment.created_at,
            updated_at=appointment.updated_at,
        )


class AppointmentEnvelope(BaseModel):
    success: bool = True
    data: AppointmentResponse


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int


class AppointmentListResponse(BaseModel):
    success: bool = True
    data: list[AppointmentResponse]
    meta: PageMeta


class SlotResponse(BaseModel):
    """One proposed slot. ``label`` is the clinic-local HH:MM start."""

    practitioner_id: int
    start: datetime
    end: datetime
    label: str
    duration_minutes: int

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotResponse":
        return cls(
            practitioner_id=slot.practitioner_id,
            start=slot.start_time,
            end=slot.end_time,
            label=slot.label,
            duration_minutes=slot.duration_minutes,
        )


class SlotProposalData(BaseModel):
    slots_by_practitioner: dict[str, list[SlotResponse]]
    duration_minutes: int

    @classmethod
    def from_proposal(cls, proposal: SlotProposal) -> "SlotProposalData":
        return cls(
            slots_by_practitioner={
                str(practitioner_id): [SlotResponse.from_slot(s) for s in slots]
                for practitioner_id, slots in proposal.slots_by_practitioner.items()
            },
            duration_minutes=proposal.duration_minutes,
        )


class SlotProposalResponse(BaseModel):
    success: bool = True
    data: SlotProposalData
