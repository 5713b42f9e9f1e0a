"""
Appointments API Routes

FastAPI router for appointment booking and availability endpoints.
Domain exceptions are rendered by the handlers in ``api.exception_handlers``.
"""

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from clinic_scheduling.domains.appointments.api.dependencies import (
    get_availability_service,
    get_booking_service,
    get_current_actor,
)
from clinic_scheduling.domains.appointments.api.schemas import (
    AppointmentCreate,
    AppointmentEnvelope,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
    CancelRequest,
    PageMeta,
    SlotProposalData,
    SlotProposalResponse,
    StatusChangeRequest,
)
from clinic_scheduling.domains.appointments.application.dto import Actor, AppointmentFilters
from clinic_scheduling.domains.appointments.application.services import AvailabilityService, BookingService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

# Type aliases for service dependencies
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
AvailabilityServiceDep = Annotated[AvailabilityService, Depends(get_availability_service)]
ActorDep = Annotated[Actor, Depends(get_current_actor)]


@router.get("", response_model=AppointmentListResponse)
async def list_appointments(
    response: Response,
    service: BookingServiceDep,
    actor: ActorDep,
    pet_id: int | None = None,
    owner_id: int | None = None,
    practitioner_id: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int | None, Query(ge=1)] = None,
):
    """List appointments, newest first. Owners only see their own."""
    result = await service.list(
        AppointmentFilters(
            pet_id=pet_id,
            owner_id=owner_id,
            practitioner_id=practitioner_id,
            date_from=date_from,
            date_to=date_to,
        ),
        actor,
        page=page,
        limit=limit,
    )
    response.headers["X-Total-Count"] = str(result.total)
    return AppointmentListResponse(
        data=[AppointmentResponse.from_entity(a) for a in result.items],
        meta=PageMeta(total=result.total, page=result.page, limit=result.limit),
    )


@router.get("/slots", response_model=SlotProposalResponse)
async def get_slots(
    service: AvailabilityServiceDep,
    actor: ActorDep,
    target_date: Annotated[date, Query(alias="date")],
    appointment_type: Annotated[str | None, Query(alias="type")] = None,
    practitioner_id: int | None = None,
):
    """Propose open slots for a clinic-local day."""
    proposal = await service.get_slots(target_date, appointment_type, practitioner_id)
    return SlotProposalResponse(data=SlotProposalData.from_proposal(proposal))


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
async def get_appointment(appointment_id: int, service: BookingServiceDep, actor: ActorDep):
    """Get an appointment with pet, owner and practitioner names."""
    appointment = await service.get_by_id(appointment_id, actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.post("", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_appointment(request: AppointmentCreate, service: BookingServiceDep, actor: ActorDep):
    """Book a new appointment."""
    appointment = await service.create(request.to_request(), actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
async def update_appointment(
    appointment_id: int,
    request: AppointmentUpdate,
    service: BookingServiceDep,
    actor: ActorDep,
):
    """Edit or reschedule an appointment."""
    appointment = await service.update(appointment_id, request.to_request(), actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.post("/{appointment_id}/confirm", response_model=AppointmentEnvelope)
async def confirm_appointment(appointment_id: int, service: BookingServiceDep, actor: ActorDep):
    appointment = await service.confirm(appointment_id, actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.post("/{appointment_id}/complete", response_model=AppointmentEnvelope)
async def complete_appointment(appointment_id: int, service: BookingServiceDep, actor: ActorDep):
    appointment = await service.complete(appointment_id, actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.post("/{appointment_id}/cancel", response_model=AppointmentEnvelope)
async def cancel_appointment(
    appointment_id: int,
    service: BookingServiceDep,
    actor: ActorDep,
    request: CancelRequest | None = None,
):
    appointment = await service.cancel(appointment_id, actor, reason=request.reason if request else None)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.patch("/{appointment_id}/status", response_model=AppointmentEnvelope)
async def change_appointment_status(
    appointment_id: int,
    request: StatusChangeRequest,
    service: BookingServiceDep,
    actor: ActorDep,
):
    """Set any status; rejected only for completed or cancelled appointments."""
    appointment = await service.change_status(appointment_id, request.status, actor)
    return AppointmentEnvelope(data=AppointmentResponse.from_entity(appointment))


@router.delete("/{appointment_id}")
async def delete_appointment(appointment_id: int, service: BookingServiceDep, actor: ActorDep):
    await service.remove(appointment_id, actor)
    return {"success": True, "message": "Appointment deleted"}
