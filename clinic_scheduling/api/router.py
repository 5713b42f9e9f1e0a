from fastapi import APIRouter

from clinic_scheduling.domains.appointments.api import routes as appointments

api_router = APIRouter()

api_router.include_router(appointments.router)
