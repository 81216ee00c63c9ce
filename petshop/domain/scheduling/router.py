"""Scheduling router - FastAPI endpoints for appointments"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_staff, get_current_user
from ...database import get_db
from ...models import Appointment, AppointmentStatus
from .availability_service import appointment_end
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentServiceSummary,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    BusyIntervalsResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


def to_appointment_response(appointment: Appointment) -> AppointmentResponse:
    services = [
        AppointmentServiceSummary(id=s.id, name=s.name, duration=s.duration, price=float(s.price))
        for s in appointment.services
    ]
    return AppointmentResponse(
        id=appointment.id,
        clientId=appointment.client_id,
        petId=appointment.pet_id,
        clientName=appointment.client.name if appointment.client else None,
        petName=appointment.pet.name if appointment.pet else None,
        services=services,
        startTime=appointment.date,
        endTime=appointment_end(appointment),
        durationMinutes=sum(s.duration for s in services),
        status=appointment.status,
        isFromSubscription=appointment.is_from_subscription,
        notes=appointment.notes,
        created_at=appointment.created_at,
    )


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    day: Optional[date] = Query(None, alias="date", description="Only appointments on this day"),
    status: Optional[AppointmentStatus] = Query(None),
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """List appointments ordered by start time (clients only see their own)"""
    appointments = service.list_appointments(current_user, day, status.value if status else None)
    return [to_appointment_response(a) for a in appointments]


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Book an appointment"""
    appointment = service.create_appointment(data, current_user)
    return to_appointment_response(appointment)


@router.get("/busy", response_model=BusyIntervalsResponse)
async def get_busy_intervals(
    day: date = Query(..., alias="date", description="YYYY-MM-DD"),
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Occupied intervals for a day, so clients can disable conflicting slots"""
    return {"date": day.isoformat(), "busy": service.get_busy_intervals(day)}


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return to_appointment_response(service.get_appointment(appointment_id, current_user))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: BookingService = Depends(get_booking_service),
):
    """Reschedule or edit an appointment (date, services, client, pet, notes)"""
    return to_appointment_response(service.update_appointment(appointment_id, data))


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: str,
    data: AppointmentStatusUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: BookingService = Depends(get_booking_service),
):
    """Move an appointment through its lifecycle (e.g. CONFIRMED after payment)"""
    return to_appointment_response(service.update_status(appointment_id, data.status))


@router.delete("/{appointment_id}", status_code=204)
async def cancel_appointment(
    appointment_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel an appointment. Repeating the call is a no-op."""
    service.cancel_appointment(appointment_id, current_user)
    return Response(status_code=204)
