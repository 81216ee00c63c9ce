"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ...models import AppointmentStatus


def _clean_service_ids(v: list[str]) -> list[str]:
    """Strip ids, reject blanks and drop repeats while keeping order"""
    cleaned = []
    for service_id in v:
        service_id = service_id.strip()
        if not service_id:
            raise ValueError("Service ids must not be empty")
        if service_id not in cleaned:
            cleaned.append(service_id)
    return cleaned


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""

    clientId: str = Field(min_length=1)
    petId: str = Field(min_length=1)
    serviceIds: list[str] = Field(min_length=1)
    # ISO-8601; "date" is accepted for older clients
    startTime: datetime = Field(validation_alias=AliasChoices("startTime", "date"))
    notes: Optional[str] = None
    isFromSubscription: bool = False

    @field_validator("serviceIds")
    @classmethod
    def validate_service_ids(cls, v: list[str]) -> list[str]:
        return _clean_service_ids(v)


class AppointmentUpdate(BaseModel):
    """Schema for rescheduling or editing an appointment. Omitted fields keep their value."""

    clientId: Optional[str] = Field(default=None, min_length=1)
    petId: Optional[str] = Field(default=None, min_length=1)
    serviceIds: Optional[list[str]] = Field(default=None, min_length=1)
    startTime: Optional[datetime] = Field(default=None, validation_alias=AliasChoices("startTime", "date"))
    notes: Optional[str] = None

    @field_validator("serviceIds")
    @classmethod
    def validate_service_ids(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        return _clean_service_ids(v)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentServiceSummary(BaseModel):
    id: str
    name: str
    duration: int
    price: float


class AppointmentResponse(BaseModel):
    """Schema for appointment response. endTime is derived from the services."""

    id: str
    clientId: str
    petId: str
    clientName: Optional[str] = None
    petName: Optional[str] = None
    services: list[AppointmentServiceSummary]
    startTime: datetime
    endTime: datetime
    durationMinutes: int
    status: AppointmentStatus
    isFromSubscription: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class BusyInterval(BaseModel):
    start: datetime
    end: datetime
    appointmentId: str
    status: AppointmentStatus


class BusyIntervalsResponse(BaseModel):
    date: str
    busy: list[BusyInterval]
