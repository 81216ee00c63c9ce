"""Client router - FastAPI endpoints for clients and pets"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import CurrentUser, get_current_staff, get_current_user
from ...database import get_db
from ...models import Client, Pet
from ..scheduling.router import get_booking_service, to_appointment_response
from ..scheduling.schemas import AppointmentResponse
from ..scheduling.service import BookingService
from .schemas import (
    ClientCreate,
    ClientResponse,
    ClientUpdate,
    PetCreate,
    PetResponse,
    PetUpdate,
)
from .service import ClientService, PetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])
pets_router = APIRouter(prefix="/pets", tags=["Pets"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


def get_pet_service(db: Session = Depends(get_db)) -> PetService:
    """Dependency injection for PetService"""
    return PetService(db)


def to_client_response(client: Client) -> ClientResponse:
    return ClientResponse(
        id=client.id,
        name=client.name,
        phone=client.phone,
        email=client.email,
        whatsapp=client.whatsapp,
        petCount=len(client.pets),
        created_at=client.created_at,
    )


def to_pet_response(pet: Pet) -> PetResponse:
    return PetResponse(
        id=pet.id,
        name=pet.name,
        breed=pet.breed,
        size=pet.size,
        notes=pet.notes,
        clientId=pet.client_id,
        clientName=pet.client.name if pet.client else None,
    )


# ============================================================================
# CLIENTS
# ============================================================================


@router.get("", response_model=list[ClientResponse])
async def get_clients(
    search: Optional[str] = Query(None, description="Match name, email or phone"),
    current_user: CurrentUser = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    """Get all clients ordered by name"""
    return [to_client_response(c) for c in service.get_clients(search)]


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(
    data: ClientCreate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.create_client(data))


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.get_client(client_id))


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: str,
    data: ClientUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    return to_client_response(service.update_client(client_id, data))


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: ClientService = Depends(get_client_service),
):
    return service.delete_client(client_id)


@router.get("/{client_id}/appointments", response_model=list[AppointmentResponse])
async def get_client_appointments(
    client_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Appointment history of a client, newest first"""
    return [to_appointment_response(a) for a in service.list_client_appointments(client_id, current_user)]


# ============================================================================
# PETS
# ============================================================================


@pets_router.get("", response_model=list[PetResponse])
async def get_pets(
    client_id: Optional[str] = Query(None, alias="clientId"),
    current_user: CurrentUser = Depends(get_current_staff),
    service: PetService = Depends(get_pet_service),
):
    return [to_pet_response(p) for p in service.get_pets(client_id)]


@pets_router.post("", response_model=PetResponse, status_code=201)
async def create_pet(
    data: PetCreate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: PetService = Depends(get_pet_service),
):
    return to_pet_response(service.create_pet(data))


@pets_router.get("/{pet_id}", response_model=PetResponse)
async def get_pet(
    pet_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: PetService = Depends(get_pet_service),
):
    return to_pet_response(service.get_pet(pet_id))


@pets_router.put("/{pet_id}", response_model=PetResponse)
async def update_pet(
    pet_id: str,
    data: PetUpdate,
    current_user: CurrentUser = Depends(get_current_staff),
    service: PetService = Depends(get_pet_service),
):
    return to_pet_response(service.update_pet(pet_id, data))


@pets_router.delete("/{pet_id}")
async def delete_pet(
    pet_id: str,
    current_user: CurrentUser = Depends(get_current_staff),
    service: PetService = Depends(get_pet_service),
):
    return service.delete_pet(pet_id)
