"""Client service - Business logic for client and pet operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, Pet
from ...shared.errors import ClientNotFoundError, ConflictError, DuplicateError, PetNotFoundError
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate, PetCreate, PetUpdate

logger = logging.getLogger(__name__)


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_clients(self, search: Optional[str] = None) -> list[Client]:
        return self.repo.get_clients(self.db, search)

    def get_client(self, client_id: str) -> Client:
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise ClientNotFoundError(client_id)
        return client

    def create_client(self, data: ClientCreate) -> Client:
        logger.info(f"📥 Creating client {data.name}")
        if data.email and self.repo.get_client_by_email(self.db, data.email):
            raise DuplicateError("A client with this email already exists", field="email")
        return self.repo.create_client(self.db, **data.model_dump())

    def update_client(self, client_id: str, data: ClientUpdate) -> Client:
        client = self.get_client(client_id)
        if data.email and data.email != client.email:
            existing = self.repo.get_client_by_email(self.db, data.email)
            if existing and existing.id != client.id:
                raise DuplicateError("A client with this email already exists", field="email")
        return self.repo.update_client(self.db, client, **data.model_dump(exclude_unset=True))

    def delete_client(self, client_id: str) -> dict:
        client = self.get_client(client_id)
        if self.repo.has_appointments(self.db, client_id):
            raise ConflictError("Client has appointments and cannot be deleted")
        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ Client deleted: {client_id}")
        return {"message": "Client deleted"}


class PetService:
    """Service layer for pets"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_pets(self, client_id: Optional[str] = None) -> list[Pet]:
        return self.repo.get_pets(self.db, client_id)

    def get_pet(self, pet_id: str) -> Pet:
        pet = self.repo.get_pet_by_id(self.db, pet_id)
        if not pet:
            raise PetNotFoundError(pet_id)
        return pet

    def create_pet(self, data: PetCreate) -> Pet:
        if not self.repo.get_client_by_id(self.db, data.clientId):
            raise ClientNotFoundError(data.clientId)
        pet = self.repo.create_pet(
            self.db,
            client_id=data.clientId,
            name=data.name,
            breed=data.breed,
            size=data.size.value,
            notes=data.notes,
        )
        logger.info(f"🐾 Pet {pet.name} registered for client {data.clientId}")
        return pet

    def update_pet(self, pet_id: str, data: PetUpdate) -> Pet:
        pet = self.get_pet(pet_id)
        updates = data.model_dump(exclude_unset=True)
        if data.size is not None:
            updates["size"] = data.size.value
        return self.repo.update_pet(self.db, pet, **updates)

    def delete_pet(self, pet_id: str) -> dict:
        pet = self.get_pet(pet_id)
        if self.repo.pet_has_appointments(self.db, pet_id):
            raise ConflictError("Pet has appointments and cannot be deleted")
        self.repo.delete_pet(self.db, pet)
        return {"message": "Pet deleted"}
