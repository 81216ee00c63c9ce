"""Client repository - Database operations for clients and pets"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, Client, Pet


class ClientRepository:
    """Repository for client and pet database operations"""

    @staticmethod
    def get_clients(db: Session, search: Optional[str] = None) -> list[Client]:
        query = db.query(Client)
        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                (Client.name.ilike(search_term))
                | (Client.email.ilike(search_term))
                | (Client.phone.ilike(search_term))
            )
        return query.order_by(Client.name.asc()).all()

    @staticmethod
    def get_client_by_id(db: Session, client_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_client_by_email(db: Session, email: str) -> Optional[Client]:
        return db.query(Client).filter(Client.email == email).first()

    @staticmethod
    def create_client(db: Session, **client_data) -> Client:
        client = Client(**client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: Client, **updates) -> Client:
        """Update a client with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(client, key):
                setattr(client, key, value)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def has_appointments(db: Session, client_id: str) -> bool:
        return db.query(Appointment.id).filter(Appointment.client_id == client_id).first() is not None

    @staticmethod
    def delete_client(db: Session, client: Client) -> None:
        db.delete(client)
        db.commit()

    # Pet Methods
    @staticmethod
    def get_pets(db: Session, client_id: Optional[str] = None) -> list[Pet]:
        query = db.query(Pet)
        if client_id:
            query = query.filter(Pet.client_id == client_id)
        return query.order_by(Pet.name.asc()).all()

    @staticmethod
    def get_pet_by_id(db: Session, pet_id: str) -> Optional[Pet]:
        return db.query(Pet).filter(Pet.id == pet_id).first()

    @staticmethod
    def create_pet(db: Session, **pet_data) -> Pet:
        pet = Pet(**pet_data)
        db.add(pet)
        db.commit()
        db.refresh(pet)
        return pet

    @staticmethod
    def update_pet(db: Session, pet: Pet, **updates) -> Pet:
        for key, value in updates.items():
            if value is not None and hasattr(pet, key):
                setattr(pet, key, value)
        db.commit()
        db.refresh(pet)
        return pet

    @staticmethod
    def pet_has_appointments(db: Session, pet_id: str) -> bool:
        return db.query(Appointment.id).filter(Appointment.pet_id == pet_id).first() is not None

    @staticmethod
    def delete_pet(db: Session, pet: Pet) -> None:
        db.delete(pet)
        db.commit()
