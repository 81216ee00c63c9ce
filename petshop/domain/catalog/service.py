"""Catalog service - Business logic for the service catalog"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...models import Service
from ...shared.errors import ConflictError, ServiceNotFoundError
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def get_services(self) -> list[Service]:
        return self.repo.get_services(self.db)

    def get_service(self, service_id: str) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise ServiceNotFoundError([service_id])
        return service

    def create_service(self, data: ServiceCreate) -> Service:
        service = self.repo.create_service(self.db, **data.model_dump())
        logger.info(f"✅ Service created: {service.name} ({service.duration} min)")
        return service

    def update_service(self, service_id: str, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)
        # Appointment end times follow the current duration, so booked slots pin it
        if data.duration is not None and data.duration != service.duration:
            if self.repo.has_upcoming_appointments(self.db, service_id, datetime.now()):
                logger.warning(f"⚠️ Duration change refused for service {service_id}: upcoming appointments")
                raise ConflictError(
                    "Service duration cannot change while upcoming appointments use it",
                    field="duration",
                )
        return self.repo.update_service(self.db, service, **data.model_dump(exclude_unset=True))

    def delete_service(self, service_id: str) -> dict:
        service = self.get_service(service_id)
        if self.repo.is_booked(self.db, service_id):
            raise ConflictError("Service is referenced by appointments and cannot be deleted")
        self.repo.delete_service(self.db, service)
        logger.info(f"🗑️ Service deleted: {service_id}")
        return {"message": "Service deleted"}
