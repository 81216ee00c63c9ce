"""Catalog repository - Database operations for services"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, AppointmentStatus, Service, appointment_services


class ServiceRepository:
    """Repository for service catalog database operations"""

    @staticmethod
    def get_services(db: Session) -> list[Service]:
        return db.query(Service).order_by(Service.name.asc()).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def is_booked(db: Session, service_id: str) -> bool:
        return (
            db.query(appointment_services)
            .filter(appointment_services.c.service_id == service_id)
            .first()
            is not None
        )

    @staticmethod
    def has_upcoming_appointments(db: Session, service_id: str, since: datetime) -> bool:
        """Non-cancelled appointments starting at or after `since` that include the service"""
        return (
            db.query(Appointment.id)
            .join(appointment_services, appointment_services.c.appointment_id == Appointment.id)
            .filter(
                appointment_services.c.service_id == service_id,
                Appointment.date >= since,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
            .first()
            is not None
        )

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
