"""Scheduling repository - Database operations for appointments"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, AppointmentStatus, Client, Pet, PetShop, Service


def day_bounds(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class AppointmentRepository:
    """Repository for appointment database operations. Never commits."""

    @staticmethod
    def lock_shop(db: Session) -> Optional[PetShop]:
        """
        Load the shop row with FOR UPDATE.

        Holding this lock until commit serializes concurrent bookings for the
        shop, so the same-day read and the insert cannot interleave with
        another booking.
        """
        return db.query(PetShop).order_by(PetShop.created_at).with_for_update().first()

    @staticmethod
    def get_client(db: Session, client_id: str) -> Optional[Client]:
        return db.query(Client).filter(Client.id == client_id).first()

    @staticmethod
    def get_pet(db: Session, pet_id: str) -> Optional[Pet]:
        return db.query(Pet).filter(Pet.id == pet_id).first()

    @staticmethod
    def get_services(db: Session, service_ids: list[str]) -> list[Service]:
        if not service_ids:
            return []
        return db.query(Service).filter(Service.id.in_(service_ids)).all()

    @staticmethod
    def get_active_for_day(db: Session, day: date) -> list[Appointment]:
        """Appointments starting on the given local day, excluding cancelled ones"""
        day_start, day_end = day_bounds(day)
        return (
            db.query(Appointment)
            .filter(
                Appointment.date >= day_start,
                Appointment.date < day_end,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
            .order_by(Appointment.date)
            .all()
        )

    @staticmethod
    def add(db: Session, appointment: Appointment) -> Appointment:
        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def get_by_id(db: Session, appointment_id: str, for_update: bool = False) -> Optional[Appointment]:
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def list_appointments(
        db: Session,
        client_id: Optional[str] = None,
        day: Optional[date] = None,
        status: Optional[str] = None,
        newest_first: bool = False,
    ) -> list[Appointment]:
        query = db.query(Appointment)
        if client_id:
            query = query.filter(Appointment.client_id == client_id)
        if day:
            day_start, day_end = day_bounds(day)
            query = query.filter(Appointment.date >= day_start, Appointment.date < day_end)
        if status:
            query = query.filter(Appointment.status == status)
        order = Appointment.date.desc() if newest_first else Appointment.date.asc()
        return query.order_by(order).all()
