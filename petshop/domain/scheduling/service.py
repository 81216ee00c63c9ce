"""Booking service - Business logic for appointment scheduling"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from ...auth import CurrentUser, ensure_client_access
from ...database import is_transient_storage_error
from ...models import Appointment, AppointmentStatus, Client, Pet, PetShop, Service
from ...shared.errors import (
    AppointmentNotFoundError,
    ClientNotFoundError,
    ConfigMissingError,
    ConflictError,
    InvalidInputError,
    InvalidStatusTransitionError,
    PetNotFoundError,
    PetShopError,
    ScheduleConflictError,
    ServiceNotFoundError,
    StorageConflictError,
)
from ...shared.validators import to_local_naive
from ..subscriptions.ledger import CreditLedger
from .availability_service import appointment_end, busy_intervals, find_conflict
from .repository import AppointmentRepository
from .schemas import AppointmentCreate, AppointmentUpdate
from .time_calculator import is_within_operating_hours, total_duration

logger = logging.getLogger(__name__)

PENDING = AppointmentStatus.PENDING.value
CONFIRMED = AppointmentStatus.CONFIRMED.value
COMPLETED = AppointmentStatus.COMPLETED.value
CANCELLED = AppointmentStatus.CANCELLED.value

ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {COMPLETED, CANCELLED},
    COMPLETED: set(),
    CANCELLED: set(),
}


def slot_start(value: datetime) -> datetime:
    """Local wall-clock start truncated to the minute"""
    return to_local_naive(value).replace(second=0, microsecond=0)


class BookingService:
    """Service layer for appointment booking and lifecycle"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()
        self.ledger = CreditLedger(db)

    @contextmanager
    def _transaction(self, action: str):
        """Commit on success; roll back on any error and report storage aborts as retryable"""
        try:
            yield
            self.db.commit()
        except PetShopError as e:
            self.db.rollback()
            logger.warning(f"⚠️ {action} rejected ({e.code}): {e.message}")
            raise
        except DBAPIError as e:
            self.db.rollback()
            if is_transient_storage_error(e):
                logger.warning(f"⚠️ {action} aborted by a concurrent transaction: {e.orig}")
                raise StorageConflictError() from e
            logger.error(f"❌ {action} failed with a database error: {e}")
            raise

    def _lock_schedule(self) -> PetShop:
        shop = self.repo.lock_shop(self.db)
        if not shop or not shop.working_hours:
            logger.error("❌ Shop working hours are not configured")
            raise ConfigMissingError("Shop working hours are not configured")
        return shop

    def _load_client_and_pet(self, client_id: str, pet_id: str) -> tuple[Client, Pet]:
        client = self.repo.get_client(self.db, client_id)
        if not client:
            raise ClientNotFoundError(client_id)
        pet = self.repo.get_pet(self.db, pet_id)
        if not pet:
            raise PetNotFoundError(pet_id)
        if pet.client_id != client.id:
            raise InvalidInputError("Pet does not belong to this client", field="petId")
        return client, pet

    def _load_services(self, service_ids: list[str]) -> list[Service]:
        found = {s.id: s for s in self.repo.get_services(self.db, service_ids)}
        missing = [service_id for service_id in service_ids if service_id not in found]
        if missing:
            raise ServiceNotFoundError(missing)
        return [found[service_id] for service_id in service_ids]

    def _check_slot(
        self, shop: PetShop, start: datetime, services: list[Service], exclude_id: Optional[str] = None
    ) -> datetime:
        """Validate opening hours and same-day overlaps; return the window end"""
        duration = total_duration(services)
        is_within_operating_hours(shop.working_hours, start, duration)
        end = start + timedelta(minutes=duration)

        existing = [a for a in self.repo.get_active_for_day(self.db, start.date()) if a.id != exclude_id]
        conflict = find_conflict(start, end, existing)
        if conflict is not None:
            raise ScheduleConflictError(conflict.id, conflict.date, appointment_end(conflict))
        return end

    def create_appointment(self, data: AppointmentCreate, user: Optional[CurrentUser] = None) -> Appointment:
        """
        Book an appointment as one all-or-nothing transaction.

        Steps: lock shop schedule → load client, pet and services → check
        opening hours → check same-day overlaps → consume credits (subscription
        bookings only) → insert. Any failure rolls everything back.
        """
        if user is not None:
            ensure_client_access(user, data.clientId)

        start = slot_start(data.startTime)
        logger.info(f"📥 Booking request for client {data.clientId} at {start.isoformat()}")

        with self._transaction("Booking"):
            shop = self._lock_schedule()
            client, pet = self._load_client_and_pet(data.clientId, data.petId)
            services = self._load_services(data.serviceIds)
            end = self._check_slot(shop, start, services)

            if data.isFromSubscription:
                self.ledger.consume_credits(client.id, services)

            appointment = Appointment(
                client_id=client.id,
                pet_id=pet.id,
                date=start,
                notes=data.notes,
                is_from_subscription=data.isFromSubscription,
                status=CONFIRMED if data.isFromSubscription else PENDING,
                services=services,
            )
            self.repo.add(self.db, appointment)

        self.db.refresh(appointment)
        logger.info(
            f"✅ Appointment {appointment.id} booked {start.isoformat()} - {end.isoformat()} "
            f"({appointment.status})"
        )
        return appointment

    def update_appointment(self, appointment_id: str, data: AppointmentUpdate) -> Appointment:
        """
        Reschedule or edit an appointment under the same lock and checks as booking.

        The appointment's own slot does not count as a conflict. Subscription
        funded appointments keep their client and services, since their credits
        were already consumed for them.
        """
        with self._transaction("Reschedule"):
            shop = self._lock_schedule()
            appointment = self.repo.get_by_id(self.db, appointment_id, for_update=True)
            if not appointment:
                raise AppointmentNotFoundError(appointment_id)
            if appointment.status in (COMPLETED, CANCELLED):
                raise ConflictError(
                    f"A {appointment.status} appointment cannot be changed", currentStatus=appointment.status
                )

            client, pet = self._load_client_and_pet(
                data.clientId or appointment.client_id, data.petId or appointment.pet_id
            )
            if data.serviceIds is not None:
                services = self._load_services(data.serviceIds)
            else:
                services = list(appointment.services)

            if appointment.is_from_subscription:
                if client.id != appointment.client_id:
                    raise InvalidInputError(
                        "A subscription-funded appointment cannot move to another client", field="clientId"
                    )
                if {s.id for s in services} != {s.id for s in appointment.services}:
                    raise InvalidInputError(
                        "Services of a subscription-funded appointment cannot be changed", field="serviceIds"
                    )

            start = slot_start(data.startTime) if data.startTime else appointment.date
            end = self._check_slot(shop, start, services, exclude_id=appointment.id)

            appointment.client_id = client.id
            appointment.pet_id = pet.id
            appointment.date = start
            appointment.services = services
            if "notes" in data.model_fields_set:
                appointment.notes = data.notes

        self.db.refresh(appointment)
        logger.info(f"📅 Appointment {appointment_id} now {start.isoformat()} - {end.isoformat()}")
        return appointment

    def get_appointment(self, appointment_id: str, user: CurrentUser) -> Appointment:
        appointment = self.repo.get_by_id(self.db, appointment_id)
        if not appointment:
            raise AppointmentNotFoundError(appointment_id)
        ensure_client_access(user, appointment.client_id)
        return appointment

    def list_appointments(
        self, user: CurrentUser, day: Optional[date] = None, status: Optional[str] = None
    ) -> list[Appointment]:
        """Staff see every appointment, clients only their own"""
        client_id = None if user.is_staff else user.id
        return self.repo.list_appointments(self.db, client_id=client_id, day=day, status=status)

    def list_client_appointments(self, client_id: str, user: CurrentUser) -> list[Appointment]:
        ensure_client_access(user, client_id)
        if not self.repo.get_client(self.db, client_id):
            raise ClientNotFoundError(client_id)
        return self.repo.list_appointments(self.db, client_id=client_id, newest_first=True)

    def get_busy_intervals(self, day: date) -> list[dict]:
        return busy_intervals(self.repo.get_active_for_day(self.db, day))

    def update_status(self, appointment_id: str, status: AppointmentStatus) -> Appointment:
        """Apply a lifecycle transition. Re-applying the current status is a no-op."""
        requested = status.value
        with self._transaction("Status change"):
            appointment = self.repo.get_by_id(self.db, appointment_id, for_update=True)
            if not appointment:
                raise AppointmentNotFoundError(appointment_id)

            previous = appointment.status
            if previous != requested:
                if requested not in ALLOWED_TRANSITIONS.get(previous, set()):
                    raise InvalidStatusTransitionError(previous, requested)
                appointment.status = requested

        self.db.refresh(appointment)
        if previous != requested:
            logger.info(f"🔄 Appointment {appointment_id} status {previous} → {requested}")
        return appointment

    def cancel_appointment(self, appointment_id: str, user: CurrentUser) -> Appointment:
        """Cancel an appointment. Cancelling twice is a successful no-op."""
        with self._transaction("Cancellation"):
            appointment = self.repo.get_by_id(self.db, appointment_id, for_update=True)
            if not appointment:
                raise AppointmentNotFoundError(appointment_id)
            ensure_client_access(user, appointment.client_id)

            already_cancelled = appointment.status == CANCELLED
            if appointment.status == COMPLETED:
                raise InvalidStatusTransitionError(COMPLETED, CANCELLED)
            appointment.status = CANCELLED

        if already_cancelled:
            logger.info(f"ℹ️ Appointment {appointment_id} already cancelled")
        else:
            logger.info(f"🗑️ Appointment {appointment_id} cancelled by {user.role.lower()} {user.id}")
        return appointment
