import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate a unique string primary key"""
    return str(uuid.uuid4())


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SubscriptionState(str, enum.Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class PetSize(str, enum.Enum):
    PEQUENO = "PEQUENO"
    MEDIO = "MEDIO"
    GRANDE = "GRANDE"


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


appointment_services = Table(
    "appointment_services",
    Base.metadata,
    Column("appointment_id", String(36), ForeignKey("appointments.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", String(36), ForeignKey("services.id"), primary_key=True),
)


class PetShop(Base):
    """The shop profile. Only the first row is used."""

    __tablename__ = "pet_shops"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    # e.g. {"monday": {"open": true, "start": "09:00", "end": "18:00"}, "sunday": {"open": false}}
    working_hours = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True, index=True)
    whatsapp = Column(String(50), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    pets = relationship("Pet", back_populates="client", cascade="all, delete-orphan")
    appointments = relationship("Appointment", back_populates="client")


class Pet(Base):
    __tablename__ = "pets"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    breed = Column(String(255), nullable=True)
    size = Column(String(20), nullable=False)  # PEQUENO, MEDIO, GRANDE
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    client = relationship("Client", back_populates="pets")
    appointments = relationship("Appointment", back_populates="pet")


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (CheckConstraint("duration > 0", name="ck_services_duration_positive"),)


class Appointment(Base):
    """A booked slot. The end time is derived from the services, never stored."""

    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    pet_id = Column(String(36), ForeignKey("pets.id"), nullable=False)

    # Local wall-clock start time
    date = Column(DateTime, nullable=False, index=True)
    # PENDING → CONFIRMED → COMPLETED, or CANCELLED from either of the first two
    status = Column(String(20), default=AppointmentStatus.PENDING.value, nullable=False, index=True)
    is_from_subscription = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="appointments")
    pet = relationship("Pet", back_populates="appointments")
    services = relationship("Service", secondary=appointment_services, lazy="selectin")


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    # [{"serviceId": "...", "quantity": 4}, ...]
    credits = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, server_default=func.now())

    subscriptions = relationship("Subscription", back_populates="plan")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("subscription_plans.id"), nullable=False)
    plan_name = Column(String(255), nullable=False)
    status = Column(String(20), default=SubscriptionState.ACTIVE.value, nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    renewal_date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime, server_default=func.now())

    plan = relationship("SubscriptionPlan", back_populates="subscriptions")


class SubscriptionCredit(Base):
    """Per-client, per-service prepaid credits for the current renewal period"""

    __tablename__ = "subscription_credits"

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("subscription_plans.id"), nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    service_name = Column(String(255), nullable=False)
    total_credits = Column(Integer, nullable=False)
    used_credits = Column(Integer, default=0, nullable=False)
    remaining_credits = Column(Integer, nullable=False)
    renewal_date = Column(Date, nullable=False)

    __table_args__ = (
        CheckConstraint("remaining_credits >= 0", name="ck_credits_remaining_non_negative"),
        CheckConstraint(
            "used_credits + remaining_credits = total_credits", name="ck_credits_conserved"
        ),
    )
