import os
import sys
from datetime import date, datetime, time, timedelta
from decimal import Decimal

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from petshop.auth import create_access_token
from petshop.database import Base, get_db
from petshop.main import app
from petshop.models import Client, Pet, PetShop, Service

WORKING_HOURS = {
    "monday": {"open": True, "start": "09:00", "end": "18:00"},
    "tuesday": {"open": True, "start": "09:00", "end": "18:00"},
    "wednesday": {"open": True, "start": "09:00", "end": "18:00"},
    "thursday": {"open": True, "start": "09:00", "end": "18:00"},
    "friday": {"open": True, "start": "09:00", "end": "18:00"},
    "saturday": {"open": True, "start": "09:00", "end": "13:00"},
    "sunday": {"open": False},
}

TUESDAY = 1
SUNDAY = 6


def next_weekday(weekday: int, hour: int, minute: int = 0) -> datetime:
    """Local datetime on the next given weekday (Monday=0), always in the future"""
    today = date.today()
    days_ahead = (weekday - today.weekday()) % 7 or 7
    return datetime.combine(today + timedelta(days=days_ahead), time(hour, minute))


def auth_headers(user_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine, "connect")
    def enable_foreign_keys(dbapi_connection, _record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def api(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def shop(db):
    shop = PetShop(name="Pet Shop de Teste", working_hours=WORKING_HOURS)
    db.add(shop)
    db.commit()
    return shop


@pytest.fixture
def customer(db):
    customer = Client(name="Dono Para Agendamento", phone="11999998888")
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def pet(db, customer):
    pet = Pet(name="Rex", size="MEDIO", client_id=customer.id)
    db.add(pet)
    db.commit()
    return pet


@pytest.fixture
def bath(db):
    service = Service(name="Banho (60 min)", duration=60, price=Decimal("50.00"))
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def grooming(db):
    service = Service(name="Tosa (30 min)", duration=30, price=Decimal("40.00"))
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def staff_headers():
    return auth_headers("employee-1", "EMPLOYEE")


@pytest.fixture
def admin_headers():
    return auth_headers("admin-1", "ADMIN")


@pytest.fixture
def client_headers(customer):
    return auth_headers(customer.id, "CLIENT")
