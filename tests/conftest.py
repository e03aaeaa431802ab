"""Pytest configuration and fixtures."""

import os

# keep the app's own engine off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from print_erp.core.database import Base, get_db
from print_erp.core.security import create_access_token
from print_erp.main import app
# Import all models to ensure they're registered with Base.metadata
import print_erp.models  # noqa: F401
from print_erp.models.user import Role, User
from print_erp.models.inventory import InventoryItem, Supplier

TEST_DATABASE_URL = "sqlite:///:memory:"

# tests that never log in skip bcrypt entirely
UNUSABLE_PASSWORD_HASH = "!"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def roles(db_session: Session) -> dict:
    created = {}
    for name in ("Admin", "Manager", "Staff"):
        role = Role(name=name, description=f"{name} role")
        db_session.add(role)
        created[name] = role
    db_session.commit()
    return created


def _make_user(db_session: Session, role: Role, email: str) -> User:
    user = User(
        email=email,
        hashed_password=UNUSABLE_PASSWORD_HASH,
        full_name=f"{role.name} User",
        is_active=True,
        role_id=role.id,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _headers(user: User) -> dict:
    token = create_access_token(user.email, role=user.role.name)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session: Session, roles) -> User:
    return _make_user(db_session, roles["Admin"], "admin@printshop.test")


@pytest.fixture
def manager_user(db_session: Session, roles) -> User:
    return _make_user(db_session, roles["Manager"], "manager@printshop.test")


@pytest.fixture
def staff_user(db_session: Session, roles) -> User:
    return _make_user(db_session, roles["Staff"], "staff@printshop.test")


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers(admin_user)


@pytest.fixture
def manager_headers(manager_user: User) -> dict:
    return _headers(manager_user)


@pytest.fixture
def staff_headers(staff_user: User) -> dict:
    return _headers(staff_user)


@pytest.fixture
def test_supplier(db_session: Session) -> Supplier:
    """Create a test supplier."""
    supplier = Supplier(
        name="Metro Paper Supply",
        contact_person="Ana Reyes",
        email="orders@metropaper.test",
        phone="+63 2 8123 4567",
        payment_terms="Net 30",
    )
    db_session.add(supplier)
    db_session.commit()
    db_session.refresh(supplier)
    return supplier


@pytest.fixture
def paper(db_session: Session, test_supplier: Supplier) -> InventoryItem:
    item = InventoryItem(
        name="A4 Bond Paper 80gsm",
        sku="PAP-A4-80",
        item_type="ream",
        quantity=0,
        min_stock_level=10,
        unit_price=100.0,
        supplier_id=test_supplier.id,
    )
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


@pytest.fixture
def ink(db_session: Session, test_supplier: Supplier) -> InventoryItem:
    item = InventoryItem(
        name="Black Ink Cartridge",
        sku="INK-BLK",
        item_type="piece",
        quantity=2,
        min_stock_level=5,
        unit_price=50.0,
        supplier_id=test_supplier.id,
    )
    db_session.add(item)
    db_session.commit()
    db_session.refresh(item)
    return item


ORDERS = "/api/v1/procurement/orders"


def set_status(client: TestClient, headers: dict, order_id: int, status: str):
    return client.put(f"{ORDERS}/{order_id}/status", json={"status": status}, headers=headers)


def pay(client: TestClient, headers: dict, order_id: int, amount, **extra):
    payload = {"amount": amount, "payment_method": "Cash"}
    payload.update(extra)
    return client.post(f"{ORDERS}/{order_id}/payments", json=payload, headers=headers)


@pytest.fixture
def order(client: TestClient, manager_headers, test_supplier, paper, ink) -> dict:
    """Pending order worth 1000: 5 reams @ 100 and 10 cartridges @ 50"""
    response = client.post(
        ORDERS,
        json={
            "supplier_id": test_supplier.id,
            "payment_plan": "50% down, balance on delivery",
            "items": [
                {"inventory_id": paper.id, "quantity": 5, "unit_price": 100, "item_type": "ream"},
                {"inventory_id": ink.id, "quantity": 10, "unit_price": 50},
            ],
        },
        headers=manager_headers,
    )
    assert response.status_code == 201
    return response.json()
