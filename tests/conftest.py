"""Shared fixtures: in-memory database, API client and auth tokens."""

import os
import uuid

# Settings are read at import time, so configure them before importing app.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import get_settings
from app.database import get_session
from app.main import app
from app.models.user import User
from app.schemas.cart import Customization, ProductSnapshot, SelectedValue


def make_token(user_id: uuid.UUID, email: str) -> str:
    settings = get_settings()
    return jwt.encode(
        {"sub": str(user_id), "email": email},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALG,
    )


def auth_headers(user_id: uuid.UUID, email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


def order_payload(**overrides) -> dict:
    payload = {
        "items": [
            {
                "product": "pizza-margherita",
                "quantity": 2,
                "price": 200,
                "customizations": [
                    {"optionName": "Size", "selectedValues": [{"name": "Large", "price": 50}]}
                ],
            }
        ],
        "totalAmount": 472.5,
        "shippingAddress": {
            "type": "home",
            "street": "12 MG Road",
            "city": "Pune",
            "state": "MH",
            "zipCode": "411001",
        },
        "paymentDetails": {"paymentMethod": "cod", "paymentStatus": "Pending"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(session):
    def override_get_session():
        return session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def customer(session) -> User:
    user = User(id=uuid.uuid4(), email="asha@example.com", name="asha", role="user")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def other_customer(session) -> User:
    user = User(id=uuid.uuid4(), email="ravi@example.com", name="ravi", role="user")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session) -> User:
    user = User(id=uuid.uuid4(), email="ops@example.com", name="ops", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_headers(customer.id, customer.email)


@pytest.fixture
def other_headers(other_customer) -> dict[str, str]:
    return auth_headers(other_customer.id, other_customer.email)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin.id, admin.email)


# ---- cart fixtures ----


@pytest.fixture
def pizza() -> ProductSnapshot:
    return ProductSnapshot(
        id="pizza-margherita",
        name="Margherita",
        base_price=200,
        discount=10,
        category="Pizza",
    )


@pytest.fixture
def fries() -> ProductSnapshot:
    return ProductSnapshot(id="fries-classic", name="Classic Fries", base_price=99, category="Fries")


def size(name: str, price: float) -> Customization:
    return Customization(option_name="Size", selected_values=[SelectedValue(name=name, price=price)])


def toppings(*choices: tuple[str, float]) -> Customization:
    return Customization(
        option_name="Toppings",
        selected_values=[SelectedValue(name=n, price=p) for n, p in choices],
    )
