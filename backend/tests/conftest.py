"""
Pytest fixtures and configuration for the storefront backend tests

Unit tests run against an in-memory SQLite database created per test.

Author: TM3
Date: 2025-10-17
"""
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Must be set before app modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTH_SECRET", "test-auth-secret")

import pytest
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (registers tables on Base)
from app.core.config import settings
from app.core.database import Base
from app.domain.actor import Actor
from app.models import CartItem, Category, Order, Product, User


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory database per test

    StaticPool keeps a single connection so every session sees the same data.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """
    Provides a session for arranging and inspecting data

    Automatically closed after the test
    """
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope="function")
def seeded(session_factory):
    """
    Seeds accounts, catalog and carts

    Products:
        1 Wireless Mouse  25.00  stock 10  (Electronics)
        2 USB-C Cable      9.99  stock 3   (Cables)
        3 Old Keyboard    40.00  stock 5   inactive
        4 Last Headset    59.90  stock 1   (Electronics)

    Carts:
        1 user-1 -> product 1 x2
        2 user-1 -> product 2 x1
        3 user-2 -> product 1 x1
    """
    with session_factory() as session:
        session.add_all([
            User(id="user-1", email="alice@example.com", name="Alice", is_active=True),
            User(id="user-2", email="bob@example.com", name="Bob", is_active=True),
            User(id="user-3", email="carol@example.com", name="Carol", is_active=False),
            Category(id=1, name="Electronics"),
            Category(id=2, name="Cables"),
        ])
        session.flush()
        session.add_all([
            Product(id=1, name="Wireless Mouse", price=Decimal("25.00"), stock=10, sold=0, is_active=True, category_id=1),
            Product(id=2, name="USB-C Cable", price=Decimal("9.99"), stock=3, sold=0, is_active=True, category_id=2),
            Product(id=3, name="Old Keyboard", price=Decimal("40.00"), stock=5, sold=0, is_active=False, category_id=1),
            Product(id=4, name="Last Headset", price=Decimal("59.90"), stock=1, sold=0, is_active=True, category_id=1),
        ])
        session.flush()
        session.add_all([
            CartItem(id=1, user_id="user-1", product_id=1, quantity=2),
            CartItem(id=2, user_id="user-1", product_id=2, quantity=1),
            CartItem(id=3, user_id="user-2", product_id=1, quantity=1),
        ])
        session.commit()
    return session_factory


@pytest.fixture
def actor():
    return Actor(id="user-1", email="alice@example.com", name="Alice", is_active=True)


@pytest.fixture
def other_actor():
    return Actor(id="user-2", email="bob@example.com", name="Bob", is_active=True)


@pytest.fixture
def suspended_actor():
    return Actor(id="user-3", email="carol@example.com", name="Carol", is_active=False)


@pytest.fixture
def order_payload():
    """
    Valid checkout body for user-1: both cart lines, account payment
    """
    return {
        "orderItems": [
            {"product": 1, "name": "Wireless Mouse", "quantity": 2, "price": 25.00, "cartId": 1},
            {"product": 2, "name": "USB-C Cable", "quantity": 1, "price": 9.99, "cartId": 2},
        ],
        "paymentInfo": {
            "typePayment": "WAAFI",
            "paymentAccountNumber": "77123456",
            "paymentAccountName": "Alice Martin",
        },
    }


@pytest.fixture
def product_state(session_factory):
    """Returns a function reading (stock, sold) of a product from the database"""
    def read(product_id):
        with session_factory() as session:
            product = session.get(Product, product_id)
            return product.stock, product.sold
    return read


@pytest.fixture
def order_count(session_factory):
    def count():
        with session_factory() as session:
            return session.query(Order).count()
    return count


@pytest.fixture
def cart_ids(session_factory):
    """Returns a function listing the cart entry ids still stored"""
    def ids():
        with session_factory() as session:
            return sorted(item.id for item in session.query(CartItem).all())
    return ids


@pytest.fixture
def make_token():
    """Builds session JWTs signed like the auth framework does"""
    def build(user_id="user-1", email="alice@example.com", expires_in=timedelta(hours=1), secret=None):
        now = datetime.now(timezone.utc)
        payload = {"sub": user_id, "id": user_id, "email": email, "iat": now, "exp": now + expires_in}
        return jwt.encode(payload, secret or settings.AUTH_SECRET, algorithm=settings.AUTH_ALGORITHM)
    return build


@pytest.fixture
def auth_headers(make_token):
    def build(user_id="user-1", email="alice@example.com"):
        return {"Authorization": f"Bearer {make_token(user_id, email)}"}
    return build


@pytest.fixture
def client(seeded):
    """
    TestClient wired to the seeded in-memory database

    Overrides the request session and the order service so that every
    request runs against the same database as the fixtures.
    """
    from fastapi.testclient import TestClient

    from app.api.orders import get_order_service
    from app.core.database import get_db
    from app.main import app
    from app.services.order_placement_service import OrderPlacementService

    def override_get_db():
        db = seeded()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_service] = lambda: OrderPlacementService(session_factory=seeded)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
