"""
Pytest configuration and fixtures for tests.

This file is automatically loaded by pytest and provides shared fixtures
and configuration for all tests.
"""

import os
import sys

# Environment must be in place before config is imported anywhere
os.environ["RUNTIME_ENVIRONMENT"] = "TEST"
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["STRIPE_WEBHOOK_SECRET"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["CORS_ALLOWED_ORIGINS"] = ""

# Add parent directory to Python path so tests can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import config
from enums.payment_method import PaymentMethod
from enums.user_role import UserRole
from enums.user_status import UserStatus
from models.base import Base
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from models.user import UserDTO
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from repositories.user import UserRepository
from utils.security import hash_password, create_access_token

DEFAULT_PASSWORD = "secret123"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def test_engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def test_session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_session(test_session_maker):
    async with test_session_maker() as session:
        yield session
        await session.rollback()


# ============================================================================
# Data Factories
# ============================================================================

@pytest.fixture
def make_user(test_session):
    counter = {"n": 0}

    async def factory(role: UserRole = UserRole.USER, status: UserStatus = UserStatus.ACTIVE,
                      password: str = DEFAULT_PASSWORD, **overrides) -> UserDTO:
        counter["n"] += 1
        values = dict(
            username=f"user{counter['n']}",
            email=f"user{counter['n']}@example.com",
            password=hash_password(password),
            first_name="Test",
            last_name="User",
            phone_number="5550100",
            country_code="+1",
            role=role,
            status=status,
        )
        values.update(overrides)
        user = await UserRepository.create(UserDTO(**values), test_session)
        await test_session.commit()
        return user

    return factory


@pytest.fixture
def make_product(test_session):
    counter = {"n": 0}

    async def factory(**overrides):
        counter["n"] += 1
        values = dict(
            title=f"Product {counter['n']}",
            description="A product",
            category="beauty",
            price=10.0,
            stock=5,
            sku=f"SKU-{counter['n']:04d}",
            thumbnail=f"https://cdn.example.com/{counter['n']}.png",
            tags=["test"],
        )
        values.update(overrides)
        product = await ProductRepository.create(values, test_session)
        await test_session.commit()
        return product

    return factory


SHIPPING_ADDRESS = {
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "postalCode": "62701",
    "country": "US",
    "isDefault": True,
}


@pytest.fixture
def make_order(test_session):
    """Orders written straight through the repository, bypassing checkout."""
    counter = {"n": 0}

    async def factory(user: UserDTO, payment_method: PaymentMethod = PaymentMethod.COD,
                      price: float = 10.0, quantity: int = 1, **overrides) -> OrderDTO:
        counter["n"] += 1
        order = await OrderRepository.create(OrderDTO(
            order_number=f"ORD{1000 + counter['n']}",
            user_id=user.id,
            items=[OrderItemDTO(product_id=1, title="Lipstick", price=price, quantity=quantity, thumbnail="")],
            total_amount=round(price * quantity, 2),
            total_items=quantity,
            shipping_address=SHIPPING_ADDRESS,
            payment_method=payment_method,
        ), test_session)
        if overrides:
            order = await OrderRepository.update(order.id, overrides, test_session)
        await test_session.commit()
        return order

    return factory


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def client(test_session_maker):
    """ASGI client against the app, every request gets its own session on the test database."""
    from server import app
    from web.dependencies import get_session

    async def override_get_session():
        async with test_session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
def authenticate(client):
    """Put an access token for the user into the client's cookie jar."""

    def _authenticate(user: UserDTO):
        client.cookies.set(config.ACCESS_TOKEN_COOKIE, create_access_token(user))
        return client

    return _authenticate
