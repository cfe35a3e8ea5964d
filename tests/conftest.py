"""
Shared fixtures for the cart report test suite.
Provides an in-memory sqlite database, seeded users/carts and an HTTP client.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import cart_report.models  # noqa: F401
from cart_report.core.db import Base, get_db
from cart_report.models.cart import Cart
from cart_report.models.user import User
from cart_report.services.cart_search import CartSearch
from cart_report.services.cart_store import CartStore
from cart_report.services.currency import CurrencyFormatter

CREATED = datetime(2024, 2, 1, 9, 0, 0)


# ===== DATABASE SETUP =====

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory sqlite database per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    TestingSessionLocal = async_sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def search(db_session) -> CartSearch:
    return CartSearch(
        CartStore(db_session),
        default_currency="USD",
        formatter=CurrencyFormatter(),
        free_label="Free",
    )


@pytest_asyncio.fixture
async def client(db_session):
    """HTTP client against the app with get_db pointed at the test session"""
    from cart_report.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ===== SAMPLE DATA FIXTURES =====

@pytest_asyncio.fixture
async def sample_users(db_session) -> List[User]:
    users = [
        User(id=1, username="alice", email="alice@example.com", first_name="Alice", last_name="Smith", created_at=CREATED),
        User(id=2, username="bob", email="bob@example.com", created_at=CREATED),
        User(id=3, username="carol", email=None, first_name="Carol", last_name=None, created_at=CREATED),
    ]
    db_session.add_all(users)
    await db_session.commit()
    return users


def make_cart(**kw) -> Cart:
    kw.setdefault("created_at", CREATED)
    for key in ("price", "payable"):
        if kw.get(key) is not None:
            kw[key] = Decimal(str(kw[key]))
    return Cart(**kw)


@pytest.fixture
def cart_factory():
    return make_cart


@pytest_asyncio.fixture
async def sample_carts(db_session, sample_users) -> List[Cart]:
    """
    Six carts over three buyers:

    id  user  status     currency  price  payable  coupon    checkout_at
    1   1     delivered  USD       100    80       SAVE20    2024-03-01 10:00:00
    2   1     delivered  NULL      50     50       -         2024-03-02 00:00:00
    3   2     pending    USD       30     30       -         -
    4   2     canceled   EUR       40     40       -         -
    5   3     delivered  EUR       200    150      WELCOME   2024-03-05 23:59:59
    6   3     checkout   NULL      10     0        FREE100   -
    """
    carts = [
        make_cart(id=1, user_id=1, status="delivered", currency="USD", price=100, payable=80,
                  coupon_id=7, coupon_code="SAVE20", coupon_usage_id=70,
                  checkout_at=datetime(2024, 3, 1, 10, 0, 0)),
        make_cart(id=2, user_id=1, status="delivered", currency=None, price=50, payable=50,
                  checkout_at=datetime(2024, 3, 2, 0, 0, 0)),
        make_cart(id=3, user_id=2, status="pending", currency="USD", price=30, payable=30),
        make_cart(id=4, user_id=2, status="canceled", currency="EUR", price=40, payable=40),
        make_cart(id=5, user_id=3, status="delivered", currency="EUR", price=200, payable=150,
                  coupon_id=8, coupon_code="WELCOME", coupon_usage_id=80,
                  checkout_at=datetime(2024, 3, 5, 23, 59, 59)),
        make_cart(id=6, user_id=3, status="checkout", currency=None, price=10, payable=0,
                  coupon_id=9, coupon_code="FREE100", coupon_usage_id=90),
    ]
    db_session.add_all(carts)
    await db_session.commit()
    return carts


@pytest_asyncio.fixture
async def many_carts(db_session, sample_users) -> List[Cart]:
    """65 delivered carts for alice, one checkout per day starting 2024-01-01"""
    carts = []
    for i in range(65):
        carts.append(
            make_cart(
                id=100 + i,
                user_id=1,
                status="delivered",
                currency="USD",
                price=10,
                payable=10,
                checkout_at=datetime(2024, 1, 1, 12, 0, 0) + timedelta(days=i),
            )
        )
    db_session.add_all(carts)
    await db_session.commit()
    return carts
