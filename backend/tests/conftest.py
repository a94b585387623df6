"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test runs inside a connection-level transaction that rolls back after the test.
- The database comes from ``TEST_DATABASE_URL``; the default is an in-memory
  SQLite database (aiosqlite). Point it at a throwaway PostgreSQL database to
  run the suite against the production dialect.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from decimal import Decimal

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from villamarket.auth.passwords import hash_password
from villamarket.auth.tokens import create_access_token
from villamarket.database import Base, get_db
from villamarket.main import app
from villamarket.models.user import AccountType, User
from villamarket.models.villa import Amenity, Villa
from villamarket.services import villa_service

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _make_engine():
    if TEST_DATABASE_URL.startswith("sqlite"):
        # One shared connection, otherwise every checkout gets a fresh empty in-memory DB
        return create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(TEST_DATABASE_URL, echo=False, pool_pre_ping=True)


# ---------------------------------------------------------------------------
# Session-scoped: create / drop all tables once per test session
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def test_engine():
    """Create a session-scoped engine tied to the session event loop."""
    engine = _make_engine()
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def setup_test_db(test_engine):
    """Create all tables at the start of the session and drop them at the end."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# ---------------------------------------------------------------------------
# Per-test: transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_session(test_engine, setup_test_db) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Convenience fixtures: users and auth headers
# ---------------------------------------------------------------------------


async def make_user(db_session: AsyncSession, account_type: str = AccountType.GUEST, name: str = "Test User") -> User:
    """Create a user directly in the DB."""
    unique = uuid.uuid4().hex[:8]
    user = User(
        email=f"{account_type}-{unique}@test.com",
        hashed_password=hash_password("testpass123"),
        name=name,
        account_type=account_type,
        is_active=True,
    )
    db_session.add(user)
    await db_session.flush()
    await db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    """Authorization headers carrying an access token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.account_type)}"}


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, AccountType.HOST, name="Harriet Host")


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, AccountType.GUEST, name="Grace Guest")


@pytest_asyncio.fixture
async def other_guest(db_session: AsyncSession) -> User:
    return await make_user(db_session, AccountType.GUEST, name="Oliver Guest")


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


@pytest_asyncio.fixture
async def other_guest_headers(other_guest: User) -> dict[str, str]:
    return headers_for(other_guest)


# ---------------------------------------------------------------------------
# Convenience fixtures: listings
# ---------------------------------------------------------------------------


async def make_villa(db_session: AsyncSession, host: User, listed: bool = True, **overrides) -> Villa:
    """Create a villa for ``host``: 100/night, 50 cleaning fee, 2-night minimum, 4 guests."""
    data = {
        "title": "Orchard Villa Millbrook",
        "property_type": "villa",
        "num_guests": 4,
        "num_bedrooms": 2,
        "num_beds": 2,
        "num_bathrooms": 2,
        "price_per_night": Decimal("100.00"),
        "cleaning_fee": Decimal("50.00"),
        "minimum_nights": 2,
        "exact_address": "12 Orchard Lane, Millbrook",
        "directions_landmarks": "Next to the old stone bridge",
    }
    data.update(overrides)
    villa = await villa_service.create_villa(db_session, host, data)
    if listed:
        villa = await villa_service.update_villa(db_session, villa.id, host.id, {"status": "listed"})
    return villa


@pytest_asyncio.fixture
async def villa(db_session: AsyncSession, host_user: User) -> Villa:
    """A listed villa owned by ``host_user``."""
    return await make_villa(db_session, host_user)


@pytest_asyncio.fixture
async def amenities(db_session: AsyncSession) -> dict[str, Amenity]:
    """A small amenity catalogue keyed by name."""
    catalogue = {}
    for name, icon in (("pool", "waves"), ("wifi", "wifi"), ("kitchen", "utensils")):
        amenity = Amenity(name=name, icon_name=icon)
        db_session.add(amenity)
        catalogue[name] = amenity
    await db_session.flush()
    return catalogue
