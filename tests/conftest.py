"""
Ledgerline - Test Configuration

Pytest fixtures and configuration.

Each test gets a fresh in-memory SQLite schema, so no database server is
needed.
"""

from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from ledgerline.database import Base, get_async_session
from ledgerline.models import Customer, Product, Vendor, Warehouse
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database and session for each test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    TestSessionLocal = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

async def _persist(session: AsyncSession, instance):
    session.add(instance)
    await session.commit()
    await session.refresh(instance)
    return instance


@pytest_asyncio.fixture
async def test_warehouse(db_session: AsyncSession) -> Warehouse:
    """Create the main warehouse."""
    return await _persist(db_session, Warehouse(
        id=uuid4(),
        name="Main Warehouse",
        code="WH-MAIN",
        address="12 Industrial Estate, Pune",
        is_active=True,
    ))


@pytest_asyncio.fixture
async def test_product(db_session: AsyncSession) -> Product:
    """Create a non-serialized product at 100.00 + 18% GST."""
    return await _persist(db_session, Product(
        id=uuid4(),
        name="Cable Tray",
        sku="CT-100",
        category="Hardware",
        unit="pcs",
        gst_percent=Decimal("18.00"),
        unit_price=Decimal("100.00"),
        has_serial=False,
    ))


@pytest_asyncio.fixture
async def test_serialized_product(db_session: AsyncSession) -> Product:
    """Create a serialized product at 1000.00 + 18% GST."""
    return await _persist(db_session, Product(
        id=uuid4(),
        name="Network Switch",
        sku="NS-24",
        category="Networking",
        unit="pcs",
        gst_percent=Decimal("18.00"),
        unit_price=Decimal("1000.00"),
        has_serial=True,
    ))


@pytest_asyncio.fixture
async def test_vendor(db_session: AsyncSession) -> Vendor:
    """Create a test vendor."""
    return await _persist(db_session, Vendor(
        id=uuid4(),
        name="Acme Components Pvt Ltd",
        email="sales@acme.example",
        gstin="27AAACA1234A1Z5",
        address="45 MIDC Road, Mumbai",
        contact_number="+91 22 4000 1000",
        contact_person_name="R. Iyer",
    ))


@pytest_asyncio.fixture
async def test_customer(db_session: AsyncSession) -> Customer:
    """Create a test customer."""
    return await _persist(db_session, Customer(
        id=uuid4(),
        name="Blue River Traders",
        email="accounts@blueriver.example",
        gstin="29AABCB5678B1Z2",
        address="9 MG Road, Bengaluru",
        contact_number="+91 80 2200 3300",
    ))
