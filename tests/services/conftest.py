"""Service test fixtures — async DB, catalog seeding, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe checks the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service and
      route tests (PostgreSQL-specific features not exercised here)
    - Catalog rows seeded through small factory fixtures instead of a shared dataset
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from orderdesk.db.base import Base
from orderdesk.infrastructure.database import get_db, DatabaseSessionManager
from orderdesk.models.location import Location
from orderdesk.models.location_requirement_mapping import LocationRequirementMapping
from orderdesk.models.order import Order
from orderdesk.models.requirement import Requirement
from orderdesk.models.service import Service
from orderdesk.models.service_requirement import ServiceRequirement
import orderdesk.infrastructure.database as db_module
from orderdesk.main import app

from tests.services.seed import CUSTOMER_ID, USER_ID


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def caller_headers():
    return {"X-Customer-Id": CUSTOMER_ID, "X-User-Id": USER_ID}


# ─── Catalog ────────────────────────────────────────────────────

@dataclass
class Catalog:
    criminal: Service
    education: Service
    california: Location
    texas: Location
    los_angeles: Location


@pytest.fixture
async def catalog(test_db) -> Catalog:
    """Two services and a small US location tree."""
    usa = Location(name="United States", code2="US")
    test_db.add(usa)
    await test_db.flush()
    california = Location(
        name="California", code2="CA", subregion1="California", parent_id=usa.id,
    )
    texas = Location(name="Texas", code2="TX", subregion1="Texas", parent_id=usa.id)
    test_db.add_all([california, texas])
    await test_db.flush()
    los_angeles = Location(
        name="Los Angeles County", subregion1="California",
        subregion2="Los Angeles", parent_id=california.id,
    )
    criminal = Service(name="Criminal Check", category="criminal")
    education = Service(name="Education Check", category="verification")
    test_db.add_all([los_angeles, criminal, education])
    await test_db.commit()
    return Catalog(
        criminal=criminal, education=education,
        california=california, texas=texas, los_angeles=los_angeles,
    )


@pytest.fixture
def add_requirement(test_db):
    """Create a requirement, link it to a service, and optionally require it
    for one location."""

    async def _add(
        name: str,
        service: Service,
        location: Location | None = None,
        type: str = "field",
        field_data: dict | None = None,
        document_data: dict | None = None,
        is_required: bool = True,
        link_to_service: bool = True,
        disabled: bool = False,
    ) -> Requirement:
        if type == "field" and field_data is None:
            field_data = {"collectionTab": "subject"}
        requirement = Requirement(
            name=name, type=type, field_data=field_data,
            document_data=document_data, disabled=disabled,
        )
        test_db.add(requirement)
        await test_db.flush()
        if link_to_service:
            test_db.add(ServiceRequirement(
                service_id=service.id, requirement_id=requirement.id,
            ))
        if location is not None:
            test_db.add(LocationRequirementMapping(
                service_id=service.id, location_id=location.id,
                requirement_id=requirement.id, is_required=is_required,
            ))
        await test_db.commit()
        return requirement

    return _add


@pytest.fixture
def add_order(test_db):
    """Insert an order row directly, bypassing numbering and validation."""
    counter = {"n": 0}

    async def _add(
        status: str = "draft",
        customer_id: str = CUSTOMER_ID,
        order_number: str | None = None,
        created_at: datetime | None = None,
        notes: str | None = None,
        subject: dict | None = None,
    ) -> Order:
        counter["n"] += 1
        order = Order(
            order_number=order_number or f"TEST-{counter['n']:04d}-{uuid.uuid4().hex[:6]}",
            customer_id=customer_id,
            user_id=USER_ID,
            status_code=status,
            subject=subject or {},
            notes=notes,
            items=[],
            status_history=[],
            created_at=created_at or datetime.now(timezone.utc),
        )
        test_db.add(order)
        await test_db.commit()
        return order

    return _add
