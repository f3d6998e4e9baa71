"""Shared test fixtures: in-memory SQLite DB, async session, test client, seed data."""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.auth import start_session
from app.dependencies import get_db
from app.main import app
from app.models.base import Base
from app.models.credential import ProviderFacilityCredential, StateLicense
from app.models.facility import Facility, FacilityPrelive
from app.models.provider import Provider

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)


# Enable foreign key enforcement in SQLite (off by default).
@event.listens_for(test_engine.sync_engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """Yield a test DB session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncClient:
    """Yield an httpx AsyncClient wired to the test DB."""

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def _session_headers(db: AsyncSession, email: str) -> dict:
    _, token = await start_session(db, email=email)
    await db.commit()
    return {"X-Session-Token": token}


@pytest_asyncio.fixture
async def admin_headers(db_session: AsyncSession) -> dict:
    """Session for an admin-domain staff member."""
    return await _session_headers(db_session, "admin@vestasolutions.com")


@pytest_asyncio.fixture
async def staff_headers(db_session: AsyncSession) -> dict:
    """Session for a non-admin staff member on the second allowed domain."""
    return await _session_headers(db_session, "staff@vestatelemed.com")


def _at(day: str) -> datetime:
    return datetime.fromisoformat(day).replace(tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def seeded(db_session: AsyncSession) -> SimpleNamespace:
    """Two providers, two facilities and their credentialing records.

    Provider-facility credentials (updated):
      Alice @ Mercy  High / Approved  2024-01-01
      Alice @ Grace  Low  / Pending   2024-03-01
      Bob   @ Mercy  High / Approved  2024-02-01
    """
    alice = Provider(
        first_name="Alice",
        last_name="Adams",
        degree="MD",
        email="alice@clinic.test",
        phone="(555) 123-4567",
        updated_at=_at("2024-03-01"),
    )
    bob = Provider(first_name="Bob", last_name="Baker", degree="DO", updated_at=_at("2024-02-01"))
    mercy = Facility(name="Mercy", state="TX", email="cred@mercy.test", updated_at=_at("2024-01-10"))
    grace = Facility(name="Grace", state="OK", updated_at=_at("2024-01-05"))
    db_session.add_all([alice, bob, mercy, grace])
    await db_session.flush()

    alice_mercy = ProviderFacilityCredential(
        provider_id=alice.id,
        facility_id=mercy.id,
        priority="High",
        privileges="Full",
        status="In Progress",
        decision="Approved",
        facility_type="Hospital",
        application_required=True,
        updated_at=_at("2024-01-01"),
    )
    alice_grace = ProviderFacilityCredential(
        provider_id=alice.id,
        facility_id=grace.id,
        priority="Low",
        status="In Progress",
        decision="Pending",
        facility_type="ASC",
        updated_at=_at("2024-03-01"),
    )
    bob_mercy = ProviderFacilityCredential(
        provider_id=bob.id,
        facility_id=mercy.id,
        priority="High",
        decision="Approved",
        facility_type="Hospital",
        application_required=False,
        updated_at=_at("2024-02-01"),
    )
    mercy_prelive = FacilityPrelive(
        facility_id=mercy.id,
        priority="Top",
        go_live_date=None,
        credentialing_due_date=date(2024, 5, 1),
        temps_possible=True,
        roles_needed=["CRNA", "MD"],
        updated_at=_at("2024-02-15"),
    )
    alice_tx = StateLicense(
        provider_id=alice.id,
        state="TX",
        priority="Medium",
        status="Approved",
        path="Standard",
        initial_or_renewal="Initial",
        starts_at=date(2019, 1, 1),
        expires_at=date(2020, 1, 1),
        updated_at=_at("2024-01-20"),
    )
    bob_ok = StateLicense(
        provider_id=bob.id,
        state="OK",
        priority="Stat",
        status="Pending",
        path="Compact",
        initial_or_renewal="Renewal",
        expires_at=date(2099, 1, 1),
        updated_at=_at("2024-02-20"),
    )
    db_session.add_all([alice_mercy, alice_grace, bob_mercy, mercy_prelive, alice_tx, bob_ok])
    await db_session.commit()

    return SimpleNamespace(
        alice=alice,
        bob=bob,
        mercy=mercy,
        grace=grace,
        alice_mercy=alice_mercy,
        alice_grace=alice_grace,
        bob_mercy=bob_mercy,
        mercy_prelive=mercy_prelive,
        alice_tx=alice_tx,
        bob_ok=bob_ok,
    )
