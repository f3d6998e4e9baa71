import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.derived_views.credentialing import (
    DashboardParams,
    DashboardRows,
    GroupKeyError,
    derive_dashboard,
)
from app.models.credential import ProviderFacilityCredential, StateLicense
from app.models.facility import Facility, FacilityPrelive
from app.services import record_service


@pytest.mark.asyncio
async def test_provider_facility_rows_newest_first(db_session: AsyncSession, seeded):
    rows = await record_service.fetch_provider_facility_rows(db_session)

    assert [(r.provider_name, r.facility_name) for r in rows] == [
        ("Alice Adams", "Grace"),
        ("Bob Baker", "Mercy"),
        ("Alice Adams", "Mercy"),
    ]
    assert rows[1].provider_degree == "DO"
    assert rows[1].facility_state == "TX"
    assert rows[1].provider_id == str(seeded.bob.id)


@pytest.mark.asyncio
async def test_provider_facility_rows_search(db_session: AsyncSession, seeded):
    rows = await record_service.fetch_provider_facility_rows(db_session, search="grace")

    assert [r.id for r in rows] == [str(seeded.alice_grace.id)]


@pytest.mark.asyncio
async def test_prelive_rows_carry_roles_as_tuple(db_session: AsyncSession, seeded):
    rows = await record_service.fetch_facility_prelive_rows(db_session)

    assert len(rows) == 1
    assert rows[0].facility_name == "Mercy"
    assert rows[0].roles_needed == ("CRNA", "MD")
    assert rows[0].go_live_date is None


@pytest.mark.asyncio
async def test_license_rows_newest_first(db_session: AsyncSession, seeded):
    rows = await record_service.fetch_provider_license_rows(db_session)

    assert [r.state for r in rows] == ["OK", "TX"]
    assert rows[0].provider_name == "Bob Baker"


@pytest.mark.asyncio
async def test_fetch_dashboard_rows(db_session: AsyncSession, seeded):
    rows = await record_service.fetch_dashboard_rows(db_session)

    assert isinstance(rows, DashboardRows)
    assert len(rows.provider_facility) == 3
    assert len(rows.facility_prelive) == 1
    assert len(rows.provider_license) == 2


@pytest.mark.asyncio
async def test_search_providers_matches_full_name(db_session: AsyncSession, seeded):
    by_full_name = await record_service.search_providers(db_session, "alice adams")
    by_email = await record_service.search_providers(db_session, "CLINIC.TEST")
    everyone = await record_service.search_providers(db_session)

    assert [p.id for p in by_full_name] == [seeded.alice.id]
    assert [p.id for p in by_email] == [seeded.alice.id]
    assert [p.id for p in everyone] == [seeded.alice.id, seeded.bob.id]


@pytest.mark.asyncio
async def test_search_facilities_by_state(db_session: AsyncSession, seeded):
    facilities = await record_service.search_facilities(db_session, "ok")

    assert [f.name for f in facilities] == ["Grace"]


@pytest.mark.asyncio
async def test_list_queries_are_capped(db_session: AsyncSession):
    db_session.add_all([Facility(name=f"Clinic {i:03d}") for i in range(105)])
    await db_session.commit()

    capped = await record_service.search_facilities(db_session)
    explicit = await record_service.search_facilities(db_session, limit=500)
    small = await record_service.search_facilities(db_session, limit=5)

    assert len(capped) == 100
    assert len(explicit) == 100
    assert len(small) == 5


@pytest.mark.asyncio
async def test_fetch_provider_details(db_session: AsyncSession, seeded):
    licenses, credentials = await record_service.fetch_provider_details(
        db_session, [seeded.alice.id]
    )

    assert [lic.state for lic in licenses] == ["TX"]
    assert {c.id for c in credentials} == {seeded.alice_mercy.id, seeded.alice_grace.id}
    assert await record_service.fetch_provider_details(db_session, []) == ([], [])


@pytest.mark.asyncio
async def test_count_records(db_session: AsyncSession, seeded):
    counts = await record_service.count_records(db_session)

    assert counts == {"providers": 2, "facilities": 2, "pending_workflows": 1}


@pytest.mark.asyncio
async def test_rows_without_linked_entity_are_rejected_by_grouping(db_session: AsyncSession):
    """Orphan credentials keep an empty name, so they never share a placeholder group."""
    mercy = Facility(name="Mercy", state="TX")
    db_session.add(mercy)
    await db_session.flush()
    db_session.add_all(
        [
            ProviderFacilityCredential(provider_id=None, facility_id=mercy.id, priority="High"),
            ProviderFacilityCredential(provider_id=None, facility_id=mercy.id, priority="Low"),
            StateLicense(provider_id=None, state="TX"),
        ]
    )
    await db_session.commit()

    rows = await record_service.fetch_dashboard_rows(db_session)

    assert [r.provider_name for r in rows.provider_facility] == ["", ""]
    assert [r.facility_name for r in rows.provider_facility] == ["Mercy", "Mercy"]
    assert rows.provider_license[0].provider_name == ""
    with pytest.raises(GroupKeyError):
        derive_dashboard(rows, DashboardParams())


@pytest.mark.asyncio
async def test_row_without_facility_has_empty_facility_name(db_session: AsyncSession):
    db_session.add(FacilityPrelive(facility_id=None, priority="Top"))
    await db_session.commit()

    [row] = await record_service.fetch_facility_prelive_rows(db_session)

    assert row.facility_id is None
    assert row.facility_name == ""
