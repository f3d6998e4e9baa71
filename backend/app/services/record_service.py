"""Record service: read queries over the credentialing tables.

Every list query takes an optional case-insensitive substring filter over a
fixed field list, is capped at `settings.result_limit` rows and defaults to
newest-updated first. Dashboard queries return the frozen row types consumed
by the credentialing view-model.
"""

import uuid

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.derived_views.credentialing import (
    DashboardRows,
    FacilityPreliveRow,
    ProviderFacilityRow,
    ProviderLicenseRow,
)
from app.derived_views.presentation import facility_display_name, provider_full_name
from app.models.credential import ProviderFacilityCredential, StateLicense
from app.models.facility import Facility, FacilityPrelive
from app.models.provider import Provider

PENDING_DECISION_KEYWORDS = ("pending", "awaiting")


def _matches_any(search: str | None, columns: list) -> ColumnElement[bool] | None:
    query = (search or "").strip()
    if not query:
        return None
    pattern = f"%{query}%"
    return or_(*(column.ilike(pattern) for column in columns))


def _limit(limit: int | None) -> int:
    return min(limit or settings.result_limit, settings.result_limit)


def provider_full_name_expr():
    """SQL for 'first middle last' with missing parts skipped."""
    return func.trim(
        func.coalesce(Provider.first_name, "")
        + " "
        + func.coalesce(Provider.middle_name + " ", "")
        + func.coalesce(Provider.last_name, "")
    )


def _provider_search_columns() -> list:
    return [
        Provider.first_name,
        Provider.middle_name,
        Provider.last_name,
        Provider.email,
        Provider.notes,
        provider_full_name_expr(),
    ]


def _facility_search_columns() -> list:
    return [
        Facility.name,
        Facility.state,
        Facility.email,
        Facility.address,
        Facility.proxy,
    ]


def _provider_name(provider: Provider | None) -> str:
    # No joined provider: leave the name empty so grouping rejects the row.
    if provider is None:
        return ""
    return provider_full_name(provider.first_name, provider.middle_name, provider.last_name)


def _id(value: uuid.UUID | None) -> str | None:
    return str(value) if value is not None else None


# ---------------------------------------------------------------------------
# Dashboard rows
# ---------------------------------------------------------------------------


async def fetch_provider_facility_rows(
    db: AsyncSession,
    *,
    search: str | None = None,
    limit: int | None = None,
) -> list[ProviderFacilityRow]:
    pfc = ProviderFacilityCredential
    stmt = (
        select(pfc, Provider, Facility)
        .outerjoin(Provider, pfc.provider_id == Provider.id)
        .outerjoin(Facility, pfc.facility_id == Facility.id)
        .order_by(pfc.updated_at.desc(), pfc.created_at.desc())
        .limit(_limit(limit))
    )
    predicate = _matches_any(
        search,
        _provider_search_columns()
        + [Facility.name, Facility.state, pfc.priority, pfc.privileges, pfc.decision, pfc.facility_type],
    )
    if predicate is not None:
        stmt = stmt.where(predicate)

    result = await db.execute(stmt)
    return [
        ProviderFacilityRow(
            id=str(credential.id),
            provider_id=_id(credential.provider_id),
            provider_name=_provider_name(provider),
            provider_degree=provider.degree if provider else None,
            facility_id=_id(credential.facility_id),
            facility_name=facility_display_name(facility.name) if facility else "",
            facility_state=facility.state if facility else None,
            priority=credential.priority,
            privileges=credential.privileges,
            decision=credential.decision,
            facility_type=credential.facility_type,
            application_required=credential.application_required,
            updated_at=credential.updated_at,
        )
        for credential, provider, facility in result.all()
    ]


async def fetch_facility_prelive_rows(
    db: AsyncSession,
    *,
    search: str | None = None,
    limit: int | None = None,
) -> list[FacilityPreliveRow]:
    stmt = (
        select(FacilityPrelive, Facility)
        .outerjoin(Facility, FacilityPrelive.facility_id == Facility.id)
        .order_by(FacilityPrelive.updated_at.desc(), FacilityPrelive.created_at.desc())
        .limit(_limit(limit))
    )
    predicate = _matches_any(
        search,
        [Facility.name, Facility.state, FacilityPrelive.priority],
    )
    if predicate is not None:
        stmt = stmt.where(predicate)

    result = await db.execute(stmt)
    return [
        FacilityPreliveRow(
            id=str(prelive.id),
            facility_id=_id(prelive.facility_id),
            facility_name=facility_display_name(facility.name) if facility else "",
            facility_state=facility.state if facility else None,
            priority=prelive.priority,
            go_live_date=prelive.go_live_date,
            credentialing_due_date=prelive.credentialing_due_date,
            board_meeting_date=prelive.board_meeting_date,
            temps_possible=prelive.temps_possible,
            payor_enrollment_required=prelive.payor_enrollment_required,
            roles_needed=tuple(prelive.roles_needed or ()),
            updated_at=prelive.updated_at,
        )
        for prelive, facility in result.all()
    ]


async def fetch_provider_license_rows(
    db: AsyncSession,
    *,
    search: str | None = None,
    limit: int | None = None,
) -> list[ProviderLicenseRow]:
    stmt = (
        select(StateLicense, Provider)
        .outerjoin(Provider, StateLicense.provider_id == Provider.id)
        .order_by(StateLicense.updated_at.desc(), StateLicense.created_at.desc())
        .limit(_limit(limit))
    )
    predicate = _matches_any(
        search,
        _provider_search_columns()
        + [StateLicense.state, StateLicense.priority, StateLicense.status, StateLicense.path],
    )
    if predicate is not None:
        stmt = stmt.where(predicate)

    result = await db.execute(stmt)
    return [
        ProviderLicenseRow(
            id=str(license_.id),
            provider_id=_id(license_.provider_id),
            provider_name=_provider_name(provider),
            provider_degree=provider.degree if provider else None,
            state=license_.state,
            priority=license_.priority,
            status=license_.status,
            path=license_.path,
            initial_or_renewal=license_.initial_or_renewal,
            starts_at=license_.starts_at,
            expires_at=license_.expires_at,
            updated_at=license_.updated_at,
        )
        for license_, provider in result.all()
    ]


async def fetch_dashboard_rows(db: AsyncSession) -> DashboardRows:
    """Load all three dashboard collections, each independently capped."""
    return DashboardRows(
        provider_facility=tuple(await fetch_provider_facility_rows(db)),
        facility_prelive=tuple(await fetch_facility_prelive_rows(db)),
        provider_license=tuple(await fetch_provider_license_rows(db)),
    )


# ---------------------------------------------------------------------------
# Directories and global search
# ---------------------------------------------------------------------------


async def search_providers(
    db: AsyncSession,
    search: str | None = None,
    *,
    limit: int | None = None,
) -> list[Provider]:
    stmt = (
        select(Provider)
        .order_by(Provider.updated_at.desc(), Provider.created_at.desc())
        .limit(_limit(limit))
    )
    predicate = _matches_any(search, _provider_search_columns())
    if predicate is not None:
        stmt = stmt.where(predicate)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def search_facilities(
    db: AsyncSession,
    search: str | None = None,
    *,
    limit: int | None = None,
) -> list[Facility]:
    stmt = (
        select(Facility)
        .order_by(Facility.updated_at.desc(), Facility.created_at.desc())
        .limit(_limit(limit))
    )
    predicate = _matches_any(search, _facility_search_columns())
    if predicate is not None:
        stmt = stmt.where(predicate)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def fetch_provider_details(
    db: AsyncSession,
    provider_ids: list[uuid.UUID],
) -> tuple[list[StateLicense], list[ProviderFacilityCredential]]:
    """Licenses and facility credentials linked to the given providers."""
    if not provider_ids:
        return [], []

    licenses = await db.execute(
        select(StateLicense)
        .where(StateLicense.provider_id.in_(provider_ids))
        .order_by(StateLicense.expires_at.desc(), StateLicense.created_at.desc())
    )
    credentials = await db.execute(
        select(ProviderFacilityCredential)
        .where(ProviderFacilityCredential.provider_id.in_(provider_ids))
        .order_by(ProviderFacilityCredential.updated_at.desc())
    )
    return list(licenses.scalars().all()), list(credentials.scalars().all())


async def count_records(db: AsyncSession) -> dict[str, int]:
    """Headline counts for the dashboard summary cards."""
    providers = await db.execute(select(func.count()).select_from(Provider))
    facilities = await db.execute(select(func.count()).select_from(Facility))

    decision = ProviderFacilityCredential.decision
    pending = await db.execute(
        select(func.count())
        .select_from(ProviderFacilityCredential)
        .where(
            or_(
                decision.is_(None),
                *(decision.ilike(f"%{keyword}%") for keyword in PENDING_DECISION_KEYWORDS),
            )
        )
    )
    return {
        "providers": providers.scalar_one(),
        "facilities": facilities.scalar_one(),
        "pending_workflows": pending.scalar_one(),
    }
