"""Directory views: provider and facility listings plus global search.

Searches only apply once the trimmed query reaches MIN_SEARCH_LENGTH.
"""

import re
from collections import Counter, defaultdict
from datetime import date
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from app.derived_views.presentation import (
    facility_display_name,
    format_date,
    format_provider_name,
    format_text,
    license_expiration_tone,
    sanitize_phone_for_href,
)
from app.models.facility import Facility
from app.models.provider import Provider
from app.services import record_service

MIN_SEARCH_LENGTH = 2
UNSPECIFIED_STATUS = "Unspecified"


def effective_search(raw: str | None) -> str | None:
    search = (raw or "").strip()
    return search if len(search) >= MIN_SEARCH_LENGTH else None


def collapse_whitespace(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip())


def _provider_card(provider: Provider, licenses: list, credentials: list, today: date) -> dict:
    phone_href = sanitize_phone_for_href(provider.phone) if provider.phone else ""
    return {
        "id": str(provider.id),
        "name": format_provider_name(
            provider.first_name, provider.middle_name, provider.last_name, provider.degree
        ),
        "email": provider.email,
        "phone": provider.phone,
        "phone_href": f"tel:{phone_href}" if phone_href else None,
        "created": format_date(provider.created_at),
        "updated": format_date(provider.updated_at),
        "notes": format_text(provider.notes),
        "licenses": [
            {
                "id": str(lic.id),
                "state": format_text(lic.state),
                "status": format_text(lic.status),
                "issued": format_date(lic.issued_at),
                "expires": format_date(lic.expires_at),
                "expiration_tone": license_expiration_tone(lic.expires_at, today).value,
            }
            for lic in licenses
        ],
        "facility_credentials": [
            {
                "id": str(cred.id),
                "priority": format_text(cred.priority),
                "status": format_text(cred.status),
                "decision": format_text(cred.decision),
                "requested": format_date(cred.requested_at),
            }
            for cred in credentials
        ],
    }


def status_breakdown(credentials: list) -> list[dict]:
    """Credential counts per status, most common first."""
    counts = Counter((cred.status or "").strip() or UNSPECIFIED_STATUS for cred in credentials)
    return [{"status": status, "count": count} for status, count in counts.most_common()]


async def provider_directory_view(
    db: AsyncSession,
    *,
    search: str | None = None,
    today: date | None = None,
) -> dict:
    """Provider records with their licenses and facility credentials."""
    query = effective_search(search)
    providers = await record_service.search_providers(db, query)
    licenses, credentials = await record_service.fetch_provider_details(
        db, [p.id for p in providers]
    )

    licenses_by_provider = defaultdict(list)
    for lic in licenses:
        licenses_by_provider[lic.provider_id].append(lic)
    credentials_by_provider = defaultdict(list)
    for cred in credentials:
        credentials_by_provider[cred.provider_id].append(cred)

    today = today or date.today()
    return {
        "search": query,
        "counts": {
            "providers": len(providers),
            "licenses": len(licenses),
            "facility_credentials": len(credentials),
        },
        "status_breakdown": status_breakdown(credentials),
        "providers": [
            _provider_card(
                p, licenses_by_provider[p.id], credentials_by_provider[p.id], today
            )
            for p in providers
        ],
    }


def _facility_card(facility: Facility) -> dict:
    return {
        "id": str(facility.id),
        "name": facility_display_name(facility.name),
        "state": format_text(facility.state),
        "email": format_text(facility.email),
        "proxy": format_text(facility.proxy),
        "address": format_text(facility.address),
    }


async def facility_directory_view(db: AsyncSession, *, search: str | None = None) -> dict:
    query = effective_search(search)
    facilities = await record_service.search_facilities(db, query)
    return {
        "search": query,
        "facilities": [_facility_card(f) for f in facilities],
    }


async def global_search_view(db: AsyncSession, query: str, *, limit_per_type: int = 8) -> dict:
    """Quick-search across providers and facilities, linking into the directories."""
    query = collapse_whitespace(query)
    providers = await record_service.search_providers(db, query, limit=limit_per_type)
    facilities = await record_service.search_facilities(db, query, limit=limit_per_type)
    encoded = quote(query, safe="")

    return {
        "query": query,
        "providers": [
            {
                "id": str(p.id),
                "name": format_provider_name(p.first_name, p.middle_name, p.last_name, p.degree),
                "subtitle": p.email,
                "href": f"/providers?search={encoded}",
            }
            for p in providers
        ],
        "facilities": [
            {
                "id": str(f.id),
                "name": facility_display_name(f.name),
                "subtitle": " • ".join(part for part in (f.state, f.email) if part) or None,
                "href": f"/facilities?search={encoded}",
            }
            for f in facilities
        ],
    }
