"""Dashboard view: loads credentialing rows and serializes the derived state.

Every nullable value is rendered through the presentation helpers, so the
client never sees a raw None for a displayed cell.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.derived_views.credentialing import (
    DashboardParams,
    DashboardState,
    FacilityPreliveRow,
    GroupedRows,
    ProviderFacilityRow,
    ProviderLicenseRow,
    Row,
    ViewKey,
    derive_dashboard,
)
from app.derived_views.presentation import (
    badge,
    format_date,
    format_flag,
    format_list,
    format_text,
    license_expiration_tone,
    priority_tone,
    status_tone,
)
from app.services import record_service

VIEW_LABELS: dict[ViewKey, str] = {
    ViewKey.provider_facility: "Provider-Level Facility Credentials",
    ViewKey.facility_provider: "Facility-Level Provider Credentials",
    ViewKey.facility_prelive: "Facility Pre-Live Details",
    ViewKey.provider_license: "Provider-Level State License Overview",
}

PROVIDER_VIEWS = (ViewKey.provider_facility, ViewKey.provider_license)


def _provider_facility_row(row: ProviderFacilityRow) -> dict:
    return {
        "id": row.id,
        "provider_name": row.provider_name,
        "facility_name": row.facility_name,
        "facility_state": format_text(row.facility_state),
        "priority": badge(row.priority, priority_tone(row.priority)),
        "privileges": format_text(row.privileges),
        "status": badge(row.decision, status_tone(row.decision)),
        "facility_type": format_text(row.facility_type),
        "application_required": format_flag(row.application_required),
        "updated": format_date(row.updated_at),
    }


def _facility_prelive_row(row: FacilityPreliveRow) -> dict:
    return {
        "id": row.id,
        "facility_name": row.facility_name,
        "priority": badge(row.priority, priority_tone(row.priority)),
        "go_live_date": format_date(row.go_live_date),
        "credentialing_due_date": format_date(row.credentialing_due_date),
        "board_meeting_date": format_date(row.board_meeting_date),
        "temps_possible": format_flag(row.temps_possible),
        "payor_enrollment_required": format_flag(row.payor_enrollment_required),
        "roles_needed": format_list(row.roles_needed),
        "updated": format_date(row.updated_at),
    }


def _provider_license_row(row: ProviderLicenseRow) -> dict:
    return {
        "id": row.id,
        "provider_name": row.provider_name,
        "state": format_text(row.state),
        "priority": badge(row.priority, priority_tone(row.priority)),
        "path": format_text(row.path),
        "status": badge(row.status, status_tone(row.status)),
        "initial_or_renewal": format_text(row.initial_or_renewal),
        "requested": format_date(row.starts_at),
        "final_date": {
            "label": format_date(row.expires_at),
            "tone": license_expiration_tone(row.expires_at).value,
        },
        "updated": format_date(row.updated_at),
    }


_ROW_SERIALIZERS = {
    ProviderFacilityRow: _provider_facility_row,
    FacilityPreliveRow: _facility_prelive_row,
    ProviderLicenseRow: _provider_license_row,
}


def serialize_row(row: Row) -> dict:
    return _ROW_SERIALIZERS[type(row)](row)


def serialize_group(group: GroupedRows) -> dict:
    return {
        "key": group.key,
        "label": group.label,
        "subtitle": group.subtitle,
        "count": len(group.rows),
    }


def serialize_state(state: DashboardState, params: DashboardParams) -> dict:
    selected = state.selected_group
    if selected is None:
        empty_message = (
            "No records match the current filters."
            if not state.active_groups
            else "Select an item to view details."
        )
    elif not state.detail_rows:
        empty_message = "No rows match that detail search."
    else:
        empty_message = None

    return {
        "view": params.view.value,
        "views": [{"key": view.value, "label": label} for view, label in VIEW_LABELS.items()],
        "group_search_placeholder": (
            "Search providers" if params.view in PROVIDER_VIEWS else "Search facilities"
        ),
        "filters": {
            "priority": params.priority_filter,
            "status": params.status_filter,
            "sort": params.sort.value,
            "priorities": state.priorities,
            "statuses": state.statuses,
        },
        "group_counts": {view.value: len(groups) for view, groups in state.groups.items()},
        "groups": [serialize_group(g) for g in state.active_groups],
        "selected_key": state.selected_key,
        "selection_changed": state.selection_changed,
        "selected_group": serialize_group(selected) if selected else None,
        "detail_rows": [serialize_row(row) for row in state.detail_rows],
        "empty_message": empty_message,
    }


async def dashboard_view(db: AsyncSession, params: DashboardParams) -> dict:
    """Derived dashboard state for the given parameters, ready for the UI."""
    rows = await record_service.fetch_dashboard_rows(db)
    return serialize_state(derive_dashboard(rows, params), params)


async def dashboard_summary_view(db: AsyncSession) -> dict:
    counts = await record_service.count_records(db)
    return {
        "total_providers": counts["providers"],
        "active_facilities": counts["facilities"],
        "pending_workflows": counts["pending_workflows"],
    }
