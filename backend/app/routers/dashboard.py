"""Dashboard routes: master/detail credentialing view and summary cards."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthContext, get_auth_context
from app.core.rls import apply_rls_claims
from app.dependencies import get_db
from app.derived_views.credentialing import ALL, DashboardParams, SortKey, ViewKey
from app.derived_views.dashboard import dashboard_summary_view, dashboard_view

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _parse_view(value: str) -> ViewKey:
    try:
        return ViewKey(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid view: {value}",
        )


def _parse_sort(value: str) -> SortKey:
    try:
        return SortKey(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid sort: {value}",
        )


@router.get("")
async def dashboard(
    view: str = ViewKey.provider_facility.value,
    group_search: str = "",
    detail_search: str = "",
    priority: str = ALL,
    status_filter: str = Query(ALL, alias="status"),
    sort: str = SortKey.updated_desc.value,
    selected: str | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    params = DashboardParams(
        view=_parse_view(view),
        group_search=group_search,
        detail_search=detail_search,
        priority_filter=priority or ALL,
        status_filter=status_filter or ALL,
        sort=_parse_sort(sort),
        selected_key=selected or None,
    )
    await apply_rls_claims(db, ctx.user)
    return await dashboard_view(db, params)


@router.get("/summary")
async def summary(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    await apply_rls_claims(db, ctx.user)
    return await dashboard_summary_view(db)
