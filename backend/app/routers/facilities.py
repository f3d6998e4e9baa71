"""Facility directory route."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthContext, get_auth_context
from app.core.rls import apply_rls_claims
from app.dependencies import get_db
from app.derived_views.directory import facility_directory_view

router = APIRouter(prefix="/facilities", tags=["facilities"])


@router.get("")
async def list_facilities(
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    await apply_rls_claims(db, ctx.user)
    return await facility_directory_view(db, search=search)
