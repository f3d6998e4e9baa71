"""Provider routes: directory listing and admin-only creation."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthContext, get_auth_context, require_admin
from app.core.rls import apply_rls_claims
from app.dependencies import get_db
from app.derived_views.directory import provider_directory_view
from app.schemas.provider import ProviderCreate, ProviderRead
from app.services import provider_service

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("")
async def list_providers(
    search: str | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    await apply_rls_claims(db, ctx.user)
    return await provider_directory_view(db, search=search)


@router.post("", response_model=ProviderRead, status_code=201)
async def create_provider(
    body: ProviderCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(require_admin),
):
    ip = request.client.host if request.client else None
    await apply_rls_claims(db, ctx.user)
    try:
        provider = await provider_service.create_provider(
            db,
            created_by=ctx.user.id,
            first_name=body.first_name,
            middle_name=body.middle_name,
            last_name=body.last_name,
            degree=body.degree,
            email=body.email,
            phone=body.phone,
            notes=body.notes,
            ip_address=ip,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return provider
