"""Global search across providers and facilities."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import AuthContext, get_auth_context
from app.core.rls import apply_rls_claims
from app.dependencies import get_db
from app.derived_views.directory import global_search_view

router = APIRouter(prefix="/search", tags=["search"])

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
MAX_LIMIT_PER_TYPE = 20


@router.get("")
async def search(
    q: str,
    limit_per_type: int = 8,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
):
    query = q.strip()
    if not MIN_QUERY_LENGTH <= len(query) <= MAX_QUERY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Query must be {MIN_QUERY_LENGTH}-{MAX_QUERY_LENGTH} characters",
        )
    if not 1 <= limit_per_type <= MAX_LIMIT_PER_TYPE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"limit_per_type must be between 1 and {MAX_LIMIT_PER_TYPE}",
        )

    await apply_rls_claims(db, ctx.user)
    return await global_search_view(db, query, limit_per_type=limit_per_type)
