"""Row-level security: expose the signed-in identity to PostgreSQL policies."""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


def jwt_claims(user: User) -> dict:
    return {
        "sub": str(user.id),
        "email": (user.email or "").lower(),
        "role": "authenticated",
    }


async def apply_rls_claims(db: AsyncSession, user: User) -> None:
    """Set request.jwt.claims for the current transaction. No-op off PostgreSQL."""
    if db.get_bind().dialect.name != "postgresql":
        return
    await db.execute(
        text("select set_config('request.jwt.claims', :claims, true)"),
        {"claims": json.dumps(jwt_claims(user))},
    )
