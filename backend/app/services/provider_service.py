"""Provider service: create provider records. Creations are audit-logged."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.provider import Provider
from app.services import audit_service

logger = logging.getLogger("credmapping.providers")


async def create_provider(
    db: AsyncSession,
    *,
    created_by: uuid.UUID,
    first_name: str,
    last_name: str,
    middle_name: str | None = None,
    degree: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    notes: str | None = None,
    ip_address: str | None = None,
) -> Provider:
    """Insert a provider. Names must already be trimmed and non-empty."""
    if not first_name or not last_name:
        raise ValueError("First and last name are required.")

    provider = Provider(
        first_name=first_name,
        middle_name=middle_name,
        last_name=last_name,
        degree=degree,
        email=email,
        phone=phone,
        notes=notes,
    )
    db.add(provider)
    await db.flush()

    await audit_service.log_event(
        db,
        user_id=created_by,
        event_type="provider.created",
        entity_type="Provider",
        entity_id=provider.id,
        action="create",
        detail={"first_name": first_name, "last_name": last_name, "degree": degree},
        ip_address=ip_address,
    )
    logger.info("provider created id=%s by=%s", provider.id, created_by)

    return provider
